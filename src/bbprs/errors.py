from __future__ import annotations

from typing import Any


class BbPrsError(Exception):
    """Base class for all bbprs errors."""


class ConfigError(BbPrsError):
    pass


class TransportError(BbPrsError):
    """Raised by the HTTP transport; propagated unchanged by the decoders."""


class AuthError(TransportError):
    pass


class NotFoundError(TransportError):
    pass


class NetworkError(TransportError):
    pass


class ApiError(TransportError):
    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: Any = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RemoteAPIError(BbPrsError):
    """The server returned an error envelope in place of an entity."""

    def __init__(self, message: str, payload: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.payload = payload or {}

    @classmethod
    def from_envelope(cls, envelope: dict[str, Any]) -> RemoteAPIError:
        error = envelope.get("error")
        if not isinstance(error, dict):
            return cls("Unknown error returned by the API", envelope)
        message = error.get("message")
        if not isinstance(message, str) or not message:
            message = "Unknown error returned by the API"
        detail = error.get("detail")
        if isinstance(detail, str) and detail:
            message = f"{message}: {detail}"
        return cls(message, error)


class InvalidResponseFormatError(BbPrsError):
    pass


class MalformedTimestampError(BbPrsError):
    def __init__(self, field: str, value: str) -> None:
        super().__init__(f"Not a valid format for {field!r}: {value!r}")
        self.field = field
        self.value = value
