from __future__ import annotations

import logging
import time
from typing import Any

import httpx

from .errors import ApiError, AuthError, NetworkError, NotFoundError

DEFAULT_BASE_URL = "https://api.bitbucket.org/2.0"
DEFAULT_PAGELEN = 10
DEFAULT_MAX_DEPTH = 1

_RETRY_DELAYS = (1, 5, 15)

logger = logging.getLogger(__name__)


class BitbucketClient:
    """HTTP transport for the Bitbucket Cloud REST API.

    Request bodies are passed in already serialized; responses come back as
    decoded JSON, raw text, or None for an empty body.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        username: str | None = None,
        password: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        pagelen: int = DEFAULT_PAGELEN,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.pagelen = pagelen
        self.max_depth = max_depth

        headers = {"Accept": "application/json"}
        auth: httpx.BasicAuth | None = None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        elif username and password:
            auth = httpx.BasicAuth(username, password)

        self._client = httpx.Client(headers=headers, auth=auth, timeout=httpx.Timeout(30.0))

    def __enter__(self) -> BitbucketClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def execute(self, method: str, url: str, body: str | None = None) -> Any:
        response = self._send(method, url, body)
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError:
            return response.text

    def execute_raw(self, method: str, url: str, body: str | None = None) -> str:
        return self._send(method, url, body).text

    def execute_paginated(
        self,
        method: str,
        url: str,
        body: str | None = None,
        page: int | None = None,
    ) -> Any:
        """Fetch a page envelope, following ``next`` links up to max_depth pages.

        With an explicit ``page`` only that page is requested. Values of every
        followed page are concatenated into the first envelope.
        """
        params: dict[str, Any] = {"pagelen": self.pagelen}
        if page is not None:
            params["page"] = page
        first_url = str(httpx.URL(url).copy_merge_params(params))

        result = self.execute(method, first_url, body)
        if page is not None or not isinstance(result, dict):
            return result

        values = result.get("values")
        next_url = result.get("next")
        depth = 1
        while isinstance(values, list) and isinstance(next_url, str) and next_url and depth < self.max_depth:
            logger.debug("Following next page %s", next_url)
            following = self.execute(method, next_url, body)
            depth += 1
            if not isinstance(following, dict):
                break
            more = following.get("values")
            if isinstance(more, list):
                values.extend(more)
            next_url = following.get("next")

        if next_url is None:
            result.pop("next", None)
        else:
            result["next"] = next_url
        return result

    def _send(self, method: str, url: str, body: str | None) -> httpx.Response:
        headers = {"Content-Type": "application/json"} if body else None

        last_exc: Exception | None = None
        for attempt, delay in enumerate((*_RETRY_DELAYS, None)):
            logger.debug("%s %s (attempt %d)", method, url, attempt + 1)
            try:
                response = self._client.request(method, url, content=body or None, headers=headers)
            except httpx.TimeoutException as exc:
                last_exc = exc
                if delay is not None:
                    logger.warning("Request to %s timed out, retrying in %ds", url, delay)
                    time.sleep(delay)
                continue
            except httpx.RequestError as exc:
                raise NetworkError(str(exc)) from exc

            if response.status_code == 401:
                raise AuthError("Bitbucket credentials are invalid or lack the required permissions.")
            if response.status_code == 404:
                raise NotFoundError(f"Not found: {url}")
            if response.status_code >= 500:
                last_exc = ApiError(
                    f"Bitbucket API returned HTTP {response.status_code}",
                    status_code=response.status_code,
                )
                if delay is not None:
                    logger.warning("Bitbucket API returned HTTP %d, retrying in %ds", response.status_code, delay)
                    time.sleep(delay)
                continue
            if response.status_code >= 400:
                raise _api_error(response)

            return response

        raise NetworkError(f"Request failed after retries: {last_exc}") from last_exc


def _api_error(response: httpx.Response) -> ApiError:
    try:
        data = response.json()
    except ValueError:
        data = None

    message = response.text
    if isinstance(data, dict) and isinstance(data.get("error"), dict):
        message = data["error"].get("message") or message
    return ApiError(
        f"Bitbucket API returned HTTP {response.status_code}: {message}",
        status_code=response.status_code,
        response_body=data,
    )
