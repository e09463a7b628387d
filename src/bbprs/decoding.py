"""Decoding of Bitbucket JSON payloads into typed entities.

Field accessors never raise: a value of the wrong JSON type is treated as
absent and the entity keeps its default. The only field that can fail an
item is a timestamp string that does not parse.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Callable, Mapping
from datetime import datetime
from typing import Any, TypeVar

from .errors import InvalidResponseFormatError, MalformedTimestampError, RemoteAPIError
from .models import (
    CommentContent,
    InlineAnchor,
    Page,
    PullRequest,
    PullRequestComment,
    PullRequestEndpoint,
    Repository,
    RepositoryBranch,
    User,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

_TIMESTAMP_FORMATS = ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z")


# ---------------------------------------------------------------------------
# Field accessors
# ---------------------------------------------------------------------------


def get_int(data: Mapping[str, Any], key: str) -> int | None:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if value < 0:
        return None
    return int(value)


def get_str(data: Mapping[str, Any], key: str) -> str | None:
    value = data.get(key)
    return value if isinstance(value, str) else None


def get_bool(data: Mapping[str, Any], key: str) -> bool | None:
    value = data.get(key)
    return value if isinstance(value, bool) else None


def get_mapping(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = data.get(key)
    return value if isinstance(value, Mapping) else {}


def get_list(data: Mapping[str, Any], key: str) -> list[Any]:
    value = data.get(key)
    return value if isinstance(value, list) else []


def get_timestamp(data: Mapping[str, Any], key: str) -> datetime | None:
    """Return the parsed timestamp under *key*, or None when absent.

    Raises MalformedTimestampError for a non-empty string that matches none
    of the accepted formats.
    """
    value = data.get(key)
    if isinstance(value, datetime):
        return value
    if not isinstance(value, str) or not value:
        return None
    for fmt in _TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    raise MalformedTimestampError(key, value)


# ---------------------------------------------------------------------------
# Nested structures
# ---------------------------------------------------------------------------


def _decode_user(data: Mapping[str, Any]) -> User:
    return User(
        display_name=get_str(data, "display_name") or "",
        uuid=get_str(data, "uuid") or "",
        account_id=get_str(data, "account_id") or "",
        nickname=get_str(data, "nickname") or "",
        type=get_str(data, "type") or "",
    )


def _decode_endpoint(data: Mapping[str, Any]) -> PullRequestEndpoint:
    repository = get_mapping(data, "repository")
    return PullRequestEndpoint(
        branch=RepositoryBranch(name=get_str(get_mapping(data, "branch"), "name") or ""),
        repository=Repository(
            full_name=get_str(repository, "full_name") or "",
            name=get_str(repository, "name") or "",
            uuid=get_str(repository, "uuid") or "",
        ),
        commit=get_str(get_mapping(data, "commit"), "hash") or "",
    )


def _decode_content(data: Mapping[str, Any]) -> CommentContent:
    return CommentContent(
        raw=get_str(data, "raw") or "",
        markup=get_str(data, "markup") or "",
        html=get_str(data, "html") or "",
    )


def _decode_parent(data: Mapping[str, Any]) -> int | None:
    # Accepts both a bare id and the API's {"id": n} object.
    parent = get_int(data, "parent")
    if parent is None:
        parent = get_int(get_mapping(data, "parent"), "id")
    return parent


def _decode_inline(data: Mapping[str, Any]) -> InlineAnchor | None:
    inline = data.get("inline")
    if not isinstance(inline, Mapping):
        return None
    return InlineAnchor(
        path=get_str(inline, "path") or "",
        from_line=get_int(inline, "from"),
        to_line=get_int(inline, "to"),
    )


def _check_item(data: Any) -> Mapping[str, Any]:
    if not isinstance(data, Mapping):
        raise InvalidResponseFormatError(f"Not a valid format: expected an object, got {type(data).__name__}")
    if data.get("type") == "error":
        raise RemoteAPIError.from_envelope(dict(data))
    return data


# ---------------------------------------------------------------------------
# Item decoders
# ---------------------------------------------------------------------------


def decode_pull_request(data: Any) -> PullRequest:
    item = _check_item(data)
    return PullRequest(
        id=get_int(item, "id") or 0,
        title=get_str(item, "title") or "",
        description=get_str(item, "description") or "",
        author=_decode_user(get_mapping(item, "author")),
        draft=get_bool(item, "draft") or False,
        close_source_branch=get_bool(item, "close_source_branch") or False,
        state=get_str(item, "state") or "",
        source=_decode_endpoint(get_mapping(item, "source")),
        destination=_decode_endpoint(get_mapping(item, "destination")),
        merge_commit=get_str(get_mapping(item, "merge_commit"), "hash") or "",
        reviewers=[_decode_user(r) for r in get_list(item, "reviewers") if isinstance(r, Mapping)],
        comment_count=get_int(item, "comment_count") or 0,
        task_count=get_int(item, "task_count") or 0,
        url=get_str(get_mapping(get_mapping(item, "links"), "html"), "href") or "",
        created_on=get_timestamp(item, "created_on"),
        updated_on=get_timestamp(item, "updated_on"),
    )


def decode_comment(data: Any) -> PullRequestComment:
    item = _check_item(data)
    return PullRequestComment(
        id=get_int(item, "id") or 0,
        content=_decode_content(get_mapping(item, "content")),
        parent=_decode_parent(item),
        author=_decode_user(get_mapping(item, "user")),
        created_on=get_timestamp(item, "created_on"),
        updated_on=get_timestamp(item, "updated_on"),
        deleted=get_bool(item, "deleted") or False,
        pull_request_id=get_int(get_mapping(item, "pullrequest"), "id"),
        inline=_decode_inline(item),
    )


# ---------------------------------------------------------------------------
# List decoders
# ---------------------------------------------------------------------------


def decode_page(data: Any, decode_item: Callable[[Any], T]) -> Page[T]:
    """Decode a page envelope, skipping items that fail to decode."""
    if not isinstance(data, Mapping):
        raise InvalidResponseFormatError(f"Not a valid format: expected a page object, got {type(data).__name__}")

    items: list[T] = []
    for index, entry in enumerate(get_list(data, "values")):
        try:
            items.append(decode_item(entry))
        except (RemoteAPIError, InvalidResponseFormatError, MalformedTimestampError) as exc:
            logger.debug("Skipping item %d of page: %s", index, exc)

    return Page(
        page=get_int(data, "page") or 0,
        pagelen=get_int(data, "pagelen") or 0,
        size=get_int(data, "size") or 0,
        next=get_str(data, "next"),
        items=items,
    )


def decode_pull_request_page(data: Any) -> Page[PullRequest]:
    return decode_page(data, decode_pull_request)


def decode_comment_page(data: Any) -> Page[PullRequestComment]:
    return decode_page(data, decode_comment)
