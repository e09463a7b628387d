"""Shared factories and fixtures for the test suite."""
from __future__ import annotations

from datetime import datetime, timezone

import pytest

from bbprs.models import (
    CommentContent,
    PullRequest,
    PullRequestComment,
    PullRequestEndpoint,
    RepositoryBranch,
    User,
)

API = "https://api.bitbucket.org/2.0"
REPO_URL = f"{API}/repositories/owner/repo"

# ---------------------------------------------------------------------------
# JSON payload factories — return raw dicts that mirror API responses
# ---------------------------------------------------------------------------


def user_payload(display_name: str = "John Doe", uuid: str = "{1234}") -> dict:
    return {"display_name": display_name, "uuid": uuid, "type": "user"}


def pr_payload(
    id: float = 1.0,
    title: str = "Fix bug",
    state: str = "OPEN",
    draft: bool = False,
    created_on: str | None = "2026-01-15T10:30:00.000000+00:00",
    updated_on: str | None = "2026-01-16T14:20:00.000000+00:00",
    source_branch: str = "feature-branch",
    destination_branch: str = "main",
    reviewers: list[dict] | None = None,
) -> dict:
    payload = {
        "type": "pullrequest",
        "id": id,
        "title": title,
        "description": "Test description",
        "state": state,
        "draft": draft,
        "close_source_branch": True,
        "author": user_payload(),
        "source": {
            "branch": {"name": source_branch},
            "repository": {"full_name": "owner/repo", "name": "repo"},
            "commit": {"hash": "abc123"},
        },
        "destination": {
            "branch": {"name": destination_branch},
            "commit": {"hash": "def456"},
        },
        "reviewers": reviewers or [],
        "comment_count": 0,
        "links": {"html": {"href": f"https://bitbucket.org/owner/repo/pull-requests/{int(id)}"}},
    }
    if created_on is not None:
        payload["created_on"] = created_on
    if updated_on is not None:
        payload["updated_on"] = updated_on
    return payload


def comment_payload(
    id: float = 1.0,
    raw: str = "Looks good",
    parent: float | dict | None = None,
    created_on: str | None = "2026-01-15T11:00:00.000000+00:00",
) -> dict:
    payload = {
        "type": "pullrequest_comment",
        "id": id,
        "content": {"raw": raw, "markup": "markdown", "html": f"<p>{raw}</p>"},
        "user": user_payload("Reviewer"),
        "deleted": False,
    }
    if parent is not None:
        payload["parent"] = parent
    if created_on is not None:
        payload["created_on"] = created_on
    return payload


def error_payload(message: str = "Something went wrong") -> dict:
    return {"type": "error", "error": {"message": message}}


def page_payload(
    values: list,
    page: float | None = 1.0,
    pagelen: float | None = 10.0,
    size: float | None = None,
    next: str | None = None,
) -> dict:
    payload: dict = {"values": values}
    if page is not None:
        payload["page"] = page
    if pagelen is not None:
        payload["pagelen"] = pagelen
    payload["size"] = float(len(values)) if size is None else size
    if next is not None:
        payload["next"] = next
    return payload


# ---------------------------------------------------------------------------
# Model object factories — construct typed model instances
# ---------------------------------------------------------------------------


def make_comment(
    id: int = 1,
    raw: str = "Looks good",
    author: str = "Reviewer",
    parent: int | None = None,
    created_on: datetime | None = datetime(2026, 1, 15, 11, 0, tzinfo=timezone.utc),
) -> PullRequestComment:
    return PullRequestComment(
        id=id,
        content=CommentContent(raw=raw, markup="markdown", html=f"<p>{raw}</p>"),
        parent=parent,
        author=User(display_name=author),
        created_on=created_on,
    )


def make_pull_request(
    id: int = 1,
    title: str = "Fix bug",
    author: str = "alice",
    state: str = "OPEN",
    description: str = "",
    created_on: datetime | None = datetime(2026, 1, 15, 10, 30, tzinfo=timezone.utc),
    reviewers: list[str] | None = None,
    comments: list[PullRequestComment] | None = None,
) -> PullRequest:
    return PullRequest(
        id=id,
        title=title,
        description=description,
        author=User(display_name=author),
        state=state,
        source=PullRequestEndpoint(branch=RepositoryBranch(name="feature")),
        destination=PullRequestEndpoint(branch=RepositoryBranch(name="main")),
        reviewers=[User(display_name=name) for name in reviewers or []],
        comments=comments or [],
        url=f"https://bitbucket.org/owner/repo/pull-requests/{id}",
        created_on=created_on,
    )


# ---------------------------------------------------------------------------
# Autouse fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def no_dotenv(mocker):
    """Prevent tests from loading a real .env file."""
    mocker.patch("bbprs.cli.load_dotenv")


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "BITBUCKET_TOKEN",
        "BITBUCKET_USERNAME",
        "BITBUCKET_APP_PASSWORD",
        "BITBUCKET_API_BASE_URL",
        "BITBUCKET_PAGELEN",
        "BITBUCKET_MAX_DEPTH",
    ):
        monkeypatch.delenv(name, raising=False)
