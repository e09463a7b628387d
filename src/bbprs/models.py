from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class User:
    display_name: str = ""
    uuid: str = ""
    account_id: str = ""
    nickname: str = ""
    type: str = ""


@dataclass(frozen=True)
class Repository:
    full_name: str = ""
    name: str = ""
    uuid: str = ""


@dataclass(frozen=True)
class RepositoryBranch:
    name: str = ""


@dataclass(frozen=True)
class PullRequestEndpoint:
    """Source or destination side of a pull request."""

    branch: RepositoryBranch = field(default_factory=RepositoryBranch)
    repository: Repository = field(default_factory=Repository)
    commit: str = ""


@dataclass(frozen=True)
class CommentContent:
    raw: str = ""
    markup: str = ""
    html: str = ""


@dataclass(frozen=True)
class InlineAnchor:
    path: str = ""
    from_line: int | None = None
    to_line: int | None = None


@dataclass(frozen=True)
class PullRequestComment:
    id: int = 0
    content: CommentContent = field(default_factory=CommentContent)
    parent: int | None = None
    author: User = field(default_factory=User)
    created_on: datetime | None = None
    updated_on: datetime | None = None
    deleted: bool = False
    pull_request_id: int | None = None
    inline: InlineAnchor | None = None


@dataclass(frozen=True)
class PullRequest:
    id: int = 0
    title: str = ""
    description: str = ""
    author: User = field(default_factory=User)
    draft: bool = False
    close_source_branch: bool = False
    state: str = ""
    source: PullRequestEndpoint = field(default_factory=PullRequestEndpoint)
    destination: PullRequestEndpoint = field(default_factory=PullRequestEndpoint)
    merge_commit: str = ""
    reviewers: list[User] = field(default_factory=list)
    comments: list[PullRequestComment] = field(default_factory=list)
    comment_count: int = 0
    task_count: int = 0
    url: str = ""
    created_on: datetime | None = None
    updated_on: datetime | None = None


@dataclass(frozen=True)
class Page(Generic[T]):
    page: int = 0
    pagelen: int = 0
    size: int = 0
    next: str | None = None
    items: list[T] = field(default_factory=list)
