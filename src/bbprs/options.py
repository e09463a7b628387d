from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PullRequestOptions:
    owner: str
    repo_slug: str
    id: str | int = ""
    commit: str = ""
    title: str = ""
    description: str = ""
    message: str = ""
    close_source_branch: bool = False
    source_branch: str = ""
    source_repository: str = ""
    destination_branch: str = ""
    destination_commit: str = ""
    reviewers: list[str] = field(default_factory=list)
    draft: bool = False
    query: str = ""
    sort: str = ""


@dataclass
class PullRequestsOptions:
    owner: str
    repo_slug: str
    states: list[str] = field(default_factory=list)
    query: str = ""
    sort: str = ""


@dataclass
class PullRequestCommentOptions:
    owner: str
    repo_slug: str
    pull_request_id: str | int = ""
    comment_id: str | int = ""
    content: str = ""
    parent: int | None = None
