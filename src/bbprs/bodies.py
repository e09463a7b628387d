"""JSON request bodies for pull request and comment mutations."""
from __future__ import annotations

import json
from typing import Any

from .options import PullRequestCommentOptions, PullRequestOptions


def build_pull_request_body(po: PullRequestOptions) -> str:
    # The API expects every top-level key, even when empty.
    source: dict[str, Any] = {}
    destination: dict[str, Any] = {}
    body: dict[str, Any] = {
        "source": source,
        "destination": destination,
        "reviewers": [{"uuid": uuid} for uuid in po.reviewers],
        "title": po.title,
        "description": po.description,
        "message": po.message,
        "close_source_branch": po.close_source_branch,
    }

    if po.source_branch:
        source["branch"] = {"name": po.source_branch}
    if po.source_repository:
        source["repository"] = {"full_name": po.source_repository}
    if po.destination_branch:
        destination["branch"] = {"name": po.destination_branch}
    if po.destination_commit:
        destination["commit"] = {"hash": po.destination_commit}

    if po.draft:
        body["draft"] = True

    return json.dumps(body)


def build_comment_body(co: PullRequestCommentOptions) -> str:
    body: dict[str, Any] = {"content": {"raw": co.content}}
    if co.parent is not None:
        body["parent"] = {"id": co.parent}
    return json.dumps(body)
