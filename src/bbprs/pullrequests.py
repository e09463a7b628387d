from __future__ import annotations

import dataclasses
import logging
from typing import Any
from urllib.parse import quote

import httpx

from .bodies import build_comment_body, build_pull_request_body
from .client import BitbucketClient
from .decoding import decode_comment, decode_comment_page, decode_pull_request, decode_pull_request_page
from .models import Page, PullRequest, PullRequestComment
from .options import PullRequestCommentOptions, PullRequestOptions, PullRequestsOptions

logger = logging.getLogger(__name__)


def _with_query(url: str, params: dict[str, Any]) -> str:
    params = {k: v for k, v in params.items() if v}
    if not params:
        return url
    return str(httpx.URL(url).copy_merge_params(params))


class PullRequests:
    """Pull request and pull request comment operations for one client.

    Methods without a suffix return the decoded JSON as the API sent it;
    the ``*_obj`` / ``*_objs`` variants decode into typed entities.
    """

    def __init__(self, client: BitbucketClient) -> None:
        self._client = client

    def _repo_url(self, owner: str, repo_slug: str, suffix: str = "") -> str:
        return self._client.url(f"/repositories/{quote(owner, safe='')}/{quote(repo_slug, safe='')}{suffix}")

    def _pr_url(self, po: PullRequestOptions, suffix: str = "") -> str:
        return self._repo_url(po.owner, po.repo_slug, f"/pullrequests/{po.id}{suffix}")

    def _comment_url(self, co: PullRequestCommentOptions, with_id: bool = False) -> str:
        suffix = f"/pullrequests/{co.pull_request_id}/comments"
        suffix += f"/{co.comment_id}" if with_id else "/"
        return self._repo_url(co.owner, co.repo_slug, suffix)

    # ------------------------------------------------------------------
    # Pull requests
    # ------------------------------------------------------------------

    def create(self, po: PullRequestOptions) -> Any:
        data = build_pull_request_body(po)
        return self._client.execute("POST", self._repo_url(po.owner, po.repo_slug, "/pullrequests/"), data)

    def update(self, po: PullRequestOptions) -> Any:
        data = build_pull_request_body(po)
        return self._client.execute("PUT", self._pr_url(po), data)

    def get(self, po: PullRequestOptions) -> Any:
        return self._client.execute("GET", self._pr_url(po))

    def get_obj(self, po: PullRequestOptions) -> PullRequest:
        return decode_pull_request(self.get(po))

    def list(self, opts: PullRequestsOptions) -> Any:
        url = _with_query(
            self._repo_url(opts.owner, opts.repo_slug, "/pullrequests/"),
            {"state": list(opts.states), "q": opts.query, "sort": opts.sort},
        )
        return self._client.execute_paginated("GET", url)

    def list_objs(self, opts: PullRequestsOptions) -> Page[PullRequest]:
        """List pull requests and attach each one's comments."""
        page = decode_pull_request_page(self.list(opts))
        return self.append_comments(opts, page)

    def append_comments(self, opts: PullRequestsOptions, page: Page[PullRequest]) -> Page[PullRequest]:
        """Return a copy of *page* whose pull requests carry their comments.

        One comment listing per pull request, in page order. The first
        failure aborts the whole call.
        """
        items: list[PullRequest] = []
        for pr in page.items:
            co = PullRequestCommentOptions(owner=opts.owner, repo_slug=opts.repo_slug, pull_request_id=pr.id)
            comments = self.list_comments_objs(co)
            logger.debug("Attached %d comments to pull request #%d", len(comments.items), pr.id)
            items.append(dataclasses.replace(pr, comments=[*pr.comments, *comments.items]))
        return dataclasses.replace(page, items=items)

    def get_by_commit(self, po: PullRequestOptions) -> Any:
        url = self._repo_url(po.owner, po.repo_slug, f"/commit/{po.commit}/pullrequests/")
        return self._client.execute_paginated("GET", url)

    def commits(self, po: PullRequestOptions) -> Any:
        return self._client.execute_paginated("GET", self._pr_url(po, "/commits"))

    def activities(self, po: PullRequestOptions) -> Any:
        url = self._repo_url(po.owner, po.repo_slug, "/pullrequests/activity")
        return self._client.execute_paginated("GET", url)

    def activity(self, po: PullRequestOptions) -> Any:
        return self._client.execute("GET", self._pr_url(po, "/activity"))

    def patch(self, po: PullRequestOptions) -> str:
        return self._client.execute_raw("GET", self._pr_url(po, "/patch"))

    def diff(self, po: PullRequestOptions) -> str:
        return self._client.execute_raw("GET", self._pr_url(po, "/diff"))

    def merge(self, po: PullRequestOptions) -> Any:
        data = build_pull_request_body(po)
        return self._client.execute("POST", self._pr_url(po, "/merge"), data)

    def decline(self, po: PullRequestOptions) -> Any:
        data = build_pull_request_body(po)
        return self._client.execute("POST", self._pr_url(po, "/decline"), data)

    def approve(self, po: PullRequestOptions) -> Any:
        return self._client.execute("POST", self._pr_url(po, "/approve"))

    def unapprove(self, po: PullRequestOptions) -> Any:
        return self._client.execute("DELETE", self._pr_url(po, "/approve"))

    def request_changes(self, po: PullRequestOptions) -> Any:
        return self._client.execute("POST", self._pr_url(po, "/request-changes"))

    def unrequest_changes(self, po: PullRequestOptions) -> Any:
        return self._client.execute("DELETE", self._pr_url(po, "/request-changes"))

    def statuses(self, po: PullRequestOptions) -> Any:
        url = _with_query(self._pr_url(po, "/statuses"), {"q": po.query, "sort": po.sort})
        return self._client.execute_paginated("GET", url)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    def add_comment(self, co: PullRequestCommentOptions) -> Any:
        data = build_comment_body(co)
        url = self._repo_url(co.owner, co.repo_slug, f"/pullrequests/{co.pull_request_id}/comments")
        return self._client.execute("POST", url, data)

    def add_comment_obj(self, co: PullRequestCommentOptions) -> PullRequestComment:
        return decode_comment(self.add_comment(co))

    def update_comment(self, co: PullRequestCommentOptions) -> Any:
        data = build_comment_body(co)
        return self._client.execute("PUT", self._comment_url(co, with_id=True), data)

    def delete_comment(self, co: PullRequestCommentOptions) -> Any:
        return self._client.execute("DELETE", self._comment_url(co, with_id=True))

    def list_comments(self, co: PullRequestCommentOptions) -> Any:
        return self._client.execute_paginated("GET", self._comment_url(co))

    def list_comments_objs(self, co: PullRequestCommentOptions) -> Page[PullRequestComment]:
        return decode_comment_page(self.list_comments(co))

    def get_comment(self, co: PullRequestCommentOptions) -> Any:
        return self._client.execute("GET", self._comment_url(co, with_id=True))

    def get_comment_obj(self, co: PullRequestCommentOptions) -> PullRequestComment:
        return decode_comment(self.get_comment(co))
