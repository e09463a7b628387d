from __future__ import annotations

from datetime import datetime, timezone

from ..models import PullRequest, PullRequestComment


def _when(value: datetime | None) -> str:
    return value.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ") if value else "n/a"


def _comment_lines(comments: list[PullRequestComment], heading: str) -> list[str]:
    lines: list[str] = []
    for c in comments:
        author = c.author.display_name or "unknown"
        reply = f" (reply to {c.parent})" if c.parent is not None else ""
        lines.append(f"{heading} Comment {c.id} by {author}{reply} — {_when(c.created_on)}")
        lines.append("")
        if c.inline is not None:
            line_info = f" **Line:** {c.inline.to_line}" if c.inline.to_line is not None else ""
            lines.append(f"**File:** `{c.inline.path}`{line_info}")
            lines.append("")
        lines.append("_deleted_" if c.deleted else c.content.raw)
        lines.append("")
    return lines


def format_comments_markdown(comments: list[PullRequestComment]) -> str:
    lines = [f"# Comments ({len(comments)})", ""]
    lines.extend(_comment_lines(comments, "##"))
    return "\n".join(lines)


def format_markdown(prs: list[PullRequest], owner_repo: str = "") -> str:
    now = datetime.now(tz=timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")
    state_label = prs[0].state if len({pr.state for pr in prs}) == 1 else "ALL"
    lines: list[str] = []

    title = f"Pull Requests: {owner_repo}" if owner_repo else "Pull Requests"
    lines.append(f"# {title}")
    lines.append(f"> Fetched {len(prs)} PRs · State: {state_label} · Generated: {now}")
    lines.append("")

    for pr in prs:
        lines.append(f"## PR #{pr.id} — {pr.title}")
        lines.append("")
        lines.append("| Field | Value |")
        lines.append("| --- | --- |")
        lines.append(f"| Author | {pr.author.display_name or 'unknown'} |")
        lines.append(f"| State | {pr.state} |")
        if pr.draft:
            lines.append("| Draft | yes |")
        lines.append(f"| Source | {pr.source.branch.name} |")
        lines.append(f"| Destination | {pr.destination.branch.name} |")
        lines.append(f"| Created | {_when(pr.created_on)} |")
        lines.append(f"| Updated | {_when(pr.updated_on)} |")
        if pr.reviewers:
            lines.append(f"| Reviewers | {', '.join(r.display_name for r in pr.reviewers)} |")
        if pr.url:
            lines.append(f"| URL | {pr.url} |")
        lines.append("")

        if pr.description:
            lines.append(pr.description)
            lines.append("")

        if pr.comments:
            lines.append(f"### Comments ({len(pr.comments)})")
            lines.append("")
            lines.extend(_comment_lines(pr.comments, "####"))

    return "\n".join(lines)
