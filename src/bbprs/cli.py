from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import NoReturn

import click
from dotenv import load_dotenv
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.progress import Progress, SpinnerColumn, TextColumn

from .config import Settings
from .decoding import decode_pull_request_page
from .errors import BbPrsError
from .formatters import get_comments_formatter, get_formatter
from .options import PullRequestCommentOptions, PullRequestOptions, PullRequestsOptions
from .pullrequests import PullRequests

_stderr = Console(stderr=True)


load_dotenv()

_format_option = click.option(
    "--format",
    "output_format",
    type=click.Choice(["json", "markdown"]),
    default="json",
    show_default=True,
    help="Output format.",
)


def _split_repo(repo: str) -> tuple[str, str]:
    if "/" not in repo or repo.count("/") != 1:
        raise click.BadParameter(
            f"{repo!r} is not a valid OWNER/REPO format.",
            param_hint="REPO",
        )
    owner, repo_slug = repo.split("/", 1)
    if not owner or not repo_slug:
        raise click.BadParameter(
            f"{repo!r} is not a valid OWNER/REPO format.",
            param_hint="REPO",
        )
    return owner, repo_slug


def _load_settings() -> Settings:
    try:
        settings = Settings.from_env()
    except BbPrsError as exc:
        _fail(exc)
    if not settings.has_credentials:
        _stderr.print(
            "[red]Error:[/red] set BITBUCKET_TOKEN, or BITBUCKET_USERNAME and BITBUCKET_APP_PASSWORD."
        )
        sys.exit(1)
    return settings


def _fail(exc: BbPrsError) -> NoReturn:
    _stderr.print(f"[red]Error:[/red] {escape(str(exc))}")
    sys.exit(1)


def _emit(output: str, output_path: Path | None, count: int) -> None:
    if output_path is not None:
        output_path.write_text(output, encoding="utf-8")
        _stderr.print(f"[green]Wrote {count} items to {output_path}[/green]")
    else:
        click.echo(output)


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Log requests and skipped items.")
def cli(verbose: bool) -> None:
    """bbprs — work with Bitbucket Cloud pull requests."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=_stderr, show_path=False)],
        force=True,
    )


@cli.command(name="list")
@click.argument("repo", metavar="OWNER/REPO")
@click.option(
    "--state",
    "states",
    type=click.Choice(["OPEN", "MERGED", "DECLINED", "SUPERSEDED"]),
    multiple=True,
    help="Filter by state; repeat for several.",
)
@click.option("--query", default="", help="Bitbucket query filter (q=...).")
@click.option("--sort", default="", help="Sort field, e.g. -updated_on.")
@click.option("--comments/--no-comments", default=False, help="Attach each pull request's comments.")
@_format_option
@click.option(
    "--output",
    "output_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Write output to a file instead of stdout.",
)
def list_prs(
    repo: str,
    states: tuple[str, ...],
    query: str,
    sort: str,
    comments: bool,
    output_format: str,
    output_path: Path | None,
) -> None:
    """List pull requests of OWNER/REPO."""
    owner, repo_slug = _split_repo(repo)
    settings = _load_settings()
    opts = PullRequestsOptions(owner=owner, repo_slug=repo_slug, states=list(states), query=query, sort=sort)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=_stderr,
            transient=True,
        ) as progress:
            progress.add_task(f"Fetching pull requests from {repo}…", total=None)
            with settings.make_client() as client:
                resource = PullRequests(client)
                if comments:
                    page = resource.list_objs(opts)
                else:
                    page = decode_pull_request_page(resource.list(opts))
    except BbPrsError as exc:
        _fail(exc)

    formatter = get_formatter(output_format, owner_repo=repo)
    _emit(formatter(page.items), output_path, len(page.items))


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pr_id", type=click.IntRange(min=1))
@_format_option
def get(repo: str, pr_id: int, output_format: str) -> None:
    """Show one pull request."""
    owner, repo_slug = _split_repo(repo)
    settings = _load_settings()
    try:
        with settings.make_client() as client:
            pr = PullRequests(client).get_obj(PullRequestOptions(owner=owner, repo_slug=repo_slug, id=pr_id))
    except BbPrsError as exc:
        _fail(exc)
    click.echo(get_formatter(output_format, owner_repo=repo)([pr]))


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pr_id", type=click.IntRange(min=1))
@_format_option
def comments(repo: str, pr_id: int, output_format: str) -> None:
    """List the comments of one pull request."""
    owner, repo_slug = _split_repo(repo)
    settings = _load_settings()
    co = PullRequestCommentOptions(owner=owner, repo_slug=repo_slug, pull_request_id=pr_id)
    try:
        with settings.make_client() as client:
            page = PullRequests(client).list_comments_objs(co)
    except BbPrsError as exc:
        _fail(exc)
    click.echo(get_comments_formatter(output_format)(page.items))


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pr_id", type=click.IntRange(min=1))
@click.option("--content", required=True, help="Comment text (markdown).")
@click.option("--parent", type=click.IntRange(min=1), default=None, help="Reply to this comment id.")
def comment(repo: str, pr_id: int, content: str, parent: int | None) -> None:
    """Add a comment to a pull request."""
    owner, repo_slug = _split_repo(repo)
    settings = _load_settings()
    co = PullRequestCommentOptions(
        owner=owner, repo_slug=repo_slug, pull_request_id=pr_id, content=content, parent=parent
    )
    try:
        with settings.make_client() as client:
            created = PullRequests(client).add_comment_obj(co)
    except BbPrsError as exc:
        _fail(exc)
    _stderr.print(f"[green]Added comment {created.id} to PR #{pr_id}[/green]")


def _transition(action: str, repo: str, pr_id: int, message: str) -> None:
    owner, repo_slug = _split_repo(repo)
    settings = _load_settings()
    po = PullRequestOptions(owner=owner, repo_slug=repo_slug, id=pr_id, message=message)
    try:
        with settings.make_client() as client:
            result = getattr(PullRequests(client), action)(po)
    except BbPrsError as exc:
        _fail(exc)
    click.echo(json.dumps(result, indent=2))


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pr_id", type=click.IntRange(min=1))
def approve(repo: str, pr_id: int) -> None:
    """Approve a pull request."""
    _transition("approve", repo, pr_id, "")


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pr_id", type=click.IntRange(min=1))
@click.option("--message", default="", help="Merge commit message.")
def merge(repo: str, pr_id: int, message: str) -> None:
    """Merge a pull request."""
    _transition("merge", repo, pr_id, message)


@cli.command()
@click.argument("repo", metavar="OWNER/REPO")
@click.argument("pr_id", type=click.IntRange(min=1))
@click.option("--message", default="", help="Reason for declining.")
def decline(repo: str, pr_id: int, message: str) -> None:
    """Decline a pull request."""
    _transition("decline", repo, pr_id, message)
