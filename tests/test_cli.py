"""Tests for the Click CLI (bbprs ...)."""
from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from click.testing import CliRunner

from bbprs.cli import cli
from bbprs.errors import AuthError, NotFoundError
from bbprs.models import Page

from .conftest import make_comment, make_pull_request, page_payload, pr_payload

TOKEN_ENV = {"BITBUCKET_TOKEN": "tok"}


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def mock_resource(mocker):
    """Patch PullRequests so no request leaves the process."""
    resource = MagicMock()
    resource.list.return_value = page_payload([pr_payload(id=1.0, title="Fix bug")])
    resource.list_objs.return_value = Page(
        page=1,
        pagelen=10,
        size=1,
        items=[make_pull_request(id=1, comments=[make_comment(id=9, raw="LGTM")])],
    )
    resource.get_obj.return_value = make_pull_request(id=3, title="Single")
    resource.list_comments_objs.return_value = Page(items=[make_comment(id=9, raw="LGTM")])
    resource.add_comment_obj.return_value = make_comment(id=77)
    resource.merge.return_value = {"state": "MERGED"}
    resource.decline.return_value = {"state": "DECLINED"}
    resource.approve.return_value = {"approved": True}
    mocker.patch("bbprs.cli.PullRequests", return_value=resource)
    return resource


# ---------------------------------------------------------------------------
# Input validation
# ---------------------------------------------------------------------------


class TestRepoArgValidation:
    @pytest.mark.parametrize("repo", ["notaslash", "/repo", "owner/", "a/b/c"])
    def test_bad_repo_exits_nonzero(self, runner, repo):
        result = runner.invoke(cli, ["list", repo], env=TOKEN_ENV)
        assert result.exit_code != 0

    def test_bad_repo_mentions_format(self, runner):
        result = runner.invoke(cli, ["list", "notaslash"], env=TOKEN_ENV)
        assert "OWNER/REPO" in result.output

    def test_invalid_state_choice_exits_nonzero(self, runner):
        result = runner.invoke(cli, ["list", "owner/repo", "--state", "CLOSED"], env=TOKEN_ENV)
        assert result.exit_code != 0

    def test_invalid_format_choice_exits_nonzero(self, runner):
        result = runner.invoke(cli, ["list", "owner/repo", "--format", "csv"], env=TOKEN_ENV)
        assert result.exit_code != 0

    def test_pr_id_zero_exits_nonzero(self, runner):
        result = runner.invoke(cli, ["get", "owner/repo", "0"], env=TOKEN_ENV)
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# Credentials
# ---------------------------------------------------------------------------


class TestCredentials:
    def test_missing_credentials_exits_1(self, runner, mock_resource):
        result = runner.invoke(cli, ["list", "owner/repo"])
        assert result.exit_code == 1
        assert "BITBUCKET_TOKEN" in result.output
        mock_resource.list.assert_not_called()

    def test_half_basic_auth_exits_1(self, runner, mock_resource):
        result = runner.invoke(cli, ["list", "owner/repo"], env={"BITBUCKET_USERNAME": "me"})
        assert result.exit_code == 1
        assert "together" in result.output

    def test_basic_auth_accepted(self, runner, mock_resource):
        env = {"BITBUCKET_USERNAME": "me", "BITBUCKET_APP_PASSWORD": "pw"}
        result = runner.invoke(cli, ["list", "owner/repo"], env=env)
        assert result.exit_code == 0


# ---------------------------------------------------------------------------
# list
# ---------------------------------------------------------------------------


class TestList:
    def test_json_output(self, runner, mock_resource):
        result = runner.invoke(cli, ["list", "owner/repo"], env=TOKEN_ENV)
        assert result.exit_code == 0
        parsed = json.loads(result.stdout)
        assert parsed[0]["id"] == 1
        assert parsed[0]["title"] == "Fix bug"
        mock_resource.list_objs.assert_not_called()

    def test_options_forwarded(self, runner, mock_resource):
        runner.invoke(
            cli,
            ["list", "owner/repo", "--state", "OPEN", "--state", "MERGED", "--query", "q1", "--sort", "-id"],
            env=TOKEN_ENV,
        )
        opts = mock_resource.list.call_args.args[0]
        assert opts.owner == "owner"
        assert opts.repo_slug == "repo"
        assert opts.states == ["OPEN", "MERGED"]
        assert opts.query == "q1"
        assert opts.sort == "-id"

    def test_with_comments_uses_list_objs(self, runner, mock_resource):
        result = runner.invoke(cli, ["list", "owner/repo", "--comments"], env=TOKEN_ENV)
        assert result.exit_code == 0
        parsed = json.loads(result.stdout)
        assert parsed[0]["comments"][0]["content"]["raw"] == "LGTM"
        mock_resource.list.assert_not_called()

    def test_markdown_output(self, runner, mock_resource):
        result = runner.invoke(cli, ["list", "owner/repo", "--format", "markdown"], env=TOKEN_ENV)
        assert result.exit_code == 0
        assert "# Pull Requests: owner/repo" in result.output
        assert "## PR #1 — Fix bug" in result.output

    def test_output_file(self, runner, mock_resource, tmp_path: Path):
        target = tmp_path / "prs.json"
        result = runner.invoke(cli, ["list", "owner/repo", "--output", str(target)], env=TOKEN_ENV)
        assert result.exit_code == 0
        assert json.loads(target.read_text(encoding="utf-8"))[0]["id"] == 1
        assert "Wrote 1 items" in result.output

    def test_api_error_exits_1(self, runner, mock_resource):
        mock_resource.list.side_effect = AuthError("bad credentials")
        result = runner.invoke(cli, ["list", "owner/repo"], env=TOKEN_ENV)
        assert result.exit_code == 1
        assert "bad credentials" in result.output

    def test_invalid_response_exits_1(self, runner, mock_resource):
        mock_resource.list.return_value = "not a page"
        result = runner.invoke(cli, ["list", "owner/repo"], env=TOKEN_ENV)
        assert result.exit_code == 1
        assert "Not a valid format" in result.output


# ---------------------------------------------------------------------------
# get / comments / comment
# ---------------------------------------------------------------------------


class TestSingleResource:
    def test_get(self, runner, mock_resource):
        result = runner.invoke(cli, ["get", "owner/repo", "3"], env=TOKEN_ENV)
        assert result.exit_code == 0
        assert json.loads(result.stdout)[0]["title"] == "Single"
        assert mock_resource.get_obj.call_args.args[0].id == 3

    def test_get_not_found(self, runner, mock_resource):
        mock_resource.get_obj.side_effect = NotFoundError("Not found: x")
        result = runner.invoke(cli, ["get", "owner/repo", "3"], env=TOKEN_ENV)
        assert result.exit_code == 1

    def test_comments_markdown(self, runner, mock_resource):
        result = runner.invoke(cli, ["comments", "owner/repo", "1", "--format", "markdown"], env=TOKEN_ENV)
        assert result.exit_code == 0
        assert "# Comments (1)" in result.output
        assert mock_resource.list_comments_objs.call_args.args[0].pull_request_id == 1

    def test_comment_with_parent(self, runner, mock_resource):
        result = runner.invoke(
            cli, ["comment", "owner/repo", "1", "--content", "reply", "--parent", "9"], env=TOKEN_ENV
        )
        assert result.exit_code == 0
        co = mock_resource.add_comment_obj.call_args.args[0]
        assert co.content == "reply"
        assert co.parent == 9
        assert "Added comment 77" in result.output

    def test_comment_requires_content(self, runner, mock_resource):
        result = runner.invoke(cli, ["comment", "owner/repo", "1"], env=TOKEN_ENV)
        assert result.exit_code != 0


# ---------------------------------------------------------------------------
# State transitions
# ---------------------------------------------------------------------------


class TestTransitions:
    def test_approve(self, runner, mock_resource):
        result = runner.invoke(cli, ["approve", "owner/repo", "4"], env=TOKEN_ENV)
        assert result.exit_code == 0
        assert json.loads(result.stdout) == {"approved": True}

    def test_merge_passes_message(self, runner, mock_resource):
        result = runner.invoke(cli, ["merge", "owner/repo", "4", "--message", "Ship it"], env=TOKEN_ENV)
        assert result.exit_code == 0
        po = mock_resource.merge.call_args.args[0]
        assert po.id == 4
        assert po.message == "Ship it"

    def test_decline(self, runner, mock_resource):
        result = runner.invoke(cli, ["decline", "owner/repo", "4"], env=TOKEN_ENV)
        assert result.exit_code == 0
        assert json.loads(result.stdout)["state"] == "DECLINED"

    def test_verbose_flag_accepted(self, runner, mock_resource):
        result = runner.invoke(cli, ["--verbose", "approve", "owner/repo", "4"], env=TOKEN_ENV)
        assert result.exit_code == 0
