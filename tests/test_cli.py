"""Unit tests for the CLI module (gh_agent.cli.main)."""

from __future__ import annotations

import pytest
from unittest.mock import patch, MagicMock

from gh_agent.cli.main import (
    build_parser,
    main,
    run_command,
    EXIT_SUCCESS,
    EXIT_INVALID_INPUT,
    EXIT_GITHUB_ERROR,
    EXIT_COMMAND_ERROR,
    EXIT_SEARCH_ERROR,
    EXIT_UNEXPECTED,
    EXIT_KEYBOARD_INTERRUPT,
)
from gh_agent.analysis.exceptions import SemanticDiffError
from gh_agent.commands.exceptions import CommentsFileError, ReviewValidationError
from gh_agent.github.exceptions import GitHubApiError, GitHubAuthError, GitHubInputError
from gh_agent.search.exceptions import PatternError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

@pytest.fixture()
def fake_client():
    """Patch config loading and client creation; yield the client mock."""
    client = MagicMock()
    client.__enter__.return_value = client
    with patch("gh_agent.config.resolve_github_token", return_value="t"), \
            patch("gh_agent.cli.main.create_client", return_value=client):
        yield client


# ---------------------------------------------------------------------------
# TestBuildParser
# ---------------------------------------------------------------------------
class TestBuildParser:
    def test_view_flags(self):
        args = build_parser().parse_args(["pr", "view", "12", "-r", "octo/hello", "--smart", "--json"])
        assert (args.command, args.number, args.repo) == ("view", 12, "octo/hello")
        assert args.smart is True
        assert args.as_json is True
        assert args.sem is False

    def test_diff_repeatable_file_filter(self):
        args = build_parser().parse_args([
            "pr", "diff", "3", "--repo", "o/r", "-f", "src/", "--file", "tests/", "--all", "--stat",
        ])
        assert args.file_filters == ["src/", "tests/"]
        assert args.include_all is True
        assert args.stat is True
        assert args.smart_files is False

    def test_grep_options(self):
        args = build_parser().parse_args([
            "pr", "grep", "3", "-r", "o/r", "-p", "TODO", "-C", "2",
            "--repo-wide", "--path", "src/", "--base", "--case-sensitive",
        ])
        assert args.pattern == "TODO"
        assert args.context_lines == 2
        assert args.path_prefix == "src/"
        assert args.base is True
        assert args.case_sensitive is True

    def test_ast_grep_language(self):
        args = build_parser().parse_args(["pr", "ast-grep", "3", "-r", "o/r", "-p", "f($A)", "-l", "ts"])
        assert args.command == "ast-grep"
        assert args.language == "ts"

    def test_suggest(self):
        args = build_parser().parse_args([
            "pr", "suggest", "3", "-r", "o/r", "-f", "a.py",
            "--line-start", "4", "--line-end", "6", "--replacement", "x = 1",
        ])
        assert (args.path, args.line_start, args.line_end, args.replacement) == ("a.py", 4, 6, "x = 1")

    def test_verbose_default(self):
        args = build_parser().parse_args(["pr", "file", "3", "-r", "o/r", "-p", "a.py"])
        assert args.verbose is False

    @pytest.mark.parametrize("argv", [
        ["pr", "view", "0", "-r", "o/r"],
        ["pr", "view", "abc", "-r", "o/r"],
        ["pr", "view", "1"],
        ["pr"],
    ])
    def test_invalid_arguments_exit(self, argv):
        with pytest.raises(SystemExit):
            build_parser().parse_args(argv)


# ---------------------------------------------------------------------------
# TestRunCommand
# ---------------------------------------------------------------------------
class TestRunCommand:
    def test_dispatches_view(self):
        args = build_parser().parse_args(["pr", "view", "9", "-r", "o/r", "--sem"])
        with patch("gh_agent.commands.pr_commands.pr_view", return_value="out") as view:
            assert run_command("client", args) == "out"
        view.assert_called_once_with("client", "o/r", 9, sem=True, smart=False, as_json=False)

    def test_dispatches_review(self):
        args = build_parser().parse_args(["pr", "review", "9", "-r", "o/r", "-c", "c.json"])
        with patch("gh_agent.commands.pr_commands.pr_review", return_value="{}") as review:
            run_command("client", args)
        review.assert_called_once_with("client", "o/r", 9, "c.json")


# ---------------------------------------------------------------------------
# TestMain
# ---------------------------------------------------------------------------
class TestMain:
    def test_success_prints_output(self, fake_client, capsys):
        with patch("gh_agent.cli.main.run_command", return_value="hello"):
            rc = main(["pr", "view", "1", "-r", "o/r"])
        assert rc == EXIT_SUCCESS
        assert capsys.readouterr().out == "hello\n"
        fake_client.__exit__.assert_called_once()

    @pytest.mark.parametrize("exc,code,label", [
        (GitHubInputError("bad repo"), EXIT_INVALID_INPUT, "Invalid input"),
        (CommentsFileError("bad json"), EXIT_INVALID_INPUT, "Invalid input"),
        (GitHubApiError("GitHub API error 404: x", status_code=404, endpoint="/x"),
         EXIT_GITHUB_ERROR, "GitHub error"),
        (ReviewValidationError("No valid comments"), EXIT_COMMAND_ERROR, "Command error"),
        (SemanticDiffError("engine died"), EXIT_COMMAND_ERROR, "Command error"),
        (PatternError("bad pattern"), EXIT_SEARCH_ERROR, "Search error"),
        (RuntimeError("surprise"), EXIT_UNEXPECTED, "Unexpected error"),
    ])
    def test_error_exit_codes(self, fake_client, capsys, exc, code, label):
        with patch("gh_agent.cli.main.run_command", side_effect=exc):
            rc = main(["pr", "view", "1", "-r", "o/r"])
        assert rc == code
        assert capsys.readouterr().err.startswith(f"{label}: ")

    def test_missing_token(self, capsys):
        with patch("gh_agent.config.resolve_github_token",
                   side_effect=GitHubAuthError("Set GITHUB_TOKEN or install/auth gh CLI")):
            rc = main(["pr", "view", "1", "-r", "o/r"])
        assert rc == EXIT_GITHUB_ERROR
        assert "Set GITHUB_TOKEN" in capsys.readouterr().err

    def test_keyboard_interrupt(self, fake_client, capsys):
        with patch("gh_agent.cli.main.run_command", side_effect=KeyboardInterrupt):
            rc = main(["pr", "view", "1", "-r", "o/r"])
        assert rc == EXIT_KEYBOARD_INTERRUPT
        assert "Interrupted." in capsys.readouterr().err

    def test_verbose_prints_traceback(self, fake_client, capsys):
        with patch("gh_agent.cli.main.run_command", side_effect=RuntimeError("surprise")):
            main(["pr", "view", "1", "-r", "o/r", "--verbose"])
        assert "Traceback" in capsys.readouterr().err
