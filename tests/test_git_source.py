"""Tests for reading changed files from a local git clone."""

import subprocess
from unittest.mock import patch

import pytest

from gh_agent.analysis.exceptions import GitSourceError
from gh_agent.analysis.git_source import (
    collect_file_changes,
    merge_base,
    parse_name_status,
    show_file,
)


def _completed(stdout=b"", returncode=0, stderr=b""):
    return subprocess.CompletedProcess(args=[], returncode=returncode, stdout=stdout, stderr=stderr)


class FakeGit:
    """Answers `git` invocations from a small table of refs and files."""

    def __init__(self, files, name_status):
        self.files = files
        self.name_status = name_status
        self.calls = []

    def __call__(self, cmd, cwd=None, capture_output=False):
        args = cmd[1:]
        self.calls.append(args)
        if args[0] == "merge-base":
            return _completed(b"abc123\n")
        if args[0] == "diff":
            return _completed(self.name_status.encode())
        if args[0] == "show":
            content = self.files.get(args[1])
            if content is None:
                return _completed(returncode=128, stderr=b"fatal: path not found")
            return _completed(content.encode())
        raise AssertionError(f"unexpected git call: {args}")


class TestParseNameStatus:
    def test_statuses(self):
        output = "M\tsrc/a.py\nA\tsrc/new.py\nD\tsrc/old.py\nR087\tsrc/x.py\tsrc/y.py\n"
        assert parse_name_status(output) == [
            ("modified", "src/a.py", None),
            ("added", "src/new.py", None),
            ("removed", "src/old.py", None),
            ("renamed", "src/y.py", "src/x.py"),
        ]

    def test_copy_is_added_at_new_path(self):
        assert parse_name_status("C100\ta.py\tb.py") == [("added", "b.py", None)]

    def test_blank_and_malformed_lines_skipped(self):
        assert parse_name_status("\nM\n") == []


class TestMergeBase:
    def test_returns_sha(self):
        with patch("gh_agent.analysis.git_source.subprocess.run", return_value=_completed(b"deadbeef\n")) as run:
            assert merge_base("main", "feature") == "deadbeef"
        assert run.call_args.args[0] == ["git", "merge-base", "origin/main", "origin/feature"]

    def test_failure_suggests_fetch(self):
        with patch("gh_agent.analysis.git_source.subprocess.run", return_value=_completed(returncode=1)):
            with pytest.raises(GitSourceError, match="git fetch origin"):
                merge_base("main", "feature")

    def test_git_missing(self):
        with patch("gh_agent.analysis.git_source.subprocess.run", side_effect=FileNotFoundError("git")):
            with pytest.raises(GitSourceError, match="Failed to run git"):
                merge_base("main", "feature")


class TestShowFile:
    def test_missing_file_is_none(self):
        with patch("gh_agent.analysis.git_source.subprocess.run", return_value=_completed(returncode=128)):
            assert show_file("HEAD", "nope.py") is None

    def test_binary_file_is_none(self):
        with patch("gh_agent.analysis.git_source.subprocess.run", return_value=_completed(b"\xff\xfe\x00")):
            assert show_file("HEAD", "image.png") is None


class TestCollectFileChanges:
    def test_reads_both_sides(self):
        fake = FakeGit(
            files={
                "abc123:src/a.py": "X = 1\n",
                "origin/feature:src/a.py": "X = 2\n",
                "origin/feature:src/new.py": "def f(): pass\n",
                "abc123:src/gone.py": "Y = 1\n",
                "abc123:src/old.py": "Z = 1\n",
                "origin/feature:src/renamed.py": "Z = 1\n",
            },
            name_status="M\tsrc/a.py\nA\tsrc/new.py\nD\tsrc/gone.py\nR100\tsrc/old.py\tsrc/renamed.py\n",
        )
        with patch("gh_agent.analysis.git_source.subprocess.run", side_effect=fake):
            changes = collect_file_changes("main", "feature", cwd="/repo")

        by_path = {c.file_path: c for c in changes}
        assert by_path["src/a.py"].before_content == "X = 1\n"
        assert by_path["src/a.py"].after_content == "X = 2\n"
        assert by_path["src/new.py"].before_content is None
        assert by_path["src/gone.py"].after_content is None
        assert by_path["src/renamed.py"].old_file_path == "src/old.py"
        assert by_path["src/renamed.py"].before_content == "Z = 1\n"
        assert ["diff", "--name-status", "-M", "abc123", "origin/feature"] in fake.calls

    def test_diff_failure(self):
        responses = [_completed(b"abc\n"), _completed(returncode=128, stderr=b"bad revision")]
        with patch("gh_agent.analysis.git_source.subprocess.run", side_effect=responses):
            with pytest.raises(GitSourceError, match="bad revision"):
                collect_file_changes("main", "feature")
