"""Tests for substring search and Code Search keyword extraction."""

import pytest

from gh_agent.search.text_search import extract_search_keyword, grep_files, grep_fragment


FILES = [
    ("src/a.py", "import os\nTODO: fix\nx = 1\nprint('todo later')\n"),
    ("src/b.py", "nothing here\n"),
]


class TestGrepFiles:
    def test_case_insensitive_by_default(self):
        matches = grep_files(FILES, "todo")
        assert [(m.file, m.line, m.column) for m in matches] == [
            ("src/a.py", 2, 1),
            ("src/a.py", 4, 8),
        ]

    def test_case_sensitive(self):
        matches = grep_files(FILES, "TODO", case_sensitive=True)
        assert [m.line for m in matches] == [2]

    def test_context_lines(self):
        [match] = grep_files(FILES, "x = 1", context_lines=1)
        assert match.context_before == ("TODO: fix",)
        assert match.context_after == ("print('todo later')",)

    def test_context_clamped_at_file_edges(self):
        [match] = grep_files(FILES, "import", context_lines=3)
        assert match.context_before == ()
        assert len(match.context_after) == 3

    def test_pattern_is_literal(self):
        matches = grep_files([("f", "a.b\naxb\n")], "a.b")
        assert [m.line for m in matches] == [1]

    def test_no_matches(self):
        assert grep_files(FILES, "absent") == []


def test_grep_fragment_lines_are_fragment_relative():
    [match] = grep_fragment("lib/c.py", "first\nneedle here", "NEEDLE")
    assert (match.file, match.line, match.column) == ("lib/c.py", 2, 1)


class TestExtractSearchKeyword:
    @pytest.mark.parametrize("pattern,keyword", [
        ("console.log($$$)", "console.log"),
        ("useEffect($FN, [])", "useEffect"),
        ("fetchData", "fetchData"),
        ("$A.unwrap()", "$A.unwrap()"),
        ("  await $X  ", "await"),
    ])
    def test_keywords(self, pattern, keyword):
        assert extract_search_keyword(pattern) == keyword
