"""Tests for the triage report and semantic summary renderers."""

from unittest.mock import MagicMock

from gh_agent.analysis.change_classifier import classify_changes
from gh_agent.analysis.smart_review import (
    format_semantic_summary,
    format_smart_output,
    short_path,
    smart_files_from_pairs,
    smart_files_from_records,
    smart_review_from_pairs,
)
from gh_agent.analysis.semantic_diff import result_from_records
from gh_agent.models.change_models import (
    CategorizedChange,
    ChangeCategory,
    ChangeType,
    SemanticChangeRecord,
)
from gh_agent.models.github_models import FileContentPair


def _record(path, name, before, after, change_type=ChangeType.MODIFIED, old_path=None):
    return SemanticChangeRecord(
        entity_type="function",
        entity_name=name,
        file_path=path,
        old_file_path=old_path,
        change_type=change_type,
        before_content=before,
        after_content=after,
    )


def _mechanical(path, removed):
    return CategorizedChange(
        category=ChangeCategory.MECHANICAL,
        similarity=0.9,
        removed_tokens=tuple(sorted(removed)),
        change_type=ChangeType.MODIFIED,
        entity_type="imports",
        entity_name="imports",
        file_path=path,
    )


class TestFormatSmartOutput:
    def test_sections_and_header(self):
        records = [
            _record("src/new.ts", "added", None, "fn added() {}", ChangeType.ADDED),
            _record("src/cfg.ts", "DEBUG", "const DEBUG = false;", "const DEBUG = true;"),
        ]
        output = format_smart_output(classify_changes(records), file_count=2)
        lines = output.splitlines()
        assert lines[0] == "Smart Review: 2 changes across 2 files"
        assert "NEW LOGIC (read these — 1 changes):" in lines
        assert "BEHAVIORAL CHANGES (verify — 1 changes):" in lines
        assert not any(line.startswith("MECHANICAL") for line in lines)
        assert any("false → true" in line for line in lines)

    def test_pattern_group_lists_short_names(self):
        categorized = [_mechanical(f"src/mod{i}.ts", {"unused"}) for i in range(3)]
        output = format_smart_output(categorized, file_count=3)
        assert "MECHANICAL (skip — 3 changes):" in output
        assert "  ⊖ unused removed from mod0.ts, mod1.ts, mod2.ts" in output

    def test_large_pattern_group_collapses_to_count(self):
        categorized = [_mechanical(f"src/mod{i}.ts", {"unused"}) for i in range(5)]
        output = format_smart_output(categorized, file_count=5)
        assert "  ⊖ unused removed from 5 files" in output

    def test_ungrouped_mechanical_rendered_individually(self):
        categorized = [_mechanical("src/a.ts", {"lonely"})]
        output = format_smart_output(categorized, file_count=1)
        assert "(-lonely)" in output


class TestFormatSemanticSummary:
    def test_counts_and_rows(self):
        result = result_from_records([
            _record("src/a.py", "load", None, "def load(): pass", ChangeType.ADDED),
            _record("src/b.py", "save", "def save(): pass", "def save(): return 1"),
            _record("src/c.py", "move_me", "x", "x", ChangeType.MOVED, old_path="src/old.py"),
        ])
        output = format_semantic_summary(result)
        lines = output.splitlines()
        assert lines[0] == "Semantic: 1 added, 1 modified, 1 moved across 3 files"
        assert lines[2].startswith("  ⊕ function")
        assert "move_me (from src/old.py)" in lines[4]


class TestSmartReviewFromPairs:
    def test_no_pairs(self):
        assert smart_review_from_pairs([]) == "No files to analyze."

    def test_no_changes(self):
        pairs = [FileContentPair(filename="a.py", status="modified",
                                 before_content="x = 1\n", after_content="x = 1\n")]
        assert smart_review_from_pairs(pairs) == "No semantic changes found."

    def test_uses_injected_engine(self):
        engine = MagicMock()
        engine.diff.return_value = result_from_records([
            _record("src/a.ts", "f", None, "fn f() {}", ChangeType.ADDED),
        ])
        pairs = [FileContentPair(filename="src/a.ts", status="added", after_content="fn f() {}")]
        output = smart_review_from_pairs(pairs, engine)
        engine.diff.assert_called_once()
        assert output.startswith("Smart Review: 1 changes across 1 files")


class TestSmartFiles:
    def test_mechanical_only_files_excluded(self):
        records = [
            _record("b.ts", "f", None, "fn f() {}", ChangeType.ADDED),
            _record("a.ts", "g", "fn g() {}", None, ChangeType.DELETED),
            _record("b.ts", "h", None, "fn h() {}", ChangeType.ADDED),
            _record("c.ts", "K", "K = 1", "K = 2"),
        ]
        assert smart_files_from_records(records) == ["b.ts", "c.ts"]

    def test_from_pairs_with_builtin_engine(self):
        pairs = [
            FileContentPair(
                filename="pkg/util.py",
                status="modified",
                before_content="import os\n\nLIMIT = 10\n",
                after_content="import os\n\nLIMIT = 20\n",
            ),
        ]
        assert smart_files_from_pairs(pairs) == ["pkg/util.py"]


def test_short_path():
    assert short_path("a/b/c.py") == "c.py"
    assert short_path("c.py") == "c.py"
