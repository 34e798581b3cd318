"""Triage report that separates mechanical churn from logic worth reading."""

from gh_agent.analysis.change_classifier import classify_changes
from gh_agent.analysis.pattern_detector import group_mechanical_changes
from gh_agent.analysis.semantic_diff import (
    DeclarationSemanticDiff,
    SemanticDiffEngine,
    file_changes_from_pairs,
)
from gh_agent.models.change_models import (
    CategorizedChange,
    ChangeCategory,
    ChangeType,
    SemanticChangeRecord,
    SemanticDiffResult,
)
from gh_agent.models.github_models import FileContentPair

# Number of files listed by name in a pattern line before collapsing to a count
MAX_LISTED_FILES = 3
# Number of tokens shown per side in a token summary
MAX_LISTED_TOKENS = 3

CHANGE_ICONS: dict[ChangeType, str] = {
    ChangeType.ADDED: "⊕",
    ChangeType.MODIFIED: "∆",
    ChangeType.RENAMED: "↻",
    ChangeType.DELETED: "⊖",
    ChangeType.MOVED: "→",
}


def short_path(path: str) -> str:
    return path.rsplit("/", 1)[-1]


def _token_summary(change: CategorizedChange) -> str:
    parts = []
    if change.removed_tokens:
        parts.append("-" + ",".join(change.removed_tokens[:MAX_LISTED_TOKENS]))
    if change.added_tokens:
        parts.append("+" + ",".join(change.added_tokens[:MAX_LISTED_TOKENS]))
    return " ".join(parts)


def _similarity_label(change: CategorizedChange) -> str:
    return f"sim {change.similarity * 100:.0f}%"


def _mechanical_line(change: CategorizedChange) -> str:
    if change.change_type == ChangeType.DELETED:
        return f"  ⊖ {short_path(change.file_path)} {change.entity_name} — deleted"
    icon = "↻" if change.change_type == ChangeType.RENAMED else "∆"
    if change.removed_tokens or change.added_tokens:
        return (
            f"  {icon} {short_path(change.file_path):<20} "
            f"{change.entity_name:<30} ({_token_summary(change)})"
        )
    return (
        f"  {icon} {short_path(change.file_path):<20} "
        f"{change.entity_name} ({_similarity_label(change)})"
    )


def _behavioral_detail(change: CategorizedChange) -> str:
    if change.value_change is not None:
        old_value, new_value = change.value_change
        return f"{old_value} → {new_value}"
    if change.removed_tokens or change.added_tokens:
        return _token_summary(change)
    return _similarity_label(change)


def format_smart_output(categorized: list[CategorizedChange], file_count: int) -> str:
    """Render the triage report for a classified batch."""
    summary = group_mechanical_changes(categorized)

    mechanical_lines = []
    for group in summary.groups:
        files = [short_path(categorized[i].file_path) for i in group.member_indices]
        if len(files) <= MAX_LISTED_FILES:
            file_list = ", ".join(files)
        else:
            file_list = f"{len(files)} files"
        mechanical_lines.append(f"  ⊖ {group.token} removed from {file_list}")
    for index in summary.ungrouped_indices:
        mechanical_lines.append(_mechanical_line(categorized[index]))

    new_logic_lines = [
        f"  ⊕ {short_path(c.file_path):<20} {c.entity_name} — {c.entity_type}"
        for c in categorized
        if c.category == ChangeCategory.NEW_LOGIC
    ]
    behavioral_lines = [
        f"  ∆ {short_path(c.file_path):<20} {c.entity_name:<30} {_behavioral_detail(c)}"
        for c in categorized
        if c.category == ChangeCategory.BEHAVIORAL
    ]

    def count(category: ChangeCategory) -> int:
        return sum(1 for c in categorized if c.category == category)

    out = [f"Smart Review: {len(categorized)} changes across {file_count} files\n"]
    sections = (
        ("MECHANICAL (skip — {} changes):", ChangeCategory.MECHANICAL, mechanical_lines),
        ("NEW LOGIC (read these — {} changes):", ChangeCategory.NEW_LOGIC, new_logic_lines),
        ("BEHAVIORAL CHANGES (verify — {} changes):", ChangeCategory.BEHAVIORAL, behavioral_lines),
    )
    for title, category, lines in sections:
        if not lines:
            continue
        out.append(title.format(count(category)))
        out.extend(lines)
        out.append("")

    return "\n".join(out)


def format_semantic_summary(result: SemanticDiffResult) -> str:
    """Render the plain entity list of a semantic diff."""
    parts = []
    for label, value in (
        ("added", result.added_count),
        ("modified", result.modified_count),
        ("deleted", result.deleted_count),
        ("renamed", result.renamed_count),
        ("moved", result.moved_count),
    ):
        if value > 0:
            parts.append(f"{value} {label}")

    lines = [f"Semantic: {', '.join(parts)} across {result.file_count} files", ""]
    for change in result.changes:
        name = change.entity_name
        if change.change_type in (ChangeType.MOVED, ChangeType.RENAMED) and change.old_file_path:
            name = f"{change.entity_name} (from {change.old_file_path})"
        lines.append(
            f"  {CHANGE_ICONS[change.change_type]} {change.entity_type:<12} {name:<35} {change.file_path}"
        )
    return "\n".join(lines)


def _run_engine(
    pairs: list[FileContentPair],
    engine: SemanticDiffEngine | None,
) -> SemanticDiffResult:
    if engine is None:
        engine = DeclarationSemanticDiff()
    return engine.diff(file_changes_from_pairs(pairs))


def smart_review_from_pairs(
    pairs: list[FileContentPair],
    engine: SemanticDiffEngine | None = None,
) -> str:
    """Triage report for pre-fetched base/head pairs."""
    if not pairs:
        return "No files to analyze."
    result = _run_engine(pairs, engine)
    if not result.changes:
        return "No semantic changes found."
    return format_smart_output(classify_changes(list(result.changes)), result.file_count)


def smart_files_from_records(records: list[SemanticChangeRecord]) -> list[str]:
    """Sorted, de-duplicated paths of files with at least one non-mechanical change."""
    categorized = classify_changes(records)
    return sorted({c.file_path for c in categorized if c.category != ChangeCategory.MECHANICAL})


def smart_files_from_pairs(
    pairs: list[FileContentPair],
    engine: SemanticDiffEngine | None = None,
) -> list[str]:
    return smart_files_from_records(list(_run_engine(pairs, engine).changes))
