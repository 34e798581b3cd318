"""Change classification and triage for pull request review."""

from gh_agent.analysis.change_classifier import (
    classify_change,
    classify_changes,
    extract_value_change,
    jaccard_similarity,
    token_diff,
    tokenize,
)
from gh_agent.analysis.pattern_detector import detect_patterns, group_mechanical_changes
from gh_agent.analysis.semantic_diff import (
    DeclarationSemanticDiff,
    ExternalSemanticDiff,
    SemanticDiffEngine,
    file_changes_from_pairs,
    records_from_batch,
)
from gh_agent.analysis.smart_review import (
    format_semantic_summary,
    format_smart_output,
    smart_files_from_pairs,
    smart_review_from_pairs,
)

__all__ = [
    "DeclarationSemanticDiff",
    "ExternalSemanticDiff",
    "SemanticDiffEngine",
    "classify_change",
    "classify_changes",
    "detect_patterns",
    "extract_value_change",
    "file_changes_from_pairs",
    "format_semantic_summary",
    "format_smart_output",
    "group_mechanical_changes",
    "jaccard_similarity",
    "records_from_batch",
    "smart_files_from_pairs",
    "smart_review_from_pairs",
    "token_diff",
    "tokenize",
]
