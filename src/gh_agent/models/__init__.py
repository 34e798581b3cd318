"""Data models for gh-agent."""

from gh_agent.models.change_models import (
    CategorizedChange,
    ChangeCategory,
    ChangeType,
    CodeEntity,
    FileChange,
    PatternGroup,
    PatternSummary,
    SemanticChangeRecord,
    SemanticDiffResult,
)
from gh_agent.models.diff_models import DiffHunk, DiffLine, LineKind
from gh_agent.models.github_models import (
    CodeSearchItem,
    CodeSearchResponse,
    CreateReview,
    CreateReviewResponse,
    FileContentPair,
    PrFile,
    PullRequest,
    ReviewCommentInput,
    ReviewInput,
    TextMatch,
)
from gh_agent.models.report_models import (
    CommentableLinesExport,
    ReviewValidation,
    SearchMatch,
)

__all__ = [
    "CategorizedChange",
    "ChangeCategory",
    "ChangeType",
    "CodeEntity",
    "CodeSearchItem",
    "CodeSearchResponse",
    "CommentableLinesExport",
    "CreateReview",
    "CreateReviewResponse",
    "DiffHunk",
    "DiffLine",
    "FileChange",
    "FileContentPair",
    "LineKind",
    "PatternGroup",
    "PatternSummary",
    "PrFile",
    "PullRequest",
    "ReviewCommentInput",
    "ReviewInput",
    "ReviewValidation",
    "SearchMatch",
    "SemanticChangeRecord",
    "SemanticDiffResult",
    "TextMatch",
]
