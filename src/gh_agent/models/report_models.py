"""Output models for diff exports, review validation and search."""

from pydantic import BaseModel, ConfigDict, Field

from gh_agent.models.github_models import ReviewCommentInput


class CommentableLinesExport(BaseModel):
    """Machine-readable map of commentable new-file lines per changed file."""

    files: dict[str, list[int]] = Field(default_factory=dict)


class ReviewValidation(BaseModel):
    """Outcome of checking proposed comments against the current diff."""

    model_config = ConfigDict(frozen=False)

    valid_comments: list[ReviewCommentInput] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class SearchMatch(BaseModel):
    """A single text or structural search hit."""

    model_config = ConfigDict(frozen=True)

    file: str
    line: int  # 1-indexed
    column: int  # 1-indexed
    text: str  # Matched line (grep) or matched node text (structural)
    context_before: tuple[str, ...] = Field(default_factory=tuple)
    context_after: tuple[str, ...] = Field(default_factory=tuple)
