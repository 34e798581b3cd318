"""Models for semantic change records and their triage categories."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ChangeType(str, Enum):
    """Entity-level change kind reported by the semantic-diff engine."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    MOVED = "moved"


class ChangeCategory(str, Enum):
    """Triage bucket for a changed entity."""

    MECHANICAL = "mechanical"
    NEW_LOGIC = "new_logic"
    BEHAVIORAL = "behavioral"


class FileChange(BaseModel):
    """Before/after contents of one changed file, fed to the semantic-diff engine."""

    model_config = ConfigDict(frozen=True)

    file_path: str
    status: str  # "added" | "modified" | "removed" | "renamed"
    old_file_path: str | None = None
    before_content: str | None = None
    after_content: str | None = None


class SemanticChangeRecord(BaseModel):
    """One changed code entity with its before/after source text."""

    model_config = ConfigDict(frozen=True)

    entity_type: str  # "function", "class", "variable", "file", ...
    entity_name: str
    file_path: str
    old_file_path: str | None = None
    change_type: ChangeType
    before_content: str | None = None
    after_content: str | None = None


class SemanticDiffResult(BaseModel):
    """Output of one semantic-diff run over a PR's changed files."""

    model_config = ConfigDict(frozen=True)

    changes: tuple[SemanticChangeRecord, ...] = Field(default_factory=tuple)
    file_count: int = 0
    added_count: int = 0
    modified_count: int = 0
    deleted_count: int = 0
    renamed_count: int = 0
    moved_count: int = 0


class CategorizedChange(BaseModel):
    """A SemanticChangeRecord after classification."""

    model_config = ConfigDict(frozen=True)

    category: ChangeCategory
    similarity: float  # Jaccard similarity of whitespace tokens, in [0, 1]
    removed_tokens: tuple[str, ...] = Field(default_factory=tuple)  # sorted, distinct
    added_tokens: tuple[str, ...] = Field(default_factory=tuple)  # sorted, distinct
    value_change: tuple[str, str] | None = None  # (old_value, new_value)
    # Identity of the originating record, carried for rendering
    change_type: ChangeType
    entity_type: str
    entity_name: str
    file_path: str


class PatternGroup(BaseModel):
    """A token removed by two or more mechanical changes."""

    model_config = ConfigDict(frozen=True)

    token: str
    member_indices: tuple[int, ...]  # Positions in the categorized batch


class PatternSummary(BaseModel):
    """Pattern groups plus the mechanical changes no group claimed."""

    model_config = ConfigDict(frozen=True)

    groups: tuple[PatternGroup, ...] = Field(default_factory=tuple)
    ungrouped_indices: tuple[int, ...] = Field(default_factory=tuple)


class CodeEntity(BaseModel):
    """A top-level declaration extracted from one version of a file."""

    model_config = ConfigDict(frozen=True)

    entity_type: str  # "function", "class", "variable", "interface", "type", "enum", "file"
    name: str
    content: str  # Source text of the whole declaration
    start_line: int  # 1-indexed
    end_line: int
