"""Models for representing parsed unified diffs."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class LineKind(str, Enum):
    """Kind of a single line inside a diff hunk."""

    CONTEXT = "context"
    ADD = "add"
    DELETE = "delete"


class DiffLine(BaseModel):
    """One body line of a hunk with its old/new file line numbers."""

    model_config = ConfigDict(frozen=True)

    kind: LineKind
    content: str  # Line text without the +/-/space prefix
    old_line: int | None = None  # Absent for ADD
    new_line: int | None = None  # Absent for DELETE


class DiffHunk(BaseModel):
    """One contiguous block of a unified diff."""

    model_config = ConfigDict(frozen=True)

    header: str  # Raw "@@ -O,OC +N,NC @@ ..." line
    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[DiffLine, ...] = Field(default_factory=tuple)
