"""Utilities for parsing unified diffs and deriving commentable lines."""

import re

from gh_agent.models.diff_models import DiffHunk, DiffLine, LineKind

HUNK_HEADER_PATTERN = re.compile(
    r"^@@ -(?P<old_start>\d+)(?:,(?P<old_count>\d+))? "
    r"\+(?P<new_start>\d+)(?:,(?P<new_count>\d+))? @@"
)

# Lines that describe the diff rather than the file and never become DiffLines
_METADATA_PREFIXES = (
    "\\",  # "\ No newline at end of file"
    "+++",
    "---",
    "diff --git ",
    "index ",
    "new file mode",
    "deleted file mode",
    "old mode",
    "new mode",
    "similarity index",
    "dissimilarity index",
    "rename from",
    "rename to",
    "copy from",
    "copy to",
    "Binary files",
)

# Per-file header lines dropped when splitting a multi-file diff
_FILE_HEADER_PREFIXES = (
    "--- ",
    "+++ ",
    "index ",
    "new file",
    "deleted file",
    "old mode",
    "new mode",
    "similarity",
    "rename ",
)


def parse_hunk_header(line: str) -> tuple[int, int, int, int] | None:
    """Parse "@@ -O[,OC] +N[,NC] @@" into (O, OC, N, NC).

    Omitted counts default to 1. Returns None when the line is not a valid header.
    """
    match = HUNK_HEADER_PATTERN.match(line)
    if match is None:
        return None
    old_count = match.group("old_count")
    new_count = match.group("new_count")
    return (
        int(match.group("old_start")),
        int(old_count) if old_count is not None else 1,
        int(match.group("new_start")),
        int(new_count) if new_count is not None else 1,
    )


def parse_patch(patch: str | None) -> list[DiffHunk]:
    """Parse the unified diff of one file into line-numbered hunks.

    Never raises: an empty or missing patch yields no hunks, and body lines
    following a malformed "@@" header are skipped until the next valid header.
    File headers and other metadata are only recognized between hunks: a
    line such as "+++i;" inside a hunk that still owes lines is an addition.

    Args:
        patch: Raw patch text for exactly one file (GitHub "patch" field or
            one file's section of a git diff).

    Returns:
        Hunks in source order.
    """
    if not patch:
        return []

    hunks: list[DiffHunk] = []
    header: str | None = None
    bounds: tuple[int, int, int, int] | None = None
    lines: list[DiffLine] = []
    old_line = 0
    new_line = 0
    old_end = 0
    new_end = 0

    def close_hunk() -> None:
        if header is not None and bounds is not None:
            old_start, old_count, new_start, new_count = bounds
            hunks.append(DiffHunk(
                header=header,
                old_start=old_start,
                old_count=old_count,
                new_start=new_start,
                new_count=new_count,
                lines=tuple(lines),
            ))

    for raw_line in patch.splitlines():
        if raw_line.startswith("@@"):
            close_hunk()
            lines = []
            bounds = parse_hunk_header(raw_line)
            if bounds is None:
                # Malformed header: ignore everything up to the next valid one
                header = None
                continue
            header = raw_line
            old_line, new_line = bounds[0], bounds[2]
            old_end, new_end = bounds[0] + bounds[1], bounds[2] + bounds[3]
            continue

        if raw_line.startswith("diff --git "):
            close_hunk()
            header, bounds, lines = None, None, []
            continue

        if header is None or raw_line.startswith("\\"):
            continue
        # While the header still owes lines, "+++ x" and "--- x" are body lines
        owed = old_line < old_end or new_line < new_end
        if not owed and raw_line.startswith(_METADATA_PREFIXES):
            continue

        if raw_line.startswith("+"):
            lines.append(DiffLine(kind=LineKind.ADD, content=raw_line[1:], new_line=new_line))
            new_line += 1
        elif raw_line.startswith("-"):
            lines.append(DiffLine(kind=LineKind.DELETE, content=raw_line[1:], old_line=old_line))
            old_line += 1
        else:
            content = raw_line[1:] if raw_line.startswith(" ") else raw_line
            lines.append(DiffLine(
                kind=LineKind.CONTEXT,
                content=content,
                old_line=old_line,
                new_line=new_line,
            ))
            old_line += 1
            new_line += 1

    close_hunk()
    return hunks


def commentable_lines(hunks: list[DiffHunk]) -> set[int]:
    """Return the new-file line numbers an inline comment may target.

    Every ADD and CONTEXT line contributes its new-file number; DELETE lines
    have no new-file position and contribute nothing.
    """
    result: set[int] = set()
    for hunk in hunks:
        for line in hunk.lines:
            match line.kind:
                case LineKind.ADD | LineKind.CONTEXT:
                    if line.new_line is not None:
                        result.add(line.new_line)
                case LineKind.DELETE:
                    pass
    return result


def split_raw_diff(raw: str) -> dict[str, str]:
    """Split a multi-file `git diff` into {new_path: patch}.

    The patch of each file keeps its hunk headers and body lines only, the
    same shape GitHub returns in the per-file "patch" field.
    """
    patches: dict[str, str] = {}
    current_file: str | None = None
    current_lines: list[str] = []

    def flush() -> None:
        if current_file is not None and current_lines:
            patches[current_file] = "\n".join(current_lines)

    for line in raw.splitlines():
        if line.startswith("diff --git "):
            flush()
            current_file = None
            current_lines = []
        elif current_lines:
            # Inside the hunks: "--- x" here is a deleted line, not a header
            current_lines.append(line)
        elif line.startswith("+++ b/"):
            current_file = line[len("+++ b/"):]
        elif current_file is None:
            continue
        elif line.startswith("@@") or not line.startswith(_FILE_HEADER_PREFIXES):
            current_lines.append(line)

    flush()
    return patches
