"""Terminal renderers for PR metadata, diffs and search results."""

from gh_agent.models.diff_models import DiffHunk, LineKind
from gh_agent.models.github_models import PrFile, PullRequest
from gh_agent.models.report_models import SearchMatch
from gh_agent.utils.diff_parser import parse_patch


def format_metadata(pr: PullRequest) -> str:
    """Header block for `pr view`."""
    return (
        f"#{pr.number} {pr.title}  [{pr.state}]\n"
        f"{pr.base_ref} ← {pr.head_ref}  +{pr.additions} -{pr.deletions}  "
        f"{pr.changed_files} files"
    )


def format_stat_table(files: list[PrFile]) -> str:
    return "\n".join(
        f" {f.status:>9}  {f.additions:>+4} {-f.deletions:>-4}  {f.filename}"
        for f in files
    )


def format_hunk(hunk: DiffHunk) -> str:
    lines = [hunk.header]
    for line in hunk.lines:
        match line.kind:
            case LineKind.ADD:
                lines.append(f"{line.new_line or 0:>4} | +{line.content}")
            case LineKind.DELETE:
                lines.append(f"     | -{line.content}")
            case LineKind.CONTEXT:
                lines.append(f"{line.new_line or 0:>4} |  {line.content}")
    return "\n".join(lines)


def format_line_numbered_diff(file: PrFile) -> str:
    """Unified diff of one file with new-file line numbers in a gutter."""
    if file.status == "removed":
        return f"deleted: {file.filename} ({file.deletions} lines)"

    header = f"--- a/{file.filename}\n+++ b/{file.filename}"
    hunks = parse_patch(file.patch)
    if not hunks:
        return f"{header}\n(no diff)"
    return "\n".join([header, *(format_hunk(hunk) for hunk in hunks)])


def format_matches(matches: list[SearchMatch]) -> str:
    """grep-style listing: `path:line:text`, context as `path:line- text`."""
    if not matches:
        return "No matches found."

    lines: list[str] = []
    last_file = None
    for m in matches:
        if m.file != last_file:
            if lines:
                lines.append("")
            last_file = m.file

        first_context_line = m.line - len(m.context_before)
        for offset, text in enumerate(m.context_before):
            lines.append(f"{m.file}:{first_context_line + offset}- {text}")
        lines.append(f"{m.file}:{m.line}:{m.text}")
        for offset, text in enumerate(m.context_after):
            lines.append(f"{m.file}:{m.line + 1 + offset}- {text}")

    file_count = len({m.file for m in matches})
    lines.append(f"\n{len(matches)} matches across {file_count} files")
    return "\n".join(lines)
