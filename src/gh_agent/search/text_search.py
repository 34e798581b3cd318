"""Plain substring search over fetched file contents."""

from gh_agent.models.report_models import SearchMatch


def grep_files(
    files: list[tuple[str, str]],
    pattern: str,
    case_sensitive: bool = False,
    context_lines: int = 0,
) -> list[SearchMatch]:
    """Find lines containing `pattern`.

    Args:
        files: (path, content) pairs, searched in order.
        pattern: Literal substring (not a regex).
        case_sensitive: Match case exactly when True.
        context_lines: Lines of context kept before and after each hit.

    Returns:
        One SearchMatch per matching line, column of the first occurrence.
    """
    needle = pattern if case_sensitive else pattern.lower()
    matches: list[SearchMatch] = []

    for path, content in files:
        lines = content.splitlines()
        for i, line in enumerate(lines):
            haystack = line if case_sensitive else line.lower()
            column = haystack.find(needle)
            if column < 0:
                continue
            start = max(0, i - context_lines)
            end = min(len(lines), i + context_lines + 1)
            matches.append(SearchMatch(
                file=path,
                line=i + 1,
                column=column + 1,
                text=line,
                context_before=tuple(lines[start:i]),
                context_after=tuple(lines[i + 1:end]),
            ))
    return matches


def grep_fragment(
    path: str,
    fragment: str,
    pattern: str,
    case_sensitive: bool = False,
) -> list[SearchMatch]:
    """Search a Code Search text fragment.

    Fragment line numbers are relative to the fragment, not the file.
    """
    return grep_files([(path, fragment)], pattern, case_sensitive)


def extract_search_keyword(pattern: str) -> str:
    """Pick a plain-text keyword from an ast-grep pattern for Code Search.

    Takes the text before the first meta-variable ("$"), minus a trailing
    "(". Falls back to the first word of the pattern.
    """
    end = pattern.find("$")
    keyword = (pattern if end < 0 else pattern[:end]).strip().rstrip("(")
    if keyword:
        return keyword
    words = pattern.split()
    return words[0] if words else pattern
