"""Text and structural search over pull request files."""

from gh_agent.search.exceptions import MatcherUnavailableError, PatternError, SearchError
from gh_agent.search.structural_search import AstGrepMatcher, StructuralMatcher
from gh_agent.search.text_search import extract_search_keyword, grep_files, grep_fragment

__all__ = [
    "AstGrepMatcher",
    "MatcherUnavailableError",
    "PatternError",
    "SearchError",
    "StructuralMatcher",
    "extract_search_keyword",
    "grep_files",
    "grep_fragment",
]
