"""Exceptions for text and structural search."""


class SearchError(Exception):
    """Base exception for search operations."""


class PatternError(SearchError):
    """Raised when a structural pattern or language cannot be used."""


class MatcherUnavailableError(SearchError):
    """Raised when the structural search tool cannot be run."""
