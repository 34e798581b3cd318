"""Exceptions for change analysis."""


class AnalysisError(Exception):
    """Base exception for change analysis."""


class GitSourceError(AnalysisError):
    """Raised when changed files cannot be read from the local git clone."""


class SemanticDiffError(AnalysisError):
    """Raised when an external semantic-diff command fails or returns bad output."""
