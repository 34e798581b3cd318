"""Exceptions for GitHub API access."""


class GitHubError(Exception):
    """Base exception for all GitHub operations."""


class GitHubAuthError(GitHubError):
    """Raised when no GitHub token can be found."""


class GitHubInputError(GitHubError):
    """Raised when repository or PR input values are invalid."""


class GitHubApiError(GitHubError):
    """Raised when a GitHub API request returns a non-success status."""

    def __init__(self, message: str, *, status_code: int, endpoint: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.endpoint = endpoint


class GraphQLError(GitHubError):
    """Raised when a GraphQL response carries errors or no data."""
