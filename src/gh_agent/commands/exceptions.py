"""Exceptions for gh-agent commands."""


class CommandError(Exception):
    """Base exception for command failures."""


class ReviewValidationError(CommandError):
    """Raised when no proposed comment lands on a commentable line."""


class CommentsFileError(CommandError):
    """Raised when the comments file cannot be read or parsed."""


class NoFilesError(CommandError):
    """Raised when a command has no files left to work on."""
