"""Command implementations behind the gh-agent CLI."""

from gh_agent.commands.exceptions import (
    CommandError,
    CommentsFileError,
    NoFilesError,
    ReviewValidationError,
)
from gh_agent.commands.pr_commands import (
    build_semantic_engine,
    pr_ast_grep,
    pr_diff,
    pr_file,
    pr_grep,
    pr_review,
    pr_suggest,
    pr_view,
)
from gh_agent.commands.review_validation import (
    build_commentable_export,
    build_suggestion_body,
    commentable_hunks,
    commentable_map,
    load_review_input,
    validate_comments,
)

__all__ = [
    "CommandError",
    "CommentsFileError",
    "NoFilesError",
    "ReviewValidationError",
    "build_commentable_export",
    "build_semantic_engine",
    "build_suggestion_body",
    "commentable_hunks",
    "commentable_map",
    "load_review_input",
    "pr_ast_grep",
    "pr_diff",
    "pr_file",
    "pr_grep",
    "pr_review",
    "pr_suggest",
    "pr_view",
    "validate_comments",
]
