"""Checks proposed review comments against the lines GitHub will accept."""

import json
from pathlib import Path

from pydantic import ValidationError

from gh_agent.commands.exceptions import CommentsFileError
from gh_agent.models.github_models import PrFile, ReviewCommentInput, ReviewInput
from gh_agent.models.report_models import CommentableLinesExport, ReviewValidation
from gh_agent.utils.diff_parser import commentable_lines, parse_patch


def commentable_map(files: list[PrFile]) -> dict[str, set[int]]:
    """Commentable new-file lines for every changed file, keyed by path."""
    return {f.filename: commentable_lines(parse_patch(f.patch)) for f in files}


def commentable_hunks(files: list[PrFile]) -> dict[str, list[set[int]]]:
    """Commentable new-file lines of each hunk, per changed file.

    A ranged comment must stay inside one hunk, so validation needs the
    hunk boundaries that `commentable_map` flattens away.
    """
    return {
        f.filename: [commentable_lines([hunk]) for hunk in parse_patch(f.patch)]
        for f in files
    }


def build_commentable_export(files: list[PrFile]) -> CommentableLinesExport:
    return CommentableLinesExport(
        files={path: sorted(lines) for path, lines in commentable_map(files).items()}
    )


def validate_comments(
    comments: list[ReviewCommentInput],
    commentable: dict[str, list[set[int]]],
) -> ReviewValidation:
    """Split comments into postable ones and operator warnings.

    A comment is postable when its file is part of the PR and every line it
    touches on the new side (`line`, plus `start_line` for a span) is in the
    file's current diff, with both ends of a span in the same hunk. A
    `start_line` equal to `line` is dropped so the comment posts as a
    single-line one. Failures never abort the batch.
    """
    validation = ReviewValidation()

    for comment in comments:
        hunks = commentable.get(comment.path)
        if hunks is None:
            validation.warnings.append(
                f"SKIP: {comment.path} is not a changed file in this PR"
            )
            continue

        if comment.start_line is not None and comment.start_line > comment.line:
            validation.warnings.append(
                f"SKIP: {comment.path}:{comment.start_line}-{comment.line} "
                "has start_line after line"
            )
            continue

        bad_line = next(
            (
                n for n in (comment.start_line, comment.line)
                if n is not None and not any(n in lines for lines in hunks)
            ),
            None,
        )
        if bad_line is not None:
            validation.warnings.append(
                f"SKIP: {comment.path}:{bad_line} is not a commentable line (not in diff)"
            )
            continue

        if comment.start_line == comment.line:
            comment = comment.model_copy(update={"start_line": None})
        elif comment.start_line is not None and not any(
            comment.start_line in lines and comment.line in lines for lines in hunks
        ):
            validation.warnings.append(
                f"SKIP: {comment.path}:{comment.start_line}-{comment.line} "
                "spans more than one hunk"
            )
            continue

        validation.valid_comments.append(comment)

    return validation


def build_suggestion_body(replacement: str) -> str:
    """GitHub suggestion block holding `replacement` verbatim."""
    return f"```suggestion\n{replacement}\n```"


def load_review_input(comments_file: str | Path) -> ReviewInput:
    """Read a `{body?, comments: [...]}` comments file.

    Raises:
        CommentsFileError: If the file is missing or not valid review JSON.
    """
    path = Path(comments_file)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise CommentsFileError(f"Failed to read {comments_file}: {exc}") from exc
    try:
        return ReviewInput.model_validate(json.loads(raw))
    except (json.JSONDecodeError, ValidationError) as exc:
        raise CommentsFileError(f"Failed to parse {comments_file}: {exc}") from exc
