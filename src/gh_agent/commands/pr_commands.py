"""Implementation of the `gh-agent pr` subcommands.

Every command returns the text destined for stdout; progress notes and
warnings are written to stderr as they happen.
"""

import json
import logging
import sys
from pathlib import Path

from gh_agent.analysis.exceptions import GitSourceError, SemanticDiffError
from gh_agent.analysis.git_source import collect_file_changes
from gh_agent.analysis.semantic_diff import (
    DeclarationSemanticDiff,
    ExternalSemanticDiff,
    SemanticDiffEngine,
    file_changes_from_pairs,
)
from gh_agent.analysis.smart_review import (
    format_semantic_summary,
    smart_files_from_pairs,
    smart_review_from_pairs,
)
from gh_agent.commands.exceptions import CommandError, NoFilesError, ReviewValidationError
from gh_agent.commands.review_validation import (
    build_commentable_export,
    build_suggestion_body,
    commentable_hunks,
    load_review_input,
    validate_comments,
)
from gh_agent.config import AgentConfig
from gh_agent.github.client import GitHubClient
from gh_agent.models.github_models import CreateReview, PrFile, PullRequest, ReviewCommentInput
from gh_agent.models.report_models import SearchMatch
from gh_agent.search.structural_search import AstGrepMatcher, StructuralMatcher
from gh_agent.search.text_search import extract_search_keyword, grep_files, grep_fragment
from gh_agent.utils.formatting import (
    format_line_numbered_diff,
    format_matches,
    format_metadata,
    format_stat_table,
)
from gh_agent.utils.noise_filter import NoiseRules, filter_noise

logger = logging.getLogger(__name__)

SUGGESTION_REVIEW_BODY = "Suggestion from gh-agent"


def _note(message: str) -> None:
    print(message, file=sys.stderr)


def _to_json(value: object) -> str:
    return json.dumps(value, indent=2, ensure_ascii=False)


def build_semantic_engine(config: AgentConfig) -> SemanticDiffEngine:
    """External engine when GH_AGENT_SEM_COMMAND is set, else the built-in one."""
    if config.sem_command:
        return ExternalSemanticDiff(config.sem_command)
    return DeclarationSemanticDiff()


def _matches_filters(path: str, file_filters: list[str]) -> bool:
    return any(f in path for f in file_filters)


def _search_paths(
    pr: PullRequest,
    file_filters: list[str],
    include_all: bool,
    rules: NoiseRules,
) -> list[str]:
    """PR file paths after substring filters and the noise filter."""
    paths = [f.filename for f in pr.files]
    if file_filters:
        paths = [p for p in paths if _matches_filters(p, file_filters)]
    if not include_all:
        paths, _ = filter_noise(paths, rules)
    return paths


# ---------------------------------------------------------------------------
# view / diff / file
# ---------------------------------------------------------------------------


def _pr_view_json(pr: PullRequest) -> str:
    return _to_json({
        "number": pr.number,
        "title": pr.title,
        "body": pr.body,
        "state": pr.state,
        "head_sha": pr.head_sha,
        "head_ref": pr.head_ref,
        "base_ref": pr.base_ref,
        "additions": pr.additions,
        "deletions": pr.deletions,
        "changed_files": pr.changed_files,
        "files": [
            {
                "path": f.filename,
                "status": f.status,
                "additions": f.additions,
                "deletions": f.deletions,
            }
            for f in pr.files
        ],
    })


def _semantic_summary(
    client: GitHubClient,
    repo: str,
    pr: PullRequest,
    files: list[PrFile],
    engine: SemanticDiffEngine,
    cwd: str | Path,
) -> str:
    """Entity-level summary, preferring the local clone over API fetches."""
    try:
        changes = collect_file_changes(pr.base_ref, pr.head_ref, cwd)
    except GitSourceError as exc:
        _note(f"sem: {exc}")
        _note("sem: fetching file contents from GitHub API...")
        pairs = client.get_file_pairs(repo, files, pr.base_ref, pr.head_ref)
        changes = file_changes_from_pairs(pairs)

    result = engine.diff(changes)
    if not result.changes:
        return "No semantic changes found."
    return format_semantic_summary(result)


def pr_view(
    client: GitHubClient,
    repo: str,
    number: int,
    sem: bool = False,
    smart: bool = False,
    as_json: bool = False,
    rules: NoiseRules | None = None,
    engine: SemanticDiffEngine | None = None,
    cwd: str | Path = ".",
) -> str:
    """PR overview: metadata, file stats and an optional semantic section.

    `smart` takes precedence over `sem` when both are given.
    """
    rules = rules or NoiseRules.default()
    pr = client.get_pr(repo, number)
    if as_json:
        return _pr_view_json(pr)

    visible = [f for f in pr.files if not rules.is_noise(f.filename)]
    noise_count = len(pr.files) - len(visible)

    out = [format_metadata(pr), "", format_stat_table(visible)]
    if noise_count:
        _note(f"({noise_count} noise files hidden: lock/generated/minified)")

    if smart or sem:
        engine = engine or build_semantic_engine(client.config)
        out.append("")
        if smart:
            _note("smart: fetching file contents from GitHub API...")
            pairs = client.get_file_pairs(repo, visible, pr.base_ref, pr.head_ref)
            out.append(smart_review_from_pairs(pairs, engine))
        else:
            out.append(_semantic_summary(client, repo, pr, visible, engine, cwd))

    return "\n".join(out)


def _smart_file_list(
    client: GitHubClient,
    repo: str,
    pr: PullRequest,
    engine: SemanticDiffEngine,
) -> list[str]:
    _note("smart: fetching file contents from GitHub API...")
    pairs = client.get_file_pairs(repo, pr.files, pr.base_ref, pr.head_ref)
    try:
        smart_list = smart_files_from_pairs(pairs, engine)
    except SemanticDiffError as exc:
        logger.debug("smart file selection failed: %s", exc)
        _note("smart: sem analysis failed, showing all files")
        return []
    _note(f"smart: filtering to {len(smart_list)} files (skipped mechanical)")
    return smart_list


def pr_diff(
    client: GitHubClient,
    repo: str,
    number: int,
    file_filters: list[str] | None = None,
    smart_files: bool = False,
    include_all: bool = False,
    stat: bool = False,
    as_json: bool = False,
    rules: NoiseRules | None = None,
    engine: SemanticDiffEngine | None = None,
) -> str:
    """Line-numbered diff, stat table or commentable-lines export.

    Raises:
        NoFilesError: If explicit file filters match no changed file.
    """
    rules = rules or NoiseRules.default()
    file_filters = file_filters or []
    pr = client.get_pr_with_patches(repo, number)

    smart_list: list[str] = []
    if smart_files and not file_filters:
        smart_list = _smart_file_list(
            client, repo, pr, engine or build_semantic_engine(client.config)
        )

    if file_filters:
        files = [f for f in pr.files if _matches_filters(f.filename, file_filters)]
        if not files:
            raise NoFilesError(
                f"No changed files match: {', '.join(file_filters)}"
            )
    elif smart_list:
        wanted = set(smart_list)
        files = [f for f in pr.files if f.filename in wanted]
    else:
        files = list(pr.files)

    if not include_all:
        visible = [f for f in files if not rules.is_noise(f.filename)]
        skipped = len(files) - len(visible)
        files = visible
        if skipped:
            _note(
                f"skipped {skipped} noise files (lock/generated/minified). "
                "Use --all to include."
            )

    if as_json:
        return build_commentable_export(files).model_dump_json(indent=2)
    if stat:
        return format_stat_table(files)
    return "\n\n".join(format_line_numbered_diff(f) for f in files)


def pr_file(client: GitHubClient, repo: str, number: int, path: str) -> str:
    """File content at the PR head branch as JSON `{path, content, lines}`."""
    pr = client.get_pr(repo, number)
    content = client.get_file_content(repo, path, pr.head_ref)
    return _to_json({
        "path": path,
        "content": content,
        "lines": len(content.splitlines()),
    })


# ---------------------------------------------------------------------------
# review / suggest
# ---------------------------------------------------------------------------


def pr_review(
    client: GitHubClient,
    repo: str,
    number: int,
    comments_file: str | Path,
) -> str:
    """Validate a comments file against the diff and post one review.

    Raises:
        CommentsFileError: If the comments file is unreadable.
        ReviewValidationError: If no comment survives validation.
    """
    review_input = load_review_input(comments_file)
    pr = client.get_pr_with_patches(repo, number)

    validation = validate_comments(review_input.comments, commentable_hunks(pr.files))
    if validation.warnings:
        _note("Validation warnings:")
        for warning in validation.warnings:
            _note(f"  {warning}")

    if not validation.valid_comments:
        raise ReviewValidationError("No valid comments to post after validation")

    response = client.create_review(repo, number, CreateReview(
        commit_id=pr.head_sha,
        body=review_input.body,
        comments=validation.valid_comments,
    ))
    return _to_json({"id": response.id, "url": response.html_url})


def pr_suggest(
    client: GitHubClient,
    repo: str,
    number: int,
    path: str,
    line_start: int,
    line_end: int,
    replacement: str,
) -> str:
    """Post a single suggestion comment replacing lines line_start..line_end."""
    if line_start > line_end:
        raise CommandError(
            f"--line-start ({line_start}) must not be after --line-end ({line_end})"
        )
    pr = client.get_pr(repo, number)
    comment = ReviewCommentInput(
        path=path,
        line=line_end,
        body=build_suggestion_body(replacement),
        start_line=None if line_start == line_end else line_start,
    )
    response = client.create_review(repo, number, CreateReview(
        commit_id=pr.head_sha,
        body=SUGGESTION_REVIEW_BODY,
        comments=[comment],
    ))
    return _to_json({"id": response.id, "url": response.html_url})


# ---------------------------------------------------------------------------
# grep / ast-grep
# ---------------------------------------------------------------------------


def pr_grep(
    client: GitHubClient,
    repo: str,
    number: int,
    pattern: str,
    file_filters: list[str] | None = None,
    repo_wide: bool = False,
    path_prefix: str | None = None,
    use_base: bool = False,
    case_sensitive: bool = False,
    context_lines: int = 0,
    include_all: bool = False,
    rules: NoiseRules | None = None,
) -> str:
    """Substring search over PR files, optionally widened with Code Search.

    Code Search only covers the default branch, so files changed in the PR
    are always read at the PR ref and their Code Search hits are ignored.
    """
    rules = rules or NoiseRules.default()
    pr = client.get_pr(repo, number)
    ref = pr.base_ref if use_base else pr.head_ref
    paths = _search_paths(pr, file_filters or [], include_all, rules)

    _note(f"Fetching {len(paths)} PR files at {ref}...")
    files = client.fetch_file_contents(repo, paths, ref)
    matches = grep_files(files, pattern, case_sensitive, context_lines)

    if repo_wide:
        _note("Searching codebase via GitHub Code Search...")
        results = client.search_code(repo, pattern, path_prefix)
        _note(f"Code Search: {results.total_count} results from default branch")

        pr_paths = set(paths)
        for item in results.items:
            if item.path in pr_paths:
                continue
            if not include_all and rules.is_noise(item.path):
                continue
            for text_match in item.text_matches or []:
                matches.extend(
                    grep_fragment(item.path, text_match.fragment, pattern, case_sensitive)
                )

    return format_matches(matches)


def pr_ast_grep(
    client: GitHubClient,
    repo: str,
    number: int,
    pattern: str,
    file_filters: list[str] | None = None,
    repo_wide: bool = False,
    path_prefix: str | None = None,
    use_base: bool = False,
    language: str | None = None,
    include_all: bool = False,
    rules: NoiseRules | None = None,
    matcher: StructuralMatcher | None = None,
) -> str:
    """Structural search over PR files, optionally widened with Code Search.

    With `repo_wide`, a plain keyword taken from the pattern selects extra
    candidate files from Code Search; those are then fetched at the PR ref
    and matched structurally like the PR's own files.
    """
    rules = rules or NoiseRules.default()
    matcher = matcher or AstGrepMatcher(binary=client.config.ast_grep_binary)
    pr = client.get_pr(repo, number)
    ref = pr.base_ref if use_base else pr.head_ref
    paths = _search_paths(pr, file_filters or [], include_all, rules)

    if repo_wide:
        keyword = extract_search_keyword(pattern)
        _note(f"Searching codebase for '{keyword}' via GitHub Code Search...")
        results = client.search_code(repo, keyword, path_prefix)
        _note(f"Code Search: {results.total_count} candidate files from default branch")
        extra = [
            item.path
            for item in results.items
            if include_all or not rules.is_noise(item.path)
        ]
        paths = sorted(set(paths) | set(extra))

    if not paths:
        return "No files to search."

    _note(f"Fetching {len(paths)} files at {ref}...")
    files = client.fetch_file_contents(repo, paths, ref)
    if not files:
        return "No readable files found."

    matches: list[SearchMatch] = matcher.find_matches(files, pattern, language)
    return format_matches(matches)
