"""CLI entry point for gh-agent, an agent-friendly GitHub PR review tool."""
import argparse
from dotenv import load_dotenv
import logging
import sys
import traceback

from gh_agent.analysis.exceptions import AnalysisError
from gh_agent.commands.exceptions import CommandError, CommentsFileError
from gh_agent.config import AgentConfig
from gh_agent.github.exceptions import GitHubError, GitHubInputError
from gh_agent.search.exceptions import SearchError

load_dotenv()

# Exit codes
EXIT_SUCCESS = 0
EXIT_INVALID_INPUT = 1
EXIT_GITHUB_ERROR = 2
EXIT_COMMAND_ERROR = 3
EXIT_SEARCH_ERROR = 4
EXIT_UNEXPECTED = 5
EXIT_KEYBOARD_INTERRUPT = 130

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value}")
    return number


def _add_target_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("number", type=_positive_int, help="PR number")
    parser.add_argument("-r", "--repo", required=True, help="Repository in owner/repo format")


def _add_search_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-f", "--file",
        action="append",
        default=[],
        dest="file_filters",
        help="Filter to files whose path contains this text (repeatable)",
    )
    parser.add_argument(
        "--repo-wide",
        action="store_true",
        help="Also search the default branch via GitHub Code Search",
    )
    parser.add_argument(
        "--path",
        dest="path_prefix",
        default=None,
        help='Path prefix to narrow --repo-wide results (for example: "src/")',
    )
    parser.add_argument("--base", action="store_true", help="Search the base branch instead of head")
    parser.add_argument(
        "--all", dest="include_all", action="store_true",
        help="Include lock/generated/minified files",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--verbose", action="store_true", help="Enable debug logging and tracebacks")

    parser = argparse.ArgumentParser(
        prog="gh-agent",
        description="Agent-friendly GitHub CLI for PR reviews",
    )
    groups = parser.add_subparsers(dest="group", required=True)
    pr = groups.add_parser("pr", help="Pull request operations")
    commands = pr.add_subparsers(dest="command", required=True)

    view = commands.add_parser(
        "view", parents=[common],
        help="PR overview: metadata, file stats, optional semantic summary",
    )
    _add_target_args(view)
    view.add_argument("--sem", action="store_true", help="Append an entity-level semantic summary")
    view.add_argument("--smart", action="store_true", help="Append the categorized triage report")
    view.add_argument("--json", dest="as_json", action="store_true", help="Output as JSON")

    diff = commands.add_parser("diff", parents=[common], help="Line-numbered unified diff")
    _add_target_args(diff)
    diff.add_argument(
        "-f", "--file",
        action="append",
        default=[],
        dest="file_filters",
        help="Filter to files whose path contains this text (repeatable)",
    )
    diff.add_argument(
        "--smart-files", action="store_true",
        help="Only show files with non-mechanical changes",
    )
    diff.add_argument(
        "--all", dest="include_all", action="store_true",
        help="Include lock/generated/minified files",
    )
    diff.add_argument("--stat", action="store_true", help="Only show the stat table")
    diff.add_argument(
        "--json", dest="as_json", action="store_true",
        help="Output the commentable lines of every file as JSON",
    )

    file_cmd = commands.add_parser("file", parents=[common], help="Read a file at the PR head branch")
    _add_target_args(file_cmd)
    file_cmd.add_argument("-p", "--path", required=True, help="File path within the repo")

    review = commands.add_parser(
        "review", parents=[common],
        help="Post batch review comments from a JSON file",
    )
    _add_target_args(review)
    review.add_argument(
        "-c", "--comments-file", required=True,
        help='JSON file: {"body": ..., "comments": [{"path", "line", "body", "start_line"?}]}',
    )

    grep = commands.add_parser("grep", parents=[common], help="Text search across PR files")
    _add_target_args(grep)
    grep.add_argument("-p", "--pattern", required=True, help="Search text (not a regex)")
    _add_search_args(grep)
    grep.add_argument("--case-sensitive", action="store_true", help="Case-sensitive search")
    grep.add_argument(
        "-C", "--context", dest="context_lines", type=int, default=0,
        help="Lines of context around matches (default: 0)",
    )

    ast_grep = commands.add_parser(
        "ast-grep", parents=[common],
        help="Structural search across PR files using ast-grep patterns",
    )
    _add_target_args(ast_grep)
    ast_grep.add_argument(
        "-p", "--pattern", required=True,
        help='ast-grep pattern (for example: "console.log($$$)")',
    )
    _add_search_args(ast_grep)
    ast_grep.add_argument(
        "-l", "--lang", dest="language", default=None,
        help="Language override (detected from the file extension by default)",
    )

    suggest = commands.add_parser(
        "suggest", parents=[common],
        help="Post a suggestion comment (GitHub suggestion block)",
    )
    _add_target_args(suggest)
    suggest.add_argument("-f", "--file", dest="path", required=True, help="File path")
    suggest.add_argument("--line-start", type=_positive_int, required=True, help="First line")
    suggest.add_argument(
        "--line-end", type=_positive_int, required=True,
        help="Last line (same as --line-start for a single line)",
    )
    suggest.add_argument("--replacement", required=True, help="Replacement code")

    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


def run_command(client, args: argparse.Namespace) -> str:
    """Dispatch parsed arguments to a command and return its output."""
    # Deferred so --help does not pay for importing the command stack
    from gh_agent.commands import pr_commands

    if args.command == "view":
        return pr_commands.pr_view(
            client, args.repo, args.number,
            sem=args.sem, smart=args.smart, as_json=args.as_json,
        )
    if args.command == "diff":
        return pr_commands.pr_diff(
            client, args.repo, args.number,
            file_filters=args.file_filters,
            smart_files=args.smart_files,
            include_all=args.include_all,
            stat=args.stat,
            as_json=args.as_json,
        )
    if args.command == "file":
        return pr_commands.pr_file(client, args.repo, args.number, args.path)
    if args.command == "review":
        return pr_commands.pr_review(client, args.repo, args.number, args.comments_file)
    if args.command == "suggest":
        return pr_commands.pr_suggest(
            client, args.repo, args.number,
            args.path, args.line_start, args.line_end, args.replacement,
        )
    if args.command == "grep":
        return pr_commands.pr_grep(
            client, args.repo, args.number, args.pattern,
            file_filters=args.file_filters,
            repo_wide=args.repo_wide,
            path_prefix=args.path_prefix,
            use_base=args.base,
            case_sensitive=args.case_sensitive,
            context_lines=args.context_lines,
            include_all=args.include_all,
        )
    if args.command == "ast-grep":
        return pr_commands.pr_ast_grep(
            client, args.repo, args.number, args.pattern,
            file_filters=args.file_filters,
            repo_wide=args.repo_wide,
            path_prefix=args.path_prefix,
            use_base=args.base,
            language=args.language,
            include_all=args.include_all,
        )
    raise CommandError(f"Unknown command: {args.command}")


def create_client(config: AgentConfig):
    from gh_agent.github.client import GitHubClient

    return GitHubClient(config)


def _handle_error(label: str, exc: BaseException, verbose: bool, exit_code: int) -> int:
    """Print error message to stderr and return the exit code."""
    print(f"{label}: {exc}", file=sys.stderr)
    if verbose:
        traceback.print_exc(file=sys.stderr)
    return exit_code


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:]).

    Returns:
        Exit code integer.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = AgentConfig.from_env()
        with create_client(config) as client:
            output = run_command(client, args)
        print(output)
        return EXIT_SUCCESS

    except (GitHubInputError, CommentsFileError) as exc:
        return _handle_error("Invalid input", exc, args.verbose, EXIT_INVALID_INPUT)

    except GitHubError as exc:
        return _handle_error("GitHub error", exc, args.verbose, EXIT_GITHUB_ERROR)

    except (CommandError, AnalysisError) as exc:
        return _handle_error("Command error", exc, args.verbose, EXIT_COMMAND_ERROR)

    except SearchError as exc:
        return _handle_error("Search error", exc, args.verbose, EXIT_SEARCH_ERROR)

    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_KEYBOARD_INTERRUPT

    except Exception as exc:
        return _handle_error("Unexpected error", exc, args.verbose, EXIT_UNEXPECTED)
