"""Structural (AST) search delegated to the ast-grep command-line tool."""

import json
import logging
import shutil
import subprocess
from typing import Any, Protocol

from gh_agent.models.report_models import SearchMatch
from gh_agent.search.exceptions import MatcherUnavailableError, PatternError
from gh_agent.utils.ast_parser import get_language_for_file, resolve_language

logger = logging.getLogger(__name__)

AST_GREP_BINARIES = ("ast-grep", "sg")


class StructuralMatcher(Protocol):
    """Anything that can run a structural pattern over in-memory files."""

    def find_matches(
        self,
        files: list[tuple[str, str]],
        pattern: str,
        language: str | None = None,
    ) -> list[SearchMatch]:
        ...


def parse_ast_grep_output(path: str, output: str) -> list[SearchMatch]:
    """Convert `ast-grep --json` output for one file into SearchMatches.

    ast-grep reports 0-indexed positions; SearchMatch is 1-indexed.
    """
    if not output.strip():
        return []
    items: list[dict[str, Any]] = json.loads(output)
    matches = []
    for item in items:
        start = item.get("range", {}).get("start", {})
        matches.append(SearchMatch(
            file=path,
            line=int(start.get("line", 0)) + 1,
            column=int(start.get("column", 0)) + 1,
            text=item.get("text", ""),
        ))
    return matches


class AstGrepMatcher:
    """Runs `ast-grep run --stdin` once per file.

    Files whose language cannot be inferred from the extension are skipped
    unless a language override is given.
    """

    def __init__(self, binary: str | None = None, timeout_seconds: float = 60) -> None:
        self._binary = binary
        self.timeout_seconds = timeout_seconds

    @property
    def binary(self) -> str:
        if self._binary is None:
            found = next((b for b in AST_GREP_BINARIES if shutil.which(b)), None)
            if found is None:
                raise MatcherUnavailableError(
                    "ast-grep not found on PATH. Install it from https://ast-grep.github.io/"
                )
            self._binary = found
        return self._binary

    def _run(self, content: str, pattern: str, language: str) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                [
                    self.binary, "run",
                    "--pattern", pattern,
                    "--lang", language,
                    "--stdin",
                    "--json=compact",
                ],
                input=content.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout_seconds,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise MatcherUnavailableError(f"Failed to run {self.binary}: {exc}") from exc

    def find_matches(
        self,
        files: list[tuple[str, str]],
        pattern: str,
        language: str | None = None,
    ) -> list[SearchMatch]:
        override = resolve_language(language) if language else None
        matches: list[SearchMatch] = []

        for path, content in files:
            file_language = override or get_language_for_file(path)
            if file_language is None:
                logger.debug("skipping %s: unknown language", path)
                continue

            result = self._run(content, pattern, file_language)
            if result.returncode != 0:
                stderr = result.stderr.decode("utf-8", errors="replace").strip()
                # ast-grep exits 1 with empty stderr when nothing matched
                if not stderr:
                    continue
                raise PatternError(
                    f"Invalid ast-grep pattern for language {file_language}: {stderr}"
                )
            try:
                matches.extend(parse_ast_grep_output(path, result.stdout.decode("utf-8")))
            except (ValueError, AttributeError) as exc:
                raise PatternError(f"Unexpected ast-grep output for {path}: {exc}") from exc

        return matches
