"""Read changed files between two branches from a local git clone."""

import subprocess
from pathlib import Path

from gh_agent.analysis.exceptions import GitSourceError
from gh_agent.models.change_models import FileChange

_STATUS_MAP = {
    "A": "added",
    "D": "removed",
    "M": "modified",
    "R": "renamed",
    "C": "added",
    "T": "modified",
}


def _git(args: list[str], cwd: str | Path) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
        )
    except OSError as exc:
        raise GitSourceError(f"Failed to run git: {exc}") from exc


def merge_base(base_ref: str, head_ref: str, cwd: str | Path = ".") -> str:
    """Return the merge base of origin/<base_ref> and origin/<head_ref>.

    Raises:
        GitSourceError: If cwd is not a git clone or the refs are unknown.
    """
    origin_base = f"origin/{base_ref}"
    origin_head = f"origin/{head_ref}"
    result = _git(["merge-base", origin_base, origin_head], cwd)
    if result.returncode != 0:
        raise GitSourceError(
            f"Cannot find merge base between {origin_base} and {origin_head}. "
            "Try `git fetch origin` first."
        )
    return result.stdout.decode("utf-8").strip()


def parse_name_status(output: str) -> list[tuple[str, str, str | None]]:
    """Parse `git diff --name-status` output into (status, path, old_path)."""
    entries = []
    for line in output.splitlines():
        parts = line.split("\t")
        if len(parts) < 2 or not parts[0]:
            continue
        status = _STATUS_MAP.get(parts[0][0], "modified")
        if parts[0][0] in ("R", "C") and len(parts) >= 3:
            entries.append((status, parts[2], parts[1] if status == "renamed" else None))
        else:
            entries.append((status, parts[1], None))
    return entries


def show_file(ref: str, path: str, cwd: str | Path = ".") -> str | None:
    """Return file content at ref, or None when it cannot be read."""
    result = _git(["show", f"{ref}:{path}"], cwd)
    if result.returncode != 0:
        return None
    try:
        return result.stdout.decode("utf-8")
    except UnicodeDecodeError:
        return None


def collect_file_changes(base_ref: str, head_ref: str, cwd: str | Path = ".") -> list[FileChange]:
    """Changed files of a PR branch, read from the local clone.

    Raises:
        GitSourceError: If the merge base or the diff cannot be computed.
    """
    base_sha = merge_base(base_ref, head_ref, cwd)
    origin_head = f"origin/{head_ref}"
    result = _git(["diff", "--name-status", "-M", base_sha, origin_head], cwd)
    if result.returncode != 0:
        raise GitSourceError(
            f"git diff failed: {result.stderr.decode('utf-8', errors='replace').strip()}"
        )

    changes = []
    for status, path, old_path in parse_name_status(result.stdout.decode("utf-8")):
        before = None if status == "added" else show_file(base_sha, old_path or path, cwd)
        after = None if status == "removed" else show_file(origin_head, path, cwd)
        changes.append(FileChange(
            file_path=path,
            status=status,
            old_file_path=old_path,
            before_content=before,
            after_content=after,
        ))
    return changes
