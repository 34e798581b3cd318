"""Entity-level semantic diff over before/after file contents."""

import json
import logging
import shlex
import subprocess
from typing import Any, Protocol

from pydantic import ValidationError

from gh_agent.analysis.exceptions import SemanticDiffError
from gh_agent.models.change_models import (
    ChangeType,
    CodeEntity,
    FileChange,
    SemanticChangeRecord,
    SemanticDiffResult,
)
from gh_agent.models.github_models import FileContentPair
from gh_agent.utils.ast_parser import extract_entities

logger = logging.getLogger(__name__)

_EntityKey = tuple[str, str, int]  # (entity_type, name, occurrence)


class SemanticDiffEngine(Protocol):
    """Anything that turns changed files into entity-level change records."""

    def diff(self, file_changes: list[FileChange]) -> SemanticDiffResult:
        ...


def _fetch_failed(pair: FileContentPair, status: str) -> bool:
    if status != "removed" and pair.after_content is None:
        return True
    # A renamed file's base copy lives under its old path, which pairs do not carry
    return status == "modified" and pair.before_content is None


def file_changes_from_pairs(pairs: list[FileContentPair]) -> list[FileChange]:
    """Convert fetched base/head content pairs into engine input.

    Pairs missing a side that should exist (a failed fetch) are left out.
    """
    changes = []
    for pair in pairs:
        status = pair.status if pair.status in ("added", "removed", "renamed") else "modified"
        if _fetch_failed(pair, status):
            logger.debug("dropping %s: content fetch failed", pair.filename)
            continue
        changes.append(FileChange(
            file_path=pair.filename,
            status=status,
            before_content=pair.before_content,
            after_content=pair.after_content,
        ))
    return changes


def _keyed(entities: list[CodeEntity]) -> dict[_EntityKey, CodeEntity]:
    seen: dict[tuple[str, str], int] = {}
    keyed: dict[_EntityKey, CodeEntity] = {}
    for entity in entities:
        occurrence = seen.get((entity.entity_type, entity.name), 0)
        seen[(entity.entity_type, entity.name)] = occurrence + 1
        keyed[(entity.entity_type, entity.name, occurrence)] = entity
    return keyed


def _is_renamed(old: CodeEntity, new: CodeEntity) -> bool:
    if old.entity_type != new.entity_type or old.name == new.name:
        return False
    return old.content.replace(old.name, new.name) == new.content


class DeclarationSemanticDiff:
    """Semantic diff that compares top-level declarations.

    Python files are split into module-level declarations; any other file
    is compared as a single "file" entity.
    """

    def entities_for(self, file_path: str, content: str | None) -> list[CodeEntity]:
        if content is None:
            return []
        return extract_entities(file_path, content)

    def _diff_file(
        self,
        change: FileChange,
    ) -> tuple[list[SemanticChangeRecord | CodeEntity], list[CodeEntity]]:
        """Diff one file.

        Returns:
            Tuple of (ordered slots, deleted entities). A slot is either a
            finished record or an added entity that may still pair with a
            deletion elsewhere and become a move.
        """
        before = _keyed(self.entities_for(change.old_file_path or change.file_path, change.before_content))
        after = _keyed(self.entities_for(change.file_path, change.after_content))

        deleted = [entity for key, entity in before.items() if key not in after]
        slots: list[SemanticChangeRecord | CodeEntity] = []

        for key, entity in after.items():
            old = before.get(key)
            if old is None:
                renamed_from = next((d for d in deleted if _is_renamed(d, entity)), None)
                if renamed_from is None:
                    slots.append(entity)
                    continue
                deleted.remove(renamed_from)
                slots.append(SemanticChangeRecord(
                    entity_type=entity.entity_type,
                    entity_name=entity.name,
                    file_path=change.file_path,
                    old_file_path=change.old_file_path,
                    change_type=ChangeType.RENAMED,
                    before_content=renamed_from.content,
                    after_content=entity.content,
                ))
            elif old.content != entity.content:
                slots.append(SemanticChangeRecord(
                    entity_type=entity.entity_type,
                    entity_name=entity.name,
                    file_path=change.file_path,
                    old_file_path=change.old_file_path,
                    change_type=ChangeType.MODIFIED,
                    before_content=old.content,
                    after_content=entity.content,
                ))

        return slots, deleted

    def diff(self, file_changes: list[FileChange]) -> SemanticDiffResult:
        per_file = [(change, *self._diff_file(change)) for change in file_changes]

        # Deleted entities still unmatched, by content, for move detection
        orphans: dict[str, list[tuple[FileChange, CodeEntity]]] = {}
        for change, _, deleted in per_file:
            for entity in deleted:
                orphans.setdefault(entity.content.strip(), []).append((change, entity))

        moved_away: set[int] = set()
        records: list[SemanticChangeRecord] = []

        for change, slots, _ in per_file:
            for slot in slots:
                if isinstance(slot, SemanticChangeRecord):
                    records.append(slot)
                    continue
                candidates = [
                    (source, entity)
                    for source, entity in orphans.get(slot.content.strip(), [])
                    if source.file_path != change.file_path and id(entity) not in moved_away
                ]
                if candidates:
                    source, entity = candidates[0]
                    moved_away.add(id(entity))
                    records.append(SemanticChangeRecord(
                        entity_type=slot.entity_type,
                        entity_name=slot.name,
                        file_path=change.file_path,
                        old_file_path=source.file_path,
                        change_type=ChangeType.MOVED,
                        before_content=entity.content,
                        after_content=slot.content,
                    ))
                else:
                    records.append(SemanticChangeRecord(
                        entity_type=slot.entity_type,
                        entity_name=slot.name,
                        file_path=change.file_path,
                        old_file_path=change.old_file_path,
                        change_type=ChangeType.ADDED,
                        after_content=slot.content,
                    ))

        for change, _, deleted in per_file:
            for entity in deleted:
                if id(entity) in moved_away:
                    continue
                records.append(SemanticChangeRecord(
                    entity_type=entity.entity_type,
                    entity_name=entity.name,
                    file_path=change.file_path,
                    old_file_path=change.old_file_path,
                    change_type=ChangeType.DELETED,
                    before_content=entity.content,
                ))

        logger.debug("semantic diff: %d changes across %d files", len(records), len(file_changes))
        return result_from_records(records)


_BATCH_STATUS_MAP: dict[str, ChangeType] = {
    "added": ChangeType.ADDED,
    "modified": ChangeType.MODIFIED,
    "deleted": ChangeType.DELETED,
    "removed": ChangeType.DELETED,
    "renamed": ChangeType.RENAMED,
    "moved": ChangeType.MOVED,
}


def records_from_batch(items: list[dict[str, Any]]) -> list[SemanticChangeRecord]:
    """Parse semantic-diff batch items into records.

    Item shape: {file_path, status, old_file_path?, before_content?,
    after_content?, entity_type, entity_name}.

    Raises:
        SemanticDiffError: If an item is missing fields or has an unknown status.
    """
    records = []
    for position, item in enumerate(items):
        if not isinstance(item, dict):
            raise SemanticDiffError(f"Batch item {position} is not an object")
        status = str(item.get("status", "")).lower()
        change_type = _BATCH_STATUS_MAP.get(status)
        if change_type is None:
            raise SemanticDiffError(f"Batch item {position} has unknown status {status!r}")
        try:
            records.append(SemanticChangeRecord(
                entity_type=item["entity_type"],
                entity_name=item["entity_name"],
                file_path=item["file_path"],
                old_file_path=item.get("old_file_path"),
                change_type=change_type,
                before_content=item.get("before_content"),
                after_content=item.get("after_content"),
            ))
        except (KeyError, ValidationError) as exc:
            raise SemanticDiffError(f"Batch item {position} is invalid: {exc}") from exc
    return records


def result_from_records(records: list[SemanticChangeRecord]) -> SemanticDiffResult:
    counts = {change_type: 0 for change_type in ChangeType}
    for record in records:
        counts[record.change_type] += 1
    return SemanticDiffResult(
        changes=tuple(records),
        file_count=len({record.file_path for record in records}),
        added_count=counts[ChangeType.ADDED],
        modified_count=counts[ChangeType.MODIFIED],
        deleted_count=counts[ChangeType.DELETED],
        renamed_count=counts[ChangeType.RENAMED],
        moved_count=counts[ChangeType.MOVED],
    )


class ExternalSemanticDiff:
    """Semantic diff delegated to an external command.

    The command receives {"files": [FileChange, ...]} as JSON on stdin and
    must print a JSON array of batch items (see `records_from_batch`).
    """

    def __init__(self, command: str, timeout_seconds: float = 120) -> None:
        self.command = shlex.split(command)
        self.timeout_seconds = timeout_seconds

    def diff(self, file_changes: list[FileChange]) -> SemanticDiffResult:
        payload = json.dumps({"files": [change.model_dump() for change in file_changes]})
        try:
            result = subprocess.run(
                self.command,
                input=payload.encode("utf-8"),
                capture_output=True,
                timeout=self.timeout_seconds,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            raise SemanticDiffError(f"Failed to run {self.command[0]}: {exc}") from exc

        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace").strip()
            raise SemanticDiffError(f"{self.command[0]} exited with {result.returncode}: {stderr}")
        try:
            items = json.loads(result.stdout.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise SemanticDiffError(f"{self.command[0]} printed invalid JSON: {exc}") from exc
        if not isinstance(items, list):
            raise SemanticDiffError(f"{self.command[0]} must print a JSON array")

        return result_from_records(records_from_batch(items))
