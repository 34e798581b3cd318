"""Classify changed entities into Mechanical / New Logic / Behavioral buckets."""

from gh_agent.models.change_models import (
    CategorizedChange,
    ChangeCategory,
    SemanticChangeRecord,
)

# Similarity above which a change with no literal value flip is cosmetic churn
MECHANICAL_THRESHOLD = 0.8
# Similarity below which a change is effectively new code
NEW_LOGIC_THRESHOLD = 0.5

# Value-change extraction only looks at short snippets
SHORT_VALUE_MAX_LINES = 2
SHORT_VALUE_MAX_CHARS = 200


def tokenize(content: str) -> set[str]:
    """Split on whitespace runs into a set of distinct tokens."""
    return set(content.split())


def jaccard_similarity(before: str, after: str) -> float:
    """Intersection over union of the whitespace tokens of both texts.

    Returns 1.0 when both token sets are empty.
    """
    before_tokens = tokenize(before)
    after_tokens = tokenize(after)
    union = before_tokens | after_tokens
    if not union:
        return 1.0
    return len(before_tokens & after_tokens) / len(union)


def token_diff(before: str, after: str) -> tuple[tuple[str, ...], tuple[str, ...]]:
    """Return (removed, added) tokens, each sorted."""
    before_tokens = tokenize(before)
    after_tokens = tokenize(after)
    return (
        tuple(sorted(before_tokens - after_tokens)),
        tuple(sorted(after_tokens - before_tokens)),
    )


def is_short_value(content: str) -> bool:
    trimmed = content.strip()
    # Only newlines separate lines; form feeds and U+2028 do not
    line_count = trimmed.replace("\r\n", "\n").count("\n") + 1
    return (
        line_count <= SHORT_VALUE_MAX_LINES
        and len(trimmed) < SHORT_VALUE_MAX_CHARS
    )


def _strip_statement(content: str) -> str:
    return content.strip().rstrip(";").strip()


def _right_hand_side(statement: str) -> str:
    _, sep, rhs = statement.partition("=")
    if not sep:
        return statement
    return rhs.strip()


def extract_value_change(before: str, after: str) -> tuple[str, str] | None:
    """Detect a literal value flip in a short declaration.

    Both sides must be short (at most two lines and under 200 characters
    after trimming). Trailing semicolons and whitespace are ignored; when the
    statements still differ, the text after the first "=" on each side (or
    the whole statement when there is no "=") is returned as (old, new).
    """
    if not is_short_value(before) or not is_short_value(after):
        return None
    old_statement = _strip_statement(before)
    new_statement = _strip_statement(after)
    if old_statement == new_statement:
        return None
    return _right_hand_side(old_statement), _right_hand_side(new_statement)


def classify_content(
    before: str | None,
    after: str | None,
) -> tuple[ChangeCategory, float, tuple[str, ...], tuple[str, ...], tuple[str, str] | None]:
    """Categorize a before/after content pair.

    Returns:
        Tuple of (category, similarity, removed_tokens, added_tokens, value_change).
    """
    if before is None and after is not None:
        return ChangeCategory.NEW_LOGIC, 0.0, (), (), None
    if before is None or after is None:
        # Pure deletion, or nothing to compare at all
        return ChangeCategory.MECHANICAL, 1.0, (), (), None

    similarity = jaccard_similarity(before, after)
    removed, added = token_diff(before, after)
    value_change = extract_value_change(before, after)

    if value_change is not None:
        category = ChangeCategory.BEHAVIORAL
    elif similarity > MECHANICAL_THRESHOLD:
        category = ChangeCategory.MECHANICAL
    elif similarity < NEW_LOGIC_THRESHOLD:
        category = ChangeCategory.NEW_LOGIC
    else:
        category = ChangeCategory.BEHAVIORAL

    return category, similarity, removed, added, value_change


def classify_change(record: SemanticChangeRecord) -> CategorizedChange:
    """Classify one semantic change record. Never raises."""
    category, similarity, removed, added, value_change = classify_content(
        record.before_content,
        record.after_content,
    )
    return CategorizedChange(
        category=category,
        similarity=similarity,
        removed_tokens=removed,
        added_tokens=added,
        value_change=value_change,
        change_type=record.change_type,
        entity_type=record.entity_type,
        entity_name=record.entity_name,
        file_path=record.file_path,
    )


def classify_changes(records: list[SemanticChangeRecord]) -> list[CategorizedChange]:
    """Classify a batch, preserving input order."""
    return [classify_change(record) for record in records]
