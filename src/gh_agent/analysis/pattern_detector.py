"""Group mechanical changes that removed the same token."""

from gh_agent.models.change_models import (
    CategorizedChange,
    ChangeCategory,
    PatternGroup,
    PatternSummary,
)

MIN_TOKEN_LENGTH = 3
MIN_GROUP_SIZE = 2


def detect_patterns(changes: list[CategorizedChange]) -> list[PatternGroup]:
    """Find tokens removed by at least two mechanical changes.

    Groups are sorted by descending size; equal sizes keep the order in
    which their token was first seen. Groups may overlap.
    """
    token_to_indices: dict[str, list[int]] = {}
    for index, change in enumerate(changes):
        if change.category != ChangeCategory.MECHANICAL:
            continue
        for token in change.removed_tokens:
            if len(token) >= MIN_TOKEN_LENGTH:
                token_to_indices.setdefault(token, []).append(index)

    groups = [
        PatternGroup(token=token, member_indices=tuple(indices))
        for token, indices in token_to_indices.items()
        if len(indices) >= MIN_GROUP_SIZE
    ]
    # sorted() is stable, so ties keep first-seen order
    return sorted(groups, key=lambda group: len(group.member_indices), reverse=True)


def group_mechanical_changes(changes: list[CategorizedChange]) -> PatternSummary:
    """Assign each mechanical change to at most one pattern group.

    Groups claim members in `detect_patterns` order. A group left with fewer
    than two unclaimed members is dropped and its remaining member is
    rendered individually, together with every mechanical change no group
    mentioned. The surviving groups are ordered largest first after claiming;
    groups of equal size keep their detection order.
    """
    claimed: set[int] = set()
    groups: list[PatternGroup] = []

    for group in detect_patterns(changes):
        members = tuple(i for i in group.member_indices if i not in claimed)
        if len(members) < MIN_GROUP_SIZE:
            continue
        claimed.update(members)
        groups.append(PatternGroup(token=group.token, member_indices=members))

    groups.sort(key=lambda g: len(g.member_indices), reverse=True)

    ungrouped = tuple(
        index
        for index, change in enumerate(changes)
        if change.category == ChangeCategory.MECHANICAL and index not in claimed
    )
    return PatternSummary(groups=tuple(groups), ungrouped_indices=ungrouped)
