"""Difference between two lists of group members."""

from __future__ import annotations

from collections import Counter
from collections.abc import Hashable, Iterable
from dataclasses import dataclass, field


@dataclass
class MemberDifference:
    """Members added and removed, each sorted."""

    added: list = field(default_factory=list)
    removed: list = field(default_factory=list)


def _sorted_difference(first: Counter, second: Counter) -> list:
    return sorted((first - second).elements())


def member_difference(
    old_members: Iterable[Hashable], new_members: Iterable[Hashable]
) -> MemberDifference:
    """Compute which members were removed from and added to a group."""
    old_counts = Counter(old_members)
    new_counts = Counter(new_members)
    return MemberDifference(
        added=_sorted_difference(new_counts, old_counts),
        removed=_sorted_difference(old_counts, new_counts),
    )