"""Shared data models for the optcache pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ProfileKind(str, Enum):
    STATIC = "sprofile"
    DYNAMIC = "dprofile"


@dataclass
class CounterBundle:
    """Profile counters attached to one record identity.

    Totals always equal the sum of the matching location map; use
    :meth:`add` and :meth:`absorb` rather than touching the fields directly.
    """
    static_total: int = 0
    dynamic_total: int = 0
    static_by_location: dict[str, int] = field(default_factory=dict)
    dynamic_by_location: dict[str, int] = field(default_factory=dict)

    def add(self, kind: ProfileKind, location: str, count: int) -> None:
        """Add *count* at *location* to the static or dynamic counters."""
        if kind is ProfileKind.STATIC:
            self.static_total += count
            self.static_by_location[location] = self.static_by_location.get(location, 0) + count
        else:
            self.dynamic_total += count
            self.dynamic_by_location[location] = self.dynamic_by_location.get(location, 0) + count

    def absorb(self, other: CounterBundle) -> None:
        """Sum every counter of *other* into this bundle."""
        for location, count in other.static_by_location.items():
            self.add(ProfileKind.STATIC, location, count)
        for location, count in other.dynamic_by_location.items():
            self.add(ProfileKind.DYNAMIC, location, count)

    def locations(self, kind: ProfileKind) -> dict[str, int]:
        return self.static_by_location if kind is ProfileKind.STATIC else self.dynamic_by_location

    @property
    def is_consistent(self) -> bool:
        return (
            self.static_total == sum(self.static_by_location.values())
            and self.dynamic_total == sum(self.dynamic_by_location.values())
        )


@dataclass
class CacheRecord:
    """A single record decoded from the store."""
    lhs: str
    rhs: str
    counters: CounterBundle = field(default_factory=CounterBundle)

    @property
    def identity(self) -> str:
        return self.lhs + self.rhs

    @property
    def is_optimization(self) -> bool:
        return self.rhs != ""


@dataclass
class LoadSummary:
    """Counts gathered while loading the store."""
    keys_seen: int = 0
    keys_skipped: int = 0
    records_loaded: int = 0
    optimizations: int = 0
    discarded: int = 0
    included: int = 0


@dataclass
class PassStats:
    """Outcome of one transformation pass."""
    name: str
    visited: int = 0
    replaced: int = 0
    removed: int = 0
    unchanged: int = 0
    warnings: int = 0
