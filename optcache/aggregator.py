"""Profile aggregation keyed by record identity.

A record's identity changes as passes rewrite it, so every counter lives in
one place and is moved, never copied, when an identity is replaced.  The
Working Set is the subset of identities that will reach the report.
"""

from __future__ import annotations

import logging
from typing import Iterator, Mapping

from optcache.errors import EmptyIdentityError
from optcache.models import CounterBundle, ProfileKind

logger = logging.getLogger(__name__)


class ProfileAggregator:
    """Owns all counter bundles and Working Set membership."""

    def __init__(self) -> None:
        self._bundles: dict[str, CounterBundle] = {}
        self._working: set[str] = set()

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def register(self, identity: str, counters: CounterBundle, include: bool) -> None:
        """Record a freshly loaded identity's counters.

        Counters are kept even when *include* is false so that a later
        replacement landing on the same identity sums into them.
        """
        self._bundle_for(identity).absorb(counters)
        if include:
            self._working.add(identity)

    def merge(
        self,
        identity: str,
        kind: ProfileKind,
        location_counts: Mapping[str, int],
    ) -> None:
        """Add *location_counts* to the static or dynamic map of *identity*."""
        bundle = self._bundle_for(identity)
        for location, count in location_counts.items():
            bundle.add(kind, location, count)

    def replace(self, old: str, new: str) -> None:
        """Move everything *old* carries onto *new*.

        *new* joins the Working Set and *old* is erased entirely.  Replacing
        an identity with itself only makes sure it is in the Working Set.

        Raises
        ------
        EmptyIdentityError
            If *new* is empty.
        """
        if not new:
            raise EmptyIdentityError(f"replacement for {old!r} is empty")
        if old == new:
            self._bundle_for(new)
            self._working.add(new)
            return

        moved = self._bundles.pop(old, None)
        target = self._bundle_for(new)
        if moved is not None:
            target.absorb(moved)
        self._working.discard(old)
        self._working.add(new)
        logger.debug("Replaced %r with %r", old, new)

    def remove(self, identity: str) -> None:
        """Drop *identity* and all of its counters."""
        self._bundles.pop(identity, None)
        self._working.discard(identity)
        logger.debug("Removed %r", identity)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def snapshot(self) -> list[str]:
        """Copy of the Working Set, safe to iterate while mutating."""
        return list(self._working)

    def bundle(self, identity: str) -> CounterBundle:
        return self._bundles[identity]

    def is_included(self, identity: str) -> bool:
        return identity in self._working

    def active_items(self) -> Iterator[tuple[str, CounterBundle]]:
        for identity in self._working:
            yield identity, self._bundles[identity]

    def __contains__(self, identity: object) -> bool:
        return identity in self._bundles

    def __len__(self) -> int:
        return len(self._working)

    def _bundle_for(self, identity: str) -> CounterBundle:
        bundle = self._bundles.get(identity)
        if bundle is None:
            bundle = self._bundles[identity] = CounterBundle()
        return bundle
