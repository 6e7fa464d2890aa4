"""Report rendering.

Produces the line-oriented text report: each record's text followed by its
profile totals and per-location breakdowns as ``;`` comment lines, then a
separator.  Also renders the raw dump of the store.
"""

from __future__ import annotations

from typing import Any

from optcache.aggregator import ProfileAggregator
from optcache.config import REPORT_SEPARATOR, SortKey
from optcache.models import CounterBundle, ProfileKind


def sort_identities(aggregator: ProfileAggregator, sort_key: str = SortKey.LENGTH) -> list[str]:
    """Order the Working Set for the report.

    ``length`` sorts by ascending text length, ``sprofile`` and ``dprofile``
    by descending static or dynamic total.  Ties fall back to the text
    itself so the order never depends on set iteration.
    """
    items = sorted(aggregator.active_items(), key=lambda item: item[0])
    if sort_key == SortKey.LENGTH:
        items.sort(key=lambda item: len(item[0]))
    elif sort_key == SortKey.SPROFILE:
        items.sort(key=lambda item: item[1].static_total, reverse=True)
    elif sort_key == SortKey.DPROFILE:
        items.sort(key=lambda item: item[1].dynamic_total, reverse=True)
    else:
        raise ValueError(f"unknown sort key {sort_key!r}")
    return [identity for identity, _ in items]


def _location_lines(kind: ProfileKind, counters: CounterBundle) -> list[str]:
    entries = sorted(
        ((loc, n) for loc, n in counters.locations(kind).items() if loc),
        key=lambda e: (-e[1], e[0]),
    )
    return [f'; {kind.value} {count} "{location}"' for location, count in entries]


def render_record(identity: str, counters: CounterBundle) -> str:
    lines = [identity.rstrip("\n")]
    lines.append(f"; static profile {counters.static_total}")
    lines.extend(_location_lines(ProfileKind.STATIC, counters))
    lines.append(f"; dynamic profile {counters.dynamic_total}")
    lines.extend(_location_lines(ProfileKind.DYNAMIC, counters))
    lines.append(REPORT_SEPARATOR)
    return "\n".join(lines) + "\n"


def render_report(aggregator: ProfileAggregator, sort_key: str = SortKey.LENGTH) -> str:
    return "".join(
        render_record(identity, aggregator.bundle(identity))
        for identity in sort_identities(aggregator, sort_key)
    )


def render_raw(store: Any) -> str:
    """Dump every store entry with all of its fields, sorted by key."""
    blocks = []
    for key in sorted(store.list_keys()):
        lines = [key.rstrip("\n")]
        for name, value in sorted(store.get_fields(key).items()):
            lines.append(f"; {name} = {value!r}")
        lines.append(REPORT_SEPARATOR)
        blocks.append("\n".join(lines) + "\n")
    return "".join(blocks)
