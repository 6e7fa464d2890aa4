"""Store loader and record classifier.

Reads every key from the record store, decodes the ones that carry a
``result`` field into :class:`CacheRecord` objects, splits optimizations from
non-optimizations, and registers all counters with the aggregator.
"""

from __future__ import annotations

import logging
import re
from typing import Any

from optcache.aggregator import ProfileAggregator
from optcache.config import DYNAMIC_PROFILE_PREFIX, RESULT_FIELD, STATIC_PROFILE_PREFIX
from optcache.models import CacheRecord, CounterBundle, LoadSummary, ProfileKind
from optcache.tools.verifier import Verifier

logger = logging.getLogger(__name__)

# "sprofile <location>" / "dprofile <location>"; a bare prefix means no location
PROFILE_FIELD_RE = re.compile(
    rf"^(?P<kind>{STATIC_PROFILE_PREFIX}|{DYNAMIC_PROFILE_PREFIX})(?: (?P<location>.*))?$",
    re.DOTALL,
)


def parse_counters(key: str, fields: dict[str, str]) -> CounterBundle:
    """Sum every profile field of one store entry into a bundle."""
    counters = CounterBundle()
    for name, value in fields.items():
        m = PROFILE_FIELD_RE.match(name)
        if m is None:
            continue
        try:
            count = int(value)
        except (TypeError, ValueError):
            logger.warning("Ignoring non-integer %s=%r for key %r", name, value, key)
            continue
        counters.add(ProfileKind(m.group("kind")), m.group("location") or "", count)
    return counters


def decode_record(key: str, fields: dict[str, str]) -> CacheRecord | None:
    """Build a record from a store entry, or ``None`` if it is not one."""
    if RESULT_FIELD not in fields:
        return None
    return CacheRecord(
        lhs=key,
        rhs=fields[RESULT_FIELD],
        counters=parse_counters(key, fields),
    )


def load_records(
    store: Any,
    aggregator: ProfileAggregator,
    show_optimizations: bool = True,
    show_non_optimizations: bool = False,
    verifier: Verifier | None = None,
) -> LoadSummary:
    """Load the whole store into *aggregator*.

    Parameters
    ----------
    store:
        Anything with ``list_keys()`` and ``get_fields(key)``.
    aggregator:
        Receives every record's counters.
    show_optimizations:
        Put records with a non-empty RHS in the Working Set.
    show_non_optimizations:
        Put records with an empty RHS in the Working Set.
    verifier:
        When given and enabled, every record is checked as it loads; the
        first failure propagates and ends the run.

    Returns
    -------
    LoadSummary
    """
    summary = LoadSummary()
    for key in store.list_keys():
        summary.keys_seen += 1
        record = decode_record(key, store.get_fields(key))
        if record is None:
            summary.keys_skipped += 1
            continue

        if verifier is not None and verifier.enabled:
            verifier.check(record.lhs, record.rhs)

        summary.records_loaded += 1
        if record.is_optimization:
            summary.optimizations += 1
            include = show_optimizations
        else:
            summary.discarded += 1
            include = show_non_optimizations

        aggregator.register(record.identity, record.counters, include)
        if include:
            summary.included += 1

    logger.info(
        "Loaded %d records from %d keys (%d optimizations, %d discarded)",
        summary.records_loaded, summary.keys_seen,
        summary.optimizations, summary.discarded,
    )
    return summary
