"""Merge pass: collapse records that differ only in widths and constants.

Canonicalization is purely textual.  Bit-width annotations (``:i32``) are
stripped and every standalone integer literal becomes a placeholder, so
``add %0, 1:i32`` and ``add %0, 7:i64`` both read ``add %0, C``.  Value
names such as ``%12`` are left alone.
"""

from __future__ import annotations

import logging
import re

from optcache.aggregator import ProfileAggregator
from optcache.config import CONSTANT_PLACEHOLDER
from optcache.models import PassStats
from optcache.passes.progress import pass_status

logger = logging.getLogger(__name__)

WIDTH_RE = re.compile(r":i\d+\b")
LITERAL_RE = re.compile(r"(?<![\w%.-])-?\d+\b")


def canonicalize(identity: str) -> str:
    """Return the width- and constant-free form of *identity*."""
    text = WIDTH_RE.sub("", identity)
    return LITERAL_RE.sub(CONSTANT_PLACEHOLDER, text)


def run_merge_pass(aggregator: ProfileAggregator, verbose: bool = False) -> PassStats:
    stats = PassStats(name="merge")
    snapshot = aggregator.snapshot()
    with pass_status("Merging", len(snapshot), verbose) as advance:
        for identity in snapshot:
            stats.visited += 1
            canonical = canonicalize(identity)
            aggregator.replace(identity, canonical)
            if canonical == identity:
                stats.unchanged += 1
            else:
                stats.replaced += 1
            advance()
    logger.info(
        "Merge collapsed %d records into %d", stats.visited, len(aggregator),
    )
    return stats
