"""Triage pass: drop records the downstream optimizer already handles."""

from __future__ import annotations

import logging

from optcache.aggregator import ProfileAggregator
from optcache.models import PassStats
from optcache.passes.progress import pass_status
from optcache.tools.triager import Triager

logger = logging.getLogger(__name__)


def run_triage_pass(
    aggregator: ProfileAggregator,
    triager: Triager,
    verbose: bool = False,
) -> PassStats:
    stats = PassStats(name="triage")
    snapshot = aggregator.snapshot()
    with pass_status("Triaging", len(snapshot), verbose) as advance:
        for identity in snapshot:
            stats.visited += 1
            verdict = triager.triage(identity)
            if verdict.bogus:
                logger.warning("Bogus lowering for record:\n%s", identity)
                stats.warnings += 1
            if verdict.keep:
                stats.unchanged += 1
            else:
                aggregator.remove(identity)
                stats.removed += 1
            advance()
    return stats
