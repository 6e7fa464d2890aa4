"""Reduce pass: shrink each record with the external reducer."""

from __future__ import annotations

import logging

from optcache.aggregator import ProfileAggregator
from optcache.models import PassStats
from optcache.passes.progress import pass_status
from optcache.tools.reducer import Reducer

logger = logging.getLogger(__name__)


def run_reduce_pass(
    aggregator: ProfileAggregator,
    reducer: Reducer,
    verbose: bool = False,
) -> PassStats:
    """Replace every record by its reduced form.

    A record the reducer fails on is removed.  An empty result leaves the
    record as it was.
    """
    stats = PassStats(name="reduce")
    snapshot = aggregator.snapshot()
    with pass_status("Reducing", len(snapshot), verbose) as advance:
        for identity in snapshot:
            stats.visited += 1
            outcome = reducer.reduce(identity)
            if not outcome.success:
                logger.warning(
                    "Reducer failed (exit %d), dropping record:\n%s",
                    outcome.returncode, identity,
                )
                aggregator.remove(identity)
                stats.removed += 1
            elif not outcome.output:
                logger.info("Reducer produced no output, keeping record:\n%s", identity)
                stats.unchanged += 1
            else:
                aggregator.replace(identity, outcome.output)
                if outcome.output == identity:
                    stats.unchanged += 1
                else:
                    stats.replaced += 1
            advance()
    return stats
