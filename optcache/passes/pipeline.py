"""Pipeline driver: runs the enabled passes in their fixed order."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from optcache.aggregator import ProfileAggregator
from optcache.models import PassStats
from optcache.passes.merge import run_merge_pass
from optcache.passes.reduce import run_reduce_pass
from optcache.passes.triage import run_triage_pass
from optcache.tools.reducer import Reducer
from optcache.tools.triager import Triager

logger = logging.getLogger(__name__)


@dataclass
class PipelineOptions:
    """Which passes to run.  Order is always reduce, triage, merge."""
    reduce: bool = False
    triage: bool = False
    merge: bool = False
    verbose: bool = False


def run_pipeline(
    aggregator: ProfileAggregator,
    options: PipelineOptions,
    reducer: Reducer | None = None,
    triager: Triager | None = None,
) -> list[PassStats]:
    """Run every enabled pass over *aggregator* and return their stats.

    Missing tool wrappers are built from the config defaults.
    """
    results: list[PassStats] = []

    if options.reduce:
        results.append(run_reduce_pass(aggregator, reducer or Reducer(), options.verbose))
    if options.triage:
        results.append(run_triage_pass(aggregator, triager or Triager(), options.verbose))
    if options.merge:
        results.append(run_merge_pass(aggregator, options.verbose))

    for stats in results:
        logger.info(
            "Pass %s: visited=%d replaced=%d removed=%d unchanged=%d warnings=%d",
            stats.name, stats.visited, stats.replaced, stats.removed,
            stats.unchanged, stats.warnings,
        )
    return results
