"""Transformation passes over the aggregated Working Set.

Each pass walks a snapshot of the Working Set taken when it starts, so
records it adds or removes do not change which records it visits.
"""
from optcache.passes.merge import canonicalize, run_merge_pass
from optcache.passes.pipeline import PipelineOptions, run_pipeline
from optcache.passes.reduce import run_reduce_pass
from optcache.passes.triage import run_triage_pass
