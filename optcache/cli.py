"""Main CLI entry point for optcache."""

from __future__ import annotations

import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from optcache import __version__
from optcache.aggregator import ProfileAggregator
from optcache.config import (
    BOGUS_MARKER,
    DEFAULT_TOOL_TIMEOUT_SECONDS,
    LLVM_AS_PATH,
    LLVM_DIS_PATH,
    OPT_PATH,
    REDIS_DB,
    REDIS_HOST,
    REDIS_PORT,
    REDUCER_PATH,
    SORT_KEYS,
    SURVIVAL_MARKER,
    TRIAGE_OPT_LEVEL,
    TRIAGER_PATH,
    VERIFIER_PATH,
    SortKey,
)
from optcache.errors import OptCacheError
from optcache.loader import load_records
from optcache.models import LoadSummary, PassStats
from optcache.passes.pipeline import PipelineOptions, run_pipeline
from optcache.report import render_raw, render_report
from optcache.store import RedisRecordStore
from optcache.tools.reducer import Reducer
from optcache.tools.triager import Triager
from optcache.tools.verifier import Verifier

console = Console(stderr=True)


@click.command()
@click.version_option(version=__version__)
@click.option("--host", default=REDIS_HOST, show_default=True, help="Redis host.")
@click.option("--port", default=REDIS_PORT, show_default=True, help="Redis port.")
@click.option("--db", default=REDIS_DB, show_default=True, help="Redis database number.")
@click.option("--merge", is_flag=True, help="Merge records differing only in widths and constants.")
@click.option("--noopt", is_flag=True, help="Report non-optimizations instead of optimizations.")
@click.option("--parse", is_flag=True, help="Check that every cached LHS parses.")
@click.option("--verify", is_flag=True, help="Re-infer every RHS and compare with the cache.")
@click.option("--sort", "sort_key", type=click.Choice(SORT_KEYS), default=SortKey.LENGTH,
              show_default=True, help="Report order.")
@click.option("--raw", is_flag=True, help="Dump every key and field as stored, then exit.")
@click.option("--reduce", is_flag=True, help="Shrink records with the external reducer.")
@click.option("--triage", is_flag=True, help="Drop records the IR optimizer already handles.")
@click.option("-v", "--verbose", is_flag=True, help="Show pass progress and info logging.")
@click.option("-o", "--output", type=click.Path(dir_okay=False, writable=True), default=None,
              help="Write the report here instead of stdout.")
@click.option("--verifier", default=VERIFIER_PATH, show_default=True, help="Verifier executable.")
@click.option("--reducer", default=REDUCER_PATH, show_default=True, help="Reducer executable.")
@click.option("--triager", default=TRIAGER_PATH, show_default=True, help="Lowering executable.")
@click.option("--llvm-as", "llvm_as", default=LLVM_AS_PATH, show_default=True, help="IR assembler.")
@click.option("--opt", "opt", default=OPT_PATH, show_default=True, help="IR optimizer.")
@click.option("--llvm-dis", "llvm_dis", default=LLVM_DIS_PATH, show_default=True,
              help="IR disassembler.")
@click.option("--opt-level", default=TRIAGE_OPT_LEVEL, show_default=True,
              help="Optimization level passed to the optimizer during triage.")
@click.option("--bogus-marker", default=BOGUS_MARKER, show_default=True,
              help="Text marking a broken lowering in triage output.")
@click.option("--survival-marker", default=SURVIVAL_MARKER, show_default=True,
              help="Text showing the optimizer left the transformation undone.")
@click.option("--tool-timeout", type=float, default=DEFAULT_TOOL_TIMEOUT_SECONDS,
              help="Seconds before an external tool is killed (default: wait forever).")
def main(host, port, db, merge, noopt, parse, verify, sort_key, raw, reduce, triage,
         verbose, output, verifier, reducer, triager, llvm_as, opt, llvm_dis, opt_level,
         bogus_marker, survival_marker, tool_timeout):
    """Report deduplicated, filtered and sorted records from an optimization cache."""
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    store = RedisRecordStore(host=host, port=port, db=db)
    summary = None
    pass_results: list[PassStats] = []
    try:
        store.ping()
        if raw:
            text = render_raw(store)
        else:
            aggregator = ProfileAggregator()
            summary = load_records(
                store,
                aggregator,
                show_optimizations=not noopt,
                show_non_optimizations=noopt,
                verifier=Verifier(verifier, parse=parse, verify=verify, timeout=tool_timeout),
            )
            pass_results = run_pipeline(
                aggregator,
                PipelineOptions(reduce=reduce, triage=triage, merge=merge, verbose=verbose),
                reducer=Reducer(reducer, timeout=tool_timeout),
                triager=Triager(
                    triager, llvm_as, opt, llvm_dis,
                    opt_level=opt_level,
                    bogus_marker=bogus_marker,
                    survival_marker=survival_marker,
                    timeout=tool_timeout,
                ),
            )
            text = render_report(aggregator, sort_key)
    except OptCacheError as exc:
        console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}")
        sys.exit(1)

    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text)
    else:
        click.echo(text, nl=False)

    if summary is not None:
        _print_summary(summary, pass_results, len(aggregator))


def _print_summary(summary: LoadSummary, pass_results: list[PassStats], reported: int) -> None:
    """Print load counts and per-pass stats to stderr."""
    console.print(
        f"[bold]Loaded[/bold] {summary.records_loaded} records from {summary.keys_seen} keys  |  "
        f"[bold]Discarded[/bold] {summary.discarded} non-optimizations  |  "
        f"[bold]Reported[/bold] {reported}"
    )
    if not pass_results:
        return

    table = Table(title="Passes", show_header=True, header_style="bold cyan")
    table.add_column("Pass", style="bold")
    table.add_column("Visited", justify="right")
    table.add_column("Replaced", justify="right")
    table.add_column("Removed", justify="right")
    table.add_column("Unchanged", justify="right")
    table.add_column("Warnings", justify="right")
    for stats in pass_results:
        table.add_row(
            stats.name,
            str(stats.visited),
            str(stats.replaced),
            f"[red]{stats.removed}[/red]" if stats.removed else "0",
            str(stats.unchanged),
            f"[yellow]{stats.warnings}[/yellow]" if stats.warnings else "0",
        )
    console.print(table)
