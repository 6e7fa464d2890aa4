"""Optional per-pass status display."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from rich.console import Console
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeElapsedColumn,
)

console = Console(stderr=True)


@contextmanager
def pass_status(description: str, total: int, verbose: bool) -> Iterator:
    """Yield an ``advance()`` callable that ticks a progress bar.

    The bar shows the percentage of the pass snapshot processed.  When
    *verbose* is false nothing is drawn and ``advance()`` does nothing.
    """
    if not verbose:
        yield lambda: None
        return

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        MofNCompleteColumn(),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task(description, total=total)
        yield lambda: progress.advance(task)
