"""Chained subprocess pipelines.

A pipe chain is a list of command stages where each stage's stdout feeds
the next stage's stdin, like ``a | b | c`` in a shell.  The input text is
written to the first stage and the last stage's stdout is captured.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from dataclasses import dataclass, field
from typing import Sequence

from optcache.errors import ToolError

logger = logging.getLogger(__name__)


@dataclass
class PipeResult:
    """Captured output of a pipe chain."""
    stdout: str
    returncodes: list[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return all(code == 0 for code in self.returncodes)


def _feed(stream, data: bytes) -> None:
    try:
        stream.write(data)
    except (BrokenPipeError, ValueError):
        # First stage exited early, or the chain was killed on timeout
        pass
    finally:
        try:
            stream.close()
        except (BrokenPipeError, ValueError):
            pass


def run_pipe_chain(
    stages: Sequence[Sequence[str]],
    input_text: str,
    timeout: float | None = None,
) -> PipeResult:
    """Run *stages* as one pipeline, feeding *input_text* to the first.

    Parameters
    ----------
    stages:
        Commands, each an argv list.  At least one is required.
    input_text:
        Text written to the first stage's stdin.
    timeout:
        Seconds to wait for the last stage.  ``None`` waits forever.

    Returns
    -------
    PipeResult
        The last stage's stdout and every stage's exit code, in order.

    Raises
    ------
    ToolError
        If a stage cannot be launched or the chain times out.
    """
    if not stages:
        raise ValueError("a pipe chain needs at least one stage")

    procs: list[subprocess.Popen] = []
    try:
        for argv in stages:
            stdin = procs[-1].stdout if procs else subprocess.PIPE
            try:
                proc = subprocess.Popen(
                    list(argv),
                    stdin=stdin,
                    stdout=subprocess.PIPE,
                )
            except OSError as exc:
                raise ToolError(f"cannot run {argv[0]!r}: {exc}") from exc
            if procs:
                # Only the child should hold the read end now
                procs[-1].stdout.close()
            procs.append(proc)
    except ToolError:
        _kill_all(procs)
        raise

    data = input_text.encode("utf-8")
    last = procs[-1]
    feeder = None
    if len(procs) > 1:
        feeder = threading.Thread(target=_feed, args=(procs[0].stdin, data), daemon=True)
        feeder.start()

    try:
        if feeder is None:
            out, _ = last.communicate(input=data, timeout=timeout)
        else:
            out, _ = last.communicate(timeout=timeout)
        for proc in procs[:-1]:
            proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired as exc:
        _kill_all(procs)
        raise ToolError(
            f"pipeline {' | '.join(s[0] for s in stages)} timed out after {timeout}s"
        ) from exc
    if feeder is not None:
        feeder.join()

    codes = [proc.returncode for proc in procs]
    logger.debug("Pipe chain %s exited with %s", [s[0] for s in stages], codes)
    return PipeResult(stdout=out.decode("utf-8", errors="replace"), returncodes=codes)


def _kill_all(procs: list[subprocess.Popen]) -> None:
    for proc in procs:
        if proc.poll() is None:
            proc.kill()
        proc.wait()
        for stream in (proc.stdin, proc.stdout):
            if stream is not None and not stream.closed:
                try:
                    stream.close()
                except BrokenPipeError:
                    pass
