"""External size reducer, driven through scratch files."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from dataclasses import dataclass
from pathlib import Path

from optcache.config import REDUCER_INPUT_NAME, REDUCER_OUTPUT_NAME, REDUCER_PATH
from optcache.errors import ToolError

logger = logging.getLogger(__name__)


@dataclass
class ReduceOutcome:
    """Result of reducing one record.

    ``output`` is empty when the reducer succeeded without producing
    anything, which means it could not improve the record.
    """
    success: bool
    output: str = ""
    returncode: int = 0


class Reducer:
    """Runs ``<reducer> <input> -o <output>`` on a private scratch directory."""

    def __init__(self, path: str = REDUCER_PATH, timeout: float | None = None) -> None:
        self.path = path
        self.timeout = timeout

    def reduce(self, text: str) -> ReduceOutcome:
        scratch = Path(tempfile.mkdtemp(prefix="optcache_reduce_"))
        try:
            input_path = scratch / REDUCER_INPUT_NAME
            output_path = scratch / REDUCER_OUTPUT_NAME
            input_path.write_text(text, encoding="utf-8")

            cmd = [self.path, str(input_path), "-o", str(output_path)]
            try:
                proc = subprocess.run(cmd, timeout=self.timeout)
            except OSError as exc:
                raise ToolError(f"cannot run {self.path!r}: {exc}") from exc
            except subprocess.TimeoutExpired as exc:
                raise ToolError(f"{self.path} timed out after {self.timeout}s") from exc

            if proc.returncode != 0:
                return ReduceOutcome(success=False, returncode=proc.returncode)
            if not output_path.exists():
                return ReduceOutcome(success=True)
            return ReduceOutcome(
                success=True,
                output=output_path.read_text(encoding="utf-8", errors="replace"),
            )
        finally:
            shutil.rmtree(scratch, ignore_errors=True)
