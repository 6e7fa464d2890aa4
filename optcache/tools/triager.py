"""Triage lowering chain.

Lowers a record to IR, assembles it, runs the general-purpose optimizer over
it and disassembles the result.  Two markers in the final text decide the
verdict: the bogus marker means the lowering itself produced garbage, and the
survival marker means the optimizer left the record's transformation undone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from optcache.config import (
    BOGUS_MARKER,
    LLVM_AS_PATH,
    LLVM_DIS_PATH,
    OPT_PATH,
    SURVIVAL_MARKER,
    TRIAGE_OPT_LEVEL,
    TRIAGER_PATH,
)
from optcache.tools.pipes import run_pipe_chain

logger = logging.getLogger(__name__)


@dataclass
class TriageVerdict:
    bogus: bool
    survived: bool

    @property
    def keep(self) -> bool:
        return self.survived and not self.bogus


class Triager:
    def __init__(
        self,
        triager: str = TRIAGER_PATH,
        assembler: str = LLVM_AS_PATH,
        optimizer: str = OPT_PATH,
        disassembler: str = LLVM_DIS_PATH,
        opt_level: str = TRIAGE_OPT_LEVEL,
        bogus_marker: str = BOGUS_MARKER,
        survival_marker: str = SURVIVAL_MARKER,
        timeout: float | None = None,
    ) -> None:
        self.stages = [
            [triager],
            [assembler],
            [optimizer, opt_level],
            [disassembler],
        ]
        self.bogus_marker = bogus_marker
        self.survival_marker = survival_marker
        self.timeout = timeout

    def triage(self, text: str) -> TriageVerdict:
        result = run_pipe_chain(self.stages, text, self.timeout)
        if not result.ok:
            logger.debug("Triage chain exit codes %s", result.returncodes)
        return TriageVerdict(
            bogus=self.bogus_marker in result.stdout,
            survived=self.survival_marker in result.stdout,
        )
