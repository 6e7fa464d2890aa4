"""External LHS/RHS verifier.

The verifier reads an LHS on stdin.  In parse-only mode it prints a success
marker when the LHS parses; in infer mode it prints the RHS it derives,
which must match the cached one byte for byte.
"""

from __future__ import annotations

import logging

from optcache.config import (
    PARSE_SUCCESS_MARKER,
    VERIFIER_INFER_ARGS,
    VERIFIER_PARSE_ARGS,
    VERIFIER_PATH,
)
from optcache.errors import ParseValidationError, VerificationMismatchError
from optcache.tools.pipes import run_pipe_chain

logger = logging.getLogger(__name__)


class Verifier:
    """Checks cached records against the external verifier.

    Parameters
    ----------
    path:
        Verifier executable.
    parse:
        Run the parse-only check on every LHS.
    verify:
        Re-infer the RHS of every optimization and compare.
    timeout:
        Per-invocation timeout in seconds, ``None`` for none.
    """

    def __init__(
        self,
        path: str = VERIFIER_PATH,
        parse: bool = False,
        verify: bool = False,
        timeout: float | None = None,
        success_marker: str = PARSE_SUCCESS_MARKER,
    ) -> None:
        self.path = path
        self.parse = parse
        self.verify = verify
        self.timeout = timeout
        self.success_marker = success_marker

    @property
    def enabled(self) -> bool:
        return self.parse or self.verify

    def check(self, lhs: str, rhs: str) -> None:
        """Run whichever checks are enabled; raise on the first failure."""
        if self.parse:
            self.check_parses(lhs)
        if self.verify and rhs:
            self.check_infers(lhs, rhs)

    def check_parses(self, lhs: str) -> None:
        result = run_pipe_chain([[self.path, *VERIFIER_PARSE_ARGS]], lhs, self.timeout)
        if self.success_marker not in result.stdout:
            raise ParseValidationError(
                f"{self.path} did not parse LHS:\n{lhs}\noutput:\n{result.stdout}",
                key=lhs,
            )
        logger.debug("Parsed LHS of %d chars", len(lhs))

    def check_infers(self, lhs: str, rhs: str) -> None:
        result = run_pipe_chain([[self.path, *VERIFIER_INFER_ARGS]], lhs, self.timeout)
        if result.stdout != rhs:
            raise VerificationMismatchError(
                f"inferred RHS differs for LHS:\n{lhs}\n"
                f"cached:\n{rhs}\ninferred:\n{result.stdout}",
                key=lhs,
            )
