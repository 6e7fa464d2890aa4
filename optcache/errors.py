"""Exception hierarchy for optcache.

Every error here aborts the whole run; per-record problems (a reducer that
fails on one record, a bogus triage lowering) are logged and handled inside
the passes instead of being raised.
"""


class OptCacheError(Exception):
    """Base class for fatal optcache errors."""

    pass


class StoreUnavailableError(OptCacheError):
    """Raised when the record store cannot be reached."""

    pass


class ValidationError(OptCacheError):
    """Raised when a cached record fails external validation."""

    def __init__(self, message: str, key: str) -> None:
        super().__init__(message)
        self.key = key


class ParseValidationError(ValidationError):
    """Raised when the verifier does not accept an LHS in parse-only mode."""

    pass


class VerificationMismatchError(ValidationError):
    """Raised when the inferred RHS differs from the cached one."""

    pass


class EmptyIdentityError(OptCacheError, ValueError):
    """Raised when a record would be replaced by an empty identity."""

    pass


class ToolError(OptCacheError):
    """Raised when an external tool cannot be launched or times out."""

    pass
