"""Error taxonomy for the tokenomics engine.

Every caller-visible failure derives from EngineError and carries a stable
``code`` used by the HTTP layer. Deferred conditions (a fee conversion held
back by slippage protection, work left over after the cycle budget ran out)
are not errors and never raise.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for all engine failures."""

    code = "engine_error"


class ValidationError(EngineError):
    """Invalid construction parameters or malformed request."""

    code = "validation_error"


class InsufficientAmount(EngineError):
    """Amount is zero or below a minimum threshold."""

    code = "insufficient_amount"


class InsufficientLiquidity(EngineError):
    """The pool (or a bucket) cannot serve the requested amount."""

    code = "insufficient_liquidity"


class InsufficientSupply(EngineError):
    """Burn amount exceeds the outstanding supply."""

    code = "insufficient_supply"


class InsufficientBalance(EngineError):
    """Ledger account cannot cover the requested debit."""

    code = "insufficient_balance"


class SlippageExceeded(EngineError):
    """Realized output is below the caller's declared minimum."""

    code = "slippage_exceeded"


class Overflow(EngineError, ArithmeticError):
    """A value left the supported integer range."""

    code = "overflow"


class ConservationViolation(EngineError):
    """An internal accounting invariant failed."""

    code = "conservation_violation"


class BucketLocked(EngineError):
    """The primary treasury bucket can never be unwound."""

    code = "bucket_locked"


class Unauthorized(EngineError):
    """Caller is not the configured authority."""

    code = "unauthorized"


__all__ = [
    "EngineError",
    "ValidationError",
    "InsufficientAmount",
    "InsufficientLiquidity",
    "InsufficientSupply",
    "InsufficientBalance",
    "SlippageExceeded",
    "Overflow",
    "ConservationViolation",
    "BucketLocked",
    "Unauthorized",
]
