"""Router fee buffering, conversion and burning."""

from tokenomics.fees.manager import FeeManager, FeeManagerState
from tokenomics.fees.result import ConversionOutcome, ConversionStatus

__all__ = [
    "ConversionOutcome",
    "ConversionStatus",
    "FeeManager",
    "FeeManagerState",
]
