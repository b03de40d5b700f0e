"""Linear bonding curve (mint and burn of native supply)."""

from tokenomics.curve.base import (
    AllocationSink,
    BurnOutcome,
    MintOutcome,
    MintQuote,
    SupplyBurner,
)
from tokenomics.curve.minting_curve import CurveState, MintingCurve

__all__ = [
    "AllocationSink",
    "BurnOutcome",
    "CurveState",
    "MintOutcome",
    "MintQuote",
    "MintingCurve",
    "SupplyBurner",
]
