"""Largest-remainder distribution of an integer total across weights."""

from __future__ import annotations

from collections.abc import Sequence

from tokenomics.constants import PPM
from tokenomics.errors import ValidationError
from tokenomics.math.fixed_point import mul_div


def largest_remainder(
    total: int,
    weights: Sequence[int],
    tie_priority: Sequence[int] | None = None,
) -> list[int]:
    """Split ``total`` in proportion to PPM ``weights`` with no rounding loss.

    Each share starts at floor(total * w / PPM). The units lost to flooring
    go one at a time to the shares with the largest fractional remainder
    ((total * w) mod PPM). Equal remainders are ordered by ``tie_priority``
    (lower first), then by position. Passing the number of leftover units
    each position has already received keeps equal-weight positions taking
    turns across repeated calls.

    Args:
        total: Non-negative amount to split
        weights: Weights in PPM, summing to PPM
        tie_priority: Optional per-position rank for breaking ties

    Returns:
        Shares in the order of ``weights``; they sum to ``total`` exactly

    Raises:
        ValidationError: If weights are empty, negative, or do not sum to PPM
    """
    if not weights:
        raise ValidationError("Cannot distribute across zero weights")
    if any(w < 0 for w in weights) or sum(weights) != PPM:
        raise ValidationError(f"Weights must be non-negative and sum to {PPM}: {list(weights)}")
    if total < 0:
        raise ValidationError(f"Cannot distribute a negative total: {total}")
    if tie_priority is not None and len(tie_priority) != len(weights):
        raise ValidationError("tie_priority must have one entry per weight")

    shares = [mul_div(total, w, PPM) for w in weights]
    leftover = total - sum(shares)
    if leftover == 0:
        return shares

    priority = tie_priority if tie_priority is not None else [0] * len(weights)
    remainders = [(total * w) % PPM for w in weights]
    order = sorted(range(len(weights)), key=lambda i: (-remainders[i], priority[i], i))
    for i in order[:leftover]:
        shares[i] += 1
    return shares
