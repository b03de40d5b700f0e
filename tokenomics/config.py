"""Engine configuration.

Configuration is immutable once loaded. Every section is a frozen pydantic
model, and cross-field rules (ratios summing to PPM, non-empty bucket sets)
are enforced by model validators so that a bad parameter set is rejected at
construction time instead of surfacing mid-operation.

Usage:
    from tokenomics.config import DEFAULT_CONFIG, load_config_file

    config = load_config_file(Path("engine.json"))
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from tokenomics import constants
from tokenomics.constants import PPM
from tokenomics.errors import ValidationError
from tokenomics.models.types import Amount, Identifier, Ratio


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")


class MintShares(_Frozen):
    """Split of each mint between the buyer and the treasury."""

    user_ppm: Ratio = constants.DEFAULT_USER_PPM
    treasury_ppm: Ratio = constants.DEFAULT_TREASURY_PPM

    @model_validator(mode="after")
    def _sum_to_ppm(self) -> MintShares:
        if self.user_ppm + self.treasury_ppm != PPM:
            raise ValueError(
                f"mint shares must sum to {PPM}, got {self.user_ppm + self.treasury_ppm}"
            )
        return self


class CurveConfig(_Frozen):
    """Linear bonding curve parameters."""

    price_initial: Amount = Field(default=constants.DEFAULT_PRICE_INITIAL, gt=0)
    slope: Amount = constants.DEFAULT_SLOPE
    mint_shares: MintShares = MintShares()


class PoolConfig(_Frozen):
    """Constant-product pool parameters."""

    fee_ppm: Ratio = Field(default=constants.DEFAULT_POOL_FEE_PPM, lt=PPM)


class RouterConfig(_Frozen):
    """Router fee and trade minimums."""

    fee_ppm: Ratio = Field(default=constants.DEFAULT_ROUTER_FEE_PPM, lt=PPM)
    min_swap_foreign: Amount = constants.DEFAULT_MIN_SWAP_FOREIGN
    min_initial_foreign: Amount = constants.DEFAULT_MIN_INITIAL_FOREIGN


class TreasuryConfig(_Frozen):
    """Treasury bucket weights and zap dust threshold.

    Attributes:
        bucket_weights: Bucket id to weight in PPM; must sum to PPM. The
            bucket with the largest weight is the primary (locked) bucket.
        dust_threshold: Foreign excess below this stays buffered instead of
            being swapped for rebalancing.
    """

    bucket_weights: dict[Identifier, Ratio] = Field(
        default_factory=lambda: dict(constants.DEFAULT_BUCKET_WEIGHTS)
    )
    dust_threshold: Amount = 1

    @model_validator(mode="after")
    def _weights_sum_to_ppm(self) -> TreasuryConfig:
        if not self.bucket_weights:
            raise ValueError("at least one treasury bucket is required")
        total = sum(self.bucket_weights.values())
        if total != PPM:
            raise ValueError(f"bucket weights must sum to {PPM}, got {total}")
        return self


class FeeManagerConfig(_Frozen):
    """Fee buffering and conversion parameters."""

    min_swap_foreign: Amount = constants.DEFAULT_MIN_SWAP_FOREIGN
    slippage_tolerance_ppm: Ratio = Field(
        default=constants.DEFAULT_SLIPPAGE_TOLERANCE_PPM, lt=PPM
    )


class SchedulerConfig(_Frozen):
    """Per-cycle budget and the cost of each kind of deferred work."""

    cycle_budget: int = Field(default=constants.DEFAULT_CYCLE_BUDGET, ge=1)
    zap_cost: int = Field(default=constants.DEFAULT_ZAP_COST, ge=1)
    conversion_cost: int = Field(default=constants.DEFAULT_CONVERSION_COST, ge=1)
    burn_cost: int = Field(default=constants.DEFAULT_BURN_COST, ge=1)

    @model_validator(mode="after")
    def _budget_covers_each_task(self) -> SchedulerConfig:
        largest = max(self.zap_cost, self.conversion_cost, self.burn_cost)
        if self.cycle_budget < largest:
            raise ValueError(
                f"cycle budget {self.cycle_budget} cannot cover a task costing {largest}"
            )
        return self


class SystemConfig(_Frozen):
    """Complete engine configuration."""

    curve: CurveConfig = CurveConfig()
    pool: PoolConfig = PoolConfig()
    router: RouterConfig = RouterConfig()
    treasury: TreasuryConfig = TreasuryConfig()
    fee_manager: FeeManagerConfig = FeeManagerConfig()
    scheduler: SchedulerConfig = SchedulerConfig()


def load_config(data: Mapping[str, Any]) -> SystemConfig:
    """Build a SystemConfig from a plain mapping.

    Missing sections and fields take their defaults.

    Raises:
        ValidationError: If any parameter is invalid
    """
    try:
        return SystemConfig.model_validate(dict(data))
    except pydantic.ValidationError as err:
        raise ValidationError(f"Invalid engine configuration: {err}") from err


def load_config_file(path: Path | str) -> SystemConfig:
    """Load a SystemConfig from a JSON file.

    Raises:
        ValidationError: If the file is not a JSON object or any parameter is invalid
    """
    with open(path) as f:
        try:
            data = json.load(f)
        except json.JSONDecodeError as err:
            raise ValidationError(f"Config file {path} is not valid JSON: {err}") from err
    if not isinstance(data, dict):
        raise ValidationError(f"Config file {path} must contain a JSON object")
    return load_config(data)


# Default configuration instance
DEFAULT_CONFIG = SystemConfig()
