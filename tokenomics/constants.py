"""Numeric scales and protocol defaults for the tokenomics engine.

Centralizes the fixed-point scales, integer width bounds and the default
parameter values used when no configuration file is supplied.
"""

# Fixed-point scale for absolute amounts and prices (1e12)
PRECISION = 10**12

# Fixed-point scale for ratios (parts per million)
PPM = 10**6

# Stored and returned amounts must fit an unsigned 128-bit integer
AMOUNT_MAX = 2**128 - 1

# Intermediate products must fit an unsigned 256-bit integer
WIDE_MAX = 2**256 - 1

# Minting curve defaults
DEFAULT_PRICE_INITIAL = PRECISION // 1000
DEFAULT_SLOPE = PRECISION // 1_000_000
DEFAULT_USER_PPM = 333_333
DEFAULT_TREASURY_PPM = 666_667

# Router defaults
DEFAULT_ROUTER_FEE_PPM = 5_000  # 0.5%
DEFAULT_MIN_SWAP_FOREIGN = PRECISION // 100
DEFAULT_MIN_INITIAL_FOREIGN = 100 * PRECISION

# Pool defaults (router fee is the only fee by default)
DEFAULT_POOL_FEE_PPM = 0

# Treasury buckets: the anchor bucket "a" carries the largest weight
DEFAULT_BUCKET_WEIGHTS = {
    "a": 500_000,
    "b": 166_667,
    "c": 166_667,
    "d": 166_666,
}

# Fee manager defaults
DEFAULT_SLIPPAGE_TOLERANCE_PPM = 100_000  # 10%

# Deferred work defaults
DEFAULT_CYCLE_BUDGET = 10
DEFAULT_ZAP_COST = 2
DEFAULT_CONVERSION_COST = 1
DEFAULT_BURN_COST = 1
