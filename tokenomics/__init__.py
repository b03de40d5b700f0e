"""Tokenomics engine: bonding-curve mint, constant-product pool and treasury-owned liquidity."""

from tokenomics.config import DEFAULT_CONFIG, SystemConfig, load_config, load_config_file
from tokenomics.engine import TokenomicsEngine, create_system

__version__ = "0.1.0"
__all__ = [
    "DEFAULT_CONFIG",
    "SystemConfig",
    "TokenomicsEngine",
    "__version__",
    "create_system",
    "load_config",
    "load_config_file",
]
