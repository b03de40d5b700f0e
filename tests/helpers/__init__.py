"""Test helpers module for shared test utilities.

This module consolidates common test utilities to reduce duplication:
- constants: Accounts and common amounts
- factories: Pool, config and engine factory functions
"""

from tests.helpers.constants import ALICE, AUTHORITY, BOB, BOOTSTRAP_FOREIGN, ONE
from tests.helpers.factories import (
    RecordingBurner,
    RecordingSink,
    bootstrap,
    make_config,
    make_engine,
    make_pool,
)

__all__ = [
    # Constants
    "ALICE",
    "AUTHORITY",
    "BOB",
    "BOOTSTRAP_FOREIGN",
    "ONE",
    # Factories
    "RecordingBurner",
    "RecordingSink",
    "bootstrap",
    "make_config",
    "make_engine",
    "make_pool",
]
