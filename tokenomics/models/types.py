"""Shared type definitions for configuration and API models.

Amounts cross the wire as decimal strings so that 128-bit values survive
JSON clients that parse numbers as doubles.
"""

from typing import Annotated, Any

from pydantic import BeforeValidator, Field

from tokenomics.constants import AMOUNT_MAX, PPM


def validate_amount(value: Any) -> str:
    """Validate that a value is a non-negative 128-bit amount.

    Args:
        value: Value to validate (string or int)

    Returns:
        The amount as a decimal string

    Raises:
        ValueError: If value is not a non-negative integer within the amount range
    """
    if isinstance(value, bool):
        raise ValueError("Amount must be string or int, got bool")

    if isinstance(value, int):
        int_value = value
    elif isinstance(value, str):
        try:
            int_value = int(value)
        except ValueError as err:
            raise ValueError(f"Amount must be a decimal integer string: '{value}'") from err
    else:
        raise ValueError(f"Amount must be string or int, got {type(value).__name__}")

    if int_value < 0:
        raise ValueError(f"Amount cannot be negative: {value}")
    if int_value > AMOUNT_MAX:
        raise ValueError(f"Amount overflow: {value} > 2^128-1")

    return str(int_value)


# 128-bit unsigned amount as decimal string (validated)
AmountStr = Annotated[
    str,
    BeforeValidator(validate_amount),
    Field(description="128-bit unsigned amount scaled by 1e12, as decimal string"),
]

# 128-bit unsigned amount as a plain integer (configuration files)
Amount = Annotated[int, Field(ge=0, le=AMOUNT_MAX)]

# Parts-per-million ratio
Ratio = Annotated[int, Field(ge=0, le=PPM)]

# Account or bucket identifier
Identifier = Annotated[str, Field(min_length=1, max_length=64, pattern=r"^[A-Za-z0-9_.:-]+$")]
