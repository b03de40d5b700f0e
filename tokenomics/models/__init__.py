"""Pydantic types shared by configuration and the HTTP API."""

from tokenomics.models.types import Amount, AmountStr, Identifier, Ratio, validate_amount

__all__ = ["Amount", "AmountStr", "Identifier", "Ratio", "validate_amount"]
