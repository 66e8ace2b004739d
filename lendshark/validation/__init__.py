"""Validation package."""

from lendshark.validation.validator import (
    INJECTION_PATTERNS,
    TransactionValidator,
    contains_injection_pattern,
)

__all__ = [
    "INJECTION_PATTERNS",
    "TransactionValidator",
    "contains_injection_pattern",
]
