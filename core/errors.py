"""Exception types raised by the cashflow engine."""

from __future__ import annotations

__all__ = ["CashflowError", "CashflowRangeError", "CashflowValidationError"]


class CashflowError(ValueError):
    """Base class for cashflow computation failures."""


class CashflowValidationError(CashflowError):
    """Raised when a deal or fixed cost carries malformed or missing fields."""

    def __init__(self, entity_id: object, field: str, message: str) -> None:
        self.entity_id = entity_id
        self.field = field
        super().__init__(f"{field} on record {entity_id!r}: {message}")


class CashflowRangeError(CashflowError):
    """Raised when a reporting range ends before it starts."""
