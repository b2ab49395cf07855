# src/roeguard/core/errors.py
from __future__ import annotations


class RoeGuardError(Exception):
    """Base class for decision-engine failures. `symbol` is None for account-wide errors."""

    def __init__(self, message: str, *, symbol: str | None = None):
        super().__init__(message)
        self.symbol = symbol


class MetadataUnavailable(RoeGuardError):
    """exchangeInfo call failed or the symbol / MIN_NOTIONAL filter is missing."""


class PriceUnavailable(RoeGuardError):
    """Price feed call failed or the symbol has no usable price."""


class AccountQueryFailed(RoeGuardError):
    """Account balance or position query failed."""


class OrderRejected(RoeGuardError):
    """Exchange refused the order (margin, quantity, leverage...). `code` is the venue's error code, if any."""

    def __init__(self, message: str, *, symbol: str | None = None, code: int | None = None):
        super().__init__(message, symbol=symbol)
        self.code = code


class InvalidPosition(RoeGuardError):
    """Position data violates the evaluator contract (zero leverage, zero amount)."""
