# src/roeguard/core/market/price_oracle.py
from __future__ import annotations

import logging
import math
from typing import Optional

from src.roeguard.core.errors import PriceUnavailable
from src.roeguard.exchanges.base.exchange import ExchangeAdapter


class PriceOracle:
    """Live price lookup. Never cached: every call hits the feed."""

    def __init__(self, exchange: ExchangeAdapter, *, logger: Optional[logging.Logger] = None):
        self.exchange = exchange
        self.logger = logger or logging.getLogger("src.roeguard.core.market.price_oracle")

    def current_price(self, symbol: str) -> float:
        try:
            prices = self.exchange.fetch_prices()
        except Exception as e:
            self.logger.error("[PRICE] feed failed for %s: %r", symbol, e)
            raise PriceUnavailable(f"price feed failed: {e}", symbol=symbol) from e

        raw = (prices or {}).get(symbol)
        if raw is None:
            self.logger.error("[PRICE] %s missing from price feed", symbol)
            raise PriceUnavailable(f"no price for {symbol}", symbol=symbol)

        try:
            price = float(raw)
        except (TypeError, ValueError) as e:
            raise PriceUnavailable(f"unparseable price for {symbol}: {raw!r}", symbol=symbol) from e

        if not math.isfinite(price) or price <= 0:
            raise PriceUnavailable(f"non-positive price for {symbol}: {price}", symbol=symbol)

        return price
