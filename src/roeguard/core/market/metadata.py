# src/roeguard/core/market/metadata.py
from __future__ import annotations

import logging
import threading
from typing import MutableMapping, Optional

from src.roeguard.core.errors import MetadataUnavailable
from src.roeguard.core.models.asset import AssetInfo
from src.roeguard.exchanges.base.exchange import ExchangeAdapter
from src.roeguard.exchanges.binance.filters import find_symbol_entry, parse_asset_info


class AssetMetadataResolver:
    """
    Per-symbol trading constraints (precision, MIN_NOTIONAL), memoized.

    The cache mapping is owned by the resolver and never evicted; pass one in
    to share it between resolvers. Inserts are insert-if-absent under a lock,
    so the first resolved AssetInfo for a symbol wins.
    """

    def __init__(
        self,
        exchange: ExchangeAdapter,
        *,
        cache: Optional[MutableMapping[str, AssetInfo]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.exchange = exchange
        self.cache: MutableMapping[str, AssetInfo] = cache if cache is not None else {}
        self.logger = logger or logging.getLogger("src.roeguard.core.market.metadata")
        self._lock = threading.Lock()

    def resolve(self, symbol: str) -> AssetInfo:
        cached = self.cache.get(symbol)
        if cached is not None:
            return cached

        try:
            info = self.exchange.fetch_exchange_info()
        except Exception as e:
            self.logger.error("[META] exchangeInfo failed for %s: %r", symbol, e)
            raise MetadataUnavailable(f"exchangeInfo failed: {e}", symbol=symbol) from e

        entry = find_symbol_entry(info or {}, symbol)
        if entry is None:
            self.logger.error("[META] %s not listed in exchangeInfo", symbol)
            raise MetadataUnavailable(f"{symbol} not found in exchangeInfo", symbol=symbol)

        try:
            asset = parse_asset_info(entry)
        except ValueError as e:
            self.logger.error("[META] bad filters for %s: %s", symbol, e)
            raise MetadataUnavailable(str(e), symbol=symbol) from e

        with self._lock:
            asset = self.cache.setdefault(symbol, asset)

        self.logger.debug(
            "[META] %s base_precision=%d quote_precision=%d min_notional=%s",
            symbol, asset.base_precision, asset.quote_precision, asset.min_notional,
        )
        return asset
