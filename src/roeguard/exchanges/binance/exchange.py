# src/roeguard/exchanges/binance/exchange.py
from __future__ import annotations

import os
import logging
from decimal import Decimal
from typing import Any, Optional

from src.roeguard.exchanges.base.exchange import ExchangeAdapter
from src.roeguard.core.errors import OrderRejected
from src.roeguard.core.models.order import OrderRequest
from src.roeguard.core.models.position import Position

from src.roeguard.exchanges.binance.rest import BinanceAPIError, BinanceFuturesREST
from src.roeguard.exchanges.binance.normalize import (
    norm_account_state,
    norm_position,
    norm_prices,
)


def _credentials(account: str) -> tuple[str | None, str | None]:
    if account:
        key = os.environ.get(f"BINANCE_{account.upper()}_API_KEY")
        sec = os.environ.get(f"BINANCE_{account.upper()}_API_SECRET")
        if key and sec:
            return key, sec
    key = os.environ.get("BINANCE_API_KEY")
    sec = os.environ.get("BINANCE_API_SECRET") or os.environ.get("BINANCE_SECRET_KEY")
    return key, sec


def _fmt_qty(qty: float) -> str:
    # plain decimal notation, no exponent, no trailing zeros
    s = format(Decimal(str(qty)), "f")
    if "." in s:
        s = s.rstrip("0").rstrip(".")
    return s


class BinanceExchange(ExchangeAdapter):
    """
    Binance USDⓈ-M Futures adapter over BinanceFuturesREST.
    Transport errors (BinanceAPIError) pass through untouched, except on the
    trading calls, where they become OrderRejected.
    """

    name = "binance"

    def __init__(
        self,
        *,
        account: str = "",
        rest: Optional[BinanceFuturesREST] = None,
        rest_options: Optional[dict[str, Any]] = None,
    ):
        self.logger = logging.getLogger("src.roeguard.exchanges.binance.exchange")
        self.account = account
        self._rest_options = dict(rest_options or {})
        self._client: Optional[BinanceFuturesREST] = rest

    # ---------------- REST ----------------

    @property
    def rest(self) -> BinanceFuturesREST:
        if self._client is None:
            key, sec = _credentials(self.account)
            if not key or not sec:
                raise RuntimeError(
                    f"Missing Binance credentials (account={self.account or 'default'})"
                )
            self._client = BinanceFuturesREST(key, sec, **self._rest_options)
        return self._client

    def sync_time(self) -> None:
        offset = self.rest.sync_time()
        self.logger.info("[TIME] server offset=%dms", offset)

    # ---------------- market data ----------------

    def fetch_exchange_info(self) -> dict:
        return self.rest.fetch_exchange_info()

    def fetch_prices(self) -> dict[str, float]:
        return norm_prices(self.rest.ticker_price())

    # ---------------- account ----------------

    def fetch_account_state(self) -> dict:
        return norm_account_state(self.rest.account())

    def fetch_positions(self) -> list[Position]:
        raw = self.rest.position_risk() or []
        out: list[Position] = []
        for r in raw:
            p = norm_position(r)
            if p:
                out.append(p)
        return out

    # ---------------- trading ----------------

    def set_leverage(self, symbol: str, leverage: int) -> None:
        try:
            resp = self.rest.change_leverage(symbol=symbol, leverage=int(leverage))
        except BinanceAPIError as e:
            raise OrderRejected(str(e), symbol=symbol, code=e.code) from e
        self.logger.info("[LEVERAGE] %s -> %s", symbol, resp.get("leverage", leverage))

    def submit_order(self, request: OrderRequest) -> dict:
        params: dict[str, str] = {
            "symbol": request.symbol,
            "side": request.side.value,
            "type": request.order_type.value,
            "quantity": _fmt_qty(request.quantity),
            "newClientOrderId": request.client_order_id,
        }

        self.logger.info(
            "[ORDER SUBMIT] %s %s qty=%s lev=%s cid=%s",
            request.symbol, request.side.value, params["quantity"],
            request.leverage, request.client_order_id,
        )

        try:
            return self.rest.new_order(**params)
        except BinanceAPIError as e:
            raise OrderRejected(str(e), symbol=request.symbol, code=e.code) from e
