# src/roeguard/core/oms/placement.py
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional

from src.roeguard.core.errors import OrderRejected
from src.roeguard.core.models.order import OrderRequest, OrderResult
from src.roeguard.exchanges.base.exchange import ExchangeAdapter


class OrderPlacer(ABC):
    """Placement strategy. Chosen once at startup, see build_order_placer()."""

    simulated: bool = False

    @abstractmethod
    def place(self, request: OrderRequest) -> OrderResult:
        ...


class SimulatedOrderPlacer(OrderPlacer):
    simulated = True

    def __init__(self, *, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger("src.roeguard.core.oms.placement")

    def place(self, request: OrderRequest) -> OrderResult:
        self.logger.info(
            "[SIMULATION] %s %s %s leverage=%s intent=%s",
            request.side.value, request.quantity, request.symbol,
            request.leverage, request.intent.value,
        )
        return OrderResult(
            symbol=request.symbol,
            side=request.side,
            quantity=request.quantity,
            simulated=True,
            client_order_id=request.client_order_id,
            status="SIMULATED",
        )


class LiveOrderPlacer(OrderPlacer):
    """
    Sets leverage, then submits a MARKET order.
    Adapters report rejections as OrderRejected; they are logged and
    re-raised, never retried.
    """

    def __init__(self, exchange: ExchangeAdapter, *, logger: Optional[logging.Logger] = None):
        self.exchange = exchange
        self.logger = logger or logging.getLogger("src.roeguard.core.oms.placement")

    def place(self, request: OrderRequest) -> OrderResult:
        try:
            self.exchange.set_leverage(request.symbol, request.leverage)
            ack = self.exchange.submit_order(request)
        except OrderRejected as e:
            self.logger.error(
                "[ORDER REJECTED] %s %s qty=%s code=%s | %s",
                request.symbol, request.side.value, request.quantity, e.code, e,
            )
            raise

        result = OrderResult.from_ack(request, ack or {})
        self.logger.info(
            "[ORDER ACK] %s %s qty=%s order_id=%s status=%s",
            result.symbol, result.side.value, result.quantity, result.order_id, result.status,
        )
        return result


def build_order_placer(*, simulation: bool, exchange: ExchangeAdapter) -> OrderPlacer:
    if simulation:
        return SimulatedOrderPlacer()
    return LiveOrderPlacer(exchange)
