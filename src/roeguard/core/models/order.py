# src/roeguard/core/models/order.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional
from uuid import uuid4

from src.roeguard.core.models.enums import OrderIntentType, OrderSide, OrderType


@dataclass(frozen=True, slots=True)
class OrderRequest:
    """
    OrderRequest: one sizing decision, ready for the placement gateway.

    Built by the orchestrator (open / reverse), consumed by an OrderPlacer,
    never persisted.
    """

    # --- identity ---
    symbol: str
    side: OrderSide
    quantity: float

    # --- execution ---
    leverage: int = 20
    order_type: OrderType = OrderType.MARKET

    # --- lifecycle ---
    intent: OrderIntentType = OrderIntentType.OPEN

    # --- idempotency ---
    client_order_id: str = field(default_factory=lambda: uuid4().hex)

    def __repr__(self) -> str:
        return (
            f"OrderRequest("
            f"{self.symbol} {self.side.value} "
            f"qty={self.quantity} "
            f"lev={self.leverage} "
            f"intent={self.intent.value} "
            f"cid={self.client_order_id}"
            f")"
        )


@dataclass(frozen=True, slots=True)
class OrderResult:
    symbol: str
    side: OrderSide
    quantity: float
    simulated: bool
    client_order_id: str
    order_id: Optional[str] = None
    status: Optional[str] = None
    raw: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_ack(cls, request: OrderRequest, ack: dict) -> "OrderResult":
        """Binance /fapi/v1/order acknowledgment -> OrderResult."""
        order_id = ack.get("orderId")
        return cls(
            symbol=request.symbol,
            side=request.side,
            quantity=request.quantity,
            simulated=False,
            client_order_id=str(ack.get("clientOrderId") or request.client_order_id),
            order_id=str(order_id) if order_id is not None else None,
            status=ack.get("status"),
            raw=dict(ack),
        )
