# src/roeguard/core/risk/roe.py
from __future__ import annotations

from src.roeguard.core.errors import InvalidPosition
from src.roeguard.core.models.position import Position


def compute_roe(position: Position) -> float:
    """
    Return-on-equity in percent, rounded to 2 places.

    initial_margin = position_amt * mark_price / leverage is negative for
    shorts, so the raw ratio can carry the wrong sign. The result always takes
    the sign of unrealized_profit (0 counts as non-negative).
    """
    if not position.leverage:
        raise InvalidPosition(f"zero leverage for {position.symbol}", symbol=position.symbol)
    if not position.position_amt or not position.mark_price:
        raise InvalidPosition(f"{position.symbol} has no open notional", symbol=position.symbol)

    current_value = position.position_amt * position.mark_price
    initial_margin = current_value / position.leverage
    magnitude = abs(round(position.unrealized_profit / initial_margin * 100, 2))

    return magnitude if position.unrealized_profit >= 0 else -magnitude
