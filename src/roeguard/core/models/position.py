from __future__ import annotations
from dataclasses import dataclass
from .enums import Side

@dataclass(frozen=True, slots=True)
class Position:
    """
    One positionRisk row. Flat rows (position_amt == 0) are kept so the
    snapshot mirrors what the exchange reports.
    """
    symbol: str
    position_amt: float          # signed: >0 long, <0 short
    entry_price: float
    mark_price: float
    leverage: int
    unrealized_profit: float

    @property
    def is_open(self) -> bool:
        return self.position_amt != 0.0

    @property
    def side(self) -> Side:
        if self.position_amt > 0:
            return Side.LONG
        if self.position_amt < 0:
            return Side.SHORT
        return Side.FLAT
