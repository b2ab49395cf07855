from __future__ import annotations
from enum import Enum

class Side(str, Enum):
    LONG = "LONG"
    SHORT = "SHORT"
    FLAT = "FLAT"

class OrderSide(str, Enum):
    BUY = "BUY"
    SELL = "SELL"

    def opposite(self) -> "OrderSide":
        return OrderSide.SELL if self is OrderSide.BUY else OrderSide.BUY

class OrderType(str, Enum):
    MARKET = "MARKET"

class OrderIntentType(str, Enum):
    OPEN = "OPEN"
    REVERSE = "REVERSE"
