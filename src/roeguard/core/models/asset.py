from __future__ import annotations
from dataclasses import dataclass

@dataclass(frozen=True, slots=True)
class AssetInfo:
    symbol: str
    base_precision: int
    quote_precision: int
    min_notional: float
