from __future__ import annotations
from src.roeguard.exchanges.binance.exchange import BinanceExchange

def build_exchange(name: str, *, account: str = "", rest_options: dict | None = None):
    name = name.lower()
    if name == "binance":
        return BinanceExchange(account=account, rest_options=rest_options)
    raise ValueError(f"Unknown exchange: {name}")
