from __future__ import annotations

from src.roeguard.core.models.asset import AssetInfo


def find_symbol_entry(info: dict, symbol: str) -> dict | None:
    for s in info.get("symbols", []) or []:
        if s.get("symbol") == symbol:
            return s
    return None


def parse_asset_info(sym: dict) -> AssetInfo:
    """
    Parse one Binance Futures exchangeInfo symbol entry.
    Raises ValueError if precision or MIN_NOTIONAL is missing.
    """
    min_notional = None

    for f in sym.get("filters", []):
        if f.get("filterType") == "MIN_NOTIONAL":
            # futures use "notional", spot-style payloads "minNotional"
            min_notional = float(f.get("notional", f.get("minNotional", 0)))

    if min_notional is None or min_notional <= 0:
        raise ValueError(f"MIN_NOTIONAL filter missing for symbol {sym.get('symbol')}")

    try:
        base_precision = int(sym["baseAssetPrecision"])
        quote_precision = int(sym["quotePrecision"])
    except (KeyError, TypeError, ValueError):
        raise ValueError(f"Incomplete precision for symbol {sym.get('symbol')}")

    if base_precision < 0 or quote_precision < 0:
        raise ValueError(f"Negative precision for symbol {sym.get('symbol')}")

    return AssetInfo(
        symbol=str(sym.get("symbol")),
        base_precision=base_precision,
        quote_precision=quote_precision,
        min_notional=min_notional,
    )
