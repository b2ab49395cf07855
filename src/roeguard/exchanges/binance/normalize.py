from __future__ import annotations
from src.roeguard.core.models.position import Position

def norm_position(raw: dict) -> Position | None:
    sym = str(raw.get("symbol", "")).upper()
    if sym == "":
        return None
    # flat rows stay in the snapshot; the orchestrator partitions them
    return Position(
        symbol=sym,
        position_amt=float(raw.get("positionAmt") or 0.0),
        entry_price=float(raw.get("entryPrice") or 0.0),
        mark_price=float(raw.get("markPrice") or 0.0),
        leverage=int(float(raw.get("leverage") or 0.0)),
        unrealized_profit=float(raw.get("unRealizedProfit") or 0.0),
    )

def norm_prices(raw) -> dict[str, float]:
    # /fapi/v1/ticker/price returns a list without symbol param, a dict with it
    rows = raw if isinstance(raw, list) else [raw]
    out: dict[str, float] = {}
    for r in rows:
        sym = str(r.get("symbol", "")).upper()
        px = r.get("price")
        if not sym or px is None:
            continue
        out[sym] = float(px)
    return out

def norm_account_state(raw: dict) -> dict:
    wallet = float(raw.get("totalWalletBalance") or 0.0)
    unreal = float(raw.get("totalUnrealizedProfit") or 0.0)
    equity = float(raw.get("totalMarginBalance") or (wallet + unreal))
    return {
        "wallet_balance": wallet,
        "equity": equity,
        "available_balance": float(raw.get("availableBalance") or 0.0),
        "unrealized_pnl": unreal,
    }
