from __future__ import annotations
import hashlib

def make_client_order_id(*parts: str, max_len: int = 32) -> str:
    # Binance newClientOrderId: max 36 chars of [.A-Z:/a-z0-9_-]
    raw = "|".join(str(p) for p in parts if p is not None and p != "")
    h = hashlib.sha256(raw.encode("utf-8")).hexdigest()
    return "rg" + h[: max_len - 2]
