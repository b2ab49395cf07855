# src/roeguard/core/risk/sizing.py
from __future__ import annotations

from decimal import Decimal, ROUND_DOWN, localcontext

DEFAULT_RISK_FRACTION = 0.2


def _dec(x: float | int) -> Decimal:
    # str() keeps the shortest repr, so 0.1 stays 0.1 and not its binary expansion
    return Decimal(str(x))


def compute_risk_amount(
    available_balance: float,
    min_notional: float,
    risk_fraction: float = DEFAULT_RISK_FRACTION,
) -> float:
    """RiskAmount = max(min_notional, balance * fraction). Never below min_notional."""
    return max(float(min_notional), float(available_balance) * float(risk_fraction))


def size_order(risk_amount: float, price: float, base_precision: int, *, multiplier: float = 1) -> float:
    """
    floor(risk_amount * multiplier / price * 10^p) / 10^p

    Evaluated in Decimal over the shortest decimal repr of each input, which
    is how the exchange reads the quantity and price strings. Truncates
    toward zero so qty * price <= risk_amount * multiplier holds exactly in
    that arithmetic. The float product can still land one ulp above it
    (0.3 / 0.1 sizes to 3.0, and 3.0 * 0.1 == 0.30000000000000004); a
    float-first floor would give 2.9 there and lose a whole step.
    price <= 0 is the caller's problem.
    """
    with localcontext() as ctx:
        ctx.prec = 60
        ctx.rounding = ROUND_DOWN
        exp = Decimal(1).scaleb(-int(base_precision))
        raw = _dec(risk_amount) * _dec(multiplier) / _dec(price)
        qty = raw.quantize(exp, rounding=ROUND_DOWN)
    return float(max(qty, Decimal(0)))
