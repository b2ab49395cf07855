# src/roeguard/core/engine/report.py
from __future__ import annotations

from dataclasses import dataclass, field

from src.roeguard.core.models.order import OrderResult


@dataclass(frozen=True, slots=True)
class RoeRow:
    symbol: str
    roe: float
    pnl: float


@dataclass(slots=True)
class RunReport:
    """Outcome of one orchestrator pass. Lives for the run only."""

    run_id: str
    simulated: bool
    open_symbols: list[str] = field(default_factory=list)
    opened: list[OrderResult] = field(default_factory=list)
    open_failures: dict[str, str] = field(default_factory=dict)
    roe_rows: list[RoeRow] = field(default_factory=list)
    reversals: list[OrderResult] = field(default_factory=list)
    reverse_failures: dict[str, str] = field(default_factory=dict)


def format_roe_table(rows: list[RoeRow]) -> str:
    if not rows:
        return "(no open positions)"

    header = ("symbol", "ROE %", "PnL")
    body = [(r.symbol, f"{r.roe:.2f}", f"{r.pnl:.4f}") for r in rows]
    widths = [max(len(h), *(len(b[i]) for b in body)) for i, h in enumerate(header)]

    def line(cells) -> str:
        return " | ".join(
            c.ljust(w) if i == 0 else c.rjust(w)
            for i, (c, w) in enumerate(zip(cells, widths))
        )

    sep = "-+-".join("-" * w for w in widths)
    return "\n".join([line(header), sep, *(line(b) for b in body)])
