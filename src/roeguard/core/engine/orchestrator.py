# src/roeguard/core/engine/orchestrator.py
from __future__ import annotations

import logging
from typing import Iterable, Optional
from uuid import uuid4

from src.roeguard.core.errors import AccountQueryFailed, OrderRejected
from src.roeguard.core.market.metadata import AssetMetadataResolver
from src.roeguard.core.market.price_oracle import PriceOracle
from src.roeguard.core.models.enums import OrderIntentType, OrderSide
from src.roeguard.core.models.order import OrderRequest, OrderResult
from src.roeguard.core.models.position import Position
from src.roeguard.core.oms.placement import OrderPlacer
from src.roeguard.core.risk.roe import compute_roe
from src.roeguard.core.risk.sizing import DEFAULT_RISK_FRACTION, compute_risk_amount, size_order
from src.roeguard.core.engine.report import RoeRow, RunReport, format_roe_table
from src.roeguard.core.utils.idempotency import make_client_order_id
from src.roeguard.exchanges.base.exchange import ExchangeAdapter


class PositionLifecycleOrchestrator:
    """
    One pass over the account per run_once():

      1. snapshot   - all positions, split into open / flat
      2. open phase - SELL every watchlist symbol with no open position
      3. evaluate   - ROE per open position, reverse when ROE < roe_threshold

    Both phases walk their sequence strictly one item at a time: each
    symbol's account read, sizing and placement finish before the next
    symbol starts, so every size is computed against the balance left by the
    previous order.

    Open-phase failures are logged and skipped per symbol. Evaluate-phase
    failures are logged and re-raised (aborting the rest of the pass) unless
    isolate_reversal_errors is set.
    """

    def __init__(
        self,
        *,
        exchange: ExchangeAdapter,
        resolver: AssetMetadataResolver,
        oracle: PriceOracle,
        placer: OrderPlacer,
        watchlist: Iterable[str],
        risk_fraction: float = DEFAULT_RISK_FRACTION,
        leverage: int = 20,
        roe_threshold: float = -10.0,
        reversal_multiplier: float = 2.0,
        isolate_reversal_errors: bool = False,
        run_id: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.exchange = exchange
        self.resolver = resolver
        self.oracle = oracle
        self.placer = placer

        # dedupe, keep order
        self.watchlist: list[str] = list(dict.fromkeys(s.upper() for s in watchlist))

        self.risk_fraction = float(risk_fraction)
        self.leverage = int(leverage)
        self.roe_threshold = float(roe_threshold)
        self.reversal_multiplier = float(reversal_multiplier)
        self.isolate_reversal_errors = bool(isolate_reversal_errors)

        self.run_id = run_id or uuid4().hex[:12]
        self.logger = logger or logging.getLogger("src.roeguard.core.engine.orchestrator")

    # ------------------------------------------------------------------
    # run
    # ------------------------------------------------------------------

    def run_once(self) -> RunReport:
        report = RunReport(run_id=self.run_id, simulated=self.placer.simulated)

        self.logger.info(
            "[RUN] start run_id=%s watchlist=%s simulated=%s",
            self.run_id, ",".join(self.watchlist), self.placer.simulated,
        )

        positions = self.snapshot()
        open_positions = [p for p in positions if p.is_open]
        report.open_symbols = [p.symbol for p in open_positions]

        try:
            self.open_missing(report.open_symbols, report)
            self.evaluate(open_positions, report)
        finally:
            # rows evaluated before a fail-fast abort are still reported
            self.logger.info("[ROE] run_id=%s\n%s", self.run_id, format_roe_table(report.roe_rows))

        self.logger.info(
            "[RUN] done run_id=%s opened=%d open_failed=%d reversed=%d",
            self.run_id, len(report.opened), len(report.open_failures), len(report.reversals),
        )
        return report

    # ------------------------------------------------------------------
    # snapshot
    # ------------------------------------------------------------------

    def snapshot(self) -> list[Position]:
        try:
            self.exchange.sync_time()
        except Exception as e:
            self.logger.error("[SNAPSHOT] server time sync failed: %r", e)
            raise AccountQueryFailed(f"server time sync failed: {e}") from e

        try:
            positions = list(self.exchange.fetch_positions() or [])
        except Exception as e:
            self.logger.error("[SNAPSHOT] position query failed: %r", e)
            raise AccountQueryFailed(f"position query failed: {e}") from e

        self.logger.info(
            "[SNAPSHOT] positions=%d open=%d",
            len(positions), sum(1 for p in positions if p.is_open),
        )
        return positions

    # ------------------------------------------------------------------
    # open phase
    # ------------------------------------------------------------------

    def missing_symbols(self, open_symbols: Iterable[str]) -> list[str]:
        held = set(open_symbols)
        return [s for s in self.watchlist if s not in held]

    def open_missing(self, open_symbols: Iterable[str], report: RunReport) -> None:
        for symbol in self.missing_symbols(open_symbols):
            try:
                res = self.open_position(symbol)
            except Exception as e:
                # isolated per symbol: log and move on
                self.logger.error("[OPEN] %s failed: %r", symbol, e)
                report.open_failures[symbol] = repr(e)
                continue

            report.opened.append(res)
            self.logger.info("[OPEN] opened %s %s qty=%s", symbol, res.side.value, res.quantity)

    def open_position(self, symbol: str) -> OrderResult:
        request = self._build_request(
            symbol,
            side=OrderSide.SELL,
            multiplier=1.0,
            intent=OrderIntentType.OPEN,
        )
        return self.placer.place(request)

    # ------------------------------------------------------------------
    # evaluate phase
    # ------------------------------------------------------------------

    def evaluate(self, open_positions: Iterable[Position], report: RunReport) -> None:
        for pos in open_positions:
            try:
                roe = compute_roe(pos)
                report.roe_rows.append(RoeRow(symbol=pos.symbol, roe=roe, pnl=pos.unrealized_profit))

                if roe >= self.roe_threshold:
                    continue

                self.logger.warning(
                    "[REVERSE] %s ROE=%.2f%% < %.2f%% side=%s amt=%s",
                    pos.symbol, roe, self.roe_threshold, pos.side.value, pos.position_amt,
                )
                res = self.reverse_position(pos)
            except Exception as e:
                self.logger.error("[REVERSE] %s failed: %r", pos.symbol, e)
                report.reverse_failures[pos.symbol] = repr(e)
                if not self.isolate_reversal_errors:
                    raise
                continue

            report.reversals.append(res)
            self.logger.info("[REVERSE] flipped %s %s qty=%s", pos.symbol, res.side.value, res.quantity)

    @staticmethod
    def reversal_side(position: Position) -> OrderSide:
        # long -> SELL to flip short, short -> BUY to flip long
        return OrderSide.SELL if position.position_amt > 0 else OrderSide.BUY

    def reverse_position(self, position: Position) -> OrderResult:
        request = self._build_request(
            position.symbol,
            side=self.reversal_side(position),
            multiplier=self.reversal_multiplier,
            intent=OrderIntentType.REVERSE,
        )
        return self.placer.place(request)

    # ------------------------------------------------------------------
    # sizing
    # ------------------------------------------------------------------

    def _available_balance(self) -> float:
        try:
            state = self.exchange.fetch_account_state()
            return float(state["available_balance"])
        except Exception as e:
            self.logger.error("[ACCOUNT] balance query failed: %r", e)
            raise AccountQueryFailed(f"account query failed: {e}") from e

    def _build_request(
        self,
        symbol: str,
        *,
        side: OrderSide,
        multiplier: float,
        intent: OrderIntentType,
    ) -> OrderRequest:
        asset = self.resolver.resolve(symbol)
        balance = self._available_balance()
        risk_amount = compute_risk_amount(balance, asset.min_notional, self.risk_fraction)
        price = self.oracle.current_price(symbol)
        qty = size_order(risk_amount, price, asset.base_precision, multiplier=multiplier)

        self.logger.info(
            "[SIZE] %s %s balance=%.4f risk=%.4f price=%s x%s -> qty=%s",
            symbol, intent.value, balance, risk_amount, price, multiplier, qty,
        )

        if qty <= 0:
            raise OrderRejected(
                f"quantity rounds to zero (risk={risk_amount} price={price} precision={asset.base_precision})",
                symbol=symbol,
            )

        return OrderRequest(
            symbol=symbol,
            side=side,
            quantity=qty,
            leverage=self.leverage,
            intent=intent,
            client_order_id=make_client_order_id(self.run_id, symbol, side.value, intent.value),
        )
