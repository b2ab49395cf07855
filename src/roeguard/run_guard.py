# src/roeguard/run_guard.py
from __future__ import annotations

import argparse
import logging
from dataclasses import replace

from dotenv import load_dotenv

from src.roeguard.config import DEFAULT_CONFIG_PATH, GuardConfig, load_config
from src.roeguard.core.engine.orchestrator import PositionLifecycleOrchestrator
from src.roeguard.core.engine.report import RunReport
from src.roeguard.core.market.metadata import AssetMetadataResolver
from src.roeguard.core.market.price_oracle import PriceOracle
from src.roeguard.core.oms.placement import build_order_placer
from src.roeguard.exchanges.registry import build_exchange


def build_orchestrator(cfg: GuardConfig) -> PositionLifecycleOrchestrator:
    exchange = build_exchange(cfg.exchange, account=cfg.account, rest_options=cfg.rest.as_kwargs())

    return PositionLifecycleOrchestrator(
        exchange=exchange,
        resolver=AssetMetadataResolver(exchange),
        oracle=PriceOracle(exchange),
        placer=build_order_placer(simulation=cfg.simulation, exchange=exchange),
        watchlist=cfg.watchlist,
        risk_fraction=cfg.risk_fraction,
        leverage=cfg.leverage,
        roe_threshold=cfg.roe_threshold,
        reversal_multiplier=cfg.reversal_multiplier,
        isolate_reversal_errors=cfg.isolate_reversal_errors,
    )


def run(argv: list[str] | None = None) -> RunReport:
    ap = argparse.ArgumentParser(prog="roeguard", description="One ROE guard pass over the watchlist.")
    ap.add_argument("--config", default=str(DEFAULT_CONFIG_PATH), help="YAML config path")
    mode = ap.add_mutually_exclusive_group()
    mode.add_argument("--simulation", action="store_true", help="force simulated placement")
    mode.add_argument("--live", action="store_true", help="force live placement")
    args = ap.parse_args(argv)

    # -------------------------------------------------------------------------
    # ENV (.env first) + CONFIG
    # -------------------------------------------------------------------------
    load_dotenv()

    try:
        cfg = load_config(args.config)
    except (FileNotFoundError, ValueError) as e:
        raise SystemExit(str(e))

    if args.simulation or args.live:
        cfg = replace(cfg, simulation=bool(args.simulation))

    # -------------------------------------------------------------------------
    # LOGGING
    # -------------------------------------------------------------------------
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
    )
    logger = logging.getLogger("src.roeguard.run_guard")

    logger.info("=== ROE GUARD START ===")
    logger.warning(
        "SIMULATION=%s (%s)",
        cfg.simulation,
        "NO REAL ORDERS" if cfg.simulation else "REAL ORDERS ENABLED",
    )

    # -------------------------------------------------------------------------
    # RUN (single pass)
    # -------------------------------------------------------------------------
    report = build_orchestrator(cfg).run_once()
    logger.info("=== ROE GUARD DONE ===")
    return report


def main(argv: list[str] | None = None) -> None:
    run(argv)


if __name__ == "__main__":
    main()
