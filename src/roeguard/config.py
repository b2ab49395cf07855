# src/roeguard/config.py
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_WATCHLIST = (
    "IMXUSDT",
    "XRPUSDT",
    "DOGEUSDT",
    "BALUSDT",
    "EOSUSDT",
    "BATUSDT",
    "BELUSDT",
)

# src/roeguard/ -> src/config/roeguard.yaml
DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[1] / "config" / "roeguard.yaml"

_TRUE = {"1", "true", "yes", "on"}


@dataclass(frozen=True, slots=True)
class RestConfig:
    base_url: str = "https://fapi.binance.com"
    timeout: float = 10.0
    recv_window: int = 5000
    max_retries: int = 1
    backoff_base: float = 1.5

    def as_kwargs(self) -> dict[str, Any]:
        return {
            "base_url": self.base_url,
            "timeout": self.timeout,
            "recv_window": self.recv_window,
            "max_retries": self.max_retries,
            "backoff_base": self.backoff_base,
        }


@dataclass(frozen=True, slots=True)
class GuardConfig:
    exchange: str = "binance"
    account: str = ""
    watchlist: tuple[str, ...] = DEFAULT_WATCHLIST
    risk_fraction: float = 0.2
    leverage: int = 20
    roe_threshold: float = -10.0
    reversal_multiplier: float = 2.0
    isolate_reversal_errors: bool = False
    simulation: bool = True
    log_level: str = "INFO"
    rest: RestConfig = field(default_factory=RestConfig)


def _env_bool(raw: str | None, default: bool) -> bool:
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUE


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    data = yaml.safe_load(path.read_text(encoding="utf-8"))
    if data is not None and not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return data or {}


def build_config(cfg: dict[str, Any], env: dict[str, str] | None = None) -> GuardConfig:
    """
    YAML mapping + environment -> GuardConfig.
    Env wins: SIMULATION, LOG_LEVEL, ROEGUARD_WATCHLIST.
    """
    env = os.environ if env is None else env
    rest_cfg = cfg.get("rest") or {}

    watchlist = cfg.get("watchlist") or list(DEFAULT_WATCHLIST)
    env_watchlist = env.get("ROEGUARD_WATCHLIST")
    if env_watchlist:
        watchlist = [s for s in env_watchlist.split(",") if s.strip()]

    simulation = _env_bool(env.get("SIMULATION"), bool(cfg.get("simulation", True)))

    out = GuardConfig(
        exchange=str(cfg.get("exchange", "binance")).lower(),
        account=str(cfg.get("account") or ""),
        watchlist=tuple(str(s).strip().upper() for s in watchlist),
        risk_fraction=float(cfg.get("risk_fraction", 0.2)),
        leverage=int(cfg.get("leverage", 20)),
        roe_threshold=float(cfg.get("roe_threshold", -10.0)),
        reversal_multiplier=float(cfg.get("reversal_multiplier", 2.0)),
        isolate_reversal_errors=bool(cfg.get("isolate_reversal_errors", False)),
        simulation=simulation,
        log_level=str(env.get("LOG_LEVEL") or cfg.get("log_level") or "INFO").upper(),
        rest=RestConfig(
            base_url=str(rest_cfg.get("base_url", "https://fapi.binance.com")),
            timeout=float(rest_cfg.get("timeout", 10.0)),
            recv_window=int(rest_cfg.get("recv_window", 5000)),
            max_retries=int(rest_cfg.get("max_retries", 1)),
            backoff_base=float(rest_cfg.get("backoff_base", 1.5)),
        ),
    )

    if not out.watchlist:
        raise ValueError("watchlist is empty")
    if not 0 < out.risk_fraction <= 1:
        raise ValueError(f"risk_fraction must be in (0, 1]: {out.risk_fraction}")
    if out.leverage <= 0:
        raise ValueError(f"leverage must be positive: {out.leverage}")
    if out.reversal_multiplier <= 0:
        raise ValueError(f"reversal_multiplier must be positive: {out.reversal_multiplier}")

    return out


def load_config(path: Path | str | None = None, env: dict[str, str] | None = None) -> GuardConfig:
    return build_config(_load_yaml(Path(path) if path else DEFAULT_CONFIG_PATH), env=env)
