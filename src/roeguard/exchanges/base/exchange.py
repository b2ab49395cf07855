# src/roeguard/exchanges/base/exchange.py
from __future__ import annotations

from abc import ABC, abstractmethod

from src.roeguard.core.models.order import OrderRequest
from src.roeguard.core.models.position import Position


class ExchangeAdapter(ABC):
    """
    Capability set consumed by the decision engine.
    Implementations hold no decision state; test doubles subclass this.
    """

    name: str

    # ---- clock ----

    def sync_time(self) -> None:
        """Optional: align request timestamps with the exchange clock."""
        return None

    # ---- market data ----

    @abstractmethod
    def fetch_exchange_info(self) -> dict:
        """Full symbol metadata listing ({"symbols": [...]})."""
        ...

    @abstractmethod
    def fetch_prices(self) -> dict[str, float]:
        """symbol -> current price for every tradable symbol."""
        ...

    # ---- account ----

    @abstractmethod
    def fetch_account_state(self) -> dict:
        """Must contain "available_balance"."""
        ...

    @abstractmethod
    def fetch_positions(self) -> list[Position]:
        """Every position row, flat ones included."""
        ...

    # ---- trading ----

    @abstractmethod
    def set_leverage(self, symbol: str, leverage: int) -> None:
        """Raises OrderRejected when the venue refuses the change."""
        ...

    @abstractmethod
    def submit_order(self, request: OrderRequest) -> dict:
        """Submit order to exchange, return the raw acknowledgment. Raises OrderRejected on refusal."""
        ...
