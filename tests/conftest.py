"""
Pytest configuration and shared fixtures for roeguard tests.

FakeExchange implements the full ExchangeAdapter capability set in memory and
appends every call to a shared `calls` log so tests can assert ordering.
"""
import pytest

from src.roeguard.core.errors import OrderRejected
from src.roeguard.core.market.metadata import AssetMetadataResolver
from src.roeguard.core.market.price_oracle import PriceOracle
from src.roeguard.core.models.order import OrderRequest, OrderResult
from src.roeguard.core.models.position import Position
from src.roeguard.core.oms.placement import OrderPlacer
from src.roeguard.exchanges.base.exchange import ExchangeAdapter


def symbol_entry(symbol, base_precision=1, quote_precision=8, min_notional=5.0):
    """Minimal Binance futures exchangeInfo symbol entry."""
    return {
        "symbol": symbol,
        "contractType": "PERPETUAL",
        "baseAssetPrecision": base_precision,
        "quotePrecision": quote_precision,
        "filters": [
            {"filterType": "PRICE_FILTER", "tickSize": "0.0001"},
            {"filterType": "LOT_SIZE", "stepSize": "0.1", "minQty": "0.1", "maxQty": "1000000"},
            {"filterType": "MIN_NOTIONAL", "notional": str(min_notional)},
        ],
    }


def make_position(symbol, amt, *, entry=1.0, mark=1.0, leverage=20, pnl=0.0):
    return Position(
        symbol=symbol,
        position_amt=amt,
        entry_price=entry,
        mark_price=mark,
        leverage=leverage,
        unrealized_profit=pnl,
    )


class FakeExchange(ExchangeAdapter):
    name = "fake"

    def __init__(self, *, positions=None, prices=None, balance=1000.0, symbols=None, calls=None):
        self.positions = list(positions or [])
        self.prices = dict(prices or {})
        self.balance = balance
        self.exchange_info = {"symbols": [symbol_entry(s) for s in (symbols or self.prices.keys())]}
        self.calls = calls if calls is not None else []

        # per-capability failure injection: exception instance to raise
        self.fail = {}
        self.fail_submit_for = set()

    def _record(self, *entry):
        self.calls.append(entry)
        err = self.fail.get(entry[0])
        if err is not None:
            raise err

    def sync_time(self):
        self._record("sync_time")

    def fetch_exchange_info(self):
        self._record("exchange_info")
        return self.exchange_info

    def fetch_prices(self):
        self._record("prices")
        return dict(self.prices)

    def fetch_account_state(self):
        self._record("account")
        return {"available_balance": self.balance}

    def fetch_positions(self):
        self._record("positions")
        return list(self.positions)

    def set_leverage(self, symbol, leverage):
        self._record("leverage", symbol, leverage)

    def submit_order(self, request: OrderRequest):
        self._record("submit", request.symbol, request.side.value, request.quantity)
        if request.symbol in self.fail_submit_for:
            raise OrderRejected("Margin is insufficient.", symbol=request.symbol, code=-2019)
        return {
            "orderId": 1000 + len(self.calls),
            "clientOrderId": request.client_order_id,
            "status": "NEW",
            "symbol": request.symbol,
        }


class RecordingPlacer(OrderPlacer):
    """Simulated-style placer that logs into the exchange call log."""

    simulated = True

    def __init__(self, calls, *, fail_for=()):
        self.calls = calls
        self.requests = []
        self.fail_for = set(fail_for)

    def place(self, request):
        self.calls.append(("place", request.symbol, request.side.value, request.quantity))
        if request.symbol in self.fail_for:
            raise RuntimeError(f"boom {request.symbol}")
        self.requests.append(request)
        return OrderResult(
            symbol=request.symbol,
            side=request.side,
            quantity=request.quantity,
            simulated=True,
            client_order_id=request.client_order_id,
        )


@pytest.fixture
def calls():
    return []


@pytest.fixture
def exchange(calls):
    return FakeExchange(
        prices={"XRPUSDT": 2.0, "DOGEUSDT": 2.0, "BALUSDT": 4.0, "EOSUSDT": 0.5},
        balance=1000.0,
        calls=calls,
    )


@pytest.fixture
def resolver(exchange):
    # fresh cache per test
    return AssetMetadataResolver(exchange, cache={})


@pytest.fixture
def oracle(exchange):
    return PriceOracle(exchange)


@pytest.fixture
def placer(calls):
    return RecordingPlacer(calls)
