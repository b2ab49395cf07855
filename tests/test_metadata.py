"""Asset metadata resolver: memoization, MIN_NOTIONAL extraction, failures."""
import pytest

from conftest import FakeExchange, symbol_entry
from src.roeguard.core.errors import MetadataUnavailable
from src.roeguard.core.market.metadata import AssetMetadataResolver
from src.roeguard.core.models.asset import AssetInfo
from src.roeguard.exchanges.binance.rest import BinanceAPIError


def test_resolves_precision_and_min_notional(exchange, resolver):
    exchange.exchange_info = {"symbols": [symbol_entry("XRPUSDT", base_precision=8, quote_precision=8, min_notional=5)]}

    info = resolver.resolve("XRPUSDT")

    assert info == AssetInfo(symbol="XRPUSDT", base_precision=8, quote_precision=8, min_notional=5.0)


def test_second_resolve_hits_cache(exchange, resolver, calls):
    first = resolver.resolve("XRPUSDT")
    second = resolver.resolve("XRPUSDT")

    assert first is second
    assert calls.count(("exchange_info",)) == 1


def test_each_symbol_fetched_once(exchange, resolver, calls):
    for _ in range(3):
        resolver.resolve("XRPUSDT")
        resolver.resolve("DOGEUSDT")

    assert calls.count(("exchange_info",)) == 2
    assert set(resolver.cache) == {"XRPUSDT", "DOGEUSDT"}


def test_injected_cache_is_shared_between_resolvers(exchange, calls):
    shared = {}
    AssetMetadataResolver(exchange, cache=shared).resolve("XRPUSDT")
    AssetMetadataResolver(exchange, cache=shared).resolve("XRPUSDT")

    assert calls.count(("exchange_info",)) == 1
    assert "XRPUSDT" in shared


def test_legacy_min_notional_key():
    ex = FakeExchange(prices={"BTCUSDT": 1.0})
    entry = symbol_entry("BTCUSDT")
    entry["filters"][-1] = {"filterType": "MIN_NOTIONAL", "minNotional": "100"}
    ex.exchange_info = {"symbols": [entry]}

    assert AssetMetadataResolver(ex).resolve("BTCUSDT").min_notional == 100.0


def test_unknown_symbol(resolver):
    with pytest.raises(MetadataUnavailable) as ei:
        resolver.resolve("NOPEUSDT")
    assert ei.value.symbol == "NOPEUSDT"


def test_missing_min_notional_filter(exchange, resolver):
    entry = symbol_entry("XRPUSDT")
    entry["filters"] = [f for f in entry["filters"] if f["filterType"] != "MIN_NOTIONAL"]
    exchange.exchange_info = {"symbols": [entry]}

    with pytest.raises(MetadataUnavailable):
        resolver.resolve("XRPUSDT")
    assert "XRPUSDT" not in resolver.cache


def test_upstream_failure_is_wrapped_and_not_cached(exchange, resolver, calls):
    exchange.fail["exchange_info"] = BinanceAPIError("Binance HTTP 503", status=503)

    with pytest.raises(MetadataUnavailable) as ei:
        resolver.resolve("XRPUSDT")
    assert isinstance(ei.value.__cause__, BinanceAPIError)

    # no internal retry
    assert calls.count(("exchange_info",)) == 1

    exchange.fail.clear()
    assert resolver.resolve("XRPUSDT").symbol == "XRPUSDT"
