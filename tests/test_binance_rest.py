"""BinanceFuturesREST transport: signing, time offset, error mapping, retry budget."""
import hashlib
import hmac
from unittest.mock import Mock, patch
from urllib.parse import urlencode

import pytest
import requests

from src.roeguard.exchanges.binance.rest import BinanceAPIError, BinanceFuturesREST


def _response(status=200, payload=None, text=None):
    r = Mock()
    r.status_code = status
    r.json.return_value = payload if payload is not None else {}
    r.text = text if text is not None else ("{}" if payload is None else str(payload))
    return r


def _client(*responses, **kw):
    sess = Mock(spec=requests.Session)
    sess.headers = {}
    sess.request.side_effect = list(responses)
    return BinanceFuturesREST("key", "secret", session=sess, **kw), sess


def test_api_key_header_and_public_call():
    cli, sess = _client(_response(payload={"symbols": []}))

    assert cli.fetch_exchange_info() == {"symbols": []}
    assert sess.headers["X-MBX-APIKEY"] == "key"
    kwargs = sess.request.call_args.kwargs
    assert kwargs["method"] == "GET"
    assert kwargs["url"] == "https://fapi.binance.com/fapi/v1/exchangeInfo"
    assert "signature" not in kwargs["params"]


def test_signed_call_uses_hmac_and_server_offset():
    cli, sess = _client(_response(payload={"availableBalance": "10"}))
    cli.time_offset_ms = 1500

    with patch("src.roeguard.exchanges.binance.rest._ts_ms", return_value=1_000_000):
        cli.account()

    params = dict(sess.request.call_args.kwargs["params"])
    assert params["timestamp"] == 1_001_500
    assert params["recvWindow"] == 5000

    sig = params.pop("signature")
    expected = hmac.new(b"secret", urlencode(params).encode(), hashlib.sha256).hexdigest()
    assert sig == expected


def test_sync_time_computes_offset():
    cli, _ = _client(_response(payload={"serverTime": 2_000_000}))

    with patch("src.roeguard.exchanges.binance.rest._ts_ms", side_effect=[1_000_000, 1_000_010]):
        offset = cli.sync_time()

    assert offset == 2_000_000 - 1_000_005
    assert cli.time_offset_ms == offset


def test_binance_error_payload_is_raised():
    cli, _ = _client(_response(400, {"code": -2019, "msg": "Margin is insufficient."}))

    with pytest.raises(BinanceAPIError) as ei:
        cli.new_order(symbol="XRPUSDT", side="SELL", type="MARKET", quantity="10")

    assert ei.value.status == 400
    assert ei.value.code == -2019
    assert ei.value.msg == "Margin is insufficient."


def test_single_attempt_by_default():
    cli, sess = _client(_response(503, text="busy"))

    with pytest.raises(BinanceAPIError) as ei:
        cli.ticker_price()

    assert sess.request.call_count == 1
    assert ei.value.status == 503


def test_retry_budget_when_enabled():
    cli, sess = _client(
        _response(429, text=""),
        _response(payload=[{"symbol": "XRPUSDT", "price": "0.5"}]),
        max_retries=3,
        backoff_base=0.0,
    )

    with patch("src.roeguard.exchanges.binance.rest.time.sleep") as sleep:
        assert cli.ticker_price() == [{"symbol": "XRPUSDT", "price": "0.5"}]

    assert sess.request.call_count == 2
    sleep.assert_called_once()


def test_network_error_becomes_api_error():
    cli, _ = _client(requests.ConnectionError("reset"))

    with pytest.raises(BinanceAPIError):
        cli.position_risk()


def test_signed_call_without_secret():
    cli = BinanceFuturesREST("key", "", session=Mock(spec=requests.Session, headers={}))
    with pytest.raises(BinanceAPIError):
        cli.account()


def test_change_leverage_params():
    cli, sess = _client(_response(payload={"symbol": "XRPUSDT", "leverage": 20}))

    cli.change_leverage(symbol="XRPUSDT", leverage=20)

    kwargs = sess.request.call_args.kwargs
    assert kwargs["method"] == "POST"
    assert kwargs["url"].endswith("/fapi/v1/leverage")
    assert kwargs["params"]["leverage"] == 20
