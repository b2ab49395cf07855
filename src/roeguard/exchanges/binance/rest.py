# src/roeguard/exchanges/binance/rest.py
from __future__ import annotations

import hashlib
import hmac
import logging
import time
from typing import Any
from urllib.parse import urlencode

import requests

BASE_URL = "https://fapi.binance.com"

log = logging.getLogger("src.roeguard.exchanges.binance.rest")


def _ts_ms() -> int:
    return int(time.time() * 1000)


class BinanceAPIError(RuntimeError):
    """
    Raised for non-retryable Binance responses (HTTP >= 400) or when the
    retry budget is exhausted.
    """

    def __init__(
        self,
        message: str,
        *,
        status: int | None = None,
        code: int | None = None,
        msg: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.code = code
        self.msg = msg


class BinanceFuturesREST:
    """
    Binance USDⓈ-M Futures REST client (signed + public).

    max_retries counts attempts: the default of 1 issues every call exactly
    once; 429/5xx/network errors are retried with linear backoff only when
    the operator raises it.
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        *,
        base_url: str = BASE_URL,
        timeout: float = 10.0,
        max_retries: int = 1,
        backoff_base: float = 1.5,
        recv_window: int = 5000,
        session: requests.Session | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key or ""
        self.api_secret = (api_secret or "").encode("utf-8")

        self.timeout = float(timeout)
        self.max_retries = max(1, int(max_retries))
        self.backoff_base = float(backoff_base)
        self.recv_window = int(recv_window)

        # server_ms - local_ms, refreshed by sync_time()
        self.time_offset_ms = 0

        self.sess = session or requests.Session()
        if self.api_key:
            self.sess.headers.update({"X-MBX-APIKEY": self.api_key})

    # ---------------------------------------------------------------------
    # TIME
    # ---------------------------------------------------------------------

    def server_time(self) -> int:
        data = self._get("/fapi/v1/time", signed=False)
        return int(data["serverTime"])

    def sync_time(self) -> int:
        """
        Align signed request timestamps with the exchange clock.
        Returns the offset in ms.
        """
        before = _ts_ms()
        server_ms = self.server_time()
        after = _ts_ms()
        self.time_offset_ms = server_ms - (before + after) // 2
        log.debug("server time offset = %d ms", self.time_offset_ms)
        return self.time_offset_ms

    # ---------------------------------------------------------------------
    # SIGN
    # ---------------------------------------------------------------------

    def _sign_params(self, params: dict[str, Any]) -> dict[str, Any]:
        """
        Adds timestamp (+ recvWindow) and signature to params and returns NEW dict.
        signature = HMAC_SHA256(secret, query_string)
        """
        if not self.api_secret:
            raise BinanceAPIError("Binance signed request requires api_secret")

        p: dict[str, Any] = dict(params or {})
        p.setdefault("recvWindow", self.recv_window)
        p["timestamp"] = _ts_ms() + self.time_offset_ms

        qs = urlencode(p, doseq=True)
        sig = hmac.new(self.api_secret, qs.encode("utf-8"), hashlib.sha256).hexdigest()
        p["signature"] = sig
        return p

    # ---------------------------------------------------------------------
    # CORE REQUEST
    # ---------------------------------------------------------------------

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        signed: bool = False,
    ) -> Any:
        url = f"{self.base_url}{path}"
        last_err: Exception | None = None

        for attempt in range(1, self.max_retries + 1):
            req_params = dict(params or {})
            if signed:
                req_params = self._sign_params(req_params)

            try:
                r = self.sess.request(
                    method=method,
                    url=url,
                    params=req_params,
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                last_err = e
                log.warning(
                    "Binance request error (%s %s), attempt %d/%d | %s",
                    method, path, attempt, self.max_retries, repr(e),
                )
                self._backoff(attempt)
                continue

            # --- RATE LIMIT / TEMP SERVER ERRORS ---
            if r.status_code == 429 or r.status_code >= 500:
                last_err = BinanceAPIError(
                    f"Binance HTTP {r.status_code} {method} {path}",
                    status=r.status_code,
                )
                log.warning(
                    "Binance %d (%s %s), attempt %d/%d",
                    r.status_code, method, path, attempt, self.max_retries,
                )
                self._backoff(attempt)
                continue

            # --- OTHER ERRORS ---
            if r.status_code >= 400:
                # Binance returns {"code":..., "msg":...}
                try:
                    payload = r.json()
                except ValueError:
                    raise BinanceAPIError(
                        f"Binance HTTP {r.status_code} {method} {path}: {r.text[:500]}",
                        status=r.status_code,
                    )
                code = payload.get("code")
                msg = payload.get("msg")
                raise BinanceAPIError(
                    f"Binance HTTP {r.status_code} {method} {path}: code={code} msg={msg}",
                    status=r.status_code,
                    code=code,
                    msg=msg,
                )

            # --- OK ---
            if r.text:
                return r.json()
            return {}

        raise BinanceAPIError(
            f"Binance request failed after {self.max_retries} attempt(s): {method} {path} | last_err={last_err!r}",
            status=getattr(last_err, "status", None),
        )

    def _backoff(self, attempt: int) -> None:
        if attempt >= self.max_retries:
            return
        sleep = self.backoff_base * attempt
        log.warning("retry in %.1fs", sleep)
        time.sleep(sleep)

    # ---------------------------------------------------------------------
    # HTTP WRAPPERS
    # ---------------------------------------------------------------------

    def _get(self, path: str, *, params: dict[str, Any] | None = None, signed: bool = False):
        return self._request("GET", path, params=params, signed=signed)

    def _post(self, path: str, *, params: dict[str, Any] | None = None, signed: bool = False):
        return self._request("POST", path, params=params, signed=signed)

    # ---------------------------------------------------------------------
    # API METHODS
    # ---------------------------------------------------------------------

    def fetch_exchange_info(self) -> dict:
        return self._get("/fapi/v1/exchangeInfo", signed=False)

    def ticker_price(self) -> list[dict]:
        # [{"symbol": "BTCUSDT", "price": "6000.01", "time": ...}, ...]
        return self._get("/fapi/v1/ticker/price", signed=False)

    def position_risk(self):
        return self._get("/fapi/v2/positionRisk", signed=True)

    def account(self):
        return self._get("/fapi/v2/account", signed=True)

    def change_leverage(self, *, symbol: str, leverage: int):
        params = {"symbol": symbol, "leverage": int(leverage)}
        return self._post("/fapi/v1/leverage", params=params, signed=True)

    def new_order(self, **kwargs):
        # kwargs must contain proper params for Binance: symbol, side, type, quantity, etc.
        return self._post("/fapi/v1/order", params=kwargs, signed=True)
