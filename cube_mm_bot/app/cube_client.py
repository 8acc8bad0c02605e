"""Cube exchange REST client: public tickers plus signed order submission."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from urllib.error import HTTPError, URLError
from urllib.request import Request, urlopen

from loguru import logger as default_logger

from cube_mm_bot.app.config import URL_MAINNET
from cube_mm_bot.app.cube_sign import signed_headers
from cube_mm_bot.app.errors import MarketDataUnavailable, OrderSubmissionError
from cube_mm_bot.app.models import OrderRequest, Ticker

TICKERS_PATH = "/md/v0/parsed/tickers"
MARKETS_PATH = "/ir/v0/markets"
ORDER_PATH = "/os/v0/order"


class TransportError(RuntimeError):
    """Low-level HTTP failure raised by `_request_sync`."""


def parse_tickers(payload: Any) -> list[Ticker]:
    """Convert the raw ticker feed into dense tickers, dropping partial entries."""
    if not isinstance(payload, dict) or not isinstance(payload.get("result"), list):
        raise MarketDataUnavailable("ticker payload has no 'result' list")

    tickers: list[Ticker] = []
    for row in payload["result"]:
        if not isinstance(row, dict):
            raise MarketDataUnavailable(f"ticker entry is not an object: {row!r}")
        symbol = row.get("base_currency")
        if not isinstance(symbol, str):
            raise MarketDataUnavailable(f"ticker entry without base_currency: {row!r}")
        bid, ask, volume = row.get("bid"), row.get("ask"), row.get("base_volume")
        if bid is None or ask is None or volume is None:
            continue
        try:
            tickers.append(Ticker(symbol=symbol, bid=float(bid), ask=float(ask), volume=float(volume)))
        except (TypeError, ValueError) as exc:
            raise MarketDataUnavailable(f"ticker {symbol} has non-numeric fields") from exc
    return tickers


class CubeClient:
    """Async wrapper for the Cube REST API."""

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        subaccount_id: int = 0,
        base_url: str = URL_MAINNET,
        market_data_url: str | None = None,
        timeout: float = 10.0,
        logger: Any | None = None,
    ) -> None:
        self.api_key = api_key
        self.api_secret = api_secret
        self.subaccount_id = subaccount_id
        self.base_url = base_url.rstrip("/")
        self.market_data_url = (market_data_url or base_url).rstrip("/")
        self.timeout = timeout
        self.logger = logger or default_logger

    async def fetch_tickers(self) -> list[Ticker]:
        try:
            payload = await self._request("GET", f"{self.market_data_url}{TICKERS_PATH}")
        except TransportError as exc:
            raise MarketDataUnavailable(str(exc)) from exc
        return parse_tickers(payload)

    async def get_by_symbol(self, symbol: str) -> Ticker | None:
        tickers = await self.fetch_tickers()
        for ticker in tickers:
            if ticker.symbol == symbol:
                return ticker
        return None

    async def get_markets(self) -> dict[str, Any]:
        try:
            payload = await self._request("GET", f"{self.base_url}{MARKETS_PATH}")
        except TransportError as exc:
            raise MarketDataUnavailable(str(exc)) from exc
        if not isinstance(payload, dict):
            raise MarketDataUnavailable("markets payload is not an object")
        return payload

    async def place_order(self, order: OrderRequest) -> dict[str, Any]:
        """Submit a signed order. Failures are raised, never retried."""
        headers = signed_headers(self.api_key, self.api_secret).as_headers()
        headers["Content-Type"] = "application/json"
        try:
            body = json.dumps(order.to_payload()).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise OrderSubmissionError(f"cannot serialize order: {exc}") from exc

        try:
            payload = await self._request("POST", f"{self.base_url}{ORDER_PATH}", body, headers)
        except TransportError as exc:
            self._log_error("place_order", exc)
            raise OrderSubmissionError(str(exc)) from exc
        if not isinstance(payload, dict):
            raise OrderSubmissionError("order response is not an object")
        return payload

    async def _request(
        self,
        method: str,
        url: str,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        try:
            return await asyncio.wait_for(
                asyncio.to_thread(self._request_sync, method, url, body, headers),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as exc:
            raise TransportError(f"timeout after {self.timeout}s: {method} {url}") from exc

    def _request_sync(
        self,
        method: str,
        url: str,
        body: bytes | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        req = Request(url=url, data=body, method=method.upper(), headers=headers or {})

        try:
            with urlopen(req, timeout=self.timeout) as resp:
                raw = resp.read().decode("utf-8")
        except HTTPError as exc:
            raw = exc.read().decode("utf-8", errors="ignore")
            raise TransportError(f"HTTPError {exc.code}: {raw}") from exc
        except URLError as exc:
            raise TransportError(f"URLError: {exc}") from exc
        except TimeoutError as exc:
            raise TransportError(f"timeout: {exc}") from exc
        except OSError as exc:
            raise TransportError(f"connection error: {exc}") from exc

        try:
            return json.loads(raw or "{}")
        except json.JSONDecodeError as exc:
            raise TransportError(f"malformed JSON from {url}: {exc}") from exc

    def _log_error(self, scope: str, exc: Exception) -> None:
        if hasattr(self.logger, "error"):
            self.logger.error("Cube client error [{}]: {}", scope, exc)
