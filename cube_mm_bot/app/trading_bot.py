"""Per-asset market-making loop with simulated fills.

Each `TradingBot` owns one `PerformanceLedger`. A trade tick fetches the
asset's ticker, quotes around the mid price and records a simulated buy and
sell at the configured order size. A slower report tick logs the ledger
summary. Nothing raised inside a tick stops the loop.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any, Protocol

from cube_mm_bot.app.dashboard import PerformanceLedger
from cube_mm_bot.app.errors import MarketDataUnavailable
from cube_mm_bot.app.models import Ticker, TradeRecord, TradeSide
from cube_mm_bot.app.quote_engine import QuoteEngine


class MarketDataSource(Protocol):
    async def get_by_symbol(self, symbol: str) -> Ticker | None: ...


class TradingBot:
    def __init__(
        self,
        market_data: MarketDataSource,
        symbol: str,
        order_size: float,
        quote_engine: QuoteEngine,
        ledger: PerformanceLedger,
        trade_interval_sec: float = 10,
        report_interval_sec: float = 30,
        logger: Any | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.market_data = market_data
        self.symbol = symbol
        self.order_size = order_size
        self.quote_engine = quote_engine
        self.ledger = ledger
        self.trade_interval_sec = trade_interval_sec
        self.report_interval_sec = report_interval_sec
        self.logger = logger
        self.clock = clock or (lambda: datetime.now(UTC))

    async def run(self) -> None:
        """Run the trade and report loops; if either one fails, the other is cancelled."""
        async with asyncio.TaskGroup() as group:
            group.create_task(self.run_trade_loop(), name=f"trade-loop-{self.symbol}")
            group.create_task(self.run_report_loop(), name=f"report-loop-{self.symbol}")

    async def run_trade_loop(self) -> None:
        while True:
            started = time.monotonic()
            await self.trade_once()
            elapsed = time.monotonic() - started
            await asyncio.sleep(max(0.0, self.trade_interval_sec - elapsed))

    async def run_report_loop(self) -> None:
        while True:
            await asyncio.sleep(self.report_interval_sec)
            try:
                self.report_once()
            except Exception as exc:  # noqa: BLE001
                self._error("[{}] report failed: {}", self.symbol, exc)

    async def trade_once(self) -> bool:
        """Run one trade tick. Returns True when a buy/sell pair was recorded."""
        try:
            ticker = await self.market_data.get_by_symbol(self.symbol)
        except MarketDataUnavailable as exc:
            self._warning("[{}] Error fetching market data: {}", self.symbol, exc)
            return False
        except Exception as exc:  # noqa: BLE001
            self._error("[{}] Unexpected market data failure: {}", self.symbol, exc)
            return False

        if ticker is None:
            self._warning("No ticker data found for base currency: {}", self.symbol)
            return False

        try:
            quote = self.quote_engine.quote(ticker)
            # Buy first so the sell is attributed against its cost basis.
            self.ledger.record_trade(
                TradeRecord(side=TradeSide.BUY, price=quote.buy_price, volume=self.order_size, timestamp=self.clock())
            )
            self.ledger.record_trade(
                TradeRecord(side=TradeSide.SELL, price=quote.sell_price, volume=self.order_size, timestamp=self.clock())
            )
        except Exception as exc:  # noqa: BLE001
            self._error("[{}] trade tick failed: {}", self.symbol, exc)
            return False

        self._info(
            "[{}] Buy Price: {:.6f}, Sell Price: {:.6f}",
            self.symbol,
            quote.buy_price,
            quote.sell_price,
        )
        self._info("[{}] {}", self.symbol, self.ledger.format_last_trade())
        return True

    def report_once(self) -> str:
        summary = self.ledger.format_summary()
        self._info("\n{}", summary)
        return summary

    def _info(self, message: str, *args: object) -> None:
        if self.logger is not None and hasattr(self.logger, "info"):
            self.logger.info(message, *args)

    def _warning(self, message: str, *args: object) -> None:
        if self.logger is not None and hasattr(self.logger, "warning"):
            self.logger.warning(message, *args)
        elif self.logger is not None and hasattr(self.logger, "info"):
            self.logger.info(message, *args)

    def _error(self, message: str, *args: object) -> None:
        if self.logger is not None and hasattr(self.logger, "error"):
            self.logger.error(message, *args)
