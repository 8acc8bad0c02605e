"""Per-asset performance ledger for simulated market-making trades."""

from __future__ import annotations

import threading

from cube_mm_bot.app.models import LedgerStats, TradeRecord, TradeSide

UNMATCHED_SELL_POLICIES = {"zero_basis", "skip"}


class PerformanceLedger:
    """Running trade counters for one asset.

    Written by a single trading loop; any number of readers may call
    `snapshot()`, which copies the counters under a lock held only for the
    duration of the copy.
    """

    def __init__(self, symbol: str, unmatched_sell_policy: str = "zero_basis") -> None:
        if unmatched_sell_policy not in UNMATCHED_SELL_POLICIES:
            raise ValueError(f"unknown unmatched sell policy: {unmatched_sell_policy}")
        self.symbol = symbol
        self.unmatched_sell_policy = unmatched_sell_policy
        self._lock = threading.Lock()
        self._num_trades = 0
        self._total_profit = 0.0
        self._total_buy_volume = 0.0
        self._total_sell_volume = 0.0
        self._total_buy_notional = 0.0
        self._total_sell_notional = 0.0
        self._last_trade: TradeRecord | None = None

    def record_trade(self, trade: TradeRecord) -> None:
        with self._lock:
            self._num_trades += 1
            self._last_trade = trade

            if trade.side is TradeSide.BUY:
                self._total_buy_volume += trade.volume
                self._total_buy_notional += trade.notional
                return

            self._total_sell_volume += trade.volume
            self._total_sell_notional += trade.notional
            if self._total_buy_volume > 0:
                self._total_profit += trade.volume * (trade.price - self._average_buy_price())
            elif self.unmatched_sell_policy == "zero_basis":
                # No buys yet: cost basis counts as zero.
                self._total_profit += trade.volume * trade.price

    def snapshot(self) -> LedgerStats:
        with self._lock:
            return LedgerStats(
                symbol=self.symbol,
                num_trades=self._num_trades,
                total_profit=self._total_profit,
                total_buy_volume=self._total_buy_volume,
                total_sell_volume=self._total_sell_volume,
                total_buy_notional=self._total_buy_notional,
                total_sell_notional=self._total_sell_notional,
                average_buy_price=self._average_buy_price(),
                average_sell_price=self._average_sell_price(),
                last_trade=self._last_trade,
            )

    def format_summary(self) -> str:
        return format_summary(self.snapshot())

    def format_last_trade(self) -> str:
        trade = self.snapshot().last_trade
        if trade is None:
            return f"[{self.symbol}] No trades yet"
        return (
            f"Last trade: {trade.side.value} price={trade.price:.6f} "
            f"volume={trade.volume:.6f} at {trade.timestamp.isoformat()}"
        )

    def _average_buy_price(self) -> float:
        if self._total_buy_volume > 0:
            return self._total_buy_notional / self._total_buy_volume
        return 0.0

    def _average_sell_price(self) -> float:
        if self._total_sell_volume > 0:
            return self._total_sell_notional / self._total_sell_volume
        return 0.0


def format_summary(stats: LedgerStats) -> str:
    lines = [
        f"[{stats.symbol}] Performance Summary:",
        f"Number of trades: {stats.num_trades}",
        f"Total P&L: {stats.total_profit:.6f}",
        f"Total buy volume: {stats.total_buy_volume:.6f}",
        f"Total sell volume: {stats.total_sell_volume:.6f}",
        f"Average buy price: {stats.average_buy_price:.6f}",
        f"Average sell price: {stats.average_sell_price:.6f}",
    ]
    return "\n".join(lines)
