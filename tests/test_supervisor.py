"""
Tests for the supervisor and application wiring.

Bots run with millisecond intervals against a fake market-data source.
"""

import asyncio

import pytest

from conftest import FakeMarketData
from cube_mm_bot.app.config import load_config
from cube_mm_bot.app.dashboard import PerformanceLedger
from cube_mm_bot.app.main import build_supervisor
from cube_mm_bot.app.quote_engine import QuoteEngine
from cube_mm_bot.app.supervisor import Supervisor
from cube_mm_bot.app.trading_bot import TradingBot

ENV = {"API_KEY": "key-id", "API_SECRET": "cd" * 32, "SUBACCOUNT_ID": "1"}


def make_bot(market_data, symbol, order_size=1.0):
    return TradingBot(
        market_data=market_data,
        symbol=symbol,
        order_size=order_size,
        quote_engine=QuoteEngine(margin=0.005, fee=0.0006),
        ledger=PerformanceLedger(symbol),
        trade_interval_sec=0.005,
        report_interval_sec=0.05,
    )


class CrashingBot:
    """Bot stand-in whose first run raises, later runs block."""

    def __init__(self, symbol="ETH"):
        self.symbol = symbol
        self.runs = 0

    async def run(self):
        self.runs += 1
        if self.runs == 1:
            raise RuntimeError("loop died")
        await asyncio.Event().wait()


class TestSupervisor:
    @pytest.mark.asyncio
    async def test_runs_all_assets_concurrently(self, eth_ticker, sol_ticker, recording_logger):
        market_data = FakeMarketData(tickers={"ETH": eth_ticker, "SOL": sol_ticker})
        bots = [make_bot(market_data, "ETH"), make_bot(market_data, "SOL", 10.0)]
        supervisor = Supervisor(bots, logger=recording_logger, watch_interval_sec=0.01)

        task = asyncio.create_task(supervisor.run_forever())
        await asyncio.sleep(0.1)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        eth_calls = market_data.calls.count("ETH")
        sol_calls = market_data.calls.count("SOL")
        assert eth_calls > 1 and sol_calls > 1
        assert bots[0].ledger.snapshot().num_trades == eth_calls * 2
        assert bots[1].ledger.snapshot().num_trades == sol_calls * 2
        assert bots[1].ledger.snapshot().total_buy_volume == pytest.approx(sol_calls * 10.0)
        assert "Starting trading bots: ETH, SOL" in recording_logger.records["info"]

    @pytest.mark.asyncio
    async def test_restarts_crashed_bot(self, recording_logger):
        bot = CrashingBot()
        supervisor = Supervisor([bot], logger=recording_logger, watch_interval_sec=0.01)

        supervisor.start()
        await asyncio.sleep(0)
        supervisor.check_tasks()
        await asyncio.sleep(0)

        assert supervisor.restarts == 1
        assert bot.runs == 2
        assert "loop died" in recording_logger.records["error"][0]
        await supervisor.stop()

    @pytest.mark.asyncio
    async def test_stop_cancels_listener(self, eth_ticker):
        class BlockingListener:
            cancelled = False

            async def start(self):
                try:
                    await asyncio.Event().wait()
                except asyncio.CancelledError:
                    BlockingListener.cancelled = True
                    raise

        supervisor = Supervisor([make_bot(FakeMarketData([eth_ticker]), "ETH")], listener=BlockingListener())

        supervisor.start()
        await asyncio.sleep(0.01)
        await supervisor.stop()

        assert BlockingListener.cancelled is True


class TestBuildSupervisor:
    def test_one_bot_per_asset(self):
        config = load_config(environ=ENV)
        supervisor = build_supervisor(config, client=FakeMarketData(), logger=None, interactive=False)

        assert [bot.symbol for bot in supervisor.bots] == ["ETH", "SOL"]
        assert [bot.order_size for bot in supervisor.bots] == [1.0, 10.0]
        assert supervisor.bots[0].ledger is not supervisor.bots[1].ledger
        assert supervisor.bots[0].quote_engine.spread == pytest.approx(0.0056)
        assert supervisor.listener is None

    def test_interactive_listener_covers_assets(self):
        config = load_config(environ=ENV)
        supervisor = build_supervisor(config, client=FakeMarketData(), logger=None)

        assert supervisor.listener is not None
        assert set(supervisor.listener.ledgers) == {"eth", "sol"}
        assert supervisor.listener.ledgers["eth"] is supervisor.bots[0].ledger
