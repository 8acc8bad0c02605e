"""
Pytest configuration and fixtures.

Shared fakes for the market-data feed and the injected logger.
"""

import pytest

from cube_mm_bot.app.errors import MarketDataUnavailable
from cube_mm_bot.app.models import Ticker

TEST_SECRET = "0001020304050607080910111213141516171819202122232425262728293031"


class RecordingLogger:
    """Collects brace-style log calls per level."""

    def __init__(self):
        self.records = {"info": [], "warning": [], "error": []}

    def _add(self, level, message, *args):
        self.records[level].append(message.format(*args))

    def info(self, message, *args):
        self._add("info", message, *args)

    def warning(self, message, *args):
        self._add("warning", message, *args)

    def error(self, message, *args):
        self._add("error", message, *args)


class FakeMarketData:
    """Scripted replacement for `CubeClient.get_by_symbol`.

    Each entry in `responses` is a Ticker, None, or an exception instance to
    raise. The last entry repeats once the script is exhausted.
    """

    def __init__(self, responses=None, tickers=None):
        self.responses = list(responses or [])
        self.tickers = dict(tickers or {})
        self.calls = []

    async def get_by_symbol(self, symbol):
        self.calls.append(symbol)
        if self.tickers:
            return self.tickers.get(symbol)
        if not self.responses:
            raise MarketDataUnavailable("no scripted response")
        response = self.responses.pop(0) if len(self.responses) > 1 else self.responses[0]
        if isinstance(response, BaseException):
            raise response
        return response


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def eth_ticker():
    return Ticker(symbol="ETH", bid=100.0, ask=102.0, volume=5000.0)


@pytest.fixture
def sol_ticker():
    return Ticker(symbol="SOL", bid=20.0, ask=20.2, volume=90000.0)


@pytest.fixture
def test_secret():
    return TEST_SECRET
