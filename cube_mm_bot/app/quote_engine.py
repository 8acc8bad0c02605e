"""Symmetric quoting around the mid price."""

from __future__ import annotations

from cube_mm_bot.app.errors import ConfigError
from cube_mm_bot.app.models import Quote, Ticker


def compute_quote(ticker: Ticker, margin: float, fee: float) -> Quote:
    mid = (ticker.bid + ticker.ask) / 2
    # Spread covers the maker fee plus the profit margin.
    spread = margin + fee
    return Quote(mid=mid, buy_price=mid * (1 - spread), sell_price=mid * (1 + spread))


class QuoteEngine:
    """Quotes with a fixed margin and fee, validated once at construction."""

    def __init__(self, margin: float, fee: float) -> None:
        spread = margin + fee
        if margin < 0 or fee < 0 or spread >= 1:
            raise ConfigError(f"quote spread must be in [0, 1), got margin={margin} fee={fee}")
        self.margin = margin
        self.fee = fee

    @property
    def spread(self) -> float:
        return self.margin + self.fee

    def quote(self, ticker: Ticker) -> Quote:
        return compute_quote(ticker, self.margin, self.fee)
