"""Error types shared across the bot."""

from __future__ import annotations


class ConfigError(ValueError):
    """Missing or invalid configuration detected at startup."""


class MarketDataUnavailable(RuntimeError):
    """Ticker feed could not be fetched or parsed."""


class InvalidKeyEncoding(ValueError):
    """API secret is not a 32-byte hex string."""


class OrderSubmissionError(RuntimeError):
    """Order could not be serialized or delivered to the exchange."""
