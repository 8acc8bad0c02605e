"""Minimal smoke check for Cube market data connectivity and request signing."""

from __future__ import annotations

import asyncio
import sys

from cube_mm_bot.app.config import load_config
from cube_mm_bot.app.cube_client import CubeClient
from cube_mm_bot.app.cube_sign import signed_headers
from cube_mm_bot.app.errors import MarketDataUnavailable


async def main() -> int:
    config = load_config()
    client = CubeClient(
        api_key=config.cube.api_key,
        api_secret=config.cube.api_secret,
        subaccount_id=config.cube.subaccount_id,
        base_url=config.cube.base_url,
        timeout=config.trading.request_timeout_sec,
    )

    headers = signed_headers(config.cube.api_key, config.cube.api_secret)
    print("signed headers:", {**headers.as_headers(), "x-api-key": "***"})

    try:
        tickers = await client.fetch_tickers()
    except MarketDataUnavailable as exc:
        print(f"FAIL: {exc}")
        return 1
    print(f"OK: {len(tickers)} tickers")

    for asset in config.assets:
        ticker = await client.get_by_symbol(asset.symbol)
        if ticker is None:
            print(f"{asset.symbol}: no ticker data")
        else:
            print(f"{asset.symbol}: bid={ticker.bid} ask={ticker.ask} volume={ticker.volume}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
