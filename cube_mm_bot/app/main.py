"""Application entrypoint."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from cube_mm_bot.app.config import AppConfig, load_config
from cube_mm_bot.app.cube_client import CubeClient
from cube_mm_bot.app.dashboard import PerformanceLedger
from cube_mm_bot.app.errors import ConfigError
from cube_mm_bot.app.input_listener import CommandListener
from cube_mm_bot.app.logger import setup_logger
from cube_mm_bot.app.quote_engine import QuoteEngine
from cube_mm_bot.app.supervisor import Supervisor
from cube_mm_bot.app.trading_bot import TradingBot


def build_supervisor(config: AppConfig, client: CubeClient, logger, interactive: bool | None = None) -> Supervisor:
    """Create one ledger and trading bot per configured asset."""
    trading = config.trading
    ledgers: dict[str, PerformanceLedger] = {}
    bots: list[TradingBot] = []
    for asset in config.assets:
        ledger = PerformanceLedger(asset.symbol, unmatched_sell_policy=trading.unmatched_sell_policy)
        ledgers[asset.symbol] = ledger
        bots.append(
            TradingBot(
                market_data=client,
                symbol=asset.symbol,
                order_size=asset.order_size,
                quote_engine=QuoteEngine(margin=asset.profit_margin, fee=trading.maker_fee),
                ledger=ledger,
                trade_interval_sec=trading.trade_interval_sec,
                report_interval_sec=trading.report_interval_sec,
                logger=logger,
            )
        )

    use_listener = trading.interactive if interactive is None else interactive
    listener = CommandListener(ledgers, logger=logger) if use_listener else None
    return Supervisor(bots, listener=listener, logger=logger)


async def run(config_path: str | Path | None = None, log_dir: str | Path | None = None) -> None:
    logger = setup_logger(log_dir or Path.cwd() / "logs")

    try:
        config = load_config(config_path)
    except ConfigError as exc:
        logger.error("Startup aborted: {}", exc)
        raise

    client = CubeClient(
        api_key=config.cube.api_key,
        api_secret=config.cube.api_secret,
        subaccount_id=config.cube.subaccount_id,
        base_url=config.cube.base_url,
        timeout=config.trading.request_timeout_sec,
        logger=logger,
    )
    supervisor = build_supervisor(config, client, logger)

    logger.info("Bot started")
    logger.info(
        "Initialized components: client={}, base_url={}, assets={}, maker_fee={}",
        client.__class__.__name__,
        client.base_url,
        [(a.symbol, a.order_size, a.profit_margin) for a in config.assets],
        config.trading.maker_fee,
    )

    try:
        await supervisor.run_forever()
    except asyncio.CancelledError:
        logger.info("Shutdown requested")
        raise


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Cube exchange market-making demo bot")
    parser.add_argument("--config", default=None, help="path to config.yml (environment variables override it)")
    parser.add_argument("--log-dir", default=None, help="directory for rotating log files")
    args = parser.parse_args(argv)

    config_path = args.config
    default_config = Path.cwd() / "config.yml"
    if config_path is None and default_config.exists():
        config_path = default_config

    try:
        asyncio.run(run(config_path, args.log_dir))
    except ConfigError:
        return 1
    except KeyboardInterrupt:
        return 0
    return 0


if __name__ == "__main__":
    sys.exit(main())
