"""Starts one trading loop per asset and keeps them running."""

from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from cube_mm_bot.app.input_listener import CommandListener
from cube_mm_bot.app.trading_bot import TradingBot


class Supervisor:
    def __init__(
        self,
        bots: Sequence[TradingBot],
        listener: CommandListener | None = None,
        logger: Any | None = None,
        watch_interval_sec: float = 1.0,
    ) -> None:
        self.bots = list(bots)
        self.listener = listener
        self.logger = logger
        self.watch_interval_sec = watch_interval_sec
        self.restarts = 0
        self._bot_tasks: dict[str, asyncio.Task[None]] = {}
        self._listener_task: asyncio.Task[None] | None = None

    def start(self) -> None:
        for bot in self.bots:
            self._spawn(bot)
        if self.listener is not None:
            self._listener_task = asyncio.create_task(self.listener.start(), name="command-listener")
        self._info("Starting trading bots: {}", ", ".join(bot.symbol for bot in self.bots))

    async def run_forever(self) -> None:
        if not self._bot_tasks:
            self.start()
        try:
            while True:
                await asyncio.sleep(self.watch_interval_sec)
                self.check_tasks()
        finally:
            await self.stop()

    def check_tasks(self) -> None:
        """Restart any bot task that ended; a trading loop should never finish."""
        for bot in self.bots:
            task = self._bot_tasks.get(bot.symbol)
            if task is None or not task.done():
                continue
            exc = None if task.cancelled() else task.exception()
            self._error("Trading bot {} stopped unexpectedly: {}", bot.symbol, exc)
            self.restarts += 1
            self._spawn(bot)

        if self._listener_task is not None and self._listener_task.done():
            if not self._listener_task.cancelled() and (exc := self._listener_task.exception()) is not None:
                self._error("Command listener crashed: {}", exc)
            self._listener_task = None

    async def stop(self) -> None:
        tasks = [*self._bot_tasks.values(), self._listener_task]
        for task in tasks:
            if task is not None:
                task.cancel()
        for task in tasks:
            if task is None:
                continue
            try:
                await task
            except asyncio.CancelledError:
                pass
            except Exception as exc:  # noqa: BLE001
                self._error("Task {} failed during shutdown: {}", task.get_name(), exc)
        self._bot_tasks.clear()
        self._listener_task = None

    def _spawn(self, bot: TradingBot) -> None:
        self._bot_tasks[bot.symbol] = asyncio.create_task(bot.run(), name=f"trading-bot-{bot.symbol}")

    def _info(self, message: str, *args: object) -> None:
        if self.logger is not None and hasattr(self.logger, "info"):
            self.logger.info(message, *args)

    def _error(self, message: str, *args: object) -> None:
        if self.logger is not None and hasattr(self.logger, "error"):
            self.logger.error(message, *args)
