"""Interactive stdin reader that prints ledger summaries on request."""

from __future__ import annotations

import asyncio
import sys
import threading
from collections.abc import Callable, Mapping
from typing import Any

from cube_mm_bot.app.dashboard import PerformanceLedger


def stdin_line_reader() -> Callable[[], str]:
    """Return a blocking line reader over the raw stdin descriptor.

    The unbuffered file object holds no lock, so a daemon thread parked in
    `readline()` never blocks interpreter shutdown.
    """
    raw = open(sys.stdin.fileno(), "rb", buffering=0, closefd=False)

    def read_line() -> str:
        return raw.readline().decode("utf-8", errors="replace")

    return read_line


class CommandListener:
    """Reads asset keywords (e.g. `eth`, `sol`) and prints the matching ledger summary."""

    def __init__(
        self,
        ledgers: Mapping[str, PerformanceLedger],
        read_line: Callable[[], str] | None = None,
        output: Callable[[str], None] = print,
        logger: Any | None = None,
    ) -> None:
        self.ledgers = {symbol.lower(): ledger for symbol, ledger in ledgers.items()}
        self.read_line = read_line
        self.output = output
        self.logger = logger

    def usage(self) -> str:
        keywords = ", ".join(f"'{name}'" for name in self.ledgers)
        return f"Unknown command. Use {keywords} to show that asset's dashboard."

    def handle_command(self, line: str) -> str:
        command = line.strip().lower()
        ledger = self.ledgers.get(command)
        if ledger is None:
            return self.usage()
        return ledger.format_summary()

    async def start(self) -> None:
        """Process lines until stdin reaches EOF.

        Lines are read on a daemon thread and handed over through a queue, so
        cancelling this coroutine leaves no worker in the default executor.
        """
        read_line = self.read_line or stdin_line_reader()
        loop = asyncio.get_running_loop()
        lines: asyncio.Queue[str] = asyncio.Queue()
        reader = threading.Thread(
            target=self._pump,
            args=(read_line, loop, lines),
            name="command-listener-stdin",
            daemon=True,
        )
        reader.start()

        while True:
            line = await lines.get()
            if line == "":
                self._log_info("Command listener: stdin closed")
                return
            if not line.strip():
                continue
            self.output(self.handle_command(line))

    def _pump(
        self,
        read_line: Callable[[], str],
        loop: asyncio.AbstractEventLoop,
        lines: asyncio.Queue[str],
    ) -> None:
        while True:
            try:
                line = read_line()
            except (OSError, ValueError) as exc:
                self._log_error("Command listener: stdin read failed: {}", exc)
                line = ""
            try:
                loop.call_soon_threadsafe(lines.put_nowait, line)
            except RuntimeError:
                # event loop already closed
                return
            if line == "":
                return

    def _log_info(self, message: str, *args: object) -> None:
        if self.logger is not None and hasattr(self.logger, "info"):
            self.logger.info(message, *args)

    def _log_error(self, message: str, *args: object) -> None:
        if self.logger is not None and hasattr(self.logger, "error"):
            self.logger.error(message, *args)
