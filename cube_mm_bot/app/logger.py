"""Loguru sinks for the market-making bot: stdout plus a rotating log file."""

from __future__ import annotations

from pathlib import Path
import sys

from loguru import logger

LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level:<7} | {message}"


def setup_logger(log_dir: str | Path = "logs", level: str = "INFO", filename: str = "cube_mm_bot.log"):
    path = Path(log_dir)
    path.mkdir(parents=True, exist_ok=True)

    logger.remove()
    logger.add(sys.stderr, level=level, format=LOG_FORMAT, enqueue=True)
    logger.add(
        path / filename,
        level=level,
        format=LOG_FORMAT,
        rotation="5 MB",
        retention=5,
        enqueue=True,
        encoding="utf-8",
    )
    return logger
