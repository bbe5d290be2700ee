"""
Thin wrapper around Loguru so every module can simply:

    from loguru import logger
"""

import sys
from pathlib import Path

from loguru import logger
from core.config import settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> "
    "| <level>{level: <8}</level> "
    "| <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> "
    "- <level>{message}</level>"
)


def configure_logging(level: str | None = None, log_to_file: bool | None = None) -> None:
    # Remove existing handlers (FastAPI / Uvicorn adds its own)
    logger.remove()

    logger.add(
        sys.stderr,
        level=level or settings.LOG_LEVEL,
        diagnose=False,  # pretty tracebacks off in prod
        backtrace=settings.ENV == "development",
        enqueue=True,  # multiprocess‑safe
        format=CONSOLE_FORMAT,
    )

    if log_to_file is None:
        log_to_file = settings.LOG_TO_FILE
    if not log_to_file:
        return

    logger.add(
        Path(settings.LOG_DIR) / "meeting_notes_{time:YYYY-MM-DD}.log",
        rotation="00:00",  # midnight
        retention="7 days",
        compression="zip",
        level="DEBUG",      # keep everything for post-mortem
        enqueue=True,
        backtrace=False,
    )
