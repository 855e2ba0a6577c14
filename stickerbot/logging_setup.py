"""Log sink configuration for the command-line entry points."""

import sys
from pathlib import Path

from loguru import logger

LOG_FILENAME = "stickerbot.log"


def get_log_dir() -> Path:
    """Return ~/.stickerbot/logs/, creating it if needed."""
    log_dir = Path.home() / ".stickerbot" / "logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def setup_logging(level: str = "INFO", log_file: bool = False, log_dir: Path | None = None) -> Path | None:
    """Replace loguru's default sink. Returns the log file path when one is added."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())

    if not log_file:
        return None

    path = (log_dir or get_log_dir()) / LOG_FILENAME
    logger.add(path, level=level.upper(), rotation="10 MB", retention=5, encoding="utf-8")
    return path
