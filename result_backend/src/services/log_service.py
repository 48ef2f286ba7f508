"""Logging configuration for the result backend processes."""

import logging
import os
import time
from logging.handlers import TimedRotatingFileHandler

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


class SizeAndTimeRotatingHandler(TimedRotatingFileHandler):
    """Rotates at midnight or once the file reaches max_bytes."""

    def __init__(self, filename, max_bytes, backup_count=0, **kwargs):
        self.max_bytes = max_bytes
        super().__init__(filename, backupCount=backup_count, **kwargs)

    def shouldRollover(self, record):
        if int(time.time()) >= self.rolloverAt:
            return 1

        if self.stream and self.max_bytes > 0:
            self.stream.seek(0, os.SEEK_END)
            if self.stream.tell() >= self.max_bytes:
                return 1

        return 0

    def doRollover(self):
        super().doRollover()
        self.rolloverAt = self.computeRollover(int(time.time()))


def parse_level(level: str | int) -> int:
    """Accept 'debug'/'INFO'/logging.WARNING and return the numeric level."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level}")
    return value


def configure_logging(
    level: str | int = logging.INFO,
    log_dir: str | None = None,
    log_file: str = "result_backend.log",
    max_bytes: int = 5 * 1024 * 1024,  # 5 MB
    backup_count: int = 7,
) -> logging.Logger:
    """Configure root logger with a console handler and an optional log file.

    Args:
        level: Logging level, numeric or by name.
        log_dir: Directory for the rotating log file; console only when None.
        log_file: Log file name inside log_dir.
        max_bytes: Max file size before rotation.
        backup_count: Number of rotated files to keep.

    Returns:
        Configured root logger.
    """
    numeric_level = parse_level(level)

    logger = logging.getLogger()
    logger.setLevel(numeric_level)
    logger.handlers.clear()

    formatter = logging.Formatter(LOG_FORMAT)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    logger.addHandler(console_handler)

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        file_handler = SizeAndTimeRotatingHandler(
            filename=os.path.join(log_dir, log_file),
            when="midnight",
            interval=1,
            max_bytes=max_bytes,
            backup_count=backup_count,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        logger.addHandler(file_handler)

    # httpx logs every request at INFO.
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    return logger
