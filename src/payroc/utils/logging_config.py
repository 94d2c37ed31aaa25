"""
Logging configuration and management for the Payroc client.

Library modules only call ``logging.getLogger(__name__)``; applications opt
into handlers with ``setup_logging``. Every handler installed here redacts
credentials (bearer tokens, API keys, passwords) before records are written.
"""

from datetime import datetime
import logging
import logging.handlers
import os
from pathlib import Path
import re
import sys
import time

# -------------------- Configuration --------------------


# Log directory
LOG_DIR = Path.home() / ".cache" / "payroc" / "logs"

# Log retention
LOG_RETENTION_DAYS = 3

# Log format strings
CONSOLE_FORMAT = "%(name)s %(levelname)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s"

# Date format for logs
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

SENSITIVE_PATTERNS = (
    "bearer ",
    "authorization:",
    "api_key=",
    "api-key=",
    "apikey=",
    "api_key:",
    "api-key:",
    "apikey:",
    "x-api-key:",
    "password=",
    "password:",
    "token=",
    "token:",
)

REDACTED = "[REDACTED]"

_SENSITIVE_RES = [
    re.compile(rf"({re.escape(pattern)} *)[^ ,&\n\r\t]*", re.IGNORECASE)
    for pattern in SENSITIVE_PATTERNS
]


# -------------------- Global State --------------------


_loggers_configured = set()


# -------------------- Utility Functions --------------------


def get_log_level() -> int:
    """
    Get the current log level from environment configuration.

    Checks LOG_LEVEL environment variable first, then DEBUG flag.

    Returns:
        Logging level constant (logging.DEBUG, logging.INFO, etc.)
    """
    level_str = os.getenv("LOG_LEVEL", "").upper()

    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    if level_str in level_map:
        return level_map[level_str]

    # Fall back to DEBUG env var
    if os.getenv("DEBUG", "").lower() in ("true", "1", "yes"):
        return logging.DEBUG

    return logging.INFO


def get_log_file_path() -> Path:
    """
    Get the path to today's log file, creating the log directory.
    """
    log_dir = LOG_DIR
    log_dir.mkdir(parents=True, exist_ok=True)

    today = datetime.now().strftime("%Y-%m-%d")
    return log_dir / f"payroc-{today}.log"


def cleanup_old_logs() -> None:
    """Remove log files older than LOG_RETENTION_DAYS."""
    log_dir = LOG_DIR

    if not log_dir.exists():
        return

    cutoff = time.time() - (LOG_RETENTION_DAYS * 24 * 60 * 60)

    for log_file in log_dir.glob("payroc-*.log"):
        try:
            if log_file.stat().st_mtime < cutoff:
                log_file.unlink()
                logging.getLogger(__name__).info(f"Removed old log file: {log_file}")
        except OSError as e:
            logging.getLogger(__name__).warning(f"Failed to remove {log_file}: {e}")


def scrub_sensitive_data(text: str) -> str:
    """
    Replace credential values in ``text`` with ``[REDACTED]``.

    A value runs from just after a known marker (``bearer ``, ``api_key=``,
    ``password:`` ...) up to the next space, comma, ampersand or line break.
    """
    if not text:
        return text

    for pattern in _SENSITIVE_RES:
        text = pattern.sub(rf"\g<1>{REDACTED}", text)
    return text


# -------------------- Filter Classes --------------------


class SensitiveDataFilter(logging.Filter):
    """Logging filter that redacts credentials from the rendered message."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.msg = scrub_sensitive_data(record.getMessage())
        record.args = None
        return True


# -------------------- Setup Functions --------------------


def setup_logging(
    name: str,
    level: int | None = None,
    console: bool = True,
    file: bool = False,
) -> logging.Logger:
    """
    Setup logging for a module with consistent formatting.

    Args:
        name: Logger name (usually __name__ or "payroc")
        level: Log level (defaults to get_log_level())
        console: Add console handler
        file: Add rotating file handler under LOG_DIR

    Returns:
        Configured logger instance

    Example:
        >>> logger = setup_logging("payroc", level=logging.DEBUG)
        >>> logger.debug("Fetching page")
    """
    # Avoid configuring the same logger twice
    if name in _loggers_configured:
        return logging.getLogger(name)

    logger = logging.getLogger(name)
    logger.setLevel(level or get_log_level())
    logger.handlers.clear()
    logger.propagate = False

    scrubber = SensitiveDataFilter()

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logger.level)
        console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        console_handler.addFilter(scrubber)
        logger.addHandler(console_handler)

    if file:
        file_handler = logging.handlers.RotatingFileHandler(
            get_log_file_path(),
            maxBytes=10 * 1024 * 1024,  # 10 MB
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logger.level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, DATE_FORMAT))
        file_handler.addFilter(scrubber)
        logger.addHandler(file_handler)
        cleanup_old_logs()

    _loggers_configured.add(name)

    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get or create a logger with standard configuration.

    Args:
        name: Logger name (use __name__)

    Returns:
        Configured logger instance
    """
    if name not in _loggers_configured:
        return setup_logging(name)
    return logging.getLogger(name)
