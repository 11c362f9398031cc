"""
Logging configuration for the coin search service and relay.

Keeps application logs visible while quieting the per-request chatter of the
HTTP client and server libraries, which would otherwise log every refresh tick.
"""
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

NOISY_LOGGERS = (
    "httpx",
    "httpcore",
    "asyncio",
    "uvicorn.access",
    "websockets",
)


def configure_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    enable_file_logging: bool = False,
    enable_console_logging: bool = True,
) -> None:
    """
    Configure root logging handlers and per-library levels.

    Args:
        log_level: Level for the ``coin_search`` loggers (DEBUG, INFO, ...).
        log_file: Optional path to a log file. If None and
            ``enable_file_logging`` is set, logs/coin_search_YYYYMMDD.log is used.
        enable_file_logging: Whether to also log to a file at DEBUG.
        enable_console_logging: Whether to log to stdout.

    Example:
        >>> from coin_search.logging_config import configure_logging
        >>> configure_logging(log_level="DEBUG")
    """
    handlers: list[logging.Handler] = []
    level = getattr(logging, log_level.upper(), logging.INFO)

    if enable_console_logging:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handlers.append(console_handler)

    if enable_file_logging:
        if log_file is None:
            log_dir = Path("logs")
            log_dir.mkdir(exist_ok=True)
            log_file = log_dir / f"coin_search_{datetime.now().strftime('%Y%m%d')}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(
            logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(funcName)s:%(lineno)d - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        handlers.append(file_handler)

    # Root goes to DEBUG only when a file handler wants everything.
    root_level = logging.DEBUG if enable_file_logging else level
    logging.basicConfig(level=root_level, handlers=handlers, force=True)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    app_level = logging.DEBUG if enable_file_logging else level
    logging.getLogger("coin_search").setLevel(app_level)
    logging.getLogger("__main__").setLevel(app_level)

    logger = logging.getLogger(__name__)
    logger.info("Logging configured (level=%s)", log_level.upper())
    if enable_file_logging and log_file:
        logger.info("Log file: %s", log_file)


def get_logger(name: str) -> logging.Logger:
    """Return a logger with the given name (typically ``__name__``)."""
    return logging.getLogger(name)
