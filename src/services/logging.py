"""Logging configuration for the API server and CLI tools.

The server logs to stdout and a file, CLI commands to stdout only. The level
comes from the LOG_LEVEL env var (default INFO; WARNING for production,
DEBUG for verbose output).
"""

import logging
import os
import sys
from pathlib import Path

LOG_FORMAT = "[%(asctime)s] %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Map string level names to logging constants
LOG_LEVEL_MAP = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def get_log_level(default: str = "INFO") -> int:
    """Resolve the logging level from LOG_LEVEL.

    Args:
        default: Level name used when LOG_LEVEL is unset

    Returns:
        Logging level constant (unknown names fall back to INFO)
    """
    level_name = os.getenv("LOG_LEVEL", default).upper()
    return LOG_LEVEL_MAP.get(level_name, logging.INFO)


def _handler(handler: logging.Handler, level: int) -> logging.Handler:
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    return handler


def setup_server_logging(log_file: str = "logs/server.log", default_level: str = "INFO") -> None:
    """
    Configure the root logger for the API server.

    Args:
        log_file: Path to log file (parent directories are created)
        default_level: Level name used when LOG_LEVEL is unset

    Behavior:
        - Replaces existing root handlers, so repeated calls do not duplicate output
        - Every record goes to stdout and to ``log_file``
    """
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    level = get_log_level(default_level)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(_handler(logging.StreamHandler(sys.stdout), level))
    root_logger.addHandler(_handler(logging.FileHandler(log_path), level))


def setup_cli_logging(name: str = "roomshare.cli", default_level: str = "INFO") -> logging.Logger:
    """Configure console-only logging for one-shot commands and return their logger.

    Args:
        name: Logger name for the command
        default_level: Level name used when LOG_LEVEL is unset

    Returns:
        Logger writing to stdout
    """
    level = get_log_level(default_level)
    logging.basicConfig(
        level=level,
        handlers=[_handler(logging.StreamHandler(sys.stdout), level)],
        force=True,
    )
    return logging.getLogger(name)
