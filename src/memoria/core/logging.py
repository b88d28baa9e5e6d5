"""
Logging configuration.

Everything logs under the "memoria" logger. setup_logging may be called more
than once (the CLI and tests do); each call replaces the handlers installed by
the previous one instead of stacking duplicates.
"""

import logging
import sys
from pathlib import Path

PACKAGE_LOGGER = "memoria"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

# Chatty HTTP / LLM client loggers; summarizer requests run constantly
THIRD_PARTY_LOGGERS = ("httpx", "httpcore", "LiteLLM", "litellm")

# Marks handlers owned by setup_logging
_OWNED = "_memoria_handler"


def quiet_third_party(level: int = logging.WARNING) -> None:
    """Raise the threshold of HTTP and LLM client loggers."""
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(level)


def setup_logging(
    level: int = logging.INFO,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure package logger with console and optional file output."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(level)

    for handler in [h for h in logger.handlers if getattr(h, _OWNED, False)]:
        logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _OWNED, True)
        logger.addHandler(handler)

    # Library debug output only when we are debugging ourselves
    quiet_third_party(logging.DEBUG if level <= logging.DEBUG else logging.WARNING)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Get a child logger."""
    return logging.getLogger(f"{PACKAGE_LOGGER}.{name}")
