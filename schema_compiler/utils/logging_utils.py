import logging
import sys
from typing import Optional, TextIO

DEFAULT_FORMAT = "%(name)s - %(levelname)s - %(message)s"


class _BelowLevel(logging.Filter):
    """Pass only records strictly below ``level``."""

    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def _handler(stream: TextIO, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.StreamHandler(stream=stream)
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def configure_split_stream_logging(
    *,
    logger_name: Optional[str] = None,
    level: int = logging.INFO,
    stderr_level: int = logging.WARNING,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Logger:
    """Send records below ``stderr_level`` to stdout and the rest to stderr.

    Cache hits and resolution hops (DEBUG/INFO) stay on stdout; compile
    failures stay visible on stderr when stdout is discarded.
    ``logger_name=None`` configures the root logger. Returns the configured logger.
    """
    formatter = formatter or logging.Formatter(DEFAULT_FORMAT)
    stderr_level = max(stderr_level, logging.DEBUG)

    target = logging.getLogger(logger_name)
    target.handlers.clear()
    target.setLevel(level)

    stdout_handler = _handler(sys.stdout, logging.DEBUG, formatter)
    stdout_handler.addFilter(_BelowLevel(stderr_level))
    target.addHandler(stdout_handler)
    target.addHandler(_handler(sys.stderr, stderr_level, formatter))

    # a named logger writes only through its own handlers
    if logger_name is not None:
        target.propagate = False
    return target
