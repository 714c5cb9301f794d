"""Logging configuration utilities."""

import logging
import os
from collections.abc import Sequence
from pathlib import Path

# levelname width 7 fits "WARNING"; %(relpath)s is filled by RelativePathFormatter
LOG_FORMAT = "[%(levelname)7s] %(asctime)s (%(relpath)s:%(lineno)d) --- %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class RelativePathFormatter(logging.Formatter):
    """Formatter exposing the emitting file relative to a base directory."""

    def __init__(
        self,
        fmt: str | None = None,
        datefmt: str | None = None,
        base_path: str | None = None,
    ) -> None:
        """Initialize the formatter.

        Args:
            fmt: Log format string
            datefmt: Date format string
            base_path: Directory paths are made relative to (default: cwd)
        """
        super().__init__(fmt, datefmt)
        self.base_path = base_path or str(Path.cwd())

    def format(self, record: logging.LogRecord) -> str:
        """Format the record after attaching its ``relpath`` field."""
        record.relpath = self._relative(record)
        return super().format(record)

    def _relative(self, record: logging.LogRecord) -> str:
        if not record.pathname:
            return record.filename or "unknown"
        try:
            return os.path.relpath(record.pathname, self.base_path)
        except ValueError:
            # Windows: no relative path across drives
            return record.pathname


def setup_logging(
    log_file: Path,
    level: int = logging.DEBUG,
    extra_handlers: Sequence[logging.Handler] | None = None,
) -> None:
    """Route fontlocal logging to ``log_file`` and any extra handlers.

    The log file is truncated on each run. Extra handlers (e.g. a
    ``RichHandler`` for console output) keep their own level and get the
    same formatter only when they have none yet.

    Args:
        log_file: Path to log file
        level: Root logger level (default: DEBUG)
        extra_handlers: Additional handlers to attach
    """
    formatter = RelativePathFormatter(LOG_FORMAT, LOG_DATE_FORMAT)

    file_handler = logging.FileHandler(log_file, mode="w")
    file_handler.setFormatter(formatter)
    handlers: list[logging.Handler] = [file_handler]
    for handler in extra_handlers or ():
        if handler.formatter is None:
            handler.setFormatter(formatter)
        handlers.append(handler)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in handlers:
        root_logger.addHandler(handler)
