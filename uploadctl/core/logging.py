"""Logging setup for uploadctl.

Library modules log through ``logging.getLogger(__name__)``; the CLI calls
:func:`setup_logging` once per command.
"""

from __future__ import annotations

import logging
import sys
import time
from typing import Any, Optional

# =============================================================================
# Constants
# =============================================================================

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
NOTIFICATION_LOGGER_NAME = "uploadctl.notifications"

# Third-party loggers that are chatty at INFO/DEBUG
QUIET_LIBRARIES = ("httpx", "httpcore", "PIL")


# =============================================================================
# Logger Setup
# =============================================================================


def setup_logging(
    level: int = logging.WARNING,
    *,
    quiet: bool = False,
    verbose: bool = False,
) -> None:
    """Configure stderr logging.

    Args:
        level: Base logging level.
        quiet: Only show errors.
        verbose: Show debug messages, including per-file transfer events.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt=LOG_DATE_FORMAT, stream=sys.stderr)

    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)


# =============================================================================
# Timed Operations
# =============================================================================


class LogContext:
    """Log the start, end and duration of an operation.

    Keyword arguments are rendered as ``key=value`` pairs on the start line.
    """

    def __init__(
        self,
        operation: str,
        logger: Optional[logging.Logger] = None,
        **fields: Any,
    ):
        self.operation = operation
        self.logger = logger or logging.getLogger(__name__)
        self.fields = fields
        self.start_time: Optional[float] = None

    @property
    def elapsed(self) -> float:
        if self.start_time is None:
            return 0.0
        return time.monotonic() - self.start_time

    def __enter__(self) -> LogContext:
        self.start_time = time.monotonic()
        detail = ", ".join(f"{k}={v}" for k, v in self.fields.items())
        self.logger.info("Starting %s (%s)", self.operation, detail)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is None:
            self.logger.info("Finished %s in %.2fs", self.operation, self.elapsed)
        elif not issubclass(exc_type, Exception):
            self.logger.warning("%s interrupted after %.2fs", self.operation, self.elapsed)
        else:
            self.logger.error(
                "%s failed after %.2fs: %s", self.operation, self.elapsed, exc_val
            )
