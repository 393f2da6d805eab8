"""
Error reporting for non-fatal failures.

Missing input files, malformed rows and bad faces do not abort a run. They
are logged with a running number and counted, and callers decide whether
the accumulated count warrants stopping.
"""

import logging
from collections import deque
from typing import Deque, Optional

logger = logging.getLogger(__name__)


class ErrorReporter:
    """Logs errors and keeps a monotonically increasing error counter."""

    def __init__(self, name: str = "solarview", keep_messages: int = 100):
        """
        Args:
            name: Logger suffix used for the error messages
            keep_messages: Number of most recent messages retained for inspection
        """
        self.logger = logging.getLogger(f"{__name__}.{name}")
        self.error_count = 0
        self.keep_messages = keep_messages
        self.messages: Deque[str] = deque(maxlen=keep_messages)

    def report(self, message: str) -> int:
        """
        Log an error and increment the counter.

        Args:
            message: Description of the failure, prefixed with its origin

        Returns:
            The error number assigned to this message
        """
        number = self.error_count
        self.logger.error(f"Error {number}: {message}")
        self.error_count += 1

        self.messages.append(message)
        return number

    @property
    def has_errors(self) -> bool:
        return self.error_count > 0


# Global reporter instance
_error_reporter = None


def get_error_reporter() -> ErrorReporter:
    """Get or create global error reporter instance."""
    global _error_reporter
    if _error_reporter is None:
        _error_reporter = ErrorReporter()
    return _error_reporter


def resolve_reporter(reporter: Optional[ErrorReporter]) -> ErrorReporter:
    """Return the given reporter or the global one."""
    return reporter if reporter is not None else get_error_reporter()
