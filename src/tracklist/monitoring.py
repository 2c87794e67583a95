"""Out-of-band error reporting.

The monitoring service itself is a collaborator: anything with a
``capture_exception`` method can be installed (a Sentry hub, an APM client).
Reports are skipped in development, and a failing reporter is logged, never
raised, so the response path is not affected.
"""

from typing import Protocol

from tracklist.config import get_settings
from tracklist.logging import get_logger

logger = get_logger("monitoring")


class ErrorReporter(Protocol):
    def capture_exception(self, exc: BaseException) -> object: ...


_reporter: ErrorReporter | None = None


def install_reporter(reporter: ErrorReporter | None) -> None:
    """Install (or with ``None`` remove) the process-wide reporter."""
    global _reporter
    _reporter = reporter


def report_exception(exc: BaseException) -> bool:
    """Forward ``exc`` to the installed reporter. Returns True when it was sent."""
    if _reporter is None or get_settings().environment == "development":
        return False
    try:
        _reporter.capture_exception(exc)
    except Exception as reporter_error:
        logger.warn("Error reporter failed", error=repr(reporter_error))
        return False
    return True
