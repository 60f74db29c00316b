# Error reporter that writes surfaced failures to the log.
# Created: 2026-10-05

from __future__ import annotations

import logging
from collections.abc import Callable

from crossbox.errors import AuthenticationError, FetchError, UploadError

logger = logging.getLogger(__name__)


class LoggingErrorReporter:
    """Logs each reported error and optionally forwards it to a listener.

    The listener is how a presentation layer shows an alert; it is called
    after logging and its own failures are logged, not raised.
    """

    def __init__(self, listener: Callable[[BaseException], None] | None = None):
        self._listener = listener

    def report(self, error: BaseException) -> None:
        logger.warning("%s: %s", _describe(error), error)

        if self._listener is None:
            return
        try:
            self._listener(error)
        except Exception:
            logger.warning("Error listener failed", exc_info=True)


def _describe(error: BaseException) -> str:
    if isinstance(error, AuthenticationError):
        return "Authentication failed"
    if isinstance(error, FetchError):
        return "Could not list folder"
    if isinstance(error, UploadError):
        return "Upload failed"
    return f"Unexpected {type(error).__name__}"
