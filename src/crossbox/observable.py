"""Change notification and the shared controller base.

Created: 2026-10-03

Controllers expose read-only properties to the presentation layer. Observers
register a callback with ``subscribe()`` and are told, by property name, when
a value changed. Callbacks run synchronously, in subscription order, after the
new value is already visible.

``Controller`` also owns the injected error reporter and the helper used to
call fire-and-forget collaborators (reporter, navigator) without letting
their latency or failures leak into the caller.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from typing import Any

from crossbox.ports import ErrorReporterPort

logger = logging.getLogger(__name__)

PropertyChangedCallback = Callable[[Any, str], Any]


class PropertyNotifier:
    """Ordered list of property-changed subscribers."""

    def __init__(self, sender: Any):
        self._sender = sender
        self._subscribers: list[PropertyChangedCallback] = []

    def subscribe(self, callback: PropertyChangedCallback) -> None:
        self._subscribers.append(callback)

    def unsubscribe(self, callback: PropertyChangedCallback) -> bool:
        """Remove a subscriber. Returns False if it was not subscribed."""
        try:
            self._subscribers.remove(callback)
        except ValueError:
            return False
        return True

    def notify(self, property_name: str) -> None:
        # Copy so a callback may unsubscribe itself while being notified.
        for callback in list(self._subscribers):
            try:
                callback(self._sender, property_name)
            except Exception:
                logger.warning(
                    "Property-changed subscriber failed for %s", property_name, exc_info=True
                )

    def __len__(self) -> int:
        return len(self._subscribers)


class Controller:
    """Base class for screen controllers."""

    def __init__(self, reporter: ErrorReporterPort):
        self._reporter = reporter
        self._notifier = PropertyNotifier(self)
        self._background: set[asyncio.Future] = set()

    def subscribe(self, callback: PropertyChangedCallback) -> None:
        self._notifier.subscribe(callback)

    def unsubscribe(self, callback: PropertyChangedCallback) -> bool:
        return self._notifier.unsubscribe(callback)

    def _raise_property_changed(self, property_name: str) -> None:
        self._notifier.notify(property_name)

    def report_error(self, error: BaseException) -> None:
        """Hand ``error`` to the reporter without waiting for it."""
        self._fire_and_forget("error reporter", self._reporter.report, error)

    def _fire_and_forget(self, label: str, func: Callable[..., Any], *args: Any) -> None:
        try:
            result = func(*args)
        except Exception:
            logger.warning("%s call failed", label, exc_info=True)
            return

        if not inspect.isawaitable(result):
            return

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            if inspect.iscoroutine(result):
                result.close()
            logger.warning("%s returned an awaitable outside an event loop", label)
            return

        future = asyncio.ensure_future(result, loop=loop)
        self._background.add(future)
        future.add_done_callback(lambda fut: self._background_done(label, fut))

    def _background_done(self, label: str, future: asyncio.Future) -> None:
        self._background.discard(future)
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            logger.warning("%s failed in background", label, exc_info=exc)
