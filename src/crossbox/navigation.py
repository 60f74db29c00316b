"""In-process navigation between controller screens.

Created: 2026-10-06

``Navigator`` implements the navigation dispatcher port: each destination is
a controller class registered with a factory that builds it from the
dispatched parameters. Built screens are kept on a stack so the presentation
layer can render ``current`` and go ``back()``.

``start_navigation()`` opens the root browser, the first screen of the app.
"""

from __future__ import annotations

import logging
import posixpath
from collections.abc import Callable, Mapping

from crossbox.controllers.browser import ROOT_PATH, BrowserController
from crossbox.controllers.file_detail import FileDetailController
from crossbox.observable import Controller
from crossbox.ports import ErrorReporterPort, FileSelectorPort, StorageClientPort

logger = logging.getLogger(__name__)

ScreenFactory = Callable[["Navigator", Mapping[str, str]], Controller]


def child_path(parent: str, segment: str) -> str:
    """Join a child folder name onto its parent's path.

    Raises ValueError for names that cannot be a single path segment.
    """
    name = segment.strip("/")
    if not name or "/" in name or name in (".", ".."):
        raise ValueError(f"Not a folder name: {segment!r}")
    return posixpath.normpath(posixpath.join(parent or ROOT_PATH, name))


class Navigator:
    """Builds screens by target type and keeps them on a stack."""

    def __init__(self) -> None:
        self._factories: dict[type, ScreenFactory] = {}
        self._stack: list[Controller] = []

    def register(self, target: type, factory: ScreenFactory) -> None:
        self._factories[target] = factory

    def dispatch(self, target: type, parameters: Mapping[str, str]) -> Controller:
        factory = self._factories.get(target)
        if factory is None:
            raise LookupError(f"No screen registered for {target.__name__}")

        screen = factory(self, dict(parameters))
        self._stack.append(screen)
        logger.info("Opened %r", screen)
        return screen

    def back(self) -> Controller | None:
        """Close the current screen. The root screen is never closed."""
        if len(self._stack) <= 1:
            return None
        screen = self._stack.pop()
        logger.info("Closed %r", screen)
        return screen

    @property
    def current(self) -> Controller | None:
        return self._stack[-1] if self._stack else None

    @property
    def stack(self) -> tuple[Controller, ...]:
        return tuple(self._stack)

    def nearest(self, target: type) -> Controller | None:
        """Return the top-most screen of type ``target``."""
        for screen in reversed(self._stack):
            if isinstance(screen, target):
                return screen
        return None


def build_navigator(
    storage: StorageClientPort,
    selector: FileSelectorPort,
    reporter: ErrorReporterPort,
) -> Navigator:
    """Create a navigator wired with the browser and file detail screens."""
    navigator = Navigator()

    def browser_screen(nav: Navigator, params: Mapping[str, str]) -> Controller:
        folder = params.get("folder")
        if folder:
            parent = nav.nearest(BrowserController)
            base = parent.current_folder_path if parent is not None else ROOT_PATH
            path = child_path(base, folder)
        else:
            path = params.get("path") or ROOT_PATH
        return BrowserController(storage, selector, reporter, nav, initial_path=path)

    def file_screen(nav: Navigator, params: Mapping[str, str]) -> Controller:
        return FileDetailController(reporter, params["path"])

    navigator.register(BrowserController, browser_screen)
    navigator.register(FileDetailController, file_screen)
    return navigator


def start_navigation(navigator: Navigator) -> Controller:
    """Open the root folder browser. Needs a running event loop."""
    return navigator.dispatch(BrowserController, {})
