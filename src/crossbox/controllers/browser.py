"""Browser controller — current folder state, navigation and upload.

Created: 2026-10-04

Each ``select_folder()`` call runs its own small state machine:

    IDLE -> AUTHENTICATING -> LISTING -> UPDATED
                 |               |
                 +---> FAILED <--+

Failures from the storage client are handed to the error reporter and the
previously shown folder stays in place. ``on_complete`` runs on both terminal
states. Overlapping calls are neither coalesced nor cancelled: each resolves
on its own and the last one to complete wins.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from enum import Enum
from typing import Any

from crossbox.controllers.file_detail import FileDetailController
from crossbox.models import ItemKind, RemoteItem
from crossbox.observable import Controller
from crossbox.ports import (
    ErrorReporterPort,
    FileSelectorPort,
    NavigationDispatcherPort,
    StorageClientPort,
)

logger = logging.getLogger(__name__)

ROOT_PATH = "/"

CompletionCallback = Callable[[], Any]


class SelectionState(str, Enum):
    """Progress of a single folder selection."""

    IDLE = "idle"
    AUTHENTICATING = "authenticating"
    LISTING = "listing"
    UPDATED = "updated"  # Terminal: state replaced
    FAILED = "failed"  # Terminal: error reported, state untouched


class BrowserController(Controller):
    """Browses a remote folder and dispatches navigation to child screens.

    Observable properties: ``current_folder_path`` and ``folder_contents``.
    """

    def __init__(
        self,
        storage: StorageClientPort,
        selector: FileSelectorPort,
        reporter: ErrorReporterPort,
        navigator: NavigationDispatcherPort,
        initial_path: str | None = None,
    ):
        super().__init__(reporter)
        self._storage = storage
        self._selector = selector
        self._navigator = navigator

        self._current_folder_path = initial_path if initial_path is not None else ROOT_PATH
        self._folder_contents: tuple[RemoteItem, ...] = ()

        # Requires a running loop when an initial path is given.
        self.initial_load: asyncio.Task[SelectionState] | None = None
        if initial_path is not None:
            self.initial_load = asyncio.get_running_loop().create_task(
                self.select_folder(initial_path)
            )

    # ------------------------------------------------------------------
    # Observable state
    # ------------------------------------------------------------------

    @property
    def current_folder_path(self) -> str:
        return self._current_folder_path

    @property
    def folder_contents(self) -> tuple[RemoteItem, ...]:
        return self._folder_contents

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def select_folder(
        self, path: str, on_complete: CompletionCallback | None = None
    ) -> SelectionState:
        """Authenticate, list ``path`` and show it.

        Never raises storage errors; returns the terminal state instead.
        """
        state = await self._load_folder(path)
        if on_complete is not None:
            result = on_complete()
            if inspect.isawaitable(result):
                await result
        return state

    async def refresh(self) -> SelectionState:
        """Reload the folder currently shown."""
        return await self.select_folder(self._current_folder_path)

    def select_item(self, item: RemoteItem) -> None:
        """Open ``item``: a child browser for folders, the detail screen for files."""
        if item.kind is ItemKind.FOLDER:
            # Child navigation is relative to the current folder.
            target, parameters = BrowserController, {"folder": item.name}
        elif item.kind is ItemKind.FILE:
            target, parameters = FileDetailController, {"path": item.full_path}
        else:
            raise ValueError(f"Unknown item kind: {item.kind!r}")

        logger.debug("Navigating to %s with %s", target.__name__, parameters)
        self._fire_and_forget("navigation dispatcher", self._navigator.dispatch, target, parameters)

    async def upload_file(self) -> bool:
        """Pick a local file and upload it into the current folder.

        Returns True when a file was uploaded. Cancelling the picker is a
        silent no-op; upload failures go to the error reporter.
        """
        try:
            selected = await self._selector.pick_file()
        except Exception as e:
            logger.debug("File selection failed: %s", e)
            self.report_error(e)
            return False
        if selected is None:
            logger.debug("File selection cancelled")
            return False

        try:
            await self._storage.upload_file(selected, self._current_folder_path)
        except Exception as e:
            logger.debug("Upload of %s failed: %s", selected.file_name, e)
            self.report_error(e)
            return False

        logger.info(
            "Uploaded %s (%d bytes) to %s",
            selected.file_name,
            selected.size,
            self._current_folder_path,
        )
        return True

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    async def _load_folder(self, path: str) -> SelectionState:
        state = SelectionState.AUTHENTICATING
        logger.debug("select_folder(%r): %s", path, state.value)
        try:
            await self._storage.ensure_authenticated()
        except Exception as e:
            return self._fail(path, state, e)

        state = SelectionState.LISTING
        logger.debug("select_folder(%r): %s", path, state.value)
        try:
            contents = await self._storage.get_folder_content(path)
        except Exception as e:
            return self._fail(path, state, e)

        self._current_folder_path = path
        self._folder_contents = tuple(contents)
        self._raise_property_changed("current_folder_path")
        self._raise_property_changed("folder_contents")

        logger.debug(
            "select_folder(%r): updated with %d item(s)", path, len(self._folder_contents)
        )
        return SelectionState.UPDATED

    def _fail(self, path: str, during: SelectionState, error: Exception) -> SelectionState:
        logger.debug("select_folder(%r): failed while %s: %s", path, during.value, error)
        self.report_error(error)
        return SelectionState.FAILED

    def __repr__(self) -> str:
        return f"BrowserController(path={self._current_folder_path!r})"
