# File detail screen controller.
# Created: 2026-10-04

from __future__ import annotations

import posixpath

from crossbox.observable import Controller
from crossbox.ports import ErrorReporterPort


class FileDetailController(Controller):
    """Screen showing a single remote file, identified by its full path."""

    def __init__(self, reporter: ErrorReporterPort, path: str):
        super().__init__(reporter)
        self._path = path

    @property
    def path(self) -> str:
        return self._path

    @property
    def name(self) -> str:
        return posixpath.basename(self._path.rstrip("/")) or self._path

    def __repr__(self) -> str:
        return f"FileDetailController(path={self._path!r})"
