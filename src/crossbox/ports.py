# Ports — capabilities the controllers consume from external collaborators.
# Created: 2026-10-03

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable

from crossbox.models import RemoteItem, SelectedFile


@runtime_checkable
class StorageClientPort(Protocol):
    """Remote storage account: authentication, listing and upload.

    Implementations raise ``AuthenticationError``, ``FetchError`` and
    ``UploadError`` from ``crossbox.errors``.
    """

    async def ensure_authenticated(self) -> None:
        """Make sure the session holds valid credentials."""
        ...

    async def get_folder_content(self, path: str) -> list[RemoteItem]:
        """Return the entries of a folder, in listing order. All-or-nothing."""
        ...

    async def upload_file(self, file: SelectedFile, folder_path: str = "/") -> None:
        """Store ``file`` inside ``folder_path``."""
        ...


@runtime_checkable
class FileSelectorPort(Protocol):
    async def pick_file(self) -> SelectedFile | None:
        """Return the chosen file, or None when the user cancelled."""
        ...


@runtime_checkable
class ErrorReporterPort(Protocol):
    def report(self, error: BaseException) -> Any:
        """Surface a failure. May return an awaitable; callers do not wait on it."""
        ...


@runtime_checkable
class NavigationDispatcherPort(Protocol):
    def dispatch(self, target: type, parameters: Mapping[str, str]) -> Any:
        """Request a transition to the screen implemented by ``target``."""
        ...
