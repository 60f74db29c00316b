"""CrossBox — browse and upload to a remote cloud-storage account."""

from crossbox.controllers import BrowserController, FileDetailController, SelectionState
from crossbox.errors import AuthenticationError, CrossBoxError, FetchError, UploadError
from crossbox.models import ItemKind, RemoteFile, RemoteFolder, RemoteItem, SelectedFile

__all__ = [
    "AuthenticationError",
    "BrowserController",
    "CrossBoxError",
    "FetchError",
    "FileDetailController",
    "ItemKind",
    "RemoteFile",
    "RemoteFolder",
    "RemoteItem",
    "SelectedFile",
    "SelectionState",
    "UploadError",
]
