"""Remote item data models.

Created: 2026-10-03

These models define the values exchanged between the browser controllers
and the storage client:
- Remote items (folder or file entries of a listing)
- Selected files (local payloads waiting to be uploaded)

Design notes:
- Frozen dataclasses, so items can be shared between screens safely
- Items compare and hash by full path only
- ``ItemKind`` is the discriminant; dispatch switches on it, not on isinstance
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ItemKind(str, Enum):
    """Kind of entry in a remote folder listing."""

    FOLDER = "folder"
    FILE = "file"


@dataclass(frozen=True, eq=False)
class RemoteItem:
    """An entry in a remote folder listing.

    Use ``RemoteFolder`` or ``RemoteFile``; the base class only carries the
    shared fields.
    """

    full_path: str
    name: str
    kind: ItemKind = field(init=False)

    def __post_init__(self) -> None:
        if type(self) is RemoteItem:
            raise TypeError("RemoteItem is abstract; use RemoteFolder or RemoteFile")
        if not isinstance(self.full_path, str):
            raise TypeError(f"full_path must be a string, got {self.full_path!r}")
        if not isinstance(self.name, str):
            raise TypeError(f"name must be a string, got {self.name!r}")

    @property
    def is_directory(self) -> bool:
        return self.kind is ItemKind.FOLDER

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RemoteItem):
            return NotImplemented
        return self.full_path == other.full_path

    def __hash__(self) -> int:
        return hash(self.full_path)


@dataclass(frozen=True, eq=False)
class RemoteFolder(RemoteItem):
    kind: ItemKind = field(init=False, default=ItemKind.FOLDER)


@dataclass(frozen=True, eq=False)
class RemoteFile(RemoteItem):
    kind: ItemKind = field(init=False, default=ItemKind.FILE)


@dataclass(frozen=True)
class SelectedFile:
    """A locally selected file, not yet uploaded."""

    file_name: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)
