# Error taxonomy for remote storage operations.
# Created: 2026-10-03

from __future__ import annotations


class CrossBoxError(Exception):
    """Base class for failures surfaced by a storage client."""


class AuthenticationError(CrossBoxError):
    """Credentials are missing, expired or rejected, or the handshake failed."""


class FetchError(CrossBoxError):
    """A folder listing could not be retrieved."""

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class UploadError(CrossBoxError):
    """A file could not be uploaded."""

    def __init__(self, message: str, file_name: str | None = None):
        super().__init__(message)
        self.file_name = file_name
