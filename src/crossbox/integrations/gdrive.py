# Google Drive storage client — authentication, folder listing and upload.
# Created: 2026-10-07

from __future__ import annotations

import json
import logging
import posixpath
from typing import Any

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from crossbox.config import Settings, get_settings
from crossbox.errors import AuthenticationError, FetchError, UploadError
from crossbox.integrations.oauth import OAuthManager
from crossbox.integrations.token_store import TokenStore, oauth_dir
from crossbox.models import RemoteFile, RemoteFolder, RemoteItem, SelectedFile

logger = logging.getLogger(__name__)

_DRIVE_BASE = "https://www.googleapis.com/drive/v3"
_UPLOAD_BASE = "https://www.googleapis.com/upload/drive/v3"

FOLDER_MIME = "application/vnd.google-apps.folder"
ROOT_ID = "root"


class DriveEntry(BaseModel):
    """One file resource as returned by ``files.list``."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str
    mime_type: str = Field(default="", alias="mimeType")

    @property
    def is_folder(self) -> bool:
        return self.mime_type == FOLDER_MIME


class DriveListing(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    files: list[DriveEntry] = []
    next_page_token: str | None = Field(default=None, alias="nextPageToken")


def _quote(value: str) -> str:
    """Escape a literal for the Drive query language."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _segments(path: str) -> list[str]:
    return [s for s in path.split("/") if s and s != "."]


class DriveStorageClient:
    """Storage client for Google Drive API v3.

    Drive addresses files by id, so folder paths are resolved one segment at
    a time starting from the root folder. Uses OAuth bearer tokens from the
    token store; ``ensure_authenticated()`` must succeed before listing or
    uploading.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        oauth: OAuthManager | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._settings = settings or get_settings()
        self._transport = transport
        self._oauth = oauth or OAuthManager(
            TokenStore(oauth_dir(self._settings.config_dir)),
            timeout=self._settings.http_timeout,
            transport=transport,
        )
        self._token: str | None = None

    # ------------------------------------------------------------------
    # StorageClientPort
    # ------------------------------------------------------------------

    async def ensure_authenticated(self) -> None:
        try:
            token = await self._oauth.get_valid_token(
                service=self._settings.drive_service,
                client_id=self._settings.google_oauth_client_id or "",
                client_secret=self._settings.google_oauth_client_secret or "",
            )
        except httpx.HTTPError as e:
            raise AuthenticationError(f"Google Drive authentication failed: {e}") from e

        if not token:
            self._token = None
            raise AuthenticationError(
                "Google Drive not authenticated. Run `crossbox authorize` first."
            )
        self._token = token

    async def get_folder_content(self, path: str) -> list[RemoteItem]:
        if not self._token:
            raise FetchError("Not authenticated with Google Drive", path=path)
        headers = self._auth_headers()
        try:
            async with self._client(headers) as client:
                folder_id = await self._resolve_folder(client, path)
                entries = await self._list_children(client, folder_id)
        except httpx.HTTPStatusError as e:
            raise FetchError(
                f"Drive API error {e.response.status_code} while listing {path}", path=path
            ) from e
        except (httpx.HTTPError, ValidationError) as e:
            raise FetchError(f"Could not list {path}: {e}", path=path) from e

        base = "/" + "/".join(_segments(path))
        items: list[RemoteItem] = []
        for entry in entries:
            # Drive allows "/" in names; such entries have no path of their own
            if "/" in entry.name or entry.name in ("", ".", ".."):
                logger.warning("Skipping %r in %s: name is not a path segment", entry.name, path)
                continue
            full_path = posixpath.join(base, entry.name)
            if entry.is_folder:
                items.append(RemoteFolder(full_path=full_path, name=entry.name))
            else:
                items.append(RemoteFile(full_path=full_path, name=entry.name))

        logger.debug("Listed %d item(s) in %s", len(items), path)
        return items

    async def upload_file(self, file: SelectedFile, folder_path: str = "/") -> None:
        if not self._token:
            raise UploadError("Not authenticated with Google Drive", file.file_name)
        headers = self._auth_headers()
        boundary = "crossbox_boundary"
        try:
            async with self._client(headers) as client:
                folder_id = await self._resolve_folder(client, folder_path)
                metadata: dict[str, Any] = {"name": file.file_name, "parents": [folder_id]}
                body = (
                    (
                        f"--{boundary}\r\n"
                        f"Content-Type: application/json; charset=UTF-8\r\n\r\n"
                        f"{json.dumps(metadata)}\r\n"
                        f"--{boundary}\r\n"
                        f"Content-Type: application/octet-stream\r\n\r\n"
                    ).encode()
                    + file.content
                    + f"\r\n--{boundary}--".encode()
                )
                resp = await client.post(
                    f"{_UPLOAD_BASE}/files",
                    params={"uploadType": "multipart", "fields": "id,name"},
                    headers={"Content-Type": f"multipart/related; boundary={boundary}"},
                    content=body,
                    timeout=self._settings.upload_timeout,
                )
                resp.raise_for_status()
        except FetchError as e:
            raise UploadError(f"Destination folder unavailable: {e}", file.file_name) from e
        except httpx.HTTPStatusError as e:
            raise UploadError(
                f"Drive API error {e.response.status_code} while uploading {file.file_name}",
                file.file_name,
            ) from e
        except (httpx.HTTPError, ValidationError) as e:
            raise UploadError(f"Could not upload {file.file_name}: {e}", file.file_name) from e

        logger.info("Uploaded %s to %s", file.file_name, folder_path)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self._token}"}

    def _client(self, headers: dict[str, str]) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=_DRIVE_BASE,
            headers=headers,
            timeout=self._settings.http_timeout,
            transport=self._transport,
        )

    async def _resolve_folder(self, client: httpx.AsyncClient, path: str) -> str:
        """Walk ``path`` from the root and return the id of its last folder."""
        folder_id = ROOT_ID
        for segment in _segments(path):
            resp = await client.get(
                "/files",
                params={
                    "q": (
                        f"'{folder_id}' in parents and name = '{_quote(segment)}' "
                        f"and mimeType = '{FOLDER_MIME}' and trashed = false"
                    ),
                    "fields": "files(id,name,mimeType)",
                    "pageSize": 1,
                },
            )
            resp.raise_for_status()
            listing = DriveListing.model_validate(resp.json())
            if not listing.files:
                raise FetchError(f"Folder not found: {path}", path=path)
            folder_id = listing.files[0].id
        return folder_id

    async def _list_children(self, client: httpx.AsyncClient, folder_id: str) -> list[DriveEntry]:
        entries: list[DriveEntry] = []
        page_token: str | None = None
        while True:
            params: dict[str, Any] = {
                "q": f"'{folder_id}' in parents and trashed = false",
                "fields": "nextPageToken, files(id,name,mimeType)",
                "orderBy": "folder,name",
                "pageSize": self._settings.page_size,
            }
            if page_token:
                params["pageToken"] = page_token

            resp = await client.get("/files", params=params)
            resp.raise_for_status()
            listing = DriveListing.model_validate(resp.json())
            entries.extend(listing.files)

            page_token = listing.next_page_token
            if not page_token:
                break
        return entries
