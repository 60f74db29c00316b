# Token Store — Drive OAuth tokens persisted as owner-only JSON files.
# Created: 2026-10-06

from __future__ import annotations

import json
import logging
import os
import stat
import time
from dataclasses import asdict, dataclass, field
from pathlib import Path

from crossbox.config import get_config_dir

logger = logging.getLogger(__name__)

# Tokens this close to expiry are treated as expired
EXPIRY_MARGIN = 60.0

_FILE_MODE = stat.S_IRUSR | stat.S_IWUSR


@dataclass
class OAuthTokens:
    """OAuth 2.0 token set for the storage account."""

    service: str
    access_token: str
    refresh_token: str | None = None
    token_type: str = "Bearer"
    expires_at: float | None = None  # Unix timestamp
    scopes: list[str] = field(default_factory=list)

    def is_expired(self, now: float | None = None) -> bool:
        if self.expires_at is None:
            return False
        current = time.time() if now is None else now
        return self.expires_at <= current + EXPIRY_MARGIN

    @classmethod
    def from_dict(cls, data: object) -> OAuthTokens:
        """Build tokens from a decoded token file; TypeError if it is malformed."""
        if not isinstance(data, dict):
            raise TypeError(f"expected an object, got {type(data).__name__}")
        tokens = cls(**data)
        if not isinstance(tokens.access_token, str) or not tokens.access_token:
            raise TypeError("access_token missing")
        return tokens


def oauth_dir(config_dir: Path) -> Path:
    """Token directory inside a configuration directory."""
    return config_dir.expanduser() / "oauth"


class TokenStore:
    """One ``{service}.json`` file per account, readable by the owner only.

    ``directory`` defaults to ``oauth/`` under the configured config dir and
    is created on first write.
    """

    def __init__(self, directory: Path | None = None):
        self._directory = directory

    @property
    def directory(self) -> Path:
        if self._directory is None:
            return oauth_dir(get_config_dir())
        return self._directory

    def _path(self, service: str) -> Path:
        return self.directory / f"{service}.json"

    def save(self, tokens: OAuthTokens) -> None:
        path = self._path(tokens.service)
        path.parent.mkdir(parents=True, exist_ok=True)

        # Write next to the target, then swap, so readers never see half a file
        tmp = path.with_suffix(".json.tmp")
        fd = os.open(tmp, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(asdict(tokens), fh, indent=2)
        os.chmod(tmp, _FILE_MODE)
        os.replace(tmp, path)
        logger.info("Saved OAuth tokens for %s in %s", tokens.service, path.parent)

    def load(self, service: str) -> OAuthTokens | None:
        """Load tokens for a service. Returns None if missing or unreadable."""
        path = self._path(service)
        if not path.is_file():
            return None

        try:
            return OAuthTokens.from_dict(json.loads(path.read_text(encoding="utf-8")))
        except (OSError, ValueError, TypeError) as e:
            logger.warning("Ignoring unreadable token file %s: %s", path, e)
            return None

    def delete(self, service: str) -> bool:
        """Delete tokens for a service. Returns True if a file was removed."""
        try:
            self._path(service).unlink()
        except FileNotFoundError:
            return False
        logger.info("Deleted OAuth tokens for %s", service)
        return True
