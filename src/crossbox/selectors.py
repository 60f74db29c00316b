# File selector backed by local filesystem paths.
# Created: 2026-10-05

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from crossbox.models import SelectedFile

logger = logging.getLogger(__name__)


class PathFileSelector:
    """Asks ``prompt`` for a local path and loads the file it names.

    ``prompt`` may be sync or async and returns a path, or None/"" when the
    user cancelled. Reading happens in a worker thread so the event loop
    stays responsive for large files.
    """

    def __init__(self, prompt: Callable[[], Any]):
        self._prompt = prompt

    async def pick_file(self) -> SelectedFile | None:
        answer = self._prompt()
        if inspect.isawaitable(answer):
            answer = await answer
        if not answer:
            return None

        local = Path(answer).expanduser()
        if not local.is_file():
            raise FileNotFoundError(f"File not found: {local}")

        content = await asyncio.to_thread(local.read_bytes)
        logger.debug("Selected %s (%d bytes)", local, len(content))
        return SelectedFile(file_name=local.name, content=content)
