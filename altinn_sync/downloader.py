"""Filesystem target for downloaded attachments.

Blocking file I/O is wrapped with ``asyncio.to_thread()`` to avoid blocking.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import structlog

from .errors import StorageError

logger = structlog.get_logger()


class FileDownloader:
    """Writes attachment bytes under a tenant's storage path.

    An existing file with the same name is overwritten unconditionally;
    filenames are deterministic, so a rerun replaces rather than duplicates.
    """

    async def save(self, storage_path: str, filename: str, data: bytes) -> Path:
        target = Path(storage_path) / filename
        try:
            await asyncio.to_thread(target.write_bytes, data)
        except OSError as exc:
            raise StorageError(f"could not write {target}: {exc}") from exc
        logger.info("attachment_saved", path=str(target), size=len(data))
        return target
