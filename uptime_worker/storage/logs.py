"""File-based probe log store with gzip archives."""

import asyncio
import base64
import gzip
from pathlib import Path
from typing import Dict, List

from uptime_worker.core.errors import CompressionError, LogAppendError, TruncateError
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)

ACTIVE_SUFFIX = ".log"
ARCHIVE_SUFFIX = ".gz.b64"


class LogStore:
    """
    Append-only per-check logs kept as ``<id>.log`` files in one directory.

    Archives are written as ``<archive_id>.gz.b64`` (base64 of a gzip
    stream). File operations run in a worker thread so the event loop is
    never blocked. Each log has an ``asyncio.Lock``; ``append`` takes it,
    and rotation holds it across compress and truncate so an append can
    never land between the two and be wiped.
    """

    def __init__(self, directory: str):
        """
        Initialize log store.

        Args:
            directory: Directory holding active logs and archives
        """
        self.directory = Path(directory)
        self._locks: Dict[str, asyncio.Lock] = {}

    def lock(self, log_id: str) -> asyncio.Lock:
        """Return the lock guarding the active log ``log_id``."""
        if log_id not in self._locks:
            self._locks[log_id] = asyncio.Lock()
        return self._locks[log_id]

    def _active_path(self, log_id: str) -> Path:
        return self.directory / f"{log_id}{ACTIVE_SUFFIX}"

    def _archive_path(self, archive_id: str) -> Path:
        return self.directory / f"{archive_id}{ARCHIVE_SUFFIX}"

    async def append(self, log_id: str, line: str) -> None:
        """
        Append one line to the active log, creating it if needed.

        Raises:
            LogAppendError: If the file cannot be written
        """
        def _append() -> None:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(self._active_path(log_id), "a", encoding="utf-8") as f:
                f.write(line + "\n")

        async with self.lock(log_id):
            try:
                await asyncio.to_thread(_append)
            except OSError as e:
                raise LogAppendError(f"Could not append to log {log_id}: {e}") from e

    async def read(self, log_id: str) -> str:
        """Return the current content of an active log ("" if absent)."""
        def _read() -> str:
            path = self._active_path(log_id)
            return path.read_text(encoding="utf-8") if path.exists() else ""

        return await asyncio.to_thread(_read)

    async def list(self, include_archived: bool = False) -> List[str]:
        """
        List log names without their file suffixes.

        Args:
            include_archived: Whether archive ids are included

        Returns:
            list[str]: Sorted log ids (and archive ids if requested)
        """
        def _list() -> List[str]:
            if not self.directory.exists():
                return []
            names = []
            for path in self.directory.iterdir():
                if path.name.endswith(ACTIVE_SUFFIX):
                    names.append(path.name[:-len(ACTIVE_SUFFIX)])
                elif include_archived and path.name.endswith(ARCHIVE_SUFFIX):
                    names.append(path.name[:-len(ARCHIVE_SUFFIX)])
            return sorted(names)

        return await asyncio.to_thread(_list)

    async def compress(self, log_id: str, archive_id: str) -> None:
        """
        Write the active log's current content to a new archive.

        The caller is responsible for holding :meth:`lock` when the archive
        must match the content that is later truncated.

        Raises:
            CompressionError: If the log cannot be read or the archive
                cannot be created (including when it already exists)
        """
        def _compress() -> None:
            content = self._active_path(log_id).read_bytes()
            encoded = base64.b64encode(gzip.compress(content))
            with open(self._archive_path(archive_id), "xb") as f:
                f.write(encoded)

        try:
            await asyncio.to_thread(_compress)
        except OSError as e:
            raise CompressionError(f"Could not compress log {log_id} into {archive_id}: {e}") from e

    async def decompress(self, archive_id: str) -> str:
        """
        Return the original text stored in an archive.

        Raises:
            CompressionError: If the archive is missing or corrupt
        """
        def _decompress() -> str:
            encoded = self._archive_path(archive_id).read_bytes()
            return gzip.decompress(base64.b64decode(encoded)).decode("utf-8")

        try:
            return await asyncio.to_thread(_decompress)
        except (OSError, ValueError) as e:
            raise CompressionError(f"Could not decompress archive {archive_id}: {e}") from e

    async def truncate(self, log_id: str) -> None:
        """
        Empty the active log, keeping the file in place.

        Raises:
            TruncateError: If the file cannot be truncated
        """
        def _truncate() -> None:
            with open(self._active_path(log_id), "r+b") as f:
                f.truncate(0)

        try:
            await asyncio.to_thread(_truncate)
        except OSError as e:
            raise TruncateError(f"Could not truncate log {log_id}: {e}") from e
