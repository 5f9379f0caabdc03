"""Decide whether two same-named files differ."""

import asyncio
from pathlib import Path
from typing import Dict, Optional

from loguru import logger

from treesync.config import CheckModel, SyncConfig
from treesync.models import FileEntry
from treesync.utils.file_utils import compute_checksum

# checksum reads in flight at once, each one holds an open file
MAX_CONCURRENT_CHECKSUMS = 32


class ChecksumCache:
    """
    Content checksums keyed by absolute path, for one diff pass.

    Each path is read at most once per cache. Concurrent requests for the
    same path share one in-flight computation. Entries are never invalidated,
    so a cache must not outlive the pass it was created for.
    """

    def __init__(self, max_concurrent: int = MAX_CONCURRENT_CHECKSUMS):
        self._checksums: Dict[Path, "asyncio.Future[int]"] = {}
        self._limit = asyncio.Semaphore(max_concurrent)

    async def get(self, entry: FileEntry) -> int:
        future = self._checksums.get(entry.path)
        if future is None:
            future = asyncio.ensure_future(self._compute(entry.path))
            self._checksums[entry.path] = future
        return await future

    async def _compute(self, path: Path) -> int:
        async with self._limit:
            return await compute_checksum(path)


class ChangeDetector:
    """Compares a source file with its destination counterpart."""

    def __init__(self, check_model: CheckModel, checksum_cache: Optional[ChecksumCache] = None):
        self.check_model = check_model
        self.checksum_cache = checksum_cache or ChecksumCache()

    @classmethod
    def from_config(cls, config: SyncConfig) -> "ChangeDetector":
        return cls(config.check_model)

    def new_pass(self) -> "ChangeDetector":
        """Same policy with an empty checksum cache."""
        return type(self)(self.check_model, ChecksumCache())

    async def has_changed(self, source: FileEntry, destination: FileEntry) -> bool:
        """
        Check whether destination needs to be overwritten by source.

        Directories are never reported as changed.

        Returns:
            True if the files differ under the configured policy
        """
        if not source.is_regular_file or not destination.is_regular_file:
            return False

        if self.check_model is CheckModel.SIMPLE:
            changed = self._metadata_differs(source, destination)
        else:
            changed = await self._checksum_differs(source, destination)

        if changed:
            logger.debug(f"Changed ({self.check_model.value}): {source.relative_path}")
        return changed

    @staticmethod
    def _metadata_differs(source: FileEntry, destination: FileEntry) -> bool:
        return (
            source.last_modified_time != destination.last_modified_time
            or source.size != destination.size
        )

    async def _checksum_differs(self, source: FileEntry, destination: FileEntry) -> bool:
        source_checksum, destination_checksum = await asyncio.gather(
            self.checksum_cache.get(source), self.checksum_cache.get(destination)
        )
        return source_checksum != destination_checksum
