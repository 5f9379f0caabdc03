"""Compute the operations that make a destination tree match a source tree."""

import asyncio
from typing import Dict, List, Tuple

from loguru import logger

from treesync.config import SyncConfig
from treesync.models import DirectoryNode, FileEntry
from treesync.sync.change_detector import ChangeDetector
from treesync.sync.utils import SyncAction, SyncOperation, SyncPlan


class DecisionEngine:
    """
    Diffs two tree snapshots level by level.

    Entries are matched by leaf name within a directory. Files and
    directories are looked up separately, so a name that is a file on one
    side and a directory on the other yields an independent ADD and DELETE.
    Computing a plan never touches either tree on disk beyond stat and
    checksum reads.
    """

    def __init__(self, change_detector: ChangeDetector, recursive: bool = False):
        self.change_detector = change_detector
        self.recursive = recursive

    @classmethod
    def from_config(cls, config: SyncConfig) -> "DecisionEngine":
        return cls(ChangeDetector.from_config(config), recursive=config.recursive)

    async def diff(self, source: DirectoryNode, destination: DirectoryNode) -> SyncPlan:
        """
        Build the plan for source vs destination and all matched subdirectories.

        Each call is one diff pass with its own checksum cache, so files
        rewritten by an earlier sync are read again.

        Args:
            source: Snapshot to mirror from
            destination: Snapshot to mirror onto

        Returns:
            SyncPlan keyed by directory relative path
        """
        return await self._diff(source, destination, self.change_detector.new_pass())

    async def _diff(
        self, source: DirectoryNode, destination: DirectoryNode, detector: ChangeDetector
    ) -> SyncPlan:
        key = source.relative_path
        source_files = _by_name(source.files)
        destination_files = _by_name(destination.files)
        source_dirs = {d.name: d for d in source.sub_directories}
        destination_dirs = {d.name: d for d in destination.sub_directories}

        matched = [
            (sub_source, destination_dirs[name])
            for name, sub_source in source_dirs.items()
            if name in destination_dirs
        ]

        # update discovery and matched subtrees run concurrently
        updates, *child_plans = await asyncio.gather(
            self._find_updates(detector, source_files, destination.files),
            *(
                self._diff(sub_source, sub_destination, detector)
                for sub_source, sub_destination in matched
            ),
        )

        plan = SyncPlan()
        plan.record(key, self._find_adds(source, destination, destination_files, destination_dirs))
        plan.record(key, self._find_deletes(source, destination, source_files, source_dirs))
        plan.record(key, updates)
        for child_plan in child_plans:
            plan.merge(child_plan)

        logger.debug(
            f"Diffed '{key or '.'}': {len(matched)} matched subdirectories, "
            f"{plan.total_count()} operations in subtree"
        )
        return plan

    def _find_adds(
        self,
        source: DirectoryNode,
        destination: DirectoryNode,
        destination_files: Dict[str, FileEntry],
        destination_dirs: Dict[str, DirectoryNode],
    ) -> List[SyncOperation]:
        operations = []
        # unrecursed directories are placeholders, not sync targets
        if self.recursive:
            for sub_directory in source.sub_directories:
                if sub_directory.name not in destination_dirs:
                    entry = sub_directory.to_file_entry()
                    operations.append(
                        SyncOperation(
                            SyncAction.ADD,
                            entry,
                            _reroot(entry, destination),
                            is_directory=True,
                        )
                    )
        for entry in source.files:
            if entry.name not in destination_files:
                operations.append(SyncOperation(SyncAction.ADD, entry, _reroot(entry, destination)))
        return operations

    def _find_deletes(
        self,
        source: DirectoryNode,
        destination: DirectoryNode,
        source_files: Dict[str, FileEntry],
        source_dirs: Dict[str, DirectoryNode],
    ) -> List[SyncOperation]:
        operations = []
        if self.recursive:
            for sub_directory in destination.sub_directories:
                if sub_directory.name not in source_dirs:
                    operations.append(
                        SyncOperation(
                            SyncAction.DELETE,
                            None,
                            sub_directory.to_file_entry(),
                            is_directory=True,
                        )
                    )
        for entry in destination.files:
            if entry.name not in source_files:
                operations.append(SyncOperation(SyncAction.DELETE, None, entry))
        return operations

    async def _find_updates(
        self,
        detector: ChangeDetector,
        source_files: Dict[str, FileEntry],
        destination_files: Tuple[FileEntry, ...],
    ) -> List[SyncOperation]:
        pairs = [
            (source_files[entry.name], entry)
            for entry in destination_files
            if entry.name in source_files
        ]
        changed = await asyncio.gather(
            *(detector.has_changed(src, dest) for src, dest in pairs)
        )
        return [
            SyncOperation(SyncAction.UPDATE, src, dest)
            for (src, dest), is_changed in zip(pairs, changed)
            if is_changed
        ]


def _by_name(entries: Tuple[FileEntry, ...]) -> Dict[str, FileEntry]:
    return {entry.name: entry for entry in entries}


def _reroot(entry: FileEntry, destination: DirectoryNode) -> FileEntry:
    """Entry at the same relative location under the destination tree."""
    return FileEntry(
        name=entry.name,
        relative_dir=entry.relative_dir,
        absolute_dir=destination.root_path / entry.relative_dir,
    )
