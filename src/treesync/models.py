"""Snapshot and filter models for directory trees."""

import re
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Optional, Pattern, Tuple


def relative_key(path: Path, root: Path) -> str:
    """Slash-normalized path of path under root, "" for the root itself."""
    relative = path.relative_to(root).as_posix()
    return "" if relative == "." else relative


@dataclass(frozen=True)
class FileEntry:
    """
    A file or directory seen in a tree snapshot.

    Attributes:
        name: Leaf name, never contains a separator
        relative_dir: Parent directory relative to the tree root ("" at the top)
        absolute_dir: Resolved parent directory

    Metadata properties read the filesystem on access. Content checksums
    are kept in a ChecksumCache, not on the entry.
    """

    name: str
    relative_dir: str
    absolute_dir: Path

    def __post_init__(self):
        if "/" in self.name or "\\" in self.name:
            raise ValueError(f"Entry name must not contain a path separator: {self.name}")

    @property
    def path(self) -> Path:
        return self.absolute_dir / self.name

    @property
    def relative_path(self) -> str:
        return str(PurePosixPath(self.relative_dir, self.name))

    @property
    def last_modified_time(self) -> int:
        """Modification time in milliseconds."""
        return self.path.stat().st_mtime_ns // 1_000_000

    @property
    def size(self) -> int:
        return self.path.stat().st_size

    @property
    def is_regular_file(self) -> bool:
        return self.path.is_file()


@dataclass(frozen=True)
class DirectoryNode:
    """
    A directory in a tree snapshot.

    Every node under one tree carries the same root_path, used to derive
    relative paths. A node loaded without recursion has no children even if
    the directory on disk does.
    """

    root_path: Path
    absolute_path: Path
    sub_directories: Tuple["DirectoryNode", ...] = field(default_factory=tuple)
    files: Tuple[FileEntry, ...] = field(default_factory=tuple)

    @property
    def name(self) -> str:
        return self.absolute_path.name

    @property
    def relative_path(self) -> str:
        return relative_key(self.absolute_path, self.root_path)

    @property
    def is_empty(self) -> bool:
        return not self.sub_directories and not self.files

    def to_file_entry(self) -> FileEntry:
        """Describe this directory as an entry of its parent."""
        parent = self.absolute_path.parent
        return FileEntry(
            name=self.name,
            relative_dir=relative_key(parent, self.root_path),
            absolute_dir=parent,
        )

    def iter_files(self):
        """Yield every file entry in this subtree, depth first."""
        yield from self.files
        for sub_directory in self.sub_directories:
            yield from sub_directory.iter_files()


@dataclass(frozen=True)
class PathFilter:
    """
    Include/exclude filter over absolute paths.

    A path passes when it fully matches include (if set) and does not fully
    match exclude (if set). Exclude wins over include.
    """

    include: Optional[Pattern[str]] = None
    exclude: Optional[Pattern[str]] = None

    @classmethod
    def from_patterns(cls, include: str = "", exclude: str = "") -> "PathFilter":
        return cls(
            include=re.compile(include) if include else None,
            exclude=re.compile(exclude) if exclude else None,
        )

    def accepts(self, path: Path) -> bool:
        candidate = str(path)
        if self.include is not None and not self.include.fullmatch(candidate):
            return False
        if self.exclude is not None and self.exclude.fullmatch(candidate):
            return False
        return True
