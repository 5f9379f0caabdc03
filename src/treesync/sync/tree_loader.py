"""Load directory trees into immutable snapshots."""

import asyncio
from pathlib import Path
from typing import List, Optional

from loguru import logger

from treesync.exceptions import InvalidArgumentError
from treesync.models import DirectoryNode, FileEntry, PathFilter


ACCEPT_ALL = PathFilter()


class TreeLoader:
    """Walks a directory and builds a DirectoryNode snapshot."""

    def __init__(self, path_filter: PathFilter = ACCEPT_ALL):
        self.path_filter = path_filter

    def load(
        self, path: Path, recursive: bool = False, root_path: Optional[Path] = None
    ) -> DirectoryNode:
        """
        Snapshot the directory at path.

        Args:
            path: Directory to load
            recursive: Load subdirectories in full. Otherwise each direct
                subdirectory becomes an empty placeholder node.
            root_path: Anchor for relative paths, shared by every node.
                Required when recursive, defaults to path otherwise.

        Returns:
            The snapshot. Empty when path is missing or not a directory.

        Raises:
            InvalidArgumentError: recursive is set without a root_path
        """
        if recursive and not root_path:
            raise InvalidArgumentError("root_path can not be empty when recursive is true")

        path = path.absolute()
        root = Path(root_path).absolute() if root_path else path
        return self._load(path, recursive, root)

    def _load(self, path: Path, recursive: bool, root: Path) -> DirectoryNode:
        if not path.is_dir():
            logger.debug(f"Directory does not exist: {path}")
            return DirectoryNode(root_path=root, absolute_path=path)

        relative_dir = DirectoryNode(root_path=root, absolute_path=path).relative_path
        files: List[FileEntry] = []
        sub_directories: List[DirectoryNode] = []

        for child in sorted(path.iterdir()):
            if not self.path_filter.accepts(child):
                logger.debug(f"Filtered out: {child}")
                continue
            if child.is_file():
                files.append(FileEntry(name=child.name, relative_dir=relative_dir, absolute_dir=path))
            elif child.is_dir():
                if recursive:
                    sub_directories.append(self._load(child, True, root))
                else:
                    sub_directories.append(DirectoryNode(root_path=root, absolute_path=child))

        return DirectoryNode(
            root_path=root,
            absolute_path=path,
            sub_directories=tuple(sub_directories),
            files=tuple(files),
        )

    async def load_tree(
        self, path: Path, recursive: bool = False, root_path: Optional[Path] = None
    ) -> DirectoryNode:
        """Run load in a worker thread so several trees can load at once."""
        logger.debug(f"Loading tree: {path} (recursive={recursive})")
        node = await asyncio.to_thread(self.load, path, recursive, root_path)
        logger.debug(f"Loaded {sum(1 for _ in node.iter_files())} files under {path}")
        return node
