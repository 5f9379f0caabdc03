"""Utilities for file operations."""

import shutil
import zlib
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator

import aiofiles
from loguru import logger

from treesync.exceptions import AlreadyExistsError, CopyIncompleteError

CHECKSUM_CHUNK_SIZE = 1024


class FileError(Exception):
    """Base exception for file operations."""

    pass


class OnErrorAction(Enum):
    """What a copy should do after a per-file failure."""

    CONTINUE = "continue"
    SKIP = "skip"
    TERMINATE = "terminate"


ErrorHandler = Callable[[Path, OSError], OnErrorAction]


def terminate_on_error(path: Path, error: OSError) -> OnErrorAction:
    return OnErrorAction.TERMINATE


async def compute_checksum(path: Path, chunk_size: int = CHECKSUM_CHUNK_SIZE) -> int:
    """
    Compute the Adler-32 checksum of a file's content.

    The file is streamed in fixed-size chunks through a running accumulator,
    so memory use does not grow with file size.

    Args:
        path: Regular file to read
        chunk_size: Bytes read per step

    Returns:
        Checksum as a non-negative integer

    Raises:
        FileError: If path is not a regular file or cannot be read
    """
    if not path.is_file():
        raise FileError(f"Only regular files have a checksum: {path}")

    checksum = zlib.adler32(b"")
    try:
        async with aiofiles.open(path, "rb") as f:
            while chunk := await f.read(chunk_size):
                checksum = zlib.adler32(chunk, checksum)
    except OSError as e:
        logger.error(f"Failed to compute checksum: {path}: {e}")
        raise FileError(f"Failed to compute checksum for {path}: {e}") from e

    return checksum


def walk_top_down(root: Path) -> Iterator[Path]:
    """Yield root, then every entry below it, parents before children."""
    yield root
    if root.is_dir() and not root.is_symlink():
        for child in sorted(root.iterdir()):
            yield from walk_top_down(child)


def delete_recursively(path: Path) -> None:
    """Remove a file, or a directory and everything under it. Missing paths are ignored."""
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink(missing_ok=True)


def _copy_entry(src: Path, dst: Path, overwrite: bool) -> None:
    if dst.exists() and not (src.is_dir() and dst.is_dir()):
        if not overwrite:
            raise AlreadyExistsError(f"The destination file already exists: {dst}")
        delete_recursively(dst)

    if src.is_dir():
        dst.mkdir(parents=True, exist_ok=True)
        return

    dst.parent.mkdir(parents=True, exist_ok=True)
    # copy2 keeps the modification time, which SIMPLE change detection relies on
    shutil.copy2(src, dst)
    if dst.stat().st_size != src.stat().st_size:
        raise CopyIncompleteError(
            f"Source file wasn't copied completely, length of destination file differs: {dst}"
        )


def copy_recursively(
    source: Path,
    target: Path,
    overwrite: bool = False,
    on_error: ErrorHandler = terminate_on_error,
) -> bool:
    """
    Copy a file or directory tree from source to target.

    Every failure is passed to on_error. TERMINATE re-raises the failure,
    SKIP abandons the rest of this copy, CONTINUE moves on to the next entry.

    Args:
        source: File or directory to copy
        target: Path the source is copied to
        overwrite: Replace entries already present at the target
        on_error: Per-file error policy

    Returns:
        True when every entry was copied

    Raises:
        AlreadyExistsError: Target entry exists, overwrite is off, policy is TERMINATE
        CopyIncompleteError: Size mismatch after copy, policy is TERMINATE
        OSError: Any other I/O failure, policy is TERMINATE
    """
    if not source.exists():
        error = FileNotFoundError(f"The source file doesn't exist: {source}")
        handle_error(on_error, source, error)
        return False

    complete = True
    for src in walk_top_down(source):
        dst = target / src.relative_to(source)
        try:
            _copy_entry(src, dst, overwrite)
        except OSError as e:
            complete = False
            if handle_error(on_error, src, e) is OnErrorAction.SKIP:
                return False
    return complete


def handle_error(on_error: ErrorHandler, path: Path, error: OSError) -> OnErrorAction:
    action = on_error(path, error)
    if action is OnErrorAction.TERMINATE:
        raise error
    logger.warning(f"{action.value}: {path}: {error}")
    return action
