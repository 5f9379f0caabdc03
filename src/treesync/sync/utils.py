"""Types and utilities for tree sync."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional

from treesync.models import FileEntry


class SyncAction(str, Enum):
    ADD = "add"
    DELETE = "delete"
    UPDATE = "update"


@dataclass(frozen=True)
class SyncOperation:
    """One change to apply to the destination tree.

    Attributes:
        action: What to do
        source_entry: Entry copied from, None for DELETE
        destination_entry: Entry created, overwritten or removed
        is_directory: The entries are directories rather than files
    """

    action: SyncAction
    source_entry: Optional[FileEntry]
    destination_entry: FileEntry
    is_directory: bool = False

    def __post_init__(self):
        if self.action is SyncAction.DELETE and self.source_entry is not None:
            raise ValueError("DELETE operations carry no source entry")
        if self.action is not SyncAction.DELETE and self.source_entry is None:
            raise ValueError(f"{self.action.name} operations need a source entry")

    @property
    def display_path(self) -> str:
        """Destination-relative path, with a trailing slash for directories."""
        path = self.destination_entry.relative_path
        return f"{path}/" if self.is_directory else path


@dataclass
class SyncPlan:
    """Operations needed to make a destination tree match a source tree.

    Each mapping is keyed by the relative path of the directory level that
    produced the operations, so plans for different directories merge
    without collisions.

    Attributes:
        add: Entries present only in the source
        delete: Entries present only in the destination
        update: Files present on both sides that differ
    """

    add: Dict[str, List[SyncOperation]] = field(default_factory=dict)
    delete: Dict[str, List[SyncOperation]] = field(default_factory=dict)
    update: Dict[str, List[SyncOperation]] = field(default_factory=dict)

    def _mapping(self, action: SyncAction) -> Dict[str, List[SyncOperation]]:
        return {
            SyncAction.ADD: self.add,
            SyncAction.DELETE: self.delete,
            SyncAction.UPDATE: self.update,
        }[action]

    def record(self, key: str, operations: List[SyncOperation]) -> None:
        """Store one directory level's operations. Empty lists are dropped."""
        for operation in operations:
            self._mapping(operation.action).setdefault(key, []).append(operation)

    def merge(self, other: "SyncPlan") -> None:
        for action in SyncAction:
            mine = self._mapping(action)
            for key, operations in other._mapping(action).items():
                mine.setdefault(key, []).extend(operations)

    def operations(self, action: SyncAction) -> Iterator[SyncOperation]:
        """Yield the operations for one action, ordered by directory key."""
        mapping = self._mapping(action)
        for key in sorted(mapping):
            yield from mapping[key]

    def total_count(self) -> int:
        return sum(
            len(operations)
            for action in SyncAction
            for operations in self._mapping(action).values()
        )

    def is_empty(self) -> bool:
        return self.total_count() == 0

    def summary(self) -> str:
        """Plain-text listing grouped by action."""
        if self.is_empty():
            return "Nothing to sync"

        lines = ["Sync plan"]
        for heading, action in (
            ("new", SyncAction.ADD),
            ("deleted", SyncAction.DELETE),
            ("updated", SyncAction.UPDATE),
        ):
            lines.append(f"* {heading}:")
            lines.extend(f"\t{op.display_path}" for op in self.operations(action))
        return "\n".join(lines)
