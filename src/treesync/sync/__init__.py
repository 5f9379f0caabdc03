from .change_detector import ChangeDetector, ChecksumCache
from .decision_engine import DecisionEngine
from .execution_service import SyncExecutor
from .sync_service import SyncService
from .tree_loader import PathFilter, TreeLoader

__all__ = [
    "ChangeDetector",
    "ChecksumCache",
    "DecisionEngine",
    "PathFilter",
    "SyncExecutor",
    "SyncService",
    "TreeLoader",
]
