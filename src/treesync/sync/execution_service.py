"""Apply a sync plan to the filesystem."""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

from loguru import logger

from treesync.sync.utils import SyncAction, SyncOperation, SyncPlan
from treesync.utils.file_utils import (
    ErrorHandler,
    OnErrorAction,
    copy_recursively,
    delete_recursively,
    handle_error,
    terminate_on_error,
)

ProgressCallback = Callable[[int, int, SyncOperation], None]

# adds and updates land before anything is removed
EXECUTION_ORDER = (SyncAction.ADD, SyncAction.UPDATE, SyncAction.DELETE)

VERBS = {
    SyncAction.ADD: "Copying",
    SyncAction.UPDATE: "Updating",
    SyncAction.DELETE: "Deleting",
}


def format_progress(index: int, total: int, operation: SyncOperation) -> str:
    """Progress line, e.g. (1/3) Copying - '/src/a.txt' to '/dst/a.txt'."""
    prefix = f"({index}/{total}) {VERBS[operation.action]} - "
    destination = operation.destination_entry.path
    if operation.source_entry is None:
        return f"{prefix}'{destination}'"
    return f"{prefix}'{operation.source_entry.path}' to '{destination}'"


@dataclass
class ExecutionReport:
    """Outcome of executing a plan.

    Attributes:
        total: Operations in the plan
        processed: Operations attempted
        failed: Operations the error policy let through without completing
    """

    total: int
    processed: int = 0
    failed: List[SyncOperation] = field(default_factory=list)

    @property
    def completed(self) -> int:
        return self.processed - len(self.failed)


class SyncExecutor:
    """
    Executes plans in ADD, UPDATE, DELETE order.

    By default the first I/O error aborts the run. Pass an on_error handler
    returning CONTINUE or SKIP for a best-effort sync.
    """

    def __init__(
        self,
        on_error: ErrorHandler = terminate_on_error,
        on_progress: Optional[ProgressCallback] = None,
    ):
        self.on_error = on_error
        self.on_progress = on_progress

    def execute(self, plan: SyncPlan) -> ExecutionReport:
        report = ExecutionReport(total=plan.total_count())
        logger.info(f"Sync started: {report.total} operations")

        for action in EXECUTION_ORDER:
            for operation in plan.operations(action):
                report.processed += 1
                self._report_progress(report.processed, report.total, operation)
                if not self._apply(operation):
                    report.failed.append(operation)

        logger.info(
            f"Sync finished: {report.completed} completed, {len(report.failed)} incomplete"
        )
        return report

    def _report_progress(self, index: int, total: int, operation: SyncOperation) -> None:
        logger.info(format_progress(index, total, operation))
        if self.on_progress is not None:
            self.on_progress(index, total, operation)

    def _apply(self, operation: SyncOperation) -> bool:
        destination = operation.destination_entry.path

        if operation.action is SyncAction.DELETE:
            try:
                delete_recursively(destination)
            except OSError as e:
                handle_error(self.on_error, destination, e)
                return False
            return True

        overwrite = operation.action is SyncAction.UPDATE
        return copy_recursively(
            operation.source_entry.path,
            destination,
            overwrite=overwrite,
            on_error=self.on_error,
        )


__all__ = [
    "ExecutionReport",
    "OnErrorAction",
    "ProgressCallback",
    "SyncExecutor",
    "format_progress",
]
