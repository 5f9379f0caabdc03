"""Service for mirroring a source tree onto a destination tree."""

import asyncio
from typing import Optional, Tuple

from loguru import logger

from treesync.config import SyncConfig
from treesync.models import DirectoryNode
from treesync.sync.decision_engine import DecisionEngine
from treesync.sync.execution_service import ExecutionReport, SyncExecutor
from treesync.sync.tree_loader import TreeLoader
from treesync.sync.utils import SyncPlan


class SyncService:
    """Loads both trees, diffs them and applies the resulting plan."""

    def __init__(
        self,
        config: SyncConfig,
        loader: Optional[TreeLoader] = None,
        decision_engine: Optional[DecisionEngine] = None,
        executor: Optional[SyncExecutor] = None,
    ):
        self.config = config
        self.loader = loader or TreeLoader(config.path_filter())
        self.decision_engine = decision_engine or DecisionEngine.from_config(config)
        self.executor = executor or SyncExecutor()

    async def load_trees(self) -> Tuple[DirectoryNode, DirectoryNode]:
        """Snapshot source and destination concurrently."""
        source, destination = await asyncio.gather(
            self.loader.load_tree(
                self.config.src_path, self.config.recursive, self.config.src_path
            ),
            self.loader.load_tree(
                self.config.dest_path, self.config.recursive, self.config.dest_path
            ),
        )
        logger.info("Loaded directory snapshots")
        return source, destination

    async def plan(self) -> SyncPlan:
        """Compute the plan without changing anything on disk."""
        source, destination = await self.load_trees()
        plan = await self.decision_engine.diff(source, destination)
        logger.info(
            f"Planned {plan.total_count()} operations for "
            f"'{self.config.src_path}' -> '{self.config.dest_path}' "
            f"({self.config.check_model.value})"
        )
        logger.debug(plan.summary())
        return plan

    def execute(self, plan: SyncPlan) -> ExecutionReport:
        return self.executor.execute(plan)

    async def sync(self) -> Tuple[SyncPlan, ExecutionReport]:
        """Plan and execute without confirmation."""
        plan = await self.plan()
        report = await asyncio.to_thread(self.execute, plan)
        return plan, report
