"""Check scheduler fanning out one pipeline per stored check."""

import asyncio
from typing import List, Optional, Set

from uptime_worker.core.errors import PersistenceError
from uptime_worker.core.locks import CheckLockManager
from uptime_worker.core.metrics import MetricsCollector
from uptime_worker.core.pipeline import CheckPipeline, PipelineResult
from uptime_worker.storage.records import RecordStore
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


class CheckScheduler:
    """
    Runs check cycles.

    A cycle lists every stored check and launches its pipeline as an
    independent task without waiting for it. At most ``max_concurrent``
    pipelines probe at once, and a check whose previous pipeline is still
    running is skipped for this cycle.
    """

    def __init__(
        self,
        store: RecordStore,
        pipeline: CheckPipeline,
        locks: Optional[CheckLockManager] = None,
        max_concurrent: int = 20,
        category: str = "checks",
        metrics: Optional[MetricsCollector] = None
    ):
        """
        Initialize check scheduler.

        Args:
            store: Record store holding check definitions
            pipeline: Pipeline run for each check
            locks: Single-flight lock manager (in-memory if omitted)
            max_concurrent: Maximum pipelines running at once
            category: Record store category of checks
            metrics: Optional metrics collector
        """
        self.store = store
        self.pipeline = pipeline
        self.locks = locks or CheckLockManager()
        self.max_concurrent = max_concurrent
        self.category = category
        self.metrics = metrics
        self._semaphore = asyncio.Semaphore(max_concurrent)
        self._tasks: Set[asyncio.Task] = set()

        logger.info(
            "Check scheduler initialized",
            extra={"max_concurrent": max_concurrent, "category": category}
        )

    @property
    def in_flight(self) -> int:
        """Number of pipelines launched and not yet finished."""
        return len(self._tasks)

    async def run_cycle(self) -> List[asyncio.Task]:
        """
        Launch a pipeline for every stored check.

        Returns:
            list[asyncio.Task]: The launched pipeline tasks (empty if the
            checks could not be listed)
        """
        try:
            check_ids = await self.store.list(self.category)
        except PersistenceError as e:
            logger.error("Could not list checks, cycle aborted", extra={"error": str(e)})
            return []

        if not check_ids:
            logger.info("Could not find any checks to process")
            return []

        logger.info("Starting check cycle", extra={"count": len(check_ids)})

        tasks = []
        for check_id in check_ids:
            task = asyncio.create_task(self._run_pipeline(check_id), name=f"check-{check_id}")
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)
            tasks.append(task)

        return tasks

    async def _run_pipeline(self, check_id: str) -> Optional[PipelineResult]:
        """Run one check under its single-flight lock and the concurrency limit."""
        if not await self.locks.acquire(check_id):
            logger.info(
                "Skipping check, previous probe still in flight",
                extra={"check_id": check_id}
            )
            if self.metrics:
                self.metrics.record_skip("in_flight")
            return None

        try:
            async with self._semaphore:
                if self.metrics:
                    self.metrics.pipelines_in_flight.inc()
                try:
                    return await self.pipeline.run(check_id)
                finally:
                    if self.metrics:
                        self.metrics.pipelines_in_flight.dec()
        except Exception as e:
            logger.exception(
                "Error during check pipeline",
                extra={"check_id": check_id, "error": str(e)}
            )
            return None
        finally:
            await self.locks.release(check_id)

    async def drain(self, timeout: Optional[float] = None) -> None:
        """
        Wait for in-flight pipelines to finish.

        Args:
            timeout: Seconds to wait before giving up (None waits forever)
        """
        if not self._tasks:
            return

        pending = set(self._tasks)
        logger.info("Waiting for in-flight checks", extra={"count": len(pending)})
        done, still_pending = await asyncio.wait(pending, timeout=timeout)

        if still_pending:
            logger.warning(
                "In-flight checks did not finish in time",
                extra={"count": len(still_pending)}
            )
