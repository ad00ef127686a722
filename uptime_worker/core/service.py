"""Worker service driving check cycles and log rotation with APScheduler."""

from datetime import datetime
from typing import Any, Dict, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from uptime_worker.config import WorkerConfig
from uptime_worker.core.probe import ProbeExecutor
from uptime_worker.core.rotation import LogRotator
from uptime_worker.core.scheduler import CheckScheduler
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)

CHECK_JOB_ID = "check_cycle"
ROTATION_JOB_ID = "log_rotation"


class WorkerService:
    """
    Process-scoped owner of the two background loops.

    Both loops fire once immediately on start and then on their interval.
    ``stop()`` cancels future ticks without interrupting work already in
    flight, then waits (bounded) for in-flight checks to finish.
    """

    def __init__(
        self,
        config: WorkerConfig,
        check_scheduler: CheckScheduler,
        log_rotator: LogRotator,
        probe: Optional[ProbeExecutor] = None,
        scheduler: Optional[AsyncIOScheduler] = None
    ):
        """
        Initialize worker service.

        Args:
            config: Worker cadence settings
            check_scheduler: Runs check cycles
            log_rotator: Runs log rotation cycles
            probe: Probe executor whose HTTP session the service owns
            scheduler: APScheduler instance (a new one if omitted)
        """
        self.config = config
        self.check_scheduler = check_scheduler
        self.log_rotator = log_rotator
        self.probe = probe
        self.scheduler = scheduler or AsyncIOScheduler()
        self.running = False

        logger.info("Worker service initialized")

    async def start(self) -> None:
        """Start the HTTP session and schedule both loops."""
        if self.running:
            logger.warning("Worker service already running")
            return

        logger.info("Background workers are starting")

        if self.probe:
            await self.probe.start()

        now = datetime.now()
        self.scheduler.add_job(
            self.check_scheduler.run_cycle,
            trigger=IntervalTrigger(seconds=self.config.check_interval_seconds),
            id=CHECK_JOB_ID,
            name="Check cycle",
            next_run_time=now,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )
        self.scheduler.add_job(
            self.log_rotator.run_cycle,
            trigger=IntervalTrigger(seconds=self.config.rotation_interval_seconds),
            id=ROTATION_JOB_ID,
            name="Log rotation",
            next_run_time=now,
            max_instances=1,
            coalesce=True,
            replace_existing=True
        )

        self.scheduler.start()
        self.running = True

        logger.info(
            "Background workers are running",
            extra={
                "check_interval": self.config.check_interval_seconds,
                "rotation_interval": self.config.rotation_interval_seconds
            }
        )

    async def stop(self) -> None:
        """Stop scheduling, drain in-flight checks and release resources."""
        if not self.running:
            return

        logger.info("Stopping background workers")

        self.scheduler.shutdown(wait=False)
        self.running = False

        await self.check_scheduler.drain(timeout=self.config.drain_timeout_seconds)

        if self.probe:
            await self.probe.close()

        logger.info("Background workers stopped")

    def get_jobs_status(self) -> Dict[str, Dict[str, Any]]:
        """
        Get status of the scheduled loops.

        Returns:
            dict: job id -> job status information
        """
        status = {}
        for job_id in (CHECK_JOB_ID, ROTATION_JOB_ID):
            job = self.scheduler.get_job(job_id)
            if job:
                status[job_id] = {
                    "name": job.name,
                    "next_run_time": job.next_run_time.isoformat() if job.next_run_time else None,
                    "trigger": str(job.trigger),
                }
        return status
