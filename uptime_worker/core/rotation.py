"""Log rotation: archive each active probe log, then empty it."""

from typing import Callable, Dict, Optional

from uptime_worker.core.errors import CompressionError, TruncateError
from uptime_worker.core.metrics import MetricsCollector
from uptime_worker.core.pipeline import epoch_millis
from uptime_worker.storage.logs import LogStore
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


class LogRotator:
    """
    Compresses every active log into ``<id>-<epoch ms>`` and truncates it.

    Compress and truncate run under the log's lock so appends wait for the
    rotation instead of being lost. When compression fails the log is left
    untouched and is retried on the next rotation.
    """

    def __init__(
        self,
        log_store: LogStore,
        clock: Callable[[], int] = epoch_millis,
        metrics: Optional[MetricsCollector] = None
    ):
        self.log_store = log_store
        self.clock = clock
        self.metrics = metrics

    def _record(self, status: str) -> None:
        if self.metrics:
            self.metrics.record_rotation(status)

    async def rotate(self, log_id: str) -> Optional[str]:
        """
        Rotate one log.

        Returns:
            str: The archive id, or None if the log was not rotated
        """
        archive_id = f"{log_id}-{self.clock()}"

        async with self.log_store.lock(log_id):
            try:
                await self.log_store.compress(log_id, archive_id)
            except CompressionError as e:
                logger.error(
                    "Error compressing one of the log files",
                    extra={"log_id": log_id, "error": str(e)}
                )
                self._record("compress_failed")
                return None

            try:
                await self.log_store.truncate(log_id)
            except TruncateError as e:
                logger.error(
                    "Error truncating log file",
                    extra={"log_id": log_id, "archive_id": archive_id, "error": str(e)}
                )
                self._record("truncate_failed")
                return archive_id

        logger.debug("Success truncating log file", extra={"log_id": log_id, "archive_id": archive_id})
        self._record("rotated")
        return archive_id

    async def run_cycle(self) -> Dict[str, Optional[str]]:
        """
        Rotate every active log.

        Returns:
            dict: log id -> archive id (None where rotation failed)
        """
        try:
            log_ids = await self.log_store.list(include_archived=False)
        except OSError as e:
            logger.error("Could not list logs, rotation aborted", extra={"error": str(e)})
            return {}

        if not log_ids:
            logger.info("Could not find any logs to rotate")
            return {}

        results = {}
        for log_id in log_ids:
            results[log_id] = await self.rotate(log_id)

        logger.info(
            "Log rotation completed",
            extra={
                "total": len(log_ids),
                "rotated": sum(1 for archive_id in results.values() if archive_id)
            }
        )
        return results
