"""Appends one structured line per probe to the check's log."""

from uptime_worker.core.errors import LogAppendError
from uptime_worker.schemas.check import CheckOutcome, CheckRecord, CheckState, LogEntry
from uptime_worker.storage.logs import LogStore
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


class CheckLogger:
    """Writes probe log entries; failures are logged and never propagate."""
    
    def __init__(self, log_store: LogStore):
        self.log_store = log_store
    
    async def log(
        self,
        record: CheckRecord,
        outcome: CheckOutcome,
        state: CheckState,
        alert_warranted: bool,
        time_of_check: int
    ) -> bool:
        """
        Append the probe's entry to the log named by the check id.
        
        Returns:
            bool: True if the line was written
        """
        entry = LogEntry(
            check=record,
            outcome=outcome,
            state=state,
            alert=alert_warranted,
            time=time_of_check
        )
        
        try:
            await self.log_store.append(record.id, entry.to_line())
        except LogAppendError as e:
            logger.error(
                "Logging to file failed",
                extra={"check_id": record.id, "error": str(e)}
            )
            return False
        
        logger.debug("Logging to file succeeded", extra={"check_id": record.id})
        return True
