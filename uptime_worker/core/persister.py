"""Writes a check's new state back to the record store."""

from uptime_worker.schemas.check import CheckRecord, CheckState
from uptime_worker.storage.records import RecordStore


class StatePersister:
    """Rewrites ``state`` and ``last_check`` of a check in one overwrite."""
    
    def __init__(self, store: RecordStore, category: str = "checks"):
        self.store = store
        self.category = category
    
    async def persist(
        self,
        record: CheckRecord,
        state: CheckState,
        time_of_check: int
    ) -> CheckRecord:
        """
        Persist the probe's result.
        
        Args:
            record: The check as validated before the probe
            state: Newly classified state
            time_of_check: Epoch milliseconds of the probe
            
        Returns:
            CheckRecord: The record as now stored
            
        Raises:
            PersistenceError: If the store rejects the write
        """
        updated = record.model_copy(update={"state": state, "last_check": time_of_check})
        await self.store.update(self.category, updated.id, updated.model_dump(mode="json"))
        return updated
