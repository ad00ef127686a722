"""Storage collaborators: check records and probe logs."""

from uptime_worker.storage.logs import LogStore
from uptime_worker.storage.records import RecordStore

__all__ = ["LogStore", "RecordStore"]
