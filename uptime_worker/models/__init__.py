"""Database models for Uptime Worker."""

from uptime_worker.models.record import StoredRecord

__all__ = ["StoredRecord"]
