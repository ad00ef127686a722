"""StoredRecord model - generic keyed JSON document storage."""

from datetime import datetime

from sqlalchemy import Column, String, JSON, DateTime

from uptime_worker.database.base import Base


class StoredRecord(Base):
    """
    A JSON document addressed by ``(category, key)``.
    
    Check definitions are written by the external API and read/rewritten
    by the worker; the worker treats ``data`` as opaque until validated.
    
    Attributes:
        category: Collection the record belongs to (e.g. "checks")
        key: Record identifier within the category
        data: The record itself
        updated_at: Time of the last write
    """
    
    __tablename__ = "records"
    
    category = Column(String(64), primary_key=True)
    key = Column(String(128), primary_key=True)
    data = Column(JSON, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False
    )
    
    def __repr__(self) -> str:
        """String representation of stored record."""
        return f"<StoredRecord(category='{self.category}', key='{self.key}')>"
