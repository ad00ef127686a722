"""Keyed JSON record store backed by SQLAlchemy."""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import async_sessionmaker

from uptime_worker.core.errors import PersistenceError, RecordNotFoundError
from uptime_worker.models.record import StoredRecord
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


class RecordStore:
    """
    Opaque key-value store for records grouped by category.

    Every operation runs in its own session and transaction, so ``update``
    is a single atomic overwrite of one key. Concurrent writers to the same
    key follow last-writer-wins.
    """

    def __init__(self, session_factory: async_sessionmaker):
        """
        Initialize record store.

        Args:
            session_factory: Factory producing async sessions
        """
        self.session_factory = session_factory

    async def list(self, category: str) -> List[str]:
        """
        List the keys stored under a category.

        Raises:
            PersistenceError: If the store cannot be queried
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(StoredRecord.key)
                    .where(StoredRecord.category == category)
                    .order_by(StoredRecord.key)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not list records in {category}: {e}") from e

    async def read(self, category: str, key: str) -> Any:
        """
        Read one record.

        Returns:
            The stored payload, normally a dict. Payloads that are not JSON
            objects are returned as stored for the caller to reject.

        Raises:
            RecordNotFoundError: If the record does not exist
            PersistenceError: If the store cannot be queried
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    select(StoredRecord.data).where(
                        StoredRecord.category == category,
                        StoredRecord.key == key
                    )
                )
                data = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not read {category}/{key}: {e}") from e

        if data is None:
            raise RecordNotFoundError(category, key)
        return dict(data) if isinstance(data, dict) else data

    async def create(self, category: str, key: str, data: Dict[str, Any]) -> None:
        """
        Create a new record.

        Raises:
            PersistenceError: If the key already exists or the write fails
        """
        try:
            async with self.session_factory() as session:
                session.add(StoredRecord(category=category, key=key, data=dict(data)))
                await session.commit()
        except IntegrityError as e:
            raise PersistenceError(f"Record already exists: {category}/{key}") from e
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not create {category}/{key}: {e}") from e

    async def update(self, category: str, key: str, data: Dict[str, Any]) -> None:
        """
        Overwrite an existing record.

        Raises:
            RecordNotFoundError: If the record does not exist
            PersistenceError: If the write fails
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    update(StoredRecord)
                    .where(
                        StoredRecord.category == category,
                        StoredRecord.key == key
                    )
                    .values(data=dict(data), updated_at=datetime.utcnow())
                )
                if result.rowcount == 0:
                    await session.rollback()
                    raise RecordNotFoundError(category, key)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not update {category}/{key}: {e}") from e

        logger.debug(
            "Record updated",
            extra={"category": category, "key": key}
        )

    async def delete(self, category: str, key: str) -> None:
        """
        Delete a record.

        Raises:
            RecordNotFoundError: If the record does not exist
            PersistenceError: If the delete fails
        """
        try:
            async with self.session_factory() as session:
                result = await session.execute(
                    delete(StoredRecord).where(
                        StoredRecord.category == category,
                        StoredRecord.key == key
                    )
                )
                if result.rowcount == 0:
                    await session.rollback()
                    raise RecordNotFoundError(category, key)
                await session.commit()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not delete {category}/{key}: {e}") from e
