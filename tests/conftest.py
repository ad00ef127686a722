"""Pytest configuration and fixtures."""

from typing import Any, Dict

import pytest

from uptime_worker.config import DatabaseConfig
from uptime_worker.core.alerts import AlertDispatcher
from uptime_worker.core.check_logger import CheckLogger
from uptime_worker.core.persister import StatePersister
from uptime_worker.core.pipeline import CheckPipeline
from uptime_worker.core.probe import ProbeExecutor
from uptime_worker.database.session import create_engine_from_config, create_session_factory, init_models
from uptime_worker.storage.logs import LogStore
from uptime_worker.storage.records import RecordStore

from fakes import CHECK_ID, NOW, PHONE, PREVIOUS_CHECK, FakeMessenger, FakeSession


@pytest.fixture
def raw_check() -> Dict[str, Any]:
    """A valid stored check that was probed before and is down."""
    return {
        "id": CHECK_ID,
        "user_phone": PHONE,
        "protocol": "http",
        "url": "example.com",
        "method": "get",
        "success_codes": [200],
        "timeout_seconds": 3,
        "state": "down",
        "last_check": PREVIOUS_CHECK,
    }


@pytest.fixture
def clock():
    """Fixed clock returning NOW."""
    return lambda: NOW


@pytest.fixture
async def db_engine():
    """In-memory database with tables created."""
    engine = create_engine_from_config(DatabaseConfig(url="sqlite+aiosqlite:///:memory:"))
    await init_models(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def record_store(db_engine) -> RecordStore:
    """Record store on the in-memory database."""
    return RecordStore(create_session_factory(db_engine))


@pytest.fixture
def log_store(tmp_path) -> LogStore:
    """Log store in a temporary directory."""
    return LogStore(str(tmp_path / "logs"))


@pytest.fixture
def messenger() -> FakeMessenger:
    return FakeMessenger()


@pytest.fixture
def build_pipeline(record_store, log_store, clock):
    """Factory building a real pipeline around a fake HTTP session."""

    def _build(session: FakeSession, messenger: FakeMessenger) -> CheckPipeline:
        return CheckPipeline(
            store=record_store,
            probe=ProbeExecutor(session=session),
            persister=StatePersister(record_store),
            dispatcher=AlertDispatcher(messenger),
            check_logger=CheckLogger(log_store),
            clock=clock
        )

    return _build
