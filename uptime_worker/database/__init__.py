"""Database module for Uptime Worker."""

from uptime_worker.database.base import Base
from uptime_worker.database.session import (
    create_engine_from_config,
    create_session_factory,
    init_models,
    setup_database,
)

__all__ = [
    "Base",
    "create_engine_from_config",
    "create_session_factory",
    "init_models",
    "setup_database",
]
