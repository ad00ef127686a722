"""Pydantic schemas for check data flowing through the worker."""

from uptime_worker.schemas.check import (
    CheckRecord,
    CheckOutcome,
    CheckState,
    LogEntry,
    ProbeError,
)

__all__ = [
    "CheckRecord",
    "CheckOutcome",
    "CheckState",
    "LogEntry",
    "ProbeError",
]
