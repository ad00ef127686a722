"""Pydantic schemas for check records, probe outcomes and probe log entries."""

import math
from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

CheckState = Literal["up", "down"]

PROTOCOLS = ("http", "https")
METHODS = ("post", "get", "put", "delete")
CHECK_ID_LENGTH = 20
MIN_PHONE_LENGTH = 8
MIN_TIMEOUT_SECONDS = 1
MAX_TIMEOUT_SECONDS = 5


def _is_number(value: Any) -> bool:
    # bool is an int subclass but never a valid number here
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


class CheckRecord(BaseModel):
    """
    A monitored HTTP/HTTPS target as stored in the record store.

    Every required field is checked strictly; a record that fails any of
    them is rejected as a whole. ``state`` and ``last_check`` fall back to
    "down" and "never checked" instead of failing. Keys the worker does not
    know about are kept so that rewriting the record does not drop them.
    """

    model_config = ConfigDict(extra="allow")

    id: str
    user_phone: str
    protocol: Literal["http", "https"]
    url: str
    method: Literal["get", "post", "put", "delete"]
    success_codes: List[int]
    timeout_seconds: int
    state: CheckState = "down"
    last_check: Optional[int] = None

    @field_validator('id', mode='before')
    @classmethod
    def id_must_have_fixed_length(cls, v):
        if not isinstance(v, str) or len(v.strip()) != CHECK_ID_LENGTH:
            raise ValueError(f'id must be a string of {CHECK_ID_LENGTH} characters')
        return v

    @field_validator('user_phone', mode='before')
    @classmethod
    def phone_must_be_long_enough(cls, v):
        if not isinstance(v, str) or len(v.strip()) < MIN_PHONE_LENGTH:
            raise ValueError(f'user_phone must be a string of at least {MIN_PHONE_LENGTH} characters')
        return v

    @field_validator('protocol', mode='before')
    @classmethod
    def protocol_must_be_known(cls, v):
        if not isinstance(v, str) or v not in PROTOCOLS:
            raise ValueError(f'protocol must be one of {list(PROTOCOLS)}')
        return v

    @field_validator('url', mode='before')
    @classmethod
    def url_must_not_be_blank(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError('url must be a non-empty string')
        return v.strip()

    @field_validator('method', mode='before')
    @classmethod
    def method_must_be_known(cls, v):
        if not isinstance(v, str) or v not in METHODS:
            raise ValueError(f'method must be one of {list(METHODS)}')
        return v

    @field_validator('success_codes', mode='before')
    @classmethod
    def success_codes_must_be_int_list(cls, v):
        if not isinstance(v, list) or not v:
            raise ValueError('success_codes must be a non-empty list')
        if not all(isinstance(code, int) and not isinstance(code, bool) for code in v):
            raise ValueError('success_codes must only contain integers')
        return v

    @field_validator('timeout_seconds', mode='before')
    @classmethod
    def timeout_must_be_whole_seconds_in_range(cls, v):
        if not _is_number(v) or v % 1 != 0:
            raise ValueError('timeout_seconds must be a whole number')
        if not (MIN_TIMEOUT_SECONDS <= v <= MAX_TIMEOUT_SECONDS):
            raise ValueError(
                f'timeout_seconds must be between {MIN_TIMEOUT_SECONDS} and {MAX_TIMEOUT_SECONDS}'
            )
        return int(v)

    @field_validator('state', mode='before')
    @classmethod
    def state_defaults_to_down(cls, v):
        return v if isinstance(v, str) and v in ("up", "down") else "down"

    @field_validator('last_check', mode='before')
    @classmethod
    def last_check_defaults_to_never(cls, v):
        return int(v) if _is_number(v) and v > 0 else None

    @property
    def target_description(self) -> str:
        """Human readable "METHOD protocol://url" form used in alerts."""
        return f"{self.method.upper()} {self.protocol}://{self.url}"


class ProbeError(BaseModel):
    """Why a probe did not produce a response."""
    kind: Literal["transport", "timeout"]
    value: str


class CheckOutcome(BaseModel):
    """Result of a single probe: a response code or an error, never both."""

    model_config = ConfigDict(populate_by_name=True)

    response_code: Optional[int] = Field(default=None, alias="responseCode")
    error: Optional[ProbeError] = None

    @classmethod
    def responded(cls, status: int) -> "CheckOutcome":
        return cls(response_code=status)

    @classmethod
    def transport_failure(cls, exc: BaseException) -> "CheckOutcome":
        return cls(error=ProbeError(kind="transport", value=str(exc) or exc.__class__.__name__))

    @classmethod
    def timed_out(cls) -> "CheckOutcome":
        return cls(error=ProbeError(kind="timeout", value="timeout"))


class LogEntry(BaseModel):
    """One line of a check's probe log."""
    check: CheckRecord
    outcome: CheckOutcome
    state: CheckState
    alert: bool
    time: int

    def to_line(self) -> str:
        """Serialize to a single JSON line (without trailing newline)."""
        return self.model_dump_json(by_alias=True)

    @classmethod
    def from_line(cls, line: str) -> "LogEntry":
        """Parse a line produced by :meth:`to_line`."""
        return cls.model_validate_json(line)
