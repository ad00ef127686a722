"""Turns raw stored records into trusted check definitions."""

from typing import Any

from pydantic import ValidationError

from uptime_worker.core.errors import CheckValidationError
from uptime_worker.schemas.check import CheckRecord


def validate_check_data(raw: Any) -> CheckRecord:
    """
    Validate a raw record read from the store.
    
    Args:
        raw: Whatever the store returned; non-mappings count as empty
        
    Returns:
        CheckRecord: The trusted check definition
        
    Raises:
        CheckValidationError: If any required field is missing or invalid
    """
    if not isinstance(raw, dict):
        raw = {}
    
    try:
        return CheckRecord.model_validate(raw)
    except ValidationError as e:
        invalid_fields = sorted({
            ".".join(str(part) for part in error["loc"][:1]) or "record"
            for error in e.errors()
        })
        check_id = raw.get("id") if isinstance(raw.get("id"), str) else None
        raise CheckValidationError(invalid_fields, check_id=check_id) from e
