"""Exception hierarchy for the check pipeline and log maintenance."""

from typing import List, Optional


class WorkerError(Exception):
    """Base class for all errors raised by the worker."""
    pass


class CheckValidationError(WorkerError):
    """Raised when a stored check record is malformed and must be dropped."""
    
    def __init__(self, invalid_fields: List[str], check_id: Optional[str] = None):
        self.invalid_fields = invalid_fields
        self.check_id = check_id
        super().__init__(
            f"Check record is not properly formatted, invalid fields: {', '.join(invalid_fields)}"
        )


class PersistenceError(WorkerError):
    """Raised when the record store cannot list, read or write a record."""
    pass


class RecordNotFoundError(PersistenceError):
    """Raised when a record does not exist in the store."""
    
    def __init__(self, category: str, key: str):
        self.category = category
        self.key = key
        super().__init__(f"Record not found: {category}/{key}")


class MessagingError(WorkerError):
    """Raised when an alert message could not be delivered."""
    pass


class LogAppendError(WorkerError):
    """Raised when a probe log line could not be appended."""
    pass


class CompressionError(WorkerError):
    """Raised when an active log could not be archived."""
    pass


class TruncateError(WorkerError):
    """Raised when an active log could not be truncated after archiving."""
    pass
