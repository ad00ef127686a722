"""Notifies a check's owner when its state changes."""

from typing import Optional, Protocol

from uptime_worker.core.errors import MessagingError
from uptime_worker.core.metrics import MetricsCollector
from uptime_worker.schemas.check import CheckRecord
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


class MessagingClient(Protocol):
    async def send(self, phone: str, message: str) -> bool:
        ...


def format_alert_message(record: CheckRecord) -> str:
    """Build the alert text for a check that is now in ``record.state``."""
    return f"Alert: Your check for {record.target_description} is currently {record.state}"


class AlertDispatcher:
    """
    Sends a best-effort state-change alert.
    
    Delivery failures are logged; there is no retry and no escalation.
    """
    
    def __init__(self, messenger: MessagingClient, metrics: Optional[MetricsCollector] = None):
        self.messenger = messenger
        self.metrics = metrics
    
    async def dispatch(self, record: CheckRecord) -> bool:
        """
        Alert the check's owner about its current state.
        
        Args:
            record: The check as persisted after the state change
            
        Returns:
            bool: True if the alert was sent
        """
        message = format_alert_message(record)
        
        try:
            sent = await self.messenger.send(record.user_phone, message)
        except MessagingError as e:
            logger.error(
                "Could not send alert to user who had a state change in their check",
                extra={"check_id": record.id, "state": record.state, "error": str(e)}
            )
            if self.metrics:
                self.metrics.record_alert("failed")
            return False
        
        if sent:
            logger.info(
                "User was alerted to a status change in their check",
                extra={"check_id": record.id, "state": record.state}
            )
        if self.metrics:
            self.metrics.record_alert("sent" if sent else "disabled")
        return sent
