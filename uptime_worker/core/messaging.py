"""SMS client used to deliver state-change alerts."""

import asyncio

import aiohttp

from uptime_worker.config import SmsConfig
from uptime_worker.core.errors import MessagingError
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)

MAX_MESSAGE_LENGTH = 1600


class TwilioSmsClient:
    """
    Sends SMS messages through the Twilio REST API.
    
    Phone numbers without a leading "+" get the configured country code
    prepended. Delivery is attempted once.
    """
    
    def __init__(self, config: SmsConfig):
        """
        Initialize SMS client.
        
        Args:
            config: Twilio account and sender settings
        """
        self.config = config
    
    def _messages_url(self) -> str:
        return (
            f"{self.config.api_base.rstrip('/')}/2010-04-01/Accounts/"
            f"{self.config.account_sid}/Messages.json"
        )
    
    def _normalize_phone(self, phone: str) -> str:
        phone = phone.strip()
        return phone if phone.startswith("+") else f"{self.config.country_code}{phone}"
    
    async def send(self, phone: str, message: str) -> bool:
        """
        Send one SMS.
        
        Args:
            phone: Recipient phone number
            message: Message body (1 to 1600 characters)
            
        Returns:
            bool: True if sent, False if SMS delivery is disabled
            
        Raises:
            MessagingError: If the parameters are invalid or Twilio
                rejects or cannot be reached
        """
        if not isinstance(phone, str) or not phone.strip():
            raise MessagingError("Recipient phone number is missing")
        if not isinstance(message, str) or not (0 < len(message.strip()) <= MAX_MESSAGE_LENGTH):
            raise MessagingError(f"Message must be between 1 and {MAX_MESSAGE_LENGTH} characters")
        
        if not self.config.enabled:
            logger.debug("SMS alerts disabled")
            return False
        
        payload = {
            "From": self.config.from_phone,
            "To": self._normalize_phone(phone),
            "Body": message.strip(),
        }
        auth = aiohttp.BasicAuth(self.config.account_sid, self.config.auth_token)
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        
        try:
            async with aiohttp.ClientSession(timeout=timeout) as session:
                async with session.post(self._messages_url(), data=payload, auth=auth) as response:
                    if not 200 <= response.status < 300:
                        raise MessagingError(f"Twilio returned status {response.status}")
        except asyncio.TimeoutError as e:
            raise MessagingError(f"Twilio did not answer within {self.config.timeout}s") from e
        except (aiohttp.ClientError, OSError) as e:
            raise MessagingError(f"Could not reach Twilio: {e}") from e
        
        logger.info("SMS sent", extra={"to": payload["To"]})
        return True
