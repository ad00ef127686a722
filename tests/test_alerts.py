"""Tests for alert dispatch and the Twilio SMS client."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import pytest
from prometheus_client import CollectorRegistry

from uptime_worker.config import SmsConfig
from uptime_worker.core.alerts import AlertDispatcher, format_alert_message
from uptime_worker.core.errors import MessagingError
from uptime_worker.core.messaging import TwilioSmsClient
from uptime_worker.core.metrics import MetricsCollector
from uptime_worker.core.validator import validate_check_data

from fakes import PHONE, FakeMessenger


@pytest.fixture
def up_record(raw_check):
    raw_check["state"] = "up"
    return validate_check_data(raw_check)


@pytest.fixture
def sms_config():
    return SmsConfig(
        enabled=True,
        account_sid="AC123",
        auth_token="secret",
        from_phone="+15550000000",
        api_base="https://api.twilio.test"
    )


def mock_client_session(status=201, post_exc=None):
    """Build a patched aiohttp.ClientSession returning ``status``."""
    response = MagicMock()
    response.status = status

    post_cm = MagicMock()
    post_cm.__aenter__ = AsyncMock(return_value=response)
    post_cm.__aexit__ = AsyncMock(return_value=None)

    session = MagicMock()
    if post_exc:
        session.post = MagicMock(side_effect=post_exc)
    else:
        session.post = MagicMock(return_value=post_cm)

    session_cm = MagicMock()
    session_cm.__aenter__ = AsyncMock(return_value=session)
    session_cm.__aexit__ = AsyncMock(return_value=None)
    return session_cm, session


@pytest.mark.unit
class TestAlertDispatcher:
    """Test alert messages and best-effort delivery."""

    def test_message(self, up_record):
        assert format_alert_message(up_record) == (
            "Alert: Your check for GET http://example.com is currently up"
        )

    async def test_dispatch_sends_to_owner(self, up_record):
        messenger = FakeMessenger()

        assert await AlertDispatcher(messenger).dispatch(up_record) is True

        assert messenger.sent == [(PHONE, format_alert_message(up_record))]

    async def test_delivery_failure_is_only_logged(self, up_record):
        metrics = MetricsCollector(CollectorRegistry())
        dispatcher = AlertDispatcher(FakeMessenger(fail=True), metrics=metrics)

        assert await dispatcher.dispatch(up_record) is False

        assert metrics.registry.get_sample_value(
            'uptime_worker_alerts_total', {'status': 'failed'}
        ) == 1.0

    async def test_disabled_messenger(self, up_record):
        messenger = MagicMock()
        messenger.send = AsyncMock(return_value=False)
        metrics = MetricsCollector(CollectorRegistry())

        assert await AlertDispatcher(messenger, metrics=metrics).dispatch(up_record) is False

        assert metrics.registry.get_sample_value(
            'uptime_worker_alerts_total', {'status': 'disabled'}
        ) == 1.0


@pytest.mark.unit
class TestTwilioSmsClient:
    """Test SMS delivery through Twilio."""

    async def test_send_success(self, sms_config):
        session_cm, session = mock_client_session(status=201)

        with patch('uptime_worker.core.messaging.aiohttp.ClientSession', return_value=session_cm):
            result = await TwilioSmsClient(sms_config).send(PHONE, "Alert: test")

        assert result is True
        args, kwargs = session.post.call_args
        assert args[0] == "https://api.twilio.test/2010-04-01/Accounts/AC123/Messages.json"
        assert kwargs["data"] == {
            "From": "+15550000000",
            "To": "+15551234567",
            "Body": "Alert: test",
        }
        assert kwargs["auth"] == aiohttp.BasicAuth("AC123", "secret")

    async def test_international_number_is_kept(self, sms_config):
        session_cm, session = mock_client_session(status=201)

        with patch('uptime_worker.core.messaging.aiohttp.ClientSession', return_value=session_cm):
            await TwilioSmsClient(sms_config).send("+447700900123", "Alert: test")

        assert session.post.call_args.kwargs["data"]["To"] == "+447700900123"

    async def test_error_status_raises(self, sms_config):
        session_cm, _ = mock_client_session(status=400)

        with patch('uptime_worker.core.messaging.aiohttp.ClientSession', return_value=session_cm):
            with pytest.raises(MessagingError):
                await TwilioSmsClient(sms_config).send(PHONE, "Alert: test")

    async def test_connection_error_raises(self, sms_config):
        session_cm, _ = mock_client_session(post_exc=aiohttp.ClientConnectionError("unreachable"))

        with patch('uptime_worker.core.messaging.aiohttp.ClientSession', return_value=session_cm):
            with pytest.raises(MessagingError):
                await TwilioSmsClient(sms_config).send(PHONE, "Alert: test")

    async def test_timeout_raises(self, sms_config):
        session_cm, _ = mock_client_session(post_exc=asyncio.TimeoutError())

        with patch('uptime_worker.core.messaging.aiohttp.ClientSession', return_value=session_cm):
            with pytest.raises(MessagingError):
                await TwilioSmsClient(sms_config).send(PHONE, "Alert: test")

    async def test_timeout_is_a_failed_alert(self, sms_config, up_record):
        session_cm, _ = mock_client_session(post_exc=asyncio.TimeoutError())
        metrics = MetricsCollector(CollectorRegistry())
        dispatcher = AlertDispatcher(TwilioSmsClient(sms_config), metrics=metrics)

        with patch('uptime_worker.core.messaging.aiohttp.ClientSession', return_value=session_cm):
            assert await dispatcher.dispatch(up_record) is False

        assert metrics.registry.get_sample_value(
            'uptime_worker_alerts_total', {'status': 'failed'}
        ) == 1.0

    @pytest.mark.parametrize("phone,message", [
        ("", "Alert"),
        ("   ", "Alert"),
        (PHONE, ""),
        (PHONE, "x" * 1601),
    ])
    async def test_invalid_parameters(self, sms_config, phone, message):
        with pytest.raises(MessagingError):
            await TwilioSmsClient(sms_config).send(phone, message)

    async def test_disabled_client_does_not_send(self):
        with patch('uptime_worker.core.messaging.aiohttp.ClientSession') as mock_session:
            result = await TwilioSmsClient(SmsConfig(enabled=False)).send(PHONE, "Alert: test")

        assert result is False
        mock_session.assert_not_called()
