"""Probe executor performing one HTTP/HTTPS request per check."""

import asyncio
import time
from typing import Optional
from urllib.parse import urlsplit

import aiohttp

from uptime_worker.core.latch import OutcomeLatch
from uptime_worker.schemas.check import CheckOutcome, CheckRecord
from uptime_worker.utils.logger import get_logger

logger = get_logger(__name__)


def build_target(protocol: str, url: str) -> str:
    """
    Build the request target from a check's protocol and url.

    Only scheme, host, port, path and query string are kept; the path
    defaults to "/".

    Args:
        protocol: "http" or "https"
        url: Host plus optional path and query, without scheme

    Returns:
        str: Absolute URL to request

    Raises:
        ValueError: If no host can be parsed or the port is invalid
    """
    parts = urlsplit(f"{protocol}://{url}")
    hostname = parts.hostname
    if not hostname:
        raise ValueError(f"No hostname in {url!r}")

    if ":" in hostname:
        hostname = f"[{hostname}]"
    port = parts.port
    host = f"{hostname}:{port}" if port else hostname

    path = parts.path or "/"
    if parts.query:
        path = f"{path}?{parts.query}"

    return f"{protocol}://{host}{path}"


class ProbeExecutor:
    """
    Executes probes and delivers exactly one outcome per probe.

    The request, its transport errors and the timeout timer all race to
    resolve an :class:`OutcomeLatch`; whichever fires first decides the
    outcome and later events are dropped. Redirects are not followed and
    failed probes are not retried.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        max_connections: int = 20
    ):
        """
        Initialize probe executor.

        Args:
            session: HTTP session to use (created on start() if omitted)
            max_connections: Connection pool limit for the owned session
        """
        self.session = session
        self.max_connections = max_connections
        self._owns_session = session is None

    async def __aenter__(self):
        """Async context manager entry."""
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()

    async def start(self) -> None:
        """Start the HTTP session."""
        if self.session is None:
            connector = aiohttp.TCPConnector(limit=self.max_connections)
            self.session = aiohttp.ClientSession(connector=connector)
            self._owns_session = True
            logger.info("HTTP session started")

    async def close(self) -> None:
        """Close the HTTP session if this executor created it."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None
            logger.info("HTTP session closed")

    async def execute(self, record: CheckRecord) -> CheckOutcome:
        """
        Probe a check's target once.

        Args:
            record: Validated check to probe

        Returns:
            CheckOutcome: Response code, transport error or timeout
        """
        try:
            target = build_target(record.protocol, record.url)
        except ValueError as e:
            logger.warning(
                "Check target could not be parsed",
                extra={"check_id": record.id, "url": record.url, "error": str(e)}
            )
            return CheckOutcome.transport_failure(e)

        if self.session is None:
            await self.start()

        method = record.method.upper()
        timeout = record.timeout_seconds
        latch: OutcomeLatch[CheckOutcome] = OutcomeLatch()
        loop = asyncio.get_running_loop()

        start_time = time.monotonic()
        timer = loop.call_later(timeout, latch.resolve, CheckOutcome.timed_out())
        request = asyncio.ensure_future(
            self._send(record.id, method, target, timeout, latch)
        )

        try:
            outcome = await latch.wait()
        finally:
            timer.cancel()
            if not request.done():
                request.cancel()

        logger.debug(
            "Probe completed",
            extra={
                "check_id": record.id,
                "method": method,
                "target": target,
                "response_code": outcome.response_code,
                "error": outcome.error.kind if outcome.error else None,
                "duration": time.monotonic() - start_time
            }
        )

        return outcome

    async def _send(
        self,
        check_id: str,
        method: str,
        target: str,
        timeout: int,
        latch: OutcomeLatch
    ) -> None:
        """Issue the request and resolve the latch with whatever happens."""
        try:
            async with self.session.request(
                method=method,
                url=target,
                timeout=aiohttp.ClientTimeout(total=timeout),
                allow_redirects=False
            ) as response:
                latch.resolve(CheckOutcome.responded(response.status))

        except asyncio.TimeoutError:
            latch.resolve(CheckOutcome.timed_out())

        except (aiohttp.ClientError, OSError, ValueError) as e:
            latch.resolve(CheckOutcome.transport_failure(e))

        except Exception as e:
            logger.exception(
                "Probe unexpected error",
                extra={"check_id": check_id, "target": target, "error": str(e)}
            )
            latch.resolve(CheckOutcome.transport_failure(e))
