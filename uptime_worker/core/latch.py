"""One-shot latch delivering the first of several racing results."""

import asyncio
from typing import Generic, Optional, TypeVar

T = TypeVar('T')


class OutcomeLatch(Generic[T]):
    """
    A future that can be resolved exactly once.

    Several producers may race to resolve it (a response, a transport
    error, a timer); the first call to :meth:`resolve` wins and every
    later call is a no-op returning ``False``.

    Example:
        ```python
        latch = OutcomeLatch()
        loop.call_later(3, latch.resolve, "timeout")
        outcome = await latch.wait()
        ```
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop or asyncio.get_running_loop()
        self._future: asyncio.Future = self._loop.create_future()

    @property
    def resolved(self) -> bool:
        return self._future.done()

    def resolve(self, value: T) -> bool:
        """Deliver ``value`` if nothing was delivered yet."""
        if self._future.done():
            return False
        self._future.set_result(value)
        return True

    async def wait(self) -> T:
        """Wait for the first delivered value."""
        return await self._future
