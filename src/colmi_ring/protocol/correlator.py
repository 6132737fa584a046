"""Matching outgoing commands to the ring's replies."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from ..exceptions import BLETimeoutError
from .packet import Packet

_LOGGER = logging.getLogger(__name__)

# Returns True to take the packet as the reply, False to swallow it and keep
# waiting, or raises to fail the waiter with a protocol error.
ReplyFilter = Callable[[Packet], bool]
WriteFunc = Callable[[bytes], Awaitable[None]]


@dataclass
class _Waiter:
    future: asyncio.Future[Packet]
    accept: ReplyFilter | None = None


class CommandCorrelator:
    """Pairs each sent command with the next inbound packet carrying its tag.

    The ring answers one command at a time, so waiters for the same tag are
    served oldest first; the queue only exists so a stray duplicate reply
    cannot deadlock a later request.
    """

    def __init__(self, write: WriteFunc, timeout: float = 10.0):
        """Initialize correlator.

        Args:
            write: Coroutine function that sends raw bytes to the ring
            timeout: Default reply deadline in seconds (default: 10)
        """
        self._write = write
        self.timeout = timeout
        self._waiters: dict[int, deque[_Waiter]] = {}

    def expect(self, tag: int, accept: ReplyFilter | None = None) -> asyncio.Future[Packet]:
        """Register interest in the next packet with this tag.

        Returns:
            Future completed by resolve(); pass it to wait()
        """
        future: asyncio.Future[Packet] = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(tag, deque()).append(_Waiter(future, accept))
        return future

    async def wait(
            self,
            tag: int,
            future: asyncio.Future[Packet],
            timeout: float | None = None,
    ) -> Packet:
        """Wait for a registered future.

        Raises:
            BLETimeoutError: If no reply arrives within the deadline
        """
        deadline = self.timeout if timeout is None else timeout
        try:
            return await asyncio.wait_for(future, timeout=deadline)
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(
                f"No reply for command {tag} within {deadline}s"
            ) from e
        finally:
            self._discard(tag, future)

    async def transmit(self, packet: Packet) -> None:
        """Write a packet without waiting for any reply."""
        _LOGGER.debug("TX %s", packet.raw.hex())
        await self._write(bytes(packet))

    async def send(
            self,
            packet: Packet,
            timeout: float | None = None,
            accept: ReplyFilter | None = None,
    ) -> Packet:
        """Send a command and wait for the reply with the same tag.

        The waiter is registered before writing so an instant reply is not lost.

        Raises:
            BLETimeoutError: If no reply arrives within the deadline
        """
        future = self.expect(packet.tag, accept)
        try:
            await self.transmit(packet)
        except BaseException:
            self._discard(packet.tag, future)
            future.cancel()
            raise
        return await self.wait(packet.tag, future, timeout)

    def resolve(self, packet: Packet) -> bool:
        """Hand an inbound packet to the oldest waiter for its tag.

        Returns:
            True if a waiter consumed the packet, False for stray packets
        """
        queue = self._waiters.get(packet.tag)
        while queue and queue[0].future.done():
            queue.popleft()
        if not queue:
            _LOGGER.debug("No pending command for packet %s", packet.raw.hex())
            return False

        waiter = queue[0]
        if waiter.accept is not None:
            try:
                if not waiter.accept(packet):
                    _LOGGER.debug("Reply filter kept waiting on %s", packet.raw.hex())
                    return True
            except Exception as e:
                queue.popleft()
                waiter.future.set_exception(e)
                return True

        queue.popleft()
        waiter.future.set_result(packet)
        return True

    def has_pending(self, tag: int) -> bool:
        return self.pending(tag) > 0

    def pending(self, tag: int) -> int:
        """Number of waiters still open for a tag."""
        return sum(1 for w in self._waiters.get(tag, ()) if not w.future.done())

    def fail_all(self, exc: BaseException) -> None:
        """Fail every pending waiter, e.g. on disconnect."""
        waiters = [w for queue in self._waiters.values() for w in queue]
        self._waiters.clear()
        for waiter in waiters:
            if not waiter.future.done():
                waiter.future.set_exception(exc)

    def _discard(self, tag: int, future: asyncio.Future[Packet]) -> None:
        queue = self._waiters.get(tag)
        if not queue:
            return
        for waiter in list(queue):
            if waiter.future is future:
                queue.remove(waiter)
        if not queue:
            del self._waiters[tag]
