"""
Clock, cancellation and bounded-wait primitives for the session flow.

Every elapsed-time wait in the orchestrator goes through an injected
``Clock`` so tests can swap in ``FakeClock`` and run a whole rush in
virtual time. Every bounded wait goes through ``wait_until``.
"""

import asyncio
import heapq
import itertools
import logging
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SessionCancelled(Exception):
    """Raised at a suspension point after the session was stopped."""


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Clock(Protocol):
    def now(self) -> float: ...

    async def sleep(self, seconds: float) -> None: ...

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle: ...


class RealClock:
    """Wall-clock implementation backed by the running event loop."""

    def now(self) -> float:
        return time.monotonic()

    async def sleep(self, seconds: float) -> None:
        await asyncio.sleep(max(0.0, seconds))

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        loop = asyncio.get_running_loop()
        return loop.call_later(max(0.0, delay), callback)


@dataclass(order=True)
class _ScheduledCall:
    when: float
    seq: int
    callback: Callable[[], Any] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)

    def cancel(self) -> None:
        self.cancelled = True


class FakeClock:
    """
    Deterministic clock for tests.

    - now() only moves when something sleeps or advance() is called.
    - sleep() jumps virtual time straight to the wake-up point, firing
      every callback scheduled on the way in time order.
    - call_later() callbacks run synchronously at their virtual time.
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: list[_ScheduledCall] = []
        self._seq = itertools.count()
        self.sleeps: list[float] = []

    def now(self) -> float:
        return self._now

    async def sleep(self, seconds: float) -> None:
        seconds = max(0.0, seconds)
        self.sleeps.append(seconds)
        self.advance(seconds)
        # Let futures resolved by fired callbacks propagate.
        await asyncio.sleep(0)

    def call_later(self, delay: float, callback: Callable[[], Any]) -> TimerHandle:
        call = _ScheduledCall(self._now + max(0.0, delay), next(self._seq), callback)
        heapq.heappush(self._queue, call)
        return call

    def advance(self, seconds: float) -> None:
        if seconds < 0:
            raise ValueError("FakeClock.advance(seconds): seconds must be >= 0")
        target = self._now + seconds
        while self._queue and self._queue[0].when <= target:
            call = heapq.heappop(self._queue)
            if call.cancelled:
                continue
            self._now = max(self._now, call.when)
            call.callback()
        self._now = target

    @property
    def pending(self) -> int:
        return sum(1 for call in self._queue if not call.cancelled)


class CancellationToken:
    """Cooperative stop signal checked at every suspension point."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def cancel(self) -> None:
        self._event.set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SessionCancelled("Session was stopped")

    async def wait(self) -> None:
        await self._event.wait()

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await ``awaitable`` but give up as soon as the token is cancelled.

        Raises:
            SessionCancelled: If the token fires first.
        """
        self.raise_if_cancelled()
        main = asyncio.ensure_future(awaitable)
        stopper = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({main, stopper}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            stopper.cancel()
            await asyncio.gather(stopper, return_exceptions=True)
        if not main.done():
            main.cancel()
            await asyncio.gather(main, return_exceptions=True)
            raise SessionCancelled("Session was stopped")
        return main.result()


async def wait_until(
    predicate: Callable[[], bool],
    *,
    timeout: float,
    poll_interval: float,
    clock: Clock,
    token: CancellationToken,
) -> bool:
    """Poll ``predicate`` until it holds or ``timeout`` elapses.

    Returns:
        True if the predicate became true, False on timeout.

    Raises:
        SessionCancelled: If the token is cancelled at any check.
    """
    deadline = clock.now() + timeout
    while True:
        token.raise_if_cancelled()
        if predicate():
            return True
        remaining = deadline - clock.now()
        if remaining <= 0:
            return False
        await clock.sleep(min(poll_interval, remaining))


async def pause(seconds: float, *, clock: Clock, token: CancellationToken) -> None:
    """Fixed delay that still honours cancellation on both sides."""
    token.raise_if_cancelled()
    if seconds > 0:
        await clock.sleep(seconds)
    token.raise_if_cancelled()
