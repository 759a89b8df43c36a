"""
Process-wide pacing for outbound calls to the agent service.

The agent service rejects bursts, so every text sent to any agent
instance waits until at least ``min_interval`` seconds have passed
since the previous accepted call. The gate owns the send path: callers
hand it the text and it performs the call after acquiring.
"""

import logging
from typing import TYPE_CHECKING, Optional

from barista_rush.config import settings
from barista_rush.timing import CancellationToken, Clock, RealClock

if TYPE_CHECKING:
    from barista_rush.agents.ports import AgentControl
    from barista_rush.schemas.session_schema import CustomerProfile

logger = logging.getLogger(__name__)


class RateLimiterGate:
    """Enforces a minimum interval between any two outbound agent calls."""

    def __init__(self, clock: Clock, min_interval: Optional[float] = None) -> None:
        if min_interval is None:
            min_interval = settings.timing.api_call_delay
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self._clock = clock
        self._min_interval = min_interval
        self._last_call: Optional[float] = None
        self._accepted = 0

    @property
    def clock(self) -> Clock:
        return self._clock

    @property
    def min_interval(self) -> float:
        return self._min_interval

    @property
    def last_call(self) -> Optional[float]:
        """Timestamp of the last accepted call, or None before the first."""
        return self._last_call

    @property
    def accepted_calls(self) -> int:
        return self._accepted

    async def acquire(
        self, context: str = "", token: Optional[CancellationToken] = None
    ) -> float:
        """Wait out the remaining interval, then record this call.

        Returns:
            The seconds spent waiting (0.0 when the gate was open).

        Raises:
            SessionCancelled: If ``token`` is cancelled before or during
                the wait. Nothing is recorded in that case.
        """
        waited = await self._wait_turn(context, token)
        self._record()
        return waited

    async def send(
        self,
        agents: "AgentControl",
        instance: "CustomerProfile",
        text: str,
        context: str = "",
        token: Optional[CancellationToken] = None,
    ) -> None:
        """Acquire the gate and deliver ``text`` to the agent instance.

        Nothing is sent or recorded if ``token`` is cancelled while waiting.
        """
        await self._wait_turn(context, token)
        logger.info("Sending %s to %s", context or "text", instance.instance_id)
        agents.send_text(instance, text)
        self._record()

    async def _wait_turn(self, context: str, token: Optional[CancellationToken]) -> float:
        if token is not None:
            token.raise_if_cancelled()
        waited = 0.0
        if self._last_call is not None:
            elapsed = self._clock.now() - self._last_call
            if elapsed < self._min_interval:
                waited = self._min_interval - elapsed
                logger.debug(
                    "Rate limit: waiting %.2fs before %s",
                    waited, context or "agent call",
                )
                if token is None:
                    await self._clock.sleep(waited)
                else:
                    await token.guard(self._clock.sleep(waited))
        if token is not None:
            token.raise_if_cancelled()
        return waited

    def _record(self) -> None:
        now = self._clock.now()
        self._last_call = now if self._last_call is None else max(self._last_call, now)
        self._accepted += 1


_shared_gate: Optional[RateLimiterGate] = None


def shared_gate(clock: Optional[Clock] = None) -> RateLimiterGate:
    """Return the process-wide gate, creating it once.

    The gate is bound to the first clock it is given (the wall clock if
    none). Asking for it on a different clock later is an error.

    Raises:
        ValueError: If ``clock`` differs from the gate's bound clock.
    """
    global _shared_gate
    if _shared_gate is None:
        _shared_gate = RateLimiterGate(clock or RealClock())
    elif clock is not None and clock is not _shared_gate.clock:
        raise ValueError("The shared gate is already bound to a different clock")
    return _shared_gate
