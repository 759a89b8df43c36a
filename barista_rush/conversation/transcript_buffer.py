"""
Capture buffer for the agent's spoken complaint.

The agent's transcript signal writes into this buffer while the
listening window is open; the orchestrator alone opens and closes the
window, so there is never more than one eligible writer. The latest
substantial utterance wins.
"""

import logging
from typing import Iterable, Optional

from barista_rush.config import settings
from barista_rush.timing import CancellationToken, Clock, pause, wait_until
from barista_rush.utils import clean_transcript

logger = logging.getLogger(__name__)

COMPLAINT_KEYWORDS: tuple[str, ...] = (
    "order", "mobile", "app", "wait", "waiting", "long", "time", "slow",
    "wrong", "mistake", "name", "cold", "hot", "temperature", "warm",
    "milk", "dairy", "soy", "almond", "oat", "lactose",
    "rude", "staff", "attitude", "unprofessional",
    "price", "cost", "expensive", "charge", "money",
    "dirty", "clean", "mess", "spill", "bathroom",
    "problem", "issue", "complaint", "upset", "angry", "frustrated",
    "terrible", "awful", "horrible", "worst", "bad", "disappointed",
    "wifi", "wi-fi", "internet", "connection", "network", "password",
    "connect", "signal", "speed", "login", "access", "router", "bandwidth",
    "noise", "loud", "music", "volume", "quiet", "sound",
    "seat", "table", "chair", "sitting", "spot", "place",
    "reward", "points", "loyalty", "card", "account", "member",
    "pay", "payment", "transaction", "billing", "refund",
    "size", "small", "large", "medium", "bigger", "smaller",
    "missing", "forgot", "forgotten", "not included", "left out",
)


class TranscriptBuffer:
    """Holds the latest substantial utterance heard in the open window."""

    def __init__(
        self,
        min_length: Optional[int] = None,
        keywords: Iterable[str] = COMPLAINT_KEYWORDS,
    ) -> None:
        if min_length is None:
            min_length = settings.session.min_utterance_length
        self._min_length = min_length
        self._keywords = tuple(k.lower() for k in keywords)
        self._text = ""
        self._open = False

    @property
    def text(self) -> str:
        return self._text

    @property
    def is_open(self) -> bool:
        return self._open

    def open(self) -> None:
        self._open = True

    def close(self) -> None:
        self._open = False

    def clear(self) -> None:
        self._text = ""

    def is_substantial(self, text: str) -> bool:
        """Keyword hit, or longer than the minimum utterance length."""
        lower = text.lower()
        if any(keyword in lower for keyword in self._keywords):
            return True
        return len(text) > self._min_length

    def offer(self, text: Optional[str]) -> bool:
        """Store ``text`` if the window is open and it is worth keeping.

        Returns:
            True if the utterance replaced the captured text.
        """
        if not self._open:
            logger.debug("Discarding utterance outside capture window: %r", text)
            return False
        cleaned = clean_transcript(text or "")
        if not cleaned:
            return False
        if not self.is_substantial(cleaned):
            logger.debug("Ignoring short utterance: %r", cleaned)
            return False
        self._text = cleaned
        logger.info("Captured utterance: %r", cleaned)
        return True

    async def finalize(
        self,
        *,
        clock: Clock,
        token: CancellationToken,
        grace_period: float,
        retries: int,
        retry_interval: float,
        fallback: str,
    ) -> str:
        """Settle on the captured text once the agent stops speaking.

        Waits ``grace_period`` for trailing transcript lag, then polls up
        to ``retries`` times for a non-empty capture before substituting
        ``fallback``. The window stays open until this returns.
        """
        try:
            await pause(grace_period, clock=clock, token=token)
            captured = await wait_until(
                lambda: bool(self._text),
                timeout=retries * retry_interval,
                poll_interval=retry_interval,
                clock=clock,
                token=token,
            )
        finally:
            self.close()

        if captured:
            return self._text
        logger.warning("No transcript captured, using fallback complaint")
        return fallback
