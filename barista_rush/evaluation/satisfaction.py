"""Customer satisfaction gauge moved by the operator's choices."""

import logging
from typing import Optional

from barista_rush.config import settings

logger = logging.getLogger(__name__)

MIN_SATISFACTION = 0
MAX_SATISFACTION = 100


class SatisfactionGauge:
    """Integer gauge clamped to 0..100; good choices raise it, bad ones lower it."""

    def __init__(self, start: Optional[int] = None, step: Optional[int] = None) -> None:
        self._start = settings.satisfaction.start if start is None else start
        self._step = settings.satisfaction.step if step is None else step
        self._value = self._clamp(self._start)

    @property
    def value(self) -> int:
        return self._value

    def apply_choice(self, was_good: bool) -> None:
        delta = self._step if was_good else -self._step
        previous = self._value
        self._value = self._clamp(self._value + delta)
        logger.info("Satisfaction %d -> %d (%s choice)",
                    previous, self._value, "good" if was_good else "bad")

    def reset(self) -> None:
        self._value = self._clamp(self._start)

    @staticmethod
    def _clamp(value: int) -> int:
        return max(MIN_SATISFACTION, min(MAX_SATISFACTION, value))
