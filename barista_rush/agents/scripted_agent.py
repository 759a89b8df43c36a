"""
Offline stand-in for the conversational agent service.

Each customer "speaks" its scripted complaints in order: asked for a
complaint, it waits ``start_delay``, speaks for ``speech_duration``, and
its transcript reaches subscribers ``transcript_lag`` after it stops.
Once the script runs out it speaks its closing line. Any other text
(the operator's reply) gets a short acknowledgement that is too brief
to count as a complaint. All timing runs on the injected clock.
"""

import logging
from dataclasses import dataclass, field
from typing import Optional

from barista_rush.agents.ports import TranscriptHandler
from barista_rush.prompts.agent_prompts import CONTINUATION_PROMPT, OPENING_PROMPT
from barista_rush.schemas.session_schema import CustomerProfile
from barista_rush.timing import Clock, TimerHandle

logger = logging.getLogger(__name__)

REACTIONS = ("Okay.", "Hmm.", "Fine.", "Right.")

_COMPLAINT_REQUESTS = frozenset({OPENING_PROMPT, CONTINUATION_PROMPT})


@dataclass
class _InstanceState:
    active: bool = False
    speaking: bool = False
    cursor: int = 0
    reactions: int = 0
    handlers: list[TranscriptHandler] = field(default_factory=list)
    timers: list[TimerHandle] = field(default_factory=list)


class _Subscription:
    def __init__(self, agent: "ScriptedAgentService", instance_id: str,
                 handler: TranscriptHandler) -> None:
        self._agent = agent
        self._instance_id = instance_id
        self._handler = handler
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._agent._unsubscribe(self._instance_id, self._handler)


class ScriptedAgentService:
    """Deterministic AgentControl implementation driven by a clock."""

    def __init__(
        self,
        clock: Clock,
        start_delay: float = 0.5,
        speech_duration: float = 2.0,
        transcript_lag: float = 0.5,
        silent: Optional[set[str]] = None,
    ) -> None:
        self._clock = clock
        self.start_delay = start_delay
        self.speech_duration = speech_duration
        self.transcript_lag = transcript_lag
        # Instances that accept text but never speak.
        self._silent = set(silent or ())
        self._states: dict[str, _InstanceState] = {}
        self.sent: list[tuple[str, str]] = []
        self.spoken: list[tuple[str, str]] = []

    def _state(self, instance: CustomerProfile) -> _InstanceState:
        return self._states.setdefault(instance.instance_id, _InstanceState())

    # --- AgentControl ---

    def activate(self, instance: CustomerProfile) -> None:
        self._state(instance).active = True
        logger.info("Activated %s (%s)", instance.name, instance.instance_id)

    def deactivate(self, instance: CustomerProfile) -> None:
        state = self._state(instance)
        state.active = False
        state.speaking = False
        self._cancel_timers(state)
        logger.info("Deactivated %s", instance.instance_id)

    def position(self, instance: CustomerProfile) -> None:
        logger.debug("Positioned %s at the counter", instance.instance_id)

    def is_speaking(self, instance: CustomerProfile) -> bool:
        return self._state(instance).speaking

    def send_text(self, instance: CustomerProfile, text: str) -> None:
        state = self._state(instance)
        self.sent.append((instance.instance_id, text))
        if not state.active:
            logger.warning("Text sent to inactive instance %s ignored", instance.instance_id)
            return
        if instance.instance_id in self._silent:
            return
        self._speak(instance, state, self._reply_for(instance, state, text))

    def subscribe_transcript(self, instance: CustomerProfile,
                             handler: TranscriptHandler) -> _Subscription:
        self._state(instance).handlers.append(handler)
        return _Subscription(self, instance.instance_id, handler)

    # --- Introspection ---

    def is_active(self, instance: CustomerProfile) -> bool:
        return self._state(instance).active

    def subscriber_count(self, instance: CustomerProfile) -> int:
        return len(self._state(instance).handlers)

    # --- Internals ---

    def _reply_for(self, instance: CustomerProfile, state: _InstanceState, text: str) -> str:
        if text in _COMPLAINT_REQUESTS:
            if state.cursor < len(instance.lines):
                line = instance.lines[state.cursor]
                state.cursor += 1
                return line
            return instance.closing_line
        reaction = REACTIONS[state.reactions % len(REACTIONS)]
        state.reactions += 1
        return reaction

    def _speak(self, instance: CustomerProfile, state: _InstanceState, line: str) -> None:
        self._cancel_timers(state)

        def start() -> None:
            state.speaking = True

        def stop() -> None:
            state.speaking = False
            self.spoken.append((instance.instance_id, line))

        def deliver() -> None:
            for handler in list(state.handlers):
                handler(instance.instance_id, line)

        stop_at = self.start_delay + self.speech_duration
        state.timers = [
            self._clock.call_later(self.start_delay, start),
            self._clock.call_later(stop_at, stop),
            self._clock.call_later(stop_at + self.transcript_lag, deliver),
        ]

    @staticmethod
    def _cancel_timers(state: _InstanceState) -> None:
        for timer in state.timers:
            timer.cancel()
        state.timers = []

    def _unsubscribe(self, instance_id: str, handler: TranscriptHandler) -> None:
        state = self._states.get(instance_id)
        if state is not None and handler in state.handlers:
            state.handlers.remove(handler)
