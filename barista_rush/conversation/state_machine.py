"""
Finite state machine for the per-customer session lifecycle.

Defines the 12 orchestrator states and the explicit transitions between
them. Every step the orchestrator takes is a checked function of
(current state, trigger); anything not listed in the table is rejected,
so there are no implicit "in progress" flags to drift out of sync.

Usage:
    sm = SessionStateMachine()
    sm.transition(SessionTrigger.CUSTOMER_ACTIVATED)
    assert sm.current_state == SessionState.INITIALIZING
"""

import logging
from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Callable

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    """All possible states in a customer session lifecycle."""
    IDLE = "idle"
    INITIALIZING = "initializing"
    AWAITING_AGENT_START = "awaiting_agent_start"
    AGENT_SPEAKING = "agent_speaking"
    CAPTURING_TRANSCRIPT = "capturing_transcript"
    CLASSIFYING = "classifying"
    PRESENTING_CHOICE = "presenting_choice"
    RELAYING_CHOICE = "relaying_choice"
    EXCHANGE_CONTINUATION = "exchange_continuation"
    TERMINATING = "terminating"
    TRANSITIONING = "transitioning"
    COMPLETED = "completed"


class SessionTrigger(str, Enum):
    """Events that cause state transitions."""
    CUSTOMER_ACTIVATED = "customer_activated"
    OPENING_PROMPT_SENT = "opening_prompt_sent"
    AGENT_MISSING = "agent_missing"
    AGENT_STARTED = "agent_started"
    START_TIMEOUT = "start_timeout"
    SPEECH_ENDED = "speech_ended"
    RESPONSE_TIMEOUT = "response_timeout"
    TRANSCRIPT_FINALIZED = "transcript_finalized"
    OPTIONS_GENERATED = "options_generated"
    CONVERSATION_ENDING = "conversation_ending"
    PRESENTER_MISSING = "presenter_missing"
    CHOICE_MADE = "choice_made"
    CHOICE_RELAYED = "choice_relayed"
    CONVERSATION_CLOSED = "conversation_closed"
    CONTINUATION_SENT = "continuation_sent"
    MAX_EXCHANGES = "max_exchanges"
    TEARDOWN_COMPLETE = "teardown_complete"
    ALL_CUSTOMERS_SERVED = "all_customers_served"
    STOP = "stop"


CAPTURE_ELIGIBLE_STATES = frozenset({
    SessionState.AWAITING_AGENT_START,
    SessionState.AGENT_SPEAKING,
    SessionState.CAPTURING_TRANSCRIPT,
})


@dataclass
class Transition:
    """A single valid state transition."""
    from_state: SessionState
    to_state: SessionState
    trigger: SessionTrigger
    guard: Optional[Callable[[], bool]] = None


@dataclass
class StateEntry:
    """Recorded history entry for a state visit."""
    state: SessionState
    entered_at: datetime
    trigger: Optional[SessionTrigger] = None


class InvalidTransitionError(Exception):
    """Raised when a transition is not valid from the current state."""


def _stop_transitions() -> list[Transition]:
    return [
        Transition(state, SessionState.IDLE, SessionTrigger.STOP)
        for state in SessionState
        if state != SessionState.IDLE
    ]


class SessionStateMachine:
    """
    Deterministic state machine controlling one rush of customers.

    The same machine instance runs across every customer of a rush:
    TRANSITIONING loops back to INITIALIZING for the next customer and
    only reaches COMPLETED when the roster is exhausted.
    """

    TRANSITIONS: list[Transition] = [
        # --- Activation ---
        Transition(SessionState.IDLE, SessionState.INITIALIZING,
                   SessionTrigger.CUSTOMER_ACTIVATED),
        Transition(SessionState.INITIALIZING, SessionState.AWAITING_AGENT_START,
                   SessionTrigger.OPENING_PROMPT_SENT),
        Transition(SessionState.INITIALIZING, SessionState.CLASSIFYING,
                   SessionTrigger.AGENT_MISSING),

        # --- Listening window ---
        Transition(SessionState.AWAITING_AGENT_START, SessionState.AGENT_SPEAKING,
                   SessionTrigger.AGENT_STARTED),
        Transition(SessionState.AWAITING_AGENT_START, SessionState.AGENT_SPEAKING,
                   SessionTrigger.START_TIMEOUT),
        Transition(SessionState.AGENT_SPEAKING, SessionState.CAPTURING_TRANSCRIPT,
                   SessionTrigger.SPEECH_ENDED),
        Transition(SessionState.AGENT_SPEAKING, SessionState.CAPTURING_TRANSCRIPT,
                   SessionTrigger.RESPONSE_TIMEOUT),
        Transition(SessionState.CAPTURING_TRANSCRIPT, SessionState.CLASSIFYING,
                   SessionTrigger.TRANSCRIPT_FINALIZED),

        # --- Classification ---
        Transition(SessionState.CLASSIFYING, SessionState.PRESENTING_CHOICE,
                   SessionTrigger.OPTIONS_GENERATED),
        Transition(SessionState.CLASSIFYING, SessionState.PRESENTING_CHOICE,
                   SessionTrigger.CONVERSATION_ENDING),
        Transition(SessionState.CLASSIFYING, SessionState.TERMINATING,
                   SessionTrigger.PRESENTER_MISSING),

        # --- Operator choice ---
        Transition(SessionState.PRESENTING_CHOICE, SessionState.RELAYING_CHOICE,
                   SessionTrigger.CHOICE_MADE),
        Transition(SessionState.RELAYING_CHOICE, SessionState.EXCHANGE_CONTINUATION,
                   SessionTrigger.CHOICE_RELAYED),
        Transition(SessionState.RELAYING_CHOICE, SessionState.TERMINATING,
                   SessionTrigger.CONVERSATION_CLOSED),

        # --- Continuation ---
        Transition(SessionState.EXCHANGE_CONTINUATION, SessionState.AWAITING_AGENT_START,
                   SessionTrigger.CONTINUATION_SENT),
        Transition(SessionState.EXCHANGE_CONTINUATION, SessionState.TERMINATING,
                   SessionTrigger.MAX_EXCHANGES),

        # --- Handoff ---
        Transition(SessionState.TERMINATING, SessionState.TRANSITIONING,
                   SessionTrigger.TEARDOWN_COMPLETE),
        Transition(SessionState.TRANSITIONING, SessionState.INITIALIZING,
                   SessionTrigger.CUSTOMER_ACTIVATED),
        Transition(SessionState.TRANSITIONING, SessionState.COMPLETED,
                   SessionTrigger.ALL_CUSTOMERS_SERVED),

        # --- Cancellation ---
        *_stop_transitions(),
    ]

    def __init__(self) -> None:
        self._current_state = SessionState.IDLE
        self._history: list[StateEntry] = [
            StateEntry(state=SessionState.IDLE, entered_at=datetime.now(timezone.utc))
        ]

    @property
    def current_state(self) -> SessionState:
        return self._current_state

    def transition(self, trigger: SessionTrigger) -> SessionState:
        """
        Execute a state transition.

        Args:
            trigger: The event triggering the transition.

        Returns:
            The new session state.

        Raises:
            InvalidTransitionError: If no valid transition exists.
        """
        for t in self.TRANSITIONS:
            if t.from_state == self._current_state and t.trigger == trigger:
                if t.guard is not None and not t.guard():
                    continue

                old_state = self._current_state
                self._current_state = t.to_state

                self._history.append(StateEntry(
                    state=self._current_state,
                    entered_at=datetime.now(timezone.utc),
                    trigger=trigger,
                ))

                logger.debug(
                    "State transition: %s -> %s (trigger: %s)",
                    old_state.value, self._current_state.value, trigger.value,
                )
                return self._current_state

        valid = [t.value for t in self.get_valid_triggers()]
        raise InvalidTransitionError(
            f"No valid transition from '{self._current_state.value}' "
            f"with trigger '{trigger.value}'. Valid triggers: {valid}"
        )

    def get_valid_triggers(self) -> list[SessionTrigger]:
        """Return all triggers valid from the current state."""
        return [t.trigger for t in self.TRANSITIONS if t.from_state == self._current_state]

    def get_history(self) -> list[StateEntry]:
        """Return the full state transition history."""
        return list(self._history)

    def get_state_trace(self) -> list[str]:
        """Return ordered list of state names visited."""
        return [entry.state.value for entry in self._history]

    def is_capture_eligible(self) -> bool:
        """True while incoming transcript text may be stored."""
        return self._current_state in CAPTURE_ELIGIBLE_STATES

    def is_terminal(self) -> bool:
        """Check if every customer of the rush has been served."""
        return self._current_state == SessionState.COMPLETED
