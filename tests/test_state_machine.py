"""Tests for the session lifecycle state machine."""

import pytest

from barista_rush.conversation.state_machine import (
    CAPTURE_ELIGIBLE_STATES,
    InvalidTransitionError,
    SessionState,
    SessionStateMachine,
    SessionTrigger,
)


def advance(sm: SessionStateMachine, *triggers: SessionTrigger) -> SessionState:
    state = sm.current_state
    for trigger in triggers:
        state = sm.transition(trigger)
    return state


LISTENING = (
    SessionTrigger.CUSTOMER_ACTIVATED,
    SessionTrigger.OPENING_PROMPT_SENT,
    SessionTrigger.AGENT_STARTED,
    SessionTrigger.SPEECH_ENDED,
    SessionTrigger.TRANSCRIPT_FINALIZED,
)


class TestInitialState:
    def test_starts_idle(self, state_machine):
        assert state_machine.current_state == SessionState.IDLE

    def test_initial_history_has_one_entry(self, state_machine):
        assert len(state_machine.get_history()) == 1

    def test_not_terminal_at_start(self, state_machine):
        assert not state_machine.is_terminal()

    def test_not_capture_eligible_when_idle(self, state_machine):
        assert not state_machine.is_capture_eligible()

    def test_only_activation_is_valid(self, state_machine):
        assert state_machine.get_valid_triggers() == [SessionTrigger.CUSTOMER_ACTIVATED]


class TestListeningWindow:
    def test_activation_goes_to_initializing(self, state_machine):
        new = state_machine.transition(SessionTrigger.CUSTOMER_ACTIVATED)
        assert new == SessionState.INITIALIZING

    def test_opening_prompt_opens_capture_window(self, state_machine):
        advance(state_machine, SessionTrigger.CUSTOMER_ACTIVATED, SessionTrigger.OPENING_PROMPT_SENT)
        assert state_machine.current_state == SessionState.AWAITING_AGENT_START
        assert state_machine.is_capture_eligible()

    def test_start_timeout_still_reaches_speaking(self, state_machine):
        new = advance(
            state_machine,
            SessionTrigger.CUSTOMER_ACTIVATED,
            SessionTrigger.OPENING_PROMPT_SENT,
            SessionTrigger.START_TIMEOUT,
        )
        assert new == SessionState.AGENT_SPEAKING

    def test_response_timeout_still_reaches_capture(self, state_machine):
        new = advance(
            state_machine,
            SessionTrigger.CUSTOMER_ACTIVATED,
            SessionTrigger.OPENING_PROMPT_SENT,
            SessionTrigger.AGENT_STARTED,
            SessionTrigger.RESPONSE_TIMEOUT,
        )
        assert new == SessionState.CAPTURING_TRANSCRIPT
        assert state_machine.is_capture_eligible()

    def test_classifying_closes_capture_window(self, state_machine):
        advance(state_machine, *LISTENING)
        assert state_machine.current_state == SessionState.CLASSIFYING
        assert not state_machine.is_capture_eligible()

    def test_capture_window_is_exactly_three_states(self):
        assert CAPTURE_ELIGIBLE_STATES == {
            SessionState.AWAITING_AGENT_START,
            SessionState.AGENT_SPEAKING,
            SessionState.CAPTURING_TRANSCRIPT,
        }


class TestChoiceFlow:
    def test_options_then_choice_then_relay(self, state_machine):
        advance(state_machine, *LISTENING)
        advance(state_machine, SessionTrigger.OPTIONS_GENERATED, SessionTrigger.CHOICE_MADE)
        assert state_machine.current_state == SessionState.RELAYING_CHOICE
        new = state_machine.transition(SessionTrigger.CHOICE_RELAYED)
        assert new == SessionState.EXCHANGE_CONTINUATION

    def test_continuation_loops_back_to_listening(self, state_machine):
        advance(state_machine, *LISTENING)
        advance(
            state_machine,
            SessionTrigger.OPTIONS_GENERATED,
            SessionTrigger.CHOICE_MADE,
            SessionTrigger.CHOICE_RELAYED,
        )
        new = state_machine.transition(SessionTrigger.CONTINUATION_SENT)
        assert new == SessionState.AWAITING_AGENT_START

    def test_max_exchanges_forces_terminating(self, state_machine):
        advance(state_machine, *LISTENING)
        advance(
            state_machine,
            SessionTrigger.OPTIONS_GENERATED,
            SessionTrigger.CHOICE_MADE,
            SessionTrigger.CHOICE_RELAYED,
        )
        new = state_machine.transition(SessionTrigger.MAX_EXCHANGES)
        assert new == SessionState.TERMINATING

    def test_closing_path_goes_straight_to_terminating(self, state_machine):
        advance(state_machine, *LISTENING)
        advance(state_machine, SessionTrigger.CONVERSATION_ENDING, SessionTrigger.CHOICE_MADE)
        new = state_machine.transition(SessionTrigger.CONVERSATION_CLOSED)
        assert new == SessionState.TERMINATING

    def test_missing_presenter_terminates(self, state_machine):
        advance(state_machine, *LISTENING)
        new = state_machine.transition(SessionTrigger.PRESENTER_MISSING)
        assert new == SessionState.TERMINATING

    def test_missing_agent_skips_listening(self, state_machine):
        new = advance(state_machine, SessionTrigger.CUSTOMER_ACTIVATED, SessionTrigger.AGENT_MISSING)
        assert new == SessionState.CLASSIFYING

    def test_choice_cannot_be_relayed_before_it_is_made(self, state_machine):
        advance(state_machine, *LISTENING)
        state_machine.transition(SessionTrigger.OPTIONS_GENERATED)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(SessionTrigger.CHOICE_RELAYED)


class TestHandoff:
    def _to_terminating(self, sm):
        advance(sm, *LISTENING)
        advance(sm, SessionTrigger.PRESENTER_MISSING)

    def test_teardown_goes_to_transitioning(self, state_machine):
        self._to_terminating(state_machine)
        new = state_machine.transition(SessionTrigger.TEARDOWN_COMPLETE)
        assert new == SessionState.TRANSITIONING

    def test_next_customer_reinitializes(self, state_machine):
        self._to_terminating(state_machine)
        state_machine.transition(SessionTrigger.TEARDOWN_COMPLETE)
        new = state_machine.transition(SessionTrigger.CUSTOMER_ACTIVATED)
        assert new == SessionState.INITIALIZING

    def test_all_served_completes(self, state_machine):
        self._to_terminating(state_machine)
        state_machine.transition(SessionTrigger.TEARDOWN_COMPLETE)
        new = state_machine.transition(SessionTrigger.ALL_CUSTOMERS_SERVED)
        assert new == SessionState.COMPLETED
        assert state_machine.is_terminal()

    def test_cannot_activate_while_terminating(self, state_machine):
        self._to_terminating(state_machine)
        with pytest.raises(InvalidTransitionError):
            state_machine.transition(SessionTrigger.CUSTOMER_ACTIVATED)


class TestStop:
    @pytest.mark.parametrize("state", [s for s in SessionState if s != SessionState.IDLE])
    def test_stop_is_valid_from_every_active_state(self, state):
        assert any(
            t.from_state == state and t.trigger == SessionTrigger.STOP
            and t.to_state == SessionState.IDLE
            for t in SessionStateMachine.TRANSITIONS
        )

    def test_stop_from_speaking_returns_to_idle(self, state_machine):
        advance(
            state_machine,
            SessionTrigger.CUSTOMER_ACTIVATED,
            SessionTrigger.OPENING_PROMPT_SENT,
            SessionTrigger.AGENT_STARTED,
        )
        new = state_machine.transition(SessionTrigger.STOP)
        assert new == SessionState.IDLE

    def test_stop_from_idle_is_invalid(self, state_machine):
        with pytest.raises(InvalidTransitionError, match="Valid triggers"):
            state_machine.transition(SessionTrigger.STOP)


class TestHistory:
    def test_state_trace_records_every_state(self, state_machine):
        advance(state_machine, *LISTENING)
        assert state_machine.get_state_trace() == [
            "idle",
            "initializing",
            "awaiting_agent_start",
            "agent_speaking",
            "capturing_transcript",
            "classifying",
        ]

    def test_history_records_triggers(self, state_machine):
        state_machine.transition(SessionTrigger.CUSTOMER_ACTIVATED)
        history = state_machine.get_history()
        assert history[0].trigger is None
        assert history[1].trigger == SessionTrigger.CUSTOMER_ACTIVATED

    def test_history_is_a_copy(self, state_machine):
        state_machine.get_history().clear()
        assert len(state_machine.get_history()) == 1
