"""
Session orchestrator for a rush of complaining customers.

Drives one customer at a time through the lifecycle in
``conversation/state_machine.py``:

    activate -> opening prompt -> listen -> capture -> classify
    -> operator choice -> relay -> (continue | terminate) -> hand off

Every step is a handler keyed by the current state that does its work
and fires exactly one trigger. All waiting happens on the injected
clock and is bounded, except the operator's choice, which has no
timeout but is woken by ``stop()``.
"""

import asyncio
from typing import Awaitable, Callable, Optional, Sequence

from barista_rush.agents.ports import AgentControl, Collaborators
from barista_rush.config import AppConfig, settings
from barista_rush.conversation.classifier import ComplaintClassifier
from barista_rush.conversation.rate_limiter import RateLimiterGate, shared_gate
from barista_rush.conversation.response_generator import ResponseGenerator
from barista_rush.conversation.state_machine import (
    SessionState,
    SessionStateMachine,
    SessionTrigger,
)
from barista_rush.conversation.transcript_buffer import TranscriptBuffer
from barista_rush.logging_context import clear_customer_id, get_session_logger, set_customer_id
from barista_rush.prompts.agent_prompts import (
    CONTINUATION_PROMPT,
    FALLBACK_COMPLAINT,
    OPENING_PROMPT,
    build_choice_prompt,
)
from barista_rush.schemas.session_schema import CustomerProfile, Session
from barista_rush.session.transition import TransitionCoordinator
from barista_rush.timing import (
    CancellationToken,
    Clock,
    SessionCancelled,
    pause,
    wait_until,
)

logger = get_session_logger(__name__)

StepHandler = Callable[[Session], Awaitable[None]]


class SessionOrchestrator:
    """
    Runs a rush: serves every customer in the roster, in order.

    Args:
        agents: The agent service, or None to run every customer on the
            fallback path.
        customers: The roster; a None entry is a customer whose agent
            instance is missing.
        collaborators: Optional presenters, satisfaction, metrics and owner.
        clock: Time source for every wait. Defaults to the gate's clock.
        gate: Outbound pacing gate on the same clock. Defaults to a gate
            on ``clock`` when one is given, else the process-wide gate.
        config: Application config. Defaults to the loaded settings.
    """

    def __init__(
        self,
        agents: Optional[AgentControl],
        customers: Sequence[Optional[CustomerProfile]],
        collaborators: Optional[Collaborators] = None,
        *,
        clock: Optional[Clock] = None,
        gate: Optional[RateLimiterGate] = None,
        config: Optional[AppConfig] = None,
        classifier: Optional[ComplaintClassifier] = None,
        generator: Optional[ResponseGenerator] = None,
    ) -> None:
        self._config = config or settings
        self._timing = self._config.timing
        self._agents = agents
        self._customers = list(customers)
        self._collaborators = collaborators or Collaborators()
        if gate is None:
            if clock is None:
                gate = shared_gate()
            else:
                gate = RateLimiterGate(clock, min_interval=self._timing.api_call_delay)
        elif clock is not None and gate.clock is not clock:
            raise ValueError("gate must pace on the orchestrator's clock")
        self._gate = gate
        self._clock = clock or gate.clock
        self._classifier = classifier or ComplaintClassifier(
            detect_shouting=self._config.classifier.detect_shouting
        )
        self._generator = generator or ResponseGenerator()
        self._buffer = TranscriptBuffer(min_length=self._config.session.min_utterance_length)
        self._transitions = TransitionCoordinator(
            agents, self._collaborators, self._timing, self._clock
        )

        self._machine = SessionStateMachine()
        self._session: Optional[Session] = None
        self._token = CancellationToken()
        self._running = False
        self._served = 0

        self._handlers: dict[SessionState, StepHandler] = {
            SessionState.AWAITING_AGENT_START: self._await_agent_start,
            SessionState.AGENT_SPEAKING: self._await_speech_end,
            SessionState.CAPTURING_TRANSCRIPT: self._finalize_transcript,
            SessionState.CLASSIFYING: self._classify,
            SessionState.PRESENTING_CHOICE: self._present_choice,
            SessionState.RELAYING_CHOICE: self._relay_choice,
            SessionState.EXCHANGE_CONTINUATION: self._continue_exchange,
        }

    # --- Public surface ---

    @property
    def state(self) -> SessionState:
        return self._machine.current_state

    @property
    def machine(self) -> SessionStateMachine:
        return self._machine

    @property
    def session(self) -> Optional[Session]:
        return self._session

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def customers_served(self) -> int:
        return self._served

    @property
    def gate(self) -> RateLimiterGate:
        return self._gate

    @property
    def buffer(self) -> TranscriptBuffer:
        return self._buffer

    async def run(self, start_index: int = 0) -> SessionState:
        """Serve customers from ``start_index`` until the roster is done.

        Returns:
            COMPLETED after a full rush, IDLE if stopped or nothing to serve.
        """
        if self._running:
            raise RuntimeError("Orchestrator is already running")

        if not self._customers:
            logger.error("Customer roster is empty, nothing to serve")
            return self.state
        if not 0 <= start_index < len(self._customers):
            logger.error(
                "Customer index %d out of range (roster has %d customers)",
                start_index, len(self._customers),
            )
            return self.state

        self._machine = SessionStateMachine()
        self._token = CancellationToken()
        self._served = 0
        self._running = True
        try:
            session: Optional[Session] = await self._initialize(start_index)
            while session is not None:
                await self._serve(session)
                next_index = session.customer_index + 1
                next_customer = None
                if next_index < len(self._customers):
                    next_customer = self._next_customer(next_index)
                self._served += 1
                session = await self._transitions.hand_off(session, self._token, next_customer)
        except SessionCancelled:
            logger.info("Rush stopped")
        finally:
            self._running = False
            if self._machine.current_state != SessionState.COMPLETED:
                self._shutdown()
            else:
                self._session = None
                clear_customer_id()
        return self.state

    def stop(self) -> None:
        """Request a stop; pending waits end at their next check."""
        if self._running:
            logger.info("Stop requested")
            self._token.cancel()
        elif self._machine.current_state != SessionState.IDLE:
            self._shutdown()

    def handle_utterance(self, instance_id: str, text: str) -> None:
        """Transcript signal handler for the active instance."""
        session = self._session
        if session is None or instance_id != session.instance_id:
            logger.debug("Ignoring utterance from inactive instance %s", instance_id)
            return
        if not self._machine.is_capture_eligible():
            logger.debug("Ignoring utterance in state %s", self._machine.current_state.value)
            return
        self._buffer.offer(text)

    # --- Lifecycle ---

    def _next_customer(self, index: int) -> Callable[[], Awaitable[Session]]:
        async def activate() -> Session:
            return await self._initialize(index)
        return activate

    async def _initialize(self, index: int) -> Session:
        profile = self._customers[index]
        session = Session(customer_index=index, machine=self._machine, profile=profile)
        set_customer_id(session.instance_id)
        self._release_previous()
        self._session = session
        self._machine.transition(SessionTrigger.CUSTOMER_ACTIVATED)

        self._buffer.close()
        self._buffer.clear()
        session.exchange_count = 0
        logger.info("Customer %d/%d: %s", index + 1, len(self._customers), session.customer_name)

        agents = self._agents
        if agents is None or profile is None:
            logger.error("No agent instance for customer %d, using fallback complaint", index + 1)
            session.agent_available = False
            self._start_interaction(session)
            session.captured_text = FALLBACK_COMPLAINT
            self._machine.transition(SessionTrigger.AGENT_MISSING)
            return session

        agents.activate(profile)
        agents.position(profile)
        session.subscription = agents.subscribe_transcript(profile, self.handle_utterance)
        await pause(self._timing.activation_settle_delay, clock=self._clock, token=self._token)

        self._start_interaction(session)
        await self._gate.send(agents, profile, OPENING_PROMPT, "opening prompt", self._token)
        self._machine.transition(SessionTrigger.OPENING_PROMPT_SENT)
        self._buffer.open()
        return session

    def _release_previous(self) -> None:
        previous = self._session
        if previous is None:
            return
        self._transitions.end_interaction(previous)
        self._transitions.release(previous)

    def _start_interaction(self, session: Session) -> None:
        metrics = self._collaborators.metrics
        if metrics is not None:
            complaint_type = session.profile.complaint_type if session.profile else "general"
            metrics.start_interaction(complaint_type)
        session.interaction_open = True

    async def _serve(self, session: Session) -> None:
        while self._machine.current_state != SessionState.TERMINATING:
            self._token.raise_if_cancelled()
            handler = self._handlers[self._machine.current_state]
            await handler(session)

    def _shutdown(self) -> None:
        self._buffer.close()
        self._buffer.clear()
        session = self._session
        if session is not None:
            self._transitions.end_interaction(session)
            if session.subscription is not None:
                session.subscription.close()
                session.subscription = None
        if self._agents is not None:
            for profile in self._customers:
                if profile is not None:
                    self._agents.deactivate(profile)
        if self._machine.current_state != SessionState.IDLE:
            self._machine.transition(SessionTrigger.STOP)
        self._session = None
        clear_customer_id()
        logger.info("Session returned to idle")

    # --- Step handlers ---

    async def _await_agent_start(self, session: Session) -> None:
        agents, profile = self._agents, session.profile
        started = await wait_until(
            lambda: agents.is_speaking(profile),
            timeout=self._timing.start_timeout,
            poll_interval=self._timing.start_poll_interval,
            clock=self._clock,
            token=self._token,
        )
        if started:
            self._machine.transition(SessionTrigger.AGENT_STARTED)
        else:
            logger.warning(
                "Agent did not start speaking within %.1fs, continuing",
                self._timing.start_timeout,
            )
            self._machine.transition(SessionTrigger.START_TIMEOUT)

    async def _await_speech_end(self, session: Session) -> None:
        agents, profile = self._agents, session.profile
        finished = await wait_until(
            lambda: not agents.is_speaking(profile),
            timeout=self._timing.response_timeout,
            poll_interval=self._timing.speech_poll_interval,
            clock=self._clock,
            token=self._token,
        )
        if finished:
            self._machine.transition(SessionTrigger.SPEECH_ENDED)
        else:
            logger.warning(
                "Agent still speaking after %.1fs, evaluating capture anyway",
                self._timing.response_timeout,
            )
            self._machine.transition(SessionTrigger.RESPONSE_TIMEOUT)

    async def _finalize_transcript(self, session: Session) -> None:
        session.captured_text = await self._buffer.finalize(
            clock=self._clock,
            token=self._token,
            grace_period=self._timing.transcript_grace_period,
            retries=self._timing.transcript_retries,
            retry_interval=self._timing.transcript_retry_interval,
            fallback=FALLBACK_COMPLAINT,
        )
        self._machine.transition(SessionTrigger.TRANSCRIPT_FINALIZED)

    async def _classify(self, session: Session) -> None:
        result = self._classifier.classify(session.captured_text)
        session.classification = result

        if self._collaborators.presenter is None:
            logger.error("No choice presenter available, ending interaction")
            self._machine.transition(SessionTrigger.PRESENTER_MISSING)
            return

        if result.conversation_ending:
            logger.info("Customer is wrapping up the conversation")
            session.closing = True
            session.responses = self._generator.closing(result, session.customer_name)
            self._machine.transition(SessionTrigger.CONVERSATION_ENDING)
        else:
            session.responses = self._generator.generate(result, session.customer_name)
            self._machine.transition(SessionTrigger.OPTIONS_GENERATED)

    async def _present_choice(self, session: Session) -> None:
        presenter = self._collaborators.presenter
        responses = session.responses
        prompt = build_choice_prompt(self._buffer.text, session.customer_name)

        loop = asyncio.get_running_loop()
        choice: asyncio.Future[bool] = loop.create_future()

        def on_choice(selected_is_good: bool) -> None:
            if not choice.done():
                choice.set_result(bool(selected_is_good))

        presenter.present_choice(prompt, responses.good.text, responses.bad.text, on_choice)
        session.selected_good = await self._token.guard(choice)
        logger.info("Operator chose the %s reply", "good" if session.selected_good else "bad")
        self._machine.transition(SessionTrigger.CHOICE_MADE)

    async def _relay_choice(self, session: Session) -> None:
        metrics = self._collaborators.metrics
        if metrics is not None:
            metrics.record_choice()

        was_good = True if session.closing else session.selected_good
        satisfaction = self._collaborators.satisfaction
        if satisfaction is not None:
            satisfaction.apply_choice(was_good)

        if session.agent_available:
            text = session.responses.text_for(session.selected_good)
            await self._gate.send(
                self._agents, session.profile, text, "operator reply", self._token
            )

        if session.closing:
            await pause(self._timing.closing_delay, clock=self._clock, token=self._token)
            self._machine.transition(SessionTrigger.CONVERSATION_CLOSED)
        elif not session.agent_available:
            self._machine.transition(SessionTrigger.CONVERSATION_CLOSED)
        else:
            self._machine.transition(SessionTrigger.CHOICE_RELAYED)

    async def _continue_exchange(self, session: Session) -> None:
        await pause(self._timing.continuation_delay, clock=self._clock, token=self._token)
        session.exchange_count += 1
        limit = self._config.session.max_complaint_exchanges
        if session.exchange_count >= limit:
            logger.info("Reached %d exchanges, moving to the next customer", limit)
            self._machine.transition(SessionTrigger.MAX_EXCHANGES)
            return

        self._buffer.clear()
        session.captured_text = ""
        session.classification = None
        session.responses = None
        session.selected_good = None
        await self._gate.send(
            self._agents, session.profile, CONTINUATION_PROMPT, "continuation prompt", self._token
        )
        self._machine.transition(SessionTrigger.CONTINUATION_SENT)
        self._buffer.open()
