"""
Teardown and handoff between consecutive customers.

Runs the Terminating and Transitioning phases for the session that just
finished: closes its metrics interaction, lets in-flight speech finish,
fades the scene, releases the agent instance and then either brings in
the next customer or reports the rush complete.
"""

from typing import Awaitable, Callable, Optional

from barista_rush.agents.ports import AgentControl, Collaborators, CompletionCallback
from barista_rush.config import TimingConfig
from barista_rush.conversation.state_machine import (
    InvalidTransitionError,
    SessionState,
    SessionTrigger,
)
from barista_rush.logging_context import get_session_logger
from barista_rush.schemas.session_schema import Session
from barista_rush.timing import CancellationToken, Clock, pause, wait_until

logger = get_session_logger(__name__)

NextCustomer = Callable[[], Awaitable[Session]]

MIN_SETTLE_DELAY = 0.1


class TransitionCoordinator:
    """Hands the counter from one customer's agent instance to the next."""

    def __init__(
        self,
        agents: Optional[AgentControl],
        collaborators: Collaborators,
        timing: TimingConfig,
        clock: Clock,
    ) -> None:
        self._agents = agents
        self._collaborators = collaborators
        self._timing = timing
        self._clock = clock

    @property
    def settle_delay(self) -> float:
        """Quiet gap between fade-in and fade-out, never below 0.1s."""
        return max(
            MIN_SETTLE_DELAY,
            self._timing.delay_between_customers - 2 * self._timing.fade_duration,
        )

    def end_interaction(self, session: Session) -> None:
        """Close the session's metrics interaction if one is open."""
        if not session.interaction_open:
            return
        session.interaction_open = False
        metrics = self._collaborators.metrics
        if metrics is not None:
            metrics.end_interaction()

    def release(self, session: Session) -> None:
        """Drop the transcript subscription and deactivate the instance."""
        if session.released:
            return
        session.released = True
        if session.subscription is not None:
            session.subscription.close()
            session.subscription = None
        if self._agents is not None and session.profile is not None:
            self._agents.deactivate(session.profile)

    async def hand_off(
        self,
        session: Session,
        token: CancellationToken,
        next_customer: Optional[NextCustomer] = None,
    ) -> Optional[Session]:
        """Tear down ``session`` and start the next customer, if any.

        Returns:
            The next customer's session, or None once the rush is complete.
        """
        machine = session.machine
        if machine.current_state != SessionState.TERMINATING:
            raise InvalidTransitionError(
                f"hand_off requires a terminating session, got '{machine.current_state.value}'"
            )

        self.end_interaction(session)
        owner = self._collaborators.owner
        if owner is not None:
            owner.on_customer_served()

        await self._wait_for_silence(session, token)
        await self._fade("fade_in", token)
        self.release(session)
        machine.transition(SessionTrigger.TEARDOWN_COMPLETE)
        logger.info("Customer %d released", session.customer_index + 1)

        await pause(self.settle_delay, clock=self._clock, token=token)

        if next_customer is not None:
            next_session = await next_customer()
            await self._fade("fade_out", token)
            return next_session

        await self._fade("fade_out", token)
        machine.transition(SessionTrigger.ALL_CUSTOMERS_SERVED)
        logger.info("All customers served")
        if owner is not None:
            owner.on_all_customers_complete()
        return None

    async def _wait_for_silence(self, session: Session, token: CancellationToken) -> None:
        agents = self._agents
        profile = session.profile
        if agents is None or profile is None or not agents.is_speaking(profile):
            return
        logger.debug("Waiting for %s to finish speaking", profile.instance_id)
        stopped = await wait_until(
            lambda: not agents.is_speaking(profile),
            timeout=self._timing.termination_timeout,
            poll_interval=self._timing.termination_poll_interval,
            clock=self._clock,
            token=token,
        )
        if not stopped:
            logger.warning(
                "%s still speaking after %.1fs, terminating anyway",
                profile.instance_id, self._timing.termination_timeout,
            )

    async def _fade(self, direction: str, token: CancellationToken) -> None:
        presenter = self._collaborators.transitions
        if presenter is None:
            return

        finished = False

        def on_complete() -> None:
            nonlocal finished
            finished = True

        start: Callable[[CompletionCallback], None] = getattr(presenter, direction)
        start(on_complete)
        completed = await wait_until(
            lambda: finished,
            timeout=self._timing.fade_duration + self._timing.termination_timeout,
            poll_interval=self._timing.speech_poll_interval,
            clock=self._clock,
            token=token,
        )
        if not completed:
            logger.warning("Transition %s did not complete in time, continuing", direction)
