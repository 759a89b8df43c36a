"""Shared test fixtures and recording fakes for the external collaborators."""

import asyncio
from typing import Callable, Optional, Union

import pytest

from barista_rush.agents.ports import Collaborators
from barista_rush.agents.scripted_agent import ScriptedAgentService
from barista_rush.config import AppConfig
from barista_rush.conversation.classifier import ComplaintClassifier
from barista_rush.conversation.rate_limiter import RateLimiterGate
from barista_rush.conversation.response_generator import ResponseGenerator
from barista_rush.conversation.state_machine import SessionStateMachine
from barista_rush.schemas.session_schema import CustomerProfile
from barista_rush.session.orchestrator import SessionOrchestrator
from barista_rush.timing import FakeClock


@pytest.fixture
def state_machine():
    return SessionStateMachine()


@pytest.fixture
def classifier():
    return ComplaintClassifier(detect_shouting=False)


@pytest.fixture
def generator():
    return ResponseGenerator()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def gate(clock):
    return RateLimiterGate(clock, min_interval=2.0)


class SpyAgentService(ScriptedAgentService):
    """Scripted agent that also records every control call with its time."""

    def __init__(self, clock: FakeClock, **kwargs) -> None:
        super().__init__(clock, **kwargs)
        self.calls: list[tuple[str, str]] = []
        self.sent_at: list[float] = []
        self.max_subscribers = 0

    def activate(self, instance: CustomerProfile) -> None:
        self.calls.append(("activate", instance.instance_id))
        super().activate(instance)

    def deactivate(self, instance: CustomerProfile) -> None:
        self.calls.append(("deactivate", instance.instance_id))
        super().deactivate(instance)

    def send_text(self, instance: CustomerProfile, text: str) -> None:
        self.sent_at.append(self._clock.now())
        super().send_text(instance, text)

    def subscribe_transcript(self, instance, handler):
        subscription = super().subscribe_transcript(instance, handler)
        total = sum(len(state.handlers) for state in self._states.values())
        self.max_subscribers = max(self.max_subscribers, total)
        return subscription

    def total_subscribers(self) -> int:
        return sum(len(state.handlers) for state in self._states.values())


ChoicePolicy = Union[bool, Callable[[int], bool]]


class RecordingPresenter:
    """Choice presenter that answers with a fixed policy, or holds the callback."""

    def __init__(self, policy: ChoicePolicy = True, defer: bool = False) -> None:
        self.policy = policy
        self.defer = defer
        self.calls: list[tuple[str, str, str]] = []
        self.pending: Optional[Callable[[bool], None]] = None

    def present_choice(self, prompt, good_text, bad_text, on_choice) -> None:
        self.calls.append((prompt, good_text, bad_text))
        if self.defer:
            self.pending = on_choice
            return
        choice = self.policy(len(self.calls)) if callable(self.policy) else self.policy
        on_choice(choice)


class RecordingSatisfaction:
    def __init__(self) -> None:
        self.choices: list[bool] = []

    def apply_choice(self, was_good: bool) -> None:
        self.choices.append(was_good)


class RecordingMetrics:
    def __init__(self) -> None:
        self.events: list[tuple] = []

    def start_interaction(self, complaint_type: str) -> None:
        self.events.append(("start", complaint_type))

    def record_choice(self) -> None:
        self.events.append(("choice",))

    def end_interaction(self) -> None:
        self.events.append(("end",))

    def count(self, name: str) -> int:
        return sum(1 for event in self.events if event[0] == name)


class RecordingTransitions:
    """Fade presenter completing after ``duration`` on the clock, or never."""

    def __init__(self, clock: FakeClock, duration: float = 1.0, complete: bool = True) -> None:
        self.clock = clock
        self.duration = duration
        self.complete = complete
        self.calls: list[tuple[str, float]] = []

    def fade_in(self, on_complete) -> None:
        self._fade("fade_in", on_complete)

    def fade_out(self, on_complete) -> None:
        self._fade("fade_out", on_complete)

    def _fade(self, name: str, on_complete) -> None:
        self.calls.append((name, self.clock.now()))
        if self.complete:
            self.clock.call_later(self.duration, on_complete)


class RecordingOwner:
    def __init__(self) -> None:
        self.served = 0
        self.complete_calls = 0

    def on_customer_served(self) -> None:
        self.served += 1

    def on_all_customers_complete(self) -> None:
        self.complete_calls += 1


def make_customer(
    index: int = 1,
    name: str = "Taylor",
    lines: Optional[list[str]] = None,
) -> CustomerProfile:
    """Helper to create a CustomerProfile with sensible defaults."""
    return CustomerProfile(
        instance_id=f"customer-{index}",
        name=name,
        lines=lines if lines is not None else ["My drink's ice cold. Can you fix it?"],
    )


def make_orchestrator(
    clock: FakeClock,
    customers: list,
    agents="spy",
    presenter: Optional[RecordingPresenter] = None,
    with_presenter: bool = True,
    transitions: Optional[RecordingTransitions] = None,
    gate: Optional[RateLimiterGate] = None,
    config: Optional[AppConfig] = None,
):
    """Wire an orchestrator to recording fakes on a fake clock.

    Returns (orchestrator, agents, collaborators).
    """
    if agents == "spy":
        agents = SpyAgentService(clock)
    if presenter is None and with_presenter:
        presenter = RecordingPresenter()
    collaborators = Collaborators(
        presenter=presenter,
        satisfaction=RecordingSatisfaction(),
        metrics=RecordingMetrics(),
        transitions=transitions,
        owner=RecordingOwner(),
    )
    orchestrator = SessionOrchestrator(
        agents,
        customers,
        collaborators,
        clock=clock,
        gate=gate or RateLimiterGate(clock, min_interval=2.0),
        config=config or AppConfig(),
    )
    return orchestrator, agents, collaborators


async def yield_until(predicate: Callable[[], bool], max_yields: int = 5000) -> bool:
    """Let other tasks run until ``predicate`` holds."""
    for _ in range(max_yields):
        if predicate():
            return True
        await asyncio.sleep(0)
    return predicate()
