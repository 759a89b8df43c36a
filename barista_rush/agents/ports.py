"""
Boundary interfaces the session engine consumes.

The engine never talks to a concrete agent service, UI or metrics sink;
it only sees these protocols. Anything that quacks the same way can be
plugged in: the scripted offline agent, a console presenter, or a real
voice-agent bridge.
"""

from typing import Callable, Optional, Protocol

from barista_rush.schemas.session_schema import CustomerProfile

TranscriptHandler = Callable[[str, str], None]
ChoiceCallback = Callable[[bool], None]
CompletionCallback = Callable[[], None]


class TranscriptSubscription(Protocol):
    """Handle returned by ``subscribe_transcript``; closing it stops delivery."""

    def close(self) -> None: ...


class AgentControl(Protocol):
    """Control surface of the external conversational agent service.

    ``send_text`` must only be reached through the rate limiter gate.
    """

    def activate(self, instance: CustomerProfile) -> None: ...

    def deactivate(self, instance: CustomerProfile) -> None: ...

    def position(self, instance: CustomerProfile) -> None: ...

    def is_speaking(self, instance: CustomerProfile) -> bool: ...

    def send_text(self, instance: CustomerProfile, text: str) -> None: ...

    def subscribe_transcript(
        self, instance: CustomerProfile, handler: TranscriptHandler
    ) -> TranscriptSubscription: ...


class ChoicePresenter(Protocol):
    def present_choice(
        self,
        prompt: str,
        good_text: str,
        bad_text: str,
        on_choice: ChoiceCallback,
    ) -> None: ...


class SatisfactionComponent(Protocol):
    def apply_choice(self, was_good: bool) -> None: ...


class MetricsRecorder(Protocol):
    def start_interaction(self, complaint_type: str) -> None: ...

    def record_choice(self) -> None: ...

    def end_interaction(self) -> None: ...


class TransitionPresenter(Protocol):
    def fade_in(self, on_complete: CompletionCallback) -> None: ...

    def fade_out(self, on_complete: CompletionCallback) -> None: ...


class SessionOwner(Protocol):
    def on_customer_served(self) -> None: ...

    def on_all_customers_complete(self) -> None: ...


class Collaborators:
    """Optional external collaborators wired into one orchestrator.

    Any of them may be None; the orchestrator degrades instead of failing.
    """

    def __init__(
        self,
        presenter: Optional[ChoicePresenter] = None,
        satisfaction: Optional[SatisfactionComponent] = None,
        metrics: Optional[MetricsRecorder] = None,
        transitions: Optional[TransitionPresenter] = None,
        owner: Optional[SessionOwner] = None,
    ) -> None:
        self.presenter = presenter
        self.satisfaction = satisfaction
        self.metrics = metrics
        self.transitions = transitions
        self.owner = owner
