from barista_rush.agents.customers import DEFAULT_CUSTOMERS
from barista_rush.agents.ports import (
    AgentControl,
    ChoicePresenter,
    Collaborators,
    MetricsRecorder,
    SatisfactionComponent,
    SessionOwner,
    TranscriptSubscription,
    TransitionPresenter,
)
from barista_rush.agents.registry import create_backend, get_registered_backends, register_backend
from barista_rush.agents.scripted_agent import ScriptedAgentService

__all__ = [
    "AgentControl", "ChoicePresenter", "Collaborators", "MetricsRecorder",
    "SatisfactionComponent", "SessionOwner", "TranscriptSubscription", "TransitionPresenter",
    "DEFAULT_CUSTOMERS", "ScriptedAgentService",
    "create_backend", "register_backend", "get_registered_backends",
]
