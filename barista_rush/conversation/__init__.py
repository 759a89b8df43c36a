from barista_rush.conversation.classifier import ComplaintClassifier, classify
from barista_rush.conversation.rate_limiter import RateLimiterGate, shared_gate
from barista_rush.conversation.response_generator import ResponseGenerator
from barista_rush.conversation.state_machine import (
    InvalidTransitionError,
    SessionState,
    SessionStateMachine,
    SessionTrigger,
)
from barista_rush.conversation.transcript_buffer import TranscriptBuffer

__all__ = [
    "SessionStateMachine",
    "SessionState",
    "SessionTrigger",
    "InvalidTransitionError",
    "ComplaintClassifier",
    "classify",
    "ResponseGenerator",
    "RateLimiterGate",
    "shared_gate",
    "TranscriptBuffer",
]
