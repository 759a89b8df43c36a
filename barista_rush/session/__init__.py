from barista_rush.session.orchestrator import SessionOrchestrator
from barista_rush.session.transition import TransitionCoordinator

__all__ = ["SessionOrchestrator", "TransitionCoordinator"]
