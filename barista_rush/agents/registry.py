"""
Agent backend registry.

Agent services are registered by name so entry points can pick one from
the command line without importing every backend up front.
"""

import logging
from typing import Any, Callable

logger = logging.getLogger(__name__)

_BACKEND_REGISTRY: dict[str, Callable[..., Any]] = {}


def register_backend(name: str, factory: Callable[..., Any]) -> None:
    """Register an agent service factory by name."""
    _BACKEND_REGISTRY[name] = factory
    logger.debug("Agent backend registered: %s", name)


def create_backend(name: str, **kwargs: Any) -> Any:
    """Create an agent service by registered name.

    Raises:
        KeyError: If the backend name is not registered.
    """
    if name not in _BACKEND_REGISTRY:
        registered = list(_BACKEND_REGISTRY.keys())
        raise KeyError(f"Agent backend '{name}' not registered. Available: {registered}")
    return _BACKEND_REGISTRY[name](**kwargs)


def get_registered_backends() -> list[str]:
    """Return names of all registered backends."""
    return list(_BACKEND_REGISTRY.keys())


def _auto_register() -> None:
    """Register the built-in backends. Called once at import time."""
    from barista_rush.agents.scripted_agent import ScriptedAgentService

    register_backend("scripted", ScriptedAgentService)


_auto_register()
