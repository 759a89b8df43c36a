"""Customer roster entries and per-customer session state."""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from pydantic import BaseModel, Field

from barista_rush.schemas.classification_schema import ClassificationResult, ResponsePair
from barista_rush.utils import infer_complaint_type

if TYPE_CHECKING:
    from barista_rush.agents.ports import TranscriptSubscription
    from barista_rush.conversation.state_machine import SessionState, SessionStateMachine


class CustomerProfile(BaseModel):
    """One simulated customer the agent service can play."""
    instance_id: str
    name: str
    lines: list[str] = Field(default_factory=list)
    closing_line: str = "Thanks, that's all for now."

    @property
    def complaint_type(self) -> str:
        return infer_complaint_type(self.name)


@dataclass
class Session:
    """
    State of the one customer currently being served.

    Created when a customer is activated and dropped when the
    orchestrator hands off to the next customer or completes. The
    lifecycle machine is shared across sessions of one run; the session
    only borrows it so transition logic never reaches for globals.
    """
    customer_index: int
    machine: "SessionStateMachine"
    profile: Optional[CustomerProfile] = None
    captured_text: str = ""
    exchange_count: int = 0
    interaction_open: bool = False
    closing: bool = False
    classification: Optional[ClassificationResult] = None
    responses: Optional[ResponsePair] = None
    selected_good: Optional[bool] = None
    agent_available: bool = True
    released: bool = False
    subscription: Optional["TranscriptSubscription"] = field(default=None, repr=False)

    @property
    def state(self) -> "SessionState":
        return self.machine.current_state

    @property
    def customer_name(self) -> str:
        return self.profile.name if self.profile else "Customer"

    @property
    def instance_id(self) -> str:
        return self.profile.instance_id if self.profile else f"missing-{self.customer_index}"
