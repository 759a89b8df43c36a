"""
Fixed text exchanged with the customer agent and the operator.

The opening and continuation prompts are sent to the agent service;
the fallback complaint stands in for a capture that came back empty.
"""

from typing import Optional

OPENING_PROMPT = (
    "You're a customer at a coffee shop. "
    "Please tell me about your problem or complaint."
)

CONTINUATION_PROMPT = "What's your next complaint or issue?"

FALLBACK_COMPLAINT = "Customer has made a complaint about the service"

CLOSING_ALTERNATIVE = "Thank you for coming in today."

DEFAULT_CUSTOMER_NAME = "Customer"


def build_choice_prompt(captured_text: str, customer_name: Optional[str]) -> str:
    """Build the text shown above the operator's two options.

    Uses the captured complaint verbatim; falls back to a generic line
    naming the customer when nothing usable was captured.
    """
    if captured_text and captured_text.strip():
        return captured_text
    name = customer_name or DEFAULT_CUSTOMER_NAME
    return f"{name} has made their complaint. How do you respond?"
