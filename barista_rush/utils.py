"""Shared utilities used across the rush session engine."""

import re

_WHITESPACE_RE = re.compile(r"\s+")

# Checked in order; the first fragment found in the name wins.
_COMPLAINT_TYPE_HINTS: list[tuple[tuple[str, ...], str]] = [
    (("order", "mobile"), "order_delay"),
    (("wait", "slow"), "wait_time"),
    (("wrong", "mistake"), "order_mistake"),
    (("cold", "temperature"), "drink_quality"),
    (("milk", "allergy"), "dietary_request"),
]


def clean_transcript(value: str) -> str:
    """Normalize raw speech-to-text output before it is captured.

    Collapses doubled single quotes that some transcribers emit for
    apostrophes and squeezes runs of whitespace.

    Examples:
        >>> clean_transcript("  My drink''s   cold ")
        "My drink's cold"
        >>> clean_transcript("")
        ''
    """
    if not value:
        return ""
    cleaned = value.replace("''", "'")
    return _WHITESPACE_RE.sub(" ", cleaned).strip()


def infer_complaint_type(customer_name: str) -> str:
    """Derive the metrics complaint type from a customer's display name.

    Examples:
        >>> infer_complaint_type("Mobile Order Mia")
        'order_delay'
        >>> infer_complaint_type("Sam")
        'general'
    """
    lower = (customer_name or "").lower()
    for fragments, complaint_type in _COMPLAINT_TYPE_HINTS:
        if any(fragment in lower for fragment in fragments):
            return complaint_type
    return "general"
