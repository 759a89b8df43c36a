"""
Builds the cooperative and dismissive replies for a classified complaint.

Both variants walk the same layered chain so a reply is always found:

    1. several issues at once       -> multi-issue acknowledgment
    2. high emotion or urgency      -> empathetic / urgent acknowledgment
    3. first concrete issue tag     -> category template
    4. single-pass keyword match    -> short legacy reply
    5. nothing matched              -> generic acknowledgment

Only the cooperative variant is personalized with the customer's name.
"""

import logging
from typing import Optional

from barista_rush.prompts import response_templates as templates
from barista_rush.prompts.agent_prompts import CLOSING_ALTERNATIVE
from barista_rush.schemas.classification_schema import (
    ClassificationResult,
    EmotionLevel,
    IssueTag,
    ResponsePair,
    UrgencyLevel,
)

logger = logging.getLogger(__name__)


def _name_suffix(speaker_name: Optional[str]) -> str:
    if speaker_name and speaker_name.strip():
        return f", {speaker_name.strip()}"
    return ""


def legacy_match(text: str) -> Optional[tuple[str, str]]:
    """Single-pass keyword lookup against the raw text, or None."""
    lower = (text or "").lower()
    for keywords, good, bad in templates.LEGACY_RESPONSES:
        if any(keyword in lower for keyword in keywords):
            return good, bad
    return None


class ResponseGenerator:
    """Maps a classification to a (good, bad) response pair."""

    def generate(
        self,
        classification: ClassificationResult,
        speaker_name: Optional[str] = None,
    ) -> ResponsePair:
        suffix = _name_suffix(speaker_name)
        good, bad, source = self._select(classification, suffix)
        logger.debug("Generated response pair from %s", source)
        return ResponsePair.from_texts(good, bad)

    def closing(
        self,
        classification: ClassificationResult,
        speaker_name: Optional[str] = None,
    ) -> ResponsePair:
        """Return the acknowledgment offered when the customer wraps up.

        Emotion and urgency are ignored here: a customer saying goodbye
        gets the closing reply even when they sign off loudly.
        """
        suffix = _name_suffix(speaker_name)
        good = templates.GOOD_TEMPLATES[IssueTag.CONVERSATION_END].format(suffix=suffix)
        logger.debug(
            "Generated closing pair (ending=%s)", classification.conversation_ending
        )
        return ResponsePair.from_texts(good, CLOSING_ALTERNATIVE)

    def _select(
        self, classification: ClassificationResult, suffix: str
    ) -> tuple[str, str, str]:
        if classification.has_multiple_issues:
            return (
                templates.GOOD_MULTIPLE.format(suffix=suffix),
                templates.BAD_MULTIPLE,
                "multiple",
            )

        if classification.emotion == EmotionLevel.HIGH:
            return (
                templates.GOOD_HIGH_EMOTION.format(suffix=suffix),
                templates.BAD_HIGH_EMOTION,
                "emotion",
            )
        if classification.urgency == UrgencyLevel.HIGH:
            return (
                templates.GOOD_HIGH_URGENCY.format(suffix=suffix),
                templates.BAD_HIGH_URGENCY,
                "urgency",
            )

        primary = classification.primary_issues
        if primary:
            tag = primary[0]
            return (
                self._good_for(tag, classification).format(suffix=suffix),
                self._bad_for(tag, classification),
                tag.value,
            )

        legacy = legacy_match(classification.text)
        if legacy is not None:
            return legacy[0], legacy[1], "legacy"

        return (
            templates.GOOD_GENERIC.format(suffix=suffix),
            templates.BAD_GENERIC,
            "generic",
        )

    @staticmethod
    def _good_for(tag: IssueTag, classification: ClassificationResult) -> str:
        if tag == IssueTag.ORDER_DELAY and classification.mentions_time_frame:
            return templates.GOOD_ORDER_DELAY_LONG_WAIT
        if tag == IssueTag.TEMPERATURE and "cold" in classification.text.lower():
            return templates.GOOD_TEMPERATURE_COLD
        return templates.GOOD_TEMPLATES.get(tag, templates.GOOD_GENERIC)

    @staticmethod
    def _bad_for(tag: IssueTag, classification: ClassificationResult) -> str:
        if tag == IssueTag.ORDER_DELAY and classification.mentions_time_frame:
            return templates.BAD_ORDER_DELAY_LONG_WAIT
        return templates.BAD_TEMPLATES.get(tag, templates.BAD_GENERIC)
