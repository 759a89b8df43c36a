"""
Keyword classifier for captured customer complaints.

Maps free text to issue tags, an emotion level, an urgency level and
two flags (time frame mentioned, conversation ending). Classification
is a pure function of the text: deterministic, case-insensitive and
free of side effects, so the same utterance always yields the same
response options.
"""

import logging
import re
from typing import Optional

from barista_rush.config import settings
from barista_rush.schemas.classification_schema import (
    ClassificationResult,
    EmotionLevel,
    IssueTag,
    UrgencyLevel,
)

logger = logging.getLogger(__name__)

# Insertion order is detection order.
ISSUE_PATTERNS: dict[IssueTag, tuple[str, ...]] = {
    IssueTag.ORDER_DELAY: (
        "wait", "waiting", "long", "time", "slow", "delayed",
        "taking forever", "still waiting", "how long",
    ),
    IssueTag.WRONG_ORDER: (
        "wrong", "mistake", "not what i ordered", "incorrect",
        "not mine", "different", "mix up",
    ),
    IssueTag.TEMPERATURE: (
        "cold", "hot", "warm", "temperature", "lukewarm",
        "burning", "too hot", "too cold",
    ),
    IssueTag.MILK_TYPE: (
        "milk", "dairy", "soy", "almond", "oat", "lactose",
        "non-dairy", "milk alternative",
    ),
    IssueTag.STAFF_ATTITUDE: (
        "rude", "attitude", "unprofessional", "dismissive",
        "ignored", "staff", "employee",
    ),
    IssueTag.PRICING: (
        "price", "cost", "expensive", "overpriced", "charge",
        "money", "bill", "receipt",
    ),
    IssueTag.CLEANLINESS: (
        "dirty", "clean", "mess", "spill", "gross", "unsanitary",
        "filthy", "sticky",
    ),
    IssueTag.SIZE: (
        "size", "small", "large", "medium", "wrong size", "bigger", "smaller",
    ),
    IssueTag.MISSING_ITEM: (
        "missing", "forgot", "forgotten", "not included", "left out", "didn't get",
    ),
    IssueTag.CONNECTIVITY: (
        "wifi", "wi-fi", "internet", "connection", "network", "password",
    ),
    IssueTag.NOISE: (
        "noise", "loud", "music", "volume", "quiet", "sound",
    ),
    IssueTag.SEATING: (
        "seat", "table", "chair", "sitting", "spot", "place to sit",
    ),
    IssueTag.LOYALTY: (
        "reward", "points", "loyalty", "card", "account", "member",
    ),
    IssueTag.PAYMENT: (
        "pay", "payment", "card", "charge", "transaction", "billing", "refund",
    ),
    IssueTag.CONVERSATION_END: (
        "that's all", "thats all", "that's it", "thats it",
        "that'll be all", "thatll be all", "nothing else",
        "i'm good", "im good", "i'm done", "im done",
        "that's everything", "thats everything", "no more",
        "all good", "we're good", "were good", "that covers it", "finished",
        "for now", "that's all for now", "thats all for now",
        "enough for now", "done for now",
        "thank you", "thanks", "appreciate it", "satisfied",
        "all set", "good to go",
        "resolved", "fixed", "sorted", "handled", "taken care of",
    ),
}

HIGH_EMOTION_WORDS = (
    "terrible", "awful", "horrible", "worst", "hate", "furious",
    "outrageous", "ridiculous", "unacceptable", "disgusting",
)
MEDIUM_EMOTION_WORDS = (
    "frustrated", "upset", "annoyed", "disappointed", "unhappy",
    "dissatisfied", "irritated",
)
URGENT_WORDS = (
    "immediately", "right now", "urgent", "emergency", "asap",
    "quickly", "hurry", "need this now",
)
TIME_PRESSURE_PHRASES = (
    "late", "running late", "in a hurry", "meeting", "appointment", "flight",
)
TIME_FRAME_PHRASES = (
    "minutes", "hours", "ago", "waiting for", "been here", "since", "already",
)

_REPEATED_EXCLAMATION_RE = re.compile(r"!{2,}")
_SHOUTING_RE = re.compile(r"\b[A-Z]{3,}\b")


def _contains_any(lower: str, phrases: tuple[str, ...]) -> bool:
    return any(phrase in lower for phrase in phrases)


class ComplaintClassifier:
    """Classifies complaint text against fixed keyword tables."""

    def __init__(self, detect_shouting: Optional[bool] = None) -> None:
        if detect_shouting is None:
            detect_shouting = settings.classifier.detect_shouting
        self._detect_shouting = detect_shouting

    def classify(self, text: Optional[str]) -> ClassificationResult:
        raw = text or ""
        lower = raw.lower()
        issues = self.detect_issues(lower)

        result = ClassificationResult(
            issues=issues,
            emotion=self.emotion_level(raw),
            urgency=self.urgency_level(lower),
            mentions_time_frame=_contains_any(lower, TIME_FRAME_PHRASES),
            conversation_ending=IssueTag.CONVERSATION_END in issues,
            text=raw,
        )
        logger.debug(
            "Classified %r -> issues=%s emotion=%s urgency=%s ending=%s",
            raw,
            [tag.value for tag in result.issues],
            result.emotion.value,
            result.urgency.value,
            result.conversation_ending,
        )
        return result

    def detect_issues(self, lower: str) -> tuple[IssueTag, ...]:
        """Return every category with a phrase hit, in table order."""
        issues = [
            tag for tag, phrases in ISSUE_PATTERNS.items()
            if _contains_any(lower, phrases)
        ]
        if len(issues) > 1:
            issues.append(IssueTag.MULTIPLE)
        if not issues:
            issues.append(IssueTag.UNKNOWN)
        return tuple(issues)

    def emotion_level(self, text: str) -> EmotionLevel:
        lower = text.lower()
        if _contains_any(lower, HIGH_EMOTION_WORDS):
            return EmotionLevel.HIGH
        if _REPEATED_EXCLAMATION_RE.search(text):
            return EmotionLevel.HIGH
        if self._detect_shouting and _SHOUTING_RE.search(text):
            return EmotionLevel.HIGH
        if _contains_any(lower, MEDIUM_EMOTION_WORDS):
            return EmotionLevel.MEDIUM
        return EmotionLevel.LOW

    def urgency_level(self, lower: str) -> UrgencyLevel:
        if _contains_any(lower, URGENT_WORDS):
            return UrgencyLevel.HIGH
        if _contains_any(lower, TIME_PRESSURE_PHRASES):
            return UrgencyLevel.MEDIUM
        return UrgencyLevel.LOW

    def is_conversation_ending(self, text: Optional[str]) -> bool:
        """Check whether the customer signalled they are done."""
        if not text:
            return False
        return self.classify(text).conversation_ending


_default_classifier: Optional[ComplaintClassifier] = None


def classify(text: Optional[str]) -> ClassificationResult:
    """Classify with the process-wide default classifier."""
    global _default_classifier
    if _default_classifier is None:
        _default_classifier = ComplaintClassifier()
    return _default_classifier.classify(text)
