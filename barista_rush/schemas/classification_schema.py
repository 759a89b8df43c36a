"""Complaint classification and generated response models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class IssueTag(str, Enum):
    """Closed vocabulary of complaint categories, in detection order."""
    ORDER_DELAY = "order_delay"
    WRONG_ORDER = "wrong_order"
    TEMPERATURE = "temperature"
    MILK_TYPE = "milk_type"
    STAFF_ATTITUDE = "staff_attitude"
    PRICING = "pricing"
    CLEANLINESS = "cleanliness"
    SIZE = "size"
    MISSING_ITEM = "missing_item"
    CONNECTIVITY = "connectivity"
    NOISE = "noise"
    SEATING = "seating"
    LOYALTY = "loyalty"
    PAYMENT = "payment"
    CONVERSATION_END = "conversation_end"
    MULTIPLE = "multiple"
    UNKNOWN = "unknown"


SYNTHETIC_TAGS = frozenset({IssueTag.MULTIPLE, IssueTag.UNKNOWN})


class EmotionLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class UrgencyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Polarity(str, Enum):
    GOOD = "good"
    BAD = "bad"


class ClassificationResult(BaseModel):
    """Immutable outcome of classifying one captured utterance."""

    model_config = ConfigDict(frozen=True)

    issues: tuple[IssueTag, ...] = (IssueTag.UNKNOWN,)
    emotion: EmotionLevel = EmotionLevel.LOW
    urgency: UrgencyLevel = UrgencyLevel.LOW
    mentions_time_frame: bool = False
    conversation_ending: bool = False
    text: str = ""

    @property
    def primary_issues(self) -> list[IssueTag]:
        """Detected categories without the synthetic multiple/unknown tags."""
        return [tag for tag in self.issues if tag not in SYNTHETIC_TAGS]

    @property
    def has_multiple_issues(self) -> bool:
        return IssueTag.MULTIPLE in self.issues


class ResponseOption(BaseModel):
    """One reply the operator can choose."""

    model_config = ConfigDict(frozen=True)

    text: str = Field(min_length=1)
    polarity: Polarity


class ResponsePair(BaseModel):
    """The cooperative and dismissive replies generated for one complaint."""

    model_config = ConfigDict(frozen=True)

    good: ResponseOption
    bad: ResponseOption

    @model_validator(mode="after")
    def check_polarities(self) -> "ResponsePair":
        if self.good.polarity != Polarity.GOOD or self.bad.polarity != Polarity.BAD:
            raise ValueError("ResponsePair needs one good and one bad option")
        return self

    @classmethod
    def from_texts(cls, good: str, bad: str) -> "ResponsePair":
        return cls(
            good=ResponseOption(text=good, polarity=Polarity.GOOD),
            bad=ResponseOption(text=bad, polarity=Polarity.BAD),
        )

    def text_for(self, selected_is_good: bool) -> str:
        return self.good.text if selected_is_good else self.bad.text
