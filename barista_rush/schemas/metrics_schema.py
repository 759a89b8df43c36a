"""Interaction records and end-of-rush report models."""

from typing import Optional

from pydantic import BaseModel, Field


class CustomerInteraction(BaseModel):
    """One customer's metrics, from interaction start to end."""
    complaint_type: str = "general"
    start_time: float
    end_time: Optional[float] = None
    satisfaction_start: int
    satisfaction_end: Optional[int] = None
    choices_made: int = 0
    was_successful: bool = False

    @property
    def duration_seconds(self) -> float:
        if self.end_time is None:
            return 0.0
        return self.end_time - self.start_time

    @property
    def satisfaction_change(self) -> int:
        if self.satisfaction_end is None:
            return 0
        return self.satisfaction_end - self.satisfaction_start


class MetricsReport(BaseModel):
    """Aggregated report card for a whole rush."""
    total_customers_served: int = 0
    average_interaction_time: float = 0.0
    average_satisfaction_change: float = 0.0
    total_choices_made: int = 0
    successful_interactions: int = 0
    success_rate: float = 0.0
    overall_score: float = 0.0
    overall_grade: str = "F"
    insights: list[str] = Field(default_factory=list)
