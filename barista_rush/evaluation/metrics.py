"""
Per-customer interaction metrics and the end-of-rush report card.

The recorder implements the engine's metrics port: it opens an
interaction when a customer starts complaining, counts operator
choices, and closes the interaction with the satisfaction delta when
the customer leaves. ``generate_report`` turns the closed interactions
into averages, a 0-100 score, a letter grade and short insights.
"""

import logging
from typing import Callable, Optional

from barista_rush.config import settings
from barista_rush.schemas.metrics_schema import CustomerInteraction, MetricsReport
from barista_rush.timing import Clock

logger = logging.getLogger(__name__)

GRADE_THRESHOLDS: list[tuple[float, str]] = [
    (90.0, "A"),
    (80.0, "B"),
    (70.0, "C"),
    (60.0, "D"),
]

GRADE_INSIGHTS = {
    "A": "Outstanding customer service performance!",
    "B": "Strong customer service skills demonstrated.",
    "C": "Satisfactory performance with growth potential.",
    "D": "Basic customer service skills need development.",
    "F": "Significant improvement needed in customer service approach.",
}


class InMemoryMetricsRecorder:
    """Collects CustomerInteraction records for one rush."""

    def __init__(
        self,
        clock: Clock,
        satisfaction: Optional[Callable[[], int]] = None,
        success_threshold: Optional[int] = None,
    ) -> None:
        self._clock = clock
        self._satisfaction = satisfaction
        self._threshold = (
            settings.satisfaction.success_threshold
            if success_threshold is None else success_threshold
        )
        self._current: Optional[CustomerInteraction] = None
        self.interactions: list[CustomerInteraction] = []

    @property
    def is_tracking(self) -> bool:
        return self._current is not None

    def _read_satisfaction(self, default: int) -> int:
        return self._satisfaction() if self._satisfaction else default

    def start_interaction(self, complaint_type: str = "general") -> None:
        if self._current is not None:
            logger.warning("Already tracking an interaction, ending previous one")
            self.end_interaction()

        self._current = CustomerInteraction(
            complaint_type=complaint_type,
            start_time=self._clock.now(),
            satisfaction_start=self._read_satisfaction(settings.satisfaction.start),
        )
        logger.info("Started tracking interaction: %s", complaint_type)

    def record_choice(self) -> None:
        if self._current is not None:
            self._current.choices_made += 1

    def end_interaction(self) -> None:
        current = self._current
        if current is None:
            return
        current.end_time = self._clock.now()
        current.satisfaction_end = self._read_satisfaction(current.satisfaction_start)
        current.was_successful = (
            current.satisfaction_end >= current.satisfaction_start
            or current.satisfaction_end >= self._threshold
        )
        self.interactions.append(current)
        self._current = None
        logger.info(
            "Ended interaction. Duration: %.1fs, satisfaction: %d -> %d",
            current.duration_seconds, current.satisfaction_start, current.satisfaction_end,
        )

    def reset(self) -> None:
        self.interactions.clear()
        self._current = None


def grade_for(score: float) -> str:
    for threshold, grade in GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return "F"


def generate_report(interactions: list[CustomerInteraction]) -> MetricsReport:
    """Aggregate closed interactions into a report card."""
    if not interactions:
        return MetricsReport(insights=["No customer interactions completed."])

    n = len(interactions)
    successes = sum(1 for i in interactions if i.was_successful)
    avg_time = sum(i.duration_seconds for i in interactions) / n
    avg_change = sum(i.satisfaction_change for i in interactions) / n
    success_rate = successes / n * 100.0

    # 40% satisfaction trend, 60% success rate
    satisfaction_score = min(1.0, max(0.0, (avg_change + 50.0) / 100.0)) * 40.0
    score = satisfaction_score + success_rate * 0.6

    report = MetricsReport(
        total_customers_served=n,
        average_interaction_time=avg_time,
        average_satisfaction_change=avg_change,
        total_choices_made=sum(i.choices_made for i in interactions),
        successful_interactions=successes,
        success_rate=success_rate,
        overall_score=score,
        overall_grade=grade_for(score),
    )
    report.insights = _insights(report)
    return report


def _insights(report: MetricsReport) -> list[str]:
    insights: list[str] = []

    if report.success_rate >= 80.0:
        insights.append("Excellent customer satisfaction management!")
    elif report.success_rate >= 60.0:
        insights.append("Good customer service, with room for improvement.")
    else:
        insights.append("Focus on better understanding customer needs.")

    if report.average_interaction_time < 30.0:
        insights.append("Very efficient interaction times.")
    elif report.average_interaction_time > 60.0:
        insights.append("Consider being more decisive in responses.")

    if report.average_satisfaction_change > 10.0:
        insights.append("Great at improving customer satisfaction!")
    elif report.average_satisfaction_change < -10.0:
        insights.append("Work on maintaining customer satisfaction levels.")

    insights.append(GRADE_INSIGHTS[report.overall_grade])
    return insights


def format_report(report: MetricsReport) -> str:
    """Format a report card into a human-readable block."""
    lines = [
        "=" * 60,
        "RUSH REPORT CARD",
        "=" * 60,
        "",
        f"  Grade:                  {report.overall_grade}  ({report.overall_score:.0f}/100)",
        f"  Customers served:       {report.total_customers_served}",
        f"  Successful:             {report.successful_interactions}  ({report.success_rate:.0f}%)",
        f"  Choices made:           {report.total_choices_made}",
        f"  Avg interaction time:   {report.average_interaction_time:.1f}s",
        f"  Avg satisfaction delta: {report.average_satisfaction_change:+.1f}",
        "",
        "INSIGHTS",
    ]
    lines.extend(f"  - {insight}" for insight in report.insights)
    lines.append("=" * 60)
    return "\n".join(lines)
