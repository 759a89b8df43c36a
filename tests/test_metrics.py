"""Tests for the satisfaction gauge, interaction metrics and report card."""

import pytest

from barista_rush.agents.ports import Collaborators
from barista_rush.config import AppConfig, SessionConfig
from barista_rush.conversation.rate_limiter import RateLimiterGate
from barista_rush.evaluation.metrics import (
    InMemoryMetricsRecorder,
    format_report,
    generate_report,
    grade_for,
)
from barista_rush.evaluation.satisfaction import SatisfactionGauge
from barista_rush.schemas.metrics_schema import CustomerInteraction
from barista_rush.session.orchestrator import SessionOrchestrator
from tests.conftest import RecordingPresenter, SpyAgentService, make_customer


def interaction(duration=10.0, start=50, end=70, successful=True, choices=1):
    return CustomerInteraction(
        start_time=0.0,
        end_time=duration,
        satisfaction_start=start,
        satisfaction_end=end,
        choices_made=choices,
        was_successful=successful,
    )


class TestSatisfactionGauge:
    def test_good_choice_raises(self):
        gauge = SatisfactionGauge(start=50, step=10)
        gauge.apply_choice(True)
        assert gauge.value == 60

    def test_bad_choice_lowers(self):
        gauge = SatisfactionGauge(start=50, step=10)
        gauge.apply_choice(False)
        assert gauge.value == 40

    def test_clamped_at_bounds(self):
        gauge = SatisfactionGauge(start=95, step=10)
        gauge.apply_choice(True)
        assert gauge.value == 100
        for _ in range(20):
            gauge.apply_choice(False)
        assert gauge.value == 0

    def test_reset(self):
        gauge = SatisfactionGauge(start=50, step=10)
        gauge.apply_choice(False)
        gauge.reset()
        assert gauge.value == 50


class TestInMemoryMetricsRecorder:
    def setup_method(self):
        self.gauge = SatisfactionGauge(start=50, step=10)

    def _recorder(self, clock, threshold=70):
        return InMemoryMetricsRecorder(
            clock, satisfaction=lambda: self.gauge.value, success_threshold=threshold
        )

    def test_good_interaction(self, clock):
        recorder = self._recorder(clock)
        recorder.start_interaction("drink_quality")
        assert recorder.is_tracking
        clock.advance(12.0)
        recorder.record_choice()
        self.gauge.apply_choice(True)
        recorder.end_interaction()

        record = recorder.interactions[0]
        assert record.complaint_type == "drink_quality"
        assert record.duration_seconds == pytest.approx(12.0)
        assert record.satisfaction_change == 10
        assert record.choices_made == 1
        assert record.was_successful
        assert not recorder.is_tracking

    def test_bad_interaction_below_threshold(self, clock):
        recorder = self._recorder(clock)
        recorder.start_interaction()
        self.gauge.apply_choice(False)
        recorder.end_interaction()
        assert not recorder.interactions[0].was_successful

    def test_drop_above_threshold_still_succeeds(self, clock):
        self.gauge = SatisfactionGauge(start=80, step=10)
        recorder = self._recorder(clock)
        recorder.start_interaction()
        self.gauge.apply_choice(False)
        recorder.end_interaction()
        assert recorder.interactions[0].was_successful

    def test_start_while_tracking_closes_previous(self, clock):
        recorder = self._recorder(clock)
        recorder.start_interaction("order_delay")
        recorder.start_interaction("wait_time")
        assert [i.complaint_type for i in recorder.interactions] == ["order_delay"]
        assert recorder.is_tracking

    def test_end_without_start_is_ignored(self, clock):
        recorder = self._recorder(clock)
        recorder.end_interaction()
        recorder.record_choice()
        assert recorder.interactions == []

    def test_without_satisfaction_source(self, clock):
        recorder = InMemoryMetricsRecorder(clock)
        recorder.start_interaction()
        recorder.end_interaction()
        record = recorder.interactions[0]
        assert record.satisfaction_change == 0
        assert record.was_successful

    def test_reset(self, clock):
        recorder = self._recorder(clock)
        recorder.start_interaction()
        recorder.end_interaction()
        recorder.start_interaction()
        recorder.reset()
        assert recorder.interactions == []
        assert not recorder.is_tracking


class TestGenerateReport:
    def test_empty_report(self):
        report = generate_report([])
        assert report.total_customers_served == 0
        assert report.overall_grade == "F"
        assert report.insights == ["No customer interactions completed."]

    def test_strong_rush(self):
        report = generate_report([interaction(), interaction(choices=2)])
        assert report.total_customers_served == 2
        assert report.total_choices_made == 3
        assert report.success_rate == pytest.approx(100.0)
        assert report.average_satisfaction_change == pytest.approx(20.0)
        assert report.overall_score == pytest.approx(88.0)
        assert report.overall_grade == "B"
        assert report.insights == [
            "Excellent customer satisfaction management!",
            "Very efficient interaction times.",
            "Great at improving customer satisfaction!",
            "Strong customer service skills demonstrated.",
        ]

    def test_perfect_rush(self):
        report = generate_report([interaction(start=50, end=100)])
        assert report.overall_score == pytest.approx(100.0)
        assert report.overall_grade == "A"

    def test_poor_rush(self):
        records = [interaction(duration=90.0, start=50, end=30, successful=False)] * 3
        report = generate_report(records)
        assert report.success_rate == 0.0
        assert report.overall_score == pytest.approx(12.0)
        assert report.overall_grade == "F"
        assert report.insights == [
            "Focus on better understanding customer needs.",
            "Consider being more decisive in responses.",
            "Work on maintaining customer satisfaction levels.",
            "Significant improvement needed in customer service approach.",
        ]

    def test_mixed_rush(self):
        records = [
            interaction(duration=45.0, start=50, end=60),
            interaction(duration=45.0, start=50, end=60),
            interaction(duration=45.0, start=50, end=40, successful=False),
        ]
        report = generate_report(records)
        assert report.successful_interactions == 2
        assert report.success_rate == pytest.approx(200.0 / 3)
        assert report.insights[0] == "Good customer service, with room for improvement."
        assert len(report.insights) == 2

    @pytest.mark.parametrize("score,grade", [
        (100.0, "A"), (90.0, "A"), (89.9, "B"), (80.0, "B"),
        (70.0, "C"), (60.0, "D"), (59.9, "F"), (0.0, "F"),
    ])
    def test_grade_thresholds(self, score, grade):
        assert grade_for(score) == grade

    def test_format_report(self):
        text = format_report(generate_report([interaction()]))
        assert "RUSH REPORT CARD" in text
        assert "Grade:" in text
        assert "Excellent customer satisfaction management!" in text


class TestRushMetrics:
    @pytest.mark.asyncio
    async def test_rush_feeds_gauge_and_recorder(self, clock):
        gauge = SatisfactionGauge(start=50, step=10)
        recorder = InMemoryMetricsRecorder(clock, satisfaction=lambda: gauge.value,
                                           success_threshold=70)
        collaborators = Collaborators(
            presenter=RecordingPresenter(policy=True),
            satisfaction=gauge,
            metrics=recorder,
        )
        roster = [make_customer(1, "Cold Brew Colin"), make_customer(2, "Slow Line Sam")]
        orch = SessionOrchestrator(
            SpyAgentService(clock),
            roster,
            collaborators,
            clock=clock,
            gate=RateLimiterGate(clock, min_interval=2.0),
            config=AppConfig(session=SessionConfig(max_complaint_exchanges=3,
                                                   min_utterance_length=10)),
        )

        await orch.run()

        assert [i.complaint_type for i in recorder.interactions] == [
            "drink_quality", "wait_time",
        ]
        assert all(i.choices_made == 2 for i in recorder.interactions)
        assert all(i.satisfaction_change == 20 for i in recorder.interactions)
        assert gauge.value == 90
        report = generate_report(recorder.interactions)
        assert report.total_customers_served == 2
        assert report.success_rate == pytest.approx(100.0)
