"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""

import pytest


class TestSchemaImports:
    def test_import_classification_schema(self):
        from barista_rush.schemas.classification_schema import (
            ClassificationResult, EmotionLevel, IssueTag, Polarity, ResponsePair,
        )
        assert IssueTag.UNKNOWN == "unknown"
        assert EmotionLevel.LOW == "low"
        assert Polarity.GOOD != Polarity.BAD
        assert ClassificationResult().issues == (IssueTag.UNKNOWN,)
        assert ResponsePair is not None

    def test_import_session_schema(self):
        from barista_rush.schemas.session_schema import CustomerProfile, Session
        from barista_rush.conversation.state_machine import SessionStateMachine

        session = Session(customer_index=2, machine=SessionStateMachine())
        assert session.customer_name == "Customer"
        assert session.instance_id == "missing-2"
        assert session.agent_available
        assert CustomerProfile(instance_id="c", name="n").closing_line

    def test_import_metrics_schema(self):
        from barista_rush.schemas.metrics_schema import CustomerInteraction, MetricsReport
        assert MetricsReport().overall_grade == "F"
        assert CustomerInteraction(start_time=0.0, satisfaction_start=50).duration_seconds == 0.0


class TestConversationImports:
    def test_import_conversation_package(self):
        from barista_rush.conversation import (
            ComplaintClassifier, RateLimiterGate, ResponseGenerator,
            SessionState, SessionStateMachine, TranscriptBuffer, classify, shared_gate,
        )
        assert SessionStateMachine().current_state == SessionState.IDLE
        assert callable(classify)

    def test_import_prompts(self):
        from barista_rush.prompts.agent_prompts import (
            CONTINUATION_PROMPT, FALLBACK_COMPLAINT, OPENING_PROMPT, build_choice_prompt,
        )
        from barista_rush.prompts.response_templates import BAD_TEMPLATES, GOOD_TEMPLATES
        from barista_rush.schemas.classification_schema import IssueTag
        assert OPENING_PROMPT != CONTINUATION_PROMPT
        assert FALLBACK_COMPLAINT
        assert IssueTag.TEMPERATURE in GOOD_TEMPLATES and IssueTag.TEMPERATURE in BAD_TEMPLATES
        assert build_choice_prompt("", "Sam") == "Sam has made their complaint. How do you respond?"

    def test_choice_prompt_prefers_captured_text(self):
        from barista_rush.prompts.agent_prompts import build_choice_prompt
        assert build_choice_prompt("My latte is cold.", "Sam") == "My latte is cold."


class TestSessionImports:
    def test_import_session_package(self):
        from barista_rush.session import SessionOrchestrator, TransitionCoordinator
        assert SessionOrchestrator is not None
        assert TransitionCoordinator is not None

    def test_import_timing(self):
        from barista_rush.timing import (
            CancellationToken, FakeClock, RealClock, SessionCancelled, pause, wait_until,
        )
        assert FakeClock().now() == 0.0
        assert not CancellationToken().cancelled
        assert issubclass(SessionCancelled, Exception)


class TestEvalImports:
    def test_import_eval_package(self):
        from barista_rush.evaluation import (
            InMemoryMetricsRecorder, SatisfactionGauge, format_report, generate_report,
        )
        assert generate_report([]).total_customers_served == 0


class TestAgentRegistry:
    def test_registry_has_scripted_backend(self):
        from barista_rush.agents.registry import get_registered_backends
        assert "scripted" in get_registered_backends()

    def test_create_backend_by_name(self):
        from barista_rush.agents.registry import create_backend
        from barista_rush.agents.scripted_agent import ScriptedAgentService
        from barista_rush.timing import FakeClock

        agent = create_backend("scripted", clock=FakeClock())
        assert isinstance(agent, ScriptedAgentService)

    def test_create_backend_with_kwargs(self):
        from barista_rush.agents.registry import create_backend
        from barista_rush.timing import FakeClock

        agent = create_backend("scripted", clock=FakeClock(), speech_duration=4.0)
        assert agent.speech_duration == 4.0

    def test_create_unknown_backend_raises(self):
        from barista_rush.agents.registry import create_backend
        with pytest.raises(KeyError, match="not registered"):
            create_backend("nonexistent_backend")

    def test_default_roster(self):
        from barista_rush.agents import DEFAULT_CUSTOMERS
        assert len(DEFAULT_CUSTOMERS) == 5
        assert len({c.instance_id for c in DEFAULT_CUSTOMERS}) == 5


class TestConfigImport:
    def test_import_config(self):
        from barista_rush.config import settings
        assert settings.app_name is not None
        assert settings.timing.api_call_delay >= 0
        assert settings.session.max_complaint_exchanges >= 1


class TestConsoleDemo:
    def test_console_presenter_auto_good(self):
        from console_demo import ConsoleChoicePresenter

        picks = []
        presenter = ConsoleChoicePresenter(auto="good")
        presenter.present_choice("My latte is cold.", "Sorry!", "Not my problem.", picks.append)
        assert picks == [True]

    def test_console_presenter_auto_bad(self):
        from console_demo import ConsoleChoicePresenter

        picks = []
        presenter = ConsoleChoicePresenter(auto="bad")
        presenter.present_choice("My latte is cold.", "Sorry!", "Not my problem.", picks.append)
        assert picks == [False]

    def test_console_owner_tally(self):
        from console_demo import ConsoleOwner

        owner = ConsoleOwner(total=2)
        owner.on_customer_served()
        owner.on_all_customers_complete()
        assert owner.served == 1
        assert owner.complete

    @pytest.mark.asyncio
    async def test_console_presenter_reads_until_valid(self, monkeypatch):
        import console_demo
        from tests.conftest import yield_until

        replies = iter(["maybe", "1"])

        async def fake_read_line(prompt):
            return next(replies)

        monkeypatch.setattr(console_demo, "read_line", fake_read_line)
        picks = []
        presenter = console_demo.ConsoleChoicePresenter()
        presenter.present_choice("My latte is cold.", "Sorry!", "Not my problem.", picks.append)
        assert await yield_until(lambda: picks)
        assert len(picks) == 1

    @pytest.mark.asyncio
    async def test_console_presenter_cancel_drops_prompt(self, monkeypatch):
        import asyncio
        import console_demo

        answered = asyncio.Event()

        async def fake_read_line(prompt):
            await answered.wait()
            return "1"

        monkeypatch.setattr(console_demo, "read_line", fake_read_line)
        picks = []
        presenter = console_demo.ConsoleChoicePresenter()
        presenter.present_choice("My latte is cold.", "Sorry!", "Not my problem.", picks.append)
        await asyncio.sleep(0)
        presenter.cancel()
        answered.set()
        for _ in range(5):
            await asyncio.sleep(0)
        assert picks == []

    @pytest.mark.asyncio
    async def test_read_line_uses_input(self, monkeypatch):
        import console_demo

        monkeypatch.setattr("builtins.input", lambda prompt: " 2 ")
        assert await console_demo.read_line("> ") == " 2 "

    @pytest.mark.asyncio
    async def test_read_line_propagates_eof(self, monkeypatch):
        import console_demo

        def closed_stdin(prompt):
            raise EOFError

        monkeypatch.setattr("builtins.input", closed_stdin)
        with pytest.raises(EOFError):
            await console_demo.read_line("> ")
