"""
Unit tests for backend/services/intent_parser.py
"""

import pytest

from backend.ai.provider_errors import ProviderError, ProviderErrorCode
from backend.services.intent_parser import IntentParser, IntentParseResult, validate_intent_text
from backend.services.intent_schemas import (
    LastSessionSummaryIntent,
    PlanIntent,
    parse_ask_intent,
    parse_plan_intent,
)
from backend.services.prompts import ASK_INTENT_SYSTEM_PROMPT, PLAN_INTENT_SYSTEM_PROMPT
from tests.fakes import FakeCompletionProvider


@pytest.mark.unit
class TestValidateIntentText:
    def test_valid_intent(self):
        result = validate_intent_text('{"type": "last_session_summary"}', parse_ask_intent)

        assert result.success is True
        assert isinstance(result.intent, LastSessionSummaryIntent)
        assert result.raw_text == '{"type": "last_session_summary"}'

    def test_fenced_intent(self):
        raw = '```json\n{"type": "workout_plan", "focus": "upper", "goal": "strength"}\n```'

        result = validate_intent_text(raw, parse_plan_intent)

        assert isinstance(result.intent, PlanIntent)
        assert result.intent.focus == "upper"

    def test_no_json(self):
        result = validate_intent_text("not sure what you mean", parse_ask_intent)

        assert result.success is False
        assert result.error == "Failed to extract JSON: no_json_found"
        assert result.raw_text == "not sure what you mean"

    def test_schema_failure(self):
        result = validate_intent_text('{"type": "tell_joke"}', parse_ask_intent)

        assert result.success is False
        assert result.error.startswith("Schema validation failed: ")

    def test_to_dict(self):
        assert IntentParseResult(success=False, error="nope").to_dict() == {"success": False, "error": "nope"}


@pytest.mark.unit
class TestIntentParser:
    def test_parse_ask(self):
        provider = FakeCompletionProvider(responses=['{"type": "last_session_summary"}'])

        result = IntentParser(provider).parse_ask("what did I do last time?")

        assert result.success is True
        assert provider.calls == [(ASK_INTENT_SYSTEM_PROMPT, "what did I do last time?")]

    def test_parse_plan(self):
        provider = FakeCompletionProvider(responses=['{"type": "workout_plan", "goal": "hypertrophy"}'])

        result = IntentParser(provider).parse_plan("give me a workout")

        assert result.success is True
        assert result.intent.goal == "hypertrophy"
        assert provider.calls[0][0] == PLAN_INTENT_SYSTEM_PROMPT

    def test_ask_output_rejected_by_plan_schema(self):
        provider = FakeCompletionProvider(responses=['{"type": "last_session_summary"}'])

        result = IntentParser(provider).parse_plan("give me a workout")

        assert result.success is False
        assert "Schema validation failed" in result.error

    def test_provider_error(self):
        """Provider errors carry their message and no raw text."""
        provider = FakeCompletionProvider(error=ProviderError(ProviderErrorCode.INVALID_API_KEY, "Invalid API key"))

        result = IntentParser(provider).parse_ask("hi")

        assert result.success is False
        assert result.error == "Invalid API key"
        assert result.raw_text is None
