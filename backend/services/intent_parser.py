"""
Intent parsing: a user's question or plan request -> validated intent.

The completion provider classifies the prompt into JSON; the intent schemas
decide whether that JSON is an intent we can execute.
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from pydantic import BaseModel, ValidationError

from application.ports import CompletionProvider
from backend.ai.provider_errors import categorize_exception
from backend.core.json_extractor import extract_json
from backend.services.intent_schemas import intent_to_dict, parse_ask_intent, parse_plan_intent
from backend.services.prompts import ASK_INTENT_SYSTEM_PROMPT, PLAN_INTENT_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


@dataclass
class IntentParseResult:
    success: bool
    intent: Optional[BaseModel] = None
    error: Optional[str] = None
    raw_text: Optional[str] = None

    def to_dict(self) -> dict:
        out = {"success": self.success}
        if self.intent is not None:
            out["intent"] = intent_to_dict(self.intent)
        if self.error is not None:
            out["error"] = self.error
        if self.raw_text is not None:
            out["rawText"] = self.raw_text
        return out


def validate_intent_text(raw_text: str, validate: Callable[[Any], BaseModel]) -> IntentParseResult:
    """Extract JSON from classifier output and validate it with `validate`."""
    extraction = extract_json(raw_text)
    if not extraction.success:
        return IntentParseResult(
            success=False,
            error=f"Failed to extract JSON: {extraction.error.value}",
            raw_text=raw_text,
        )

    try:
        decoded = json.loads(extraction.json_text)
    except ValueError:
        return IntentParseResult(success=False, error="Extracted JSON is invalid", raw_text=raw_text)

    try:
        intent = validate(decoded)
    except ValidationError as e:
        logger.warning(f"Intent failed schema validation: {e.error_count()} errors")
        return IntentParseResult(
            success=False,
            error=f"Schema validation failed: {e}",
            raw_text=raw_text,
        )

    return IntentParseResult(success=True, intent=intent, raw_text=raw_text)


class IntentParser:
    """Classify prompts into Ask or Plan intents through a completion provider."""

    def __init__(self, provider: CompletionProvider):
        self.provider = provider

    def _parse(self, prompt: str, system_prompt: str, validate) -> IntentParseResult:
        try:
            raw_text = self.provider.complete(system_prompt, prompt)
        except Exception as e:
            error = categorize_exception(e)
            logger.warning(f"Intent classification failed: {error.code.value}")
            return IntentParseResult(success=False, error=error.message)

        result = validate_intent_text(raw_text, validate)
        if result.success:
            logger.info(f"Classified prompt as '{result.intent.type}'")
        return result

    def parse_ask(self, prompt: str) -> IntentParseResult:
        return self._parse(prompt, ASK_INTENT_SYSTEM_PROMPT, parse_ask_intent)

    def parse_plan(self, prompt: str) -> IntentParseResult:
        return self._parse(prompt, PLAN_INTENT_SYSTEM_PROMPT, parse_plan_intent)
