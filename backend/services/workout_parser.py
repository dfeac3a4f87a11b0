"""
Workout text parsing: free text -> model output -> ParsedExercise records.

The completion provider does the language work. Everything after the raw
model text (JSON extraction, validation, normalization) is deterministic.
Failures come back as warnings with low confidence; parse() never raises.
"""

import hashlib
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, List, Optional

from domain.models import Confidence, ParsedExercise
from application.ports import CompletionProvider
from backend.ai.provider_errors import categorize_exception
from backend.core.exercise_normalizer import NormalizeOptions, validate_and_normalize
from backend.core.json_extractor import extract_json
from backend.services.prompts import WORKOUT_PARSE_SYSTEM_PROMPT

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Outcome of WorkoutTextParser.parse()."""

    exercises: List[ParsedExercise] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    confidence: Confidence = "low"
    ai_trace_id: Optional[str] = None
    input_text_hash: Optional[str] = None
    extracted_json_text: Optional[str] = None
    normalized_json: Optional[Any] = None
    raw_text: Optional[str] = None
    raw_model_response_text: Optional[str] = None

    def to_dict(self) -> dict:
        out = {
            "exercises": [e.model_dump(by_alias=True, mode="json") for e in self.exercises],
            "warnings": list(self.warnings),
            "confidence": self.confidence,
            "aiTraceId": self.ai_trace_id,
            "inputTextHash": self.input_text_hash,
        }
        optional = {
            "extractedJsonText": self.extracted_json_text,
            "normalizedJson": self.normalized_json,
            "rawText": self.raw_text,
            "rawModelResponseText": self.raw_model_response_text,
        }
        out.update({k: v for k, v in optional.items() if v is not None})
        return out


def hash_input_text(text: str) -> str:
    """SHA-256 hex digest, so logs can correlate inputs without storing them."""
    return hashlib.sha256(text.encode("utf-8")).hexdigest()


def parse_model_output(
    raw_model_text: str,
    options: Optional[NormalizeOptions] = None,
) -> ParseResult:
    """
    Extract and normalize exercises from raw model output.

    Used by WorkoutTextParser after the completion call, and directly by the
    API and CLI when the model output is already at hand.
    """
    extraction = extract_json(raw_model_text)
    if not extraction.success:
        logger.warning(f"JSON extraction failed: {extraction.error.value}")
        return ParseResult(warnings=[f"Failed to extract JSON: {extraction.error.value}"])

    try:
        decoded = json.loads(extraction.json_text)
    except ValueError:
        return ParseResult(
            warnings=["Extracted JSON is invalid"],
            extracted_json_text=extraction.json_text,
        )

    normalized = validate_and_normalize(decoded, options)
    if not normalized.success:
        logger.warning(f"Normalization produced no exercises: {normalized.warnings}")
        return ParseResult(
            warnings=normalized.warnings,
            confidence=normalized.confidence,
            extracted_json_text=extraction.json_text,
        )

    return ParseResult(
        exercises=normalized.exercises,
        warnings=normalized.warnings,
        confidence=normalized.confidence,
        extracted_json_text=extraction.json_text,
        normalized_json=normalized.normalized_json,
    )


class WorkoutTextParser:
    """
    Parse a free-text workout log through a completion provider.

    Usage:
        parser = WorkoutTextParser(provider)
        result = parser.parse("bench 3x5 @ 225 yesterday")
    """

    def __init__(
        self,
        provider: CompletionProvider,
        options: Optional[NormalizeOptions] = None,
        store_raw_text: bool = False,
    ):
        self.provider = provider
        self.options = options or NormalizeOptions()
        self.store_raw_text = store_raw_text

    def parse(self, text: str) -> ParseResult:
        trace_id = str(uuid.uuid4())
        input_hash = hash_input_text(text)
        logger.info(f"Parsing workout text (trace={trace_id}, hash={input_hash[:12]})")

        try:
            raw_model_text = self.provider.complete(WORKOUT_PARSE_SYSTEM_PROMPT, text)
        except Exception as e:
            error = categorize_exception(e)
            logger.warning(f"Completion failed (trace={trace_id}): {error.code.value}")
            return ParseResult(
                warnings=[f"Parse error: {error.message}"],
                ai_trace_id=trace_id,
                input_text_hash=input_hash,
            )

        result = parse_model_output(raw_model_text, self.options)
        result.ai_trace_id = trace_id
        result.input_text_hash = input_hash
        if self.store_raw_text:
            result.raw_text = text
            result.raw_model_response_text = raw_model_text

        logger.info(
            f"Parse finished (trace={trace_id}): {len(result.exercises)} exercises, "
            f"confidence={result.confidence}, {len(result.warnings)} warnings"
        )
        return result
