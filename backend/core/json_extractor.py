"""
JSON recovery from unreliable model output.

Models wrap JSON in prose, code fences, or both. This module pulls the first
valid JSON value out of arbitrary text:

1. Parse the whole trimmed text.
2. Strip a leading/trailing code fence (with optional language tag) and retry.
3. Scan for the first balanced top-level {...} or [...] span, ignoring
   brackets inside quoted strings, and parse that.

Failures are reported, never raised. `invalid_json` means the text looked
like JSON (started with { or [) or a balanced span was found but did not
parse; `no_json_found` means there was nothing JSON-shaped at all.
"""

import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

logger = logging.getLogger(__name__)


_FENCE_OPEN = re.compile(r"^```(?:json)?\s*\n?", re.MULTILINE)
_FENCE_CLOSE = re.compile(r"\n?```$", re.MULTILINE)


class ExtractionErrorCode(str, Enum):
    """Why extraction failed."""

    NO_JSON_FOUND = "no_json_found"
    INVALID_JSON = "invalid_json"


@dataclass(frozen=True)
class ExtractionResult:
    """Outcome of extract_json()."""

    success: bool
    json_text: Optional[str] = None
    error: Optional[ExtractionErrorCode] = None

    def parse(self) -> Any:
        """Decode the extracted JSON text. Only valid when success is True."""
        if not self.success or self.json_text is None:
            raise ValueError(f"No JSON to parse (error={self.error})")
        return json.loads(self.json_text)


def _is_valid_json(text: str) -> bool:
    try:
        json.loads(text)
    except ValueError:
        return False
    return True


def strip_code_fences(text: str) -> str:
    """Remove ```/```json markers at the start of lines and ``` markers at line ends."""
    stripped = _FENCE_OPEN.sub("", text)
    stripped = _FENCE_CLOSE.sub("", stripped)
    return stripped.strip()


def find_json_span(text: str) -> Optional[str]:
    """
    Return the first complete top-level {...} or [...] span in text.

    Braces and brackets are counted separately. Characters inside double
    quoted strings are ignored and backslash escapes are honored, so
    `{"a": "}"}` is one span.

    Args:
        text: Arbitrary text

    Returns:
        The span, or None when no balanced span exists
    """
    brace_depth = 0
    bracket_depth = 0
    in_string = False
    escaped = False
    start = -1

    for i, ch in enumerate(text):
        if escaped:
            escaped = False
            continue
        if ch == "\\":
            escaped = True
            continue
        if ch == '"':
            in_string = not in_string
            continue
        if in_string:
            continue

        if ch in "{[":
            if start == -1:
                start = i
            if ch == "{":
                brace_depth += 1
            else:
                bracket_depth += 1
        elif ch in "}]" and start != -1:
            if ch == "}":
                brace_depth -= 1
            else:
                bracket_depth -= 1
            if brace_depth == 0 and bracket_depth == 0:
                return text[start : i + 1]

    return None


def extract_json(text: Any) -> ExtractionResult:
    """
    Pull the first valid JSON value out of arbitrary text.

    Args:
        text: Raw model output. Non-string input is treated as empty.

    Returns:
        ExtractionResult carrying the JSON substring or a typed failure
    """
    if not isinstance(text, str) or not text.strip():
        return ExtractionResult(success=False, error=ExtractionErrorCode.NO_JSON_FOUND)

    trimmed = text.strip()

    # Step 1: whole text
    if _is_valid_json(trimmed):
        return ExtractionResult(success=True, json_text=trimmed)

    # Step 2: code fences
    unfenced = strip_code_fences(trimmed)
    if unfenced != trimmed and _is_valid_json(unfenced):
        logger.debug("Extracted JSON after stripping code fences")
        return ExtractionResult(success=True, json_text=unfenced)

    # Step 3: bracket scan
    span = find_json_span(trimmed)
    if span is not None:
        if _is_valid_json(span):
            logger.debug(f"Extracted JSON span of {len(span)} chars from {len(trimmed)} chars of text")
            return ExtractionResult(success=True, json_text=span)
        return ExtractionResult(success=False, error=ExtractionErrorCode.INVALID_JSON)

    if trimmed.startswith("{") or trimmed.startswith("["):
        return ExtractionResult(success=False, error=ExtractionErrorCode.INVALID_JSON)

    return ExtractionResult(success=False, error=ExtractionErrorCode.NO_JSON_FOUND)
