"""
Validation and normalization of model-produced exercise JSON.

Input is an already-decoded JSON value. It is first classified into one of
three shapes, checked in this order:

1. ExerciseListShape:     a bare list of exercise objects
2. ExerciseEnvelopeShape: an object carrying an `exercises` key
3. SingleExerciseShape:   any other object, treated as one exercise

Anything else is an UnrecognizedShape. Each raw exercise object is then
repaired into a ParsedExercise:

- name falls back through `exercise`, `nameRaw`, then "Unknown Exercise"
- `sets` must be a positive number, otherwise 1
- `date` must be YYYY-MM-DD, otherwise today (with a warning)
- `reps`/`weights` stay None when absent and are resized to `sets` when present
- muscle groups come from templates, or from sanitized model output
- ids are kept only when they look like `<date|null>-<n>`

Malformed content never raises. The result carries warnings and a coarse
confidence score instead.
"""

import logging
import math
import re
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Union

from domain.models import (
    Confidence,
    ContributionSource,
    MuscleContribution,
    ParsedExercise,
    is_calendar_date,
)
from application.ports import MuscleTemplateLookup
from backend.core.muscle_templates import TemplateMuscleLookup

logger = logging.getLogger(__name__)


ALLOWED_MODEL_MUSCLE_GROUPS = frozenset({"Chest", "Back", "Shoulders", "Arms", "Quads", "Hamstrings"})
UNKNOWN_EXERCISE_NAME = "Unknown Exercise"
NO_EXERCISES_WARNING = "No exercises found in parsed data"
DATE_DEFAULTED_WARNING = "No date provided; defaulted to today."

_DATE_RE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)
_DETERMINISTIC_ID_RE = re.compile(r"(\d{4}-\d{2}-\d{2}|null)-\d+", re.ASCII)


# =============================================================================
# Input shapes
# =============================================================================


@dataclass(frozen=True)
class ExerciseListShape:
    """A bare JSON array of exercise objects."""
    items: List[Any]


@dataclass(frozen=True)
class ExerciseEnvelopeShape:
    """An object with an `exercises` key. A non-list value yields no items."""
    items: List[Any]


@dataclass(frozen=True)
class SingleExerciseShape:
    """A lone exercise object."""
    item: dict


@dataclass(frozen=True)
class UnrecognizedShape:
    """Scalars, null, and anything else with no exercises in it."""
    value: Any


InputShape = Union[ExerciseListShape, ExerciseEnvelopeShape, SingleExerciseShape, UnrecognizedShape]


def classify_shape(value: Any) -> InputShape:
    """
    Classify a decoded JSON value into one of the accepted input shapes.

    Examples:
        >>> classify_shape([{"exercise": "Squat"}])
        ExerciseListShape(items=[{'exercise': 'Squat'}])
        >>> classify_shape({"exercises": "oops"})
        ExerciseEnvelopeShape(items=[])
        >>> classify_shape(42)
        UnrecognizedShape(value=42)
    """
    if isinstance(value, list):
        return ExerciseListShape(items=value)
    if isinstance(value, dict):
        if "exercises" in value:
            inner = value["exercises"]
            return ExerciseEnvelopeShape(items=inner if isinstance(inner, list) else [])
        return SingleExerciseShape(item=value)
    return UnrecognizedShape(value=value)


def raw_exercises_for(shape: InputShape) -> List[Any]:
    """The raw exercise entries carried by a classified shape."""
    if isinstance(shape, (ExerciseListShape, ExerciseEnvelopeShape)):
        return list(shape.items)
    if isinstance(shape, SingleExerciseShape):
        return [shape.item]
    return []


# =============================================================================
# Options and result
# =============================================================================


def _today_iso() -> str:
    return time.strftime("%Y-%m-%d")


def _generate_id() -> str:
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:7]}"


@dataclass(frozen=True)
class NormalizeOptions:
    """
    Knobs for validate_and_normalize().

    Attributes:
        use_template_muscles: Derive muscle groups from exercise templates and
            ignore anything the model said about muscles
        allow_model_provided_muscles: When templates are off, accept sanitized
            model-provided contributions
        date_factory: Returns today's date (YYYY-MM-DD) for defaulting
        id_factory: Returns a fresh exercise id
        template_lookup: Exercise name to muscle template collaborator
    """

    use_template_muscles: bool = True
    allow_model_provided_muscles: bool = False
    date_factory: Callable[[], str] = _today_iso
    id_factory: Callable[[], str] = _generate_id
    template_lookup: MuscleTemplateLookup = field(default_factory=TemplateMuscleLookup)


@dataclass
class NormalizationResult:
    """Outcome of validate_and_normalize()."""

    success: bool
    exercises: List[ParsedExercise] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    confidence: Confidence = "low"
    normalized_json: Optional[List[dict]] = None


# =============================================================================
# Field coercion
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _coerce_sets(value: Any) -> int:
    if _is_number(value) and value > 0 and math.isfinite(value):
        return int(math.ceil(value))
    return 1


def _coerce_rep(value: Any) -> int:
    if _is_number(value) and value >= 0 and math.isfinite(value):
        return int(value)
    return 0


def _coerce_weight(value: Any) -> str:
    if isinstance(value, str):
        return value
    if _is_number(value):
        if isinstance(value, float) and value.is_integer():
            return str(int(value))
        return str(value)
    return "0"


def _resize(values: Optional[list], sets: int, coerce: Callable[[Any], Any]) -> Optional[list]:
    """Force a present array to exactly `sets` entries. Absent stays None."""
    if not isinstance(values, list):
        return None
    return [coerce(values[i] if i < len(values) else None) for i in range(sets)]


def _exercise_name(raw: dict) -> str:
    for key in ("exercise", "nameRaw"):
        value = raw.get(key)
        if isinstance(value, str) and value:
            return value
    return UNKNOWN_EXERCISE_NAME


# =============================================================================
# Muscle contributions
# =============================================================================


def sanitize_model_contributions(contributions: Any) -> Optional[List[MuscleContribution]]:
    """
    Clean model-provided muscle contributions.

    Drops entries whose group is not in the allow-list, clamps `fraction` to
    (0, 1] (defaulting to 1) and keeps `isDirect` only when it is literally
    true. Returns None when nothing survives.
    """
    if not isinstance(contributions, list):
        return None

    sanitized = []
    for c in contributions:
        if not isinstance(c, dict):
            continue
        group = c.get("muscleGroup")
        if not isinstance(group, str) or group not in ALLOWED_MODEL_MUSCLE_GROUPS:
            continue
        fraction = c.get("fraction")
        if not (_is_number(fraction) and 0 < fraction <= 1):
            fraction = 1.0
        sanitized.append(
            MuscleContribution(
                muscle_group=group,
                fraction=fraction,
                is_direct=True if c.get("isDirect") is True else None,
                source=ContributionSource.MODEL,
            )
        )

    return sanitized or None


# =============================================================================
# Confidence
# =============================================================================


def calculate_confidence(exercises: List[ParsedExercise], warnings: List[str]) -> Confidence:
    """
    Coarse quality signal for a normalized batch.

    Low when more than half of all reps/weights values are zero or empty,
    when more than two warnings were recorded, or when the batch is a single
    exercise with fewer than three values.
    """
    zero_count = 0
    total_values = 0

    for ex in exercises:
        for rep in ex.reps or []:
            total_values += 1
            if rep == 0:
                zero_count += 1
        for weight in ex.weights or []:
            total_values += 1
            if weight in ("0", ""):
                zero_count += 1

    zero_ratio = zero_count / total_values if total_values else 0

    if zero_ratio > 0.5:
        return "low"
    if len(warnings) > 2:
        return "low"
    if len(exercises) == 1 and total_values < 3:
        return "low"
    return "high"


# =============================================================================
# Normalization
# =============================================================================


def validate_and_normalize(
    extracted_json: Any,
    options: Optional[NormalizeOptions] = None,
) -> NormalizationResult:
    """
    Turn a decoded JSON value into canonical ParsedExercise records.

    Args:
        extracted_json: Decoded model output (list, dict, or anything else)
        options: Muscle-group policy and deterministic factories

    Returns:
        NormalizationResult. `success` is False only when the input held no
        exercises at all.
    """
    options = options or NormalizeOptions()
    warnings: List[str] = []
    exercises: List[ParsedExercise] = []
    used_ids = set()
    date_defaulted = False

    shape = classify_shape(extracted_json)
    logger.debug(f"Normalizer input classified as {type(shape).__name__}")

    raw_exercises = []
    for position, entry in enumerate(raw_exercises_for(shape)):
        if isinstance(entry, dict):
            raw_exercises.append(entry)
        else:
            warnings.append(f"Skipped non-object exercise entry at position {position}")

    if not raw_exercises:
        return NormalizationResult(
            success=False,
            warnings=warnings + [NO_EXERCISES_WARNING],
            confidence="low",
        )

    default_date = options.date_factory()

    for raw in raw_exercises:
        name = _exercise_name(raw)
        sets = _coerce_sets(raw.get("sets"))

        raw_date = raw.get("date")
        date = raw_date if isinstance(raw_date, str) else default_date
        if not raw_date:
            date_defaulted = True
        if not _DATE_RE.fullmatch(date) or not is_calendar_date(date):
            date = default_date
            date_defaulted = True
            warnings.append(f'Invalid date format for "{name}", defaulted to today')

        reps = _resize(raw.get("reps"), sets, _coerce_rep)
        weights = _resize(raw.get("weights"), sets, _coerce_weight)

        primary_muscle_group = None
        contributions = None
        raw_primary = raw.get("primaryMuscleGroup")
        raw_primary = raw_primary if isinstance(raw_primary, str) and raw_primary else None

        if options.use_template_muscles:
            template = options.template_lookup.lookup(name, raw_primary)
            if template:
                primary_muscle_group = template[0].muscle_group
                contributions = list(template)
        elif options.allow_model_provided_muscles and raw.get("muscleContributions"):
            sanitized = sanitize_model_contributions(raw.get("muscleContributions"))
            if sanitized:
                primary_muscle_group = raw_primary or sanitized[0].muscle_group
                contributions = sanitized

        candidate_id = raw.get("id") if isinstance(raw.get("id"), str) else ""
        exercise_id = candidate_id if _DETERMINISTIC_ID_RE.fullmatch(candidate_id) else options.id_factory()
        while exercise_id in used_ids:
            exercise_id = options.id_factory()
        used_ids.add(exercise_id)

        exercises.append(
            ParsedExercise(
                id=exercise_id,
                date=date,
                exercise=name,
                sets=sets,
                reps=reps,
                weights=weights,
                primary_muscle_group=primary_muscle_group,
                muscle_contributions=contributions,
            )
        )

    if date_defaulted:
        warnings.append(DATE_DEFAULTED_WARNING)

    confidence = calculate_confidence(exercises, warnings)
    logger.debug(
        f"Normalized {len(exercises)} exercises with {len(warnings)} warnings, confidence={confidence}"
    )

    return NormalizationResult(
        success=True,
        exercises=exercises,
        warnings=warnings,
        confidence=confidence,
        normalized_json=[
            ex.model_dump(by_alias=True, mode="json") for ex in exercises
        ],
    )
