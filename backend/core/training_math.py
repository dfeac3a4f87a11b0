"""
Shared training arithmetic: weight parsing, volume, e1RM, ISO weeks, and
the number and date formats used in answer text.

Every query path parses weights and estimates 1RMs the same way, so the
helpers live here rather than in each caller.
"""

import re
from datetime import date
from typing import Iterable, List, Optional

from domain.models import WorkoutExercise, WorkoutSession

DEFAULT_BODYWEIGHT = 100

_NON_NUMERIC = re.compile(r"[^\d.]")
_NON_DIGIT = re.compile(r"\D")
_LEADING_FLOAT = re.compile(r"^\d*\.?\d+|^\d+")


def parse_weight(weight_text: Optional[str]) -> float:
    """
    Numeric weight from display text.

    Strips every character that is not a digit or a decimal point, then
    parses the leading number. Unparsable text is weight 0.

    Examples:
        >>> parse_weight("185 lbs")
        185.0
        >>> parse_weight("bodyweight")
        0.0
        >>> parse_weight("+22.5kg")
        22.5
    """
    if not weight_text:
        return 0.0
    cleaned = _NON_NUMERIC.sub("", str(weight_text))
    match = _LEADING_FLOAT.match(cleaned)
    if not match:
        return 0.0
    try:
        return float(match.group(0))
    except ValueError:
        return 0.0


def calculate_e1rm(weight: float, reps: int) -> float:
    """
    Estimated one-rep max (Epley): weight * (1 + reps / 30).

    Zero reps gives 0 and a single rep is the weight itself.
    """
    if reps == 0:
        return 0.0
    if reps == 1:
        return float(weight)
    return weight * (1 + reps / 30)


def set_volume_weight(weight_text: str, exercise_name: str, bodyweight: float) -> float:
    """
    Load used for volume (tonnage) of one set.

    Digits are taken as an integer weight. Pure "bodyweight" sets use the
    user's bodyweight, and "weighted" exercises add it to the extra load.
    """
    digits = _NON_DIGIT.sub("", weight_text or "")
    weight = float(int(digits)) if digits else 0.0

    if (weight_text or "").strip().lower() == "bodyweight":
        weight = float(bodyweight)

    if "weighted" in exercise_name.lower() and weight > 0:
        weight += bodyweight

    return weight


def compute_exercise_volume(exercise: WorkoutExercise, bodyweight: float = DEFAULT_BODYWEIGHT) -> float:
    """Sum of reps * load across all sets of an exercise."""
    return sum(
        s.reps * set_volume_weight(s.weight_text, exercise.name_raw, bodyweight)
        for s in exercise.sets
    )


def iso_week_for_date(date_str: str) -> str:
    """
    ISO week identifier for a YYYY-MM-DD date.

    Examples:
        >>> iso_week_for_date("2024-12-19")
        '2024-W51'
        >>> iso_week_for_date("2024-12-30")
        '2025-W01'
    """
    iso_year, iso_week, _ = date.fromisoformat(date_str).isocalendar()
    return f"{iso_year}-W{iso_week:02d}"


def current_iso_week(today: Optional[date] = None) -> str:
    """ISO week identifier for today (or the given date)."""
    return iso_week_for_date((today or date.today()).isoformat())


def active_sessions(sessions: Iterable[WorkoutSession]) -> List[WorkoutSession]:
    """Sessions that have not been soft-deleted."""
    return [s for s in sessions if not s.is_deleted]


def format_number(value: float) -> str:
    """
    Display form of a number: integral values without a decimal point.

    Examples:
        >>> format_number(185.0)
        '185'
        >>> format_number(22.5)
        '22.5'
    """
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def format_long_date(date_str: str) -> str:
    """'2024-12-19' -> 'Thursday, December 19, 2024'"""
    d = date.fromisoformat(date_str)
    return f"{d:%A}, {d:%B} {d.day}, {d.year}"


def format_short_date(date_str: str) -> str:
    """'2024-12-19' -> 'Dec 19'"""
    d = date.fromisoformat(date_str)
    return f"{d:%b} {d.day}"


def format_numeric_date(date_str: str) -> str:
    """'2024-12-19' -> '12/19/2024'"""
    d = date.fromisoformat(date_str)
    return f"{d.month}/{d.day}/{d.year}"
