"""
Workout session aggregate: Session -> Exercise -> Set.

A WorkoutSession owns its exercises and a WorkoutExercise owns its sets.
Sessions are keyed by their exact `performed_on` date string. Nothing in the
core physically deletes a session; `deleted_at` marks a soft delete.

Field names are snake_case in Python and camelCase on the wire
(`performedOn`, `weightText`, ...), which is the format used by backups.
"""

import re
from datetime import date, datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from domain.models.muscle import MuscleContribution


DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


def is_calendar_date(value: str) -> bool:
    """True when a YYYY-MM-DD string names a real day (no 2024-02-30)."""
    if not isinstance(value, str) or not re.fullmatch(DATE_PATTERN, value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


def validate_calendar_date(value: str) -> str:
    if not is_calendar_date(value):
        raise ValueError(f"{value!r} is not a calendar date")
    return value


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


_WIRE_CONFIG = {
    "frozen": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class WorkoutSet(BaseModel):
    """
    A single performed set.

    `weight_text` is kept exactly as the user wrote it ("135", "bodyweight",
    "+25"); the numeric weight is derived on demand.
    """

    id: str = Field(..., min_length=1)
    exercise_id: str = Field(..., min_length=1, description="Owning WorkoutExercise id")
    set_index: int = Field(..., ge=0, description="Zero-based position within the exercise")
    reps: int = Field(default=0, ge=0)
    weight_text: str = Field(default="", description="Display weight as entered")
    is_bodyweight: bool = Field(default=False)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    model_config = _WIRE_CONFIG


class WorkoutExercise(BaseModel):
    """An exercise performed within a session, with its sets."""

    id: str = Field(..., min_length=1)
    session_id: str = Field(..., min_length=1, description="Owning WorkoutSession id")
    name_raw: str = Field(..., description="Exercise name as logged")
    primary_muscle_group: Optional[str] = Field(default=None)
    muscle_contributions: Optional[List[MuscleContribution]] = Field(default=None)
    sets: List[WorkoutSet] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)

    @property
    def set_count(self) -> int:
        return len(self.sets)

    model_config = _WIRE_CONFIG


class WorkoutSession(BaseModel):
    """
    One training day.

    Examples:
        >>> session = WorkoutSession(id="s1", performed_on="2024-12-19")
        >>> session.total_sets
        0
        >>> session.model_dump(by_alias=True)["performedOn"]
        '2024-12-19'
    """

    id: str = Field(..., min_length=1)
    performed_on: str = Field(..., pattern=DATE_PATTERN, description="YYYY-MM-DD")
    exercises: List[WorkoutExercise] = Field(default_factory=list)
    created_at: str = Field(default_factory=utc_now_iso)
    updated_at: str = Field(default_factory=utc_now_iso)
    deleted_at: Optional[str] = Field(default=None, description="Soft-delete timestamp")

    @field_validator("performed_on")
    @classmethod
    def check_performed_on(cls, value: str) -> str:
        return validate_calendar_date(value)

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def total_sets(self) -> int:
        return sum(ex.set_count for ex in self.exercises)

    model_config = _WIRE_CONFIG
