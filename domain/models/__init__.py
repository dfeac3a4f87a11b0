"""
Domain models for the workout log service.

This package contains pure domain models that are independent of
infrastructure concerns (HTTP, model providers, storage).

These models represent the core concepts:
- WorkoutSession: One training day, the aggregate root
- WorkoutExercise: An exercise performed in a session
- WorkoutSet: A single set (reps plus display weight text)
- MuscleContribution: How much an exercise counts toward a muscle group
- ParsedExercise: Transient normalized record produced from model output
- WorkoutBackup: Versioned export envelope

Usage:
    >>> from domain.models import WorkoutSession, WorkoutExercise, WorkoutSet

    >>> session = WorkoutSession(
    ...     id="s1",
    ...     performed_on="2024-12-19",
    ...     exercises=[
    ...         WorkoutExercise(
    ...             id="e1",
    ...             session_id="s1",
    ...             name_raw="Bench Press",
    ...             sets=[WorkoutSet(id="set1", exercise_id="e1", set_index=0, reps=5, weight_text="225")],
    ...         )
    ...     ],
    ... )

    >>> # Serialize with wire (camelCase) names
    >>> json_str = session.model_dump_json(by_alias=True, exclude_none=True)
"""

from domain.models.backup import CURRENT_BACKUP_SCHEMA_VERSION, WorkoutBackup
from domain.models.muscle import ContributionSource, MuscleContribution
from domain.models.parsed import Confidence, ParsedExercise
from domain.models.session import (
    DATE_PATTERN,
    WorkoutExercise,
    WorkoutSession,
    WorkoutSet,
    is_calendar_date,
    utc_now_iso,
)

__all__ = [
    # Aggregate
    "WorkoutSession",
    "WorkoutExercise",
    "WorkoutSet",
    # Value objects
    "MuscleContribution",
    "ParsedExercise",
    "WorkoutBackup",
    # Enums / literals
    "ContributionSource",
    "Confidence",
    # Helpers
    "CURRENT_BACKUP_SCHEMA_VERSION",
    "DATE_PATTERN",
    "is_calendar_date",
    "utc_now_iso",
]
