"""
Domain layer for the workout log service.

This package contains pure domain models that are independent of
infrastructure concerns (HTTP, model providers, storage).
"""

from domain.models import (
    MuscleContribution,
    ParsedExercise,
    WorkoutBackup,
    WorkoutExercise,
    WorkoutSession,
    WorkoutSet,
)

__all__ = [
    "MuscleContribution",
    "ParsedExercise",
    "WorkoutBackup",
    "WorkoutExercise",
    "WorkoutSession",
    "WorkoutSet",
]
