"""
Versioned backup envelope for the full session list.
"""

from typing import List

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from domain.models.session import WorkoutSession


CURRENT_BACKUP_SCHEMA_VERSION = 2


class WorkoutBackup(BaseModel):
    """
    Backup envelope: `{schemaVersion, exportedAt, workoutSessions}`.
    """

    schema_version: int = Field(default=CURRENT_BACKUP_SCHEMA_VERSION)
    exported_at: str = Field(..., description="ISO-8601 export timestamp")
    workout_sessions: List[WorkoutSession] = Field(default_factory=list)

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }
