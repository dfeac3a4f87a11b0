"""
Request schemas for workout ingestion, analytics, intents and backups.

Field names are camelCase on the wire, matching the domain models.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.alias_generators import to_camel

from domain.models import DATE_PATTERN, ParsedExercise, WorkoutSession
from domain.models.session import validate_calendar_date
from backend.services.intent_schemas import AskIntent, PlanIntent


_REQUEST_CONFIG = {
    "populate_by_name": True,
    "alias_generator": to_camel,
}


class ParseOutputRequest(BaseModel):
    """Raw model output for POST /workouts/parse-output."""
    raw_text: str = Field(..., description="Model output that should contain exercise JSON")
    today: Optional[str] = Field(
        default=None,
        pattern=DATE_PATTERN,
        description="Date used for exercises without a valid date (defaults to the server date)",
    )

    @field_validator("today")
    @classmethod
    def check_today(cls, value: Optional[str]) -> Optional[str]:
        return value if value is None else validate_calendar_date(value)

    model_config = _REQUEST_CONFIG


class MergeRequest(BaseModel):
    """Sessions plus parsed exercises for POST /workouts/merge."""
    existing_sessions: List[WorkoutSession] = Field(default_factory=list)
    parsed_exercises: List[ParsedExercise] = Field(..., description="Normalized exercises to merge")
    sort: bool = Field(default=True, description="Return sessions newest first")

    model_config = _REQUEST_CONFIG


class StatsRequest(BaseModel):
    sessions: List[WorkoutSession] = Field(default_factory=list)
    current_week: Optional[str] = Field(
        default=None,
        pattern=r"^\d{4}-W\d{2}$",
        description="ISO week, e.g. 2024-W51 (defaults to the current week)",
    )

    model_config = _REQUEST_CONFIG


class PRRequest(BaseModel):
    sessions: List[WorkoutSession] = Field(default_factory=list)
    search: Optional[str] = Field(default=None, description="Case-insensitive exercise filter")
    top: Optional[int] = Field(default=None, ge=1, description="Only the N heaviest PRs")

    model_config = _REQUEST_CONFIG


class AskRequest(BaseModel):
    intent: AskIntent
    sessions: List[WorkoutSession] = Field(default_factory=list)

    model_config = _REQUEST_CONFIG


class PlanRequest(BaseModel):
    intent: PlanIntent
    sessions: List[WorkoutSession] = Field(default_factory=list)

    model_config = _REQUEST_CONFIG


class ClassifierOutputRequest(BaseModel):
    """Raw classifier output to validate as an intent."""
    mode: Literal["ask", "plan"]
    raw_text: str

    model_config = _REQUEST_CONFIG


class BackupExportRequest(BaseModel):
    sessions: List[WorkoutSession] = Field(default_factory=list)

    model_config = _REQUEST_CONFIG


class BackupImportRequest(BaseModel):
    backup_text: str = Field(..., description="Backup file contents")

    model_config = _REQUEST_CONFIG
