"""
ParsedExercise: the transient, pre-merge record produced by the normalizer.

A ParsedExercise lives for a single model turn. The session merger turns it
into WorkoutExercise/WorkoutSet records and then it is discarded.
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from domain.models.muscle import MuscleContribution
from domain.models.session import DATE_PATTERN, validate_calendar_date


Confidence = Literal["high", "low"]


class ParsedExercise(BaseModel):
    """
    A normalized exercise record extracted from model output.

    `reps` and `weights` stay None when the model did not provide them.
    When present they always hold exactly `sets` entries.
    """

    id: str = Field(..., min_length=1)
    date: str = Field(..., pattern=DATE_PATTERN)
    exercise: str = Field(..., min_length=1)
    sets: int = Field(..., ge=1)
    reps: Optional[List[int]] = Field(default=None)
    weights: Optional[List[str]] = Field(default=None)
    primary_muscle_group: Optional[str] = Field(default=None)
    muscle_contributions: Optional[List[MuscleContribution]] = Field(default=None)

    @field_validator("date")
    @classmethod
    def check_date(cls, value: str) -> str:
        return validate_calendar_date(value)

    @model_validator(mode="after")
    def validate_array_lengths(self) -> "ParsedExercise":
        """Ensure present reps/weights arrays match the set count."""
        if self.reps is not None:
            if len(self.reps) != self.sets:
                raise ValueError(f"reps has {len(self.reps)} entries, expected {self.sets}")
            if any(r < 0 for r in self.reps):
                raise ValueError("reps must be non-negative")
        if self.weights is not None and len(self.weights) != self.sets:
            raise ValueError(f"weights has {len(self.weights)} entries, expected {self.sets}")
        return self

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "alias_generator": to_camel,
    }
