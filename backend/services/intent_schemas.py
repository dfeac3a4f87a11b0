"""
Intent schemas for Ask and Plan modes.

An external classifier turns a user's question into one of these shapes.
Ask intents form a discriminated union on `type`; validation rejects any
unknown `type` before an executor ever sees it. Wire names are camelCase
(`muscleGroup`, `originalQuery`, `durationMinutes`, ...).

Usage:
    >>> intent = parse_ask_intent({"type": "last_exercise_date", "exercise": "bench"})
    >>> intent.exercise
    'bench'
"""

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, Field, TypeAdapter
from pydantic.alias_generators import to_camel


_INTENT_CONFIG = {
    "frozen": True,
    "strict": True,
    "populate_by_name": True,
    "alias_generator": to_camel,
}

BestMetric = Literal["weight", "e1rm", "volume"]
VolumeRange = Literal["week", "month", "custom"]
RecommendationFocus = Literal[
    "upper", "lower", "push", "pull", "legs", "arms", "back", "chest", "shoulders", "any"
]
ProgressTimeframe = Literal["recent", "month", "all_time"]
PlanGoal = Literal["strength", "hypertrophy", "conditioning"]
PlanFocus = Literal["upper", "lower", "push", "pull", "legs", "full"]


# =============================================================================
# Ask intents
# =============================================================================


class LastExerciseDateIntent(BaseModel):
    """When did I last do <exercise>?"""
    type: Literal["last_exercise_date"]
    exercise: str

    model_config = _INTENT_CONFIG


class LastExerciseDetailsIntent(BaseModel):
    """What sets did I do last time for <exercise>?"""
    type: Literal["last_exercise_details"]
    exercise: str

    model_config = _INTENT_CONFIG


class BestExerciseIntent(BaseModel):
    """What's my best <exercise> by weight, e1RM or volume?"""
    type: Literal["best_exercise"]
    exercise: str
    metric: BestMetric

    model_config = _INTENT_CONFIG


class VolumeSummaryIntent(BaseModel):
    """How many sets did I do in a window, optionally for a group or exercise."""
    type: Literal["volume_summary"]
    range: VolumeRange
    muscle_group: Optional[str] = None
    exercise: Optional[str] = None
    start: Optional[str] = Field(default=None, description="YYYY-MM-DD, custom range only")
    end: Optional[str] = Field(default=None, description="YYYY-MM-DD, custom range only")

    model_config = _INTENT_CONFIG


class LastSessionSummaryIntent(BaseModel):
    type: Literal["last_session_summary"]

    model_config = _INTENT_CONFIG


class WorkoutRecommendationIntent(BaseModel):
    type: Literal["workout_recommendation"]
    focus: Optional[RecommendationFocus] = None

    model_config = _INTENT_CONFIG


class ExerciseAlternativeIntent(BaseModel):
    type: Literal["exercise_alternative"]
    exercise: str
    reason: Optional[str] = Field(default=None, description="e.g. 'no equipment', 'injury'")

    model_config = _INTENT_CONFIG


class GeneralChatIntent(BaseModel):
    """Open-ended question answered by the conversational responder."""
    type: Literal["general_chat"]
    topic: str
    original_query: str

    model_config = _INTENT_CONFIG


class MuscleGroupExercisesIntent(BaseModel):
    type: Literal["muscle_group_exercises"]
    muscle_group: str

    model_config = _INTENT_CONFIG


class ExerciseProgressIntent(BaseModel):
    type: Literal["exercise_progress"]
    exercise: str
    timeframe: Optional[ProgressTimeframe] = None

    model_config = _INTENT_CONFIG


AskIntent = Annotated[
    Union[
        LastExerciseDateIntent,
        LastExerciseDetailsIntent,
        BestExerciseIntent,
        VolumeSummaryIntent,
        LastSessionSummaryIntent,
        WorkoutRecommendationIntent,
        ExerciseAlternativeIntent,
        GeneralChatIntent,
        MuscleGroupExercisesIntent,
        ExerciseProgressIntent,
    ],
    Field(discriminator="type"),
]


# =============================================================================
# Plan intent
# =============================================================================


class PlanIntent(BaseModel):
    """Request for a single workout plan."""
    type: Literal["workout_plan"]
    goal: Optional[PlanGoal] = None
    duration_minutes: Optional[float] = None
    focus: Optional[PlanFocus] = None
    include_weights: Optional[bool] = Field(
        default=None,
        description="Attach personalized weight targets from PR data",
    )
    requested_exercises: Optional[List[str]] = None

    model_config = _INTENT_CONFIG


ASK_INTENT_ADAPTER: TypeAdapter = TypeAdapter(AskIntent)
PLAN_INTENT_ADAPTER: TypeAdapter = TypeAdapter(PlanIntent)


def parse_ask_intent(data: Any):
    """Validate decoded JSON as an Ask intent. Raises pydantic.ValidationError."""
    return ASK_INTENT_ADAPTER.validate_python(data)


def parse_plan_intent(data: Any) -> PlanIntent:
    """Validate decoded JSON as a Plan intent. Raises pydantic.ValidationError."""
    return PLAN_INTENT_ADAPTER.validate_python(data)


def intent_to_dict(intent: BaseModel) -> dict:
    """Wire representation of an intent."""
    return intent.model_dump(by_alias=True, exclude_none=True)
