"""Backend services: intent execution, model orchestration and backups."""

from backend.services.ask_executor import AskData, AskResult, execute_ask_intent
from backend.services.backup_service import (
    BackupValidationError,
    create_workout_backup,
    parse_workout_backup,
    stringify_workout_backup,
)
from backend.services.conversational import ConversationalResponder
from backend.services.intent_parser import IntentParser, IntentParseResult
from backend.services.plan_executor import PlanExercise, WorkoutPlan, execute_plan_intent
from backend.services.workout_parser import ParseResult, WorkoutTextParser

__all__ = [
    "AskData",
    "AskResult",
    "execute_ask_intent",
    "BackupValidationError",
    "create_workout_backup",
    "parse_workout_backup",
    "stringify_workout_backup",
    "ConversationalResponder",
    "IntentParser",
    "IntentParseResult",
    "PlanExercise",
    "WorkoutPlan",
    "execute_plan_intent",
    "ParseResult",
    "WorkoutTextParser",
]
