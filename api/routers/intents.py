"""
Intents router: execute Ask and Plan intents against a session history.

Intents arrive already classified. The request body is validated against the
intent schemas, so an unknown `type` is a 422 before any executor runs.
`general_chat` and `muscle_group_exercises` answers come back with
`needsLlmResponse` set and a context payload for the client's model call.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends

from api.deps import get_now, get_settings, get_template_lookup
from api.schemas import AskRequest, ClassifierOutputRequest, PlanRequest
from application.ports import MuscleTemplateLookup
from backend.services.ask_executor import execute_ask_intent
from backend.services.intent_parser import validate_intent_text
from backend.services.intent_schemas import parse_ask_intent, parse_plan_intent
from backend.services.plan_executor import execute_plan_intent
from backend.services.result_formatters import (
    format_ask_result,
    format_plan_as_card,
    format_plan_as_text,
    format_plan_result,
)
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/intents",
    tags=["Intents"],
)


@router.post("/ask")
def ask(
    request: AskRequest,
    now: datetime = Depends(get_now),
    lookup: MuscleTemplateLookup = Depends(get_template_lookup),
    settings: Settings = Depends(get_settings),
):
    """Answer an Ask intent with text, card data and a formatted data card."""
    result = execute_ask_intent(
        request.intent,
        request.sessions,
        now=now,
        template_lookup=lookup,
        bodyweight=settings.default_bodyweight,
        weight_unit=settings.weight_unit,
    )
    return {
        "result": result.to_dict(),
        "formatted": format_ask_result(result, settings.weight_unit).to_dict(),
        "needsLlmResponse": result.data.needs_llm_response,
    }


@router.post("/plan")
def plan(
    request: PlanRequest,
    now: datetime = Depends(get_now),
    lookup: MuscleTemplateLookup = Depends(get_template_lookup),
    settings: Settings = Depends(get_settings),
):
    """Build a workout plan and its display formats."""
    workout_plan = execute_plan_intent(
        request.intent,
        request.sessions,
        now=now,
        template_lookup=lookup,
        recent_training_hours=settings.recent_training_hours,
        weight_unit=settings.weight_unit,
    )
    return {
        "plan": workout_plan.to_dict(),
        "formatted": format_plan_result(workout_plan),
        "card": format_plan_as_card(workout_plan),
        "text": format_plan_as_text(workout_plan),
    }


@router.post("/validate")
def validate_classifier_output(request: ClassifierOutputRequest):
    """
    Validate raw classifier output as an Ask or Plan intent.

    Always 200: validation failures are reported in the body.
    """
    validate = parse_ask_intent if request.mode == "ask" else parse_plan_intent
    return validate_intent_text(request.raw_text, validate).to_dict()
