"""
Workouts router: model output ingestion and session merging.

Endpoints:
- POST /workouts/parse-output: raw model text -> normalized exercises
- POST /workouts/merge: existing sessions + parsed exercises -> sessions
"""

import logging
from dataclasses import replace

from fastapi import APIRouter, Depends

from api.deps import get_normalize_options, get_settings
from api.schemas import MergeRequest, ParseOutputRequest
from backend.core.exercise_normalizer import NormalizeOptions
from backend.core.workout_sessions import merge_exercises_into_sessions, sort_sessions_by_date_desc
from backend.services.workout_parser import parse_model_output
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/workouts",
    tags=["Workouts"],
)


# =============================================================================
# Ingestion
# =============================================================================


@router.post("/parse-output")
def parse_output(
    request: ParseOutputRequest,
    options: NormalizeOptions = Depends(get_normalize_options),
    settings: Settings = Depends(get_settings),
):
    """
    Extract and normalize exercises from raw model output.

    Never fails for malformed model text: extraction and validation problems
    are reported as warnings with low confidence.
    """
    if request.today:
        today = request.today
        options = replace(options, date_factory=lambda: today)

    result = parse_model_output(request.raw_text, options)
    if settings.store_raw_text:
        result.raw_model_response_text = request.raw_text
    return result.to_dict()


@router.post("/merge")
def merge_sessions(request: MergeRequest):
    """Merge parsed exercises into sessions keyed by exact date."""
    sessions = merge_exercises_into_sessions(request.existing_sessions, request.parsed_exercises)
    if request.sort:
        sessions = sort_sessions_by_date_desc(sessions)

    logger.info(f"Merged {len(request.parsed_exercises)} exercises into {len(sessions)} sessions")
    return {"sessions": [s.model_dump(by_alias=True, mode="json", exclude_none=True) for s in sessions]}
