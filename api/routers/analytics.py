"""
Analytics router: muscle-group stats, PRs and volume guidelines.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query

from api.deps import get_now, get_settings, get_template_lookup
from api.schemas import PRRequest, StatsRequest
from application.ports import MuscleTemplateLookup
from backend.core.muscle_stats import SET_COUNT_MODES, calculate_stats, get_volume_status
from backend.core.pr_metrics import (
    calculate_pr_metrics,
    filter_pr_metrics_by_search,
    get_top_prs,
    sort_pr_metrics_by_weight,
)
from backend.core.training_math import current_iso_week
from backend.settings import Settings

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)


# =============================================================================
# Stats
# =============================================================================


@router.post("/stats")
def workout_stats(
    request: StatsRequest,
    now: datetime = Depends(get_now),
    lookup: MuscleTemplateLookup = Depends(get_template_lookup),
    settings: Settings = Depends(get_settings),
):
    """Aggregate sessions into workout stats, sets per day and weekly muscle-group sets."""
    result = calculate_stats(
        request.sessions,
        current_week=request.current_week or current_iso_week(now.date()),
        template_lookup=lookup,
        bodyweight=settings.default_bodyweight,
    )
    return result.to_dict()


@router.get("/volume-status")
def volume_status(
    muscle_group: str = Query(..., alias="muscleGroup"),
    weekly_sets: float = Query(..., alias="weeklySets", ge=0),
    mode: str = Query("fractional"),
):
    """Guideline message for a muscle group's weekly set count."""
    if mode not in SET_COUNT_MODES:
        raise HTTPException(status_code=422, detail=f"mode must be one of: {', '.join(SET_COUNT_MODES)}")
    return {
        "muscleGroup": muscle_group,
        "weeklySets": weekly_sets,
        "mode": mode,
        "status": get_volume_status(muscle_group, weekly_sets, mode),
    }


# =============================================================================
# Personal records
# =============================================================================


@router.post("/prs")
def personal_records(request: PRRequest):
    """PR per exercise, optionally filtered and limited to the heaviest N."""
    metrics = calculate_pr_metrics(request.sessions)
    if request.search:
        metrics = filter_pr_metrics_by_search(metrics, request.search)
    if request.top:
        metrics = get_top_prs(metrics, request.top)
    else:
        metrics = sort_pr_metrics_by_weight(metrics)

    return {"prs": [m.to_dict() for m in metrics], "count": len(metrics)}
