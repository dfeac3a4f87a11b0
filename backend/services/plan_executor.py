"""
Deterministic workout planner for Plan mode intents.

Builds a single session plan from the focus templates in
shared/dictionaries/workout_plans.yaml:
- requested exercises go first, then the focus templates
- templates trained within the recent-training window are avoided
- 3-5 exercises depending on duration (one per 15 minutes)
- optional weight targets from PR data scaled to the goal's %1RM band,
  falling back to the last 30 days of working weights
"""

import logging
import math
from dataclasses import asdict, dataclass, field
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from domain.models import WorkoutExercise, WorkoutSession
from application.ports import MuscleTemplateLookup
from backend.core.dictionaries import load_dictionary
from backend.core.exercise_resolver import normalize_exercise_name
from backend.core.muscle_templates import ensure_muscle_contributions
from backend.core.pr_metrics import PRMetric, calculate_pr_metrics
from backend.core.training_math import (
    active_sessions,
    format_number,
    format_numeric_date,
    parse_weight,
)
from backend.core.workout_sessions import sort_sessions_by_date_desc
from backend.services.intent_schemas import PlanIntent

logger = logging.getLogger(__name__)

DEFAULT_FOCUS = "full"
DEFAULT_GOAL = "hypertrophy"
DEFAULT_DURATION_MINUTES = 60
RECENT_TRAINING_HOURS = 48
RECENT_WEIGHTS_DAYS = 30
MIN_HISTORY_SESSIONS = 3
WEIGHT_INCREMENT = 2.5

# Focus -> (basis field, muscle groups) used for "last <pattern> day".
LAST_DAY_PATTERNS = {
    "lower": ("last_lower_day", ["Quads", "Hamstrings"]),
    "legs": ("last_lower_day", ["Quads", "Hamstrings"]),
    "upper": ("last_upper_day", ["Chest", "Back", "Shoulders"]),
    "push": ("last_push_day", ["Chest", "Shoulders"]),
    "pull": ("last_pull_day", ["Back"]),
}


# =============================================================================
# Result types
# =============================================================================


@dataclass
class RecommendedWeight:
    value: float
    unit: str
    based_on: str  # pr | recent
    confidence: str  # high | medium | low
    pr_weight: Optional[float] = None
    percentage_of_max: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "value": self.value,
            "unit": self.unit,
            "basedOn": self.based_on,
            "confidence": self.confidence,
        }
        if self.pr_weight is not None:
            out["prWeight"] = self.pr_weight
        if self.percentage_of_max is not None:
            out["percentageOfMax"] = self.percentage_of_max
        return out


@dataclass
class PlanExercise:
    exercise: str
    sets: int
    reps: str
    intensity: Optional[str] = None
    notes: Optional[str] = None
    recommended_weight: Optional[RecommendedWeight] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {"exercise": self.exercise, "sets": self.sets, "reps": self.reps}
        if self.intensity is not None:
            out["intensity"] = self.intensity
        if self.notes is not None:
            out["notes"] = self.notes
        if self.recommended_weight is not None:
            out["recommendedWeight"] = self.recommended_weight.to_dict()
        return out


@dataclass
class PlanBasis:
    """History facts the plan was built from."""

    last_lower_day: Optional[str] = None
    last_upper_day: Optional[str] = None
    last_push_day: Optional[str] = None
    last_pull_day: Optional[str] = None
    exercises_avoided: List[str] = field(default_factory=list)
    pr_data: Optional[List[Dict[str, Any]]] = None

    @property
    def last_days(self) -> List[str]:
        labels = (
            ("lower", self.last_lower_day),
            ("upper", self.last_upper_day),
            ("push", self.last_push_day),
            ("pull", self.last_pull_day),
        )
        return [f"last {name} day: {format_numeric_date(day)}" for name, day in labels if day]

    def to_dict(self) -> Dict[str, Any]:
        out = {"exercisesAvoided": list(self.exercises_avoided)}
        for key, value in asdict(self).items():
            if key == "exercises_avoided" or value is None:
                continue
            head, *rest = key.split("_")
            out[head + "".join(p.capitalize() for p in rest)] = value
        return out


@dataclass
class WorkoutPlan:
    title: str
    rationale: List[str]
    exercises: List[PlanExercise]
    based_on_data: PlanBasis = field(default_factory=PlanBasis)
    is_generic: bool = False
    has_personalized_weights: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "rationale": list(self.rationale),
            "exercises": [e.to_dict() for e in self.exercises],
            "basedOnData": self.based_on_data.to_dict(),
            "isGeneric": self.is_generic,
            "hasPersonalizedWeights": self.has_personalized_weights,
        }


# =============================================================================
# Helpers
# =============================================================================


def round_to_increment(value: float, increment: float = WEIGHT_INCREMENT) -> float:
    """
    Round to the nearest plate increment, halves rounding up.

    Examples:
        >>> round_to_increment(173.7)
        172.5
        >>> round_to_increment(176.25)
        177.5
    """
    return math.floor(value / increment + 0.5) * increment


def _session_start(session: WorkoutSession) -> datetime:
    return datetime.combine(date.fromisoformat(session.performed_on), time())


def _days_between(day: str, now: datetime) -> int:
    return (now - datetime.combine(date.fromisoformat(day), time())) // timedelta(days=1)


def _muscle_groups(exercise: WorkoutExercise, lookup: Optional[MuscleTemplateLookup]) -> List[str]:
    contributions = ensure_muscle_contributions(exercise, lookup)
    if not contributions:
        return [exercise.primary_muscle_group] if exercise.primary_muscle_group else []
    return [c.muscle_group for c in contributions]


def find_last_training_day(
    muscle_groups: List[str],
    sessions: List[WorkoutSession],
    lookup: Optional[MuscleTemplateLookup] = None,
) -> Optional[str]:
    """Most recent date on which any exercise hit one of the muscle groups."""
    for session in sort_sessions_by_date_desc(sessions):
        for ex in session.exercises:
            if any(group in muscle_groups for group in _muscle_groups(ex, lookup)):
                return session.performed_on
    return None


def was_trained_recently(
    exercise_name: str,
    sessions: List[WorkoutSession],
    now: datetime,
    hours: float = RECENT_TRAINING_HOURS,
) -> Optional[str]:
    """Date of a session within `hours` that contains the exercise, else None."""
    normalized = normalize_exercise_name(exercise_name)
    for session in sessions:
        hours_ago = (now - _session_start(session)) / timedelta(hours=1)
        if hours_ago > hours:
            continue
        if any(normalize_exercise_name(ex.name_raw) == normalized for ex in session.exercises):
            return session.performed_on
    return None


def find_pr_for_exercise(exercise_name: str, pr_metrics: List[PRMetric]) -> Optional[PRMetric]:
    """
    PR for a planned exercise.

    Tries an exact name, then the PR alias table in both directions, then
    word overlap covering at least half of the exercise's words.
    """
    normalized = normalize_exercise_name(exercise_name)
    by_name = {}
    for pr in pr_metrics:
        by_name.setdefault(normalize_exercise_name(pr.exercise), pr)

    if normalized in by_name:
        return by_name[normalized]

    for canonical, aliases in load_dictionary("workout_plans")["pr_aliases"].items():
        alias_keys = [normalize_exercise_name(a) for a in aliases]
        if normalized == normalize_exercise_name(canonical):
            for key in alias_keys:
                if key in by_name:
                    return by_name[key]
        if normalized in alias_keys and normalize_exercise_name(canonical) in by_name:
            return by_name[normalize_exercise_name(canonical)]

    words = normalized.split()
    for pr in pr_metrics:
        pr_words = normalize_exercise_name(pr.exercise).split()
        overlap = [w for w in words if w in pr_words]
        if overlap and len(overlap) >= len(words) * 0.5:
            return pr

    return None


def recommend_weight_from_pr(
    pr: PRMetric,
    goal: str,
    now: datetime,
    weight_unit: str = "lbs",
) -> RecommendedWeight:
    """Working weight at the goal's target %1RM, with confidence by PR age."""
    goals = load_dictionary("workout_plans")["goals"]
    target = (goals.get(goal) or goals[DEFAULT_GOAL])["percent_of_max"]["target"]

    estimated_max = pr.max_weight
    if pr.reps > 1:
        estimated_max = pr.max_weight * (1 + pr.reps / 30)

    days_since = _days_between(pr.date, now)
    if days_since > 90:
        confidence = "low"
    elif days_since > 30:
        confidence = "medium"
    else:
        confidence = "high"

    return RecommendedWeight(
        value=round_to_increment(estimated_max * target / 100),
        unit=weight_unit,
        based_on="pr",
        confidence=confidence,
        pr_weight=pr.max_weight,
        percentage_of_max=target,
    )


def recent_working_weights(
    exercise_name: str,
    sessions: List[WorkoutSession],
    now: datetime,
    days: int = RECENT_WEIGHTS_DAYS,
):
    """(average, count) of loaded sets for the exercise in the last `days`, or None."""
    normalized = normalize_exercise_name(exercise_name)
    cutoff = now - timedelta(days=days)

    weights = []
    for session in sessions:
        if _session_start(session) < cutoff:
            continue
        for ex in session.exercises:
            if normalize_exercise_name(ex.name_raw) != normalized:
                continue
            weights.extend(w for w in (parse_weight(s.weight_text) for s in ex.sets) if w > 0)

    if not weights:
        return None
    return sum(weights) / len(weights), len(weights)


# =============================================================================
# Entry point
# =============================================================================


def execute_plan_intent(
    intent: PlanIntent,
    sessions: List[WorkoutSession],
    now: Optional[datetime] = None,
    template_lookup: Optional[MuscleTemplateLookup] = None,
    recent_training_hours: float = RECENT_TRAINING_HOURS,
    weight_unit: str = "lbs",
) -> WorkoutPlan:
    """
    Build a workout plan for a validated Plan intent.

    Args:
        intent: Plan intent (all fields optional)
        sessions: Session history; soft-deleted sessions are ignored
        now: Reference time for recency windows (defaults to the local clock)
        template_lookup: Muscle templates used to find last training days
        recent_training_hours: Exercises trained within this window are avoided
        weight_unit: Unit attached to weight targets

    Returns:
        WorkoutPlan
    """
    sessions = active_sessions(sessions)
    now = now or datetime.now()
    if now.tzinfo is not None:
        now = now.replace(tzinfo=None)

    tables = load_dictionary("workout_plans")
    focus = intent.focus or DEFAULT_FOCUS
    goal = intent.goal or DEFAULT_GOAL
    duration = intent.duration_minutes or DEFAULT_DURATION_MINUTES
    include_weights = bool(intent.include_weights)
    requested = list(intent.requested_exercises or [])
    requested_keys = {normalize_exercise_name(r) for r in requested}

    goal_config = tables["goals"].get(goal) or tables["goals"][DEFAULT_GOAL]
    pr_metrics = calculate_pr_metrics(sessions) if include_weights else []

    template_names = [t["name"] for t in tables["focus_templates"].get(focus) or tables["focus_templates"][DEFAULT_FOCUS]]
    if requested:
        template_names = requested + [n for n in template_names if normalize_exercise_name(n) not in requested_keys]

    basis = PlanBasis(pr_data=[pr.to_dict() for pr in pr_metrics] if include_weights else None)
    if focus in LAST_DAY_PATTERNS:
        attr, groups = LAST_DAY_PATTERNS[focus]
        setattr(basis, attr, find_last_training_day(groups, sessions, template_lookup))

    available = []
    for name in template_names:
        if normalize_exercise_name(name) not in requested_keys and was_trained_recently(
            name, sessions, now, recent_training_hours
        ):
            basis.exercises_avoided.append(name)
            continue
        available.append(name)

    count = min(max(3, math.floor(duration / 15)), 5)
    selected = available[:count] if len(available) >= 3 else template_names[:count]
    is_generic = len(sessions) < MIN_HISTORY_SESSIONS or len(selected) < count

    rationale = []
    if is_generic:
        rationale.append("This is a generic plan since you have limited workout history.")
    else:
        rationale.append(
            f"Based on your recent training, avoiding exercises trained within the last "
            f"{format_number(recent_training_hours)} hours."
        )
    if basis.last_days:
        rationale.append(f"Your {', '.join(basis.last_days)}.")
    rationale.append(f"Focus: {focus}, Goal: {goal}, Duration: ~{format_number(duration)} minutes")

    with_weights: List[str] = []
    without_weights: List[str] = []
    exercises = []

    for name in selected:
        planned = PlanExercise(
            exercise=name,
            sets=goal_config["sets"],
            reps=goal_config["rep_range"],
            intensity=goal_config["intensity"],
        )

        if include_weights:
            pr = find_pr_for_exercise(name, pr_metrics)
            if pr is not None:
                planned.recommended_weight = recommend_weight_from_pr(pr, goal, now, weight_unit)
                lift = f"{format_number(pr.max_weight)} {weight_unit} × {pr.reps} reps"
                if planned.recommended_weight.confidence == "low":
                    planned.notes = f"Based on {lift} ({_days_between(pr.date, now)} days ago - consider retesting)"
                else:
                    planned.notes = f"Based on your PR: {lift}"
                with_weights.append(name)
            else:
                recent = recent_working_weights(name, sessions, now)
                if recent is not None:
                    average, weight_count = recent
                    planned.recommended_weight = RecommendedWeight(
                        value=round_to_increment(average),
                        unit=weight_unit,
                        based_on="recent",
                        confidence="medium" if weight_count >= 3 else "low",
                    )
                    planned.notes = f"Based on recent working weight avg: {average:.0f} {weight_unit}"
                    with_weights.append(name)
                else:
                    planned.notes = "No history - start light and build up"
                    without_weights.append(name)

        exercises.append(planned)

    if include_weights:
        if with_weights:
            target = goal_config["percent_of_max"]["target"]
            rationale.append(f"Weight recommendations are ~{target}% of your estimated 1RM for {goal} training.")
            rationale.append(f"Personalized weights for: {', '.join(with_weights)}.")
            if without_weights:
                rationale.append(f"No data for: {', '.join(without_weights)} - start light.")
        else:
            rationale.append("Could not calculate personalized weights - no matching PR data found.")

    logger.info(
        f"Planned {len(exercises)} exercises (focus={focus}, goal={goal}, "
        f"avoided={len(basis.exercises_avoided)}, weights={len(with_weights)})"
    )

    return WorkoutPlan(
        title=f"{focus.capitalize()} {goal.capitalize()} Workout",
        rationale=rationale,
        exercises=exercises,
        based_on_data=basis,
        is_generic=is_generic,
        has_personalized_weights=bool(with_weights),
    )
