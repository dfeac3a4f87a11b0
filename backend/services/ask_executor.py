"""
Deterministic executor for Ask mode intents.

Given an already-validated Ask intent and the session history, compute an
answer sentence plus structured data for a card. Nothing here raises for
missing data: a failed lookup is a sentence, with suggestions attached when
the exercise name could not be resolved.

Two intents are not answered here. `general_chat` and
`muscle_group_exercises` return a context payload flagged with
`needs_llm_response`; ConversationalResponder turns that into text.
"""

import logging
from dataclasses import dataclass, field, fields
from datetime import date, datetime, time, timedelta
from typing import Any, Dict, List, Optional

from rapidfuzz import fuzz, process

from domain.models import WorkoutExercise, WorkoutSession
from application.ports import MuscleTemplateLookup
from backend.core.dictionaries import load_dictionary
from backend.core.exercise_resolver import (
    calculate_similarity,
    find_best_match,
    find_matching_exercises,
    get_all_exercise_names,
    normalize_exercise_name,
    resolve_exercise_alias,
)
from backend.core.muscle_stats import calculate_stats
from backend.core.pr_metrics import calculate_pr_metrics
from backend.core.training_math import (
    DEFAULT_BODYWEIGHT,
    active_sessions,
    calculate_e1rm,
    compute_exercise_volume,
    format_long_date,
    format_number,
    format_numeric_date,
    format_short_date,
    iso_week_for_date,
    parse_weight,
)
from backend.core.workout_sessions import sort_sessions_by_date_desc
from backend.services.intent_schemas import (
    BestExerciseIntent,
    ExerciseAlternativeIntent,
    ExerciseProgressIntent,
    GeneralChatIntent,
    LastExerciseDateIntent,
    LastExerciseDetailsIntent,
    LastSessionSummaryIntent,
    MuscleGroupExercisesIntent,
    VolumeSummaryIntent,
    WorkoutRecommendationIntent,
)

logger = logging.getLogger(__name__)

NO_DATA_ANSWER = "You don't have any workout data yet. Start logging workouts to see your progress!"

RECOMMENDATION_GROUPS = ("chest", "back", "shoulders", "legs", "arms")
MUSCLE_GROUP_FUZZY_CUTOFF = 80


# =============================================================================
# Result types
# =============================================================================


@dataclass
class AskData:
    """Structured payload behind an answer. Unset fields are omitted on the wire."""

    date: Optional[str] = None
    exercise: Optional[str] = None
    matched_exercise: Optional[str] = None
    sets: Optional[List[Dict[str, Any]]] = None
    top_set: Optional[Dict[str, Any]] = None
    best_weight: Optional[float] = None
    best_reps: Optional[int] = None
    best_e1rm: Optional[float] = None
    best_volume: Optional[float] = None
    sets_count: Optional[int] = None
    session_date: Optional[str] = None
    session_exercises: Optional[List[Dict[str, Any]]] = None
    suggestions: Optional[List[str]] = None
    progress_data: Optional[Dict[str, Any]] = None
    sources: List[str] = field(default_factory=list)
    needs_llm_response: bool = False
    llm_context: Optional[Dict[str, Any]] = None

    _WIRE_NAMES = {
        "needs_llm_response": "_needsLLMResponse",
        "llm_context": "_llmContext",
    }

    def to_dict(self) -> Dict[str, Any]:
        out = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None or (f.name == "needs_llm_response" and not value):
                continue
            head, *rest = f.name.split("_")
            key = self._WIRE_NAMES.get(f.name, head + "".join(p.capitalize() for p in rest))
            out[key] = value
        return out


@dataclass
class AskResult:
    answer_text: str
    data: AskData = field(default_factory=AskData)

    def to_dict(self) -> Dict[str, Any]:
        return {"answerText": self.answer_text, "data": self.data.to_dict()}


# =============================================================================
# Helpers
# =============================================================================


def _not_found(query: str, suggestions: List[str]) -> AskResult:
    suggestion_text = f" Did you mean: {', '.join(suggestions)}?" if suggestions else ""
    return AskResult(
        answer_text=f'I couldn\'t find any workouts for "{query}".{suggestion_text}',
        data=AskData(exercise=query, suggestions=suggestions),
    )


def _session_start(session: WorkoutSession) -> datetime:
    return datetime.combine(date.fromisoformat(session.performed_on), time())


def _days_since(session: WorkoutSession, now: datetime) -> int:
    return (now - _session_start(session)) // timedelta(days=1)


def _latest_occurrence(occurrences):
    """Most recent (session, exercise) pair; the first one wins on equal dates."""
    latest = None
    for session, ex in occurrences:
        if latest is None or session.performed_on > latest[0].performed_on:
            latest = (session, ex)
    return latest


def _top_set(sets: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Heaviest set, ties broken by reps."""
    if not sets:
        return None
    best = sets[0]
    for current in sets[1:]:
        current_weight = parse_weight(current["weight"])
        best_weight = parse_weight(best["weight"])
        if current_weight > best_weight or (current_weight == best_weight and current["reps"] > best["reps"]):
            best = current
    return best


def _muscle_group_table():
    return load_dictionary("muscle_group_exercises")


# =============================================================================
# Intent handlers
# =============================================================================


def _last_exercise_date(intent: LastExerciseDateIntent, sessions, ctx) -> AskResult:
    found = find_matching_exercises(intent.exercise, sessions)
    if not found.occurrences:
        return _not_found(intent.exercise, found.suggestions)

    session, _ = _latest_occurrence(found.occurrences)
    return AskResult(
        answer_text=f"You last did {found.matched_name} on {format_long_date(session.performed_on)}.",
        data=AskData(
            date=session.performed_on,
            exercise=intent.exercise,
            matched_exercise=found.matched_name,
            sources=[session.id],
        ),
    )


def _last_exercise_details(intent: LastExerciseDetailsIntent, sessions, ctx) -> AskResult:
    found = find_matching_exercises(intent.exercise, sessions)
    if not found.occurrences:
        return _not_found(intent.exercise, found.suggestions)

    session, ex = _latest_occurrence(found.occurrences)
    sets = [{"reps": s.reps, "weight": s.weight_text} for s in ex.sets]
    breakdown = ", ".join(f"{s['reps']} reps @ {s['weight']}" for s in sets)

    return AskResult(
        answer_text=f"Last time you did {found.matched_name}, you performed {len(sets)} sets: {breakdown}.",
        data=AskData(
            date=session.performed_on,
            exercise=intent.exercise,
            matched_exercise=found.matched_name,
            sets=sets,
            top_set=_top_set(sets),
            sources=[session.id],
        ),
    )


def _best_exercise(intent: BestExerciseIntent, sessions, ctx) -> AskResult:
    found = find_matching_exercises(intent.exercise, sessions)
    if not found.occurrences:
        return _not_found(intent.exercise, found.suggestions)

    name = found.matched_name
    key = normalize_exercise_name(name)
    unit = ctx["weight_unit"]
    pr = next((m for m in calculate_pr_metrics(sessions) if normalize_exercise_name(m.exercise) == key), None)

    if pr is None:
        return AskResult(
            answer_text=f'I couldn\'t find any PR data for "{name}".',
            data=AskData(exercise=intent.exercise, matched_exercise=name),
        )

    if intent.metric == "weight":
        return AskResult(
            answer_text=(
                f"Your best {name} is {format_number(pr.max_weight)} {unit} for {pr.reps} reps, "
                f"achieved on {format_numeric_date(pr.date)}."
            ),
            data=AskData(
                exercise=intent.exercise,
                matched_exercise=name,
                best_weight=pr.max_weight,
                best_reps=pr.reps,
                date=pr.date,
            ),
        )

    if intent.metric == "e1rm":
        e1rm = calculate_e1rm(pr.max_weight, pr.reps)
        return AskResult(
            answer_text=(
                f"Your estimated 1RM for {name} is {e1rm:.1f} {unit} "
                f"(based on {format_number(pr.max_weight)} {unit} × {pr.reps} reps)."
            ),
            data=AskData(
                exercise=intent.exercise,
                matched_exercise=name,
                best_e1rm=e1rm,
                best_weight=pr.max_weight,
                best_reps=pr.reps,
                date=pr.date,
            ),
        )

    # volume
    best_volume = 0.0
    best_session = None
    for session, ex in found.occurrences:
        volume = compute_exercise_volume(ex, ctx["bodyweight"])
        if volume > best_volume:
            best_volume, best_session = volume, session

    if best_session is None:
        return AskResult(
            answer_text=f'I couldn\'t calculate volume for "{name}".',
            data=AskData(exercise=intent.exercise, matched_exercise=name),
        )

    return AskResult(
        answer_text=f"Your best volume for {name} is {best_volume:.0f} {unit} (from {best_session.performed_on}).",
        data=AskData(
            exercise=intent.exercise,
            matched_exercise=name,
            best_volume=best_volume,
            date=best_session.performed_on,
            sources=[best_session.id],
        ),
    )


def _volume_window(intent: VolumeSummaryIntent, now: datetime):
    if intent.range == "week":
        return now - timedelta(days=7), now
    if intent.range == "month":
        return now - timedelta(days=30), now
    if intent.range == "custom" and intent.start and intent.end:
        try:
            start = datetime.combine(date.fromisoformat(intent.start), time())
            end = datetime.combine(date.fromisoformat(intent.end), time())
        except ValueError:
            return None
        return start, end
    return None


def _volume_summary(intent: VolumeSummaryIntent, sessions, ctx) -> AskResult:
    now = ctx["now"]
    window = _volume_window(intent, now)
    if window is None:
        return AskResult(answer_text="Invalid date range for volume summary.")

    start, end = window
    in_range = [s for s in sessions if start <= _session_start(s) <= end]
    if not in_range:
        return AskResult(answer_text="No workouts found in the specified time range.")

    total_sets = 0
    sources: List[str] = []
    matched_name = None

    if intent.exercise:
        resolution = find_best_match(intent.exercise, in_range)
        if resolution.matched_name is None:
            suggestion_text = (
                f" Did you mean: {', '.join(resolution.suggestions)}?" if resolution.suggestions else ""
            )
            return AskResult(
                answer_text=f'I couldn\'t find "{intent.exercise}" in your recent workouts.{suggestion_text}',
                data=AskData(exercise=intent.exercise, suggestions=resolution.suggestions),
            )
        matched_name = resolution.matched_name
        key = normalize_exercise_name(matched_name)
        for session in in_range:
            for ex in session.exercises:
                if normalize_exercise_name(ex.name_raw) == key:
                    total_sets += ex.set_count
                    sources.append(session.id)
    elif intent.muscle_group:
        stats = calculate_stats(
            in_range,
            current_week=iso_week_for_date(now.date().isoformat()),
            template_lookup=ctx["template_lookup"],
            bodyweight=ctx["bodyweight"],
        )
        wanted = intent.muscle_group.strip().lower()
        for group, group_stats in stats.workout_stats.muscle_group_stats.items():
            if group.lower() == wanted:
                total_sets = int(sum(group_stats.weekly_sets.direct.values()))
                break
    else:
        for session in in_range:
            total_sets += session.total_sets
            sources.append(session.id)

    range_label = {"week": "last week", "month": "last month"}.get(intent.range, "specified period")
    if matched_name:
        target = f"for {matched_name}"
    elif intent.muscle_group:
        target = f"for {intent.muscle_group}"
    else:
        target = "total"

    return AskResult(
        answer_text=f"You performed {total_sets} sets {target} in the {range_label}.",
        data=AskData(sets_count=total_sets, matched_exercise=matched_name, sources=sources),
    )


def _last_session_summary(intent: LastSessionSummaryIntent, sessions, ctx) -> AskResult:
    last = sort_sessions_by_date_desc(sessions)[0]
    exercises = [
        {
            "name": ex.name_raw,
            "sets": ex.set_count,
            "reps": [s.reps for s in ex.sets],
            "weights": [s.weight_text for s in ex.sets],
        }
        for ex in last.exercises
    ]
    names = ", ".join(e["name"] for e in exercises)
    return AskResult(
        answer_text=(
            f"Your last workout was on {format_long_date(last.performed_on)}. "
            f"You did {len(exercises)} exercises: {names}."
        ),
        data=AskData(session_date=last.performed_on, session_exercises=exercises, sources=[last.id]),
    )


def _workout_recommendation(intent: WorkoutRecommendationIntent, sessions, ctx) -> AskResult:
    now = ctx["now"]
    table = _muscle_group_table()
    ordered = sort_sessions_by_date_desc(sessions)
    window_start = now - timedelta(days=7)

    groups_worked: Dict[str, int] = {}
    for session in ordered:
        if _session_start(session) < window_start:
            break
        for ex in session.exercises:
            name = normalize_exercise_name(ex.name_raw)
            for group, exercises in table.items():
                if any(
                    normalize_exercise_name(e) in name or name in normalize_exercise_name(e)
                    for e in exercises
                ):
                    groups_worked[group] = groups_worked.get(group, 0) + 1

    group_counts = sorted(
        ((g, groups_worked.get(g, 0)) for g in RECOMMENDATION_GROUPS),
        key=lambda pair: pair[1],
    )

    focus = intent.focus if intent.focus and intent.focus != "any" else None
    if focus and focus in table:
        group = focus
    else:
        group = group_counts[0][0]
    suggested = list(table.get(group, ())[:4])
    listed = ", ".join(suggested)

    days_since = _days_since(ordered[0], now)
    if days_since > 3:
        answer = (
            f"It's been {days_since} days since your last workout! Based on your history, "
            f"I'd suggest hitting {group}. Try: {listed}."
        )
    elif group_counts[0][1] == 0:
        answer = f"You haven't trained {group} this week. Consider hitting {group} today! Exercises: {listed}."
    else:
        answer = f"Based on your recent training, {group} could use some attention. Suggested exercises: {listed}."

    return AskResult(
        answer_text=answer,
        data=AskData(suggestions=suggested, sources=[s.id for s in ordered[:3]]),
    )


def _exercise_alternative(intent: ExerciseAlternativeIntent, sessions, ctx) -> AskResult:
    table = load_dictionary("exercise_alternatives")
    query = normalize_exercise_name(intent.exercise)

    matched = next((name for name in table if normalize_exercise_name(name) == query), None)

    if matched is None:
        canonical = resolve_exercise_alias(intent.exercise)
        if canonical and canonical in table:
            matched = canonical

    if matched is None:
        matched = next((name for name in table if calculate_similarity(intent.exercise, name) >= 0.5), None)

    if matched is not None:
        alternatives = list(table[matched])
        reason_text = (
            f' Since you mentioned "{intent.reason}", some of these might work better for your situation.'
            if intent.reason
            else ""
        )
        return AskResult(
            answer_text=f"Great alternatives to {matched}: {', '.join(alternatives[:4])}.{reason_text}",
            data=AskData(exercise=intent.exercise, matched_exercise=matched, suggestions=alternatives),
        )

    resolution = find_best_match(intent.exercise, sessions)
    if resolution.matched_name:
        tried = ", ".join(resolution.suggestions) or "check your exercise history for ideas"
        return AskResult(
            answer_text=(
                f'I don\'t have specific alternatives for "{intent.exercise}", but based on your history, '
                f"you might try similar exercises you've done: {tried}."
            ),
            data=AskData(exercise=intent.exercise, suggestions=resolution.suggestions),
        )

    return AskResult(
        answer_text=(
            f'I don\'t have alternatives for "{intent.exercise}" in my database. '
            "Try searching for exercises that target the same muscle group!"
        ),
        data=AskData(exercise=intent.exercise),
    )


def _progress_record(session: WorkoutSession, ex: WorkoutExercise) -> Dict[str, Any]:
    top_weight = 0.0
    top_reps = 0
    total_volume = 0.0
    for s in ex.sets:
        weight = parse_weight(s.weight_text)
        if weight > top_weight:
            top_weight, top_reps = weight, s.reps
        elif weight == top_weight and s.reps > top_reps:
            top_reps = s.reps
        total_volume += weight * s.reps
    return {
        "date": session.performed_on,
        "topWeight": top_weight,
        "topReps": top_reps,
        "totalVolume": total_volume,
        "sets": ex.set_count,
    }


def _exercise_progress(intent: ExerciseProgressIntent, sessions, ctx) -> AskResult:
    found = find_matching_exercises(intent.exercise, sessions)
    if not found.occurrences:
        return _not_found(intent.exercise, found.suggestions)

    name = found.matched_name
    unit = ctx["weight_unit"]
    now = ctx["now"]

    records = sorted(
        (_progress_record(session, ex) for session, ex in found.occurrences),
        key=lambda r: r["date"],
    )

    if len(records) < 2:
        return AskResult(
            answer_text=(
                f"You've only done {name} {'once' if len(records) == 1 else 'never'}. "
                "Keep training and I'll be able to track your progress!"
            ),
            data=AskData(exercise=intent.exercise, matched_exercise=name),
        )

    def since(days: int):
        cutoff = now - timedelta(days=days)
        return [r for r in records if datetime.combine(date.fromisoformat(r["date"]), time()) >= cutoff]

    relevant = records
    if intent.timeframe == "month":
        relevant = since(30)
    elif intent.timeframe == "recent":
        recent = since(14)
        relevant = recent if len(recent) >= 2 else records[-5:]
    if len(relevant) < 2:
        relevant = records[-5:]

    first, last = relevant[0], relevant[-1]

    weight_change = last["topWeight"] - first["topWeight"]
    weight_change_pct = round(weight_change / first["topWeight"] * 100, 1) if first["topWeight"] > 0 else 0.0
    first_e1rm = calculate_e1rm(first["topWeight"], first["topReps"])
    last_e1rm = calculate_e1rm(last["topWeight"], last["topReps"])
    e1rm_change = last_e1rm - first_e1rm
    e1rm_change_pct = round(e1rm_change / first_e1rm * 100, 1) if first_e1rm > 0 else 0.0

    label = {"month": "this month", "all_time": "overall"}.get(intent.timeframe, "recently")

    if e1rm_change > 0:
        if e1rm_change_pct >= 10:
            description = f"Your {name} is up significantly! 📈"
        elif e1rm_change_pct >= 5:
            description = f"Nice progress on {name}! 📈"
        else:
            description = f"Your {name} is trending up slightly. 📈"
    elif e1rm_change < 0:
        if e1rm_change_pct <= -10:
            description = f"Your {name} has dropped {label}. 📉 Could be fatigue or time for a deload."
        else:
            description = f"Your {name} is down slightly {label}. 📉 Normal fluctuation."
    else:
        description = f"Your {name} has been consistent {label}. ➡️"

    answer = f"{description}\n\n"
    answer += f"{format_short_date(first['date'])}: {format_number(first['topWeight'])} {unit} × {first['topReps']} reps\n"
    answer += f"{format_short_date(last['date'])}: {format_number(last['topWeight'])} {unit} × {last['topReps']} reps\n\n"

    if weight_change != 0:
        direction = "up" if weight_change > 0 else "down"
        sign = "+" if weight_change > 0 else ""
        pct_text = f"{weight_change_pct:.1f}" if first["topWeight"] > 0 else "0"
        answer += f"Top weight {direction} {format_number(abs(weight_change))} {unit} ({sign}{pct_text}%)"
    elif last["topReps"] != first["topReps"]:
        rep_change = last["topReps"] - first["topReps"]
        answer += f"Same weight, {'+' if rep_change > 0 else ''}{rep_change} reps"

    trend = "improving" if e1rm_change > 0 else "declining" if e1rm_change < 0 else "stable"

    return AskResult(
        answer_text=answer,
        data=AskData(
            exercise=intent.exercise,
            matched_exercise=name,
            progress_data={
                "sessionCount": len(relevant),
                "firstSession": first,
                "lastSession": last,
                "weightChange": weight_change,
                "weightChangePercent": weight_change_pct,
                "e1rmChange": e1rm_change,
                "e1rmChangePercent": e1rm_change_pct,
                "trend": trend,
            },
        ),
    )


def match_muscle_group(muscle_group: str):
    """
    Find a muscle group (or split) in the exercise table.

    Tries an exact key, then containment either way, then a typo-tolerant
    fuzzy match. Returns (group, exercises) or (None, None).
    """
    table = _muscle_group_table()
    wanted = muscle_group.lower().strip()
    if not wanted:
        return None, None

    if wanted in table:
        return wanted, list(table[wanted])

    for group, exercises in table.items():
        if wanted in group or group in wanted:
            return group, list(exercises)

    best = process.extractOne(wanted, list(table), scorer=fuzz.ratio, score_cutoff=MUSCLE_GROUP_FUZZY_CUTOFF)
    if best:
        group = best[0]
        logger.debug(f"Fuzzy muscle group match: '{wanted}' -> '{group}' ({best[1]:.0f})")
        return group, list(table[group])

    return None, None


def _muscle_group_exercises(intent: MuscleGroupExercisesIntent, sessions, ctx) -> AskResult:
    group, exercises = match_muscle_group(intent.muscle_group)
    exercises = exercises or []

    history = [normalize_exercise_name(n) for n in get_all_exercise_names(sessions)]
    done = [
        e for e in exercises
        if any(normalize_exercise_name(e) in h or h in normalize_exercise_name(e) for h in history)
    ]

    return AskResult(
        answer_text="",
        data=AskData(
            needs_llm_response=True,
            llm_context={
                "type": "muscle_group_exercises",
                "muscleGroup": group or intent.muscle_group,
                "suggestedExercises": exercises[:8],
                "exercisesUserHasDone": done[:5],
                "originalQuery": f"What exercises hit {intent.muscle_group}?",
            },
            suggestions=exercises if group else None,
        ),
    )


def _general_chat(intent: GeneralChatIntent, sessions, ctx) -> AskResult:
    ordered = sort_sessions_by_date_desc(sessions)
    last = ordered[0] if ordered else None

    return AskResult(
        answer_text="",
        data=AskData(
            needs_llm_response=True,
            llm_context={
                "type": "general_chat",
                "originalQuery": intent.original_query,
                "topic": intent.topic,
                "userContext": {
                    "totalWorkouts": len(sessions),
                    "daysSinceLastWorkout": _days_since(last, ctx["now"]) if last else None,
                    "recentExercises": [e.name_raw for e in last.exercises][:5] if last else [],
                    "lastWorkoutDate": last.performed_on if last else None,
                },
            },
        ),
    )


_HANDLERS = {
    "last_exercise_date": _last_exercise_date,
    "last_exercise_details": _last_exercise_details,
    "best_exercise": _best_exercise,
    "volume_summary": _volume_summary,
    "last_session_summary": _last_session_summary,
    "workout_recommendation": _workout_recommendation,
    "exercise_alternative": _exercise_alternative,
    "exercise_progress": _exercise_progress,
    "muscle_group_exercises": _muscle_group_exercises,
    "general_chat": _general_chat,
}


# =============================================================================
# Entry point
# =============================================================================


def execute_ask_intent(
    intent,
    sessions: List[WorkoutSession],
    now: Optional[datetime] = None,
    template_lookup: Optional[MuscleTemplateLookup] = None,
    bodyweight: float = DEFAULT_BODYWEIGHT,
    weight_unit: str = "lbs",
) -> AskResult:
    """
    Answer a validated Ask intent from the session history.

    Args:
        intent: One of the Ask intent models
        sessions: Session history; soft-deleted sessions are ignored
        now: Reference time for date windows (defaults to the local clock)
        template_lookup: Muscle templates for muscle-group volume questions
        bodyweight: Load used for bodyweight exercise volume
        weight_unit: Unit shown in answer text

    Returns:
        AskResult with answer text and card data
    """
    sessions = active_sessions(sessions)
    if not sessions:
        return AskResult(answer_text=NO_DATA_ANSWER)

    now = now or datetime.now()
    if now.tzinfo is not None:
        now = now.replace(tzinfo=None)

    handler = _HANDLERS.get(intent.type)
    if handler is None:
        return AskResult(answer_text="Unknown intent type.")

    ctx = {
        "now": now,
        "template_lookup": template_lookup,
        "bodyweight": bodyweight,
        "weight_unit": weight_unit,
    }
    result = handler(intent, sessions, ctx)
    logger.debug(f"Ask intent '{intent.type}' answered with {len(result.data.sources)} sources")
    return result
