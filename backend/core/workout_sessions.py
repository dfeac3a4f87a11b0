"""
Merging parsed exercises into the Session -> Exercise -> Set hierarchy.

Sessions are keyed by the exact `performed_on` string. Inputs are never
mutated: existing sessions that receive exercises are copied, and every
other session is returned as the same (immutable) object.
"""

import logging
import uuid
from collections import OrderedDict
from typing import Callable, Dict, Iterable, List, Optional

from domain.models import ParsedExercise, WorkoutExercise, WorkoutSession, WorkoutSet, utc_now_iso

logger = logging.getLogger(__name__)

IdFactory = Callable[[], str]


def _uuid() -> str:
    return str(uuid.uuid4())


def build_workout_exercise(
    parsed: ParsedExercise,
    session_id: str,
    exercise_id_factory: IdFactory = _uuid,
    set_id_factory: IdFactory = _uuid,
    now: Optional[str] = None,
) -> WorkoutExercise:
    """
    Build a WorkoutExercise and its sets from a ParsedExercise.

    Absent reps become 0 and absent weights become "". Muscle contributions
    pass through as-is, including None.
    """
    now = now or utc_now_iso()
    exercise_id = exercise_id_factory()

    sets = []
    for i in range(parsed.sets):
        weight_text = parsed.weights[i] if parsed.weights is not None else ""
        sets.append(
            WorkoutSet(
                id=set_id_factory(),
                exercise_id=exercise_id,
                set_index=i,
                reps=parsed.reps[i] if parsed.reps is not None else 0,
                weight_text=weight_text,
                is_bodyweight="bodyweight" in weight_text.lower(),
                created_at=now,
                updated_at=now,
            )
        )

    return WorkoutExercise(
        id=exercise_id,
        session_id=session_id,
        name_raw=parsed.exercise,
        primary_muscle_group=parsed.primary_muscle_group,
        muscle_contributions=parsed.muscle_contributions,
        sets=sets,
        created_at=now,
        updated_at=now,
    )


def merge_exercises_into_sessions(
    existing_sessions: Iterable[WorkoutSession],
    parsed_exercises: Iterable[ParsedExercise],
    session_id_factory: IdFactory = _uuid,
    exercise_id_factory: IdFactory = _uuid,
    set_id_factory: IdFactory = _uuid,
    now_factory: Callable[[], str] = utc_now_iso,
) -> List[WorkoutSession]:
    """
    Merge parsed exercises into sessions by exact date.

    Parsed exercises are grouped by `date` in first-seen order. A group whose
    date matches an existing session is appended to a copy of that session
    (with `updated_at` bumped). Other groups become new sessions appended at
    the end, in the order their dates first appeared.

    Args:
        existing_sessions: Current sessions; left untouched
        parsed_exercises: Normalized exercises from one model turn
        session_id_factory: Id source for new sessions
        exercise_id_factory: Id source for new exercises
        set_id_factory: Id source for new sets
        now_factory: Timestamp source for created_at/updated_at

    Returns:
        New list of sessions
    """
    merged = list(existing_sessions)
    now = now_factory()

    groups: "OrderedDict[str, List[ParsedExercise]]" = OrderedDict()
    for parsed in parsed_exercises:
        groups.setdefault(parsed.date, []).append(parsed)

    index_by_date: Dict[str, int] = {}
    for i, session in enumerate(merged):
        index_by_date.setdefault(session.performed_on, i)

    for date, group in groups.items():
        if date in index_by_date:
            i = index_by_date[date]
            session = merged[i]
            new_exercises = [
                build_workout_exercise(p, session.id, exercise_id_factory, set_id_factory, now)
                for p in group
            ]
            merged[i] = session.model_copy(
                update={"exercises": list(session.exercises) + new_exercises, "updated_at": now}
            )
            logger.debug(f"Appended {len(group)} exercises to session {session.id} ({date})")
        else:
            session_id = session_id_factory()
            merged.append(
                WorkoutSession(
                    id=session_id,
                    performed_on=date,
                    exercises=[
                        build_workout_exercise(p, session_id, exercise_id_factory, set_id_factory, now)
                        for p in group
                    ],
                    created_at=now,
                    updated_at=now,
                )
            )
            index_by_date[date] = len(merged) - 1
            logger.debug(f"Created session {session_id} for {date} with {len(group)} exercises")

    return merged


def sort_sessions_by_date_desc(sessions: Iterable[WorkoutSession]) -> List[WorkoutSession]:
    """New list ordered by `performed_on`, most recent first."""
    return sorted(sessions, key=lambda s: s.performed_on, reverse=True)
