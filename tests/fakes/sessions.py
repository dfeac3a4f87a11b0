"""
Builders for workout session test data.

Usage:
    from tests.fakes import make_session, ex, contrib

    session = make_session(
        "2024-12-19",
        [
            ("Bench Press", [(5, "225"), (5, "225")]),
            ex("Dips", [(10, "bodyweight")], contributions=[contrib("Chest", 1.0, True)]),
        ],
    )
"""

from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Union

from domain.models import MuscleContribution, WorkoutExercise, WorkoutSession, WorkoutSet


FIXED_TIMESTAMP = "2024-01-01T00:00:00+00:00"

SetSpec = Tuple[int, str]
ExerciseSpec = Union[Tuple[str, Sequence[SetSpec]], Dict[str, Any]]


def contrib(muscle_group: str, fraction: float = 1.0, is_direct: Optional[bool] = None) -> MuscleContribution:
    return MuscleContribution(muscle_group=muscle_group, fraction=fraction, is_direct=is_direct)


def ex(
    name: str,
    sets: Sequence[SetSpec],
    primary: Optional[str] = None,
    contributions: Optional[List[MuscleContribution]] = None,
) -> Dict[str, Any]:
    """Exercise spec with optional muscle data."""
    return {"name": name, "sets": sets, "primary": primary, "contributions": contributions}


def make_session(
    performed_on: str,
    exercises: Iterable[ExerciseSpec] = (),
    session_id: Optional[str] = None,
    deleted_at: Optional[str] = None,
) -> WorkoutSession:
    """
    Build a WorkoutSession with deterministic ids and timestamps.

    Each exercise is either a `(name, [(reps, weight_text), ...])` tuple or a
    dict from ex().
    """
    session_id = session_id or f"session-{performed_on}"
    built = []
    for i, spec in enumerate(exercises):
        if isinstance(spec, tuple):
            spec = ex(*spec)
        exercise_id = f"{session_id}-ex{i}"
        built.append(
            WorkoutExercise(
                id=exercise_id,
                session_id=session_id,
                name_raw=spec["name"],
                primary_muscle_group=spec["primary"],
                muscle_contributions=spec["contributions"],
                sets=[
                    WorkoutSet(
                        id=f"{exercise_id}-set{j}",
                        exercise_id=exercise_id,
                        set_index=j,
                        reps=reps,
                        weight_text=weight,
                        is_bodyweight="bodyweight" in weight.lower(),
                        created_at=FIXED_TIMESTAMP,
                        updated_at=FIXED_TIMESTAMP,
                    )
                    for j, (reps, weight) in enumerate(spec["sets"])
                ],
                created_at=FIXED_TIMESTAMP,
                updated_at=FIXED_TIMESTAMP,
            )
        )

    return WorkoutSession(
        id=session_id,
        performed_on=performed_on,
        exercises=built,
        created_at=FIXED_TIMESTAMP,
        updated_at=FIXED_TIMESTAMP,
        deleted_at=deleted_at,
    )


def sequential_ids(prefix: str = "id"):
    """Id factory yielding prefix-1, prefix-2, ..."""
    counter = iter(range(1, 1_000_000))
    return lambda: f"{prefix}-{next(counter)}"


def wire(sessions: Iterable[WorkoutSession]) -> List[Dict[str, Any]]:
    """Sessions as camelCase JSON, the way API clients send them."""
    return [s.model_dump(by_alias=True, mode="json", exclude_none=True) for s in sessions]
