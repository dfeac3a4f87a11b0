"""
Personal record (PR) calculation.

For each exercise (keyed by lowercased name) the best set is the one with
the highest parsed weight; equal weights are broken by higher reps.
"""

from dataclasses import dataclass
from typing import Dict, Iterable, List

from domain.models import WorkoutSession
from backend.core.training_math import active_sessions, parse_weight


@dataclass(frozen=True)
class PRMetric:
    """Best set for one exercise."""
    exercise: str  # display name from the first session that logged it
    max_weight: float
    reps: int
    date: str

    def to_dict(self) -> dict:
        return {
            "exercise": self.exercise,
            "maxWeight": self.max_weight,
            "reps": self.reps,
            "date": self.date,
        }


def calculate_pr_metrics(sessions: Iterable[WorkoutSession]) -> List[PRMetric]:
    """
    Calculate one PR per exercise across all (non-deleted) sessions.

    Examples:
        205 x 5 beats 205 x 4 (same weight, more reps)
        205 x 3 beats 195 x 5 (more weight always wins)

    Returns:
        PRMetric list in first-seen exercise order
    """
    best: Dict[str, PRMetric] = {}

    for session in active_sessions(sessions):
        for ex in session.exercises:
            key = ex.name_raw.lower()
            for s in ex.sets:
                weight = parse_weight(s.weight_text)
                current = best.get(key)
                if (
                    current is None
                    or weight > current.max_weight
                    or (weight == current.max_weight and s.reps > current.reps)
                ):
                    best[key] = PRMetric(
                        exercise=current.exercise if current else ex.name_raw,
                        max_weight=weight,
                        reps=s.reps,
                        date=session.performed_on,
                    )

    return list(best.values())


def filter_pr_metrics_by_search(metrics: List[PRMetric], search_query: str) -> List[PRMetric]:
    """Case-insensitive substring filter on exercise name. Blank query keeps all."""
    if not (search_query or "").strip():
        return list(metrics)
    q = search_query.lower()
    return [m for m in metrics if q in m.exercise.lower()]


def sort_pr_metrics_by_weight(metrics: List[PRMetric]) -> List[PRMetric]:
    return sorted(metrics, key=lambda m: m.max_weight, reverse=True)


def get_top_prs(metrics: List[PRMetric], count: int) -> List[PRMetric]:
    return sort_pr_metrics_by_weight(metrics)[:count]
