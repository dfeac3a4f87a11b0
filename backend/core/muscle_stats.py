"""
Muscle-group volume aggregation.

Walks a session list and produces:
- markedDates: total sets per performed_on date (calendar heat map)
- global workout stats (distinct days, averages, most common exercise)
- per muscle group weekly set breakdowns keyed by ISO week

Set accounting per exercise and contribution:
- direct:     sets, only for contributions marked is_direct
- fractional: sets * fraction, for every contribution
- total:      sets, once per exercise per group, however many
              contributions point at that group

Exercises with no resolvable contributions go to the uncategorized bucket.
They never create an "Unknown" muscle group.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional

from domain.models import WorkoutSession
from application.ports import MuscleTemplateLookup
from backend.core.dictionaries import load_dictionary
from backend.core.muscle_templates import ensure_muscle_contributions
from backend.core.training_math import (
    DEFAULT_BODYWEIGHT,
    active_sessions,
    compute_exercise_volume,
    format_number,
    iso_week_for_date,
)

logger = logging.getLogger(__name__)

SET_COUNT_MODES = ("direct", "fractional", "total")

OPTIMAL_SET_RECOMMENDATIONS = load_dictionary("volume_guidelines")


# =============================================================================
# Result types
# =============================================================================


@dataclass
class WeeklySetsBreakdown:
    direct: Dict[str, float] = field(default_factory=dict)
    fractional: Dict[str, float] = field(default_factory=dict)
    total: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"direct": dict(self.direct), "fractional": dict(self.fractional), "total": dict(self.total)}


@dataclass
class MuscleGroupStat:
    total_volume: float = 0.0
    total_volume_direct: float = 0.0
    total_volume_allocated: float = 0.0
    average_volume: float = 0.0
    average_volume_direct: float = 0.0
    average_volume_allocated: float = 0.0
    weekly_sets: WeeklySetsBreakdown = field(default_factory=WeeklySetsBreakdown)

    def sets_for_week(self, week: str, mode: str = "fractional") -> float:
        """Set count for a week under the given counting mode."""
        if mode not in SET_COUNT_MODES:
            raise ValueError(f"Unknown set count mode: {mode}")
        return getattr(self.weekly_sets, mode).get(week, 0)

    def to_dict(self) -> dict:
        return {
            "totalVolume": self.total_volume,
            "totalVolumeDirect": self.total_volume_direct,
            "totalVolumeAllocated": self.total_volume_allocated,
            "averageVolume": self.average_volume,
            "averageVolumeDirect": self.average_volume_direct,
            "averageVolumeAllocated": self.average_volume_allocated,
            "weeklySets": self.weekly_sets.to_dict(),
        }


@dataclass
class UncategorizedStats:
    weekly_sets: Dict[str, int] = field(default_factory=dict)
    weekly_exercise_count: Dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"weeklySets": dict(self.weekly_sets), "weeklyExerciseCount": dict(self.weekly_exercise_count)}


@dataclass
class WorkoutStats:
    total_workout_days: int = 0
    most_common_exercise: str = "N/A"
    average_exercises_per_day: float = 0.0
    average_sets_per_day: float = 0.0
    muscle_group_stats: Dict[str, MuscleGroupStat] = field(default_factory=dict)
    uncategorized: UncategorizedStats = field(default_factory=UncategorizedStats)

    def to_dict(self) -> dict:
        return {
            "totalWorkoutDays": self.total_workout_days,
            "mostCommonExercise": self.most_common_exercise,
            "averageExercisesPerDay": self.average_exercises_per_day,
            "averageSetsPerDay": self.average_sets_per_day,
            "muscleGroupStats": {g: s.to_dict() for g, s in self.muscle_group_stats.items()},
            "uncategorized": self.uncategorized.to_dict(),
        }


@dataclass
class StatsResult:
    workout_stats: WorkoutStats
    marked_dates: Dict[str, int]
    current_week: str

    def to_dict(self) -> dict:
        return {
            "workoutStats": self.workout_stats.to_dict(),
            "markedDates": dict(self.marked_dates),
            "currentWeek": self.current_week,
        }


# =============================================================================
# Aggregation
# =============================================================================


def calculate_stats(
    sessions: Iterable[WorkoutSession],
    current_week: str,
    template_lookup: Optional[MuscleTemplateLookup] = None,
    bodyweight: float = DEFAULT_BODYWEIGHT,
) -> StatsResult:
    """
    Aggregate sessions into workout and muscle-group statistics.

    Args:
        sessions: Session history; soft-deleted sessions are skipped
        current_week: ISO week identifier (e.g. "2024-W51") echoed on the result
        template_lookup: Optional template source for exercises without
            stored contributions
        bodyweight: Load used for bodyweight and "weighted" exercise volume

    Returns:
        StatsResult with workout stats and sets per day
    """
    sessions = active_sessions(sessions)

    marked_dates: Dict[str, int] = {}
    exercise_frequency: Dict[str, int] = {}
    workout_days = set()
    total_exercises = 0
    total_sets = 0

    group_stats: Dict[str, MuscleGroupStat] = {}
    instance_counts: Dict[str, int] = {}
    uncategorized = UncategorizedStats()

    for session in sessions:
        workout_days.add(session.performed_on)
        marked_dates[session.performed_on] = marked_dates.get(session.performed_on, 0) + session.total_sets
        week = iso_week_for_date(session.performed_on)

        for ex in session.exercises:
            set_count = ex.set_count
            total_sets += set_count
            total_exercises += 1

            key = ex.name_raw.lower()
            exercise_frequency[key] = exercise_frequency.get(key, 0) + 1

            contributions = ensure_muscle_contributions(ex, template_lookup)
            if not contributions:
                uncategorized.weekly_sets[week] = uncategorized.weekly_sets.get(week, 0) + set_count
                uncategorized.weekly_exercise_count[week] = uncategorized.weekly_exercise_count.get(week, 0) + 1
                continue

            volume = compute_exercise_volume(ex, bodyweight)
            groups_seen = set()
            direct_groups = set()

            for contrib in contributions:
                group = contrib.muscle_group
                stat = group_stats.setdefault(group, MuscleGroupStat())
                weekly = stat.weekly_sets
                for bucket in (weekly.direct, weekly.fractional, weekly.total):
                    bucket.setdefault(week, 0)

                if contrib.counts_as_direct:
                    weekly.direct[week] += set_count
                    direct_groups.add(group)
                weekly.fractional[week] += set_count * contrib.fraction
                stat.total_volume_allocated += volume * contrib.fraction

                if group not in groups_seen:
                    groups_seen.add(group)
                    weekly.total[week] += set_count
                    stat.total_volume += volume
                    instance_counts[group] = instance_counts.get(group, 0) + 1

            for group in direct_groups:
                group_stats[group].total_volume_direct += volume

    for group, stat in group_stats.items():
        n = instance_counts.get(group, 0)
        if n:
            stat.average_volume = stat.total_volume / n
            stat.average_volume_direct = stat.total_volume_direct / n
            stat.average_volume_allocated = stat.total_volume_allocated / n

    most_common = "N/A"
    best_count = 0
    for name, count in exercise_frequency.items():
        if count > best_count:
            most_common, best_count = name, count

    days = len(workout_days)
    workout_stats = WorkoutStats(
        total_workout_days=days,
        most_common_exercise=most_common,
        average_exercises_per_day=total_exercises / days if days else 0,
        average_sets_per_day=total_sets / days if days else 0,
        muscle_group_stats=group_stats,
        uncategorized=uncategorized,
    )

    logger.debug(
        f"Aggregated {len(sessions)} sessions into {len(group_stats)} muscle groups "
        f"({sum(uncategorized.weekly_exercise_count.values())} uncategorized exercises)"
    )

    return StatsResult(workout_stats=workout_stats, marked_dates=marked_dates, current_week=current_week)


def get_empty_stats() -> WorkoutStats:
    """Zero-valued stats for use before any data exists."""
    return WorkoutStats()


# =============================================================================
# Volume guidelines
# =============================================================================


def _round1(value: float) -> float:
    return math.floor(value * 10 + 0.5) / 10


def _range_bounds(text: str) -> List[int]:
    return [int(part) for part in text.split("-")]


def get_volume_status(muscle_group: str, weekly_sets: float, mode: str = "fractional") -> str:
    """
    Guideline message for a muscle group's weekly set count.

    Args:
        muscle_group: e.g. "Chest"
        weekly_sets: Sets this week under `mode`
        mode: "direct", "fractional" or "total"

    Returns:
        Status sentence, or "No Guideline" for groups without a recommendation
    """
    label = f"{mode} sets"

    if weekly_sets == 0:
        return f"😴 No gains: Time to rise and shine in the gym! Add at least a few {label}."

    guideline = OPTIMAL_SET_RECOMMENDATIONS.get(muscle_group)
    if guideline is None:
        return "No Guideline"

    min_sets = _range_bounds(guideline["min"])[0]
    optimal_min, optimal_max = _range_bounds(guideline["optimal"])[:2]
    max_sets = _range_bounds(guideline["upper"])[0]

    sets = _round1(weekly_sets)

    if sets < min_sets:
        diff = format_number(_round1(min_sets - sets))
        return (
            f"😬 Too Low: Your muscles are snoozing, pump up the volume! "
            f"Add {diff} {label} to reach the minimum effective range."
        )
    if min_sets <= sets < min_sets + 0.5:
        diff = format_number(_round1(optimal_min - sets))
        return f"👍 Minimum reached: Welcome to the gains club! Add {diff} more {label} to hit the lower optimal threshold."
    if min_sets < sets < optimal_min:
        diff = format_number(_round1(optimal_min - sets))
        return f"🚀 Almost there: Just {diff} more {label} and you'll be flexin' like a pro!"
    if optimal_min <= sets < optimal_min + 0.5:
        diff = format_number(_round1(optimal_max - sets))
        return f"🎉 Lower optimal reached: Your gains are getting serious! Add {diff} more {label} for maximum benefits."
    if optimal_min < sets < optimal_max:
        return f"💪 Optimal: Gains on point, keep rocking those {label}!"
    if optimal_max <= sets < optimal_max + 0.5:
        return f"🎊 Upper optimal reached: Maximum gains unlocked! You're right on target with your {label}."
    if optimal_max < sets <= max_sets:
        diff = format_number(_round1(sets - optimal_max))
        return f"😎 Overachiever: Crushing it, but maybe ease off by {diff} {label} to stay in the optimal zone."
    diff = format_number(_round1(sets - max_sets))
    return f"⚠️ Danger: Overtraining detected! Reduce by {diff} {label} to get back to safe territory."
