"""
Unit tests for backend/core/muscle_stats.py
"""

import pytest

from backend.core.muscle_stats import calculate_stats, get_empty_stats, get_volume_status
from backend.core.muscle_templates import TemplateMuscleLookup
from tests.fakes import contrib, ex, make_session


WEEK = "2024-W51"


def _stats(sessions, lookup=None, bodyweight=100):
    return calculate_stats(sessions, current_week=WEEK, template_lookup=lookup, bodyweight=bodyweight)


# =============================================================================
# Set counting
# =============================================================================


@pytest.mark.unit
class TestWeeklySets:
    """Test direct, fractional and total set counting."""

    def test_bench_press_fractional_counts(self):
        """Three bench sets: Chest 3/3/3, Arms 0/1.5/3."""
        sessions = [make_session("2024-12-19", [("Bench Press", [(5, "200")] * 3)])]

        stats = _stats(sessions, TemplateMuscleLookup()).workout_stats.muscle_group_stats

        chest = stats["Chest"].weekly_sets
        arms = stats["Arms"].weekly_sets
        assert (chest.direct[WEEK], chest.fractional[WEEK], chest.total[WEEK]) == (3, 3, 3)
        assert (arms.direct[WEEK], arms.fractional[WEEK], arms.total[WEEK]) == (0, 1.5, 3)

    def test_volume_splits(self):
        sessions = [make_session("2024-12-19", [("Bench Press", [(5, "200")] * 3)])]

        stats = _stats(sessions, TemplateMuscleLookup()).workout_stats.muscle_group_stats

        assert stats["Chest"].total_volume == 3000
        assert stats["Chest"].total_volume_direct == 3000
        assert stats["Chest"].total_volume_allocated == 3000
        assert stats["Arms"].total_volume == 3000
        assert stats["Arms"].total_volume_direct == 0
        assert stats["Arms"].total_volume_allocated == 1500

    def test_averages_per_instance(self):
        sessions = [
            make_session("2024-12-16", [ex("Bench Press", [(5, "100")], primary="Chest")]),
            make_session("2024-12-19", [ex("Bench Press", [(5, "300")], primary="Chest")]),
        ]

        chest = _stats(sessions).workout_stats.muscle_group_stats["Chest"]

        assert chest.total_volume == 2000
        assert chest.average_volume == 1000
        assert chest.average_volume_direct == 1000

    def test_repeated_group_counted_once_in_total(self):
        """Two contributions to one group add fractions but one total."""
        contributions = [contrib("Chest", 1.0, True), contrib("Chest", 0.5)]
        sessions = [make_session("2024-12-19", [ex("Press Variation", [(5, "100")] * 3, contributions=contributions)])]

        chest = _stats(sessions).workout_stats.muscle_group_stats["Chest"]

        assert chest.weekly_sets.direct[WEEK] == 3
        assert chest.weekly_sets.fractional[WEEK] == 4.5
        assert chest.weekly_sets.total[WEEK] == 3
        assert chest.total_volume == 1500
        assert chest.total_volume_allocated == 2250

    def test_weeks_kept_separate(self):
        sessions = [
            make_session("2024-12-12", [ex("Squat", [(5, "225")], primary="Quads")]),
            make_session("2024-12-19", [ex("Squat", [(5, "225")] * 2, primary="Quads")]),
        ]

        quads = _stats(sessions).workout_stats.muscle_group_stats["Quads"]

        assert quads.weekly_sets.direct == {"2024-W50": 1, WEEK: 2}

    def test_sets_for_week(self):
        sessions = [make_session("2024-12-19", [("Bench Press", [(5, "200")] * 3)])]
        arms = _stats(sessions, TemplateMuscleLookup()).workout_stats.muscle_group_stats["Arms"]

        assert arms.sets_for_week(WEEK) == 1.5
        assert arms.sets_for_week(WEEK, "total") == 3
        assert arms.sets_for_week("2024-W01", "direct") == 0
        with pytest.raises(ValueError):
            arms.sets_for_week(WEEK, "weighted")


@pytest.mark.unit
class TestUncategorized:
    def test_exercise_without_muscles(self):
        """Exercises with no template and no primary land in uncategorized."""
        sessions = [make_session("2024-12-19", [("Bicep Curl", [(10, "30")] * 3)])]

        stats = _stats(sessions, TemplateMuscleLookup()).workout_stats

        assert stats.muscle_group_stats == {}
        assert stats.uncategorized.weekly_sets == {WEEK: 3}
        assert stats.uncategorized.weekly_exercise_count == {WEEK: 1}


@pytest.mark.unit
class TestBodyweightVolume:
    def test_bodyweight_sets_use_bodyweight(self):
        sessions = [make_session("2024-12-19", [ex("Dips", [(10, "bodyweight")], primary="Chest")])]

        chest = _stats(sessions, bodyweight=80).workout_stats.muscle_group_stats["Chest"]

        assert chest.total_volume == 800

    def test_weighted_exercise_adds_bodyweight(self):
        sessions = [make_session("2024-12-19", [("Weighted Pull Up", [(5, "+25")])])]

        back = _stats(sessions, TemplateMuscleLookup()).workout_stats.muscle_group_stats["Back"]

        assert back.total_volume == 625


# =============================================================================
# Workout-level stats
# =============================================================================


@pytest.mark.unit
class TestWorkoutStats:
    def test_days_and_averages(self):
        sessions = [
            make_session("2024-12-16", [("Squat", [(5, "225")] * 3), ("Bench Press", [(5, "185")] * 3)]),
            make_session("2024-12-19", [("bench press", [(5, "185")] * 2), ("squat", [(5, "225")])]),
        ]

        stats = _stats(sessions).workout_stats

        assert stats.total_workout_days == 2
        assert stats.average_exercises_per_day == 2
        assert stats.average_sets_per_day == 4.5

    def test_most_common_exercise_lowercased_first_seen(self):
        """Ties go to the exercise seen first."""
        sessions = [
            make_session("2024-12-16", [("Squat", [(5, "225")]), ("Bench Press", [(5, "185")])]),
            make_session("2024-12-19", [("bench press", [(5, "185")]), ("SQUAT", [(5, "225")])]),
        ]

        assert _stats(sessions).workout_stats.most_common_exercise == "squat"

    def test_marked_dates_accumulate(self):
        sessions = [
            make_session("2024-12-19", [("Squat", [(5, "225")] * 3)], session_id="a"),
            make_session("2024-12-19", [("Row", [(8, "135")] * 2)], session_id="b"),
        ]

        result = _stats(sessions)

        assert result.marked_dates == {"2024-12-19": 5}
        assert result.workout_stats.total_workout_days == 1

    def test_soft_deleted_sessions_ignored(self):
        sessions = [
            make_session("2024-12-19", [("Squat", [(5, "225")])]),
            make_session("2024-12-18", [("Bench Press", [(5, "185")])], deleted_at="2024-12-19T00:00:00Z"),
        ]

        result = _stats(sessions)

        assert result.workout_stats.total_workout_days == 1
        assert "2024-12-18" not in result.marked_dates

    def test_empty_history(self):
        result = _stats([])

        assert result.workout_stats.total_workout_days == 0
        assert result.workout_stats.most_common_exercise == "N/A"
        assert result.workout_stats.average_sets_per_day == 0
        assert result.current_week == WEEK

    def test_get_empty_stats(self):
        stats = get_empty_stats()

        assert stats.most_common_exercise == "N/A"
        assert stats.muscle_group_stats == {}

    def test_to_dict_wire_keys(self):
        sessions = [make_session("2024-12-19", [("Bench Press", [(5, "200")] * 3)])]

        data = _stats(sessions, TemplateMuscleLookup()).to_dict()

        assert data["currentWeek"] == WEEK
        assert data["markedDates"] == {"2024-12-19": 3}
        chest = data["workoutStats"]["muscleGroupStats"]["Chest"]
        assert chest["weeklySets"]["fractional"] == {WEEK: 3}
        assert chest["totalVolumeAllocated"] == 3000
        assert data["workoutStats"]["uncategorized"] == {"weeklySets": {}, "weeklyExerciseCount": {}}


# =============================================================================
# Volume guidelines
# =============================================================================


@pytest.mark.unit
class TestVolumeStatus:
    """Chest guideline: min 6-8, optimal 12-18, upper 20-25."""

    def test_zero_sets(self):
        assert get_volume_status("Chest", 0, "direct") == (
            "😴 No gains: Time to rise and shine in the gym! Add at least a few direct sets."
        )

    def test_no_guideline(self):
        assert get_volume_status("Calves", 5) == "No Guideline"

    def test_too_low(self):
        assert get_volume_status("Chest", 4.5) == (
            "😬 Too Low: Your muscles are snoozing, pump up the volume! "
            "Add 1.5 fractional sets to reach the minimum effective range."
        )

    def test_minimum_reached(self):
        assert get_volume_status("Chest", 6) == (
            "👍 Minimum reached: Welcome to the gains club! "
            "Add 6 more fractional sets to hit the lower optimal threshold."
        )

    def test_almost_there(self):
        assert get_volume_status("Chest", 9, "total") == (
            "🚀 Almost there: Just 3 more total sets and you'll be flexin' like a pro!"
        )

    def test_lower_optimal(self):
        assert get_volume_status("Chest", 12).startswith("🎉 Lower optimal reached")
        assert "Add 6 more fractional sets" in get_volume_status("Chest", 12)

    def test_optimal(self):
        assert get_volume_status("Chest", 15) == "💪 Optimal: Gains on point, keep rocking those fractional sets!"

    def test_upper_optimal(self):
        assert get_volume_status("Chest", 18).startswith("🎊 Upper optimal reached")

    def test_overachiever(self):
        assert get_volume_status("Chest", 20) == (
            "😎 Overachiever: Crushing it, but maybe ease off by 2 fractional sets to stay in the optimal zone."
        )

    def test_danger(self):
        assert get_volume_status("Chest", 26) == (
            "⚠️ Danger: Overtraining detected! Reduce by 6 fractional sets to get back to safe territory."
        )
