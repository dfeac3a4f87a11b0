"""
Unit tests for backend/services/ask_executor.py
"""

from datetime import datetime, timezone

import pytest

from backend.core.muscle_templates import TemplateMuscleLookup
from backend.services.ask_executor import (
    NO_DATA_ANSWER,
    AskData,
    execute_ask_intent,
    match_muscle_group,
)
from backend.services.intent_schemas import parse_ask_intent
from tests.fakes import make_session


NOW = datetime(2024, 12, 20, 12, 0)


@pytest.fixture
def sessions():
    """Three sessions over ten days; bench press in each."""
    return [
        make_session(
            "2024-12-10",
            [("Bench Press", [(5, "205"), (5, "205")]), ("Squat", [(5, "275")])],
            session_id="s1",
        ),
        make_session(
            "2024-12-16",
            [("Bench Press", [(5, "215"), (4, "215")]), ("Deadlift", [(3, "405")])],
            session_id="s2",
        ),
        make_session(
            "2024-12-19",
            [("Bench Press", [(5, "225"), (5, "225"), (3, "235")]), ("Pull Up", [(8, "bodyweight")])],
            session_id="s3",
        ),
    ]


def ask(data, sessions, now=NOW, **kwargs):
    return execute_ask_intent(parse_ask_intent(data), sessions, now=now, **kwargs)


# =============================================================================
# Entry point
# =============================================================================


@pytest.mark.unit
class TestExecuteAskIntent:
    def test_no_sessions(self):
        result = ask({"type": "last_session_summary"}, [])

        assert result.answer_text == NO_DATA_ANSWER
        assert result.data.to_dict() == {"sources": []}

    def test_only_deleted_sessions(self):
        deleted = [make_session("2024-12-19", [("Squat", [(5, "225")])], deleted_at="2024-12-19T20:00:00Z")]

        assert ask({"type": "last_session_summary"}, deleted).answer_text == NO_DATA_ANSWER

    def test_timezone_aware_now(self, sessions):
        """An aware clock is compared as local wall time."""
        result = ask(
            {"type": "general_chat", "topic": "motivation", "originalQuery": "keep going?"},
            sessions,
            now=datetime(2024, 12, 20, 12, 0, tzinfo=timezone.utc),
        )

        assert result.data.llm_context["userContext"]["daysSinceLastWorkout"] == 1


# =============================================================================
# Exercise lookups
# =============================================================================


@pytest.mark.unit
class TestLastExercise:
    def test_last_exercise_date(self, sessions):
        result = ask({"type": "last_exercise_date", "exercise": "benched"}, sessions)

        assert result.answer_text == "You last did Bench Press on Thursday, December 19, 2024."
        assert result.data.date == "2024-12-19"
        assert result.data.matched_exercise == "Bench Press"
        assert result.data.sources == ["s3"]

    def test_unknown_exercise_with_suggestions(self, sessions):
        result = ask({"type": "last_exercise_date", "exercise": "zumba"}, sessions)

        assert result.answer_text == (
            'I couldn\'t find any workouts for "zumba". Did you mean: Bench Press, Squat, Deadlift?'
        )
        assert result.data.suggestions == ["Bench Press", "Squat", "Deadlift"]

    def test_last_exercise_details(self, sessions):
        result = ask({"type": "last_exercise_details", "exercise": "bench"}, sessions)

        assert result.answer_text == (
            "Last time you did Bench Press, you performed 3 sets: "
            "5 reps @ 225, 5 reps @ 225, 3 reps @ 235."
        )
        assert result.data.top_set == {"reps": 3, "weight": "235"}
        assert len(result.data.sets) == 3


@pytest.mark.unit
class TestBestExercise:
    def test_best_weight(self, sessions):
        result = ask({"type": "best_exercise", "exercise": "bench press", "metric": "weight"}, sessions)

        assert result.answer_text == "Your best Bench Press is 235 lbs for 3 reps, achieved on 12/19/2024."
        assert (result.data.best_weight, result.data.best_reps) == (235, 3)

    def test_best_e1rm(self, sessions):
        result = ask({"type": "best_exercise", "exercise": "bench", "metric": "e1rm"}, sessions)

        assert result.answer_text == (
            "Your estimated 1RM for Bench Press is 258.5 lbs (based on 235 lbs × 3 reps)."
        )
        assert result.data.best_e1rm == pytest.approx(258.5)

    def test_best_volume(self, sessions):
        result = ask({"type": "best_exercise", "exercise": "bench", "metric": "volume"}, sessions)

        assert result.answer_text == "Your best volume for Bench Press is 2955 lbs (from 2024-12-19)."
        assert result.data.sources == ["s3"]

    def test_weight_unit(self, sessions):
        result = ask(
            {"type": "best_exercise", "exercise": "deadlift", "metric": "weight"},
            sessions,
            weight_unit="kg",
        )

        assert result.answer_text.startswith("Your best Deadlift is 405 kg for 3 reps")

    def test_volume_of_unloaded_exercise(self, sessions):
        """All-zero volume has nothing to report."""
        history = [make_session("2024-12-19", [("Plank", [(0, "")])])]

        result = ask({"type": "best_exercise", "exercise": "plank", "metric": "volume"}, history)

        assert result.answer_text == 'I couldn\'t calculate volume for "Plank".'


# =============================================================================
# Volume summary
# =============================================================================


@pytest.mark.unit
class TestVolumeSummary:
    def test_week_total(self, sessions):
        result = ask({"type": "volume_summary", "range": "week"}, sessions)

        assert result.answer_text == "You performed 7 sets total in the last week."
        assert result.data.sets_count == 7
        assert result.data.sources == ["s2", "s3"]

    def test_week_for_exercise(self, sessions):
        result = ask({"type": "volume_summary", "range": "week", "exercise": "bench"}, sessions)

        assert result.answer_text == "You performed 5 sets for Bench Press in the last week."

    def test_week_for_muscle_group(self, sessions):
        """Muscle groups count direct sets and match case-insensitively."""
        result = ask(
            {"type": "volume_summary", "range": "week", "muscleGroup": "chest"},
            sessions,
            template_lookup=TemplateMuscleLookup(),
        )

        assert result.answer_text == "You performed 5 sets for chest in the last week."

    def test_custom_range(self, sessions):
        result = ask(
            {"type": "volume_summary", "range": "custom", "start": "2024-12-01", "end": "2024-12-10"},
            sessions,
        )

        assert result.answer_text == "You performed 3 sets total in the specified period."

    def test_custom_range_without_bounds(self, sessions):
        result = ask({"type": "volume_summary", "range": "custom"}, sessions)

        assert result.answer_text == "Invalid date range for volume summary."

    def test_custom_range_with_bad_date(self, sessions):
        result = ask(
            {"type": "volume_summary", "range": "custom", "start": "last monday", "end": "2024-12-10"},
            sessions,
        )

        assert result.answer_text == "Invalid date range for volume summary."

    def test_empty_range(self, sessions):
        result = ask(
            {"type": "volume_summary", "range": "custom", "start": "2024-01-01", "end": "2024-01-31"},
            sessions,
        )

        assert result.answer_text == "No workouts found in the specified time range."

    def test_unknown_exercise_in_range(self, sessions):
        result = ask({"type": "volume_summary", "range": "week", "exercise": "zumba"}, sessions)

        assert result.answer_text.startswith('I couldn\'t find "zumba" in your recent workouts.')


# =============================================================================
# Session summary and recommendations
# =============================================================================


@pytest.mark.unit
class TestLastSessionSummary:
    def test_summary(self, sessions):
        result = ask({"type": "last_session_summary"}, sessions)

        assert result.answer_text == (
            "Your last workout was on Thursday, December 19, 2024. "
            "You did 2 exercises: Bench Press, Pull Up."
        )
        assert result.data.session_exercises[0] == {
            "name": "Bench Press",
            "sets": 3,
            "reps": [5, 5, 3],
            "weights": ["225", "225", "235"],
        }


@pytest.mark.unit
class TestWorkoutRecommendation:
    def test_least_trained_group(self, sessions):
        result = ask({"type": "workout_recommendation"}, sessions)

        assert result.answer_text == (
            "You haven't trained shoulders this week. Consider hitting shoulders today! "
            "Exercises: overhead press, lateral raise, face pulls, arnold press."
        )
        assert result.data.sources == ["s3", "s2", "s1"]

    def test_focus_overrides_group(self, sessions):
        result = ask({"type": "workout_recommendation", "focus": "legs"}, sessions)

        assert result.data.suggestions == ["squat", "leg press", "lunges", "leg curl"]

    def test_long_break(self, sessions):
        result = ask({"type": "workout_recommendation"}, sessions, now=datetime(2024, 12, 25, 12, 0))

        assert result.answer_text.startswith("It's been 6 days since your last workout!")
        assert "I'd suggest hitting back" in result.answer_text


@pytest.mark.unit
class TestExerciseAlternative:
    def test_alias_lookup(self, sessions):
        result = ask({"type": "exercise_alternative", "exercise": "bench"}, sessions)

        assert result.answer_text == (
            "Great alternatives to bench press: dumbbell bench press, push-ups, chest press machine, floor press."
        )
        assert result.data.matched_exercise == "bench press"

    def test_reason_mentioned(self, sessions):
        result = ask(
            {"type": "exercise_alternative", "exercise": "Squat", "reason": "knee pain"},
            sessions,
        )

        assert result.answer_text.endswith(
            ' Since you mentioned "knee pain", some of these might work better for your situation.'
        )

    def test_history_fallback(self):
        history = [make_session("2024-12-19", [("Cable Crossover", [(12, "30")])])]

        result = ask({"type": "exercise_alternative", "exercise": "cable crossover"}, history)

        assert result.answer_text.startswith('I don\'t have specific alternatives for "cable crossover"')

    def test_unknown(self, sessions):
        result = ask({"type": "exercise_alternative", "exercise": "zumba"}, sessions)

        assert result.answer_text == (
            'I don\'t have alternatives for "zumba" in my database. '
            "Try searching for exercises that target the same muscle group!"
        )


# =============================================================================
# Progress
# =============================================================================


@pytest.mark.unit
class TestExerciseProgress:
    def test_all_time_progress(self, sessions):
        result = ask({"type": "exercise_progress", "exercise": "bench", "timeframe": "all_time"}, sessions)

        assert result.answer_text == (
            "Nice progress on Bench Press! 📈\n\n"
            "Dec 10: 205 lbs × 5 reps\n"
            "Dec 19: 235 lbs × 3 reps\n\n"
            "Top weight up 30 lbs (+14.6%)"
        )
        progress = result.data.progress_data
        assert progress["sessionCount"] == 3
        assert progress["trend"] == "improving"
        assert progress["weightChangePercent"] == 14.6

    def test_single_session(self, sessions):
        result = ask({"type": "exercise_progress", "exercise": "deadlift"}, sessions)

        assert result.answer_text == (
            "You've only done Deadlift once. Keep training and I'll be able to track your progress!"
        )

    def test_same_weight_more_reps(self):
        history = [
            make_session("2024-12-12", [("Squat", [(5, "315")])]),
            make_session("2024-12-19", [("Squat", [(5, "315")])]),
        ]

        result = ask({"type": "exercise_progress", "exercise": "squat"}, history)

        assert result.answer_text.startswith("Your Squat has been consistent recently. ➡️")
        assert result.data.progress_data["trend"] == "stable"


# =============================================================================
# Delegated intents
# =============================================================================


@pytest.mark.unit
class TestDelegatedIntents:
    def test_muscle_group_exercises(self, sessions):
        result = ask({"type": "muscle_group_exercises", "muscleGroup": "Chest"}, sessions)

        assert result.answer_text == ""
        assert result.data.needs_llm_response is True
        context = result.data.llm_context
        assert context["muscleGroup"] == "chest"
        assert context["suggestedExercises"][0] == "bench press"
        assert "bench press" in context["exercisesUserHasDone"]
        assert context["originalQuery"] == "What exercises hit Chest?"

    def test_general_chat(self, sessions):
        result = ask(
            {"type": "general_chat", "topic": "recovery", "originalQuery": "should I rest today?"},
            sessions,
        )

        context = result.data.llm_context
        assert context["type"] == "general_chat"
        assert context["userContext"] == {
            "totalWorkouts": 3,
            "daysSinceLastWorkout": 1,
            "recentExercises": ["Bench Press", "Pull Up"],
            "lastWorkoutDate": "2024-12-19",
        }

    def test_wire_flag_names(self, sessions):
        result = ask({"type": "muscle_group_exercises", "muscleGroup": "back"}, sessions)

        data = result.to_dict()["data"]
        assert data["_needsLLMResponse"] is True
        assert data["_llmContext"]["type"] == "muscle_group_exercises"


@pytest.mark.unit
class TestMatchMuscleGroup:
    def test_exact(self):
        group, exercises = match_muscle_group("Chest")

        assert group == "chest"
        assert exercises[0] == "bench press"

    def test_containment(self):
        assert match_muscle_group("quad")[0] == "quads"

    def test_typo(self):
        assert match_muscle_group("sholders")[0] == "shoulders"

    def test_no_match(self):
        assert match_muscle_group("xyz") == (None, None)
        assert match_muscle_group("   ") == (None, None)


@pytest.mark.unit
class TestAskData:
    def test_unset_fields_omitted(self):
        data = AskData(date="2024-12-19", matched_exercise="Squat", sets_count=0)

        assert data.to_dict() == {
            "date": "2024-12-19",
            "matchedExercise": "Squat",
            "setsCount": 0,
            "sources": [],
        }
