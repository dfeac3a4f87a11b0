"""
Unit tests for backend/core/exercise_resolver.py
"""

import pytest

from backend.core.exercise_resolver import (
    MatchMethod,
    calculate_similarity,
    find_best_match,
    find_matching_exercises,
    get_all_exercise_names,
    normalize_exercise_name,
    resolve_exercise_alias,
)
from tests.fakes import make_session


@pytest.fixture
def history():
    """Three sessions covering the common lifts."""
    return [
        make_session("2024-12-16", [("Bench Press", [(5, "225")]), ("Deadlift", [(3, "405")])]),
        make_session("2024-12-18", [("Squat", [(5, "315")]), ("Leg Press", [(10, "400")]), ("Leg Curl", [(12, "90")])]),
        make_session("2024-12-19", [("bench press", [(5, "230")])]),
    ]


@pytest.mark.unit
class TestNormalizeAndSimilarity:
    """Test name normalization and the similarity score."""

    def test_normalize(self):
        assert normalize_exercise_name("  Pull-Up! ") == "pullup"
        assert normalize_exercise_name(None) == ""

    def test_normalize_keeps_ascii_only(self):
        """Accented letters are stripped like punctuation."""
        assert normalize_exercise_name("Café Curl") == "caf curl"

    def test_exact(self):
        assert calculate_similarity("Bench Press", "bench press!") == 1.0

    def test_containment(self):
        assert calculate_similarity("bench", "Bench Press") == 0.9
        assert calculate_similarity("Incline Bench Press", "bench press") == 0.9

    def test_word_overlap(self):
        """Two of three words overlap."""
        score = calculate_similarity("incline db press", "Incline Dumbbell Press")
        assert score == pytest.approx(0.5 + (2 / 3) * 0.4)

    def test_shared_prefix(self):
        assert calculate_similarity("squatting", "squats") == 0.4

    def test_no_relation(self):
        assert calculate_similarity("squat", "Bench Press") == 0.0

    def test_blank_names(self):
        """A blank name scores zero against anything but another blank."""
        assert calculate_similarity("", "Bench Press") == 0.0
        assert calculate_similarity("!!", "") == 1.0


@pytest.mark.unit
class TestAliases:
    """Test the informal alias table."""

    @pytest.mark.parametrize(
        "query,canonical",
        [("benched", "bench press"), ("DL", "deadlift"), ("rdl", "romanian deadlift"), ("squats", "squat")],
    )
    def test_resolve(self, query, canonical):
        assert resolve_exercise_alias(query) == canonical

    def test_canonical_name_resolves_to_itself(self):
        assert resolve_exercise_alias("Deadlift") == "deadlift"

    def test_unknown(self):
        assert resolve_exercise_alias("zumba") is None
        assert resolve_exercise_alias("") is None


@pytest.mark.unit
class TestFindBestMatch:
    """Test resolution against training history."""

    def test_benched_resolves_to_bench_press(self, history):
        result = find_best_match("benched", history)

        assert result.matched_name == "Bench Press"
        assert result.score == 1.0
        assert result.method == MatchMethod.ALIAS

    def test_dl_resolves_to_deadlift(self, history):
        assert find_best_match("dl", history).matched_name == "Deadlift"

    def test_similarity_match_with_suggestions(self, history):
        """Ties keep history order; the runner-up becomes a suggestion."""
        result = find_best_match("leg", history)

        assert result.matched_name == "Leg Press"
        assert result.score == 0.9
        assert result.method == MatchMethod.SIMILARITY
        assert result.suggestions == ["Leg Curl"]

    def test_no_match_returns_top_suggestions(self, history):
        result = find_best_match("zumba", history)

        assert result.matched_name is None
        assert result.method == MatchMethod.NONE
        assert result.suggestions == ["Bench Press", "Deadlift", "Squat"]

    def test_empty_history(self):
        result = find_best_match("bench", [])

        assert result.matched_name is None
        assert result.suggestions == []

    def test_distinct_names_first_seen(self, history):
        assert get_all_exercise_names(history) == [
            "Bench Press", "Deadlift", "Squat", "Leg Press", "Leg Curl", "bench press",
        ]


@pytest.mark.unit
class TestFindMatchingExercises:
    def test_collects_all_case_variants(self, history):
        """Instances match on the normalized name."""
        result = find_matching_exercises("bench", history)

        assert result.matched_name == "Bench Press"
        assert [session.performed_on for session, _ in result.occurrences] == ["2024-12-16", "2024-12-19"]
        assert [ex.name_raw for ex in result.exercises] == ["Bench Press", "bench press"]

    def test_no_match(self, history):
        result = find_matching_exercises("zumba", history)

        assert result.matched_name is None
        assert result.occurrences == []
        assert result.suggestions
