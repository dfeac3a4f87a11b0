"""
Integration tests for the workouts endpoints.

Tests cover:
- Model output ingestion (POST /workouts/parse-output)
- Session merging (POST /workouts/merge)
"""

import json

import pytest

from backend.settings import Settings
from tests.fakes import make_session, wire


SQUAT_OUTPUT = json.dumps(
    [{"exercise": "Squat", "sets": 3, "reps": [5, 5, 5], "weights": [275, 275, 275], "date": "2024-12-19"}]
)


# =============================================================================
# Parse output
# =============================================================================


@pytest.mark.integration
class TestParseOutput:
    def test_parse_output(self, client):
        response = client.post("/workouts/parse-output", json={"rawText": SQUAT_OUTPUT})

        assert response.status_code == 200
        data = response.json()
        assert data["confidence"] == "high"
        assert data["warnings"] == []
        exercise = data["exercises"][0]
        assert exercise["exercise"] == "Squat"
        assert exercise["weights"] == ["275", "275", "275"]
        assert exercise["primaryMuscleGroup"] == "Quads"
        assert "rawText" not in data

    def test_today_used_for_missing_dates(self, client):
        raw = '```json\n{"exercises": [{"exercise": "Bench Press", "sets": 1}]}\n```'

        response = client.post("/workouts/parse-output", json={"rawText": raw, "today": "2024-12-18"})

        data = response.json()
        assert data["exercises"][0]["date"] == "2024-12-18"
        assert "No date provided; defaulted to today." in data["warnings"]

    def test_malformed_output_is_not_an_error(self, client):
        """Bad model text is reported as warnings with a 200."""
        response = client.post("/workouts/parse-output", json={"rawText": "Sorry, I can't help with that."})

        assert response.status_code == 200
        assert response.json()["warnings"] == ["Failed to extract JSON: no_json_found"]
        assert response.json()["exercises"] == []

    @pytest.mark.parametrize("today", ["12/18/2024", "2024-02-30"])
    def test_invalid_today_rejected(self, client, today):
        response = client.post("/workouts/parse-output", json={"rawText": "[]", "today": today})

        assert response.status_code == 422


@pytest.mark.integration
class TestParseOutputStoreRawText:
    @pytest.fixture
    def settings(self):
        return Settings(environment="test", store_raw_text=True, _env_file=None)

    def test_model_text_echoed(self, client):
        response = client.post("/workouts/parse-output", json={"rawText": SQUAT_OUTPUT})

        data = response.json()
        assert data["rawModelResponseText"] == SQUAT_OUTPUT
        assert data["exercises"][0]["exercise"] == "Squat"


# =============================================================================
# Merge
# =============================================================================


@pytest.mark.integration
class TestMerge:
    @pytest.fixture
    def existing(self):
        return [make_session("2024-12-18", [("Bench Press", [(5, "225")])], session_id="s1")]

    def _parsed(self, id, date, exercise="Squat"):
        return {"id": id, "date": date, "exercise": exercise, "sets": 2, "reps": [5, 5], "weights": ["275", "275"]}

    def test_merge_by_date(self, client, existing):
        response = client.post(
            "/workouts/merge",
            json={
                "existingSessions": wire(existing),
                "parsedExercises": [self._parsed("p1", "2024-12-18"), self._parsed("p2", "2024-12-19")],
            },
        )

        assert response.status_code == 200
        sessions = response.json()["sessions"]
        assert [s["performedOn"] for s in sessions] == ["2024-12-19", "2024-12-18"]
        same_day = sessions[1]
        assert same_day["id"] == "s1"
        assert [e["nameRaw"] for e in same_day["exercises"]] == ["Bench Press", "Squat"]
        squat = same_day["exercises"][1]
        assert [(s["setIndex"], s["reps"], s["weightText"]) for s in squat["sets"]] == [(0, 5, "275"), (1, 5, "275")]
        assert squat["sessionId"] == "s1"

    def test_unsorted(self, client, existing):
        response = client.post(
            "/workouts/merge",
            json={
                "existingSessions": wire(existing),
                "parsedExercises": [self._parsed("p1", "2024-12-19")],
                "sort": False,
            },
        )

        assert [s["performedOn"] for s in response.json()["sessions"]] == ["2024-12-18", "2024-12-19"]

    def test_invalid_parsed_exercise_rejected(self, client):
        bad = {"id": "p1", "date": "2024-12-19", "exercise": "Squat", "sets": 3, "reps": [5]}

        response = client.post("/workouts/merge", json={"parsedExercises": [bad]})

        assert response.status_code == 422

    def test_parsed_exercise_on_impossible_day_rejected(self, client):
        response = client.post("/workouts/merge", json={"parsedExercises": [self._parsed("p1", "2024-02-30")]})

        assert response.status_code == 422
