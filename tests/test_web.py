"""Tests for the web API."""

import pytest
from fastapi.testclient import TestClient

from program_builder.web import create_app
from program_builder.web.sessions import SessionStore


@pytest.fixture
def client(seeded_db_path):
    app = create_app(db_path=seeded_db_path, sessions=SessionStore(max_sessions=5))
    with TestClient(app) as client:
        yield client


@pytest.fixture
def session_id(client):
    response = client.post("/builder/sessions")
    assert response.status_code == 201
    return response.json()["id"]


def workouts(state):
    return state["program"]["allocatedWorkouts"]


class TestApp:
    """Tests for the application shell."""

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_root_redirects_to_docs(self, client):
        response = client.get("/", follow_redirects=False)

        assert response.status_code == 302
        assert response.headers["location"] == "/docs"

    def test_creates_database_on_startup(self, temp_db_path):
        with TestClient(create_app(db_path=temp_db_path)) as client:
            response = client.get("/templates/workouts")

        assert temp_db_path.exists()
        assert len(response.json()["data"]) == 4


class TestTemplateRoutes:
    """Tests for template search."""

    def test_search(self, client):
        response = client.get("/templates/exercises", params={"search": "squat"})

        assert response.status_code == 200
        body = response.json()
        assert body["kind"] == "exercises"
        assert [r["id"] for r in body["data"]] == ["ex-squat"]

    def test_ids_and_paging(self, client):
        response = client.get(
            "/templates/exercises",
            params={"ids": ["ex-squat", "ex-plank", "ex-burpee"], "page": 2, "page_size": 2},
        )

        assert [r["name"] for r in response.json()["data"]] == ["Squat"]

    def test_unknown_kind(self, client):
        assert client.get("/templates/muscles").status_code == 422


class TestSessions:
    """Tests for the session lifecycle."""

    def test_new_session_is_empty(self, client, session_id):
        state = client.get(f"/builder/sessions/{session_id}").json()

        assert state["programId"] is None
        assert workouts(state) == []
        assert state["selection"] == {"selectedWorkoutId": None, "selectedExerciseId": None}

    def test_unknown_session(self, client):
        assert client.get("/builder/sessions/nope").status_code == 404
        assert client.delete("/builder/sessions/nope").status_code == 404

    def test_close(self, client, session_id):
        assert client.delete(f"/builder/sessions/{session_id}").status_code == 204
        assert client.get(f"/builder/sessions/{session_id}").status_code == 404

    def test_open_unknown_program(self, client):
        response = client.post("/builder/sessions", json={"programId": 42})

        assert response.status_code == 404


class TestEditing:
    """Tests for editing a program through a session."""

    def _add_lower_body(self, client, session_id):
        response = client.post(f"/builder/sessions/{session_id}/workouts", json={"workoutId": "wo-lower"})
        assert response.status_code == 201
        return response.json()

    def test_add_workout_from_library(self, client, session_id):
        state = self._add_lower_body(client, session_id)

        workout = workouts(state)[0]
        assert state["workoutId"] == workout["id"]
        assert workout["name"] == "Lower Body"
        assert [ex["exercise"]["name"] for ex in workout["allocatedExercises"]] == [
            "Squat",
            "Deadlift",
            "Walking Lunge",
        ]
        assert state["selection"] == {
            "selectedWorkoutId": workout["id"],
            "selectedExerciseId": workout["allocatedExercises"][0]["id"],
        }
        assert state["notifications"][0]["message"] == "Workout added successfully"

    def test_add_unknown_workout_template(self, client, session_id):
        response = client.post(f"/builder/sessions/{session_id}/workouts", json={"workoutId": "nope"})

        assert response.status_code == 404

    def test_add_workout_requires_template(self, client, session_id):
        response = client.post(f"/builder/sessions/{session_id}/workouts", json={"note": "x"})

        assert response.status_code == 422

    def test_add_exercise(self, client, session_id):
        workout_id = self._add_lower_body(client, session_id)["workoutId"]

        response = client.post(
            f"/builder/sessions/{session_id}/workouts/{workout_id}/exercises",
            json={"exerciseId": "ex-plank", "notes": "hold"},
        )

        assert response.status_code == 201
        exercise = workouts(response.json())[0]["allocatedExercises"][-1]
        assert exercise["id"] == response.json()["exerciseId"]
        assert exercise["notes"] == "hold"
        assert [s["value"] for s in exercise["sets"]] == [12]

    def test_add_exercise_to_missing_workout(self, client, session_id):
        response = client.post(
            f"/builder/sessions/{session_id}/workouts/nope/exercises",
            json={"exerciseId": "ex-plank"},
        )

        assert response.status_code == 404

    def test_set_lifecycle(self, client, session_id):
        state = self._add_lower_body(client, session_id)
        squat = workouts(state)[0]["allocatedExercises"][0]
        base = f"/builder/sessions/{session_id}"

        added = client.post(f"{base}/exercises/{squat['id']}/sets", json={"value": 10, "breakTime": 45})
        assert added.status_code == 201
        assert added.json()["totalDuration"] == 390 + 65

        set_id = added.json()["setId"]
        patched = client.patch(f"{base}/sets/{set_id}", json={"type": "DURATION", "value": 20})
        sets = workouts(patched.json())[0]["allocatedExercises"][0]["sets"]
        assert sets[-1] == {"id": set_id, "setNumber": 4, "type": "DURATION", "value": 20, "breakTime": 45}

        removed = client.delete(f"{base}/sets/{set_id}")
        assert len(workouts(removed.json())[0]["allocatedExercises"][0]["sets"]) == 3
        assert client.delete(f"{base}/sets/{set_id}").status_code == 404

    def test_negative_set_value_rejected(self, client, session_id):
        squat = workouts(self._add_lower_body(client, session_id))[0]["allocatedExercises"][0]

        response = client.post(
            f"/builder/sessions/{session_id}/exercises/{squat['id']}/sets", json={"value": -1}
        )

        assert response.status_code == 422

    def test_update_and_delete_nodes(self, client, session_id):
        state = self._add_lower_body(client, session_id)
        workout = workouts(state)[0]
        exercise_id = workout["allocatedExercises"][1]["id"]
        base = f"/builder/sessions/{session_id}"

        noted = client.patch(f"{base}/workouts/{workout['id']}", json={"note": "heavy"})
        assert workouts(noted.json())[0]["note"] == "heavy"

        renoted = client.patch(f"{base}/exercises/{exercise_id}", json={"notes": "straps"})
        assert workouts(renoted.json())[0]["allocatedExercises"][1]["notes"] == "straps"

        deleted = client.delete(f"{base}/exercises/{exercise_id}")
        assert [e["order"] for e in workouts(deleted.json())[0]["allocatedExercises"]] == [1, 2]

        gone = client.delete(f"{base}/workouts/{workout['id']}")
        assert workouts(gone.json()) == []
        assert gone.json()["selection"]["selectedWorkoutId"] is None
        assert client.patch(f"{base}/exercises/{exercise_id}", json={"notes": "x"}).status_code == 404

    def test_drag_reorders_exercises(self, client, session_id):
        workout = workouts(self._add_lower_body(client, session_id))[0]
        squat, deadlift = workout["allocatedExercises"][:2]

        response = client.post(
            f"/builder/sessions/{session_id}/drag",
            json={"draggedId": deadlift["id"], "draggedContainerId": workout["id"], "targetId": squat["id"]},
        )

        assert response.json()["outcome"] == "reordered"
        exercises = workouts(response.json())[0]["allocatedExercises"]
        assert [e["id"] for e in exercises[:2]] == [deadlift["id"], squat["id"]]
        assert [e["order"] for e in exercises] == [1, 2, 3]

    def test_drag_onto_self_is_noop(self, client, session_id):
        workout = workouts(self._add_lower_body(client, session_id))[0]

        response = client.post(
            f"/builder/sessions/{session_id}/drag",
            json={"draggedId": workout["id"], "draggedContainerId": "program", "targetId": workout["id"]},
        )

        assert response.json()["outcome"] == "noop"

    def test_selection(self, client, session_id):
        workout = workouts(self._add_lower_body(client, session_id))[0]
        lunge_id = workout["allocatedExercises"][2]["id"]
        base = f"/builder/sessions/{session_id}"

        selected = client.post(f"{base}/selection", json={"workoutId": workout["id"], "exerciseId": lunge_id})
        assert selected.json()["selection"]["selectedExerciseId"] == lunge_id

        assert client.post(f"{base}/selection", json={"workoutId": workout["id"], "exerciseId": "nope"}).status_code == 404
        assert client.post(f"{base}/selection", json={"exerciseId": lunge_id}).status_code == 422


class TestSaving:
    """Tests for saving and reopening programs."""

    def test_invalid_program_not_saved(self, client, session_id):
        response = client.post(f"/builder/sessions/{session_id}/save")

        assert response.status_code == 422
        assert response.json()["errors"]["name"] == "Program name is required"
        assert client.get("/programs").json()["programs"] == []

    def test_save_then_reopen(self, client, session_id):
        base = f"/builder/sessions/{session_id}"
        client.post(f"{base}/workouts", json={"workoutId": "wo-upper", "note": "press day"})
        client.patch(f"{base}/program", json={"name": "Push Pull", "durationDays": 14})

        saved = client.post(f"{base}/save")

        assert saved.status_code == 200
        body = saved.json()
        assert body["success"] is True
        assert isinstance(body["programId"], int)
        assert body["notifications"][-1]["message"] == "Program created successfully"

        listing = client.get("/programs").json()["programs"]
        assert [(p["id"], p["name"], p["totalExercises"]) for p in listing] == [
            (body["programId"], "Push Pull", 4)
        ]

        detail = client.get(f"/programs/{body['programId']}").json()
        assert detail["durationDays"] == 14
        assert detail["allocatedWorkouts"][0]["note"] == "press day"
        assert detail["totalDuration"] > 0
        assert "Push Pull" in detail["summary"]

        reopened = client.post("/builder/sessions", json={"programId": body["programId"]}).json()
        assert reopened["programId"] == body["programId"]
        assert workouts(reopened)[0]["name"] == "Upper Body"

        resaved = client.post(f"/builder/sessions/{reopened['id']}/save").json()
        assert resaved["notifications"][-1]["message"] == "Program updated successfully"
        assert len(client.get("/programs").json()["programs"]) == 1

    def test_delete_program(self, client, session_id):
        base = f"/builder/sessions/{session_id}"
        client.patch(f"{base}/program", json={"name": "Temp"})
        program_id = client.post(f"{base}/save").json()["programId"]

        assert client.delete(f"/programs/{program_id}").status_code == 204
        assert client.delete(f"/programs/{program_id}").status_code == 404
        assert client.get(f"/programs/{program_id}").status_code == 404
