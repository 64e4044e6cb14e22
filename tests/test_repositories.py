"""Tests for the SQLite repositories and template loader."""

import asyncio
import json

import pytest

from program_builder.data import load_templates, seed_templates_from_json
from program_builder.db import ProgramRepository, TemplateRepository, init_db
from program_builder.models import ExerciseTemplate, ProgramStatus, TemplateKind, WorkoutTemplate


class TestTemplateRepository:
    """Tests for TemplateRepository."""

    def test_search_all_sorted(self, seeded_db_path):
        repo = TemplateRepository(seeded_db_path)

        records = asyncio.run(repo.search(TemplateKind.WORKOUTS))

        assert [r["name"] for r in records] == [
            "Active Recovery",
            "Conditioning",
            "Lower Body",
            "Upper Body",
        ]

    def test_search_by_name(self, seeded_db_path):
        repo = TemplateRepository(seeded_db_path)

        records = asyncio.run(repo.search(TemplateKind.EXERCISES, {"search": "press"}))

        assert {r["id"] for r in records} == {"ex-bench-press", "ex-overhead-press"}

    def test_search_by_ids(self, seeded_db_path):
        repo = TemplateRepository(seeded_db_path)

        records = asyncio.run(repo.search("exercises", {"ids": ["ex-squat", "ex-plank", "missing"]}))
        empty = asyncio.run(repo.search("exercises", {"ids": []}))

        assert [r["id"] for r in records] == ["ex-plank", "ex-squat"]
        assert empty == []

    def test_paging(self, seeded_db_path):
        repo = TemplateRepository(seeded_db_path)

        first = asyncio.run(repo.search(TemplateKind.EXERCISES, page=1, page_size=4))
        third = asyncio.run(repo.search(TemplateKind.EXERCISES, page=3, page_size=4))

        assert len(first) == 4
        assert len(third) == 2

    def test_invalid_page(self, seeded_db_path):
        repo = TemplateRepository(seeded_db_path)

        with pytest.raises(ValueError):
            asyncio.run(repo.search(TemplateKind.EXERCISES, page=0))

    def test_get_workout_with_slots(self, seeded_db_path):
        repo = TemplateRepository(seeded_db_path)

        workout = asyncio.run(repo.get_workout("wo-lower"))

        assert workout.name == "Lower Body"
        assert [slot.exercise.name for slot in workout.exercises] == [
            "Squat",
            "Deadlift",
            "Walking Lunge",
        ]
        assert workout.exercises[0].sets[0] == {"type": "REPS", "value": 5, "breakTime": 120}

    def test_get_missing(self, seeded_db_path):
        repo = TemplateRepository(seeded_db_path)

        assert asyncio.run(repo.get_workout("nope")) is None
        assert asyncio.run(repo.get_exercise("nope")) is None

    def test_add_workout(self, seeded_db_path, day_template):
        repo = TemplateRepository(seeded_db_path)

        asyncio.run(repo.add_workout(day_template))

        assert asyncio.run(repo.count(TemplateKind.WORKOUTS)) == 5
        assert asyncio.run(repo.get_workout("wo-day1")).name == "Day1"

    def test_add_exercise_replaces(self, seeded_db_path, squat):
        repo = TemplateRepository(seeded_db_path)
        renamed = ExerciseTemplate(id=squat.id, name="Back Squat", type="strength")

        asyncio.run(repo.add_exercise(renamed))

        assert asyncio.run(repo.count(TemplateKind.EXERCISES)) == 10
        assert asyncio.run(repo.get_exercise("ex-squat")).name == "Back Squat"


class TestProgramRepository:
    """Tests for ProgramRepository."""

    def _payload(self, **overrides):
        payload = {
            "name": "Strength Block",
            "description": "Four week block",
            "durationDays": 28,
            "rotationDays": 7,
            "allocatedWorkouts": [
                {
                    "workoutId": "wo-lower",
                    "name": "Lower Body",
                    "note": "heavy",
                    "order": 1,
                    "allocatedExercises": [
                        {
                            "exerciseId": "ex-squat",
                            "order": 1,
                            "notes": "belt",
                            "sets": [
                                {"type": "REPS", "value": 5, "breakTime": 120},
                                {"type": "REPS", "value": 3, "breakTime": 180},
                            ],
                        }
                    ],
                }
            ],
        }
        payload.update(overrides)
        return payload

    def test_submit_and_get(self, seeded_db_path):
        repo = ProgramRepository(seeded_db_path)

        program_id = asyncio.run(repo.submit(self._payload()))
        program = asyncio.run(repo.get(program_id))

        assert program.id == program_id
        assert program.name == "Strength Block"
        assert program.status == ProgramStatus.DRAFT
        assert program.created_at is not None
        workout = program.workouts[0]
        assert workout.workout_ref.description == "Squat and hinge focused day"
        assert workout.note == "heavy"
        exercise = workout.exercises[0]
        assert exercise.name == "Squat"
        assert exercise.notes == "belt"
        assert [(s.order, s.value, s.break_time) for s in exercise.sets] == [(1, 5, 120), (2, 3, 180)]

    def test_payload_round_trip(self, seeded_db_path):
        repo = ProgramRepository(seeded_db_path)
        payload = self._payload(status="draft")

        program_id = asyncio.run(repo.submit(payload))

        assert asyncio.run(repo.get_payload(program_id)) == payload

    def test_missing_template_falls_back_to_payload_name(self, seeded_db_path):
        repo = ProgramRepository(seeded_db_path)
        payload = self._payload()
        payload["allocatedWorkouts"][0]["workoutId"] = "wo-deleted"
        payload["allocatedWorkouts"][0]["name"] = "Old Day"

        program = asyncio.run(repo.get(asyncio.run(repo.submit(payload))))

        assert program.workouts[0].workout_ref == WorkoutTemplate(id="wo-deleted", name="Old Day")

    def test_name_required(self, seeded_db_path):
        repo = ProgramRepository(seeded_db_path)

        with pytest.raises(ValueError, match="name is required"):
            asyncio.run(repo.submit(self._payload(name="  ")))

    def test_update(self, seeded_db_path):
        repo = ProgramRepository(seeded_db_path)
        program_id = asyncio.run(repo.submit(self._payload()))

        returned = asyncio.run(
            repo.submit(self._payload(name="Renamed", allocatedWorkouts=[]), program_id=program_id)
        )
        program = asyncio.run(repo.get(program_id))

        assert returned == program_id
        assert program.name == "Renamed"
        assert program.workouts == []

    def test_update_unknown(self, seeded_db_path):
        repo = ProgramRepository(seeded_db_path)

        with pytest.raises(ValueError, match="not found"):
            asyncio.run(repo.submit(self._payload(), program_id=999))

    def test_list_and_delete(self, seeded_db_path):
        repo = ProgramRepository(seeded_db_path)
        first = asyncio.run(repo.submit(self._payload(name="A")))
        second = asyncio.run(repo.submit(self._payload(name="B")))

        assert [p.id for p in asyncio.run(repo.list_all())] == [second, first]
        assert asyncio.run(repo.delete(first)) is True
        assert asyncio.run(repo.delete(first)) is False
        assert asyncio.run(repo.get(first)) is None
        assert [p.name for p in asyncio.run(repo.list_all())] == ["B"]


class TestTemplateLoader:
    """Tests for loading the template library from JSON."""

    @pytest.fixture
    def templates_json(self, tmp_path):
        path = tmp_path / "templates.json"
        path.write_text(
            json.dumps(
                {
                    "exercises": [
                        {"id": "ex-row", "name": "Ring Row"},
                        {"name": "No Id"},
                    ],
                    "workouts": [
                        {
                            "id": "wo-pull",
                            "name": "Pull Day",
                            "workoutExercises": [
                                {
                                    "exercise": {"id": "ex-chin", "name": "Chin Up"},
                                    "order": 1,
                                    "sets": [{"type": "REPS", "value": 6}],
                                }
                            ],
                        }
                    ],
                }
            )
        )
        return path

    def test_load(self, templates_json):
        workouts, exercises = load_templates(templates_json)

        assert [e.id for e in exercises] == ["ex-row"]
        assert workouts[0].name == "Pull Day"
        assert workouts[0].exercises[0].exercise.name == "Chin Up"

    def test_missing_file(self, tmp_path):
        assert load_templates(tmp_path / "none.json") == ([], [])

    def test_seed_from_json(self, temp_db_path, templates_json):

        asyncio.run(init_db(temp_db_path))
        count = asyncio.run(seed_templates_from_json(temp_db_path, templates_json))
        repo = TemplateRepository(temp_db_path)

        assert count == 3
        assert asyncio.run(repo.get_exercise("ex-chin")).name == "Chin Up"

    def test_seed_falls_back_to_builtin(self, temp_db_path, tmp_path):

        asyncio.run(init_db(temp_db_path))
        asyncio.run(seed_templates_from_json(temp_db_path, tmp_path / "none.json"))

        assert asyncio.run(TemplateRepository(temp_db_path).count(TemplateKind.WORKOUTS)) == 4
