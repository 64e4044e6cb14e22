"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from pathlib import Path

import pytest

from program_builder.builder import OrderedCollectionStore, ProgramBuilder
from program_builder.clients import (
    CollectingNotificationSink,
    DictFormState,
    InMemoryTemplateLookup,
    Notification,
)
from program_builder.db import init_db, seed_templates
from program_builder.models import (
    AllocatedExercise,
    AllocatedWorkout,
    ExerciseSet,
    ExerciseTemplate,
    Program,
    SetType,
    WorkoutTemplate,
)
from program_builder.models.templates import DEFAULT_WORKOUT_TEMPLATES


class RecordingSubmitter:
    """Submitter that stores payloads and answers with increasing ids."""

    def __init__(self):
        self.payloads: list[dict] = []

    async def __call__(self, payload: dict) -> int:
        self.payloads.append(payload)
        return len(self.payloads)


class FailingSubmitter:
    """Submitter that always raises."""

    def __init__(self, error: Exception | None = None):
        self.error = error or RuntimeError("database is locked")
        self.calls = 0

    async def __call__(self, payload: dict):
        self.calls += 1
        raise self.error


class BrokenNotificationSink:
    """Sink whose notify always fails."""

    def notify(self, notification: Notification) -> None:
        raise RuntimeError("toast service down")


@pytest.fixture
def temp_db_path():
    """Create a temporary database path."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def seeded_db_path(temp_db_path):
    """Database with schema and the built-in template library."""
    asyncio.run(init_db(temp_db_path))
    asyncio.run(seed_templates(temp_db_path))
    return temp_db_path


@pytest.fixture
def squat():
    return ExerciseTemplate(id="ex-squat", name="Squat", type="strength")


@pytest.fixture
def bench():
    return ExerciseTemplate(id="ex-bench-press", name="Bench Press", type="strength")


@pytest.fixture
def day_template():
    """Workout template without exercises."""
    return WorkoutTemplate(id="wo-day1", name="Day1")


@pytest.fixture
def lower_body_template():
    return next(t for t in DEFAULT_WORKOUT_TEMPLATES if t.id == "wo-lower")


@pytest.fixture
def sample_program(squat, bench):
    """Program with two workouts (w1: e1, e2; w2: e3) and fixed ids."""
    return Program(
        name="Strength Block",
        description="Four week block",
        workouts=[
            AllocatedWorkout(
                id="w1",
                order=1,
                workout_ref=WorkoutTemplate(id="wo-a", name="Day A"),
                exercises=[
                    AllocatedExercise(
                        id="e1",
                        order=1,
                        exercise_ref=squat,
                        sets=[
                            ExerciseSet(id="s1", order=1, type=SetType.REPS, value=5, break_time=120),
                            ExerciseSet(id="s2", order=2, type=SetType.REPS, value=5, break_time=120),
                        ],
                    ),
                    AllocatedExercise(
                        id="e2",
                        order=2,
                        exercise_ref=bench,
                        sets=[ExerciseSet(id="s3", order=1, value=8, break_time=90)],
                    ),
                ],
            ),
            AllocatedWorkout(
                id="w2",
                order=2,
                workout_ref=WorkoutTemplate(id="wo-b", name="Day B"),
                exercises=[
                    AllocatedExercise(
                        id="e3",
                        order=1,
                        exercise_ref=squat,
                        sets=[ExerciseSet(id="s4", order=1, type=SetType.DURATION, value=30)],
                    ),
                ],
            ),
        ],
    )


@pytest.fixture
def store(sample_program):
    return OrderedCollectionStore(sample_program)


@pytest.fixture
def form():
    return DictFormState()


@pytest.fixture
def sink():
    return CollectingNotificationSink()


@pytest.fixture
def template_lookup():
    return InMemoryTemplateLookup.from_templates()


@pytest.fixture
def builder(form, sink, template_lookup):
    """Editor on an empty program."""
    return ProgramBuilder(form, notifications=sink, templates=template_lookup)


@pytest.fixture
def loaded_builder(form, sink, template_lookup, sample_program):
    """Editor on the sample program."""
    editor = ProgramBuilder(form, notifications=sink, templates=template_lookup)
    editor.load(sample_program)
    sink.drain()
    return editor


@pytest.fixture
def recording_submitter():
    return RecordingSubmitter()


@pytest.fixture
def failing_submitter():
    return FailingSubmitter()


@pytest.fixture
def broken_sink():
    return BrokenNotificationSink()
