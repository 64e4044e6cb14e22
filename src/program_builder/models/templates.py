"""Workout and exercise template snapshots."""

import json
from dataclasses import dataclass, field
from enum import Enum


class TemplateKind(str, Enum):
    """Resource kinds served by the template lookup."""

    WORKOUTS = "workouts"
    EXERCISES = "exercises"


@dataclass(frozen=True)
class ExerciseTemplate:
    """Read-only snapshot of an exercise definition."""

    id: str
    name: str
    description: str = ""
    primary_muscle_id: str | None = None
    video_url: str | None = None
    type: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "primaryMuscleId": self.primary_muscle_id,
            "videoUrl": self.video_url,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseTemplate":
        """Create from dictionary."""
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "Unknown",
            description=data.get("description") or "",
            primary_muscle_id=data.get("primaryMuscleId"),
            video_url=data.get("videoUrl"),
            type=data.get("type"),
        )


@dataclass(frozen=True)
class TemplateExercise:
    """An exercise slot inside a workout template, with its default sets."""

    exercise: ExerciseTemplate
    order: int = 1
    sets: tuple[dict, ...] = ()

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "exercise": self.exercise.to_dict(),
            "order": self.order,
            "sets": [dict(s) for s in self.sets],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "TemplateExercise":
        """Create from dictionary.

        Template records carry the exercise either as an ``exercise`` object or
        as an ``exerciseData`` JSON string. Both shapes collapse into a single
        ``ExerciseTemplate`` here so nothing downstream has to care.
        """
        raw = data.get("exercise")
        if raw is None and data.get("exerciseData"):
            raw = json.loads(data["exerciseData"])
        return cls(
            exercise=ExerciseTemplate.from_dict(raw or {"id": "", "name": "Unknown"}),
            order=data.get("order") or 1,
            sets=tuple(dict(s) for s in data.get("sets") or []),
        )


@dataclass(frozen=True)
class WorkoutTemplate:
    """Read-only snapshot of a workout definition."""

    id: str
    name: str
    description: str = ""
    exercises: tuple[TemplateExercise, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "workoutExercises": [ex.to_dict() for ex in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "WorkoutTemplate":
        """Create from dictionary."""
        exercises = [
            TemplateExercise.from_dict(ex) for ex in data.get("workoutExercises") or []
        ]
        exercises.sort(key=lambda ex: ex.order)
        return cls(
            id=str(data.get("id") or ""),
            name=data.get("name") or "Untitled Workout",
            description=data.get("description") or "",
            exercises=tuple(exercises),
        )


# Built-in library used to seed a fresh database
DEFAULT_EXERCISE_TEMPLATES = [
    ExerciseTemplate(id="ex-squat", name="Squat", type="strength"),
    ExerciseTemplate(id="ex-bench-press", name="Bench Press", type="strength"),
    ExerciseTemplate(id="ex-deadlift", name="Deadlift", type="strength"),
    ExerciseTemplate(id="ex-overhead-press", name="Overhead Press", type="strength"),
    ExerciseTemplate(id="ex-barbell-row", name="Barbell Row", type="strength"),
    ExerciseTemplate(id="ex-pull-up", name="Pull Up", type="bodyweight"),
    ExerciseTemplate(id="ex-lunge", name="Walking Lunge", type="strength"),
    ExerciseTemplate(id="ex-plank", name="Plank", type="core"),
    ExerciseTemplate(id="ex-jump-rope", name="Jump Rope", type="conditioning"),
    ExerciseTemplate(id="ex-burpee", name="Burpee", type="conditioning"),
]


def _slot(exercise_id: str, order: int, sets: list[dict]) -> TemplateExercise:
    exercise = next(e for e in DEFAULT_EXERCISE_TEMPLATES if e.id == exercise_id)
    return TemplateExercise(exercise=exercise, order=order, sets=tuple(sets))


_STRENGTH_SETS = [{"type": "REPS", "value": 5, "breakTime": 120}] * 3
_CONDITIONING_SETS = [{"type": "DURATION", "value": 30, "breakTime": 30}] * 3

DEFAULT_WORKOUT_TEMPLATES = [
    WorkoutTemplate(
        id="wo-lower",
        name="Lower Body",
        description="Squat and hinge focused day",
        exercises=(
            _slot("ex-squat", 1, _STRENGTH_SETS),
            _slot("ex-deadlift", 2, _STRENGTH_SETS),
            _slot("ex-lunge", 3, [{"type": "REPS", "value": 10, "breakTime": 60}] * 2),
        ),
    ),
    WorkoutTemplate(
        id="wo-upper",
        name="Upper Body",
        description="Press and pull day",
        exercises=(
            _slot("ex-bench-press", 1, _STRENGTH_SETS),
            _slot("ex-barbell-row", 2, _STRENGTH_SETS),
            _slot("ex-overhead-press", 3, _STRENGTH_SETS),
            _slot("ex-pull-up", 4, [{"type": "REPS", "value": 8, "breakTime": 90}] * 3),
        ),
    ),
    WorkoutTemplate(
        id="wo-conditioning",
        name="Conditioning",
        description="Short intervals",
        exercises=(
            _slot("ex-jump-rope", 1, _CONDITIONING_SETS),
            _slot("ex-burpee", 2, _CONDITIONING_SETS),
            _slot("ex-plank", 3, [{"type": "DURATION", "value": 45, "breakTime": 15}] * 2),
        ),
    ),
    WorkoutTemplate(id="wo-rest", name="Active Recovery", description="Mobility only"),
]
