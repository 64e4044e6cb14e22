"""Training program data models."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from .templates import ExerciseTemplate, WorkoutTemplate


class SetType(str, Enum):
    """How a set's value is measured."""

    REPS = "REPS"  # value counts repetitions
    DURATION = "DURATION"  # value is seconds under work


class ProgramStatus(str, Enum):
    """Publication status of a program."""

    DRAFT = "draft"
    ACTIVE = "active"
    ARCHIVED = "archived"


@dataclass
class ExerciseSet:
    """A single set of an allocated exercise."""

    id: str = ""
    type: SetType = SetType.REPS
    value: float = 0
    break_time: float | None = None  # seconds of rest after the set
    order: int = 1  # set number within the exercise

    def __post_init__(self):
        self.type = SetType(self.type)
        if self.value is None:
            self.value = 0
        if self.value < 0:
            raise ValueError(f"Set value must be >= 0, got {self.value}")
        if self.break_time is not None and self.break_time < 0:
            raise ValueError(f"Set break time must be >= 0, got {self.break_time}")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "setNumber": self.order,
            "type": self.type.value,
            "value": self.value,
            "breakTime": self.break_time,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ExerciseSet":
        """Create from dictionary."""
        return cls(
            id=str(data.get("id") or ""),
            type=SetType(data.get("type") or SetType.REPS),
            value=data.get("value") or 0,
            break_time=data.get("breakTime"),
            order=data.get("setNumber") or data.get("order") or 1,
        )


@dataclass
class AllocatedExercise:
    """An exercise template attached to a workout of a program."""

    exercise_ref: ExerciseTemplate
    id: str = ""
    order: int = 1
    notes: str = ""
    sets: list[ExerciseSet] = field(default_factory=list)

    @property
    def exercise_ref_id(self) -> str:
        """Id of the referenced exercise template."""
        return self.exercise_ref.id

    @property
    def name(self) -> str:
        return self.exercise_ref.name

    @property
    def total_duration(self) -> float:
        """Seconds spent on this exercise, derived from the current sets."""
        from ..builder.aggregate import total_duration

        return total_duration(self.sets)

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "order": self.order,
            "exerciseId": self.exercise_ref_id,
            "exercise": self.exercise_ref.to_dict(),
            "notes": self.notes,
            "sets": [s.to_dict() for s in self.sets],
            "totalDuration": self.total_duration,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AllocatedExercise":
        """Create from dictionary."""
        ref = data.get("exercise") or data.get("exerciseRef")
        if ref is None:
            ref = {"id": data.get("exerciseId") or "", "name": data.get("name") or "Unknown"}
        return cls(
            id=str(data.get("id") or ""),
            order=data.get("order") or 1,
            exercise_ref=ExerciseTemplate.from_dict(ref),
            notes=data.get("notes") or "",
            sets=[ExerciseSet.from_dict(s) for s in data.get("sets") or []],
        )


@dataclass
class AllocatedWorkout:
    """A workout template attached to a program."""

    workout_ref: WorkoutTemplate
    id: str = ""
    order: int = 1
    note: str = ""
    exercises: list[AllocatedExercise] = field(default_factory=list)

    @property
    def workout_ref_id(self) -> str:
        return self.workout_ref.id

    @property
    def name(self) -> str:
        return self.workout_ref.name

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "order": self.order,
            "workoutId": self.workout_ref_id,
            "workout": self.workout_ref.to_dict(),
            "name": self.name,
            "note": self.note,
            "allocatedExercises": [ex.to_dict() for ex in self.exercises],
        }

    @classmethod
    def from_dict(cls, data: dict) -> "AllocatedWorkout":
        """Create from dictionary."""
        ref = data.get("workout") or data.get("workoutRef")
        if ref is None:
            ref = {
                "id": data.get("workoutId") or "",
                "name": data.get("name") or "Untitled Workout",
            }
        return cls(
            id=str(data.get("id") or ""),
            order=data.get("order") or 1,
            workout_ref=WorkoutTemplate.from_dict(ref),
            note=data.get("note") or "",
            exercises=[
                AllocatedExercise.from_dict(ex)
                for ex in data.get("allocatedExercises") or []
            ],
        )


@dataclass
class Program:
    """A complete training program."""

    name: str = ""
    description: str = ""
    duration_days: int | None = 28
    rotation_days: int | None = 7
    status: ProgramStatus = ProgramStatus.DRAFT
    workouts: list[AllocatedWorkout] = field(default_factory=list)
    id: int | None = None
    created_at: datetime | None = None

    def __post_init__(self):
        self.status = ProgramStatus(self.status)

    def to_dict(self) -> dict:
        """Convert to the editable form representation."""
        return {
            "name": self.name,
            "description": self.description,
            "durationDays": self.duration_days,
            "rotationDays": self.rotation_days,
            "status": self.status.value,
            "allocatedWorkouts": [w.to_dict() for w in self.workouts],
        }

    @classmethod
    def from_dict(
        cls,
        data: dict,
        id: int | None = None,
        created_at: datetime | None = None,
    ) -> "Program":
        """Create from dictionary."""
        return cls(
            id=id,
            name=data.get("name") or "",
            description=data.get("description") or "",
            duration_days=data.get("durationDays"),
            rotation_days=data.get("rotationDays"),
            status=ProgramStatus(data.get("status") or ProgramStatus.DRAFT),
            workouts=[
                AllocatedWorkout.from_dict(w) for w in data.get("allocatedWorkouts") or []
            ],
            created_at=created_at,
        )

    def to_submission(self) -> dict:
        """Build the payload submitted when the program is saved."""
        return {
            "name": self.name,
            "description": self.description,
            "durationDays": self.duration_days,
            "rotationDays": self.rotation_days,
            "status": self.status.value,
            "allocatedWorkouts": [
                {
                    "workoutId": w.workout_ref_id or None,
                    "name": w.name,
                    "note": w.note,
                    "order": w.order,
                    "allocatedExercises": [
                        {
                            "exerciseId": ex.exercise_ref_id or None,
                            "sets": [
                                {
                                    "type": s.type.value,
                                    "value": s.value,
                                    "breakTime": s.break_time,
                                }
                                for s in ex.sets
                            ],
                            "order": ex.order,
                            "notes": ex.notes,
                        }
                        for ex in w.exercises
                    ],
                }
                for w in self.workouts
            ],
        }

    @property
    def total_workouts(self) -> int:
        return len(self.workouts)

    @property
    def total_exercises(self) -> int:
        return sum(len(w.exercises) for w in self.workouts)

    def get_summary(self) -> str:
        """Generate a summary of the program."""
        from ..builder.aggregate import format_duration, workout_duration

        summary = f"Program: {self.name}\n"
        if self.description:
            summary += f"Description: {self.description}\n"
        summary += f"Status: {self.status.value}"
        if self.duration_days:
            summary += f", {self.duration_days} days"
        if self.rotation_days:
            summary += f" (rotates every {self.rotation_days} days)"
        summary += "\n\n"

        if not self.workouts:
            return summary + "No workouts allocated\n"

        for workout in self.workouts:
            summary += (
                f"{workout.order}. {workout.name}"
                f" [{format_duration(workout_duration(workout))}]\n"
            )
            if workout.note:
                summary += f"   Note: {workout.note}\n"
            for ex in workout.exercises:
                summary += (
                    f"   {ex.order}. {ex.name}: {self._format_sets(ex.sets)}"
                    f" [{format_duration(ex.total_duration)}]\n"
                )

        return summary

    def _format_sets(self, sets: list[ExerciseSet]) -> str:
        """Format sets for display."""
        if not sets:
            return "No sets"

        def label(s: ExerciseSet) -> str:
            value = int(s.value) if float(s.value).is_integer() else s.value
            return f"{value}s" if s.type == SetType.DURATION else str(value)

        first = sets[0]
        if all(s.type == first.type and s.value == first.value for s in sets):
            return f"{len(sets)}x{label(first)}"
        return ", ".join(label(s) for s in sets)


def validate_program(program: Program) -> dict[str, str]:
    """Check program-level fields the way the edit form does.

    Returns:
        Mapping of field name to error message (empty when valid)
    """
    errors = {}
    if not program.name or not program.name.strip():
        errors["name"] = "Program name is required"
    if program.duration_days is not None and program.duration_days <= 0:
        errors["durationDays"] = "Duration must be a positive number"
    if program.rotation_days is not None and program.rotation_days <= 0:
        errors["rotationDays"] = "Rotation must be a positive number"
    return errors
