"""Data models for program-builder."""

from .program import (
    AllocatedExercise,
    AllocatedWorkout,
    ExerciseSet,
    Program,
    ProgramStatus,
    SetType,
    validate_program,
)
from .templates import ExerciseTemplate, TemplateExercise, TemplateKind, WorkoutTemplate

__all__ = [
    "AllocatedExercise",
    "AllocatedWorkout",
    "ExerciseSet",
    "ExerciseTemplate",
    "Program",
    "ProgramStatus",
    "SetType",
    "TemplateExercise",
    "TemplateKind",
    "validate_program",
    "WorkoutTemplate",
]
