"""Derived duration totals.

Totals are always computed from the current sets and never stored, so they
cannot drift from the tree.
"""

from collections.abc import Iterable
from typing import Any


def _set_fields(item: Any) -> tuple[float, float]:
    if isinstance(item, dict):
        value = item.get("value")
        break_time = item.get("breakTime", item.get("break_time"))
    else:
        value = item.value
        break_time = item.break_time
    return value or 0, break_time or 0


def total_duration(sets: Iterable[Any]) -> float:
    """Seconds an exercise takes: each set counts value * 2 plus its break.

    Accepts ``ExerciseSet`` objects or set dicts (``value``/``breakTime``).
    """
    total = 0
    for item in sets:
        value, break_time = _set_fields(item)
        total += value * 2 + break_time
    return total


def workout_duration(workout) -> float:
    """Sum of the exercise totals of an allocated workout."""
    return sum(total_duration(ex.sets) for ex in workout.exercises)


def program_duration(program) -> float:
    """Sum of the workout totals of a program."""
    return sum(workout_duration(w) for w in program.workouts)


def format_duration(seconds: float) -> str:
    """Format seconds for display: seconds below a minute, else minutes and seconds."""
    if float(seconds).is_integer():
        seconds = int(seconds)
    if seconds < 60:
        return f"{seconds} seconds"
    minutes = int(seconds // 60)
    rest = seconds % 60
    if isinstance(rest, float) and rest.is_integer():
        rest = int(rest)
    return f"{minutes} min {rest} sec"
