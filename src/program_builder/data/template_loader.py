"""Template library loader from JSON."""

import json
import logging
from pathlib import Path

from ..db.engine import get_data_dir, get_db_path, seed_templates
from ..models.templates import ExerciseTemplate, WorkoutTemplate

logger = logging.getLogger(__name__)


def get_templates_json_path() -> Path:
    """Get the path to the template library JSON file."""
    return get_data_dir() / "templates.json"


def load_templates(json_path: Path | None = None) -> tuple[list[WorkoutTemplate], list[ExerciseTemplate]]:
    """Load workout and exercise templates from a JSON file.

    The file holds ``{"workouts": [...], "exercises": [...]}`` in the same
    camelCase shape the template lookup returns.

    Returns:
        (workouts, exercises); both empty when the file does not exist
    """
    json_path = json_path or get_templates_json_path()
    if not json_path.exists():
        return [], []

    with open(json_path) as f:
        data = json.load(f)

    exercises = []
    for record in data.get("exercises", []):
        if not record.get("id") or not record.get("name"):
            logger.warning("Skipping exercise template without id or name: %r", record)
            continue
        exercises.append(ExerciseTemplate.from_dict(record))

    workouts = []
    for record in data.get("workouts", []):
        if not record.get("id") or not record.get("name"):
            logger.warning("Skipping workout template without id or name: %r", record)
            continue
        try:
            workouts.append(WorkoutTemplate.from_dict(record))
        except (ValueError, TypeError) as e:
            logger.warning("Skipping invalid workout template %s: %s", record.get("name"), e)

    return workouts, exercises


async def seed_templates_from_json(db_path: Path | None = None, json_path: Path | None = None) -> int:
    """Seed the database from the JSON template library.

    Falls back to the built-in library when the file is missing or empty.

    Returns:
        Number of templates seeded
    """
    if db_path is None:
        db_path = get_db_path()

    workouts, exercises = load_templates(json_path)
    if not workouts and not exercises:
        return await seed_templates(db_path)
    return await seed_templates(db_path, workouts=workouts, exercises=exercises)
