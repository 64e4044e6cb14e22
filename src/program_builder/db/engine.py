"""Database engine setup and initialization."""

import json
import logging
import os
from pathlib import Path

import aiosqlite

from ..models.templates import (
    DEFAULT_EXERCISE_TEMPLATES,
    DEFAULT_WORKOUT_TEMPLATES,
    ExerciseTemplate,
    WorkoutTemplate,
)

logger = logging.getLogger(__name__)

# Default data directory
DATA_DIR = Path(__file__).parent.parent.parent.parent / "data"

DATA_DIR_ENV = "PROGRAM_BUILDER_DATA_DIR"


def get_data_dir() -> Path:
    """Get the data directory, honouring the environment override."""
    override = os.environ.get(DATA_DIR_ENV)
    return Path(override) if override else DATA_DIR


def get_db_path(data_dir: Path | None = None) -> Path:
    """Get the database file path."""
    if data_dir is None:
        data_dir = get_data_dir()
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir / "program_builder.db"


async def _run_migrations(db: aiosqlite.Connection) -> None:
    """Run database migrations for schema updates."""
    cursor = await db.execute("PRAGMA table_info(programs)")
    columns = await cursor.fetchall()
    column_names = {col[1] for col in columns}

    # status and updated_at were added after the first release
    if "status" not in column_names:
        await db.execute("ALTER TABLE programs ADD COLUMN status TEXT DEFAULT 'draft'")
    if "updated_at" not in column_names:
        await db.execute("ALTER TABLE programs ADD COLUMN updated_at TIMESTAMP")

    await db.commit()


async def init_db(db_path: Path | None = None) -> None:
    """Initialize the database schema."""
    if db_path is None:
        db_path = get_db_path()

    async with aiosqlite.connect(db_path) as db:
        # Exercise library
        await db.execute("""
            CREATE TABLE IF NOT EXISTS exercise_templates (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT DEFAULT '',
                primary_muscle_id TEXT,
                video_url TEXT,
                type TEXT
            )
        """)

        # Workout library
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_templates (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT DEFAULT ''
            )
        """)

        # Exercises (with default sets) of each workout template
        await db.execute("""
            CREATE TABLE IF NOT EXISTS workout_template_exercises (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                workout_id TEXT NOT NULL,
                exercise_id TEXT NOT NULL,
                position INTEGER NOT NULL,
                sets TEXT DEFAULT '[]',
                FOREIGN KEY (workout_id) REFERENCES workout_templates(id) ON DELETE CASCADE,
                FOREIGN KEY (exercise_id) REFERENCES exercise_templates(id)
            )
        """)

        # Saved programs; the allocated tree is stored as the save payload JSON
        await db.execute("""
            CREATE TABLE IF NOT EXISTS programs (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                name TEXT NOT NULL,
                description TEXT DEFAULT '',
                duration_days INTEGER,
                rotation_days INTEGER,
                status TEXT DEFAULT 'draft',
                structure TEXT NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_exercise_templates_name
            ON exercise_templates(name)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_templates_name
            ON workout_templates(name)
        """)
        await db.execute("""
            CREATE INDEX IF NOT EXISTS idx_workout_template_exercises_workout
            ON workout_template_exercises(workout_id)
        """)

        await db.commit()

        # Run migrations for existing databases
        await _run_migrations(db)


async def seed_templates(
    db_path: Path | None = None,
    workouts: list[WorkoutTemplate] | None = None,
    exercises: list[ExerciseTemplate] | None = None,
) -> int:
    """Seed the template library.

    Defaults to the built-in library. Existing templates with the same id are
    replaced.

    Returns:
        Number of templates written
    """
    if db_path is None:
        db_path = get_db_path()
    if workouts is None:
        workouts = DEFAULT_WORKOUT_TEMPLATES
    if exercises is None:
        exercises = DEFAULT_EXERCISE_TEMPLATES

    # exercises referenced only from workout templates are part of the library too
    library = {ex.id: ex for ex in exercises}
    for workout in workouts:
        for slot in workout.exercises:
            library.setdefault(slot.exercise.id, slot.exercise)

    count = 0
    async with aiosqlite.connect(db_path) as db:
        for exercise in library.values():
            await db.execute(
                """
                INSERT OR REPLACE INTO exercise_templates
                (id, name, description, primary_muscle_id, video_url, type)
                VALUES (?, ?, ?, ?, ?, ?)
                """,
                (
                    exercise.id,
                    exercise.name,
                    exercise.description,
                    exercise.primary_muscle_id,
                    exercise.video_url,
                    exercise.type,
                ),
            )
            count += 1

        for workout in workouts:
            await db.execute(
                "INSERT OR REPLACE INTO workout_templates (id, name, description) VALUES (?, ?, ?)",
                (workout.id, workout.name, workout.description),
            )
            await db.execute(
                "DELETE FROM workout_template_exercises WHERE workout_id = ?",
                (workout.id,),
            )
            for slot in workout.exercises:
                await db.execute(
                    """
                    INSERT INTO workout_template_exercises
                    (workout_id, exercise_id, position, sets)
                    VALUES (?, ?, ?, ?)
                    """,
                    (workout.id, slot.exercise.id, slot.order, json.dumps(list(slot.sets))),
                )
            count += 1

        await db.commit()

    logger.debug("Seeded %d templates into %s", count, db_path)
    return count
