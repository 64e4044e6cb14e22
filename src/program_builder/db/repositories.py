"""Data access repositories."""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any

import aiosqlite

from ..models.program import (
    AllocatedExercise,
    AllocatedWorkout,
    ExerciseSet,
    Program,
    ProgramStatus,
    SetType,
)
from ..models.templates import (
    ExerciseTemplate,
    TemplateExercise,
    TemplateKind,
    WorkoutTemplate,
)
from .engine import get_db_path, seed_templates

logger = logging.getLogger(__name__)


async def _fetch_exercise_templates(
    db: aiosqlite.Connection, ids: set[str]
) -> dict[str, ExerciseTemplate]:
    if not ids:
        return {}
    placeholders = ", ".join("?" for _ in ids)
    cursor = await db.execute(
        f"SELECT * FROM exercise_templates WHERE id IN ({placeholders})",
        tuple(ids),
    )
    rows = await cursor.fetchall()
    return {row["id"]: _row_to_exercise(row) for row in rows}


async def _fetch_workout_templates(
    db: aiosqlite.Connection, ids: set[str]
) -> dict[str, WorkoutTemplate]:
    if not ids:
        return {}
    placeholders = ", ".join("?" for _ in ids)
    cursor = await db.execute(
        f"SELECT * FROM workout_templates WHERE id IN ({placeholders})",
        tuple(ids),
    )
    workout_rows = await cursor.fetchall()

    cursor = await db.execute(
        f"""
        SELECT wte.workout_id, wte.position, wte.sets, et.*
        FROM workout_template_exercises wte
        JOIN exercise_templates et ON et.id = wte.exercise_id
        WHERE wte.workout_id IN ({placeholders})
        ORDER BY wte.workout_id, wte.position
        """,
        tuple(ids),
    )
    slots: dict[str, list[TemplateExercise]] = {}
    for row in await cursor.fetchall():
        slots.setdefault(row["workout_id"], []).append(
            TemplateExercise(
                exercise=_row_to_exercise(row),
                order=row["position"],
                sets=tuple(json.loads(row["sets"] or "[]")),
            )
        )

    return {
        row["id"]: WorkoutTemplate(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            exercises=tuple(slots.get(row["id"], [])),
        )
        for row in workout_rows
    }


def _row_to_exercise(row: aiosqlite.Row) -> ExerciseTemplate:
    """Convert a database row to an ExerciseTemplate."""
    return ExerciseTemplate(
        id=row["id"],
        name=row["name"],
        description=row["description"] or "",
        primary_muscle_id=row["primary_muscle_id"],
        video_url=row["video_url"],
        type=row["type"],
    )


class TemplateRepository:
    """Repository for the workout and exercise template library.

    Implements the template lookup used by the program editor.
    """

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def search(
        self,
        kind: TemplateKind,
        filters: dict[str, Any] | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> list[dict]:
        """Search templates by name and/or id, one page at a time."""
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be >= 1")
        kind = TemplateKind(kind)
        filters = filters or {}
        table = "workout_templates" if kind == TemplateKind.WORKOUTS else "exercise_templates"

        clauses = []
        params: list[Any] = []
        if filters.get("search"):
            clauses.append("name LIKE ?")
            params.append(f"%{filters['search'].strip()}%")
        if filters.get("ids") is not None:
            ids = list(filters["ids"])
            if not ids:
                return []
            clauses.append(f"id IN ({', '.join('?' for _ in ids)})")
            params.extend(ids)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""

        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                f"SELECT id FROM {table} {where} ORDER BY name COLLATE NOCASE LIMIT ? OFFSET ?",
                (*params, page_size, (page - 1) * page_size),
            )
            ids = [row["id"] for row in await cursor.fetchall()]
            if kind == TemplateKind.WORKOUTS:
                found = await _fetch_workout_templates(db, set(ids))
            else:
                found = await _fetch_exercise_templates(db, set(ids))

        return [found[i].to_dict() for i in ids if i in found]

    async def get_workout(self, workout_id: str) -> WorkoutTemplate | None:
        """Get a workout template with its exercises."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            found = await _fetch_workout_templates(db, {workout_id})
        return found.get(workout_id)

    async def get_exercise(self, exercise_id: str) -> ExerciseTemplate | None:
        """Get an exercise template."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            found = await _fetch_exercise_templates(db, {exercise_id})
        return found.get(exercise_id)

    async def add_workout(self, template: WorkoutTemplate) -> None:
        """Add or replace a workout template (and the exercises it uses)."""
        await seed_templates(self.db_path, workouts=[template], exercises=[])

    async def add_exercise(self, template: ExerciseTemplate) -> None:
        """Add or replace an exercise template."""
        await seed_templates(self.db_path, workouts=[], exercises=[template])

    async def count(self, kind: TemplateKind) -> int:
        table = "workout_templates" if TemplateKind(kind) == TemplateKind.WORKOUTS else "exercise_templates"
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(f"SELECT COUNT(*) FROM {table}")
            row = await cursor.fetchone()
            return row[0]


class ProgramRepository:
    """Repository for saved programs."""

    def __init__(self, db_path: Path | None = None):
        self.db_path = db_path or get_db_path()

    async def submit(self, payload: dict, program_id: int | None = None) -> int:
        """Persist a save payload.

        Args:
            payload: Save payload as built by ``Program.to_submission()``
            program_id: Existing program to overwrite; creates a new one when None

        Returns:
            Id of the saved program
        """
        name = (payload.get("name") or "").strip()
        if not name:
            raise ValueError("Program name is required")

        values = (
            name,
            payload.get("description") or "",
            payload.get("durationDays"),
            payload.get("rotationDays"),
            ProgramStatus(payload.get("status") or ProgramStatus.DRAFT).value,
            json.dumps({"allocatedWorkouts": payload.get("allocatedWorkouts") or []}),
        )

        async with aiosqlite.connect(self.db_path) as db:
            if program_id is None:
                cursor = await db.execute(
                    """
                    INSERT INTO programs
                    (name, description, duration_days, rotation_days, status, structure)
                    VALUES (?, ?, ?, ?, ?, ?)
                    """,
                    values,
                )
                await db.commit()
                logger.info("Created program %d (%s)", cursor.lastrowid, name)
                return cursor.lastrowid

            cursor = await db.execute(
                """
                UPDATE programs SET
                    name = ?, description = ?, duration_days = ?, rotation_days = ?,
                    status = ?, structure = ?, updated_at = CURRENT_TIMESTAMP
                WHERE id = ?
                """,
                (*values, program_id),
            )
            await db.commit()
            if cursor.rowcount == 0:
                raise ValueError(f"Program ID {program_id} not found")
            logger.info("Updated program %d (%s)", program_id, name)
            return program_id

    async def get(self, program_id: int) -> Program | None:
        """Get a program by ID, with template refs hydrated."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM programs WHERE id = ?", (program_id,)
            )
            row = await cursor.fetchone()
            if row is None:
                return None
            return await self._row_to_program(db, row)

    async def get_payload(self, program_id: int) -> dict | None:
        """Get a program in save-payload form."""
        program = await self.get(program_id)
        return program.to_submission() if program else None

    async def list_all(self) -> list[Program]:
        """List all programs."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            cursor = await db.execute(
                "SELECT * FROM programs ORDER BY created_at DESC, id DESC"
            )
            rows = await cursor.fetchall()
            return [await self._row_to_program(db, row) for row in rows]

    async def delete(self, program_id: int) -> bool:
        """Delete a program. Returns False when it did not exist."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute("DELETE FROM programs WHERE id = ?", (program_id,))
            await db.commit()
            return cursor.rowcount > 0

    async def _row_to_program(self, db: aiosqlite.Connection, row: aiosqlite.Row) -> Program:
        """Convert a database row to a Program.

        Template refs are looked up by id; a template that no longer exists
        falls back to the name stored in the payload.
        """
        structure = json.loads(row["structure"])
        workouts_data = structure.get("allocatedWorkouts") or []

        workout_ids = {w["workoutId"] for w in workouts_data if w.get("workoutId")}
        exercise_ids = {
            ex["exerciseId"]
            for w in workouts_data
            for ex in w.get("allocatedExercises") or []
            if ex.get("exerciseId")
        }
        workout_refs = await _fetch_workout_templates(db, workout_ids)
        exercise_refs = await _fetch_exercise_templates(db, exercise_ids)

        workouts = []
        for w_index, w in enumerate(workouts_data, start=1):
            workout_ref = workout_refs.get(w.get("workoutId")) or WorkoutTemplate(
                id=w.get("workoutId") or "",
                name=w.get("name") or "Untitled Workout",
            )
            exercises = []
            for e_index, ex in enumerate(w.get("allocatedExercises") or [], start=1):
                exercise_ref = exercise_refs.get(ex.get("exerciseId")) or ExerciseTemplate(
                    id=ex.get("exerciseId") or "",
                    name=ex.get("name") or "Unknown",
                )
                exercises.append(
                    AllocatedExercise(
                        exercise_ref=exercise_ref,
                        order=ex.get("order") or e_index,
                        notes=ex.get("notes") or "",
                        sets=[
                            ExerciseSet(
                                type=SetType(s.get("type") or SetType.REPS),
                                value=s.get("value") or 0,
                                break_time=s.get("breakTime"),
                                order=s_index,
                            )
                            for s_index, s in enumerate(ex.get("sets") or [], start=1)
                        ],
                    )
                )
            workouts.append(
                AllocatedWorkout(
                    workout_ref=workout_ref,
                    order=w.get("order") or w_index,
                    note=w.get("note") or "",
                    exercises=exercises,
                )
            )

        return Program(
            id=row["id"],
            name=row["name"],
            description=row["description"] or "",
            duration_days=row["duration_days"],
            rotation_days=row["rotation_days"],
            status=ProgramStatus(row["status"] or ProgramStatus.DRAFT),
            workouts=workouts,
            created_at=datetime.fromisoformat(row["created_at"]) if row["created_at"] else None,
        )
