"""Program builder session routes."""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ...builder import DragEndEvent
from ...db.repositories import ProgramRepository, TemplateRepository
from ...models.program import ProgramStatus, SetType
from ..sessions import BuilderSession, SessionStore

router = APIRouter(prefix="/builder/sessions", tags=["builder"])


# =============================================================================
# Request models
# =============================================================================


class CamelModel(BaseModel):
    model_config = {"populate_by_name": True}


class CreateSessionRequest(CamelModel):
    program_id: int | None = Field(None, alias="programId")


class AddWorkoutRequest(CamelModel):
    """Either a template id from the library or an inline template record."""

    workout_id: str | None = Field(None, alias="workoutId")
    template: dict[str, Any] | None = None
    note: str = ""


class UpdateWorkoutRequest(CamelModel):
    note: str


class AddExerciseRequest(CamelModel):
    exercise_id: str | None = Field(None, alias="exerciseId")
    template: dict[str, Any] | None = None
    notes: str = ""
    sets: list[dict[str, Any]] | None = None


class UpdateExerciseRequest(CamelModel):
    notes: str


class AddSetRequest(CamelModel):
    type: SetType | None = None
    value: float | None = Field(None, ge=0)
    break_time: float | None = Field(None, alias="breakTime", ge=0)
    position: int | None = Field(None, ge=0)


class UpdateSetRequest(CamelModel):
    type: SetType | None = None
    value: float | None = Field(None, ge=0)
    break_time: float | None = Field(None, alias="breakTime", ge=0)


class DragEndRequest(CamelModel):
    dragged_id: str = Field(..., alias="draggedId")
    dragged_container_id: str = Field(..., alias="draggedContainerId")
    target_id: str | None = Field(None, alias="targetId")
    target_container_id: str | None = Field(None, alias="targetContainerId")


class SelectionRequest(CamelModel):
    workout_id: str | None = Field(None, alias="workoutId")
    exercise_id: str | None = Field(None, alias="exerciseId")


class UpdateProgramRequest(CamelModel):
    name: str | None = None
    description: str | None = None
    duration_days: int | None = Field(None, alias="durationDays")
    rotation_days: int | None = Field(None, alias="rotationDays")
    status: ProgramStatus | None = None


# =============================================================================
# Dependencies
# =============================================================================


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_template_repo(request: Request) -> TemplateRepository:
    return TemplateRepository(request.app.state.db_path)


def get_program_repo(request: Request) -> ProgramRepository:
    return ProgramRepository(request.app.state.db_path)


async def get_session(
    session_id: str, sessions: SessionStore = Depends(get_sessions)
) -> BuilderSession:
    session = await sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return session


# =============================================================================
# Sessions
# =============================================================================


@router.post("", status_code=201)
async def create_session(
    body: CreateSessionRequest | None = None,
    sessions: SessionStore = Depends(get_sessions),
    template_repo: TemplateRepository = Depends(get_template_repo),
    program_repo: ProgramRepository = Depends(get_program_repo),
):
    """Open an edit session on a new or saved program."""
    program = None
    if body is not None and body.program_id is not None:
        program = await program_repo.get(body.program_id)
        if program is None:
            raise HTTPException(status_code=404, detail=f"Program ID {body.program_id} not found")
    session = await sessions.create(template_repo, program)
    return session.to_dict()


@router.get("/{session_id}")
async def get_session_state(session: BuilderSession = Depends(get_session)):
    return session.to_dict()


@router.delete("/{session_id}", status_code=204)
async def close_session(session_id: str, sessions: SessionStore = Depends(get_sessions)):
    if not await sessions.close(session_id):
        raise HTTPException(status_code=404, detail="Session not found")


@router.patch("/{session_id}/program")
async def update_program(body: UpdateProgramRequest, session: BuilderSession = Depends(get_session)):
    """Edit program-level fields."""
    session.builder.update_program(**body.model_dump(exclude_unset=True))
    return session.to_dict()


# =============================================================================
# Workouts
# =============================================================================


@router.post("/{session_id}/workouts", status_code=201)
async def add_workout(
    body: AddWorkoutRequest,
    session: BuilderSession = Depends(get_session),
    template_repo: TemplateRepository = Depends(get_template_repo),
):
    """Allocate a workout template to the program."""
    template = body.template
    if template is None:
        if not body.workout_id:
            raise HTTPException(status_code=422, detail="workoutId or template is required")
        template = await template_repo.get_workout(body.workout_id)
        if template is None:
            raise HTTPException(status_code=404, detail=f"Workout template {body.workout_id} not found")
    workout = session.builder.add_workout(template, note=body.note)
    return {"workoutId": workout.id, **session.to_dict()}


@router.patch("/{session_id}/workouts/{workout_id}")
async def update_workout(
    workout_id: str, body: UpdateWorkoutRequest, session: BuilderSession = Depends(get_session)
):
    if session.builder.update_workout_note(workout_id, body.note) is None:
        raise HTTPException(status_code=404, detail=f"Workout {workout_id} not found")
    return session.to_dict()


@router.delete("/{session_id}/workouts/{workout_id}")
async def delete_workout(workout_id: str, session: BuilderSession = Depends(get_session)):
    if session.builder.delete_workout(workout_id) is None:
        raise HTTPException(status_code=404, detail=f"Workout {workout_id} not found")
    return session.to_dict()


# =============================================================================
# Exercises
# =============================================================================


@router.post("/{session_id}/workouts/{workout_id}/exercises", status_code=201)
async def add_exercise(
    workout_id: str,
    body: AddExerciseRequest,
    session: BuilderSession = Depends(get_session),
    template_repo: TemplateRepository = Depends(get_template_repo),
):
    """Allocate an exercise template to a workout."""
    template = body.template
    if template is None:
        if not body.exercise_id:
            raise HTTPException(status_code=422, detail="exerciseId or template is required")
        template = await template_repo.get_exercise(body.exercise_id)
        if template is None:
            raise HTTPException(status_code=404, detail=f"Exercise template {body.exercise_id} not found")
    if not session.builder.store.exists((workout_id,)):
        raise HTTPException(status_code=404, detail=f"Workout {workout_id} not found")
    exercise = session.builder.add_exercise(workout_id, template, sets=body.sets, notes=body.notes)
    return {"exerciseId": exercise.id, **session.to_dict()}


@router.patch("/{session_id}/exercises/{exercise_id}")
async def update_exercise(
    exercise_id: str, body: UpdateExerciseRequest, session: BuilderSession = Depends(get_session)
):
    if session.builder.update_exercise_notes(exercise_id, body.notes) is None:
        raise HTTPException(status_code=404, detail=f"Exercise {exercise_id} not found")
    return session.to_dict()


@router.delete("/{session_id}/exercises/{exercise_id}")
async def delete_exercise(exercise_id: str, session: BuilderSession = Depends(get_session)):
    if session.builder.delete_exercise(exercise_id) is None:
        raise HTTPException(status_code=404, detail=f"Exercise {exercise_id} not found")
    return session.to_dict()


# =============================================================================
# Sets
# =============================================================================


@router.post("/{session_id}/exercises/{exercise_id}/sets", status_code=201)
async def add_set(
    exercise_id: str,
    body: AddSetRequest | None = None,
    session: BuilderSession = Depends(get_session),
):
    """Append a set; without a body a blank reps set is added."""
    builder = session.builder
    builder.get_exercise(exercise_id)
    values = body.model_dump(exclude_unset=True) if body is not None else {}
    position = values.pop("position", None)
    new_set = builder.add_set(exercise_id, values or None, position=position)
    return {
        "setId": new_set.id,
        "totalDuration": builder.exercise_duration(exercise_id),
        **session.to_dict(),
    }


@router.patch("/{session_id}/sets/{set_id}")
async def update_set(set_id: str, body: UpdateSetRequest, session: BuilderSession = Depends(get_session)):
    if session.builder.update_set(set_id, **body.model_dump(exclude_unset=True)) is None:
        raise HTTPException(status_code=404, detail=f"Set {set_id} not found")
    return session.to_dict()


@router.delete("/{session_id}/sets/{set_id}")
async def remove_set(set_id: str, session: BuilderSession = Depends(get_session)):
    if session.builder.remove_set(set_id) is None:
        raise HTTPException(status_code=404, detail=f"Set {set_id} not found")
    return session.to_dict()


# =============================================================================
# Drag and drop, selection, save
# =============================================================================


@router.post("/{session_id}/drag")
async def drag_end(body: DragEndRequest, session: BuilderSession = Depends(get_session)):
    """Apply a drag-end gesture."""
    event = DragEndEvent(
        dragged_id=body.dragged_id,
        dragged_container_id=body.dragged_container_id,
        target_id=body.target_id,
        target_container_id=body.target_container_id or body.dragged_container_id,
    )
    result = session.builder.handle_drag_end(event)
    return {"outcome": result.outcome.value, **session.to_dict()}


@router.post("/{session_id}/selection")
async def select(body: SelectionRequest, session: BuilderSession = Depends(get_session)):
    """Select a workout, or an exercise inside a workout."""
    if body.exercise_id is not None:
        if body.workout_id is None:
            raise HTTPException(status_code=422, detail="workoutId is required to select an exercise")
        session.builder.select_exercise(body.workout_id, body.exercise_id)
    else:
        session.builder.select_workout(body.workout_id)
    return session.to_dict()


@router.post("/{session_id}/save")
async def save(
    session: BuilderSession = Depends(get_session),
    program_repo: ProgramRepository = Depends(get_program_repo),
):
    """Persist the program, creating it on first save."""
    builder = session.builder
    result = await builder.save(
        lambda payload: program_repo.submit(payload, program_id=builder.program_id)
    )
    content = {
        "success": result.success,
        "error": result.error,
        "errors": result.validation_errors,
        **session.to_dict(),
    }
    if result.validation_errors:
        return JSONResponse(status_code=422, content=content)
    if not result.success:
        return JSONResponse(status_code=500, content=content)
    return content
