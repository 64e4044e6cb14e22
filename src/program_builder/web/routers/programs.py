"""Saved program routes."""

from fastapi import APIRouter, HTTPException, Request

from ...builder.aggregate import program_duration
from ...db.repositories import ProgramRepository

router = APIRouter(prefix="/programs", tags=["programs"])


def get_repo(request: Request) -> ProgramRepository:
    return ProgramRepository(request.app.state.db_path)


@router.get("")
async def programs_list(request: Request):
    """List all programs."""
    programs = await get_repo(request).list_all()
    return {
        "programs": [
            {
                "id": p.id,
                "name": p.name,
                "status": p.status.value,
                "totalWorkouts": p.total_workouts,
                "totalExercises": p.total_exercises,
                "createdAt": p.created_at.isoformat() if p.created_at else None,
            }
            for p in programs
        ]
    }


@router.get("/{program_id}")
async def program_detail(program_id: int, request: Request):
    """Get a program with its full tree."""
    program = await get_repo(request).get(program_id)
    if program is None:
        raise HTTPException(status_code=404, detail=f"Program ID {program_id} not found")
    return {
        "id": program.id,
        **program.to_dict(),
        "totalDuration": program_duration(program),
        "summary": program.get_summary(),
    }


@router.delete("/{program_id}", status_code=204)
async def program_delete(program_id: int, request: Request):
    """Delete a program."""
    if not await get_repo(request).delete(program_id):
        raise HTTPException(status_code=404, detail=f"Program ID {program_id} not found")
