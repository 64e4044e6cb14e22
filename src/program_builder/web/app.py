"""FastAPI application for the program-builder API."""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse

from .. import __version__
from ..builder.errors import InvalidPatchError, InvalidPathError, NotFoundError, TypeMismatchError
from ..db.engine import get_db_path, init_db, seed_templates
from .routers import builder, programs, templates
from .sessions import SessionStore


def create_app(db_path: Path | None = None, sessions: SessionStore | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Initialize the database on first start."""
        path = app.state.db_path
        if not path.exists():
            await init_db(path)
            await seed_templates(path)
        yield

    app = FastAPI(
        title="program-builder",
        description="Compose training programs from workout and exercise templates",
        version=__version__,
        lifespan=lifespan,
    )

    app.state.db_path = db_path or get_db_path()
    app.state.sessions = sessions or SessionStore()

    app.include_router(builder.router)
    app.include_router(programs.router)
    app.include_router(templates.router)

    @app.exception_handler(NotFoundError)
    async def not_found(request: Request, exc: NotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(TypeMismatchError)
    async def type_mismatch(request: Request, exc: TypeMismatchError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    @app.exception_handler(InvalidPathError)
    @app.exception_handler(InvalidPatchError)
    @app.exception_handler(ValueError)
    async def invalid_request(request: Request, exc: Exception):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.get("/")
    async def root():
        """Root redirect to the API docs."""
        return RedirectResponse(url="/docs", status_code=302)

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "healthy", "version": __version__}

    return app
