"""In-memory program edit sessions for the web API."""

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from uuid import uuid4

from ..builder import EditorOptions, ProgramBuilder
from ..clients import CollectingNotificationSink, DictFormState, TemplateLookup
from ..models.program import Program

logger = logging.getLogger(__name__)


@dataclass
class BuilderSession:
    """One program being edited through the API."""

    id: str
    builder: ProgramBuilder
    form: DictFormState
    notifications: CollectingNotificationSink
    created_at: datetime = field(default_factory=datetime.now)
    last_used_at: datetime = field(default_factory=datetime.now)

    def touch(self) -> None:
        self.last_used_at = datetime.now()

    def to_dict(self) -> dict:
        """Session state; notifications are handed out once."""
        return {
            "id": self.id,
            "programId": self.builder.program_id,
            "program": self.form.get_value(""),
            "selection": self.builder.selection.state.to_dict(),
            "isSaving": self.builder.is_saving,
            "notifications": [n.to_dict() for n in self.notifications.drain()],
            "createdAt": self.created_at.isoformat(),
        }


class SessionStore:
    """Tracks open edit sessions, dropping the least recently used ones."""

    def __init__(self, max_sessions: int = 50, options: EditorOptions | None = None):
        self._sessions: dict[str, BuilderSession] = {}
        self._max_sessions = max_sessions
        self._options = options
        self._lock = asyncio.Lock()

    async def create(
        self,
        templates: TemplateLookup,
        program: Program | None = None,
    ) -> BuilderSession:
        """Open a session on ``program`` (a new empty program when None)."""
        async with self._lock:
            form = DictFormState()
            sink = CollectingNotificationSink(max_items=100)
            builder = ProgramBuilder(form, notifications=sink, templates=templates, options=self._options)
            if program is not None:
                builder.load(program)
            session = BuilderSession(
                id=str(uuid4())[:8],
                builder=builder,
                form=form,
                notifications=sink,
            )
            self._sessions[session.id] = session
            self._cleanup_old_sessions()
            logger.debug("Opened session %s", session.id)
            return session

    async def get(self, session_id: str) -> BuilderSession | None:
        session = self._sessions.get(session_id)
        if session:
            session.touch()
        return session

    async def list_sessions(self) -> list[BuilderSession]:
        return list(self._sessions.values())

    async def close(self, session_id: str) -> bool:
        async with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def _cleanup_old_sessions(self):
        """Remove least recently used sessions if over limit."""
        if len(self._sessions) <= self._max_sessions:
            return
        by_use = sorted(self._sessions.values(), key=lambda s: s.last_used_at)
        for session in by_use[: len(self._sessions) - self._max_sessions]:
            logger.info("Dropping idle session %s", session.id)
            del self._sessions[session.id]
