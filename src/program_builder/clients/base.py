"""Contracts for the collaborators the program editor talks to."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Awaitable, Callable, Protocol, runtime_checkable

from ..models.templates import TemplateKind


class Severity(str, Enum):
    """Notification severities."""

    SUCCESS = "success"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


@dataclass
class Notification:
    """A user-facing outcome of an editor action."""

    severity: Severity
    message: str
    description: str = ""
    created_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        return {
            "severity": self.severity.value,
            "message": self.message,
            "description": self.description,
            "createdAt": self.created_at.isoformat(),
        }


@runtime_checkable
class TemplateLookup(Protocol):
    """Searchable source of workout and exercise templates."""

    async def search(
        self,
        kind: TemplateKind,
        filters: dict[str, Any] | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> list[dict]:
        """Search template records.

        Args:
            kind: Which resource to search
            filters: ``search`` (text contained in the name) and/or ``ids``
            page: 1-based page number
            page_size: Records per page

        Returns:
            Template records (``id``, ``name``, ...) for the requested page
        """
        ...


@runtime_checkable
class FormStateBridge(Protocol):
    """The form store that owns the program being edited."""

    def get_value(self, path: str = "") -> Any:
        """Read a value by dotted path; ``""`` returns the whole program."""
        ...

    def set_value(self, path: str, value: Any) -> None:
        """Write a value by dotted path; ``""`` replaces the whole program."""
        ...


@runtime_checkable
class NotificationSink(Protocol):
    """Receives user-facing notifications. Fire and forget."""

    def notify(self, notification: Notification) -> None:
        ...


# Persists a save payload and returns whatever the backend answers (e.g. an id)
ProgramSubmitter = Callable[[dict], Awaitable[Any]]
