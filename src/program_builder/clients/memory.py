"""In-memory collaborators for the program editor."""

import copy
import logging
from typing import Any

from ..models.templates import (
    DEFAULT_EXERCISE_TEMPLATES,
    DEFAULT_WORKOUT_TEMPLATES,
    ExerciseTemplate,
    TemplateKind,
    WorkoutTemplate,
)
from ..utils.template_utils import matches_search, paginate
from .base import Notification, Severity

logger = logging.getLogger(__name__)


class InMemoryTemplateLookup:
    """Template lookup over lists of template records."""

    def __init__(
        self,
        workouts: list[dict] | None = None,
        exercises: list[dict] | None = None,
    ):
        self._records = {
            TemplateKind.WORKOUTS: list(workouts or []),
            TemplateKind.EXERCISES: list(exercises or []),
        }

    @classmethod
    def from_templates(
        cls,
        workouts: list[WorkoutTemplate] | None = None,
        exercises: list[ExerciseTemplate] | None = None,
    ) -> "InMemoryTemplateLookup":
        """Build a lookup from template objects (defaults to the built-in library)."""
        if workouts is None:
            workouts = DEFAULT_WORKOUT_TEMPLATES
        if exercises is None:
            exercises = DEFAULT_EXERCISE_TEMPLATES
        return cls(
            workouts=[w.to_dict() for w in workouts],
            exercises=[e.to_dict() for e in exercises],
        )

    async def search(
        self,
        kind: TemplateKind,
        filters: dict[str, Any] | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> list[dict]:
        filters = filters or {}
        query = filters.get("search")
        ids = filters.get("ids")
        records = [
            r
            for r in self._records[TemplateKind(kind)]
            if matches_search(r.get("name", ""), query) and (ids is None or r.get("id") in ids)
        ]
        records.sort(key=lambda r: r.get("name", "").lower())
        return copy.deepcopy(paginate(records, page, page_size))


class DictFormState:
    """Form state held in a plain dict, addressed by dotted paths."""

    def __init__(self, values: dict | None = None):
        self.values: dict = values if values is not None else {}
        self.writes = 0

    def get_value(self, path: str = "") -> Any:
        if not path:
            return self.values
        current: Any = self.values
        for part in path.split("."):
            if isinstance(current, list):
                current = current[int(part)]
            elif isinstance(current, dict):
                current = current.get(part)
            else:
                return None
            if current is None:
                return None
        return current

    def set_value(self, path: str, value: Any) -> None:
        self.writes += 1
        if not path:
            self.values = value
            return
        parts = path.split(".")
        current: Any = self.values
        for part in parts[:-1]:
            current = current[int(part)] if isinstance(current, list) else current.setdefault(part, {})
        if isinstance(current, list):
            current[int(parts[-1])] = value
        else:
            current[parts[-1]] = value


class LoggingNotificationSink:
    """Writes notifications to the log."""

    _LEVELS = {
        Severity.SUCCESS: logging.INFO,
        Severity.INFO: logging.INFO,
        Severity.WARNING: logging.WARNING,
        Severity.ERROR: logging.ERROR,
    }

    def notify(self, notification: Notification) -> None:
        logger.log(
            self._LEVELS[notification.severity],
            "[%s] %s",
            notification.severity.value,
            notification.message,
        )


class CollectingNotificationSink:
    """Keeps notifications in a list, newest last."""

    def __init__(self, max_items: int | None = None):
        self.notifications: list[Notification] = []
        self._max_items = max_items

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)
        if self._max_items is not None and len(self.notifications) > self._max_items:
            del self.notifications[: -self._max_items]

    def drain(self) -> list[Notification]:
        """Return and forget the collected notifications."""
        items, self.notifications = self.notifications, []
        return items
