"""Collaborators of the program editor."""

from .base import (
    FormStateBridge,
    Notification,
    NotificationSink,
    ProgramSubmitter,
    Severity,
    TemplateLookup,
)
from .memory import (
    CollectingNotificationSink,
    DictFormState,
    InMemoryTemplateLookup,
    LoggingNotificationSink,
)

__all__ = [
    "CollectingNotificationSink",
    "DictFormState",
    "FormStateBridge",
    "InMemoryTemplateLookup",
    "LoggingNotificationSink",
    "Notification",
    "NotificationSink",
    "ProgramSubmitter",
    "Severity",
    "TemplateLookup",
]
