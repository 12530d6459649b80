from __future__ import annotations

from .registry import (
    InMemoryTaskRegistry,
    RegistrationOptions,
    StoredTaskRegistry,
    TaskRegistrationService,
    TaskServiceError,
    WakeResult,
)
from .scheduler import ReminderScheduler
from .wake import ReminderWake

__all__ = [
    "TaskRegistrationService",
    "RegistrationOptions",
    "InMemoryTaskRegistry",
    "StoredTaskRegistry",
    "TaskServiceError",
    "WakeResult",
    "ReminderScheduler",
    "ReminderWake",
]
