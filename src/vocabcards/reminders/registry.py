"""Task Registration Service contract and local implementations.

The reminder task is a single, named periodic wake-up held by an outside
facility (on a phone, the OS background-fetch service). The scheduler talks
to it only through `TaskRegistrationService`:

- ``register(interval_minutes, options)`` : start (or replace) the task.
- ``unregister()``                        : stop the task.
- ``is_registered()``                     : whether a task is currently held.

Every call may fail; implementations raise and the scheduler turns failures
into `SchedulingError`.

Two local implementations are provided:

- `InMemoryTaskRegistry` keeps the registration in process memory and can
  `fire()` the wake callback on demand.
- `StoredTaskRegistry` additionally persists the registration record through a
  `StorageBackend`, so separate processes (e.g. CLI invocations) agree on it.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Protocol, runtime_checkable

from pydantic import TypeAdapter
from pydantic import ValidationError as SchemaError

from vocabcards.core.config import get_logger
from vocabcards.core.errors import StorageReadError
from vocabcards.storage.backend import StorageBackend

TASK_KEY = "reminderTask"

log = get_logger(__name__)


class WakeResult(str, Enum):
    """What a wake callback reports back to the registration service."""

    NEW_DATA = "new_data"
    NO_DATA = "no_data"
    FAILED = "failed"


WakeCallback = Callable[[], Awaitable[WakeResult]]


@dataclass(frozen=True, slots=True)
class RegistrationOptions:
    """Lifetime flags requested for the periodic task."""

    continue_after_app_exit: bool = True
    start_at_boot: bool = True


@dataclass(frozen=True, slots=True)
class Registration:
    """One active registration as held by the service."""

    interval_minutes: int
    options: RegistrationOptions = field(default_factory=RegistrationOptions)
    registered_at: str = field(
        default_factory=lambda: datetime.now(UTC).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    )

    @property
    def minimum_interval_seconds(self) -> int:
        return self.interval_minutes * 60


# Stored form of the registration record; ``null`` when nothing is registered.
StoredRegistration: TypeAdapter[Registration | None] = TypeAdapter(Registration | None)


class TaskServiceError(RuntimeError):
    """Raised by the local registries when a call cannot be honoured."""


@runtime_checkable
class TaskRegistrationService(Protocol):
    async def register(self, interval_minutes: int, options: RegistrationOptions) -> None: ...

    async def unregister(self) -> None: ...

    async def is_registered(self) -> bool: ...


class InMemoryTaskRegistry:
    """
    Process-local registration service.

    Attributes
    ----------
    active : list[Registration]
        Registrations currently held. The scheduler keeps this at zero or one;
        `peak_active` records the highest count ever observed.
    history : list[tuple[str, int | None]]
        ``("register", interval)`` / ``("unregister", None)`` call log.
    """

    def __init__(self, on_wake: WakeCallback | None = None) -> None:
        self.on_wake = on_wake
        self.active: list[Registration] = []
        self.peak_active = 0
        self.history: list[tuple[str, int | None]] = []

    async def register(self, interval_minutes: int, options: RegistrationOptions) -> None:
        if interval_minutes <= 0:
            raise TaskServiceError(f"minimum interval must be positive, got {interval_minutes}")
        self.active.append(Registration(interval_minutes=interval_minutes, options=options))
        self.peak_active = max(self.peak_active, len(self.active))
        self.history.append(("register", interval_minutes))
        log.debug("Registered reminder task every %d min", interval_minutes)

    async def unregister(self) -> None:
        if not self.active:
            raise TaskServiceError("reminder task is not registered")
        self.active.clear()
        self.history.append(("unregister", None))
        log.debug("Unregistered reminder task")

    async def is_registered(self) -> bool:
        return bool(self.active)

    @property
    def current(self) -> Registration | None:
        return self.active[-1] if self.active else None

    async def fire(self) -> WakeResult:
        """Invoke the wake callback as the service would on its schedule."""
        if not self.active:
            raise TaskServiceError("cannot wake: reminder task is not registered")
        if self.on_wake is None:
            return WakeResult.NO_DATA
        return await self.on_wake()


class StoredTaskRegistry(InMemoryTaskRegistry):
    """`InMemoryTaskRegistry` whose registration survives across processes."""

    def __init__(
        self,
        backend: StorageBackend,
        on_wake: WakeCallback | None = None,
        key: str = TASK_KEY,
    ) -> None:
        super().__init__(on_wake)
        self._backend = backend
        self._key = key
        self._loaded = False

    async def _sync(self) -> None:
        if self._loaded:
            return
        raw = await self._backend.read(self._key)
        if raw:
            try:
                stored = StoredRegistration.validate_json(raw)
            except SchemaError as exc:
                log.error("Stored reminder task under %s does not decode: %s", self._key, exc)
                raise StorageReadError(self._key, "stored reminder task is malformed") from exc
            if stored is not None:
                self.active = [stored]
                self.peak_active = 1
        self._loaded = True

    async def _save(self) -> None:
        payload = StoredRegistration.dump_json(self.current).decode()
        await self._backend.write(self._key, payload)

    async def register(self, interval_minutes: int, options: RegistrationOptions) -> None:
        await self._sync()
        await super().register(interval_minutes, options)
        try:
            await self._save()
        except Exception:
            self.active.pop()
            raise

    async def unregister(self) -> None:
        await self._sync()
        previous = list(self.active)
        await super().unregister()
        try:
            await self._save()
        except Exception:
            self.active = previous
            raise

    async def is_registered(self) -> bool:
        await self._sync()
        return await super().is_registered()

    async def fire(self) -> WakeResult:
        await self._sync()
        return await super().fire()


__all__ = [
    "TASK_KEY",
    "WakeResult",
    "WakeCallback",
    "RegistrationOptions",
    "Registration",
    "TaskServiceError",
    "TaskRegistrationService",
    "InMemoryTaskRegistry",
    "StoredTaskRegistry",
]
