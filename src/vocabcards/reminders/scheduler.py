"""
Reminder Scheduler: keeps the external reminder task in step with settings.

States
------
- ``Disabled``               : no registration held by the service.
- ``Enabled(interval)``      : exactly one registration at ``interval`` minutes.

The logical state is whatever the Settings Store says; the scheduler's job is
to make sure the store never claims ``enabled`` without a confirmed
registration behind it. Each transition talks to the registration service
first and only records the outcome once the service confirmed it.

Failure policy
--------------
Registration calls are not retried. A failed call raises `SchedulingError`
carrying the transition, the failed step and the state that now holds (and
that settings already reflect). When the service succeeded but the settings
write failed, the service call is undone where possible and the
`StorageWriteError` propagates. Settings are only ever changed field by field
through `SettingsStore.update`, so other fields written meanwhile survive.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import NoReturn

from vocabcards.core.config import get_logger
from vocabcards.core.contracts.reminder import ReminderSettings, ReminderState
from vocabcards.core.errors import (
    RegistrationStep,
    SchedulingError,
    StorageWriteError,
    ValidationError,
)
from vocabcards.reminders.registry import RegistrationOptions, TaskRegistrationService
from vocabcards.stores.settings import SettingsStore

log = get_logger(__name__)


def _require_positive(minutes: int) -> None:
    if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
        raise ValidationError(f"reminder interval must be a positive integer, got {minutes!r}")


class ReminderScheduler:
    """Coordinator between `SettingsStore` and a `TaskRegistrationService`."""

    def __init__(
        self,
        settings: SettingsStore,
        service: TaskRegistrationService,
        options: RegistrationOptions | None = None,
    ) -> None:
        self._settings = settings
        self._service = service
        self._options = options or RegistrationOptions()
        self._lock = asyncio.Lock()

    async def state(self) -> ReminderState:
        return ReminderState.from_settings(await self._settings.get())

    async def enable(self, interval_minutes: int) -> ReminderState:
        """Register the reminder task and record ``enabled`` once confirmed."""
        _require_positive(interval_minutes)
        async with self._lock:
            current = await self._settings.get()
            if current.enabled:
                return await self._reschedule("enable", current, interval_minutes)

            await self._register("enable", interval_minutes, current)
            try:
                current = await self._record(enabled=True, interval_minutes=interval_minutes)
            except StorageWriteError:
                await self._undo(self._service.unregister, "unregister after failed save")
                raise
            log.info("Reminders enabled every %d min", interval_minutes)
            return ReminderState.from_settings(current)

    async def disable(self) -> ReminderState:
        """Unregister the reminder task and record ``disabled`` once confirmed."""
        async with self._lock:
            current = await self._settings.get()
            if not current.enabled:
                return ReminderState.from_settings(current)

            previous = current.interval_minutes
            await self._unregister("disable", current)
            try:
                current = await self._record(enabled=False)
            except StorageWriteError:
                await self._undo(
                    lambda: self._service.register(previous, self._options),
                    "restore registration after failed save",
                )
                raise
            log.info("Reminders disabled")
            return ReminderState.from_settings(current)

    async def change_interval(self, interval_minutes: int) -> ReminderState:
        """
        Switch to a new interval.

        While disabled only the stored interval changes. While enabled the old
        task is unregistered before the new one is registered, since the
        service cannot update an interval in place. If the new registration
        fails, reminders end up disabled and settings say so.
        """
        _require_positive(interval_minutes)
        async with self._lock:
            current = await self._settings.get()
            if not current.enabled:
                current = await self._record(interval_minutes=interval_minutes)
                return ReminderState.from_settings(current)

            return await self._reschedule("change_interval", current, interval_minutes)

    async def reconcile(self) -> ReminderState:
        """
        Bring the service back in line with settings, e.g. at process start.

        - settings enabled, nothing registered  -> register again
        - settings disabled, task registered    -> unregister
        """
        async with self._lock:
            current = await self._settings.get()
            try:
                registered = await self._service.is_registered()
            except Exception as exc:
                self._fail("reconcile", "status", current, exc)

            if current.enabled and not registered:
                log.warning("Reminder task missing; registering again")
                try:
                    await self._service.register(current.interval_minutes, self._options)
                except Exception as exc:
                    await self._give_up("reconcile", current, exc, restore=False)
            elif not current.enabled and registered:
                log.warning("Stray reminder task found; unregistering")
                await self._unregister("reconcile", current)

            return ReminderState.from_settings(current)

    # ------------------------------- Internals ------------------------------

    async def _reschedule(
        self, transition: str, current: ReminderSettings, minutes: int
    ) -> ReminderState:
        """Replace the active registration: unregister first, then register."""
        previous = current.interval_minutes
        await self._unregister(transition, current)
        try:
            await self._service.register(minutes, self._options)
        except Exception as exc:
            await self._give_up(transition, current, exc, restore=True)

        try:
            current = await self._record(enabled=True, interval_minutes=minutes)
        except StorageWriteError:
            # Settings still hold the old interval; put the old task back.
            if await self._undo(self._service.unregister, "unregister after failed save"):
                await self._undo(
                    lambda: self._service.register(previous, self._options),
                    "restore previous registration",
                )
            raise
        log.info("Reminders rescheduled every %d min", minutes)
        return ReminderState.from_settings(current)

    async def _give_up(
        self,
        transition: str,
        current: ReminderSettings,
        exc: Exception,
        restore: bool,
    ) -> NoReturn:
        """
        Record ``disabled`` after a failed register and raise `SchedulingError`.

        If ``disabled`` cannot be written either, settings still claim
        ``Enabled(current.interval_minutes)``. With ``restore`` the previous
        task is registered again so that claim holds; the raised state is
        whatever the service ends up holding.
        """
        try:
            disabled = await self._record(enabled=False)
        except StorageWriteError as write_exc:
            held = current.model_copy(update={"enabled": False})
            if restore and await self._undo(
                lambda: self._service.register(current.interval_minutes, self._options),
                "restore previous registration",
            ):
                held = current
            self._fail(
                transition,
                "register",
                held,
                write_exc,
                reason=f"{exc}; recording the failure also failed: {write_exc}",
            )
        self._fail(transition, "register", disabled, exc)

    async def _register(self, transition: str, minutes: int, current: ReminderSettings) -> None:
        try:
            await self._service.register(minutes, self._options)
        except Exception as exc:
            self._fail(transition, "register", current, exc)

    async def _unregister(self, transition: str, current: ReminderSettings) -> None:
        try:
            await self._service.unregister()
        except Exception as exc:
            self._fail(transition, "unregister", current, exc)

    async def _record(self, **changes: object) -> ReminderSettings:
        # Only the named fields change; the rest keep their stored value.
        return await self._settings.update(**changes)

    @staticmethod
    async def _undo(action: Callable[[], Awaitable[None]], what: str) -> bool:
        try:
            await action()
        except Exception as exc:
            log.error("Could not %s: %s", what, exc)
            return False
        return True

    @staticmethod
    def _fail(
        transition: str,
        step: RegistrationStep,
        settings: ReminderSettings,
        exc: Exception,
        reason: str | None = None,
    ) -> NoReturn:
        state = ReminderState.from_settings(settings)
        log.error("Reminder %s failed at %s: %s", transition, step, reason or exc)
        raise SchedulingError(transition, step, state, reason or str(exc)) from exc


__all__ = ["ReminderScheduler"]
