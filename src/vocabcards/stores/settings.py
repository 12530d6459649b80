"""
Settings Store: the single persisted `ReminderSettings` record.

The record lives under ``SETTINGS_KEY``. Earlier versions of the app kept the
theme flag in a second record under ``LEGACY_THEME_KEY`` and wrote the
reminder fields as ``notificationsEnabled`` / ``interval``; `migrate()` folds
both into the canonical record once, after which only ``SETTINGS_KEY`` is
written.
"""

from __future__ import annotations

import asyncio
import json

from pydantic import ValidationError as SchemaError

from vocabcards.core.config import get_logger
from vocabcards.core.contracts.reminder import ReminderSettings
from vocabcards.core.errors import StorageReadError, StorageWriteError, ValidationError
from vocabcards.storage.backend import StorageBackend

SETTINGS_KEY = "settings"
LEGACY_THEME_KEY = "appSettings"

log = get_logger(__name__)


def check_settings(settings: ReminderSettings) -> None:
    """Raise `ValidationError` if `settings` breaks the record invariant."""
    if settings.enabled and settings.interval_minutes <= 0:
        raise ValidationError(
            f"interval must be positive while reminders are enabled "
            f"(got {settings.interval_minutes})"
        )


class SettingsStore:
    """Owner of the persisted reminder settings record."""

    def __init__(self, backend: StorageBackend, key: str = SETTINGS_KEY) -> None:
        self._backend = backend
        self._key = key
        self._lock = asyncio.Lock()

    async def get(self) -> ReminderSettings:
        """Return the stored settings, or defaults if nothing was persisted."""
        async with self._lock:
            return await self._read()

    async def set(self, settings: ReminderSettings) -> None:
        """Validate and persist the full record."""
        check_settings(settings)
        async with self._lock:
            await self._write(settings)

    async def update(self, **changes: object) -> ReminderSettings:
        """
        Change only the named fields of the stored record.

        The record is re-read under the store's lock, so fields written by
        other callers in the meantime are kept.
        """
        async with self._lock:
            updated = (await self._read()).model_copy(update=changes)
            # model_copy skips validation; run the contract and invariant again.
            updated = _revalidate(updated)
            check_settings(updated)
            await self._write(updated)
            return updated

    async def set_enabled(self, enabled: bool) -> ReminderSettings:
        return await self.update(enabled=enabled)

    async def set_interval(self, minutes: int) -> ReminderSettings:
        return await self.update(interval_minutes=minutes)

    async def set_dark_mode(self, dark: bool) -> ReminderSettings:
        return await self.update(dark_mode=dark)

    async def migrate(self) -> bool:
        """
        Consolidate legacy settings into the canonical record.

        Reads the canonical key (legacy field names are accepted by the
        contract) and the legacy theme record, merges the theme flag in when
        the canonical record does not carry one, and writes the canonical
        record back if its stored shape differs from the canonical encoding.

        Returns
        -------
        bool
            True if a canonical record was written.
        """
        async with self._lock:
            raw = await self._read_raw(self._key)
            current = _decode(self._key, raw) if raw is not None else ReminderSettings()

            theme_raw = await self._read_raw(LEGACY_THEME_KEY)
            needs_theme = raw is None or "darkMode" not in _loads(self._key, raw)
            if theme_raw is not None and needs_theme:
                legacy = _loads(LEGACY_THEME_KEY, theme_raw)
                if isinstance(legacy.get("darkMode"), bool):
                    current = current.model_copy(update={"dark_mode": legacy["darkMode"]})

            if raw is None and theme_raw is None:
                return False
            if raw is not None and _loads(self._key, raw) == json.loads(current.to_json()):
                return False

            await self._write(current)
            log.info("Migrated settings into canonical record %r", self._key)
            return True

    # ------------------------------- Internals ------------------------------

    async def _read_raw(self, key: str) -> str | None:
        try:
            return await self._backend.read(key)
        except Exception as exc:
            log.warning("Reading %s failed: %s", key, exc)
            raise StorageReadError(key, f"backend read failed: {exc}") from exc

    async def _read(self) -> ReminderSettings:
        raw = await self._read_raw(self._key)
        if raw is None:
            return ReminderSettings()
        return _decode(self._key, raw)

    async def _write(self, settings: ReminderSettings) -> None:
        try:
            await self._backend.write(self._key, settings.to_json())
        except Exception as exc:
            log.error("Writing %s failed: %s", self._key, exc)
            raise StorageWriteError(self._key, f"backend write failed: {exc}") from exc
        log.debug("Persisted settings %s", settings.to_json())


def _loads(key: str, raw: str) -> dict[str, object]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise StorageReadError(key, "stored settings are not valid JSON") from exc
    if not isinstance(data, dict):
        raise StorageReadError(key, "stored settings are not a JSON object")
    return data


def _decode(key: str, raw: str) -> ReminderSettings:
    try:
        return ReminderSettings.model_validate_json(raw)
    except SchemaError as exc:
        log.error("Stored settings under %s do not decode: %s", key, exc)
        raise StorageReadError(key, "stored settings record is malformed") from exc


def _revalidate(settings: ReminderSettings) -> ReminderSettings:
    try:
        return ReminderSettings.model_validate(settings.model_dump())
    except SchemaError as exc:
        raise ValidationError(str(exc)) from exc


__all__ = ["SettingsStore", "SETTINGS_KEY", "LEGACY_THEME_KEY", "check_settings"]
