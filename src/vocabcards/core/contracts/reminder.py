"""Reminder contracts: the persisted settings record and the scheduler state.

`ReminderSettings` is the single consolidated settings record. On the wire it
uses camelCase names (`enabled`, `intervalMinutes`, `darkMode`); older
payloads written as `notificationsEnabled` / `interval` are still accepted on
decode so that existing data can be migrated in place. Field types are strict:
a stored `"enabled": "yes"` is a malformed record, not `True`.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, StrictBool, StrictInt

DEFAULT_INTERVAL_MINUTES = 30
INTERVAL_CHOICES: tuple[int, ...] = (15, 30, 60, 120)


class ReminderSettings(BaseModel):
    """Reminder configuration plus the display preference kept alongside it."""

    model_config = ConfigDict(frozen=True)

    enabled: StrictBool = Field(
        default=False,
        validation_alias=AliasChoices("enabled", "notificationsEnabled"),
    )
    interval_minutes: StrictInt = Field(
        default=DEFAULT_INTERVAL_MINUTES,
        validation_alias=AliasChoices("intervalMinutes", "interval_minutes", "interval"),
        serialization_alias="intervalMinutes",
    )
    dark_mode: StrictBool = Field(
        default=False,
        validation_alias=AliasChoices("darkMode", "dark_mode"),
        serialization_alias="darkMode",
    )

    def to_json(self) -> str:
        """Encode using the canonical wire field names."""
        return self.model_dump_json(by_alias=True)


@dataclass(frozen=True, slots=True)
class ReminderState:
    """Logical scheduler state: `Disabled` or `Enabled(interval_minutes)`."""

    enabled: bool
    interval_minutes: int

    @classmethod
    def from_settings(cls, settings: ReminderSettings) -> ReminderState:
        return cls(enabled=settings.enabled, interval_minutes=settings.interval_minutes)

    def describe(self) -> str:
        if not self.enabled:
            return "disabled"
        return f"enabled every {self.interval_minutes} min"


__all__ = [
    "DEFAULT_INTERVAL_MINUTES",
    "INTERVAL_CHOICES",
    "ReminderSettings",
    "ReminderState",
]
