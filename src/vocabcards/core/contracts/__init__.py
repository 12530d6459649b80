"""Pydantic contracts for the records VocabCards persists."""

from __future__ import annotations

from .card import CardCollection, VocabCard
from .reminder import (
    DEFAULT_INTERVAL_MINUTES,
    INTERVAL_CHOICES,
    ReminderSettings,
    ReminderState,
)

__all__ = [
    "VocabCard",
    "CardCollection",
    "ReminderSettings",
    "ReminderState",
    "DEFAULT_INTERVAL_MINUTES",
    "INTERVAL_CHOICES",
]
