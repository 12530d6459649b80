from __future__ import annotations

from .cards import CARDS_KEY, CardStore
from .settings import LEGACY_THEME_KEY, SETTINGS_KEY, SettingsStore

__all__ = ["CardStore", "SettingsStore", "CARDS_KEY", "SETTINGS_KEY", "LEGACY_THEME_KEY"]
