"""
Application container: wires the core services together once at start-up.

Presentation code receives a `VocabApp` handle and calls into its stores and
scheduler; nothing here is a module-level singleton, so tests and shells can
build as many independent instances as they need.

Usage
-----
>>> app = build_app(MemoryBackend())
>>> card = await app.cards.add("gato", "cat")

or, against the configured data directory:

>>> app = await open_app()
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from vocabcards.core.config import AppConfig, get_logger, load_config
from vocabcards.reminders.registry import (
    InMemoryTaskRegistry,
    StoredTaskRegistry,
    TaskRegistrationService,
    WakeCallback,
)
from vocabcards.reminders.scheduler import ReminderScheduler
from vocabcards.reminders.wake import Notifier, ReminderWake
from vocabcards.storage.backend import JsonFileBackend, StorageBackend
from vocabcards.stores.cards import CardStore
from vocabcards.stores.settings import SettingsStore

RegistryFactory = Callable[[WakeCallback], TaskRegistrationService]

log = get_logger(__name__)


@dataclass(slots=True)
class VocabApp:
    """Explicit handle on every core service of one running app."""

    backend: StorageBackend
    cards: CardStore
    settings: SettingsStore
    registry: TaskRegistrationService
    scheduler: ReminderScheduler
    wake: ReminderWake


def build_app(
    backend: StorageBackend,
    registry_factory: RegistryFactory | None = None,
    notifier: Notifier | None = None,
) -> VocabApp:
    """Construct the services over `backend` without touching storage.

    `registry_factory` receives the wake handler and returns the registration
    service to schedule against; an `InMemoryTaskRegistry` is used by default.
    """
    cards = CardStore(backend)
    settings = SettingsStore(backend)
    wake = ReminderWake(cards, notifier=notifier)
    registry = (registry_factory or InMemoryTaskRegistry)(wake)
    scheduler = ReminderScheduler(settings, registry)
    return VocabApp(
        backend=backend,
        cards=cards,
        settings=settings,
        registry=registry,
        scheduler=scheduler,
        wake=wake,
    )


async def open_app(config: AppConfig | None = None, notifier: Notifier | None = None) -> VocabApp:
    """Open the app on disk: file backend, stored registry, settings migration.

    Runs `SettingsStore.migrate()` and `ReminderScheduler.reconcile()` so the
    returned handle starts from one canonical settings record and a
    registration that matches it.
    """
    config = config or load_config()
    backend = JsonFileBackend(config.data_dir)
    app = build_app(
        backend,
        registry_factory=lambda on_wake: StoredTaskRegistry(backend, on_wake),
        notifier=notifier,
    )

    if await app.settings.migrate():
        log.info("Settings consolidated under %s", config.data_dir)
    await app.scheduler.reconcile()
    return app


__all__ = ["VocabApp", "build_app", "open_app"]
