"""Wake callback run by the registration service on each reminder tick.

The handler acknowledges the wake, picks one card from the collection and
hands it to an optional notifier (the presentation layer decides how a
reminder is shown). Its contract with the service is the returned
`WakeResult`, so failures are logged and reported as ``FAILED`` instead of
raised.
"""

from __future__ import annotations

import random
from collections.abc import Awaitable, Callable, Sequence
from datetime import UTC, datetime

from vocabcards.core.config import get_logger
from vocabcards.core.contracts.card import VocabCard
from vocabcards.core.errors import StorageReadError
from vocabcards.reminders.registry import WakeResult
from vocabcards.stores.cards import CardStore

Notifier = Callable[[VocabCard], Awaitable[None]]
Chooser = Callable[[Sequence[VocabCard]], VocabCard]

log = get_logger(__name__)


class ReminderWake:
    """Async callable suitable as a `WakeCallback`."""

    def __init__(
        self,
        cards: CardStore,
        notifier: Notifier | None = None,
        chooser: Chooser = random.choice,
    ) -> None:
        self._cards = cards
        self._notifier = notifier
        self._chooser = chooser
        self.last_card: VocabCard | None = None

    async def __call__(self) -> WakeResult:
        log.info("Got reminder wake at %s", datetime.now(UTC).isoformat())
        try:
            cards = await self._cards.list_cards()
        except StorageReadError as exc:
            log.error("Reminder wake could not read cards: %s", exc)
            return WakeResult.FAILED

        if not cards:
            return WakeResult.NO_DATA

        card = self._chooser(cards)
        self.last_card = card
        if self._notifier is not None:
            try:
                await self._notifier(card)
            except Exception as exc:
                log.error("Reminder notifier failed for card %s: %s", card.id, exc)
                return WakeResult.FAILED
        return WakeResult.NEW_DATA


__all__ = ["ReminderWake", "WakeResult", "Notifier"]
