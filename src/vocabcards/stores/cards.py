"""
Card Store: the vocabulary card collection.

The whole collection is the unit of storage: it is encoded as one JSON array
under ``CARDS_KEY`` and every mutation rewrites it in full.

Responsibilities
----------------
- **Read**: decode the stored collection with a schema check. A payload that
  does not decode is reported as `StorageReadError`; it is never replaced by
  an empty list.
- **Add**: trim and validate input, assign a unique id, append, persist.
- **Remove**: drop one card by id and persist.

Consistency
-----------
All operations hold the store's `asyncio.Lock`, so concurrent ``add`` /
``remove`` calls are applied in a total order and no update is lost. The
in-memory cache is only replaced after the backend confirmed the write.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence

from pydantic import ValidationError as SchemaError

from vocabcards.core.config import get_logger
from vocabcards.core.contracts.card import CardCollection, VocabCard
from vocabcards.core.errors import (
    NotFoundError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from vocabcards.storage.backend import StorageBackend

CARDS_KEY = "vocabCards"

log = get_logger(__name__)


class CardStore:
    """Owner of the persisted card collection."""

    def __init__(self, backend: StorageBackend, key: str = CARDS_KEY) -> None:
        self._backend = backend
        self._key = key
        self._lock = asyncio.Lock()
        self._cache: tuple[VocabCard, ...] | None = None
        self._last_token = 0

    # ------------------------------- Public API -----------------------------

    async def list_cards(self) -> list[VocabCard]:
        """Return every card in insertion order (empty if nothing stored)."""
        async with self._lock:
            return list(await self._load())

    async def get(self, card_id: str) -> VocabCard:
        """Return the card with `card_id` or raise `NotFoundError`."""
        async with self._lock:
            for card in await self._load():
                if card.id == card_id:
                    return card
        raise NotFoundError(card_id)

    async def count(self) -> int:
        async with self._lock:
            return len(await self._load())

    async def add(self, word: str, meaning: str, example: str = "") -> VocabCard:
        """
        Create a card, append it to the collection and persist the collection.

        Raises
        ------
        ValidationError
            If `word` or `meaning` is empty after trimming (no I/O happens).
        StorageReadError
            If the current collection cannot be loaded.
        StorageWriteError
            If the updated collection could not be persisted.
        """
        word, meaning, example = word.strip(), meaning.strip(), example.strip()
        if not word or not meaning:
            raise ValidationError("word and meaning must both be non-empty")

        async with self._lock:
            current = await self._load()
            card = VocabCard(
                id=self._next_id({c.id for c in current}),
                word=word,
                meaning=meaning,
                example=example,
            )
            await self._commit((*current, card))
        log.info("Added card %s (%r)", card.id, card.word)
        return card

    async def remove(self, card_id: str) -> None:
        """Delete the card with `card_id` and persist the collection."""
        async with self._lock:
            current = await self._load()
            remaining = tuple(c for c in current if c.id != card_id)
            if len(remaining) == len(current):
                raise NotFoundError(card_id)
            await self._commit(remaining)
        log.info("Removed card %s", card_id)

    def refresh(self) -> None:
        """Forget the cached collection; the next call reads the backend."""
        self._cache = None

    # ------------------------------- Internals ------------------------------

    async def _load(self) -> tuple[VocabCard, ...]:
        """Return the authoritative collection. Caller holds the lock."""
        if self._cache is not None:
            return self._cache

        try:
            raw = await self._backend.read(self._key)
        except Exception as exc:
            log.warning("Reading %s failed: %s", self._key, exc)
            raise StorageReadError(self._key, f"backend read failed: {exc}") from exc

        self._cache = () if raw is None else _decode(self._key, raw)
        return self._cache

    async def _commit(self, cards: Sequence[VocabCard]) -> None:
        """Persist `cards` and, only on success, make them the cached view."""
        payload = CardCollection.dump_json(list(cards)).decode("utf-8")
        try:
            await self._backend.write(self._key, payload)
        except Exception as exc:
            log.error("Writing %s failed: %s", self._key, exc)
            raise StorageWriteError(self._key, f"backend write failed: {exc}") from exc
        self._cache = tuple(cards)
        log.debug("Persisted %d cards under %s", len(cards), self._key)

    def _next_id(self, taken: set[str]) -> str:
        # Microsecond clock token, strictly increasing per store and skipping
        # any id already present in the collection.
        token = max(time.time_ns() // 1_000, self._last_token + 1)
        while str(token) in taken:
            token += 1
        self._last_token = token
        return str(token)


def _decode(key: str, raw: str) -> tuple[VocabCard, ...]:
    try:
        cards = CardCollection.validate_json(raw)
    except SchemaError as exc:
        log.error("Stored collection under %s does not decode: %s", key, exc)
        raise StorageReadError(key, "stored card collection is malformed") from exc

    seen: set[str] = set()
    for card in cards:
        if card.id in seen:
            raise StorageReadError(key, f"duplicate card id {card.id!r} in stored collection")
        seen.add(card.id)
    return tuple(cards)


__all__ = ["CardStore", "CARDS_KEY"]
