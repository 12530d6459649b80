"""Unit tests for the Card Store (add / list / remove, ids, consistency)."""

from __future__ import annotations

import asyncio
import json
from typing import Any

import pytest
from conftest import FlakyBackend

from vocabcards.core.errors import (
    NotFoundError,
    StorageReadError,
    StorageWriteError,
    ValidationError,
)
from vocabcards.storage.backend import MemoryBackend
from vocabcards.stores.cards import CARDS_KEY, CardStore


def test_list_is_empty_when_nothing_stored(backend: FlakyBackend) -> None:
    """A never-written collection reads as an empty list."""
    store = CardStore(backend)
    assert asyncio.run(store.list_cards()) == []


def test_add_trims_fields_and_lists_card(backend: FlakyBackend) -> None:
    """`add` stores trimmed fields and the card shows up exactly once."""
    store = CardStore(backend)

    async def scenario() -> None:
        before = await store.list_cards()
        card = await store.add("  gato ", "\tcat\n", "  El gato duerme.  ")
        after = await store.list_cards()

        assert (card.word, card.meaning, card.example) == ("gato", "cat", "El gato duerme.")
        assert len(after) == len(before) + 1
        assert [c for c in after if c.id == card.id] == [card]

    asyncio.run(scenario())


def test_add_example_defaults_to_empty(backend: FlakyBackend) -> None:
    card = asyncio.run(CardStore(backend).add("perro", "dog"))
    assert card.example == ""


@pytest.mark.parametrize(
    ("word", "meaning"),
    [("", "cat"), ("gato", ""), ("   ", "cat"), ("gato", " \t\n ")],
)
def test_add_rejects_blank_word_or_meaning(backend: FlakyBackend, word: str, meaning: str) -> None:
    """Blank input fails before any I/O and leaves the collection untouched."""
    store = CardStore(backend)
    with pytest.raises(ValidationError):
        asyncio.run(store.add(word, meaning))
    assert backend.writes == []
    assert asyncio.run(store.list_cards()) == []


def test_ids_are_unique_even_with_a_frozen_clock(
    backend: FlakyBackend, monkeypatch: Any
) -> None:
    """Two adds at the same instant still get distinct, increasing ids."""
    monkeypatch.setattr("vocabcards.stores.cards.time.time_ns", lambda: 1_700_000_000_000_000_000)
    store = CardStore(backend)

    async def scenario() -> list[str]:
        a = await store.add("uno", "one")
        b = await store.add("dos", "two")
        c = await store.add("tres", "three")
        return [a.id, b.id, c.id]

    ids = asyncio.run(scenario())
    assert len(set(ids)) == 3
    assert [int(i) for i in ids] == sorted(int(i) for i in ids)


def test_new_id_skips_ids_already_stored(monkeypatch: Any) -> None:
    """Ids written by an earlier store instance are never reissued."""
    monkeypatch.setattr("vocabcards.stores.cards.time.time_ns", lambda: 5_000_000)
    stored = [{"id": "5000", "word": "uno", "meaning": "one", "example": ""}]
    store = CardStore(MemoryBackend({CARDS_KEY: json.dumps(stored)}))

    card = asyncio.run(store.add("dos", "two"))
    assert card.id != "5000"


def test_concurrent_adds_do_not_lose_updates() -> None:
    """Overlapping `add` calls are serialized; both cards survive."""
    backend = FlakyBackend(yield_on_io=True)

    async def scenario() -> None:
        store = CardStore(backend)
        await store.add("base", "base")
        before = len(await store.list_cards())
        await asyncio.gather(store.add("uno", "one"), store.add("dos", "two"))
        assert len(await store.list_cards()) == before + 2

        fresh = CardStore(backend)
        assert {c.word for c in await fresh.list_cards()} == {"base", "uno", "dos"}

    asyncio.run(scenario())


def test_concurrent_add_and_remove_keep_total_order() -> None:
    """A remove racing with adds still lands on the authoritative collection."""
    backend = FlakyBackend(yield_on_io=True)

    async def scenario() -> None:
        store = CardStore(backend)
        first = await store.add("uno", "one")
        await asyncio.gather(
            store.add("dos", "two"),
            store.remove(first.id),
            store.add("tres", "three"),
        )
        words = [c.word for c in await CardStore(backend).list_cards()]
        assert words == ["dos", "tres"]

    asyncio.run(scenario())


def test_remove_deletes_card(backend: FlakyBackend) -> None:
    store = CardStore(backend)

    async def scenario() -> None:
        keep = await store.add("uno", "one")
        drop = await store.add("dos", "two")
        await store.remove(drop.id)
        assert [c.id for c in await store.list_cards()] == [keep.id]
        assert [c.id for c in await CardStore(backend).list_cards()] == [keep.id]

    asyncio.run(scenario())


def test_remove_unknown_id_raises_not_found(backend: FlakyBackend) -> None:
    """Unknown ids raise `NotFoundError` and nothing is written."""
    store = CardStore(backend)

    async def scenario() -> None:
        card = await store.add("uno", "one")
        writes = len(backend.writes)
        with pytest.raises(NotFoundError) as info:
            await store.remove("missing")
        assert info.value.card_id == "missing"
        assert len(backend.writes) == writes
        assert await store.list_cards() == [card]

    asyncio.run(scenario())


def test_get_returns_card_or_raises(backend: FlakyBackend) -> None:
    store = CardStore(backend)

    async def scenario() -> None:
        card = await store.add("uno", "one")
        assert await store.get(card.id) == card
        assert await store.count() == 1
        with pytest.raises(NotFoundError):
            await store.get("nope")

    asyncio.run(scenario())


def test_add_write_failure_does_not_commit(backend: FlakyBackend) -> None:
    """A failed write leaves both the cache and the backend unchanged."""
    store = CardStore(backend)

    async def scenario() -> None:
        existing = await store.add("uno", "one")
        backend.fail_writes.add(CARDS_KEY)
        with pytest.raises(StorageWriteError):
            await store.add("dos", "two")
        assert await store.list_cards() == [existing]

        backend.fail_writes.clear()
        assert await CardStore(backend).list_cards() == [existing]

    asyncio.run(scenario())


def test_remove_write_failure_rolls_back(backend: FlakyBackend) -> None:
    """A failed remove keeps the card visible in the same store."""
    store = CardStore(backend)

    async def scenario() -> None:
        card = await store.add("uno", "one")
        backend.fail_writes.add(CARDS_KEY)
        with pytest.raises(StorageWriteError):
            await store.remove(card.id)
        assert await store.list_cards() == [card]

    asyncio.run(scenario())


def test_backend_read_failure_is_storage_read_error(backend: FlakyBackend) -> None:
    backend.fail_reads.add(CARDS_KEY)
    with pytest.raises(StorageReadError):
        asyncio.run(CardStore(backend).list_cards())


@pytest.mark.parametrize(
    "payload",
    [
        "not json at all",
        json.dumps({"id": "1", "word": "uno", "meaning": "one"}),
        json.dumps([{"id": "1", "word": "", "meaning": "one"}]),
        json.dumps([{"id": "1", "meaning": "one"}]),
        json.dumps(
            [
                {"id": "1", "word": "uno", "meaning": "one"},
                {"id": "1", "word": "dos", "meaning": "two"},
            ]
        ),
    ],
)
def test_undecodable_payload_is_reported_not_dropped(payload: str) -> None:
    """Malformed data raises instead of being replaced by an empty list."""
    backend = MemoryBackend({CARDS_KEY: payload})
    store = CardStore(backend)

    with pytest.raises(StorageReadError):
        asyncio.run(store.list_cards())
    with pytest.raises(StorageReadError):
        asyncio.run(store.add("dos", "two"))
    assert backend.snapshot()[CARDS_KEY] == payload


def test_reads_collections_written_by_earlier_versions() -> None:
    """Millisecond-string ids and missing examples from old data still load."""
    legacy = [
        {"id": "1700000000000", "word": "gato", "meaning": "cat", "example": ""},
        {"id": "1700000000001", "word": "perro", "meaning": "dog"},
    ]
    store = CardStore(MemoryBackend({CARDS_KEY: json.dumps(legacy)}))

    cards = asyncio.run(store.list_cards())
    assert [c.id for c in cards] == ["1700000000000", "1700000000001"]
    assert cards[1].example == ""


def test_round_trip_through_fresh_store(backend: FlakyBackend) -> None:
    """N cards reload identically and in order from a new store instance."""

    async def scenario() -> None:
        store = CardStore(backend)
        created = [await store.add(f"word{i}", f"meaning{i}", f"example {i}") for i in range(12)]
        reloaded = await CardStore(backend).list_cards()
        assert reloaded == created

    asyncio.run(scenario())


def test_refresh_rereads_backend(backend: FlakyBackend) -> None:
    """`refresh()` drops the cache so external writes become visible."""
    store = CardStore(backend)

    async def scenario() -> None:
        await store.add("uno", "one")
        other = CardStore(backend)
        await other.add("dos", "two")

        assert len(await store.list_cards()) == 1
        store.refresh()
        assert len(await store.list_cards()) == 2

    asyncio.run(scenario())
