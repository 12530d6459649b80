# scripts/smoke.py
"""
Smoke Test Script for the VocabCards core.

Runs one end-to-end pass over the stores and the reminder scheduler, either
in memory (default) or against a data directory on disk.

Usage
-----
1. In-memory run:
    $ uv run python scripts/smoke.py

2. Against a directory (files are left behind for inspection):
    $ uv run python scripts/smoke.py --dir /tmp/vocabcards-smoke
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from vocabcards.app import build_app
from vocabcards.core.contracts.card import VocabCard
from vocabcards.storage.backend import JsonFileBackend, MemoryBackend, StorageBackend

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

SAMPLE_CARDS = [
    ("gato", "cat", "El gato duerme en el sofá."),
    ("perro", "dog", ""),
    ("libro", "book", "Leo un libro cada semana."),
]


async def _print_card(card: VocabCard) -> None:
    print(f"🔔 Review: {card.word} = {card.meaning}")


async def run(backend: StorageBackend) -> None:
    """Execute the smoke test workflow."""
    app = build_app(backend, notifier=_print_card)

    for word, meaning, example in SAMPLE_CARDS:
        card = await app.cards.add(word, meaning, example)
        print(f"✅ Added {card.word} ({card.id})")

    cards = await app.cards.list_cards()
    print(f"📚 {len(cards)} cards stored")

    await app.scheduler.enable(30)
    await app.scheduler.change_interval(60)
    print(f"⏰ Reminders: {(await app.scheduler.state()).describe()}")

    result = await app.wake()
    print(f"💤 Wake result: {result.value}")

    await app.scheduler.disable()
    await app.cards.remove(cards[0].id)
    print(f"🧹 {await app.cards.count()} cards left, reminders disabled")


def main() -> None:
    parser = argparse.ArgumentParser(description="Run VocabCards Smoke Test")
    parser.add_argument("--dir", "-d", type=str, help="Data directory (default: in-memory)")
    args = parser.parse_args()

    backend: StorageBackend = JsonFileBackend(Path(args.dir)) if args.dir else MemoryBackend()
    try:
        asyncio.run(run(backend))
    except Exception as exc:
        print(f"❌ Smoke test failed: {exc}")
        sys.exit(1)
    print("🎉 Smoke test passed")


if __name__ == "__main__":
    main()
