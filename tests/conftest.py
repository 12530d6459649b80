"""Shared fixtures and fault-injecting collaborators for the test suite.

- `FlakyBackend`  : a `MemoryBackend` whose reads/writes can be made to fail,
  optionally only for one key, and which can yield to the event loop on every
  call so concurrent operations really interleave.
- `FlakyRegistry` : an `InMemoryTaskRegistry` whose next register/unregister
  calls can be made to fail, and which can yield to the event loop on each call.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import pytest

from vocabcards.core.config import load_config
from vocabcards.reminders.registry import (
    InMemoryTaskRegistry,
    RegistrationOptions,
    TaskServiceError,
)
from vocabcards.storage.backend import MemoryBackend


class FlakyBackend(MemoryBackend):
    """Memory backend with switchable failures and optional await points."""

    def __init__(self, initial: dict[str, str] | None = None, yield_on_io: bool = False) -> None:
        super().__init__(initial)
        self.fail_reads: set[str] = set()
        self.fail_writes: set[str] = set()
        self.fail_all_writes = False
        self.yield_on_io = yield_on_io
        self.writes: list[str] = []

    async def read(self, key: str) -> str | None:
        if self.yield_on_io:
            await asyncio.sleep(0)
        if key in self.fail_reads:
            raise OSError(f"simulated read failure for {key}")
        return await super().read(key)

    async def write(self, key: str, value: str) -> None:
        if self.yield_on_io:
            await asyncio.sleep(0)
        if self.fail_all_writes or key in self.fail_writes:
            raise OSError(f"simulated write failure for {key}")
        self.writes.append(key)
        await super().write(key, value)


class FlakyRegistry(InMemoryTaskRegistry):
    """In-memory registry whose next calls can be forced to fail."""

    def __init__(self, yield_on_call: bool = False) -> None:
        super().__init__()
        self.fail_register = 0
        self.fail_unregister = 0
        self.yield_on_call = yield_on_call

    async def register(self, interval_minutes: int, options: RegistrationOptions) -> None:
        if self.yield_on_call:
            await asyncio.sleep(0)
        if self.fail_register:
            self.fail_register -= 1
            raise TaskServiceError("simulated register failure")
        await super().register(interval_minutes, options)

    async def unregister(self) -> None:
        if self.yield_on_call:
            await asyncio.sleep(0)
        if self.fail_unregister:
            self.fail_unregister -= 1
            raise TaskServiceError("simulated unregister failure")
        await super().unregister()


@pytest.fixture
def backend() -> FlakyBackend:
    return FlakyBackend()


@pytest.fixture
def registry() -> FlakyRegistry:
    return FlakyRegistry()


@pytest.fixture
def data_dir(tmp_path: Path, monkeypatch: Any) -> Iterator[Path]:
    """Point the configuration at a temporary data directory."""
    target = tmp_path / "data"
    monkeypatch.setenv("VOCABCARDS_DATA_DIR", str(target))
    monkeypatch.setenv("VOCABCARDS_ENV", "test")
    load_config.cache_clear()
    yield target
    load_config.cache_clear()
