"""Durable key -> string storage used by the stores.

The stores only rely on the small `StorageBackend` protocol below, so any
facility offering `read`/`write` (file system, embedded KV, secure storage)
can be substituted, and tests can inject faults.

- `MemoryBackend`   : dict-backed, process-local.
- `JsonFileBackend` : one `<key>.json` file per key under a data directory.

Backends raise on failure (`OSError` or any other exception); translating
failures into `StorageReadError` / `StorageWriteError` is the stores' job.
"""

from __future__ import annotations

import asyncio
import os
import re
import tempfile
from pathlib import Path
from typing import Protocol, runtime_checkable

_KEY_RE = re.compile(r"^[A-Za-z0-9_.-]+$")


@runtime_checkable
class StorageBackend(Protocol):
    """Async key -> string storage contract."""

    async def read(self, key: str) -> str | None:
        """Return the stored value for `key`, or None if never written."""
        ...

    async def write(self, key: str, value: str) -> None:
        """Persist `value` under `key`, replacing any previous value."""
        ...


class MemoryBackend:
    """Dict-backed backend. Values survive only as long as the instance."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    async def read(self, key: str) -> str | None:
        return self._data.get(key)

    async def write(self, key: str, value: str) -> None:
        self._data[key] = value

    def snapshot(self) -> dict[str, str]:
        """Return a copy of everything stored (stable for tests)."""
        return dict(self._data)


class JsonFileBackend:
    """Store each key as a UTF-8 file `<base_dir>/<key>.json`.

    Writes go to a temporary file in the same directory and are moved into
    place with `os.replace`, so a reader sees either the old or the new
    payload, never a truncated one. Blocking file I/O runs in a worker thread.
    """

    def __init__(self, base_dir: Path | str) -> None:
        self.base_dir = Path(base_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def path_for(self, key: str) -> Path:
        if not _KEY_RE.match(key):
            raise ValueError(f"invalid storage key: {key!r}")
        return self.base_dir / f"{key}.json"

    async def read(self, key: str) -> str | None:
        return await asyncio.to_thread(self._read_sync, self.path_for(key))

    async def write(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._write_sync, self.path_for(key), value)

    @staticmethod
    def _read_sync(path: Path) -> str | None:
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    @staticmethod
    def _write_sync(path: Path, value: str) -> None:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise


__all__ = ["StorageBackend", "MemoryBackend", "JsonFileBackend"]
