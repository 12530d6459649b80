from __future__ import annotations

from .backend import JsonFileBackend, MemoryBackend, StorageBackend

__all__ = ["StorageBackend", "MemoryBackend", "JsonFileBackend"]
