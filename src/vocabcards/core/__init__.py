"""Core package initializer for VocabCards.

Holds configuration/logging, the error taxonomy and the record contracts:
    from vocabcards.core.config import load_config, get_logger
    from vocabcards.core.errors import ValidationError, StorageReadError
"""

from __future__ import annotations

__all__ = ["__doc__"]
