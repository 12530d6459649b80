"""VocabCards: a local vocabulary deck with periodic review reminders.

The importable core lives in `vocabcards.stores` (card and settings
persistence) and `vocabcards.reminders` (reminder scheduling); `vocabcards.app`
wires them together for a presentation shell such as `vocabcards.cli`.
"""

from __future__ import annotations

__all__ = ["__version__"]
__version__ = "0.1.0"
