"""Error taxonomy for the VocabCards core.

- `ValidationError`   : bad input from the caller; raised before any I/O.
- `StorageReadError`  : backend read failed or the payload did not decode.
- `StorageWriteError` : backend write failed; previous state is kept.
- `NotFoundError`     : the requested card does not exist (recoverable).
- `SchedulingError`   : the task registration service refused a transition.
"""

from __future__ import annotations

from typing import Literal

from .contracts.reminder import ReminderState

RegistrationStep = Literal["register", "unregister", "status"]


class VocabCardsError(Exception):
    """Base class for every error raised by the core."""


class ValidationError(VocabCardsError, ValueError):
    """Caller supplied input that violates a record invariant."""


class StorageError(VocabCardsError):
    """Backend I/O failure for one storage key."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(f"{message} (key={key!r})")
        self.key = key


class StorageReadError(StorageError):
    """Reading or decoding a stored record failed."""


class StorageWriteError(StorageError):
    """Persisting a record failed; nothing was committed."""


class NotFoundError(VocabCardsError, KeyError):
    """No card with the given id exists in the collection."""

    def __init__(self, card_id: str) -> None:
        super().__init__(card_id)
        self.card_id = card_id

    def __str__(self) -> str:
        return f"no card with id {self.card_id!r}"


class SchedulingError(VocabCardsError):
    """A registration call failed during a scheduler transition.

    Attributes
    ----------
    transition : str
        Scheduler operation that was running (`enable`, `disable`, ...).
    step : RegistrationStep
        Which call to the registration service failed.
    state : ReminderState
        The confirmed state after the failure, already reflected in settings.
    """

    def __init__(
        self,
        transition: str,
        step: RegistrationStep,
        state: ReminderState,
        reason: str,
    ) -> None:
        super().__init__(f"{transition} failed at {step}: {reason} (now {state.describe()})")
        self.transition = transition
        self.step = step
        self.state = state
        self.reason = reason


__all__ = [
    "VocabCardsError",
    "ValidationError",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    "NotFoundError",
    "SchedulingError",
    "RegistrationStep",
]
