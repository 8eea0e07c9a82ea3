"""Explicit outcome type for draft operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from draftxi.errors import DraftError, PersistenceError, RejectionReason, ValidationError
from draftxi.models import DraftSession


@dataclass(frozen=True)
class Ok:
    session: DraftSession

    ok = True

    def unwrap(self) -> DraftSession:
        return self.session


@dataclass(frozen=True)
class Err:
    """A failed operation; ``session`` is the last known-good state."""

    error: DraftError
    session: DraftSession

    ok = False

    @property
    def reason(self) -> Optional[RejectionReason]:
        if isinstance(self.error, ValidationError):
            return self.error.reason
        return None

    @property
    def retryable(self) -> bool:
        return isinstance(self.error, PersistenceError)

    def unwrap(self) -> DraftSession:
        raise self.error


DraftResult = Union[Ok, Err]
