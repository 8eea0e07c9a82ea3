"""Draft/budget state machine and its helpers."""

from .clock import SessionClock
from .result import DraftResult, Err, Ok
from .service import DraftRepository, DraftService
from .updates import RemoteUpdate, UpdateInbox

__all__ = [
    "DraftRepository",
    "DraftResult",
    "DraftService",
    "Err",
    "Ok",
    "RemoteUpdate",
    "SessionClock",
    "UpdateInbox",
]
