"""Error taxonomy shared by the draft core."""

from __future__ import annotations

from enum import Enum


class RejectionReason(str, Enum):
    SESSION_INACTIVE = "session_inactive"
    DUPLICATE_PLAYER = "duplicate_player"
    SQUAD_FULL = "squad_full"
    INVALID_PRICE = "invalid_price"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    NO_SLOT_AVAILABLE = "no_slot_available"
    ROLE_QUOTA_EXCEEDED = "role_quota_exceeded"
    UNKNOWN_PLAYER = "unknown_player"
    INVALID_STATE = "invalid_state"
    TIME_EXPIRED = "time_expired"


class DraftError(Exception):
    """Base class for recoverable draft failures."""


class ValidationError(DraftError):
    """Raised when an operation breaks a local draft rule.

    Validation always happens before any local mutation or remote call, so a
    caller receiving this error can assume nothing changed.
    """

    def __init__(self, reason: RejectionReason, message: str | None = None) -> None:
        self.reason = reason
        self.message = message or reason.value.replace("_", " ")
        super().__init__(self.message)


class PersistenceError(DraftError):
    """Raised when the remote store fails to apply a write or serve a read."""


class ConfigurationError(RuntimeError):
    """Raised for broken static tables such as formations or position groups."""
