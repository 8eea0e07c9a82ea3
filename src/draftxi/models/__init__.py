"""Domain models for players and draft sessions."""

from .player import DraftedPlayer, PlayerRecord
from .session import DraftSession, GameMode, SessionState

__all__ = ["DraftSession", "DraftedPlayer", "GameMode", "PlayerRecord", "SessionState"]
