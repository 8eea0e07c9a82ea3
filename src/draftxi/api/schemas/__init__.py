"""Pydantic models for API I/O."""

from .catalog import FormationResponse, FormationSlotResponse, PlayerResponse
from .draft import (
    CanBuyResponse,
    DraftStateResponse,
    FormationRequest,
    LeaderboardEntryResponse,
    PlayerActionRequest,
    SquadPlayerResponse,
    StartDraftRequest,
    StopDraftRequest,
    TriviaAnswerRequest,
    TriviaResultResponse,
)

__all__ = [
    "CanBuyResponse",
    "DraftStateResponse",
    "FormationRequest",
    "FormationResponse",
    "FormationSlotResponse",
    "LeaderboardEntryResponse",
    "PlayerActionRequest",
    "PlayerResponse",
    "SquadPlayerResponse",
    "StartDraftRequest",
    "StopDraftRequest",
    "TriviaAnswerRequest",
    "TriviaResultResponse",
]
