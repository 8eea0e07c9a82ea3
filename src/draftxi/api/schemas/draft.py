from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from draftxi.assignment import display_order, lineup
from draftxi.models import DraftSession


class StartDraftRequest(BaseModel):
    mode: str = "classic"


class PlayerActionRequest(BaseModel):
    slug: str = Field(..., min_length=1)


class FormationRequest(BaseModel):
    formation: str


class StopDraftRequest(BaseModel):
    username: Optional[str] = None


class TriviaAnswerRequest(BaseModel):
    question_id: str
    answer: str


class SquadPlayerResponse(BaseModel):
    slug: str
    name: str
    primary_position: str
    base_rating: int
    display_rating: int
    purchase_price: int
    assigned_slot: Optional[str]
    out_of_position: bool


class DraftStateResponse(BaseModel):
    draft_id: Optional[str]
    state: str
    mode: Optional[str]
    formation: str
    purse: int
    bonus_money: int
    squad_value: int
    average_rating: int
    target_rating: Optional[int]
    target_met: Optional[bool]
    time_left: Optional[int]
    elapsed: int
    final_score: Optional[int]
    squad: List[SquadPlayerResponse]
    lineup: Dict[str, Optional[str]]

    @classmethod
    def from_session(cls, session: DraftSession) -> "DraftStateResponse":
        return cls(
            draft_id=session.id,
            state=session.state.value,
            mode=session.mode.value if session.mode else None,
            formation=session.formation,
            purse=session.purse,
            bonus_money=session.bonus_money,
            squad_value=session.squad_value,
            average_rating=session.average_rating,
            target_rating=session.target_rating,
            target_met=session.target_met,
            time_left=session.time_left,
            elapsed=session.elapsed,
            final_score=session.final_score,
            squad=[
                SquadPlayerResponse(
                    slug=player.slug,
                    name=player.name,
                    primary_position=player.primary_position,
                    base_rating=player.base_rating,
                    display_rating=player.display_rating,
                    purchase_price=player.purchase_price,
                    assigned_slot=player.assigned_slot,
                    out_of_position=player.out_of_position,
                )
                for player in display_order(session.squad, session.formation)
            ],
            lineup={
                slot: player.slug if player else None
                for slot, player in lineup(session.squad, session.formation).items()
            },
        )


class CanBuyResponse(BaseModel):
    slug: str
    allowed: bool
    reason: Optional[str] = None
    message: Optional[str] = None


class TriviaResultResponse(BaseModel):
    correct: bool
    amount: int
    draft: DraftStateResponse


class LeaderboardEntryResponse(BaseModel):
    username: str
    score: int
    mode: Optional[str]
    created_at: str
