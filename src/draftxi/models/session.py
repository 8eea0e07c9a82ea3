"""Draft session aggregate."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from draftxi.config.formations import DEFAULT_FORMATION
from draftxi.models.player import DraftedPlayer


class GameMode(str, Enum):
    CLASSIC = "classic"
    WILDCARD = "wildcard"


class SessionState(str, Enum):
    NO_SESSION = "no_session"
    ACTIVE = "active"
    STOPPED = "stopped"


@dataclass
class DraftSession:
    id: Optional[str] = None
    purse: int = 0
    squad: List[DraftedPlayer] = field(default_factory=list)
    formation: str = DEFAULT_FORMATION
    mode: Optional[GameMode] = None
    bonus_money: int = 0
    active: bool = False
    target_rating: Optional[int] = None
    time_left: Optional[int] = None
    elapsed: int = 0
    final_score: Optional[int] = None

    @property
    def state(self) -> SessionState:
        if self.id is None:
            return SessionState.NO_SESSION
        return SessionState.ACTIVE if self.active else SessionState.STOPPED

    @property
    def squad_value(self) -> int:
        return sum(player.purchase_price for player in self.squad)

    @property
    def average_rating(self) -> int:
        if not self.squad:
            return 0
        total = sum(player.display_rating for player in self.squad)
        return int(total / len(self.squad) + 0.5)

    @property
    def target_met(self) -> Optional[bool]:
        if self.target_rating is None:
            return None
        return bool(self.squad) and self.average_rating >= self.target_rating

    def slugs(self) -> List[str]:
        return [player.slug for player in self.squad]

    def find(self, slug: str) -> Optional[DraftedPlayer]:
        for player in self.squad:
            if player.slug == slug:
                return player
        return None

    def snapshot(self) -> "DraftSession":
        # DraftedPlayer is frozen, a shallow copy of the squad list is enough.
        clone = copy.copy(self)
        clone.squad = list(self.squad)
        return clone

    def restore(self, snapshot: "DraftSession") -> None:
        self.__dict__.update(snapshot.snapshot().__dict__)
