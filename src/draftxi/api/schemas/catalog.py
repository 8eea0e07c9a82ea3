from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel


class PlayerResponse(BaseModel):
    slug: str
    name: str
    rating: int
    primary_position: str
    role: str
    value_text: str
    price: int
    club: Optional[str]


class FormationSlotResponse(BaseModel):
    name: str
    role: str


class FormationResponse(BaseModel):
    name: str
    slots: List[FormationSlotResponse]
