"""Canonical player models shared across ingestion, assignment and drafting."""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic.config import ConfigDict

from draftxi.config.positions import slot_code


class PlayerRecord(BaseModel):
    """Read-only catalog entry a draft can buy from."""

    slug: str = Field(..., min_length=1)
    name: str
    rating: int = Field(..., ge=0, le=99)
    primary_position: str = Field(..., min_length=1)
    value_text: str
    club: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True)

    @field_validator("primary_position")
    @classmethod
    def _upper_position(cls, value: str) -> str:
        return value.strip().upper()


class DraftedPlayer(BaseModel):
    """A squad member; ``display_rating`` and ``assigned_slot`` are derived."""

    slug: str = Field(..., min_length=1)
    name: str
    primary_position: str
    base_rating: int = Field(..., ge=0)
    purchase_price: int = Field(..., ge=0)
    display_rating: int = Field(..., ge=0)
    assigned_slot: Optional[str] = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_record(cls, record: PlayerRecord, price: int) -> "DraftedPlayer":
        return cls(
            slug=record.slug,
            name=record.name,
            primary_position=record.primary_position,
            base_rating=record.rating,
            purchase_price=price,
            display_rating=record.rating,
        )

    @property
    def out_of_position(self) -> bool:
        if self.assigned_slot is None:
            return False
        return slot_code(self.assigned_slot) != self.primary_position
