"""Static formation and position tables."""

from .formations import (
    DEFAULT_FORMATION,
    SQUAD_SIZE,
    Formation,
    get_formation,
    iter_formations,
    resolve_formation,
)
from .positions import Role, classify, fallback_slots, is_known, slot_code

__all__ = [
    "DEFAULT_FORMATION",
    "SQUAD_SIZE",
    "Formation",
    "Role",
    "classify",
    "fallback_slots",
    "get_formation",
    "is_known",
    "iter_formations",
    "resolve_formation",
    "slot_code",
]
