"""Squad-to-formation slot assignment."""

from .engine import OUT_OF_POSITION_FACTOR, assign_squad, display_order, lineup, penalized_rating

__all__ = ["OUT_OF_POSITION_FACTOR", "assign_squad", "display_order", "lineup", "penalized_rating"]
