"""Two-pass best-fit assignment of a squad onto formation slots.

Pass one gives every player whose primary position names an open slot (either
exactly, ``CAM``, or by slot code, ``CB`` -> ``CB1``) that slot at full rating.
Pass two walks the remaining players through their fallback groups and gives
them the first open slot found at 90% of their rating. Both passes run in
purchase order, so an earlier purchase always wins a contested slot.

The returned squad keeps purchase order; display ordering lives in
:func:`display_order`.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Sequence

from draftxi.config.formations import Formation, resolve_formation
from draftxi.config.positions import fallback_slots, normalize_code, slot_code
from draftxi.models import DraftedPlayer


logger = logging.getLogger(__name__)

OUT_OF_POSITION_FACTOR = 0.9


def penalized_rating(base_rating: int) -> int:
    # Half-up rounding, matching the rating shown on the pitch.
    return int(base_rating * OUT_OF_POSITION_FACTOR + 0.5)


def _take(available: List[str], predicate) -> Optional[str]:
    for index, slot in enumerate(available):
        if predicate(slot):
            return available.pop(index)
    return None


def assign_squad(squad: Sequence[DraftedPlayer], formation: Formation | str) -> List[DraftedPlayer]:
    """Return ``squad`` with ``assigned_slot``/``display_rating`` recomputed."""

    formation = resolve_formation(formation)
    available = list(formation.slots)
    placements: Dict[int, tuple[Optional[str], int]] = {}
    deferred: List[int] = []

    for index, player in enumerate(squad):
        position = normalize_code(player.primary_position)
        slot = _take(available, lambda name: name == position or slot_code(name) == position)
        if slot is None:
            deferred.append(index)
        else:
            placements[index] = (slot, player.base_rating)

    for index in deferred:
        player = squad[index]
        slot = None
        for code in fallback_slots(player.primary_position):
            slot = _take(available, lambda name: slot_code(name) == code)
            if slot is not None:
                break
        if slot is None:
            placements[index] = (None, player.base_rating)
            logger.debug("No slot left in %s for %s (%s)", formation.name, player.slug, player.primary_position)
        else:
            placements[index] = (slot, penalized_rating(player.base_rating))

    assigned: List[DraftedPlayer] = []
    for index, player in enumerate(squad):
        slot, rating = placements[index]
        if player.assigned_slot == slot and player.display_rating == rating:
            assigned.append(player)
        else:
            assigned.append(player.model_copy(update={"assigned_slot": slot, "display_rating": rating}))
    return assigned


def display_order(squad: Sequence[DraftedPlayer], formation: Formation | str) -> List[DraftedPlayer]:
    """Assigned players in formation slot order, then the unassigned ones."""

    formation = resolve_formation(formation)
    order = {slot: position for position, slot in enumerate(formation.slots)}
    placed = sorted(
        (player for player in squad if player.assigned_slot in order),
        key=lambda player: order[player.assigned_slot],
    )
    bench = [player for player in squad if player.assigned_slot not in order]
    return placed + bench


def lineup(squad: Sequence[DraftedPlayer], formation: Formation | str) -> Dict[str, Optional[DraftedPlayer]]:
    """Map every slot of ``formation`` to the player occupying it, if any."""

    formation = resolve_formation(formation)
    by_slot = {player.assigned_slot: player for player in squad if player.assigned_slot}
    return {slot: by_slot.get(slot) for slot in formation.slots}
