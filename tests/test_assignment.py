import pytest

from draftxi.assignment import assign_squad, display_order, lineup, penalized_rating
from draftxi.models import DraftedPlayer


def _player(slug: str, position: str, rating: int = 80, price: int = 10_000_000) -> DraftedPlayer:
    return DraftedPlayer(
        slug=slug,
        name=slug.title(),
        primary_position=position,
        base_rating=rating,
        purchase_price=price,
        display_rating=rating,
    )


def _mixed_squad() -> list[DraftedPlayer]:
    return [
        _player("cf", "CF", 90),
        _player("keeper", "GK", 85),
        _player("striker", "ST", 88),
        _player("cb-a", "CB", 84),
        _player("cb-b", "CB", 83),
        _player("cb-c", "CB", 82),
        _player("holder", "CDM", 80),
        _player("spare-keeper", "GK", 75),
    ]


def test_exact_slot_codes_match_indexed_slots():
    squad = assign_squad([_player("a", "CB"), _player("b", "CB")], "4-3-3")

    assert [player.assigned_slot for player in squad] == ["CB1", "CB2"]
    assert all(player.display_rating == 80 for player in squad)


def test_exact_match_wins_over_earlier_purchase():
    squad = assign_squad(_mixed_squad(), "4-3-3")
    by_slug = {player.slug: player for player in squad}

    assert by_slug["striker"].assigned_slot == "ST"
    assert by_slug["striker"].display_rating == 88
    # CF has no slot in 4-3-3 and ST is taken, so it drops to CAM at 90%.
    assert by_slug["cf"].assigned_slot == "CAM"
    assert by_slug["cf"].display_rating == 81


def test_fallback_rating_penalty_and_unassigned_players():
    squad = assign_squad(_mixed_squad(), "4-3-3")
    by_slug = {player.slug: player for player in squad}

    # Third CB falls back to the first free defender slot.
    assert by_slug["cb-c"].assigned_slot == "RB"
    assert by_slug["cb-c"].display_rating == penalized_rating(82)
    assert by_slug["holder"].assigned_slot == "CM1"
    assert by_slug["holder"].display_rating == 72
    assert by_slug["spare-keeper"].assigned_slot is None
    assert by_slug["spare-keeper"].display_rating == 75


def test_assignment_preserves_purchase_order_and_slugs():
    original = _mixed_squad()
    squad = assign_squad(original, "4-3-3")

    assert [player.slug for player in squad] == [player.slug for player in original]
    assert len(squad) == len(original)


@pytest.mark.parametrize("formation", ["4-3-3", "4-1-2-1-2", "5-3-2", "3-4-3"])
def test_assignment_is_idempotent(formation):
    once = assign_squad(_mixed_squad(), formation)
    twice = assign_squad(once, formation)

    assert twice == once


def test_earlier_purchase_wins_contested_fallback_slot():
    squad = assign_squad([_player("first", "CDM"), _player("second", "LDM")], "4-3-3")

    assert [player.assigned_slot for player in squad] == ["CM1", "CM2"]


def test_formation_change_reassigns_slots():
    squad = assign_squad([_player("mid", "CM", 80)], "4-3-3")
    assert squad[0].assigned_slot == "CM1"
    assert squad[0].display_rating == 80

    moved = assign_squad(squad, "4-1-2-1-2")
    assert moved[0].assigned_slot == "CDM"
    assert moved[0].display_rating == 72


def test_display_order_puts_unassigned_last():
    squad = assign_squad(_mixed_squad(), "4-3-3")
    ordered = display_order(squad, "4-3-3")

    assert ordered[0].slug == "keeper"
    assert ordered[-1].slug == "spare-keeper"
    assert len(ordered) == len(squad)


def test_lineup_maps_every_slot():
    squad = assign_squad([_player("keeper", "GK")], "4-4-2")
    slots = lineup(squad, "4-4-2")

    assert len(slots) == 11
    assert slots["GK"].slug == "keeper"
    assert slots["ST1"] is None


def test_unknown_formation_raises():
    with pytest.raises(KeyError):
        assign_squad([], "1-1-9")
