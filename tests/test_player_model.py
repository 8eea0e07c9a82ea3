import pytest
from pydantic import ValidationError

from draftxi.models import DraftedPlayer, PlayerRecord


def _record(**overrides) -> PlayerRecord:
    data = dict(slug="p1", name="Test Player", rating=88, primary_position="cam", value_text="€90M")
    data.update(overrides)
    return PlayerRecord(**data)


def test_player_record_is_frozen():
    record = _record()

    assert record.slug == "p1"
    assert record.primary_position == "CAM"

    with pytest.raises((TypeError, ValidationError)):
        record.slug = "p2"  # type: ignore[misc]


def test_player_record_rejects_out_of_range_rating():
    with pytest.raises(ValidationError):
        _record(rating=120)


def test_drafted_player_from_record_starts_unassigned():
    drafted = DraftedPlayer.from_record(_record(), 90_000_000)

    assert drafted.base_rating == 88
    assert drafted.display_rating == 88
    assert drafted.purchase_price == 90_000_000
    assert drafted.assigned_slot is None
    assert drafted.out_of_position is False


def test_out_of_position_compares_slot_code():
    drafted = DraftedPlayer.from_record(_record(primary_position="CB"), 10)

    assert drafted.model_copy(update={"assigned_slot": "CB2"}).out_of_position is False
    assert drafted.model_copy(update={"assigned_slot": "LB"}).out_of_position is True
