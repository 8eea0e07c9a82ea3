import pytest

from draftxi.config import Role, get_formation, iter_formations
from draftxi.config.formations import Formation
from draftxi.errors import ConfigurationError


def test_get_formation_433_role_counts():
    formation = get_formation("4-3-3")
    assert formation.slots[0] == "GK"
    assert formation.role_counts() == {
        Role.KEEPER: 1,
        Role.DEFENDER: 4,
        Role.MIDFIELDER: 3,
        Role.FORWARD: 3,
    }
    assert formation.role_of("CB2") is Role.DEFENDER
    assert "CAM" in formation


def test_every_formation_has_eleven_unique_slots_and_one_keeper():
    names = [formation.name for formation in iter_formations()]
    assert "4-1-2-1-2" in names
    for formation in iter_formations():
        assert len(set(formation.slots)) == 11
        assert formation.role_counts()[Role.KEEPER] == 1


def test_get_formation_missing_raises():
    with pytest.raises(KeyError):
        get_formation("2-3-5")


def test_formation_with_ten_slots_is_rejected():
    with pytest.raises(ConfigurationError):
        Formation("bad", ("GK", "LB", "CB1", "CB2", "RB", "CM1", "CM2", "CAM", "LW", "RW"))


def test_formation_with_duplicate_slots_is_rejected():
    with pytest.raises(ConfigurationError, match="repeats"):
        Formation("bad", ("GK", "LB", "CB1", "CB1", "RB", "CM1", "CM2", "CAM", "LW", "RW", "ST"))


def test_formation_with_unknown_slot_code_is_rejected():
    with pytest.raises(ConfigurationError, match="unknown"):
        Formation("bad", ("GK", "LB", "CB1", "CB2", "RB", "CM1", "CM2", "CAM", "LW", "RW", "SWEEPER"))
