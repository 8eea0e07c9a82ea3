import pytest

from draftxi.config import Role, classify, fallback_slots, slot_code
from draftxi.config.positions import known_codes
from draftxi.errors import ConfigurationError


@pytest.mark.parametrize(
    "code, role",
    [
        ("GK", Role.KEEPER),
        ("rwb", Role.DEFENDER),
        ("CDM", Role.MIDFIELDER),
        ("LM", Role.MIDFIELDER),
        ("RW", Role.FORWARD),
        (" st ", Role.FORWARD),
    ],
)
def test_classify(code, role):
    assert classify(code) is role


def test_classify_unknown_code_is_configuration_error():
    with pytest.raises(ConfigurationError):
        classify("LIBERO")


def test_fallback_groups_lead_with_own_code():
    for code in known_codes():
        group = fallback_slots(code)
        assert group
        assert group[0] == code


def test_keeper_has_no_alternative_slot():
    assert fallback_slots("GK") == ("GK",)


def test_central_midfielder_prefers_holding_role_over_attacking():
    group = fallback_slots("CM")
    assert group.index("CDM") < group.index("CAM")


def test_slot_code_strips_index():
    assert slot_code("CB2") == "CB"
    assert slot_code("st1") == "ST"
    assert slot_code("CAM") == "CAM"
