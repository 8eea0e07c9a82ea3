import pytest

from draftxi.ingest import parse_player_value


@pytest.mark.parametrize(
    "text, expected",
    [
        ("€105.5M", 105_500_000),
        ("€80M", 80_000_000),
        ("€500K", 500_000),
        ("€1.5m", 1_500_000),
        ("1200", 1200),
        ("€ 2,500", 2500),
        ("1.2.3M", 1_200_000),
        ("€.5M", 500_000),
    ],
)
def test_parse_player_value(text, expected):
    assert parse_player_value(text) == expected


@pytest.mark.parametrize("text", ["", None, "free", "€M", ".", "9" * 400, "9" * 400 + "M"])
def test_parse_player_value_returns_zero_for_garbage(text):
    assert parse_player_value(text) == 0
