"""Market value parsing."""

from __future__ import annotations

import math
import re

_NON_VALUE_CHARS = re.compile(r"[^0-9.MK]")
_LEADING_NUMBER = re.compile(r"\d+(?:\.\d*)?|\.\d+")


def parse_player_value(value: str | None) -> int:
    """Convert a market value string such as ``"€105.5M"`` into base units.

    Everything except digits, ``.``, ``M`` and ``K`` is discarded. ``M`` scales
    by one million, ``K`` by one thousand, otherwise the number is taken as-is.
    Only the leading number counts, so ``"1.2.3M"`` reads as 1.2 million.
    Unparseable or non-finite input yields 0.
    """

    if not value:
        return 0
    cleaned = _NON_VALUE_CHARS.sub("", str(value).upper())
    if "M" in cleaned:
        multiplier = 1_000_000
    elif "K" in cleaned:
        multiplier = 1_000
    else:
        multiplier = 1
    match = _LEADING_NUMBER.match(cleaned.replace("M", "").replace("K", ""))
    if match is None:
        return 0
    number = float(match.group()) * multiplier
    if not math.isfinite(number):
        return 0
    return int(number + 0.5)
