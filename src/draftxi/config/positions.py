"""Position codes, their role categories and fallback groups."""

from __future__ import annotations

import re
from enum import Enum
from typing import Dict, Mapping, Tuple

from draftxi.errors import ConfigurationError


class Role(str, Enum):
    KEEPER = "keeper"
    DEFENDER = "defender"
    MIDFIELDER = "midfielder"
    FORWARD = "forward"


_POSITION_ROLES: Dict[str, Role] = {
    "GK": Role.KEEPER,
    "CB": Role.DEFENDER,
    "LCB": Role.DEFENDER,
    "RCB": Role.DEFENDER,
    "LB": Role.DEFENDER,
    "RB": Role.DEFENDER,
    "LWB": Role.DEFENDER,
    "RWB": Role.DEFENDER,
    "CDM": Role.MIDFIELDER,
    "LDM": Role.MIDFIELDER,
    "RDM": Role.MIDFIELDER,
    "CM": Role.MIDFIELDER,
    "LCM": Role.MIDFIELDER,
    "RCM": Role.MIDFIELDER,
    "CAM": Role.MIDFIELDER,
    "LM": Role.MIDFIELDER,
    "RM": Role.MIDFIELDER,
    "ST": Role.FORWARD,
    "CF": Role.FORWARD,
    "LST": Role.FORWARD,
    "RST": Role.FORWARD,
    "LW": Role.FORWARD,
    "RW": Role.FORWARD,
}

# Ordered most similar first; every group leads with its own code.
_FALLBACK_GROUPS: Dict[str, Tuple[str, ...]] = {
    "GK": ("GK",),
    "CB": ("CB", "LCB", "RCB", "RB", "LB", "RWB", "LWB"),
    "LCB": ("LCB", "CB", "RCB", "LB", "RB", "LWB", "RWB"),
    "RCB": ("RCB", "CB", "LCB", "RB", "LB", "RWB", "LWB"),
    "LB": ("LB", "LWB", "LCB", "CB", "RCB", "RB", "RWB"),
    "RB": ("RB", "RWB", "RCB", "CB", "LCB", "LB", "LWB"),
    "LWB": ("LWB", "LB", "LM", "LCB", "CB"),
    "RWB": ("RWB", "RB", "RM", "RCB", "CB"),
    "CDM": ("CDM", "LDM", "RDM", "CM", "LCM", "RCM", "CAM"),
    "LDM": ("LDM", "CDM", "RDM", "LCM", "CM", "RCM", "CAM"),
    "RDM": ("RDM", "CDM", "LDM", "RCM", "CM", "LCM", "CAM"),
    "CM": ("CM", "LCM", "RCM", "CDM", "LDM", "RDM", "CAM"),
    "LCM": ("LCM", "CM", "RCM", "LDM", "CDM", "RDM", "CAM"),
    "RCM": ("RCM", "CM", "LCM", "RDM", "CDM", "LDM", "CAM"),
    "CAM": ("CAM", "CM", "LCM", "RCM", "CDM", "LDM", "RDM"),
    "LM": ("LM", "LW", "LCM", "CM"),
    "RM": ("RM", "RW", "RCM", "CM"),
    "ST": ("ST", "CF", "LST", "RST", "LW", "RW"),
    "CF": ("CF", "ST", "LST", "RST", "CAM"),
    "LST": ("LST", "ST", "RST", "CF", "LW"),
    "RST": ("RST", "ST", "LST", "CF", "RW"),
    "LW": ("LW", "LM", "LST", "ST", "CF"),
    "RW": ("RW", "RM", "RST", "ST", "CF"),
}

_SLOT_INDEX = re.compile(r"\d+$")


def _validate_tables(roles: Mapping[str, Role], groups: Mapping[str, Tuple[str, ...]]) -> None:
    missing = set(roles) ^ set(groups)
    if missing:
        raise ConfigurationError(f"Position tables disagree on codes: {sorted(missing)}")
    for code, group in groups.items():
        if not group or group[0] != code:
            raise ConfigurationError(f"Fallback group for {code!r} must start with {code!r}")
        unknown = [entry for entry in group if entry not in roles]
        if unknown:
            raise ConfigurationError(f"Fallback group for {code!r} references unknown codes {unknown}")
        if len(set(group)) != len(group):
            raise ConfigurationError(f"Fallback group for {code!r} repeats a code")


_validate_tables(_POSITION_ROLES, _FALLBACK_GROUPS)


def normalize_code(code: str) -> str:
    return code.strip().upper()


def known_codes() -> Tuple[str, ...]:
    return tuple(_POSITION_ROLES)


def is_known(code: str) -> bool:
    return normalize_code(code) in _POSITION_ROLES


def classify(code: str) -> Role:
    """Return the role category of a position code.

    Unknown codes raise :class:`ConfigurationError`; callers are expected to
    reject them when a catalog is loaded, never at assignment time.
    """

    key = normalize_code(code)
    try:
        return _POSITION_ROLES[key]
    except KeyError:
        raise ConfigurationError(f"Unknown position code {code!r}") from None


def fallback_slots(code: str) -> Tuple[str, ...]:
    """Slot codes a player of ``code`` may occupy, most similar first."""

    key = normalize_code(code)
    try:
        return _FALLBACK_GROUPS[key]
    except KeyError:
        raise ConfigurationError(f"Unknown position code {code!r}") from None


def slot_code(slot_name: str) -> str:
    """Strip the trailing index of a formation slot (``CB2`` -> ``CB``)."""

    return _SLOT_INDEX.sub("", normalize_code(slot_name))
