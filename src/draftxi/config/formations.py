"""Formation catalog: named slots for every supported team shape."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, Iterable, Mapping, Tuple

from draftxi.errors import ConfigurationError
from draftxi.config.positions import Role, classify, is_known, slot_code

SQUAD_SIZE = 11
DEFAULT_FORMATION = "4-3-3"


@dataclass(frozen=True)
class Formation:
    name: str
    slots: Tuple[str, ...]
    slot_roles: Mapping[str, Role] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        _validate(self.name, self.slots)
        object.__setattr__(self, "slot_roles", {slot: classify(slot_code(slot)) for slot in self.slots})

    def role_of(self, slot: str) -> Role:
        return self.slot_roles[slot]

    def role_counts(self) -> Dict[Role, int]:
        counts = Counter(self.slot_roles.values())
        return {role: counts.get(role, 0) for role in Role}

    def __contains__(self, slot: object) -> bool:
        return slot in self.slot_roles


def _validate(name: str, slots: Tuple[str, ...]) -> None:
    if len(slots) != SQUAD_SIZE:
        raise ConfigurationError(f"Formation {name!r} has {len(slots)} slots, expected {SQUAD_SIZE}")
    duplicates = sorted(slot for slot, count in Counter(slots).items() if count > 1)
    if duplicates:
        raise ConfigurationError(f"Formation {name!r} repeats slots {duplicates}")
    unknown = [slot for slot in slots if not is_known(slot_code(slot))]
    if unknown:
        raise ConfigurationError(f"Formation {name!r} uses unknown slot codes {unknown}")


_FORMATIONS: Dict[str, Formation] = {
    formation.name: formation
    for formation in (
        Formation("4-3-3", ("GK", "LB", "CB1", "CB2", "RB", "CM1", "CM2", "CAM", "LW", "RW", "ST")),
        Formation("4-1-2-1-2", ("GK", "LB", "CB1", "CB2", "RB", "CDM", "LM", "RM", "CAM", "ST1", "ST2")),
        Formation("4-4-1-1", ("GK", "LB", "CB1", "CB2", "RB", "LM", "CM1", "CM2", "RM", "CF", "ST")),
        Formation("5-4-1", ("GK", "LWB", "CB1", "CB2", "CB3", "RWB", "LM", "CM1", "CM2", "RM", "ST")),
        Formation("3-5-2", ("GK", "CB1", "CB2", "CB3", "LM", "CM1", "CM2", "RM", "CAM", "ST1", "ST2")),
        Formation("5-3-2", ("GK", "LWB", "CB1", "CB2", "CB3", "RWB", "CM1", "CM2", "CAM", "ST1", "ST2")),
        Formation("4-4-2", ("GK", "LB", "CB1", "CB2", "RB", "LM", "CM1", "CM2", "RM", "ST1", "ST2")),
        Formation("3-4-3", ("GK", "CB1", "CB2", "CB3", "LM", "CM1", "CM2", "RM", "LW", "RW", "ST")),
        Formation("4-1-4-1", ("GK", "LB", "CB1", "CB2", "RB", "CDM", "LM", "CM1", "CM2", "RM", "ST")),
    )
}


def iter_formations() -> Iterable[Formation]:
    """Return an iterator of all configured formations."""

    return _FORMATIONS.values()


def get_formation(name: str) -> Formation:
    """Fetch a formation by name, raising KeyError if missing."""

    key = name.strip()
    if key not in _FORMATIONS:
        raise KeyError(f"No formation configured for {name!r}")
    return _FORMATIONS[key]


def resolve_formation(formation: Formation | str) -> Formation:
    if isinstance(formation, Formation):
        return formation
    if not isinstance(formation, str):
        raise TypeError("formation must be a Formation or a formation name")
    return get_formation(formation)
