"""Load game settings from an optional JSON profile and the environment."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from draftxi.config.formations import DEFAULT_FORMATION


logger = logging.getLogger(__name__)

_ENV_PREFIX = "DRAFTXI_"


@dataclass(frozen=True)
class GameSettings:
    classic_budget: int = 500_000_000
    wildcard_budget: int = 1_000_000_000
    wildcard_seconds: int = 300
    target_rating_range: Tuple[int, int] = (80, 88)
    tick_seconds: float = 1.0
    default_formation: str = DEFAULT_FORMATION
    expiry_username: str = "Wildcard Player"
    trivia_penalty: int = 25_000_000
    db_path: str = "draftxi.sqlite"
    catalog_path: Optional[str] = None

    @classmethod
    def load(cls, path: Path) -> "GameSettings":
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls.from_mapping(data)

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "GameSettings":
        known = {name: value for name, value in data.items() if name in cls.__dataclass_fields__}
        if "target_rating_range" in known:
            low, high = known["target_rating_range"]
            known["target_rating_range"] = (int(low), int(high))
        return cls(**known)

    def save(self, path: Path) -> None:
        payload = asdict(self)
        payload["target_rating_range"] = list(self.target_rating_range)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")


def _env_int(name: str, default: int, *, min_value: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning("Invalid int for %s: %s; using default %d", name, raw, default)
        return default
    if min_value is not None:
        value = max(min_value, value)
    return value


def _env_float(name: str, default: float, *, clamp_min: float | None = None) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Invalid float for %s: %s; using default %.2f", name, raw, default)
        return default
    if clamp_min is not None:
        value = max(clamp_min, value)
    return value


def _env_str(name: str, default: Optional[str]) -> Optional[str]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def load_settings(path: Optional[Path] = None) -> GameSettings:
    """Resolve settings: defaults, then the JSON profile, then ``DRAFTXI_*`` variables."""

    settings = GameSettings.load(path) if path else GameSettings()
    return replace(
        settings,
        classic_budget=_env_int(f"{_ENV_PREFIX}CLASSIC_BUDGET", settings.classic_budget, min_value=0),
        wildcard_budget=_env_int(f"{_ENV_PREFIX}WILDCARD_BUDGET", settings.wildcard_budget, min_value=0),
        wildcard_seconds=_env_int(f"{_ENV_PREFIX}WILDCARD_SECONDS", settings.wildcard_seconds, min_value=1),
        tick_seconds=_env_float(f"{_ENV_PREFIX}TICK_SECONDS", settings.tick_seconds, clamp_min=0.001),
        trivia_penalty=_env_int(f"{_ENV_PREFIX}TRIVIA_PENALTY", settings.trivia_penalty, min_value=0),
        db_path=_env_str(f"{_ENV_PREFIX}DB_PATH", settings.db_path) or settings.db_path,
        catalog_path=_env_str(f"{_ENV_PREFIX}CATALOG_PATH", settings.catalog_path),
    )
