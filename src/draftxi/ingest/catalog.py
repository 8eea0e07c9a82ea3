"""Helpers to load player catalog CSVs and emit canonical records."""

from __future__ import annotations

import csv
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel

from draftxi.config.positions import is_known, normalize_code
from draftxi.ingest.values import parse_player_value
from draftxi.models import PlayerRecord


logger = logging.getLogger(__name__)

DEFAULT_CATALOG_MAPPING = {
    "slug": "id",
    "name": "name",
    "rating": "overall_rating",
    "position": "best_position",
    "value": "value",
    "club": "club_name",
}


class CatalogRow(BaseModel):
    raw_slug: str
    raw_name: str
    raw_rating: str
    raw_position: str
    raw_value: str
    raw_club: Optional[str] = None

    @classmethod
    def from_mapping(cls, row: Mapping[str, str], mapping: Mapping[str, str]) -> "CatalogRow":
        def extract(spec: Optional[str | Sequence[str]], *, default: Optional[str] = None) -> Optional[str]:
            if spec is None:
                return default
            if isinstance(spec, str):
                value = row.get(spec)
                return value.strip() if value is not None else default
            parts = [row.get(col, "").strip() for col in spec if row.get(col)]
            return " ".join(parts) if parts else default

        def parse_spec(key: str) -> Optional[str | Sequence[str]]:
            spec = mapping.get(key, DEFAULT_CATALOG_MAPPING.get(key))
            if isinstance(spec, str) and "|" in spec:
                return tuple(part.strip() for part in spec.split("|"))
            return spec

        name = extract(parse_spec("name"), default="") or ""
        return cls(
            raw_slug=extract(parse_spec("slug"), default="") or name,
            raw_name=name,
            raw_rating=extract(parse_spec("rating"), default="") or "",
            raw_position=extract(parse_spec("position"), default="") or "",
            raw_value=extract(parse_spec("value"), default="") or "",
            raw_club=extract(parse_spec("club")),
        )


@dataclass
class CatalogReport:
    total_rows: int = 0
    accepted: int = 0
    rejected: List[Tuple[str, str]] = field(default_factory=list)

    def reject(self, slug: str, reason: str) -> None:
        self.rejected.append((slug, reason))
        logger.warning("Skipping catalog row %s: %s", slug, reason)


def _parse_rating(raw: str) -> Optional[int]:
    try:
        return int(float(raw))
    except (TypeError, ValueError):
        return None


def rows_to_records(rows: Iterable[CatalogRow]) -> Tuple[List[PlayerRecord], CatalogReport]:
    """Convert raw rows into :class:`PlayerRecord` objects.

    Rows with an unparseable rating, an unknown position code, a zero market
    value or a slug already seen are rejected and listed in the report.
    """

    records: List[PlayerRecord] = []
    report = CatalogReport()
    seen: set[str] = set()
    for row in rows:
        report.total_rows += 1
        slug = row.raw_slug or row.raw_name
        if not slug:
            report.reject("<blank>", "missing slug and name")
            continue
        if slug in seen:
            report.reject(slug, "duplicate slug")
            continue
        rating = _parse_rating(row.raw_rating)
        if rating is None or not 0 <= rating <= 99:
            report.reject(slug, f"invalid rating {row.raw_rating!r}")
            continue
        position = normalize_code(row.raw_position.split(",")[0]) if row.raw_position else ""
        if not is_known(position):
            report.reject(slug, f"unknown position {row.raw_position!r}")
            continue
        if parse_player_value(row.raw_value) <= 0:
            report.reject(slug, f"unparseable value {row.raw_value!r}")
            continue
        seen.add(slug)
        records.append(
            PlayerRecord(
                slug=slug,
                name=row.raw_name or slug,
                rating=rating,
                primary_position=position,
                value_text=row.raw_value,
                club=row.raw_club or None,
            )
        )
        report.accepted += 1
    return records, report


def load_catalog_csv(path: Path, mapping: Optional[Mapping[str, str]] = None) -> List[CatalogRow]:
    mapping = mapping or DEFAULT_CATALOG_MAPPING
    with path.open(newline="", encoding="utf-8-sig") as handle:
        reader = csv.DictReader(handle)
        return [CatalogRow.from_mapping(row, mapping) for row in reader]


def load_player_catalog(
    path: Path,
    *,
    mapping: Optional[Mapping[str, str]] = None,
) -> Tuple[List[PlayerRecord], CatalogReport]:
    """Load a catalog CSV and return accepted records sorted by rating."""

    records, report = rows_to_records(load_catalog_csv(path, mapping))
    records.sort(key=lambda record: (-record.rating, record.name))
    logger.info("Loaded %s/%s catalog players from %s", report.accepted, report.total_rows, path)
    return records, report
