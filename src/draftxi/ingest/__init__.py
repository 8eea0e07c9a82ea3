"""Input adapters that normalize raw player catalog data."""

from .catalog import (
    DEFAULT_CATALOG_MAPPING,
    CatalogReport,
    CatalogRow,
    load_catalog_csv,
    load_player_catalog,
    rows_to_records,
)
from .values import parse_player_value

__all__ = [
    "DEFAULT_CATALOG_MAPPING",
    "CatalogReport",
    "CatalogRow",
    "load_catalog_csv",
    "load_player_catalog",
    "parse_player_value",
    "rows_to_records",
]
