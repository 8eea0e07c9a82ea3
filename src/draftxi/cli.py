"""Command-line interface for inspecting formations, squads and the leaderboard."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import List, Optional, Sequence

from draftxi.assignment import assign_squad, display_order
from draftxi.config import get_formation, iter_formations
from draftxi.config_loader import load_settings
from draftxi.ingest import load_player_catalog, parse_player_value
from draftxi.models import DraftedPlayer
from draftxi.persistence import DraftStore


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Football draft auction tools")
    parser.add_argument("--settings", type=Path, default=None, help="Optional settings JSON profile")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("formations", help="List formations and their slots")

    assign = sub.add_parser("assign", help="Assign catalog players to a formation")
    assign.add_argument("catalog", type=Path, help="Player catalog CSV")
    assign.add_argument("slugs", nargs="+", help="Player slugs in purchase order")
    assign.add_argument("--formation", default=None, help="Formation name (default from settings)")
    assign.add_argument(
        "--mapping",
        action="append",
        default=[],
        help="Catalog column mapping (e.g., rating=overall_rating)",
    )
    assign.add_argument("--json", action="store_true", help="Emit JSON instead of a table")

    board = sub.add_parser("leaderboard", help="Show the best recorded scores")
    board.add_argument("--limit", type=int, default=10, help="Number of entries to show")
    board.add_argument("--mode", default=None, help="Only show classic or wildcard entries")
    return parser.parse_args(argv)


def _parse_mapping(entries: List[str]) -> dict[str, str]:
    mapping: dict[str, str] = {}
    for entry in entries:
        if "=" not in entry:
            raise ValueError(f"Invalid mapping entry '{entry}', expected key=value")
        key, value = entry.split("=", 1)
        mapping[key.strip()] = value.strip()
    return mapping


def _format_money(amount: int) -> str:
    return f"€{amount / 1_000_000:.1f}M"


def _run_formations() -> None:
    for formation in iter_formations():
        counts = formation.role_counts()
        summary = ", ".join(f"{role.value}={count}" for role, count in counts.items())
        print(f"{formation.name:<10} {' '.join(formation.slots)}  ({summary})")


def _run_assign(args: argparse.Namespace, default_formation: str) -> None:
    mapping = _parse_mapping(args.mapping) or None
    records, report = load_player_catalog(args.catalog, mapping=mapping)
    if report.rejected:
        print(f"Skipped {len(report.rejected)} catalog rows")
    by_slug = {record.slug: record for record in records}
    missing = [slug for slug in args.slugs if slug not in by_slug]
    if missing:
        raise SystemExit(f"Unknown player slugs: {', '.join(missing)}")

    formation = args.formation or default_formation
    try:
        get_formation(formation)
    except KeyError as exc:
        raise SystemExit(str(exc)) from exc
    squad = [
        DraftedPlayer.from_record(by_slug[slug], parse_player_value(by_slug[slug].value_text))
        for slug in dict.fromkeys(args.slugs)
    ]
    assigned = display_order(assign_squad(squad, formation), formation)
    if args.json:
        print(json.dumps([player.model_dump() for player in assigned], indent=2))
        return
    for player in assigned:
        slot = player.assigned_slot or "-"
        marker = "*" if player.out_of_position else " "
        print(
            f"{slot:<5}{marker} {player.name:<28} {player.primary_position:<4} "
            f"{player.display_rating:>3} ({player.base_rating}) {_format_money(player.purchase_price)}"
        )


def _run_leaderboard(args: argparse.Namespace, db_path: str) -> None:
    store = DraftStore(db_path)
    entries = store.list_leaderboard(args.limit, mode=args.mode)
    if not entries:
        print("No leaderboard entries yet")
        return
    for rank, entry in enumerate(entries, start=1):
        print(f"{rank:>3}. {entry.username:<24} {_format_money(entry.score):>10} {entry.mode or ''}")


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    settings = load_settings(args.settings)

    if args.command == "formations":
        _run_formations()
    elif args.command == "assign":
        _run_assign(args, settings.default_formation)
    elif args.command == "leaderboard":
        _run_leaderboard(args, settings.db_path)


if __name__ == "__main__":
    main()
