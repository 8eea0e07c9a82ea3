import json
from pathlib import Path

import pytest

from draftxi.cli import main
from draftxi.persistence import DraftStore


def _write_catalog(tmp_path: Path) -> Path:
    path = tmp_path / "players.csv"
    path.write_text(
        "id,name,overall_rating,value,best_position,club_name\n"
        "kq,Kylian Quick,91,€180M,ST,Paris\n"
        "ra,Rodri Anchor,90,€110M,CDM,Manchester\n"
        "aw,Alisson Wall,89,€60.5M,GK,Liverpool\n"
        "bk,Backup Keeper,70,€1M,GK,Nowhere\n",
        encoding="utf-8",
    )
    return path


def test_formations_command(capsys):
    main(["formations"])

    out = capsys.readouterr().out
    assert "4-3-3" in out
    assert "4-1-2-1-2" in out
    assert "forward=3" in out


def test_assign_command_json(tmp_path: Path, capsys):
    catalog = _write_catalog(tmp_path)

    main(["assign", str(catalog), "bk", "kq", "ra", "aw", "--json"])

    players = json.loads(capsys.readouterr().out)
    slots = {player["slug"]: player["assigned_slot"] for player in players}
    assert slots == {"bk": "GK", "kq": "ST", "ra": "CM1", "aw": None}
    assert players[-1]["slug"] == "aw"
    assert next(player for player in players if player["slug"] == "ra")["display_rating"] == 81


def test_assign_command_table_with_formation(tmp_path: Path, capsys):
    catalog = _write_catalog(tmp_path)

    main(["assign", str(catalog), "ra", "--formation", "4-1-2-1-2"])

    out = capsys.readouterr().out
    assert "CDM" in out
    assert "Rodri Anchor" in out
    assert "€110.0M" in out


def test_assign_command_rejects_unknown_inputs(tmp_path: Path):
    catalog = _write_catalog(tmp_path)

    with pytest.raises(SystemExit):
        main(["assign", str(catalog), "nobody"])
    with pytest.raises(SystemExit):
        main(["assign", str(catalog), "kq", "--formation", "1-1-9"])


def test_leaderboard_command(tmp_path: Path, monkeypatch, capsys):
    db_path = tmp_path / "board.sqlite"
    store = DraftStore(db_path)
    store.append_leaderboard_entry("Ada", 420_000_000, mode="classic")
    store.append_leaderboard_entry("Wildcard Player", 955_000_000, mode="wildcard")
    monkeypatch.setenv("DRAFTXI_DB_PATH", str(db_path))

    main(["leaderboard", "--limit", "5"])
    lines = capsys.readouterr().out.strip().splitlines()
    assert "Wildcard Player" in lines[0]
    assert "Ada" in lines[1]

    main(["leaderboard", "--mode", "classic"])
    out = capsys.readouterr().out
    assert "Ada" in out
    assert "Wildcard Player" not in out


def test_leaderboard_command_empty(tmp_path: Path, monkeypatch, capsys):
    monkeypatch.setenv("DRAFTXI_DB_PATH", str(tmp_path / "empty.sqlite"))

    main(["leaderboard"])

    assert "No leaderboard entries yet" in capsys.readouterr().out
