import random
from datetime import datetime, timezone
from pathlib import Path

import pytest

from draftxi.errors import PersistenceError
from draftxi.persistence import DraftStore


def _store(tmp_path: Path) -> DraftStore:
    return DraftStore(tmp_path / "draftxi.sqlite")


def test_create_and_read_session(tmp_path: Path):
    store = _store(tmp_path)

    session_id = store.create_session(500_000_000, mode="classic", formation="4-3-3")
    record = store.read_session(session_id)

    assert record.purse == 500_000_000
    assert record.mode == "classic"
    assert record.formation == "4-3-3"
    assert record.squad == []
    assert record.active is True
    assert record.target_rating is None
    assert record.end_time is None


def test_update_session_changes_only_given_fields(tmp_path: Path):
    store = _store(tmp_path)
    session_id = store.create_session(1_000_000_000, mode="wildcard", formation="4-3-3", target_rating=84)
    squad = [{"slug": "keeper", "assigned_slot": "GK"}]

    store.update_session(session_id, purse=950_000_000, squad=squad)
    store.update_session(session_id, formation="4-4-2")

    record = store.read_session(session_id)
    assert record.purse == 950_000_000
    assert record.squad == squad
    assert record.formation == "4-4-2"
    assert record.target_rating == 84
    assert record.active is True


def test_stopping_session_removes_it_from_active_lookup(tmp_path: Path):
    store = _store(tmp_path)
    first = store.create_session(500_000_000, mode="classic", formation="4-3-3")
    assert store.load_active_session().session_id == first

    ended = datetime(2026, 1, 1, tzinfo=timezone.utc)
    store.update_session(first, active=False, end_time=ended)

    assert store.load_active_session() is None
    assert store.read_session(first).end_time == ended


def test_missing_session_raises_persistence_error(tmp_path: Path):
    store = _store(tmp_path)

    with pytest.raises(PersistenceError):
        store.update_session("missing", purse=1)
    with pytest.raises(PersistenceError):
        store.read_session("missing")


def test_unopenable_store_raises_persistence_error(tmp_path: Path):
    blocker = tmp_path / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(PersistenceError):
        DraftStore(blocker / "draftxi.sqlite")


def test_leaderboard_orders_by_score_and_filters_mode(tmp_path: Path):
    store = _store(tmp_path)
    store.append_leaderboard_entry("low", 100, mode="classic")
    store.append_leaderboard_entry("high", 900, mode="wildcard")
    store.append_leaderboard_entry("mid", 500, mode="classic")

    assert [entry.username for entry in store.list_leaderboard()] == ["high", "mid", "low"]
    assert [entry.username for entry in store.list_leaderboard(mode="classic")] == ["mid", "low"]
    assert len(store.list_leaderboard(limit=1)) == 1


def test_questions_round_trip_and_random_draw(tmp_path: Path):
    store = _store(tmp_path)
    assert store.random_question(random.Random(1)) is None

    store.add_question(
        question_id="q1",
        question="Which club plays at Anfield?",
        options=["Everton", "Liverpool"],
        correct_answer="Liverpool",
        reward_amount=20_000_000,
    )

    assert store.get_question("q1").options == ["Everton", "Liverpool"]
    assert store.get_question("q2") is None
    assert store.random_question(random.Random(1)).question_id == "q1"


def test_add_question_requires_answer_among_options(tmp_path: Path):
    store = _store(tmp_path)

    with pytest.raises(ValueError):
        store.add_question(question="?", options=["a", "b"], correct_answer="c", reward_amount=1)
