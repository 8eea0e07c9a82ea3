"""In-memory stand-in for the draft store with failure injection."""

from __future__ import annotations

import threading
from datetime import datetime, timezone
from typing import Optional, Sequence

from draftxi.errors import PersistenceError
from draftxi.persistence import SessionRecord


class FakeStore:
    def __init__(self) -> None:
        self.sessions: dict[str, dict] = {}
        self.leaderboard: list[tuple[str, int, Optional[str]]] = []
        self.updates: list[dict] = []
        self.fail_next: set[str] = set()
        self.failing: set[str] = set()
        self.gate: Optional[threading.Event] = None
        self.entered = threading.Event()

    def _maybe_fail(self, name: str) -> None:
        if name in self.failing:
            raise PersistenceError(f"{name} unavailable")
        if name in self.fail_next:
            self.fail_next.discard(name)
            raise PersistenceError(f"{name} failed")

    def create_session(self, initial_purse, *, mode, formation, target_rating=None) -> str:
        self._maybe_fail("create_session")
        session_id = f"s{len(self.sessions) + 1}"
        self.sessions[session_id] = {
            "created_at": datetime.now(timezone.utc),
            "mode": mode,
            "formation": formation,
            "purse": initial_purse,
            "squad": [],
            "active": True,
            "target_rating": target_rating,
            "end_time": None,
        }
        return session_id

    def update_session(
        self,
        session_id: str,
        *,
        purse: Optional[int] = None,
        squad: Optional[Sequence[dict]] = None,
        active: Optional[bool] = None,
        end_time: Optional[datetime] = None,
        formation: Optional[str] = None,
    ) -> None:
        self.entered.set()
        if self.gate is not None:
            self.gate.wait(timeout=5)
        self._maybe_fail("update_session")
        row = self.sessions[session_id]
        changes = {
            name: value
            for name, value in (
                ("purse", purse),
                ("squad", list(squad) if squad is not None else None),
                ("active", active),
                ("end_time", end_time),
                ("formation", formation),
            )
            if value is not None
        }
        row.update(changes)
        self.updates.append(changes)

    def _record(self, session_id: str) -> SessionRecord:
        row = self.sessions[session_id]
        return SessionRecord(
            session_id=session_id,
            created_at=row["created_at"],
            updated_at=row["created_at"],
            mode=row["mode"],
            formation=row["formation"],
            purse=row["purse"],
            squad=list(row["squad"]),
            active=row["active"],
            target_rating=row["target_rating"],
            end_time=row["end_time"],
        )

    def read_session(self, session_id: str) -> SessionRecord:
        self._maybe_fail("read_session")
        if session_id not in self.sessions:
            raise PersistenceError(f"Draft session {session_id} not found")
        return self._record(session_id)

    def load_active_session(self) -> Optional[SessionRecord]:
        self._maybe_fail("load_active_session")
        active = [sid for sid, row in self.sessions.items() if row["active"]]
        return self._record(active[-1]) if active else None

    def append_leaderboard_entry(self, username: str, score: int, *, mode: Optional[str] = None) -> None:
        self._maybe_fail("append_leaderboard_entry")
        self.leaderboard.append((username, score, mode))
