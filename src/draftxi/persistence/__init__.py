"""Persistence layer for draft sessions, leaderboard entries and trivia questions."""

from __future__ import annotations

import json
import random
import sqlite3
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator, List, Optional, Sequence
from uuid import uuid4

from draftxi.errors import PersistenceError


@dataclass
class SessionRecord:
    session_id: str
    created_at: datetime
    updated_at: datetime
    mode: str
    formation: str
    purse: int
    squad: List[dict]
    active: bool
    target_rating: Optional[int]
    end_time: Optional[datetime]


@dataclass
class LeaderboardEntry:
    entry_id: str
    username: str
    score: int
    mode: Optional[str]
    created_at: datetime


@dataclass
class QuestionRecord:
    question_id: str
    question: str
    options: List[str]
    correct_answer: str
    reward_amount: int


class DraftStore:
    """SQLite-backed store for draft sessions.

    Every failure surfaces as :class:`PersistenceError`; callers never see
    partially applied writes because each call runs in its own transaction.
    """

    def __init__(self, db_path: Path | str):
        self._use_uri = False
        if isinstance(db_path, str) and db_path.startswith("file:"):
            self.db_path: Path | str = db_path
            self._use_uri = True
        else:
            self.db_path = Path(db_path)
        with self._transaction() as conn:
            self._create_schema(conn)

    def _connect(self) -> sqlite3.Connection:
        if isinstance(self.db_path, Path):
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(self.db_path, uri=self._use_uri)
        conn.row_factory = sqlite3.Row
        return conn

    @contextmanager
    def _transaction(self) -> Iterator[sqlite3.Connection]:
        try:
            conn = self._connect()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Unable to open draft store: {exc}") from exc
        try:
            with conn:
                yield conn
        except sqlite3.Error as exc:
            raise PersistenceError(str(exc)) from exc
        finally:
            conn.close()

    def _create_schema(self, conn: sqlite3.Connection) -> None:
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS draft_sessions (
                id TEXT PRIMARY KEY,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL,
                mode TEXT NOT NULL,
                formation TEXT NOT NULL,
                purse INTEGER NOT NULL,
                squad_json TEXT NOT NULL,
                active INTEGER NOT NULL,
                target_rating INTEGER,
                end_time TEXT
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS leaderboard (
                id TEXT PRIMARY KEY,
                username TEXT NOT NULL,
                score INTEGER NOT NULL,
                mode TEXT,
                created_at TEXT NOT NULL
            )
            """
        )
        conn.execute(
            """
            CREATE TABLE IF NOT EXISTS bonus_questions (
                id TEXT PRIMARY KEY,
                question TEXT NOT NULL,
                options_json TEXT NOT NULL,
                correct_answer TEXT NOT NULL,
                reward_amount INTEGER NOT NULL
            )
            """
        )

    def create_session(
        self,
        initial_purse: int,
        *,
        mode: str,
        formation: str,
        target_rating: Optional[int] = None,
    ) -> str:
        session_id = uuid4().hex
        now = datetime.now(timezone.utc).isoformat()
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT INTO draft_sessions (
                    id, created_at, updated_at, mode, formation, purse,
                    squad_json, active, target_rating, end_time
                ) VALUES (?, ?, ?, ?, ?, ?, ?, 1, ?, NULL)
                """,
                (session_id, now, now, mode, formation, initial_purse, "[]", target_rating),
            )
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
        assignments = ["updated_at = ?"]
        params: list = [datetime.now(timezone.utc).isoformat()]
        if purse is not None:
            assignments.append("purse = ?")
            params.append(int(purse))
        if squad is not None:
            assignments.append("squad_json = ?")
            params.append(json.dumps(list(squad)))
        if active is not None:
            assignments.append("active = ?")
            params.append(1 if active else 0)
        if end_time is not None:
            assignments.append("end_time = ?")
            params.append(end_time.isoformat())
        if formation is not None:
            assignments.append("formation = ?")
            params.append(formation)
        params.append(session_id)
        with self._transaction() as conn:
            cursor = conn.execute(
                f"UPDATE draft_sessions SET {', '.join(assignments)} WHERE id = ?",
                params,
            )
            if cursor.rowcount == 0:
                raise PersistenceError(f"Draft session {session_id} not found")

    def read_session(self, session_id: str) -> SessionRecord:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM draft_sessions WHERE id = ?", (session_id,)).fetchone()
        if row is None:
            raise PersistenceError(f"Draft session {session_id} not found")
        return self._row_to_session(row)

    def load_active_session(self) -> Optional[SessionRecord]:
        with self._transaction() as conn:
            row = conn.execute(
                "SELECT * FROM draft_sessions WHERE active = 1 ORDER BY created_at DESC LIMIT 1"
            ).fetchone()
        return self._row_to_session(row) if row is not None else None

    def append_leaderboard_entry(self, username: str, score: int, *, mode: Optional[str] = None) -> LeaderboardEntry:
        entry = LeaderboardEntry(
            entry_id=uuid4().hex,
            username=username,
            score=int(score),
            mode=mode,
            created_at=datetime.now(timezone.utc),
        )
        with self._transaction() as conn:
            conn.execute(
                "INSERT INTO leaderboard (id, username, score, mode, created_at) VALUES (?, ?, ?, ?, ?)",
                (entry.entry_id, entry.username, entry.score, entry.mode, entry.created_at.isoformat()),
            )
        return entry

    def list_leaderboard(self, limit: int = 20, *, mode: Optional[str] = None) -> List[LeaderboardEntry]:
        query = "SELECT * FROM leaderboard"
        params: list = []
        if mode is not None:
            query += " WHERE mode = ?"
            params.append(mode)
        query += " ORDER BY score DESC, created_at ASC LIMIT ?"
        params.append(limit)
        with self._transaction() as conn:
            rows = conn.execute(query, params).fetchall()
        return [
            LeaderboardEntry(
                entry_id=row["id"],
                username=row["username"],
                score=row["score"],
                mode=row["mode"],
                created_at=datetime.fromisoformat(row["created_at"]),
            )
            for row in rows
        ]

    def add_question(
        self,
        *,
        question: str,
        options: Sequence[str],
        correct_answer: str,
        reward_amount: int,
        question_id: Optional[str] = None,
    ) -> QuestionRecord:
        if correct_answer not in options:
            raise ValueError("correct_answer must be one of the options")
        record = QuestionRecord(
            question_id=question_id or uuid4().hex,
            question=question,
            options=list(options),
            correct_answer=correct_answer,
            reward_amount=int(reward_amount),
        )
        with self._transaction() as conn:
            conn.execute(
                """
                INSERT OR REPLACE INTO bonus_questions (id, question, options_json, correct_answer, reward_amount)
                VALUES (?, ?, ?, ?, ?)
                """,
                (
                    record.question_id,
                    record.question,
                    json.dumps(record.options),
                    record.correct_answer,
                    record.reward_amount,
                ),
            )
        return record

    def get_question(self, question_id: str) -> Optional[QuestionRecord]:
        with self._transaction() as conn:
            row = conn.execute("SELECT * FROM bonus_questions WHERE id = ?", (question_id,)).fetchone()
        return self._row_to_question(row) if row is not None else None

    def random_question(self, rng: Optional[random.Random] = None) -> Optional[QuestionRecord]:
        rng = rng or random.Random()
        with self._transaction() as conn:
            count = conn.execute("SELECT COUNT(*) FROM bonus_questions").fetchone()[0]
            if not count:
                return None
            row = conn.execute(
                "SELECT * FROM bonus_questions ORDER BY id LIMIT 1 OFFSET ?",
                (rng.randrange(count),),
            ).fetchone()
        return self._row_to_question(row)

    @staticmethod
    def _row_to_session(row: sqlite3.Row) -> SessionRecord:
        return SessionRecord(
            session_id=row["id"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
            mode=row["mode"],
            formation=row["formation"],
            purse=row["purse"],
            squad=json.loads(row["squad_json"] or "[]"),
            active=bool(row["active"]),
            target_rating=row["target_rating"],
            end_time=datetime.fromisoformat(row["end_time"]) if row["end_time"] else None,
        )

    @staticmethod
    def _row_to_question(row: sqlite3.Row) -> QuestionRecord:
        return QuestionRecord(
            question_id=row["id"],
            question=row["question"],
            options=json.loads(row["options_json"]),
            correct_answer=row["correct_answer"],
            reward_amount=row["reward_amount"],
        )
