"""Inbound channel for out-of-band updates to a draft record."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Mapping, Optional

MERGEABLE_FIELDS = ("purse", "squad")


@dataclass(frozen=True)
class RemoteUpdate:
    session_id: str
    purse: Optional[int] = None
    squad: Optional[List[dict]] = None

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any]) -> "RemoteUpdate":
        squad = payload.get("squad")
        purse = payload.get("purse")
        return cls(
            session_id=str(payload.get("id", "")),
            purse=int(purse) if purse is not None else None,
            squad=list(squad) if squad is not None else None,
        )


class UpdateInbox:
    """FIFO buffer drained by the owning service on each tick."""

    def __init__(self) -> None:
        self._queue: Deque[RemoteUpdate] = deque()

    def put(self, update: RemoteUpdate) -> None:
        self._queue.append(update)

    def drain(self) -> List[RemoteUpdate]:
        items = list(self._queue)
        self._queue.clear()
        return items

    def __len__(self) -> int:
        return len(self._queue)
