"""Draft/budget state machine.

A :class:`DraftService` owns exactly one :class:`DraftSession`. Every mutating
operation takes the service lock, validates locally, applies the change
optimistically, then confirms it with the store. A failed confirmation rolls the
touched fields back to their pre-operation values. Expected failures come back
as :class:`Err` results instead of exceptions.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections import Counter
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Sequence

import pydantic

from draftxi.assignment import assign_squad
from draftxi.config import SQUAD_SIZE, Role, classify, get_formation
from draftxi.config_loader import GameSettings
from draftxi.draft.clock import SessionClock
from draftxi.draft.result import DraftResult, Err, Ok
from draftxi.draft.updates import RemoteUpdate, UpdateInbox
from draftxi.errors import ConfigurationError, PersistenceError, RejectionReason, ValidationError
from draftxi.ingest.values import parse_player_value
from draftxi.models import DraftedPlayer, DraftSession, GameMode, PlayerRecord, SessionState
from draftxi.persistence import SessionRecord


logger = logging.getLogger(__name__)

_QUOTA_ROLES = (Role.DEFENDER, Role.MIDFIELDER, Role.FORWARD)


class DraftRepository(Protocol):
    def create_session(
        self, initial_purse: int, *, mode: str, formation: str, target_rating: Optional[int] = None
    ) -> str: ...

    def update_session(
        self,
        session_id: str,
        *,
        purse: Optional[int] = None,
        squad: Optional[Sequence[dict]] = None,
        active: Optional[bool] = None,
        end_time: Optional[datetime] = None,
        formation: Optional[str] = None,
    ) -> None: ...

    def read_session(self, session_id: str) -> SessionRecord: ...

    def load_active_session(self) -> Optional[SessionRecord]: ...

    def append_leaderboard_entry(self, username: str, score: int, *, mode: Optional[str] = None) -> Any: ...


class DraftService:
    def __init__(
        self,
        store: DraftRepository,
        settings: Optional[GameSettings] = None,
        *,
        rng: Optional[random.Random] = None,
        clock: Optional[SessionClock] = None,
    ) -> None:
        self.store = store
        self.settings = settings or GameSettings()
        self.session = DraftSession(formation=self.settings.default_formation)
        self._rng = rng or random.Random()
        self._clock = clock or SessionClock(self.settings.tick_seconds)
        self._lock = asyncio.Lock()
        self._inbox = UpdateInbox()
        self._pending: set[str] = set()

    @property
    def state(self) -> SessionState:
        return self.session.state

    @property
    def clock_running(self) -> bool:
        return self._clock.running

    async def _remote(self, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        return await asyncio.to_thread(func, *args, **kwargs)

    def _reject(self, reason: RejectionReason, message: Optional[str] = None) -> Err:
        return Err(ValidationError(reason, message), self.session.snapshot())

    # -- lifecycle -----------------------------------------------------------

    async def start(self, mode: GameMode | str) -> DraftResult:
        mode = GameMode(mode)
        async with self._lock:
            if self.session.state is SessionState.ACTIVE:
                return self._reject(RejectionReason.INVALID_STATE, "A draft is already active")
            if mode is GameMode.WILDCARD:
                budget = self.settings.wildcard_budget
                low, high = self.settings.target_rating_range
                target: Optional[int] = self._rng.randint(low, high)
                time_left: Optional[int] = self.settings.wildcard_seconds
            else:
                budget = self.settings.classic_budget
                target = None
                time_left = None
            formation = self.settings.default_formation
            try:
                session_id = await self._remote(
                    self.store.create_session,
                    budget,
                    mode=mode.value,
                    formation=formation,
                    target_rating=target,
                )
            except PersistenceError as exc:
                logger.warning("Unable to start %s draft: %s", mode.value, exc)
                return Err(exc, self.session.snapshot())

            self._clock.stop()
            self._inbox.drain()
            self.session.restore(
                DraftSession(
                    id=session_id,
                    purse=budget,
                    formation=formation,
                    mode=mode,
                    active=True,
                    target_rating=target,
                    time_left=time_left,
                )
            )
            self._clock.start(self._tick)
            logger.info("Started %s draft %s with purse %s", mode.value, session_id, budget)
            return Ok(self.session.snapshot())

    async def resume(self) -> DraftResult:
        """Adopt the most recent active session from the store."""

        async with self._lock:
            if self.session.state is not SessionState.NO_SESSION:
                return self._reject(RejectionReason.INVALID_STATE, "A draft is already loaded")
            try:
                record = await self._remote(self.store.load_active_session)
            except PersistenceError as exc:
                logger.warning("Unable to load active draft: %s", exc)
                return Err(exc, self.session.snapshot())
            if record is None:
                return self._reject(RejectionReason.SESSION_INACTIVE, "No active draft to resume")

            mode = GameMode(record.mode)
            players = [DraftedPlayer.model_validate(item) for item in record.squad]
            age = int((datetime.now(timezone.utc) - record.created_at).total_seconds())
            time_left = None
            if mode is GameMode.WILDCARD:
                time_left = max(0, self.settings.wildcard_seconds - age)
            self.session.restore(
                DraftSession(
                    id=record.session_id,
                    purse=record.purse,
                    squad=assign_squad(players, record.formation),
                    formation=record.formation,
                    mode=mode,
                    active=True,
                    target_rating=record.target_rating,
                    time_left=time_left,
                    elapsed=0 if mode is GameMode.WILDCARD else max(0, age),
                )
            )
            logger.info("Resumed %s draft %s", mode.value, record.session_id)
            if time_left == 0:
                result = await self._stop_locked(self.settings.expiry_username)
                if self.session.state is SessionState.ACTIVE:
                    # The clock retries the stop on its next tick.
                    self._clock.start(self._tick)
                return result
            self._clock.start(self._tick)
            return Ok(self.session.snapshot())

    async def stop(self, username: Optional[str] = None) -> DraftResult:
        async with self._lock:
            return await self._stop_locked(username)

    async def _stop_locked(self, username: Optional[str]) -> DraftResult:
        session = self.session
        if session.state is not SessionState.ACTIVE:
            return self._reject(RejectionReason.INVALID_STATE, "No active draft to stop")
        final_score = session.purse + session.bonus_money
        try:
            await self._remote(
                self.store.update_session,
                session.id,
                active=False,
                end_time=datetime.now(timezone.utc),
            )
        except PersistenceError as exc:
            logger.warning("Unable to stop draft %s: %s", session.id, exc)
            return Err(exc, session.snapshot())

        session.active = False
        session.final_score = final_score
        self._clock.stop()
        logger.info("Stopped draft %s with final score %s", session.id, final_score)
        if username:
            mode = session.mode.value if session.mode else None
            try:
                await self._remote(self.store.append_leaderboard_entry, username, final_score, mode=mode)
            except PersistenceError as exc:
                logger.warning("Leaderboard entry for %s not recorded: %s", username, exc)
                return Err(exc, session.snapshot())
        return Ok(session.snapshot())

    async def reset(self) -> DraftSession:
        async with self._lock:
            self._clock.stop()
            self._inbox.drain()
            self._pending.clear()
            self.session.restore(DraftSession(formation=self.settings.default_formation))
            return self.session.snapshot()

    async def expire(self, session_id: Optional[str] = None) -> Optional[DraftResult]:
        """Stop the session when its countdown runs out.

        Returns None when there is nothing left to stop, so once a stop has been
        confirmed further calls are no-ops. A failed stop leaves the session
        active and a later call tries again.
        """

        async with self._lock:
            if session_id is not None and session_id != self.session.id:
                return None
            if self.session.state is not SessionState.ACTIVE:
                return None
            logger.info("Wildcard countdown expired for draft %s", self.session.id)
            result = await self._stop_locked(self.settings.expiry_username)
            if self.session.state is SessionState.ACTIVE:
                logger.error("Automatic stop of draft %s failed, retrying on next tick: %s", self.session.id, result.error)
            return result

    async def _tick(self) -> bool:
        self.drain_updates()
        session = self.session
        if session.state is not SessionState.ACTIVE:
            return False
        if session.mode is GameMode.WILDCARD:
            session.time_left = max(0, (session.time_left or 0) - 1)
            if session.time_left == 0:
                await self.expire(session.id)
                return self.session.state is SessionState.ACTIVE
        else:
            session.elapsed += 1
        return True

    # -- purchase validation -------------------------------------------------

    @property
    def time_expired(self) -> bool:
        session = self.session
        return session.mode is GameMode.WILDCARD and session.time_left == 0

    def _closed(self) -> Optional[ValidationError]:
        if self.session.state is not SessionState.ACTIVE:
            return ValidationError(RejectionReason.SESSION_INACTIVE, "No active draft")
        if self.time_expired:
            # Still active only because the automatic stop has not been confirmed yet.
            return ValidationError(RejectionReason.TIME_EXPIRED, "The wildcard countdown has run out")
        return None

    def check_purchase(self, player: PlayerRecord) -> Optional[ValidationError]:
        """Return the first rule ``player`` breaks, or None if it may be bought."""

        session = self.session
        closed = self._closed()
        if closed is not None:
            return closed
        if session.find(player.slug) is not None:
            return ValidationError(RejectionReason.DUPLICATE_PLAYER, f"{player.name} is already in the squad")
        if len(session.squad) >= SQUAD_SIZE:
            return ValidationError(RejectionReason.SQUAD_FULL, f"Squad already has {SQUAD_SIZE} players")
        price = parse_player_value(player.value_text)
        if price <= 0:
            return ValidationError(RejectionReason.INVALID_PRICE, f"Unable to price {player.name} from {player.value_text!r}")
        if price > session.purse:
            return ValidationError(RejectionReason.INSUFFICIENT_FUNDS, f"{player.name} costs {price}, purse is {session.purse}")

        formation = get_formation(session.formation)
        counts = Counter(classify(member.primary_position) for member in session.squad)
        counts[classify(player.primary_position)] += 1
        limits = formation.role_counts()
        for role in _QUOTA_ROLES:
            if counts[role] > limits[role]:
                return ValidationError(
                    RejectionReason.ROLE_QUOTA_EXCEEDED,
                    f"{formation.name} only has {limits[role]} {role.value} slots",
                )

        provisional = DraftedPlayer.from_record(player, price)
        simulated = assign_squad([*session.squad, provisional], formation)
        if simulated[-1].assigned_slot is None:
            return ValidationError(
                RejectionReason.NO_SLOT_AVAILABLE,
                f"No {formation.name} slot left for a {player.primary_position}",
            )
        return None

    def can_buy(self, player: PlayerRecord) -> bool:
        return self.check_purchase(player) is None

    # -- mutations -----------------------------------------------------------

    async def buy(self, player: PlayerRecord) -> DraftResult:
        async with self._lock:
            self.drain_updates()
            error = self.check_purchase(player)
            if error is not None:
                return Err(error, self.session.snapshot())
            price = parse_player_value(player.value_text)
            squad = assign_squad(
                [*self.session.squad, DraftedPlayer.from_record(player, price)],
                self.session.formation,
            )
            result = await self._commit(purse=self.session.purse - price, squad=squad)
            if result.ok:
                logger.info("Draft %s bought %s for %s", self.session.id, player.slug, price)
            return result

    async def sell(self, slug: str) -> DraftResult:
        async with self._lock:
            self.drain_updates()
            closed = self._closed()
            if closed is not None:
                return Err(closed, self.session.snapshot())
            player = self.session.find(slug)
            if player is None:
                return self._reject(RejectionReason.UNKNOWN_PLAYER, f"{slug} is not in the squad")
            squad = assign_squad(
                [member for member in self.session.squad if member.slug != slug],
                self.session.formation,
            )
            result = await self._commit(purse=self.session.purse + player.purchase_price, squad=squad)
            if result.ok:
                logger.info("Draft %s sold %s for %s", self.session.id, slug, player.purchase_price)
            return result

    async def set_formation(self, name: str) -> DraftResult:
        formation = get_formation(name)
        async with self._lock:
            self.drain_updates()
            closed = self._closed()
            if closed is not None:
                return Err(closed, self.session.snapshot())
            squad = assign_squad(self.session.squad, formation)
            return await self._commit(formation=formation.name, squad=squad)

    def add_bonus(self, amount: int) -> DraftResult:
        """Add a trivia reward or penalty to the score-only accumulator."""

        closed = self._closed()
        if closed is not None:
            return Err(closed, self.session.snapshot())
        self.session.bonus_money += int(amount)
        return Ok(self.session.snapshot())

    async def refresh_budget(self) -> DraftResult:
        async with self._lock:
            if self.session.id is None:
                return self._reject(RejectionReason.SESSION_INACTIVE, "No draft to refresh")
            try:
                record = await self._remote(self.store.read_session, self.session.id)
            except PersistenceError as exc:
                logger.warning("Budget refresh for %s failed: %s", self.session.id, exc)
                return Err(exc, self.session.snapshot())
            self.session.purse = record.purse
            return Ok(self.session.snapshot())

    async def _commit(
        self,
        *,
        purse: Optional[int] = None,
        squad: Optional[list[DraftedPlayer]] = None,
        formation: Optional[str] = None,
    ) -> DraftResult:
        session = self.session
        changes: Dict[str, Any] = {
            name: value
            for name, value in (("purse", purse), ("squad", squad), ("formation", formation))
            if value is not None
        }
        previous = {name: getattr(session, name) for name in changes}
        for name, value in changes.items():
            setattr(session, name, value)
        self._pending.update(changes)
        try:
            await self._remote(
                self.store.update_session,
                session.id,
                purse=purse,
                squad=[member.model_dump() for member in squad] if squad is not None else None,
                formation=formation,
            )
        except PersistenceError as exc:
            for name, value in previous.items():
                setattr(session, name, value)
            logger.warning("Rolled back %s on draft %s: %s", ", ".join(sorted(changes)), session.id, exc)
            return Err(exc, session.snapshot())
        finally:
            self._pending.difference_update(changes)
        return Ok(session.snapshot())

    # -- push updates --------------------------------------------------------

    def receive_update(self, payload: RemoteUpdate | Mapping[str, Any]) -> bool:
        if isinstance(payload, RemoteUpdate):
            update = payload
        else:
            try:
                update = RemoteUpdate.from_payload(payload)
            except (TypeError, ValueError) as exc:
                logger.warning("Dropping malformed draft update: %s", exc)
                return False
        self._inbox.put(update)
        return True

    def drain_updates(self) -> int:
        """Merge queued remote updates, skipping fields with a write in flight."""

        applied = 0
        for update in self._inbox.drain():
            session = self.session
            if session.id is None or update.session_id != session.id:
                continue
            squad = None
            if update.squad is not None and "squad" not in self._pending:
                try:
                    players = [DraftedPlayer.model_validate(item) for item in update.squad]
                    squad = assign_squad(players, session.formation)
                except (pydantic.ValidationError, ConfigurationError) as exc:
                    logger.warning("Dropping malformed update for draft %s: %s", session.id, exc)
                    continue
            if update.purse is not None:
                if "purse" in self._pending:
                    logger.debug("Ignoring remote purse for %s while a write is pending", session.id)
                else:
                    session.purse = max(0, update.purse)
                    applied += 1
            if update.squad is not None:
                if "squad" in self._pending:
                    logger.debug("Ignoring remote squad for %s while a write is pending", session.id)
                else:
                    session.squad = squad
                    applied += 1
        return applied
