"""REST API for the draft game."""

from __future__ import annotations

import random
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from fastapi import FastAPI, HTTPException, Query

from draftxi.api.schemas import (
    CanBuyResponse,
    DraftStateResponse,
    FormationRequest,
    FormationResponse,
    FormationSlotResponse,
    LeaderboardEntryResponse,
    PlayerActionRequest,
    PlayerResponse,
    StartDraftRequest,
    StopDraftRequest,
    TriviaAnswerRequest,
    TriviaResultResponse,
)
from draftxi.config import classify, get_formation, iter_formations
from draftxi.config_loader import GameSettings, load_settings
from draftxi.draft import DraftResult, DraftService
from draftxi.errors import PersistenceError, ValidationError
from draftxi.ingest import load_player_catalog, parse_player_value
from draftxi.models import GameMode, PlayerRecord, SessionState
from draftxi.persistence import DraftStore
from draftxi.trivia import TriviaQuestion, apply_outcome, draw_question, score_answer


def _player_to_response(player: PlayerRecord) -> PlayerResponse:
    return PlayerResponse(
        slug=player.slug,
        name=player.name,
        rating=player.rating,
        primary_position=player.primary_position,
        role=classify(player.primary_position).value,
        value_text=player.value_text,
        price=parse_player_value(player.value_text),
        club=player.club,
    )


def _result_or_raise(result: DraftResult) -> DraftStateResponse:
    if result.ok:
        return DraftStateResponse.from_session(result.session)
    error = result.error
    if isinstance(error, ValidationError):
        raise HTTPException(
            status_code=409,
            detail={"reason": error.reason.value, "message": error.message},
        )
    if isinstance(error, PersistenceError):
        raise HTTPException(status_code=503, detail=f"Draft store unavailable: {error}")
    raise HTTPException(status_code=500, detail=str(error))


def create_app(
    *,
    settings: Optional[GameSettings] = None,
    store: Optional[DraftStore] = None,
    players: Optional[Iterable[PlayerRecord]] = None,
    rng: Optional[random.Random] = None,
) -> FastAPI:
    settings = settings or load_settings()
    store = store or DraftStore(settings.db_path)
    if players is None and settings.catalog_path:
        players, _ = load_player_catalog(Path(settings.catalog_path))
    catalog: Dict[str, PlayerRecord] = {player.slug: player for player in players or []}
    drafts: Dict[str, DraftService] = {}
    rng = rng or random.Random()

    app = FastAPI(title="draftxi")
    app.state.settings = settings
    app.state.draft_store = store
    app.state.catalog = catalog
    app.state.drafts = drafts

    def _fetch_draft_or_404(draft_id: str) -> DraftService:
        service = drafts.get(draft_id)
        if service is None:
            raise HTTPException(status_code=404, detail="Draft not found")
        return service

    def _prune_stopped() -> None:
        for draft_id in [key for key, service in drafts.items() if service.state is not SessionState.ACTIVE]:
            drafts.pop(draft_id, None)

    def _fetch_player_or_404(slug: str) -> PlayerRecord:
        player = catalog.get(slug)
        if player is None:
            raise HTTPException(status_code=404, detail="Player not found")
        return player

    @app.get("/health")
    async def health() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/formations", response_model=List[FormationResponse])
    async def list_formations() -> List[FormationResponse]:
        return [
            FormationResponse(
                name=formation.name,
                slots=[
                    FormationSlotResponse(name=slot, role=formation.role_of(slot).value)
                    for slot in formation.slots
                ],
            )
            for formation in iter_formations()
        ]

    @app.get("/players", response_model=List[PlayerResponse])
    async def list_players(
        position: Optional[str] = Query(None),
        search: Optional[str] = Query(None),
        min_rating: Optional[int] = Query(None, ge=0, le=99),
        limit: int = Query(250, ge=1, le=1000),
    ) -> List[PlayerResponse]:
        needle = search.strip().lower() if search else None
        selected: List[PlayerResponse] = []
        for player in sorted(catalog.values(), key=lambda item: (-item.rating, item.name)):
            if position and player.primary_position != position.strip().upper():
                continue
            if min_rating is not None and player.rating < min_rating:
                continue
            if needle and needle not in player.name.lower() and needle not in (player.club or "").lower():
                continue
            selected.append(_player_to_response(player))
            if len(selected) >= limit:
                break
        return selected

    @app.post("/drafts", response_model=DraftStateResponse, status_code=201)
    async def start_draft(payload: StartDraftRequest) -> DraftStateResponse:
        try:
            mode = GameMode(payload.mode)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Unknown mode {payload.mode!r}") from exc
        _prune_stopped()
        service = DraftService(store, settings, rng=rng)
        response = _result_or_raise(await service.start(mode))
        drafts[service.session.id] = service
        return response

    @app.post("/drafts/resume", response_model=DraftStateResponse)
    async def resume_draft() -> DraftStateResponse:
        _prune_stopped()
        service = DraftService(store, settings, rng=rng)
        result = await service.resume()
        if result.ok and result.session.id in drafts:
            # Already loaded here; keep the existing service and its clock.
            await service.reset()
            return DraftStateResponse.from_session(drafts[result.session.id].session)
        if service.state is SessionState.ACTIVE:
            drafts[service.session.id] = service
        return _result_or_raise(result)

    @app.get("/drafts/{draft_id}", response_model=DraftStateResponse)
    async def get_draft(draft_id: str) -> DraftStateResponse:
        service = _fetch_draft_or_404(draft_id)
        service.drain_updates()
        return DraftStateResponse.from_session(service.session)

    @app.get("/drafts/{draft_id}/can-buy/{slug}", response_model=CanBuyResponse)
    async def can_buy(draft_id: str, slug: str) -> CanBuyResponse:
        service = _fetch_draft_or_404(draft_id)
        error = service.check_purchase(_fetch_player_or_404(slug))
        if error is None:
            return CanBuyResponse(slug=slug, allowed=True)
        return CanBuyResponse(slug=slug, allowed=False, reason=error.reason.value, message=error.message)

    @app.post("/drafts/{draft_id}/buy", response_model=DraftStateResponse)
    async def buy(draft_id: str, payload: PlayerActionRequest) -> DraftStateResponse:
        service = _fetch_draft_or_404(draft_id)
        return _result_or_raise(await service.buy(_fetch_player_or_404(payload.slug)))

    @app.post("/drafts/{draft_id}/sell", response_model=DraftStateResponse)
    async def sell(draft_id: str, payload: PlayerActionRequest) -> DraftStateResponse:
        service = _fetch_draft_or_404(draft_id)
        return _result_or_raise(await service.sell(payload.slug))

    @app.post("/drafts/{draft_id}/formation", response_model=DraftStateResponse)
    async def set_formation(draft_id: str, payload: FormationRequest) -> DraftStateResponse:
        service = _fetch_draft_or_404(draft_id)
        try:
            get_formation(payload.formation)
        except KeyError as exc:
            raise HTTPException(status_code=400, detail=f"Unknown formation {payload.formation!r}") from exc
        return _result_or_raise(await service.set_formation(payload.formation))

    @app.post("/drafts/{draft_id}/refresh", response_model=DraftStateResponse)
    async def refresh(draft_id: str) -> DraftStateResponse:
        service = _fetch_draft_or_404(draft_id)
        return _result_or_raise(await service.refresh_budget())

    @app.post("/drafts/{draft_id}/stop", response_model=DraftStateResponse)
    async def stop(draft_id: str, payload: StopDraftRequest | None = None) -> DraftStateResponse:
        service = _fetch_draft_or_404(draft_id)
        username = payload.username if payload else None
        result = await service.stop(username)
        if service.state is SessionState.STOPPED:
            drafts.pop(draft_id, None)
        return _result_or_raise(result)

    @app.post("/drafts/{draft_id}/reset", response_model=DraftStateResponse)
    async def reset(draft_id: str) -> DraftStateResponse:
        service = drafts.pop(draft_id, None)
        if service is None:
            raise HTTPException(status_code=404, detail="Draft not found")
        return DraftStateResponse.from_session(await service.reset())

    @app.get("/drafts/{draft_id}/trivia")
    async def trivia_question(draft_id: str) -> dict:
        _fetch_draft_or_404(draft_id)
        try:
            question = draw_question(store, rng)
        except PersistenceError as exc:
            raise HTTPException(status_code=503, detail=f"Draft store unavailable: {exc}") from exc
        if question is None:
            raise HTTPException(status_code=404, detail="No trivia questions available")
        return question.public_view()

    @app.post("/drafts/{draft_id}/trivia", response_model=TriviaResultResponse)
    async def trivia_answer(draft_id: str, payload: TriviaAnswerRequest) -> TriviaResultResponse:
        service = _fetch_draft_or_404(draft_id)
        try:
            record = store.get_question(payload.question_id)
        except PersistenceError as exc:
            raise HTTPException(status_code=503, detail=f"Draft store unavailable: {exc}") from exc
        if record is None:
            raise HTTPException(status_code=404, detail="Question not found")
        outcome = score_answer(
            TriviaQuestion.from_record(record),
            payload.answer,
            penalty=settings.trivia_penalty,
        )
        bonus_before = service.session.bonus_money
        draft = _result_or_raise(apply_outcome(service, outcome))
        return TriviaResultResponse(
            correct=outcome.correct,
            amount=draft.bonus_money - bonus_before,
            draft=draft,
        )

    @app.get("/leaderboard", response_model=List[LeaderboardEntryResponse])
    async def leaderboard(
        limit: int = Query(20, ge=1, le=200),
        mode: Optional[str] = Query(None),
    ) -> List[LeaderboardEntryResponse]:
        try:
            entries = store.list_leaderboard(limit, mode=mode)
        except PersistenceError as exc:
            raise HTTPException(status_code=503, detail=f"Draft store unavailable: {exc}") from exc
        return [
            LeaderboardEntryResponse(
                username=entry.username,
                score=entry.score,
                mode=entry.mode,
                created_at=entry.created_at.isoformat(),
            )
            for entry in entries
        ]

    return app
