"""HTTP routes for the Carcassonne API."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from pydantic import BaseModel, Field, model_validator

from carcassonne.api.runtime import ApiState
from carcassonne.domain import models as dm
from carcassonne.domain.lifecycle import TurnResult
from carcassonne.domain.errors import (
    ConfigurationError,
    EmptyDeckError,
    ForbiddenError,
    InvalidStateError,
    MeepleError,
    NotFoundError,
    PlacementError,
    RulesError,
)

router = APIRouter()


def get_state(request: Request) -> ApiState:
    state = getattr(request.app.state, "api_state", None)
    if state is None:  # pragma: no cover - FastAPI should always initialise state
        raise RuntimeError("API state not initialised")
    return state


def get_player_id(x_player_id: Annotated[int, Header(alias="X-Player-Id")]) -> dm.PlayerID:
    return dm.PlayerID(x_player_id)


ApiStateDep = Annotated[ApiState, Depends(get_state)]
PlayerIdDep = Annotated[dm.PlayerID, Depends(get_player_id)]

_STATUS_BY_ERROR: tuple[tuple[type[RulesError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (ForbiddenError, status.HTTP_403_FORBIDDEN),
    (InvalidStateError, status.HTTP_409_CONFLICT),
    (EmptyDeckError, status.HTTP_409_CONFLICT),
    (PlacementError, status.HTTP_400_BAD_REQUEST),
    (MeepleError, status.HTTP_400_BAD_REQUEST),
    (ConfigurationError, status.HTTP_400_BAD_REQUEST),
)


def _http_error(exc: RulesError) -> HTTPException:
    code = status.HTTP_400_BAD_REQUEST
    for error_type, http_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            code = http_status
            break
    return HTTPException(
        status_code=code,
        detail={"error_code": exc.code, "detail": exc.detail, "reason": exc.reason},
    )


class PlayerSummary(BaseModel):
    id: int
    name: str
    color: str | None
    is_host: bool
    meeples: int
    score: int


class FeatureSummary(BaseModel):
    id: int
    feature_type: str
    position: str
    edges: list[str]
    completed: bool
    points: int | None


class TileSummary(BaseModel):
    id: int
    tile_type: str
    state: str
    edges: list[str]
    x: int | None
    y: int | None
    rotation: int
    placed_by: int | None
    features: list[FeatureSummary]


class MeepleSummary(BaseModel):
    id: int
    player_id: int
    tile_id: int
    feature_id: int
    position: str


class Placement(BaseModel):
    x: int
    y: int
    rotation: int


class ScoreSummary(BaseModel):
    player_id: int | None
    points: int
    feature_type: str
    completed: bool
    final: bool
    feature_ids: list[int]


class GameSummary(BaseModel):
    id: int
    name: str
    status: str
    expansions: list[str]
    player_count: int
    remaining_cards: int
    current_player_id: int | None
    created_at: datetime
    updated_at: datetime


class GameDetail(GameSummary):
    current_tile: TileSummary | None
    legal_placements: list[Placement]
    players: list[PlayerSummary]
    board: list[TileSummary]
    meeples: list[MeepleSummary]


class JoinedGame(BaseModel):
    player: PlayerSummary
    game: GameDetail


class TurnResponse(BaseModel):
    game: GameDetail
    scores: list[ScoreSummary] = Field(default_factory=list)


class CreateGameRequest(BaseModel):
    host_name: str = Field(min_length=1, max_length=50)
    name: str | None = Field(default=None, max_length=100)
    expansions: list[str] = Field(default_factory=list)


class JoinGameRequest(BaseModel):
    player_name: str = Field(min_length=1, max_length=50)


class PlaceTileRequest(BaseModel):
    tile_id: int
    x: int
    y: int
    rotation: int = 0


class PlaceMeepleRequest(BaseModel):
    tile_id: int
    feature_id: int | None = None
    position: str | None = None

    @model_validator(mode="after")
    def _needs_target(self) -> PlaceMeepleRequest:
        if self.feature_id is None and self.position is None:
            raise ValueError("feature_id or position is required")
        return self


def _detail(state: ApiState, game: dm.Game) -> GameDetail:
    return GameDetail.model_validate(state.games.to_detail_dict(game))


def _turn_response(state: ApiState, result: TurnResult) -> TurnResponse:
    return TurnResponse(
        game=_detail(state, result.game),
        scores=[
            ScoreSummary.model_validate(state.games.to_score_dict(update))
            for update in result.score_updates
        ],
    )


@router.get("/health")
async def health(state: ApiStateDep) -> dict[str, object]:
    payload: dict[str, object] = {
        "status": "ok",
        "rules_version": state.settings.rules_version,
        "storage_backend": state.settings.storage_backend,
    }
    healthy = state.database_healthy()
    if healthy is not None:
        payload["database"] = "ok" if healthy else "unavailable"
        if not healthy:
            payload["status"] = "degraded"
    return payload


@router.get("/catalog")
async def catalog(state: ApiStateDep) -> dict[str, object]:
    return state.games.catalog_dict()


@router.get("/games", response_model=list[GameSummary])
async def list_games(state: ApiStateDep) -> list[GameSummary]:
    games = state.games.list_games()
    return [GameSummary.model_validate(state.games.to_summary_dict(game)) for game in games]


@router.post("/games", response_model=JoinedGame, status_code=status.HTTP_201_CREATED)
async def create_game(request: CreateGameRequest, state: ApiStateDep) -> JoinedGame:
    try:
        game, host = state.games.create_game(
            request.host_name,
            name=request.name,
            expansions=request.expansions,
        )
    except RulesError as exc:
        raise _http_error(exc) from exc
    return JoinedGame(
        player=PlayerSummary.model_validate(state.games.to_player_dict(host)),
        game=_detail(state, game),
    )


@router.get("/games/{game_id}", response_model=GameDetail)
async def get_game(game_id: int, state: ApiStateDep) -> GameDetail:
    try:
        game = state.games.get_game(dm.GameID(game_id))
    except RulesError as exc:
        raise _http_error(exc) from exc
    return _detail(state, game)


@router.post("/games/{game_id}/join", response_model=JoinedGame, status_code=status.HTTP_201_CREATED)
async def join_game(game_id: int, request: JoinGameRequest, state: ApiStateDep) -> JoinedGame:
    try:
        game, player = state.games.join_game(dm.GameID(game_id), request.player_name)
    except RulesError as exc:
        raise _http_error(exc) from exc
    return JoinedGame(
        player=PlayerSummary.model_validate(state.games.to_player_dict(player)),
        game=_detail(state, game),
    )


@router.post("/games/{game_id}/start", response_model=GameDetail)
async def start_game(game_id: int, player_id: PlayerIdDep, state: ApiStateDep) -> GameDetail:
    try:
        game = state.games.start_game(dm.GameID(game_id), player_id)
    except RulesError as exc:
        raise _http_error(exc) from exc
    return _detail(state, game)


@router.post("/games/{game_id}/take-card", response_model=GameDetail)
async def take_card(game_id: int, player_id: PlayerIdDep, state: ApiStateDep) -> GameDetail:
    try:
        game, _tile = state.games.take_card(dm.GameID(game_id), player_id)
    except RulesError as exc:
        raise _http_error(exc) from exc
    return _detail(state, game)


@router.post("/games/{game_id}/place-tile", response_model=TurnResponse)
async def place_tile(
    game_id: int,
    request: PlaceTileRequest,
    player_id: PlayerIdDep,
    state: ApiStateDep,
) -> TurnResponse:
    try:
        result = state.games.place_tile(
            dm.GameID(game_id),
            player_id,
            dm.TileID(request.tile_id),
            request.x,
            request.y,
            request.rotation,
        )
    except RulesError as exc:
        raise _http_error(exc) from exc
    return _turn_response(state, result)


@router.post(
    "/games/{game_id}/place-meeple", response_model=GameDetail, status_code=status.HTTP_201_CREATED
)
async def place_meeple(
    game_id: int,
    request: PlaceMeepleRequest,
    player_id: PlayerIdDep,
    state: ApiStateDep,
) -> GameDetail:
    try:
        game, _meeple = state.games.place_meeple(
            dm.GameID(game_id),
            player_id,
            dm.TileID(request.tile_id),
            feature_id=dm.FeatureID(request.feature_id) if request.feature_id is not None else None,
            position=request.position,
        )
    except RulesError as exc:
        raise _http_error(exc) from exc
    return _detail(state, game)


@router.post("/games/{game_id}/end-turn", response_model=TurnResponse)
async def end_turn(game_id: int, player_id: PlayerIdDep, state: ApiStateDep) -> TurnResponse:
    try:
        result = state.games.end_turn(dm.GameID(game_id), player_id)
    except RulesError as exc:
        raise _http_error(exc) from exc
    return _turn_response(state, result)


@router.post("/games/{game_id}/finish", response_model=TurnResponse)
async def finish_game(game_id: int, player_id: PlayerIdDep, state: ApiStateDep) -> TurnResponse:
    try:
        result = state.games.finish_game(dm.GameID(game_id), player_id)
    except RulesError as exc:
        raise _http_error(exc) from exc
    return _turn_response(state, result)
