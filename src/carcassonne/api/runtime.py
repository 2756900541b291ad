"""Runtime primitives backing the Carcassonne HTTP API."""

from __future__ import annotations

import logging
import threading
import weakref
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager

from sqlalchemy.engine import Engine

from carcassonne.config import Settings, get_settings
from carcassonne.database import (
    check_database_health,
    create_db_engine,
    init_db,
    make_session_factory,
)
from carcassonne.domain import lifecycle
from carcassonne.domain import models as dm
from carcassonne.domain.board import Board
from carcassonne.domain.catalog import BASE_TILES, EXPANSIONS, TILE_TYPES
from carcassonne.domain.rules_config import DEFAULT_RULES, RulesConfig
from carcassonne.domain.scoring import ScoreUpdate
from carcassonne.repository import GameRepository, JsonGameRepository, SqlGameRepository
from carcassonne.utils.rng import Randomness

logger = logging.getLogger(__name__)

RandomnessFactory = Callable[[dm.Game], Randomness]


def _seeded(game: dm.Game) -> Randomness:
    return Randomness.seeded(game.seed)


class GameService:
    """Load a game, apply one rules operation, save it.

    Mutations of the same game are serialised with a per-game lock.  A game is
    only written back when the operation succeeded, so a rejected action never
    changes what is stored.
    """

    def __init__(
        self,
        repository: GameRepository,
        *,
        rules: RulesConfig = DEFAULT_RULES,
        randomness_factory: RandomnessFactory = _seeded,
    ) -> None:
        self._repository = repository
        self._rules = rules
        self._randomness_factory = randomness_factory
        self._locks: weakref.WeakValueDictionary[dm.GameID, threading.Lock] = (
            weakref.WeakValueDictionary()
        )
        self._locks_guard = threading.Lock()
        self._create_lock = threading.Lock()

    def _lock_for(self, game_id: dm.GameID) -> threading.Lock:
        # A lock lives only while some caller holds or waits on it.
        with self._locks_guard:
            lock = self._locks.get(game_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[game_id] = lock
            return lock

    @contextmanager
    def _mutating(self, game_id: dm.GameID) -> Iterator[dm.Game]:
        with self._lock_for(game_id):
            game = self._repository.load(game_id)
            yield game
            self._repository.save(game)

    # ------------------------------------------------------------------
    # queries

    def list_games(self) -> list[dm.Game]:
        """Return every persisted game ordered by identifier."""

        return [self._repository.load(game_id) for game_id in self._repository.list_games()]

    def get_game(self, game_id: dm.GameID) -> dm.Game:
        """Load a single game or raise ``NotFoundError``."""

        return self._repository.load(game_id)

    # ------------------------------------------------------------------
    # actions

    def create_game(
        self,
        host_name: str,
        *,
        name: str | None = None,
        expansions: Iterable[str] = (),
        seed: str | None = None,
    ) -> tuple[dm.Game, dm.Player]:
        with self._create_lock:
            game = lifecycle.create_game(
                self._repository.next_identifier(),
                host_name,
                name=name,
                expansions=expansions,
                seed=seed,
                rules=self._rules,
            )
            self._repository.save(game)
        host = next(iter(game.players.values()))
        return game, host

    def join_game(self, game_id: dm.GameID, player_name: str) -> tuple[dm.Game, dm.Player]:
        with self._mutating(game_id) as game:
            player = lifecycle.join_game(game, player_name, rules=self._rules)
        logger.info("%s joined game %s", player.name, int(game_id))
        return game, player

    def start_game(self, game_id: dm.GameID, player_id: dm.PlayerID) -> dm.Game:
        with self._mutating(game_id) as game:
            lifecycle.start_game(
                game,
                player_id,
                randomness=self._randomness_factory(game),
                rules=self._rules,
            )
        return game

    def take_card(self, game_id: dm.GameID, player_id: dm.PlayerID) -> tuple[dm.Game, dm.Tile]:
        with self._mutating(game_id) as game:
            tile = lifecycle.take_card(game, player_id, rules=self._rules)
        return game, tile

    def place_tile(
        self,
        game_id: dm.GameID,
        player_id: dm.PlayerID,
        tile_id: dm.TileID,
        x: int,
        y: int,
        rotation: int,
    ) -> lifecycle.TurnResult:
        with self._mutating(game_id) as game:
            result = lifecycle.place_tile(
                game, player_id, tile_id, x, y, rotation, rules=self._rules
            )
        return result

    def place_meeple(
        self,
        game_id: dm.GameID,
        player_id: dm.PlayerID,
        tile_id: dm.TileID,
        *,
        feature_id: dm.FeatureID | None = None,
        position: str | None = None,
    ) -> tuple[dm.Game, dm.Meeple]:
        with self._mutating(game_id) as game:
            meeple = lifecycle.place_meeple(
                game, player_id, tile_id, feature_id=feature_id, position=position
            )
        return game, meeple

    def end_turn(self, game_id: dm.GameID, player_id: dm.PlayerID) -> lifecycle.TurnResult:
        with self._mutating(game_id) as game:
            result = lifecycle.end_turn(game, player_id, rules=self._rules)
        return result

    def finish_game(self, game_id: dm.GameID, player_id: dm.PlayerID) -> lifecycle.TurnResult:
        with self._mutating(game_id) as game:
            result = lifecycle.finish_game(game, player_id, rules=self._rules)
        logger.info("game %s closed by the host", int(game_id))
        return result

    # ------------------------------------------------------------------
    # presentation

    @staticmethod
    def to_summary_dict(game: dm.Game) -> dict[str, object]:
        """Return a JSON-friendly overview of a game."""

        return {
            "id": int(game.id),
            "name": game.name,
            "status": str(game.status),
            "expansions": list(game.expansions),
            "player_count": len(game.players),
            "remaining_cards": game.remaining_deck_count,
            "current_player_id": (
                int(game.current_player_id) if game.current_player_id is not None else None
            ),
            "created_at": game.created_at,
            "updated_at": game.updated_at,
        }

    def to_detail_dict(self, game: dm.Game) -> dict[str, object]:
        """Return the full read-only snapshot a client renders from."""

        board = Board(game, self._rules)
        current_tile = (
            game.tiles[game.current_tile_id] if game.current_tile_id is not None else None
        )
        summary = self.to_summary_dict(game)
        summary.update(
            {
                "current_tile": (
                    self.to_tile_dict(game, current_tile) if current_tile is not None else None
                ),
                "legal_placements": (
                    [
                        {"x": x, "y": y, "rotation": rotation}
                        for x, y, rotation in board.legal_placements(current_tile)
                    ]
                    if current_tile is not None and not current_tile.is_placed
                    else []
                ),
                "players": [self.to_player_dict(player) for player in game.players.values()],
                "board": [self.to_tile_dict(game, tile) for tile in game.placed_tiles()],
                "meeples": [self.to_meeple_dict(meeple) for meeple in game.active_meeples()],
            }
        )
        return summary

    @staticmethod
    def to_player_dict(player: dm.Player) -> dict[str, object]:
        return {
            "id": int(player.id),
            "name": player.name,
            "color": player.color,
            "is_host": player.is_host,
            "meeples": player.meeples,
            "score": player.score,
        }

    @staticmethod
    def to_tile_dict(game: dm.Game, tile: dm.Tile) -> dict[str, object]:
        return {
            "id": int(tile.id),
            "tile_type": tile.tile_type,
            "state": str(tile.state),
            "edges": [str(edge) for edge in tile.edges],
            "x": tile.x,
            "y": tile.y,
            "rotation": tile.rotation,
            "placed_by": int(tile.placed_by) if tile.placed_by is not None else None,
            "features": [
                {
                    "id": int(feature.id),
                    "feature_type": str(feature.feature_type),
                    "position": feature.spot,
                    "edges": [str(side) for side in feature.edges],
                    "completed": feature.completed,
                    "points": feature.points,
                }
                for feature in game.features_of(tile)
            ],
        }

    @staticmethod
    def to_meeple_dict(meeple: dm.Meeple) -> dict[str, object]:
        return {
            "id": int(meeple.id),
            "player_id": int(meeple.player_id),
            "tile_id": int(meeple.tile_id),
            "feature_id": int(meeple.feature_id),
            "position": meeple.position,
        }

    @staticmethod
    def to_score_dict(update: ScoreUpdate) -> dict[str, object]:
        return {
            "player_id": int(update.player_id) if update.player_id is not None else None,
            "points": update.points,
            "feature_type": str(update.feature_type),
            "completed": update.completed,
            "final": update.final,
            "feature_ids": [int(feature_id) for feature_id in update.feature_ids],
        }

    @staticmethod
    def catalog_dict() -> dict[str, object]:
        """Tile types and deck tables, for clients drawing tiles."""

        return {
            "tile_types": {
                tag: {
                    "edges": [str(edge) for edge in tile_type.edges],
                    "features": [
                        {
                            "feature_type": str(spec.feature_type),
                            "position": spec.spot,
                            "edges": [str(side) for side in spec.edges],
                        }
                        for spec in tile_type.features
                    ],
                }
                for tag, tile_type in TILE_TYPES.items()
            },
            "base": dict(BASE_TILES),
            "expansions": {key: dict(table) for key, table in EXPANSIONS.items()},
        }


def build_engine(settings: Settings) -> Engine:
    """Engine for ``Settings.database_url`` with every table created."""

    engine = create_db_engine(settings.database_url, echo=settings.database_echo)
    init_db(engine)
    return engine


def build_repository(settings: Settings, engine: Engine | None = None) -> GameRepository:
    """Repository selected by ``Settings.storage_backend``."""

    if settings.storage_backend == "sql":
        return SqlGameRepository(make_session_factory(engine or build_engine(settings)))
    return JsonGameRepository(settings.data_dir)


class ApiState:
    """Aggregated services shared by the FastAPI layer."""

    def __init__(
        self,
        *,
        settings: Settings | None = None,
        repository: GameRepository | None = None,
        rules: RulesConfig = DEFAULT_RULES,
        randomness_factory: RandomnessFactory = _seeded,
    ) -> None:
        self.settings = settings or get_settings()
        self.engine: Engine | None = None
        if repository is None and self.settings.storage_backend == "sql":
            self.engine = build_engine(self.settings)
        self.repository = repository or build_repository(self.settings, self.engine)
        self.rules = rules
        self.games = GameService(
            self.repository, rules=rules, randomness_factory=randomness_factory
        )

    def database_healthy(self) -> bool | None:
        """Whether the SQL store answers; ``None`` when no database is in use."""

        if self.engine is None:
            return None
        return check_database_health(self.engine)

    async def shutdown(self) -> None:
        if self.engine is not None:
            self.engine.dispose()
        logger.debug("api state shut down")


def build_state() -> ApiState:
    """Factory used by the API to initialize state."""

    return ApiState()
