"""Game lifecycle and turn controller.

Each public function is one player action.  Every precondition is checked
before the aggregate is touched, so a raised :class:`RulesError` always
leaves the game exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field

from carcassonne.utils.rng import Randomness, new_game_seed

from . import meeples as meeple_rules
from . import scoring
from .board import Board
from .catalog import validate_expansions
from .deck import Deck
from .enums import GameStatus, TileState
from .errors import EmptyDeckError, ForbiddenError, InvalidStateError, MeepleError, NotFoundError
from .models import (
    Feature,
    FeatureID,
    Game,
    GameID,
    Meeple,
    Player,
    PlayerID,
    Tile,
    TileID,
    utc_now,
)
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class TurnResult:
    """Updated game plus the score events an action produced."""

    game: Game
    score_updates: list[scoring.ScoreUpdate] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Lookups and guards


def get_player(game: Game, player_id: PlayerID) -> Player:
    player = game.players.get(player_id)
    if player is None:
        raise NotFoundError(f"player {int(player_id)} not found in game {int(game.id)}")
    return player


def get_tile(game: Game, tile_id: TileID) -> Tile:
    tile = game.tiles.get(tile_id)
    if tile is None:
        raise NotFoundError(f"tile {int(tile_id)} not found in game {int(game.id)}")
    return tile


def resolve_feature(
    game: Game, tile: Tile, *, feature_id: FeatureID | None = None, position: str | None = None
) -> Feature:
    """Find a tile's feature by id, by position tag, or by both (which must agree)."""

    if feature_id is None and position is None:
        raise NotFoundError("a feature id or a position is required")
    for feature in game.features_of(tile):
        if feature_id is not None and feature.id != feature_id:
            continue
        if position is not None and feature.spot != position:
            continue
        return feature
    raise NotFoundError(
        f"tile {int(tile.id)} has no feature matching id={feature_id} position={position}"
    )


def _require_status(game: Game, status: GameStatus, action: str) -> None:
    if game.status != status:
        raise InvalidStateError(f"cannot {action}: game is {game.status}, expected {status}")


def _require_turn(game: Game, player: Player) -> None:
    if game.current_player_id != player.id:
        raise ForbiddenError(f"it is not {player.name}'s turn")


def _held_tile(game: Game) -> Tile | None:
    if game.current_tile_id is None:
        return None
    return game.tiles[game.current_tile_id]


# ---------------------------------------------------------------------------
# Lobby


def create_game(
    game_id: GameID,
    host_name: str,
    *,
    name: str | None = None,
    expansions: Iterable[str] = (),
    seed: str | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> Game:
    """New game in the waiting room with its host as the only player."""

    enabled = validate_expansions(expansions)
    now = utc_now()
    game = Game(
        id=game_id,
        name=name or f"Game {int(game_id)}",
        status=GameStatus.WAITING,
        created_at=now,
        updated_at=now,
        seed=seed or new_game_seed(),
        expansions=enabled,
    )
    _add_player(game, host_name, is_host=True, rules=rules)
    logger.info("game %s created by %s", int(game.id), host_name)
    return game


def _add_player(game: Game, name: str, *, is_host: bool, rules: RulesConfig) -> Player:
    player = Player(
        id=PlayerID(game.allocate_id()),
        name=name.strip() or "Player",
        is_host=is_host,
        meeples=rules.meeples.supply_per_player,
    )
    game.players[player.id] = player
    game.touch()
    return player


def join_game(game: Game, player_name: str, *, rules: RulesConfig = DEFAULT_RULES) -> Player:
    """Append a player while the game is still waiting to start."""

    _require_status(game, GameStatus.WAITING, "join")
    if len(game.players) >= rules.lobby.max_players:
        raise InvalidStateError(f"game is full ({rules.lobby.max_players} players)")
    return _add_player(game, player_name, is_host=False, rules=rules)


def start_game(
    game: Game,
    player_id: PlayerID,
    *,
    randomness: Randomness | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> Game:
    """Deal colours, build the deck, lay the start tile and hand out the first tile."""

    player = get_player(game, player_id)
    _require_status(game, GameStatus.WAITING, "start")
    if not player.is_host:
        raise ForbiddenError("only the host can start the game")
    if len(game.players) < rules.lobby.min_players:
        raise InvalidStateError(
            f"at least {rules.lobby.min_players} players are required to start the game"
        )
    if len(game.players) > rules.lobby.max_players:
        raise InvalidStateError(f"at most {rules.lobby.max_players} players can play")

    randomness = randomness or Randomness.seeded(game.seed)
    deck = Deck.build(game, game.expansions, shuffle=randomness.shuffle)

    colors = randomness.permute_colors(list(rules.lobby.palette))
    for player_in_turn, color in zip(game.players.values(), colors, strict=False):
        player_in_turn.color = color

    board = Board(game, rules)
    origin_x, origin_y = rules.board.origin
    board.place(deck.draw(), origin_x, origin_y, rules.board.start_rotation, None)

    game.current_player_id = next(iter(game.players))
    game.current_tile_id = deck.draw().id
    game.status = GameStatus.ACTIVE
    game.touch()
    logger.info(
        "game %s started with %d players, %d tiles left",
        int(game.id),
        len(game.players),
        deck.remaining(),
    )
    return game


# ---------------------------------------------------------------------------
# Turn actions


def take_card(game: Game, player_id: PlayerID, *, rules: RulesConfig = DEFAULT_RULES) -> Tile:
    """Draw a tile for the current player.

    A held tile that can no longer be placed anywhere is discarded and
    replaced; a held tile that still fits must be played first.
    """

    _require_status(game, GameStatus.ACTIVE, "take a card")
    player = get_player(game, player_id)
    _require_turn(game, player)

    held = _held_tile(game)
    if held is not None and held.state == TileState.PLACED:
        raise InvalidStateError("a tile has already been placed this turn")
    if held is not None and held.state == TileState.DRAWN:
        if Board(game, rules).has_legal_placement(held):
            raise InvalidStateError(f"tile {int(held.id)} can still be placed")
        if not game.deck:
            raise EmptyDeckError()
        held.state = TileState.DISCARDED
        logger.warning("game %s: discarded unplaceable tile %s", int(game.id), held.tile_type)

    tile = Deck(game).draw()
    game.current_tile_id = tile.id
    game.touch()
    return tile


def place_tile(
    game: Game,
    player_id: PlayerID,
    tile_id: TileID,
    x: int,
    y: int,
    rotation: int,
    *,
    rules: RulesConfig = DEFAULT_RULES,
) -> TurnResult:
    """Lay the current tile and settle every feature it completed."""

    _require_status(game, GameStatus.ACTIVE, "place a tile")
    player = get_player(game, player_id)
    _require_turn(game, player)
    tile = get_tile(game, tile_id)
    if game.current_tile_id != tile.id:
        raise ForbiddenError(f"tile {int(tile.id)} is not the tile drawn for this turn")

    board = Board(game, rules)
    board.place(tile, x, y, rotation, player.id)
    updates = scoring.score_placement(game, board, tile, rules)
    return TurnResult(game, updates)


def place_meeple(
    game: Game,
    player_id: PlayerID,
    tile_id: TileID,
    *,
    feature_id: FeatureID | None = None,
    position: str | None = None,
) -> Meeple:
    """Stand one of the current player's meeples on a feature of a placed tile."""

    player = get_player(game, player_id)
    if game.status != GameStatus.ACTIVE:
        raise MeepleError(MeepleError.GAME_NOT_ACTIVE, "game is not active")
    _require_turn(game, player)
    tile = get_tile(game, tile_id)
    feature = resolve_feature(game, tile, feature_id=feature_id, position=position)
    return meeple_rules.place(game, player, tile, feature)


def end_turn(game: Game, player_id: PlayerID, *, rules: RulesConfig = DEFAULT_RULES) -> TurnResult:
    """Pass the turn on, drawing for the next player or finishing the game.

    A held tile that was never placed stays drawn.  When the deck runs out
    while such tiles are left, the game stays active with no current tile
    until the host calls :func:`finish_game`.
    """

    _require_status(game, GameStatus.ACTIVE, "end the turn")
    player = get_player(game, player_id)
    _require_turn(game, player)

    held = _held_tile(game)
    if held is not None and held.state == TileState.DRAWN:
        logger.info(
            "game %s: %s ended the turn without placing tile %s",
            int(game.id),
            player.name,
            held.tile_type,
        )

    order = list(game.players)
    game.current_player_id = order[(order.index(player.id) + 1) % len(order)]

    updates: list[scoring.ScoreUpdate] = []
    deck = Deck(game)
    if deck.remaining() > 0:
        game.current_tile_id = deck.draw().id
    else:
        game.current_tile_id = None
        if not _unplaced_tiles(game):
            updates = _finish(game, rules)

    game.touch()
    return TurnResult(game, updates)


def finish_game(
    game: Game, player_id: PlayerID, *, rules: RulesConfig = DEFAULT_RULES
) -> TurnResult:
    """Close a game whose deck is spent but which still has unplaced tiles.

    Only the host may do this, and only once no tile is being played.  The
    leftover tiles are discarded and the final scores awarded.
    """

    _require_status(game, GameStatus.ACTIVE, "finish the game")
    player = get_player(game, player_id)
    if not player.is_host:
        raise ForbiddenError("only the host can finish the game")
    if game.deck:
        raise InvalidStateError(f"{len(game.deck)} tiles are still in the deck")
    if game.current_tile_id is not None:
        raise InvalidStateError("a tile is still being played")

    for tile in _unplaced_tiles(game):
        tile.state = TileState.DISCARDED
        logger.warning("game %s: discarded unplaced tile %s", int(game.id), tile.tile_type)

    updates = _finish(game, rules)
    game.touch()
    return TurnResult(game, updates)


def _unplaced_tiles(game: Game) -> list[Tile]:
    return [
        tile
        for tile in game.tiles.values()
        if tile.state in (TileState.IN_DECK, TileState.DRAWN)
    ]


def _finish(game: Game, rules: RulesConfig) -> list[scoring.ScoreUpdate]:
    updates = scoring.score_final(game, Board(game, rules), rules)
    game.status = GameStatus.FINISHED
    game.current_player_id = None
    logger.info("game %s finished", int(game.id))
    return updates
