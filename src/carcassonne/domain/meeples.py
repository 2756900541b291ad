"""Meeple placement and return logic."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from .enums import GameStatus
from .errors import MeepleError
from .features import Region
from .models import Feature, FeatureID, Game, Meeple, MeepleID, Player, PlayerID, Tile, utc_now

logger = logging.getLogger(__name__)


def meeples_on(game: Game, feature_ids: Iterable[FeatureID]) -> list[Meeple]:
    """Active meeples standing on any of the given features, oldest first."""

    wanted = set(feature_ids)
    found = [meeple for meeple in game.active_meeples() if meeple.feature_id in wanted]
    return sorted(found, key=lambda meeple: (meeple.placed_at, int(meeple.id)))


def can_place(game: Game, player: Player, tile: Tile, feature: Feature) -> MeepleError | None:
    """Return why the player may not claim ``feature``, or ``None`` if they may.

    Rules:
    1. The game is in progress
    2. The tile is on the board
    3. The player has a meeple in supply
    4. Nobody already stands on the feature
    5. The feature is not completed
    """

    if game.status != GameStatus.ACTIVE:
        return MeepleError(MeepleError.GAME_NOT_ACTIVE, "game is not active")
    if not tile.is_placed:
        return MeepleError(MeepleError.TILE_NOT_PLACED, f"tile {int(tile.id)} is not placed")
    if player.meeples <= 0:
        return MeepleError(MeepleError.NO_SUPPLY, f"{player.name} has no meeples left")
    if meeples_on(game, [feature.id]):
        return MeepleError(MeepleError.OCCUPIED, f"feature {int(feature.id)} already has a meeple")
    if feature.completed:
        return MeepleError(
            MeepleError.FEATURE_COMPLETED, f"feature {int(feature.id)} is already completed"
        )
    return None


def place(game: Game, player: Player, tile: Tile, feature: Feature) -> Meeple:
    """Take a meeple from the player's supply and stand it on ``feature``."""

    error = can_place(game, player, tile, feature)
    if error is not None:
        raise error

    meeple = Meeple(
        id=MeepleID(game.allocate_id()),
        player_id=player.id,
        tile_id=tile.id,
        feature_id=feature.id,
        position=feature.spot,
        placed_at=utc_now(),
    )
    game.meeples[meeple.id] = meeple
    player.meeples -= 1
    game.touch()
    return meeple


def occupant(game: Game, region: Region) -> PlayerID | None:
    """Owner of the earliest placed active meeple in the region."""

    meeples = meeples_on(game, region.key)
    return meeples[0].player_id if meeples else None


def return_all(game: Game, region: Region) -> list[Meeple]:
    """Send every active meeple in the region back to its owner's supply.

    Already returned meeples are skipped, so calling this twice for the same
    region returns nothing the second time.
    """

    returned = meeples_on(game, region.key)
    now = utc_now()
    for meeple in returned:
        meeple.returned = True
        meeple.returned_at = now
        game.players[meeple.player_id].meeples += 1
        logger.debug("meeple %s returned to player %s", int(meeple.id), int(meeple.player_id))
    return returned
