"""Feature completion detection and point awards."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from . import meeples as meeple_rules
from .board import Board
from .enums import FeatureType
from .features import Region, adjacent_cities, all_regions, is_closed, region_of, regions_on_tile
from .models import FeatureID, Game, PlayerID, Tile, utc_now
from .rules_config import DEFAULT_RULES, RulesConfig

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ScoreUpdate:
    """One scoring event, reported to the caller after an action."""

    player_id: PlayerID | None
    points: int
    feature_type: FeatureType
    completed: bool
    feature_ids: list[FeatureID] = field(default_factory=list)
    final: bool = False


def completion_points(region: Region, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Points for a region completed during play."""

    scoring = rules.scoring
    if region.feature_type == FeatureType.CITY:
        return scoring.city_points_per_tile * region.tile_count
    if region.feature_type == FeatureType.ROAD:
        return scoring.road_points_per_tile * region.tile_count
    if region.feature_type == FeatureType.MONASTERY:
        return scoring.monastery_points_per_tile * (region.surrounding + 1)
    return 0


def unfinished_points(region: Region, rules: RulesConfig = DEFAULT_RULES) -> int:
    """Points for a city, road or monastery still open at game end."""

    scoring = rules.scoring
    if region.feature_type == FeatureType.CITY:
        return scoring.final_city_points_per_tile * region.tile_count
    if region.feature_type == FeatureType.ROAD:
        return scoring.final_road_points_per_tile * region.tile_count
    if region.feature_type == FeatureType.MONASTERY:
        return scoring.final_monastery_points_per_tile * (region.surrounding + 1)
    return 0


def _credit(game: Game, player_id: PlayerID | None, points: int) -> None:
    if player_id is not None:
        game.players[player_id].score += points


def _candidate_regions(game: Game, board: Board, tile: Tile) -> list[Region]:
    """Regions a placement can have changed.

    That is every region through the new tile plus the monasteries around it.
    """

    regions = regions_on_tile(game, board, tile)
    position = tile.position
    if position is None:
        return regions
    for neighbour in board.surrounding(*position):
        for feature in game.features_of(neighbour):
            if feature.feature_type == FeatureType.MONASTERY:
                regions.append(region_of(game, board, feature))
    return regions


def score_placement(
    game: Game, board: Board, tile: Tile, rules: RulesConfig = DEFAULT_RULES
) -> list[ScoreUpdate]:
    """Settle every region the newly placed tile completed."""

    updates: list[ScoreUpdate] = []
    for region in _candidate_regions(game, board, tile):
        if region.completed or not is_closed(region, rules):
            continue

        points = completion_points(region, rules)
        now = utc_now()
        for feature in region.members:
            feature.completed = True
            feature.points = points
            feature.completed_at = now

        owner = meeple_rules.occupant(game, region)
        _credit(game, owner, points)
        meeple_rules.return_all(game, region)
        logger.debug(
            "%s completed on %d tile(s): %d point(s) to %s",
            region.feature_type,
            region.tile_count,
            points,
            owner,
        )
        updates.append(
            ScoreUpdate(
                player_id=owner,
                points=points,
                feature_type=region.feature_type,
                completed=True,
                feature_ids=sorted(region.key),
            )
        )
    return updates


def score_final(game: Game, board: Board, rules: RulesConfig = DEFAULT_RULES) -> list[ScoreUpdate]:
    """Score every region still open when the game ends.

    Meeples stay where they are; the game is over.
    """

    updates: list[ScoreUpdate] = []
    city_cache: dict[FeatureID, Region] = {}
    for region in all_regions(game, board):
        if region.completed:
            continue

        if region.feature_type == FeatureType.FIELD:
            cities = adjacent_cities(game, board, region, cache=city_cache)
            finished = sum(1 for city in cities if city.completed)
            points = rules.scoring.field_points_per_city * finished
        else:
            points = unfinished_points(region, rules)

        owner = meeple_rules.occupant(game, region)
        _credit(game, owner, points)
        updates.append(
            ScoreUpdate(
                player_id=owner,
                points=points,
                feature_type=region.feature_type,
                completed=False,
                feature_ids=sorted(region.key),
                final=True,
            )
        )
    return updates
