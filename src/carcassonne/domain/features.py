"""Feature graph: how features connect across tile boundaries.

Two features on adjacent tiles belong to the same region when both cover the
shared side.  Cities, roads and fields are explored breadth-first from a
starting feature; a monastery is always a single-tile region whose progress
is measured by the number of occupied cells around it.
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from dataclasses import dataclass, field

from .board import Board, step
from .catalog import rotate_direction
from .enums import OPPOSITE, Direction, FeatureType
from .models import Feature, FeatureID, Game, Tile, TileID
from .rules_config import DEFAULT_RULES, RulesConfig


@dataclass(slots=True)
class Region:
    """Maximal set of same-type features connected across tiles."""

    feature_type: FeatureType
    members: list[Feature]
    tile_ids: set[TileID] = field(default_factory=set)
    open_connectors: int = 0
    surrounding: int = 0

    @property
    def key(self) -> frozenset[FeatureID]:
        return frozenset(feature.id for feature in self.members)

    @property
    def tile_count(self) -> int:
        return len(self.tile_ids)

    @property
    def completed(self) -> bool:
        return any(feature.completed for feature in self.members)


def effective_sides(tile: Tile, feature: Feature) -> list[Direction]:
    """Board-facing sides a feature covers once its tile is rotated."""

    return [rotate_direction(side, tile.rotation) for side in feature.edges]


def feature_on_side(game: Game, tile: Tile, side: Direction) -> Feature | None:
    """The feature of a placed tile covering a board-facing side."""

    for feature in game.features_of(tile):
        if side in effective_sides(tile, feature):
            return feature
    return None


def region_of(game: Game, board: Board, feature: Feature) -> Region:
    """Collect every feature instance connected to ``feature``.

    Open connectors are sides of a member that face an empty cell (or a
    neighbour whose facing feature is of another type); they are counted so
    :func:`is_closed` can decide completion without another traversal.
    """

    tile = game.tiles[feature.tile_id]
    if feature.feature_type == FeatureType.MONASTERY:
        position = tile.position
        surrounding = len(board.surrounding(*position)) if position is not None else 0
        return Region(
            feature_type=feature.feature_type,
            members=[feature],
            tile_ids={tile.id},
            surrounding=surrounding,
        )

    region = Region(feature_type=feature.feature_type, members=[])
    seen: set[FeatureID] = {feature.id}
    queue: deque[Feature] = deque([feature])

    while queue:
        current = queue.popleft()
        region.members.append(current)
        owner = game.tiles[current.tile_id]
        region.tile_ids.add(owner.id)
        if owner.position is None:
            region.open_connectors += len(current.edges)
            continue

        for side in effective_sides(owner, current):
            neighbour = board.tile_at(*step(owner.position, side))
            if neighbour is None:
                region.open_connectors += 1
                continue
            match = feature_on_side(game, neighbour, OPPOSITE[side])
            if match is None or match.feature_type != current.feature_type:
                region.open_connectors += 1
                continue
            if match.id not in seen:
                seen.add(match.id)
                queue.append(match)

    return region


def is_closed(region: Region, rules: RulesConfig = DEFAULT_RULES) -> bool:
    """Whether a region is complete.

    Fields are never complete during play; they only score at game end.
    """

    if region.feature_type == FeatureType.MONASTERY:
        return region.surrounding >= rules.scoring.monastery_neighbourhood
    if region.feature_type == FeatureType.FIELD:
        return False
    return region.open_connectors == 0


def regions_on_tile(game: Game, board: Board, tile: Tile) -> list[Region]:
    """Distinct regions passing through a tile's features."""

    regions: list[Region] = []
    covered: set[FeatureID] = set()
    for feature in game.features_of(tile):
        if feature.id in covered:
            continue
        region = region_of(game, board, feature)
        covered.update(region.key)
        regions.append(region)
    return regions


def all_regions(game: Game, board: Board) -> list[Region]:
    """Every distinct region on the board."""

    regions: list[Region] = []
    covered: set[FeatureID] = set()
    for tile in game.placed_tiles():
        for feature in game.features_of(tile):
            if feature.id in covered:
                continue
            region = region_of(game, board, feature)
            covered.update(region.key)
            regions.append(region)
    return regions


def adjacent_cities(
    game: Game, board: Board, field_region: Region, *, cache: dict[FeatureID, Region] | None = None
) -> list[Region]:
    """Distinct city regions bordering a field region.

    ``cache`` maps city feature ids to their region and may be shared across
    calls to avoid re-walking the same city for every field.
    """

    cache = {} if cache is None else cache
    cities: dict[frozenset[FeatureID], Region] = {}
    for member in field_region.members:
        tile = game.tiles[member.tile_id]
        for city in _features_by_spot(game, tile, member.adjacent_spots):
            region = cache.get(city.id)
            if region is None:
                region = region_of(game, board, city)
                for feature_id in region.key:
                    cache[feature_id] = region
            cities.setdefault(region.key, region)
    return list(cities.values())


def _features_by_spot(game: Game, tile: Tile, spots: Iterable[str]) -> list[Feature]:
    wanted = set(spots)
    return [
        feature
        for feature in game.features_of(tile)
        if feature.feature_type == FeatureType.CITY and feature.spot in wanted
    ]
