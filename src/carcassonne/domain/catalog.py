"""Static tile catalog and per-expansion deck composition.

Every tile type is a row in :data:`TILE_TYPES`: four nominal edges (N, E, S,
W) and a decomposition into features.  Each edge belongs to exactly one
feature; monasteries cover no edge.  Expansions only add rows to
:data:`TILE_TYPES` and a quantity table to :data:`EXPANSIONS`.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from .enums import DIRECTIONS, ROTATIONS, Direction, EdgeType, FeatureType
from .errors import ConfigurationError, PlacementError

C = EdgeType.CITY
R = EdgeType.ROAD
F = EdgeType.FIELD

N = Direction.NORTH
E = Direction.EAST
S = Direction.SOUTH
W = Direction.WEST

BASE_SET = "base"


@dataclass(frozen=True, slots=True)
class FeatureSpec:
    """One feature of a tile type, in nominal (unrotated) orientation."""

    feature_type: FeatureType
    edges: tuple[Direction, ...]
    spot: str
    adjacent_spots: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class TileType:
    """Catalog entry for a tile shape."""

    tag: str
    edges: tuple[EdgeType, EdgeType, EdgeType, EdgeType]
    features: tuple[FeatureSpec, ...]

    def edge(self, direction: Direction) -> EdgeType:
        return self.edges[DIRECTIONS.index(direction)]


def _city(*edges: Direction) -> FeatureSpec:
    return FeatureSpec(FeatureType.CITY, edges, "city_" + "".join(edges))


def _road(*edges: Direction) -> FeatureSpec:
    return FeatureSpec(FeatureType.ROAD, edges, "road_" + "".join(edges))


def _field(*edges: Direction, cities: tuple[str, ...] = ()) -> FeatureSpec:
    return FeatureSpec(FeatureType.FIELD, edges, "field_" + "".join(edges), cities)


_MONASTERY = FeatureSpec(FeatureType.MONASTERY, (), "monastery")


TILE_TYPES: dict[str, TileType] = {
    tile.tag: tile
    for tile in (
        TileType("monastery_road", (F, F, R, F), (_MONASTERY, _road(S), _field(N, E, W))),
        TileType("monastery", (F, F, F, F), (_MONASTERY, _field(N, E, S, W))),
        TileType("city_cap", (C, F, F, F), (_city(N), _field(E, S, W, cities=("city_N",)))),
        # Dead-end road running from the south edge up to the city wall.
        TileType(
            "city_road",
            (C, F, R, F),
            (
                _city(N),
                _road(S),
                _field(E, cities=("city_N",)),
                _field(W, cities=("city_N",)),
            ),
        ),
        TileType("city_road_bend", (C, R, F, R), (_city(N), _road(E, W), _field(S))),
        TileType(
            "city_three_sides",
            (C, C, F, C),
            (_city(N, E, W), _field(S, cities=("city_NEW",))),
        ),
        TileType(
            "city_diagonal",
            (C, F, F, C),
            (_city(N, W), _field(E, S, cities=("city_NW",))),
        ),
        TileType("city_full", (C, C, C, C), (_city(N, E, S, W),)),
        TileType("road_straight", (F, R, F, R), (_road(E, W), _field(N), _field(S))),
        TileType("road_bend", (F, R, R, F), (_road(E, S), _field(N, W))),
        TileType("road_t", (F, R, R, R), (_road(E), _road(S), _road(W), _field(N))),
        TileType("road_crossing", (R, R, R, R), (_road(N), _road(E), _road(S), _road(W))),
        # Two separate caps.
        TileType(
            "city_two_sides",
            (C, C, F, F),
            (_city(N), _city(E), _field(S, W, cities=("city_N", "city_E"))),
        ),
        TileType(
            "city_two_sides_road",
            (C, C, R, F),
            (_city(N, E), _road(S), _field(W, cities=("city_NE",))),
        ),
        # Inns & Cathedrals
        TileType("city_road_inn", (C, R, F, R), (_city(N), _road(E, W), _field(S))),
        TileType("city_cathedral", (C, C, C, C), (_city(N, E, S, W),)),
    )
}


BASE_TILES: dict[str, int] = {
    "monastery_road": 2,
    "monastery": 4,
    "city_cap": 7,
    "city_road": 6,
    "city_road_bend": 6,
    "city_three_sides": 4,
    "city_diagonal": 5,
    "city_full": 1,
    "road_straight": 10,
    "road_bend": 11,
    "road_t": 5,
    "road_crossing": 1,
    "city_two_sides": 5,
    "city_two_sides_road": 5,
}

EXPANSIONS: dict[str, dict[str, int]] = {
    BASE_SET: {},
    "inns_and_cathedrals": {
        "city_road_inn": 2,
        "city_cathedral": 2,
    },
}


def get_tile_type(tag: str) -> TileType:
    """Look up a tile type by tag."""

    try:
        return TILE_TYPES[tag]
    except KeyError:
        raise ConfigurationError(f"unknown tile type: {tag}") from None


def expansion_tiles(expansion_id: str) -> dict[str, int]:
    """Return the extra tile-type quantities an expansion contributes."""

    try:
        return dict(EXPANSIONS[expansion_id])
    except KeyError:
        raise ConfigurationError(f"unknown expansion: {expansion_id}") from None


def validate_expansions(expansion_ids: Iterable[str]) -> list[str]:
    """Return the de-duplicated expansion ids, rejecting unknown ones."""

    result: list[str] = []
    for expansion_id in expansion_ids:
        if expansion_id not in EXPANSIONS:
            raise ConfigurationError(f"unknown expansion: {expansion_id}")
        if expansion_id not in result:
            result.append(expansion_id)
    return result


def deck_composition(expansion_ids: Iterable[str]) -> dict[str, int]:
    """Merge the base table with every enabled expansion's table."""

    composition = dict(BASE_TILES)
    for expansion_id in validate_expansions(expansion_ids):
        for tag, count in expansion_tiles(expansion_id).items():
            composition[tag] = composition.get(tag, 0) + count
    return composition


# ---------------------------------------------------------------------------
# Rotation


def check_rotation(rotation: int) -> int:
    if rotation not in ROTATIONS:
        raise PlacementError(
            PlacementError.INVALID_ROTATION,
            f"rotation must be one of {ROTATIONS}, got {rotation}",
        )
    return rotation


def rotate_direction(direction: Direction, rotation: int) -> Direction:
    """Where a nominal side ends up after a clockwise rotation."""

    steps = check_rotation(rotation) // 90
    return DIRECTIONS[(DIRECTIONS.index(direction) + steps) % 4]


def rotate_edges(edges: tuple[EdgeType, ...] | list[EdgeType], rotation: int) -> list[EdgeType]:
    """Effective (N, E, S, W) edges; one step maps (N, E, S, W) <- (W, N, E, S)."""

    steps = check_rotation(rotation) // 90
    return [edges[(index - steps) % 4] for index in range(4)]


def effective_edges(
    edges: tuple[EdgeType, ...] | list[EdgeType], rotation: int
) -> dict[Direction, EdgeType]:
    return dict(zip(DIRECTIONS, rotate_edges(edges, rotation), strict=True))
