"""Enumerations and type aliases for the Carcassonne domain."""

from __future__ import annotations

from enum import StrEnum


class GameStatus(StrEnum):
    """Lifecycle of a single game."""

    WAITING = "waiting"
    ACTIVE = "active"
    FINISHED = "finished"


class EdgeType(StrEnum):
    """Terrain printed along one side of a tile."""

    CITY = "city"
    ROAD = "road"
    FIELD = "field"


class FeatureType(StrEnum):
    """Kinds of regions a tile can be split into."""

    CITY = "city"
    ROAD = "road"
    MONASTERY = "monastery"
    FIELD = "field"


class Direction(StrEnum):
    """Compass sides of a tile, in clockwise order."""

    NORTH = "N"
    EAST = "E"
    SOUTH = "S"
    WEST = "W"


class TileState(StrEnum):
    """Where a tile currently lives."""

    IN_DECK = "in_deck"
    DRAWN = "drawn"
    PLACED = "placed"
    DISCARDED = "discarded"


DIRECTIONS: tuple[Direction, ...] = (
    Direction.NORTH,
    Direction.EAST,
    Direction.SOUTH,
    Direction.WEST,
)

OPPOSITE: dict[Direction, Direction] = {
    Direction.NORTH: Direction.SOUTH,
    Direction.EAST: Direction.WEST,
    Direction.SOUTH: Direction.NORTH,
    Direction.WEST: Direction.EAST,
}

# North is towards negative y.
OFFSETS: dict[Direction, tuple[int, int]] = {
    Direction.NORTH: (0, -1),
    Direction.EAST: (1, 0),
    Direction.SOUTH: (0, 1),
    Direction.WEST: (-1, 0),
}

ROTATIONS: tuple[int, ...] = (0, 90, 180, 270)
