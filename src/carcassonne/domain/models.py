"""Dataclasses describing every Carcassonne game entity.

A :class:`Game` is the aggregate root: it owns its players, tiles, features
and meeples in flat id-keyed dictionaries (an arena).  Entities reference
each other by id only; reverse lookups such as "meeples on this feature" are
queries over the arena, so the structure has no reference cycles and can be
serialised as-is by the repository adapters.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import NewType

from .enums import Direction, EdgeType, FeatureType, GameStatus, TileState

# --- Strongly typed identifiers -------------------------------------------------

GameID = NewType("GameID", int)
PlayerID = NewType("PlayerID", int)
TileID = NewType("TileID", int)
FeatureID = NewType("FeatureID", int)
MeepleID = NewType("MeepleID", int)


def utc_now() -> datetime:
    """Current time in UTC with timezone info."""

    return datetime.now(UTC)


# --- Entities -------------------------------------------------------------------


@dataclass(slots=True)
class Player:
    """Participant in a game."""

    id: PlayerID
    name: str
    is_host: bool = False
    color: str | None = None
    meeples: int = 7
    score: int = 0


@dataclass(slots=True)
class Feature:
    """Connected region printed on a single tile."""

    id: FeatureID
    tile_id: TileID
    feature_type: FeatureType
    edges: list[Direction]
    spot: str
    adjacent_spots: list[str] = field(default_factory=list)
    completed: bool = False
    points: int | None = None
    completed_at: datetime | None = None


@dataclass(slots=True)
class Tile:
    """Square piece, either still in the deck or laid on the board."""

    id: TileID
    tile_type: str
    edges: list[EdgeType]
    feature_ids: list[FeatureID] = field(default_factory=list)
    state: TileState = TileState.IN_DECK
    x: int | None = None
    y: int | None = None
    rotation: int = 0
    placed_at: datetime | None = None
    placed_by: PlayerID | None = None

    @property
    def is_placed(self) -> bool:
        return self.state == TileState.PLACED

    @property
    def position(self) -> tuple[int, int] | None:
        if self.x is None or self.y is None:
            return None
        return (self.x, self.y)


@dataclass(slots=True)
class Meeple:
    """A worker placed by a player on one feature."""

    id: MeepleID
    player_id: PlayerID
    tile_id: TileID
    feature_id: FeatureID
    position: str
    placed_at: datetime
    returned: bool = False
    returned_at: datetime | None = None

    @property
    def active(self) -> bool:
        return not self.returned


@dataclass(slots=True)
class Game:
    """Root aggregate representing one game instance."""

    id: GameID
    name: str
    status: GameStatus
    created_at: datetime
    updated_at: datetime
    seed: str = ""
    expansions: list[str] = field(default_factory=list)
    players: dict[PlayerID, Player] = field(default_factory=dict)
    tiles: dict[TileID, Tile] = field(default_factory=dict)
    features: dict[FeatureID, Feature] = field(default_factory=dict)
    meeples: dict[MeepleID, Meeple] = field(default_factory=dict)
    deck: list[TileID] = field(default_factory=list)
    remaining_deck_count: int = 0
    current_player_id: PlayerID | None = None
    current_tile_id: TileID | None = None
    last_entity_id: int = 0

    def allocate_id(self) -> int:
        """Return a fresh identifier, unique across every entity in this game."""

        self.last_entity_id += 1
        return self.last_entity_id

    def touch(self) -> None:
        self.updated_at = utc_now()

    def placed_tiles(self) -> list[Tile]:
        return [tile for tile in self.tiles.values() if tile.state == TileState.PLACED]

    def active_meeples(self) -> list[Meeple]:
        return [meeple for meeple in self.meeples.values() if not meeple.returned]

    def features_of(self, tile: Tile) -> list[Feature]:
        return [self.features[feature_id] for feature_id in tile.feature_ids]
