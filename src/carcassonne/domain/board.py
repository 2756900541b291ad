"""Board logic: tile placement validation and open position calculation."""

from __future__ import annotations

from .catalog import effective_edges
from .enums import DIRECTIONS, OFFSETS, OPPOSITE, ROTATIONS, Direction, EdgeType, TileState
from .errors import PlacementError
from .models import Game, PlayerID, Tile, utc_now
from .rules_config import DEFAULT_RULES, RulesConfig

Position = tuple[int, int]


def step(position: Position, direction: Direction) -> Position:
    dx, dy = OFFSETS[direction]
    return (position[0] + dx, position[1] + dy)


def facing_edge(tile: Tile, direction: Direction, rotation: int | None = None) -> EdgeType:
    """Edge type a tile shows towards ``direction`` once rotated."""

    angle = tile.rotation if rotation is None else rotation
    return effective_edges(tile.edges, angle)[direction]


class Board:
    """Sparse placement grid indexed by ``(x, y)``.

    The index is built from the game's placed tiles when the board is created
    and kept in sync by :meth:`place`.
    """

    def __init__(self, game: Game, rules: RulesConfig = DEFAULT_RULES) -> None:
        self._game = game
        self._rules = rules
        self._cells: dict[Position, Tile] = {}
        for tile in game.placed_tiles():
            position = tile.position
            if position is not None:
                self._cells[position] = tile

    def __len__(self) -> int:
        return len(self._cells)

    def __contains__(self, position: object) -> bool:
        return position in self._cells

    def tile_at(self, x: int, y: int) -> Tile | None:
        return self._cells.get((x, y))

    def neighbours(self, x: int, y: int) -> dict[Direction, Tile]:
        """Occupied 4-neighbours of a cell, keyed by the side they touch."""

        found: dict[Direction, Tile] = {}
        for direction in DIRECTIONS:
            tile = self._cells.get(step((x, y), direction))
            if tile is not None:
                found[direction] = tile
        return found

    def surrounding(self, x: int, y: int) -> list[Tile]:
        """Occupied cells among the 8 around ``(x, y)``."""

        tiles: list[Tile] = []
        for dx in (-1, 0, 1):
            for dy in (-1, 0, 1):
                if dx == 0 and dy == 0:
                    continue
                tile = self._cells.get((x + dx, y + dy))
                if tile is not None:
                    tiles.append(tile)
        return tiles

    def can_place(self, tile: Tile, x: int, y: int, rotation: int) -> PlacementError | None:
        """Return the reason a placement is illegal, or ``None`` when it is legal.

        Checks, in order: the cell is free; the cell touches a placed tile (or
        is the origin on an empty board); every shared edge matches exactly.
        """

        if rotation not in ROTATIONS:
            return PlacementError(
                PlacementError.INVALID_ROTATION,
                f"rotation must be one of {ROTATIONS}, got {rotation}",
            )
        if tile.state != TileState.DRAWN:
            return PlacementError(
                PlacementError.TILE_NOT_DRAWN, f"tile {int(tile.id)} is {tile.state}"
            )

        if (x, y) in self._cells:
            return PlacementError(PlacementError.OCCUPIED, f"position ({x}, {y}) is occupied")

        neighbours = self.neighbours(x, y)
        if not neighbours and (self._cells or (x, y) != self._rules.board.origin):
            return PlacementError(
                PlacementError.NO_ADJACENCY,
                f"position ({x}, {y}) is not adjacent to any placed tile",
            )

        ours = effective_edges(tile.edges, rotation)
        for direction, neighbour in neighbours.items():
            theirs = facing_edge(neighbour, OPPOSITE[direction])
            if ours[direction] != theirs:
                return PlacementError(
                    PlacementError.EDGE_MISMATCH,
                    f"{direction} edge {ours[direction]} does not match neighbour's {theirs}",
                    direction=direction,
                )
        return None

    def place(
        self, tile: Tile, x: int, y: int, rotation: int, placed_by: PlayerID | None
    ) -> Tile:
        """Lay a drawn tile on the board; nothing changes if the placement is illegal."""

        error = self.can_place(tile, x, y, rotation)
        if error is not None:
            raise error

        tile.state = TileState.PLACED
        tile.x = x
        tile.y = y
        tile.rotation = rotation
        tile.placed_at = utc_now()
        tile.placed_by = placed_by
        self._cells[(x, y)] = tile
        self._game.touch()
        return tile

    def open_positions(self) -> list[Position]:
        """Empty cells adjacent to at least one placed tile."""

        if not self._cells:
            return [self._rules.board.origin]
        open_set: set[Position] = set()
        for position in self._cells:
            for direction in DIRECTIONS:
                neighbour = step(position, direction)
                if neighbour not in self._cells:
                    open_set.add(neighbour)
        return sorted(open_set)

    def legal_placements(self, tile: Tile) -> list[tuple[int, int, int]]:
        """Every ``(x, y, rotation)`` at which the tile could be laid."""

        return [
            (x, y, rotation)
            for x, y in self.open_positions()
            for rotation in ROTATIONS
            if self.can_place(tile, x, y, rotation) is None
        ]

    def has_legal_placement(self, tile: Tile) -> bool:
        for x, y in self.open_positions():
            for rotation in ROTATIONS:
                if self.can_place(tile, x, y, rotation) is None:
                    return True
        return False
