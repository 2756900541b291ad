"""Tests for tile placement validation."""

import pytest

from carcassonne.domain.board import Board, facing_edge, step
from carcassonne.domain.enums import Direction, EdgeType, TileState
from carcassonne.domain.errors import PlacementError

from builders import empty_game, loose_tile


def _board_with_start(tile_type="city_road"):
    game = empty_game()
    board = Board(game)
    start = board.place(loose_tile(game, tile_type), 0, 0, 0, None)
    return game, board, start


def test_step_uses_screen_coordinates():
    assert step((0, 0), Direction.NORTH) == (0, -1)
    assert step((0, 0), Direction.SOUTH) == (0, 1)
    assert step((0, 0), Direction.EAST) == (1, 0)
    assert step((0, 0), Direction.WEST) == (-1, 0)


def test_first_tile_must_go_to_the_origin():
    game = empty_game()
    board = Board(game)
    tile = loose_tile(game, "road_straight")

    error = board.can_place(tile, 3, 3, 0)
    assert error is not None
    assert error.reason == PlacementError.NO_ADJACENCY
    assert board.can_place(tile, 0, 0, 0) is None


def test_place_sets_position_and_state():
    game, board, start = _board_with_start()

    assert start.state == TileState.PLACED
    assert start.position == (0, 0)
    assert board.tile_at(0, 0) is start
    assert len(board) == 1
    assert board.open_positions() == [(-1, 0), (0, -1), (0, 1), (1, 0)]


def test_occupied_cell_rejected():
    game, board, _ = _board_with_start()
    tile = loose_tile(game, "city_full")

    with pytest.raises(PlacementError) as excinfo:
        board.place(tile, 0, 0, 0, None)
    assert excinfo.value.reason == PlacementError.OCCUPIED
    assert tile.state == TileState.DRAWN
    assert tile.position is None


def test_detached_cell_rejected():
    game, board, _ = _board_with_start()
    error = board.can_place(loose_tile(game, "road_straight"), 2, 0, 0)
    assert error is not None
    assert error.reason == PlacementError.NO_ADJACENCY


def test_edge_mismatch_reports_direction():
    game, board, _ = _board_with_start("city_road")
    # city_full shows city to the north; the start tile shows road to the south.
    error = board.can_place(loose_tile(game, "city_full"), 0, 1, 0)
    assert error is not None
    assert error.reason == PlacementError.EDGE_MISMATCH
    assert error.direction == Direction.NORTH


def test_rotation_makes_edges_match():
    game, board, _ = _board_with_start("city_road")
    tile = loose_tile(game, "city_road")
    # Turned half way round the road points north onto the start tile's road.
    assert board.can_place(tile, 0, 1, 0) is not None
    assert board.can_place(tile, 0, 1, 180) is None
    board.place(tile, 0, 1, 180, None)
    assert facing_edge(tile, Direction.NORTH) == EdgeType.ROAD


def test_invalid_rotation_rejected_before_anything_else():
    game, board, _ = _board_with_start()
    error = board.can_place(loose_tile(game, "road_straight"), 0, 0, 45)
    assert error is not None
    assert error.reason == PlacementError.INVALID_ROTATION


def test_tile_must_be_drawn():
    game, board, start = _board_with_start()
    error = board.can_place(start, 1, 0, 0)
    assert error is not None
    assert error.reason == PlacementError.TILE_NOT_DRAWN


def test_legal_placements_all_pass_validation():
    game, board, _ = _board_with_start("city_road")
    tile = loose_tile(game, "road_bend")

    placements = board.legal_placements(tile)

    assert placements
    assert board.has_legal_placement(tile)
    for x, y, rotation in placements:
        assert board.can_place(tile, x, y, rotation) is None


def test_surrounding_counts_diagonals():
    game, board, _ = _board_with_start("monastery")
    board.place(loose_tile(game, "monastery"), 1, 0, 0, None)
    board.place(loose_tile(game, "monastery"), 1, 1, 0, None)

    assert len(board.surrounding(0, 0)) == 2
    assert len(board.surrounding(0, 1)) == 3
    assert set(board.neighbours(1, 0)) == {Direction.WEST, Direction.SOUTH}
