"""Unit tests for completion detection and point awards."""

from carcassonne.domain import lifecycle, scoring
from carcassonne.domain import meeples as meeple_rules
from carcassonne.domain.board import Board
from carcassonne.domain.enums import FeatureType, GameStatus
from carcassonne.domain.features import region_of
from carcassonne.domain.rules_config import DEFAULT_RULES

from builders import (
    current_tile,
    empty_game,
    feature_at,
    loose_tile,
    player_named,
    two_player_game,
)


def _start_tile(game):
    return next(tile for tile in game.tiles.values() if tile.position == (0, 0))


def test_closing_a_road_between_dead_ends_scores_two_and_returns_the_meeple():
    game = two_player_game("city_road", "city_road")
    alice = player_named(game, "Alice")
    start = _start_tile(game)
    lifecycle.place_meeple(game, alice.id, start.id, position="road_S")
    assert alice.meeples == 6

    held = current_tile(game)
    result = lifecycle.place_tile(game, alice.id, held.id, 0, 1, 180)

    roads = [u for u in result.score_updates if u.feature_type == FeatureType.ROAD]
    assert len(roads) == 1
    assert roads[0].player_id == alice.id
    assert roads[0].points == 2
    assert roads[0].completed
    assert alice.score == 2
    assert alice.meeples == 7
    assert not game.active_meeples()
    assert feature_at(game, start, "road_S").completed
    assert feature_at(game, held, "road_S").completed
    assert feature_at(game, held, "road_S").points == 2


def test_road_straight_next_to_start_stays_open():
    game = two_player_game("city_road", "road_straight")
    alice = player_named(game, "Alice")
    start = _start_tile(game)
    held = current_tile(game)

    result = lifecycle.place_tile(game, alice.id, held.id, 0, 1, 90)

    assert result.score_updates == []
    assert not feature_at(game, start, "road_S").completed
    assert not feature_at(game, held, "road_EW").completed
    region = region_of(game, Board(game), feature_at(game, start, "road_S"))
    assert region.tile_count == 2
    assert region.open_connectors == 1


def test_unoccupied_completion_reports_no_player():
    game = two_player_game("city_cap", "city_cap")
    alice = player_named(game, "Alice")
    held = current_tile(game)

    result = lifecycle.place_tile(game, alice.id, held.id, 0, -1, 180)

    assert len(result.score_updates) == 1
    update = result.score_updates[0]
    assert update.feature_type == FeatureType.CITY
    assert update.player_id is None
    assert update.points == 4
    assert alice.score == 0


def test_completed_region_is_scored_once():
    game = empty_game()
    board = Board(game)
    top = board.place(loose_tile(game, "city_road"), 0, 0, 0, None)
    bottom = board.place(loose_tile(game, "city_road"), 0, 1, 180, None)

    first = scoring.score_placement(game, board, bottom)
    again = scoring.score_placement(game, board, top)

    assert [u.feature_type for u in first] == [FeatureType.ROAD]
    assert again == []


def test_monastery_completes_when_surrounded():
    game = empty_game()
    host = next(iter(game.players.values()))
    board = Board(game)
    centre = board.place(loose_tile(game, "monastery"), 0, 0, 0, None)
    monk = feature_at(game, centre, "monastery")
    game.status = GameStatus.ACTIVE
    meeple_rules.place(game, host, centre, monk)

    ring = [(1, 0), (1, 1), (0, 1), (-1, 1), (-1, 0), (-1, -1), (0, -1), (1, -1)]
    updates = []
    for x, y in ring:
        tile = board.place(loose_tile(game, "monastery"), x, y, 0, None)
        updates = scoring.score_placement(game, board, tile)
        if (x, y) != ring[-1]:
            assert not monk.completed

    mine = [u for u in updates if monk.id in u.feature_ids]
    assert len(mine) == 1
    assert mine[0].points == 9
    assert mine[0].player_id == host.id
    assert host.score == 9
    assert host.meeples == DEFAULT_RULES.meeples.supply_per_player


def test_final_scoring_of_open_features_and_fields():
    game = empty_game()
    alice = next(iter(game.players.values()))
    game.status = GameStatus.ACTIVE
    board = Board(game)
    start = board.place(loose_tile(game, "city_cap"), 0, 0, 0, None)
    cap = board.place(loose_tile(game, "city_cap"), 0, -1, 180, None)
    scoring.score_placement(game, board, cap)
    road = board.place(loose_tile(game, "road_straight"), 1, 0, 90, None)

    meeple_rules.place(game, alice, start, feature_at(game, start, "field_ESW"))
    meeple_rules.place(game, alice, road, feature_at(game, road, "road_EW"))
    updates = scoring.score_final(game, board)

    by_type = {}
    for update in updates:
        by_type.setdefault(update.feature_type, []).append(update)
    assert all(update.final and not update.completed for update in updates)
    # the finished city is not scored again
    assert FeatureType.CITY not in by_type
    fields = [u for u in by_type[FeatureType.FIELD] if u.player_id == alice.id]
    assert [u.points for u in fields] == [3]
    assert [u.points for u in by_type[FeatureType.ROAD]] == [1]
    assert alice.score == 3 + 1
    # farmers stay on the board
    assert len(game.active_meeples()) == 2


def test_unfinished_points_for_open_city():
    game = empty_game()
    board = Board(game)
    tile = board.place(loose_tile(game, "city_three_sides"), 0, 0, 0, None)

    region = region_of(game, board, feature_at(game, tile, "city_NEW"))

    assert scoring.unfinished_points(region) == 1
    assert scoring.completion_points(region) == 2


def test_final_scoring_of_open_monastery_counts_neighbours():
    game = empty_game()
    host = next(iter(game.players.values()))
    game.status = GameStatus.ACTIVE
    board = Board(game)
    centre = board.place(loose_tile(game, "monastery"), 0, 0, 0, None)
    for x, y in ((1, 0), (1, 1), (0, 1)):
        board.place(loose_tile(game, "monastery"), x, y, 0, None)
    monk = feature_at(game, centre, "monastery")
    meeple_rules.place(game, host, centre, monk)

    updates = scoring.score_final(game, board)

    [mine] = [u for u in updates if monk.id in u.feature_ids]
    assert mine.player_id == host.id
    assert mine.points == 4
    assert mine.final and not mine.completed
    assert host.score == 4
    assert not monk.completed


def test_farmer_next_to_open_city_scores_nothing():
    game = empty_game()
    host = next(iter(game.players.values()))
    game.status = GameStatus.ACTIVE
    board = Board(game)
    cap = board.place(loose_tile(game, "city_cap"), 0, 0, 0, None)
    meeple_rules.place(game, host, cap, feature_at(game, cap, "field_ESW"))

    updates = scoring.score_final(game, board)

    fields = [u for u in updates if u.feature_type == FeatureType.FIELD]
    assert [(u.player_id, u.points) for u in fields] == [(host.id, 0)]
    cities = [u for u in updates if u.feature_type == FeatureType.CITY]
    assert [(u.player_id, u.points) for u in cities] == [(None, 1)]
    assert host.score == 0
