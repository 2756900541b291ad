"""Tests for the JSON and SQL game repositories."""

from __future__ import annotations

import pytest

from carcassonne.database import create_db_engine, init_db, make_session_factory
from carcassonne.domain import lifecycle
from carcassonne.domain import models as dm
from carcassonne.domain.errors import NotFoundError
from carcassonne.repository import JsonGameRepository, SqlGameRepository

from builders import current_tile, player_named, two_player_game


def _played_game() -> dm.Game:
    game = two_player_game("city_road", "city_road")
    alice = player_named(game, "Alice")
    start = game.placed_tiles()[0]
    lifecycle.place_meeple(game, alice.id, start.id, position="city_N")
    lifecycle.place_tile(game, alice.id, current_tile(game).id, 0, 1, 180)
    lifecycle.end_turn(game, alice.id)
    return game


@pytest.fixture
def json_repo(tmp_path):
    return JsonGameRepository(tmp_path)


@pytest.fixture
def sql_repo():
    engine = create_db_engine("sqlite:///:memory:")
    init_db(engine)
    return SqlGameRepository(make_session_factory(engine))


@pytest.fixture(params=["json", "sql"])
def repo(request):
    return request.getfixturevalue(f"{request.param}_repo")


def test_save_and_load_game(repo):
    game = _played_game()

    repo.save(game)
    loaded = repo.load(game.id)

    assert loaded == game
    assert loaded.remaining_deck_count == len(loaded.deck) == 69
    assert [t.position for t in loaded.placed_tiles()] == [(0, 0), (0, 1)]
    assert loaded.features_of(loaded.tiles[loaded.placed_tiles()[0].id])


def test_loaded_game_keeps_playing(repo):
    game = _played_game()
    repo.save(game)
    loaded = repo.load(game.id)
    bob = player_named(loaded, "Bob")

    lifecycle.end_turn(loaded, bob.id)

    assert loaded.current_player_id == player_named(loaded, "Alice").id
    assert loaded.remaining_deck_count == 68


def test_save_replaces_previous_version(repo):
    game = two_player_game()
    repo.save(game)
    lifecycle.end_turn(game, player_named(game, "Alice").id)
    repo.save(game)

    loaded = repo.load(game.id)
    assert loaded.current_player_id == player_named(game, "Bob").id
    assert repo.list_games() == [game.id]


def test_missing_game(repo):
    with pytest.raises(NotFoundError):
        repo.load(dm.GameID(42))


def test_list_delete_and_next_identifier(repo):
    assert repo.next_identifier() == dm.GameID(1)
    first = lifecycle.create_game(dm.GameID(1), "Alice")
    second = lifecycle.create_game(dm.GameID(2), "Bob")
    repo.save(first)
    repo.save(second)

    assert repo.list_games() == [dm.GameID(1), dm.GameID(2)]
    assert repo.next_identifier() == dm.GameID(3)

    repo.delete(dm.GameID(1))
    assert repo.list_games() == [dm.GameID(2)]
    repo.delete(dm.GameID(1))


def test_json_snapshot_is_written_atomically(json_repo, tmp_path):
    game = lifecycle.create_game(dm.GameID(5), "Alice")

    path = json_repo.save(game)

    assert path == tmp_path / "game_5.json"
    assert sorted(p.name for p in tmp_path.iterdir()) == ["game_5.json"]
