"""Tests for the game service backing the HTTP API."""

from __future__ import annotations

import threading

import pytest

from carcassonne.api.runtime import ApiState, GameService, build_repository
from carcassonne.config import Settings
from carcassonne.database import check_database_health, create_db_engine
from carcassonne.domain import models as dm
from carcassonne.domain.enums import GameStatus, TileState
from carcassonne.domain.errors import (
    ForbiddenError,
    InvalidStateError,
    NotFoundError,
    PlacementError,
)
from carcassonne.repository import JsonGameRepository, SqlGameRepository

from builders import empty_deck, stacked


def _service(tmp_path) -> GameService:
    return GameService(
        JsonGameRepository(tmp_path),
        randomness_factory=lambda game: stacked(game, "city_road", "city_road"),
    )


def _started(service: GameService) -> tuple[dm.Game, dm.Player, dm.Player]:
    game, alice = service.create_game("Alice", name="Friday night")
    game, bob = service.join_game(game.id, "Bob")
    game = service.start_game(game.id, alice.id)
    return game, alice, bob


def test_create_and_list(tmp_path):
    service = _service(tmp_path)

    first, host = service.create_game("Alice")
    second, _ = service.create_game("Bob", expansions=["inns_and_cathedrals"])

    assert host.is_host
    assert [game.id for game in service.list_games()] == [first.id, second.id]
    assert service.get_game(second.id).expansions == ["inns_and_cathedrals"]


def test_actions_are_persisted(tmp_path):
    service = _service(tmp_path)
    game, alice, bob = _started(service)

    stored = service.get_game(game.id)
    assert stored.status == GameStatus.ACTIVE
    assert stored.remaining_deck_count == 70

    held = stored.current_tile_id
    result = service.place_tile(game.id, alice.id, held, 0, 1, 180)
    assert [update.points for update in result.score_updates] == [2]

    result = service.end_turn(game.id, alice.id)
    stored = service.get_game(game.id)
    assert stored.current_player_id == bob.id
    assert stored.tiles[held].state == TileState.PLACED


def test_rejected_action_is_not_saved(tmp_path):
    service = _service(tmp_path)
    game, alice, bob = _started(service)
    before = service.get_game(game.id)

    with pytest.raises(PlacementError):
        service.place_tile(game.id, alice.id, before.current_tile_id, 5, 5, 0)
    with pytest.raises(ForbiddenError):
        service.end_turn(game.id, bob.id)

    assert service.get_game(game.id) == before


def test_unknown_game(tmp_path):
    service = _service(tmp_path)
    with pytest.raises(NotFoundError):
        service.join_game(dm.GameID(3), "Bob")


def test_concurrent_joins_are_serialised(tmp_path):
    service = _service(tmp_path)
    game, _ = service.create_game("Host")
    errors: list[Exception] = []

    def join(index: int) -> None:
        try:
            service.join_game(game.id, f"Guest {index}")
        except Exception as exc:  # noqa: BLE001 - collected for the assertion below
            errors.append(exc)

    threads = [threading.Thread(target=join, args=(index,)) for index in range(5)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    stored = service.get_game(game.id)
    assert len(stored.players) == 6
    assert len({player.id for player in stored.players.values()}) == 6


def test_detail_dict_describes_the_table(tmp_path):
    service = _service(tmp_path)
    game, alice, _ = _started(service)

    detail = service.to_detail_dict(service.get_game(game.id))

    assert detail["status"] == "active"
    assert detail["remaining_cards"] == 70
    assert detail["current_player_id"] == int(alice.id)
    assert detail["current_tile"]["tile_type"] == "city_road"
    assert {"x": 0, "y": 1, "rotation": 180} in detail["legal_placements"]
    assert [tile["x"] for tile in detail["board"]] == [0]
    assert {player["name"] for player in detail["players"]} == {"Alice", "Bob"}
    assert detail["meeples"] == []


def test_catalog_dict_lists_every_tile_type():
    catalog = GameService.catalog_dict()
    assert sum(catalog["base"].values()) == 72
    assert "city_road" in catalog["tile_types"]
    assert "inns_and_cathedrals" in catalog["expansions"]


def test_build_repository_follows_settings(tmp_path):
    json_settings = Settings(data_dir=tmp_path, storage_backend="json")
    sql_settings = Settings(storage_backend="sql", database_url="sqlite:///:memory:")

    assert isinstance(build_repository(json_settings), JsonGameRepository)
    assert isinstance(build_repository(sql_settings), SqlGameRepository)


def test_api_state_wires_service(tmp_path):
    state = ApiState(settings=Settings(data_dir=tmp_path))
    assert isinstance(state.repository, JsonGameRepository)
    assert state.games.list_games() == []


def test_database_health_follows_the_backend(tmp_path):
    json_state = ApiState(settings=Settings(data_dir=tmp_path))
    sql_state = ApiState(
        settings=Settings(storage_backend="sql", database_url="sqlite:///:memory:")
    )

    assert json_state.engine is None
    assert json_state.database_healthy() is None
    assert sql_state.database_healthy() is True


def test_unreachable_database_is_unhealthy(tmp_path):
    engine = create_db_engine(f"sqlite:///{tmp_path / 'missing' / 'games.db'}")
    assert check_database_health(engine) is False


def test_host_finishes_a_stalled_game(tmp_path):
    service = _service(tmp_path)
    game, alice, bob = _started(service)

    with pytest.raises(InvalidStateError):
        service.finish_game(game.id, alice.id)

    stored = service.get_game(game.id)
    empty_deck(stored)
    JsonGameRepository(tmp_path).save(stored)
    service.end_turn(game.id, alice.id)
    stalled = service.get_game(game.id)
    assert stalled.status == GameStatus.ACTIVE
    assert stalled.current_tile_id is None

    with pytest.raises(ForbiddenError):
        service.finish_game(game.id, bob.id)
    result = service.finish_game(game.id, alice.id)

    assert result.game.status == GameStatus.FINISHED
    assert service.get_game(game.id).status == GameStatus.FINISHED


def test_game_locks_are_released(tmp_path):
    service = _service(tmp_path)
    game, alice, _ = _started(service)

    service.end_turn(game.id, alice.id)

    assert len(service._locks) == 0
