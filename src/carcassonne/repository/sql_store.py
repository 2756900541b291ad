"""SQLAlchemy-backed repository for Carcassonne games.

The aggregate is always written whole: saving deletes the previous rows of
the game and inserts the current ones inside a single transaction.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, selectinload, sessionmaker

from carcassonne import models as orm
from carcassonne.domain import models as dm
from carcassonne.domain.enums import Direction, EdgeType, FeatureType, GameStatus, TileState
from carcassonne.domain.errors import NotFoundError


def _aware(value: datetime | None) -> datetime | None:
    """SQLite drops timezone info; every stored timestamp is UTC."""

    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _optional_id(value: int | None) -> int | None:
    return None if value is None else int(value)


class SqlGameRepository:
    """Persist games in the relational schema defined by :mod:`carcassonne.models`."""

    def __init__(self, session_factory: sessionmaker[Session]) -> None:
        self._session_factory = session_factory

    # ------------------------------------------------------------------
    # domain -> rows

    def _to_rows(self, game: dm.Game) -> orm.Game:
        row = orm.Game(
            id=int(game.id),
            name=game.name,
            status=str(game.status),
            seed=game.seed,
            expansions=list(game.expansions),
            deck=[int(tile_id) for tile_id in game.deck],
            remaining_cards=game.remaining_deck_count,
            current_player_id=_optional_id(game.current_player_id),
            current_tile_id=_optional_id(game.current_tile_id),
            last_entity_id=game.last_entity_id,
            created_at=game.created_at,
            updated_at=game.updated_at,
        )
        row.players = [
            orm.Player(
                id=int(player.id),
                name=player.name,
                color=player.color,
                meeples=player.meeples,
                score=player.score,
                is_host=player.is_host,
            )
            for player in game.players.values()
        ]
        row.tiles = [
            orm.Tile(
                id=int(tile.id),
                tile_type=tile.tile_type,
                state=str(tile.state),
                x=tile.x,
                y=tile.y,
                rotation=tile.rotation,
                north_side=str(tile.edges[0]),
                east_side=str(tile.edges[1]),
                south_side=str(tile.edges[2]),
                west_side=str(tile.edges[3]),
                is_placed=tile.is_placed,
                placed_at=tile.placed_at,
                placed_by_player_id=_optional_id(tile.placed_by),
            )
            for tile in game.tiles.values()
        ]
        row.features = [
            orm.TileFeature(
                id=int(feature.id),
                tile_id=int(feature.tile_id),
                feature_type=str(feature.feature_type),
                sides=[str(side) for side in feature.edges],
                spot=feature.spot,
                adjacent_spots=list(feature.adjacent_spots),
                completed=feature.completed,
                points=feature.points,
                completed_at=feature.completed_at,
            )
            for feature in game.features.values()
        ]
        row.meeples = [
            orm.Meeple(
                id=int(meeple.id),
                player_id=int(meeple.player_id),
                tile_id=int(meeple.tile_id),
                feature_id=int(meeple.feature_id),
                position=meeple.position,
                placed_at=meeple.placed_at,
                returned=meeple.returned,
                returned_at=meeple.returned_at,
            )
            for meeple in game.meeples.values()
        ]
        return row

    # ------------------------------------------------------------------
    # rows -> domain

    def _from_rows(self, row: orm.Game) -> dm.Game:
        game = dm.Game(
            id=dm.GameID(row.id),
            name=row.name,
            status=GameStatus(row.status),
            created_at=_aware(row.created_at),
            updated_at=_aware(row.updated_at),
            seed=row.seed,
            expansions=list(row.expansions),
            deck=[dm.TileID(tile_id) for tile_id in row.deck],
            remaining_deck_count=row.remaining_cards,
            current_player_id=(
                dm.PlayerID(row.current_player_id) if row.current_player_id is not None else None
            ),
            current_tile_id=(
                dm.TileID(row.current_tile_id) if row.current_tile_id is not None else None
            ),
            last_entity_id=row.last_entity_id,
        )
        for player_row in row.players:
            player = dm.Player(
                id=dm.PlayerID(player_row.id),
                name=player_row.name,
                is_host=player_row.is_host,
                color=player_row.color,
                meeples=player_row.meeples,
                score=player_row.score,
            )
            game.players[player.id] = player
        for tile_row in row.tiles:
            tile = dm.Tile(
                id=dm.TileID(tile_row.id),
                tile_type=tile_row.tile_type,
                edges=[
                    EdgeType(tile_row.north_side),
                    EdgeType(tile_row.east_side),
                    EdgeType(tile_row.south_side),
                    EdgeType(tile_row.west_side),
                ],
                state=TileState(tile_row.state),
                x=tile_row.x,
                y=tile_row.y,
                rotation=tile_row.rotation,
                placed_at=_aware(tile_row.placed_at),
                placed_by=(
                    dm.PlayerID(tile_row.placed_by_player_id)
                    if tile_row.placed_by_player_id is not None
                    else None
                ),
            )
            game.tiles[tile.id] = tile
        for feature_row in row.features:
            feature = dm.Feature(
                id=dm.FeatureID(feature_row.id),
                tile_id=dm.TileID(feature_row.tile_id),
                feature_type=FeatureType(feature_row.feature_type),
                edges=[Direction(side) for side in feature_row.sides],
                spot=feature_row.spot,
                adjacent_spots=list(feature_row.adjacent_spots),
                completed=feature_row.completed,
                points=feature_row.points,
                completed_at=_aware(feature_row.completed_at),
            )
            game.features[feature.id] = feature
            game.tiles[feature.tile_id].feature_ids.append(feature.id)
        for meeple_row in row.meeples:
            meeple = dm.Meeple(
                id=dm.MeepleID(meeple_row.id),
                player_id=dm.PlayerID(meeple_row.player_id),
                tile_id=dm.TileID(meeple_row.tile_id),
                feature_id=dm.FeatureID(meeple_row.feature_id),
                position=meeple_row.position,
                placed_at=_aware(meeple_row.placed_at),
                returned=meeple_row.returned,
                returned_at=_aware(meeple_row.returned_at),
            )
            game.meeples[meeple.id] = meeple
        return game

    # ------------------------------------------------------------------
    # repository interface

    def save(self, game: dm.Game) -> None:
        """Replace every stored row of the game with its current state."""

        with self._session_factory() as session, session.begin():
            existing = session.get(orm.Game, int(game.id))
            if existing is not None:
                session.delete(existing)
                session.flush()
            session.add(self._to_rows(game))

    def load(self, game_id: dm.GameID) -> dm.Game:
        with self._session_factory() as session:
            stmt = (
                select(orm.Game)
                .where(orm.Game.id == int(game_id))
                .options(
                    selectinload(orm.Game.players),
                    selectinload(orm.Game.tiles),
                    selectinload(orm.Game.features),
                    selectinload(orm.Game.meeples),
                )
            )
            row = session.scalars(stmt).one_or_none()
            if row is None:
                raise NotFoundError(f"game {int(game_id)} not found")
            return self._from_rows(row)

    def list_games(self) -> list[dm.GameID]:
        with self._session_factory() as session:
            ids = session.scalars(select(orm.Game.id).order_by(orm.Game.id)).all()
        return [dm.GameID(game_id) for game_id in ids]

    def delete(self, game_id: dm.GameID) -> None:
        with self._session_factory() as session, session.begin():
            session.execute(delete(orm.Meeple).where(orm.Meeple.game_id == int(game_id)))
            session.execute(
                delete(orm.TileFeature).where(orm.TileFeature.game_id == int(game_id))
            )
            session.execute(delete(orm.Tile).where(orm.Tile.game_id == int(game_id)))
            session.execute(delete(orm.Player).where(orm.Player.game_id == int(game_id)))
            session.execute(delete(orm.Game).where(orm.Game.id == int(game_id)))

    def next_identifier(self) -> dm.GameID:
        with self._session_factory() as session:
            highest = session.scalar(select(func.max(orm.Game.id)))
        return dm.GameID((highest or 0) + 1)
