"""Tile and tile feature tables."""

from datetime import datetime
from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .game import Game


class Tile(Base):
    """One physical tile of a game, in the deck or on the board.

    The four side columns hold the printed (unrotated) edge types.
    """

    __tablename__ = "tiles"

    game_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tile_type: Mapped[str] = mapped_column(String(50), nullable=False)
    state: Mapped[str] = mapped_column(String(20), nullable=False)
    x: Mapped[int | None] = mapped_column(Integer, nullable=True)
    y: Mapped[int | None] = mapped_column(Integer, nullable=True)
    rotation: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    north_side: Mapped[str] = mapped_column(String(20), nullable=False)
    east_side: Mapped[str] = mapped_column(String(20), nullable=False)
    south_side: Mapped[str] = mapped_column(String(20), nullable=False)
    west_side: Mapped[str] = mapped_column(String(20), nullable=False)
    is_placed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    placed_at: Mapped[datetime | None] = mapped_column(nullable=True)
    placed_by_player_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    game: Mapped["Game"] = relationship("Game", back_populates="tiles")

    __table_args__ = (
        CheckConstraint("rotation IN (0, 90, 180, 270)", name="ck_tiles_rotation"),
        CheckConstraint(
            "state IN ('in_deck', 'drawn', 'placed', 'discarded')",
            name="ck_tiles_state",
        ),
    )

    def __repr__(self) -> str:
        return f"<Tile(game_id={self.game_id}, id={self.id}, type='{self.tile_type}')>"


class TileFeature(Base):
    """A city, road, monastery or field printed on a tile."""

    __tablename__ = "tile_features"

    game_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    tile_id: Mapped[int] = mapped_column(Integer, nullable=False)
    feature_type: Mapped[str] = mapped_column(String(20), nullable=False)
    sides: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    spot: Mapped[str] = mapped_column(String(20), nullable=False)
    adjacent_spots: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    points: Mapped[int | None] = mapped_column(Integer, nullable=True)
    completed_at: Mapped[datetime | None] = mapped_column(nullable=True)

    def __repr__(self) -> str:
        return f"<TileFeature(game_id={self.game_id}, id={self.id}, type='{self.feature_type}')>"
