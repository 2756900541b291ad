"""Meeple placement table."""

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base

if TYPE_CHECKING:
    from .game import Game


class Meeple(Base):
    """A meeple standing on (or returned from) one tile feature."""

    __tablename__ = "meeples"

    game_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    player_id: Mapped[int] = mapped_column(Integer, nullable=False)
    tile_id: Mapped[int] = mapped_column(Integer, nullable=False)
    feature_id: Mapped[int] = mapped_column(Integer, nullable=False)
    position: Mapped[str] = mapped_column(String(20), nullable=False)
    placed_at: Mapped[datetime] = mapped_column(nullable=False)
    returned: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    returned_at: Mapped[datetime | None] = mapped_column(nullable=True)

    game: Mapped["Game"] = relationship("Game", back_populates="meeples")

    def __repr__(self) -> str:
        return f"<Meeple(game_id={self.game_id}, id={self.id}, player_id={self.player_id})>"
