"""Game and player tables.

Every entity id inside a game is allocated by the game itself, so child
tables use ``(game_id, id)`` as their primary key.
"""

from typing import TYPE_CHECKING, Any

from sqlalchemy import JSON, Boolean, CheckConstraint, ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .meeple import Meeple
    from .tile import Tile, TileFeature


class Game(Base, TimestampMixin):
    """Represents a single game of Carcassonne.

    Attributes:
        id: Primary key
        name: Display name
        status: waiting/active/finished
        seed: Seed the default randomness is derived from
        expansions: JSON array of enabled expansion ids
        deck: JSON array of tile ids still in the deck, front first
        remaining_cards: Tiles left in the deck
        current_player_id: Whose turn it is
        current_tile_id: Tile drawn for the current turn
        last_entity_id: High-water mark of ids allocated inside the game
    """

    __tablename__ = "games"

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    seed: Mapped[str] = mapped_column(String(64), nullable=False, default="")
    expansions: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    deck: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    remaining_cards: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    current_player_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    current_tile_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    last_entity_id: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    players: Mapped[list["Player"]] = relationship(
        "Player", back_populates="game", cascade="all, delete-orphan", order_by="Player.id"
    )
    tiles: Mapped[list["Tile"]] = relationship(
        "Tile", back_populates="game", cascade="all, delete-orphan", order_by="Tile.id"
    )
    features: Mapped[list["TileFeature"]] = relationship(
        "TileFeature", cascade="all, delete-orphan", order_by="TileFeature.id"
    )
    meeples: Mapped[list["Meeple"]] = relationship(
        "Meeple", back_populates="game", cascade="all, delete-orphan", order_by="Meeple.id"
    )

    __table_args__ = (
        CheckConstraint(
            "status IN ('waiting', 'active', 'finished')",
            name="ck_games_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Game(id={self.id}, name='{self.name}', status='{self.status}')>"


class Player(Base):
    """A participant, in turn order by id."""

    __tablename__ = "players"

    game_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("games.id", ondelete="CASCADE"), primary_key=True
    )
    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    color: Mapped[str | None] = mapped_column(String(20), nullable=True)
    meeples: Mapped[int] = mapped_column(Integer, nullable=False)
    score: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_host: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    game: Mapped["Game"] = relationship("Game", back_populates="players")

    __table_args__ = (CheckConstraint("meeples >= 0", name="ck_players_meeples"),)

    def __repr__(self) -> str:
        return f"<Player(game_id={self.game_id}, id={self.id}, name='{self.name}')>"
