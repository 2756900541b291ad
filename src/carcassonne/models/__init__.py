"""SQLAlchemy models for the Carcassonne database schema."""

from .base import Base, TimestampMixin
from .game import Game, Player
from .meeple import Meeple
from .tile import Tile, TileFeature

__all__ = [
    "Base",
    "Game",
    "Meeple",
    "Player",
    "Tile",
    "TileFeature",
    "TimestampMixin",
]
