"""Game Repository Protocol Interface.

This module defines the contract every persistence adapter fulfils so the
service layer can load and save games without knowing where they live.
"""

from typing import Protocol

from carcassonne.domain import models as dm


class GameRepository(Protocol):
    """Protocol for storing whole game aggregates."""

    def save(self, game: dm.Game) -> None:
        """Persist the full aggregate, replacing any previous version."""
        ...

    def load(self, game_id: dm.GameID) -> dm.Game:
        """Load a game.

        Raises:
            NotFoundError: If no game with this id was saved
        """
        ...

    def list_games(self) -> list[dm.GameID]:
        """Ids of every stored game, ascending."""
        ...

    def delete(self, game_id: dm.GameID) -> None:
        """Remove a game if it exists."""
        ...

    def next_identifier(self) -> dm.GameID:
        """An id not used by any stored game."""
        ...
