"""Draw pile for a single game."""

from __future__ import annotations

from collections.abc import Callable, Iterable

from .catalog import deck_composition, get_tile_type
from .enums import TileState
from .errors import EmptyDeckError
from .models import Feature, FeatureID, Game, Tile, TileID

Shuffle = Callable[[list[TileID]], list[TileID]]


def create_tile(game: Game, tile_type: str) -> Tile:
    """Instantiate a tile and its features inside the game's arena."""

    spec = get_tile_type(tile_type)
    tile = Tile(id=TileID(game.allocate_id()), tile_type=spec.tag, edges=list(spec.edges))
    for feature_spec in spec.features:
        feature = Feature(
            id=FeatureID(game.allocate_id()),
            tile_id=tile.id,
            feature_type=feature_spec.feature_type,
            edges=list(feature_spec.edges),
            spot=feature_spec.spot,
            adjacent_spots=list(feature_spec.adjacent_spots),
        )
        game.features[feature.id] = feature
        tile.feature_ids.append(feature.id)
    game.tiles[tile.id] = tile
    return tile


class Deck:
    """View over ``game.deck``; the game owns the draw order and the count."""

    def __init__(self, game: Game) -> None:
        self._game = game

    @classmethod
    def build(cls, game: Game, expansions: Iterable[str], *, shuffle: Shuffle) -> Deck:
        """Create one tile per catalog quantity and store them in shuffled order.

        Raises:
            ConfigurationError: if an expansion id is unknown (nothing is created).
        """

        composition = deck_composition(expansions)
        tile_ids: list[TileID] = []
        for tag, count in composition.items():
            for _ in range(count):
                tile_ids.append(create_tile(game, tag).id)

        game.deck = list(shuffle(tile_ids))
        game.remaining_deck_count = len(game.deck)
        return cls(game)

    def draw(self) -> Tile:
        """Remove and return the tile at the front of the pile."""

        if not self._game.deck:
            raise EmptyDeckError()
        tile = self._game.tiles[self._game.deck.pop(0)]
        tile.state = TileState.DRAWN
        self._game.remaining_deck_count -= 1
        return tile

    def remaining(self) -> int:
        return self._game.remaining_deck_count

    def __len__(self) -> int:
        return len(self._game.deck)
