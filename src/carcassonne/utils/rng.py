"""Deterministic random number generation for Carcassonne games.

All randomness is seeded from game state (game seed + context) so that:
- Reproducibility: the same seed always shuffles the deck the same way
- Bug reproduction: a stored game can be replayed exactly
- Testability: callers may inject their own shuffle functions instead

Examples:
    >>> seed = generate_seed("a1b2c3", "deck")
    >>> shuffled(seed, [1, 2, 3]) == shuffled(seed, [1, 2, 3])
    True
"""

from __future__ import annotations

import hashlib
import random
import secrets
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TypeVar

T = TypeVar("T")


def new_game_seed() -> str:
    """Fresh, unpredictable seed stored on a game when it is created."""

    return secrets.token_hex(8)


def generate_seed(game_seed: str, context: str) -> str:
    """Generate a deterministic seed for one random decision.

    Format: "game_seed:context"

    Args:
        game_seed: Seed stored on the game
        context: What the randomness is for (e.g., 'deck', 'colors')

    Returns:
        Seed string

    Raises:
        ValueError: If context is empty
    """
    if not context:
        raise ValueError("context must be non-empty")
    return f"{game_seed}:{context}"


def _seed_to_int(seed: str) -> int:
    """Convert seed string to a stable 64-bit integer for random.Random()."""
    digest = hashlib.sha256(seed.encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big", signed=False)


def shuffled(seed: str, items: Sequence[T]) -> list[T]:
    """Return a uniformly shuffled copy of ``items`` (Fisher-Yates via random.shuffle)."""

    result = list(items)
    random.Random(_seed_to_int(seed)).shuffle(result)
    return result


@dataclass(frozen=True, slots=True)
class Randomness:
    """Injectable randomness source used when starting a game.

    ``shuffle`` orders the deck; ``permute_colors`` orders the colour palette
    before colours are dealt to players in turn order.
    """

    shuffle: Callable[[list], list]
    permute_colors: Callable[[list[str]], list[str]]

    @classmethod
    def seeded(cls, game_seed: str) -> Randomness:
        """Randomness derived deterministically from a game's seed."""

        return cls(
            shuffle=lambda items: shuffled(generate_seed(game_seed, "deck"), items),
            permute_colors=lambda colors: shuffled(generate_seed(game_seed, "colors"), colors),
        )

    @classmethod
    def identity(cls) -> Randomness:
        """No shuffling at all; useful for tests that need a known deck order."""

        return cls(shuffle=list, permute_colors=list)
