"""Utility functions for the Carcassonne package."""

from carcassonne.utils.rng import Randomness, generate_seed, new_game_seed, shuffled

__all__ = [
    "Randomness",
    "generate_seed",
    "new_game_seed",
    "shuffled",
]
