"""Persistence adapters for Carcassonne games."""

from carcassonne.repository.base import GameRepository
from carcassonne.repository.json_store import JsonGameRepository
from carcassonne.repository.sql_store import SqlGameRepository

__all__ = [
    "GameRepository",
    "JsonGameRepository",
    "SqlGameRepository",
]
