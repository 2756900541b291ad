"""Declarative rule configuration for the Carcassonne domain."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class LobbyRules:
    """Player count and colour constraints."""

    min_players: int = 2
    palette: tuple[str, ...] = ("red", "blue", "green", "yellow", "black", "purple")

    @property
    def max_players(self) -> int:
        return len(self.palette)


@dataclass(frozen=True, slots=True)
class MeepleRules:
    """Worker supply constants."""

    supply_per_player: int = 7


@dataclass(frozen=True, slots=True)
class ScoringRules:
    """Point values for completed and unfinished features."""

    city_points_per_tile: int = 2
    road_points_per_tile: int = 1
    monastery_points_per_tile: int = 1
    monastery_neighbourhood: int = 8  # surrounding cells
    final_city_points_per_tile: int = 1
    final_road_points_per_tile: int = 1
    final_monastery_points_per_tile: int = 1
    field_points_per_city: int = 3


@dataclass(frozen=True, slots=True)
class BoardRules:
    """Placement constants."""

    origin: tuple[int, int] = (0, 0)
    start_rotation: int = 0


@dataclass(frozen=True, slots=True)
class RulesConfig:
    """Top-level configuration container for all subsystems."""

    lobby: LobbyRules = LobbyRules()
    meeples: MeepleRules = MeepleRules()
    scoring: ScoringRules = ScoringRules()
    board: BoardRules = BoardRules()


DEFAULT_RULES = RulesConfig()
