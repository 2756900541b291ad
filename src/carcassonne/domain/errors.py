"""Error taxonomy raised by the rules engine.

Every failure is raised before the aggregate is mutated, so callers can
surface the error and discard the in-memory game without cleanup.
"""

from __future__ import annotations

from .enums import Direction


class RulesError(RuntimeError):
    """Base class for every rejected action."""

    code = "rules_error"

    def __init__(self, detail: str, *, reason: str | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        self.reason = reason


class NotFoundError(RulesError):
    """Raised for an unknown game, player, tile or feature id."""

    code = "not_found"


class InvalidStateError(RulesError):
    """Raised when an action is illegal in the current lifecycle state."""

    code = "invalid_state"


class ForbiddenError(RulesError):
    """Raised for turn-order and host-only violations."""

    code = "forbidden"


class EmptyDeckError(RulesError):
    """Raised when drawing from an exhausted deck."""

    code = "empty_deck"

    def __init__(self, detail: str = "no tiles left in the deck") -> None:
        super().__init__(detail)


class ConfigurationError(RulesError):
    """Raised for unknown expansions or tile types."""

    code = "configuration_error"


class PlacementError(RulesError):
    """Raised when a tile cannot go where it was requested."""

    code = "placement_error"

    OCCUPIED = "occupied"
    NO_ADJACENCY = "no_adjacency"
    EDGE_MISMATCH = "edge_mismatch"
    INVALID_ROTATION = "invalid_rotation"
    TILE_NOT_DRAWN = "tile_not_drawn"

    def __init__(
        self, reason: str, detail: str | None = None, *, direction: Direction | None = None
    ) -> None:
        super().__init__(detail or reason, reason=reason)
        self.direction = direction


class MeepleError(RulesError):
    """Raised when a meeple cannot be placed on the requested feature."""

    code = "meeple_error"

    GAME_NOT_ACTIVE = "game_not_active"
    TILE_NOT_PLACED = "tile_not_placed"
    NO_SUPPLY = "no_supply"
    OCCUPIED = "occupied"
    FEATURE_COMPLETED = "feature_completed"

    def __init__(self, reason: str, detail: str | None = None) -> None:
        super().__init__(detail or reason, reason=reason)
