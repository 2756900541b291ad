"""Domain model and rules for Carcassonne games.

This package hosts every game rule in one place.  It exposes:

* Dataclasses describing the game aggregate (see :mod:`models`).
* Enumerations and strongly-typed identifiers used across the rules layer.
* Rule configuration objects (see :mod:`rules_config`).
* Pure rule functions operating on the in-memory aggregate, which is
  persisted through a thin repository adapter.
"""

from . import (
    board,
    catalog,
    deck,
    enums,
    errors,
    features,
    lifecycle,
    meeples,
    models,
    rules_config,
    scoring,
)

__all__ = [
    "board",
    "catalog",
    "deck",
    "enums",
    "errors",
    "features",
    "lifecycle",
    "meeples",
    "models",
    "rules_config",
    "scoring",
]
