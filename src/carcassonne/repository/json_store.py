"""JSON-based repository for Carcassonne games."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from pydantic import TypeAdapter

from carcassonne.domain import models as dm
from carcassonne.domain.errors import NotFoundError

logger = logging.getLogger(__name__)


class JsonGameRepository:
    """Persist games as JSON snapshots on disk."""

    def __init__(self, base_path: Path) -> None:
        self.base_path = base_path
        self.base_path.mkdir(parents=True, exist_ok=True)
        self._adapter: TypeAdapter[dm.Game] = TypeAdapter(dm.Game)

    def _path_for(self, game_id: dm.GameID) -> Path:
        return self.base_path / f"game_{int(game_id)}.json"

    def save(self, game: dm.Game) -> Path:
        """Serialize a game to disk and return the snapshot path.

        The snapshot is written to a temporary file first and then moved into
        place, so readers never observe a half written file.
        """

        path = self._path_for(game.id)
        payload = self._adapter.dump_json(game, indent=2)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.stem}.", suffix=".tmp", dir=self.base_path)
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        return path

    def load(self, game_id: dm.GameID) -> dm.Game:
        """Load a previously saved game snapshot."""

        path = self._path_for(game_id)
        try:
            data = path.read_bytes()
        except FileNotFoundError as exc:
            logger.warning("no snapshot for game %s at %s", int(game_id), path)
            raise NotFoundError(f"game {int(game_id)} not found") from exc
        return self._adapter.validate_json(data)

    def list_games(self) -> list[dm.GameID]:
        """Return all game ids currently persisted in the repository."""

        ids: list[dm.GameID] = []
        prefix = "game_"
        suffix = ".json"
        for path in self.base_path.glob("game_*.json"):
            stem = path.name
            if stem.startswith(prefix) and stem.endswith(suffix):
                raw = stem[len(prefix) : -len(suffix)]
                try:
                    ids.append(dm.GameID(int(raw)))
                except ValueError:  # pragma: no cover - ignored malformed file
                    continue
        return sorted(ids, key=int)

    def delete(self, game_id: dm.GameID) -> None:
        """Remove a game snapshot if it exists."""

        path = self._path_for(game_id)
        if path.exists():
            path.unlink()

    def next_identifier(self) -> dm.GameID:
        existing = self.list_games()
        return dm.GameID(int(existing[-1]) + 1 if existing else 1)
