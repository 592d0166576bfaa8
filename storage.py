# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Persistence port for teams and games.

Collections are stored whole: each one is serialised to JSON text and kept
under a fixed key in a key-value store.  Reads load the entire list, writes
replace it.  Missing or unreadable data comes back as an empty list, so a
corrupt store never stops the scorebook from starting.

Usage::

    from storage import FileKeyValueStore, GameStore, RosterStore

    kv = FileKeyValueStore("/tmp/scorebook")   # or MemoryKeyValueStore()
    rosters = RosterStore(kv)
    games = GameStore(kv)

    teams = rosters.get_teams()
    games.put_game(game)                       # replace-or-append, then save
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Generic, Protocol, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from models import Game, Team

logger = logging.getLogger(__name__)

TEAMS_KEY = "baseball-teams"
GAMES_KEY = "baseball-games"

M = TypeVar("M", bound=BaseModel)


class MalformedPersistedState(Exception):
    """A stored collection could not be parsed; callers fall back to empty."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"Malformed data under {key!r}: {reason}")


# ---------------------------------------------------------------------------
# Key-value stores
# ---------------------------------------------------------------------------

class KeyValueStore(Protocol):
    def get(self, key: str) -> str | None: ...

    def set(self, key: str, value: str) -> None: ...

    def remove(self, key: str) -> bool: ...


class MemoryKeyValueStore:
    """Dict-backed store; contents last as long as the object."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self._data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> str | None:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None


class FileKeyValueStore:
    """One file per key inside *root_dir*.

    Writes go through a temporary file followed by a rename, so a reader
    sees either the old text or the new text, never a partial write.

    Args:
        root_dir: Directory holding the files.  Created on first write.
    """

    def __init__(self, root_dir: str | Path) -> None:
        self._root = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root

    def get(self, key: str) -> str | None:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            return path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Could not read %s: %s", path, exc)
            return None

    def set(self, key: str, value: str) -> None:
        path = self._path_for(key)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".tmp")
        tmp_path.write_text(value, encoding="utf-8")
        tmp_path.replace(path)  # atomic rename

    def remove(self, key: str) -> bool:
        path = self._path_for(key)
        if path.exists():
            path.unlink()
            return True
        return False

    def _path_for(self, key: str) -> Path:
        if not key or "/" in key or "\\" in key or ".." in key:
            raise ValueError(f"Invalid storage key: {key!r}")
        return self._root / f"{key}.json"


# ---------------------------------------------------------------------------
# Collection stores
# ---------------------------------------------------------------------------

class CollectionStore(Generic[M]):
    """Whole-list get/set of one model type under a fixed key."""

    def __init__(self, kv: KeyValueStore, key: str, model: type[M]) -> None:
        self._kv = kv
        self._key = key
        self._adapter = TypeAdapter(list[model])

    def decode(self, text: str) -> list[M]:
        """Parse stored text.

        Raises:
            MalformedPersistedState: the text is not a valid JSON list of the model.
        """
        try:
            return self._adapter.validate_json(text)
        except ValidationError as exc:
            raise MalformedPersistedState(self._key, f"{exc.error_count()} validation error(s)") from exc

    def load(self) -> list[M]:
        text = self._kv.get(self._key)
        if text is None:
            return []
        try:
            return self.decode(text)
        except MalformedPersistedState as exc:
            logger.warning("%s; starting from an empty collection", exc)
            return []

    def save(self, items: list[M]) -> None:
        """Write *items* under the key; an empty list removes the key."""
        if not items:
            self._kv.remove(self._key)
            return
        self._kv.set(self._key, self._adapter.dump_json(list(items)).decode("utf-8"))


class RosterStore:
    def __init__(self, kv: KeyValueStore) -> None:
        self._teams = CollectionStore(kv, TEAMS_KEY, Team)

    def get_teams(self) -> list[Team]:
        return self._teams.load()

    def set_teams(self, teams: list[Team]) -> None:
        self._teams.save(teams)


class GameStore:
    def __init__(self, kv: KeyValueStore) -> None:
        self._games = CollectionStore(kv, GAMES_KEY, Game)

    def get_games(self) -> list[Game]:
        return self._games.load()

    def set_games(self, games: list[Game]) -> None:
        self._games.save(games)

    def get_game(self, game_id: str) -> Game | None:
        for g in self.get_games():
            if g.id == game_id:
                return g
        return None

    def put_game(self, game: Game) -> None:
        """Replace the stored game with the same id, or append it."""
        games = self.get_games()
        for i, g in enumerate(games):
            if g.id == game.id:
                games[i] = game
                break
        else:
            games.append(game)
        self.set_games(games)

    def delete_game(self, game_id: str) -> bool:
        games = self.get_games()
        kept = [g for g in games if g.id != game_id]
        if len(kept) == len(games):
            return False
        self.set_games(kept)
        return True
