# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Scorebook session: the surface the UI talks to.

Wraps the pure transitions in ``scorekeeping`` with the load / apply / save
cycle against the roster and game stores.  Each mutating call reads the whole
collection, swaps in the new snapshot and writes the collection back; if the
transition raises, nothing is written.

The previous snapshot of every changed game is kept in memory so the last
entries can be undone during the session.
"""

from __future__ import annotations

import logging
import uuid
from typing import Callable, Iterable

import scorekeeping
from box_score import BoxScore, derive_box_score
from errors import GameNotFound, NothingToUndo, ScorekeepingError, TeamNotFound, UnknownPlayer
from models import (
    AtBatResult,
    BattedBallDirection,
    Game,
    LineupSlot,
    Player,
    PlayerRole,
    PlayType,
    Position,
    Team,
    find_team,
)
from storage import GameStore, KeyValueStore, RosterStore

logger = logging.getLogger(__name__)

DEFAULT_HISTORY_LIMIT = 50


class Scorebook:
    """Teams, games and the transitions between game snapshots.

    Args:
        rosters: Store holding the ``Team`` collection.
        games: Store holding the ``Game`` collection.
        history_limit: Number of prior snapshots kept per game for undo.
    """

    def __init__(self, rosters: RosterStore, games: GameStore,
                 history_limit: int = DEFAULT_HISTORY_LIMIT) -> None:
        self._rosters = rosters
        self._games = games
        self._history_limit = history_limit
        self._history: dict[str, list[Game]] = {}

    @classmethod
    def from_store(cls, kv: KeyValueStore, **kwargs) -> Scorebook:
        return cls(RosterStore(kv), GameStore(kv), **kwargs)

    # -- teams --------------------------------------------------------------

    def teams(self) -> list[Team]:
        return self._rosters.get_teams()

    def get_team(self, team_id: str) -> Team:
        team = find_team(self.teams(), team_id)
        if team is None:
            raise TeamNotFound(f"Team {team_id!r} not found")
        return team

    def add_team(self, name: str) -> Team:
        team = Team(id=uuid.uuid4().hex[:12], name=name)
        self._rosters.set_teams([*self.teams(), team])
        logger.info("Added team %s (%s)", team.name, team.id)
        return team

    def remove_team(self, team_id: str) -> None:
        teams = self.teams()
        kept = [t for t in teams if t.id != team_id]
        if len(kept) == len(teams):
            raise TeamNotFound(f"Team {team_id!r} not found")
        self._rosters.set_teams(kept)

    def add_player(self, team_id: str, name: str, number: str = "",
                   positions: Iterable[Position | str] = (),
                   role: PlayerRole | str = PlayerRole.BATTER) -> Player:
        team = self.get_team(team_id)
        player = Player(
            id=uuid.uuid4().hex[:12],
            name=name,
            number=number,
            positions=tuple(Position(p) for p in positions),
            role=PlayerRole(role),
        )
        self._replace_team(team.model_copy(update={"players": team.players + (player,)}))
        return player

    def remove_player(self, team_id: str, player_id: str) -> None:
        team = self.get_team(team_id)
        players = tuple(p for p in team.players if p.id != player_id)
        if len(players) == len(team.players):
            raise UnknownPlayer(f"{player_id!r} is not on {team.name}")
        self._replace_team(team.model_copy(update={"players": players}))

    def _replace_team(self, team: Team) -> None:
        self._rosters.set_teams([team if t.id == team.id else t for t in self.teams()])

    # -- games --------------------------------------------------------------

    def games(self) -> list[Game]:
        return self._games.get_games()

    def get_game(self, game_id: str) -> Game:
        game = self._games.get_game(game_id)
        if game is None:
            raise GameNotFound(f"Game {game_id!r} not found")
        return game

    def start_game(self, home_team_id: str, away_team_id: str,
                   home_pitcher_id: str, away_pitcher_id: str,
                   home_lineup: Iterable[LineupSlot | dict],
                   away_lineup: Iterable[LineupSlot | dict]) -> Game:
        game = scorekeeping.new_game(
            self.get_team(home_team_id),
            self.get_team(away_team_id),
            home_pitcher_id,
            away_pitcher_id,
            home_lineup,
            away_lineup,
        )
        self._games.put_game(game)
        logger.info("Started game %s", game.id)
        return game

    def delete_game(self, game_id: str) -> None:
        if not self._games.delete_game(game_id):
            raise GameNotFound(f"Game {game_id!r} not found")
        self._history.pop(game_id, None)

    def record_at_bat(self, game_id: str, result: AtBatResult | str,
                      direction: BattedBallDirection | str | None = None, rbi: int = 0) -> Game:
        teams = self.teams()
        return self._apply(game_id, lambda g: scorekeeping.record_at_bat(g, teams, result, direction, rbi))

    def record_play(self, game_id: str, play_type: PlayType | str,
                    runner_id: str | None = None, to_base: int | None = None) -> Game:
        return self._apply(game_id, lambda g: scorekeeping.record_play(g, play_type, runner_id, to_base))

    def change_pitcher(self, game_id: str, pitcher_id: str) -> Game:
        teams = self.teams()
        return self._apply(game_id, lambda g: scorekeeping.change_pitcher(g, teams, pitcher_id))

    def end_game(self, game_id: str) -> Game:
        return self._apply(game_id, scorekeeping.end_game)

    def undo(self, game_id: str) -> Game:
        """Restore the snapshot from before the last change made in this session."""
        self.get_game(game_id)
        history = self._history.get(game_id)
        if not history:
            raise NothingToUndo(f"Nothing to undo for game {game_id!r}")
        previous = history.pop()
        self._games.put_game(previous)
        logger.info("Game %s: undid last change", game_id)
        return previous

    # -- queries ------------------------------------------------------------

    def current_batter(self, game_id: str) -> Player | None:
        return scorekeeping.current_batter(self.get_game(game_id), self.teams())

    def current_pitcher(self, game_id: str) -> Player | None:
        return scorekeeping.current_pitcher(self.get_game(game_id), self.teams())

    def box_score(self, game_id: str) -> BoxScore:
        return derive_box_score(self.get_game(game_id), self.teams())

    # -- helpers ------------------------------------------------------------

    def _apply(self, game_id: str, transition: Callable[[Game], Game]) -> Game:
        game = self.get_game(game_id)
        try:
            updated = transition(game)
        except ScorekeepingError as exc:
            logger.info("Game %s: %s: %s", game_id, exc.error_code, exc.message)
            raise
        if updated is game:
            return game

        history = self._history.setdefault(game_id, [])
        history.append(game)
        del history[:max(len(history) - self._history_limit, 0)]
        self._games.put_game(updated)
        return updated
