# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Scorekeeping state machine.

Owns the rules that move a game forward one recorded event at a time:
half-inning progression, out and run bookkeeping, runner advancement and
the batting-order pointer.  Every transition is a pure function from
``(game, input)`` to a new ``Game``; the input snapshot is never touched and
a transition that fails raises before building anything.

Scoring model:
  - Only a home run changes the score (one run); it clears the bases.
  - Singles, doubles and triples move each runner up one base, capped at
    third, then put the batter on base.  Runners never pass each other, so a
    runner pushed beyond third leaves the bases without a run credited.
  - Walks, hit-by-pitch, sacrifices, errors and fielder's choices use up a
    plate appearance but move no runners and add no outs.
  - The third out ends the half-inning in the same transition.
"""

from __future__ import annotations

import logging
import time
import uuid
from typing import Any, Iterable

from errors import (
    BaseOccupied,
    GameComplete,
    InvalidGameSetup,
    InvalidLineup,
    NoBatterRegistered,
    RunnerNotSelected,
    UnknownPlayer,
)
from models import (
    HOME_PLATE,
    AtBat,
    AtBatResult,
    BattedBallDirection,
    Game,
    LineupSlot,
    Lineups,
    Play,
    Player,
    PlayType,
    Position,
    Runner,
    Team,
    find_team,
)

logger = logging.getLogger(__name__)

OUTS_PER_HALF_INNING = 3
MIN_LINEUP_SIZE = 9


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _new_id() -> str:
    return uuid.uuid4().hex[:12]


def _timestamp(now: float | None) -> float:
    return time.time() if now is None else now


def _replace(game: Game, **changes: Any) -> Game:
    """Build a validated copy of *game* with *changes* applied."""
    return Game.model_validate({**dict(game), **changes})


def _ensure_in_progress(game: Game) -> None:
    if game.is_complete:
        raise GameComplete(f"Game {game.id} is complete; no further at-bats or plays can be recorded")


def _sorted_runners(runners: Iterable[Runner]) -> tuple[Runner, ...]:
    return tuple(sorted(runners, key=lambda r: r.base))


def _half_inning_changes(game: Game, outs: int, runners: tuple[Runner, ...]) -> dict[str, Any]:
    """Outs/runners/inning fields after an event that left *outs* outs.

    On the third out the bases are cleared, the batting side flips, and the
    inning number moves on only when the bottom half has just ended.
    """
    if outs < OUTS_PER_HALF_INNING:
        return {"outs": outs, "runners": runners}

    next_inning = game.current_inning if game.is_top_inning else game.current_inning + 1
    logger.debug(
        "Game %s: %s %d over, %d runner(s) left on base",
        game.id, "top" if game.is_top_inning else "bottom", game.current_inning, len(runners),
    )
    return {
        "outs": 0,
        "runners": (),
        "is_top_inning": not game.is_top_inning,
        "current_inning": next_inning,
    }


def _advance_on_hit(runners: tuple[Runner, ...], batter_id: str,
                    batter_base: int) -> tuple[tuple[Runner, ...], list[str]]:
    """Move every runner up one base (capped at third) and put the batter on.

    Runners are placed from the batter outward; a runner whose capped base is
    already taken by the batter or a trailing runner is pushed one base
    further.  A stale entry for the batter (left on base from an earlier
    plate appearance in the same half-inning) is replaced by the new one.  Returns ``(new_runners, ids_pushed_off_the_bases)``.
    """
    placed = [Runner(player_id=batter_id, base=batter_base)]
    pushed_off: list[str] = []
    last_base = batter_base
    for runner in _sorted_runners(r for r in runners if r.player_id != batter_id):
        target = max(min(runner.base + 1, 3), last_base + 1)
        if target > 3:
            pushed_off.append(runner.player_id)
            continue
        placed.append(Runner(player_id=runner.player_id, base=target))
        last_base = target
    return _sorted_runners(placed), pushed_off


# ---------------------------------------------------------------------------
# Queries
# ---------------------------------------------------------------------------

def _lineup_player(game: Game, teams: list[Team], offset: int) -> Player | None:
    side = game.batting_side
    team = find_team(teams, game.team_id(side))
    lineup = game.lineup_for(side)
    if team is None or not lineup:
        return None
    slot = lineup[(game.current_batter_index.get(side) + offset) % len(lineup)]
    return team.get_player(slot.player_id)


def current_batter(game: Game, teams: list[Team]) -> Player | None:
    """Return the player due up for the batting side, or ``None`` if unresolved."""
    return _lineup_player(game, teams, 0)


def on_deck_batter(game: Game, teams: list[Team]) -> Player | None:
    return _lineup_player(game, teams, 1)


def current_pitcher(game: Game, teams: list[Team]) -> Player | None:
    """Return the fielding side's pitcher, or ``None`` if unresolved."""
    team = find_team(teams, game.fielding_team_id)
    if team is None:
        return None
    return team.get_player(game.current_pitcher_id)


# ---------------------------------------------------------------------------
# Game setup
# ---------------------------------------------------------------------------

def validate_lineup(team: Team, lineup: Iterable[LineupSlot | dict]) -> tuple[LineupSlot, ...]:
    """Check a batting order against *team* and return it as LineupSlots.

    Raises:
        InvalidLineup: fewer than nine slots, a player from another team, the
            same player twice, or the same position twice (other than DH).
    """
    slots = tuple(LineupSlot.model_validate(s) for s in lineup)
    if len(slots) < MIN_LINEUP_SIZE:
        raise InvalidLineup(
            f"{team.name}: lineup needs at least {MIN_LINEUP_SIZE} batters, got {len(slots)}"
        )

    unknown = [s.player_id for s in slots if team.get_player(s.player_id) is None]
    if unknown:
        raise InvalidLineup(f"{team.name}: players not on the roster: {', '.join(unknown)}")

    player_ids = [s.player_id for s in slots]
    if len(set(player_ids)) != len(player_ids):
        raise InvalidLineup(f"{team.name}: the same player appears more than once in the lineup")

    positions = [s.position for s in slots if s.position is not Position.DESIGNATED_HITTER]
    if len(set(positions)) != len(positions):
        raise InvalidLineup(
            f"{team.name}: the same position (other than DH) appears more than once in the lineup"
        )
    return slots


def _validate_starting_pitcher(team: Team, pitcher_id: str) -> None:
    pitcher = team.get_player(pitcher_id)
    if pitcher is None:
        raise InvalidGameSetup(f"{team.name}: starting pitcher {pitcher_id!r} is not on the roster")
    if not pitcher.can_pitch:
        raise InvalidGameSetup(f"{team.name}: {pitcher.name} is not registered as a pitcher")


def new_game(home_team: Team, away_team: Team,
             home_pitcher_id: str, away_pitcher_id: str,
             home_lineup: Iterable[LineupSlot | dict],
             away_lineup: Iterable[LineupSlot | dict],
             *, game_id: str | None = None, now: float | None = None) -> Game:
    """Create a game in the top of the 1st with no outs, runners or records.

    Args:
        home_team: Team batting in the bottom half.
        away_team: Team batting in the top half.
        home_pitcher_id: Starting pitcher for the home side.
        away_pitcher_id: Starting pitcher for the away side.
        home_lineup: Home batting order.
        away_lineup: Away batting order.
        game_id: Optional explicit id (a random one is generated otherwise).
        now: Optional start timestamp (seconds since the epoch).
    """
    if home_team.id == away_team.id:
        raise InvalidGameSetup("Home and away must be different teams")
    _validate_starting_pitcher(home_team, home_pitcher_id)
    _validate_starting_pitcher(away_team, away_pitcher_id)

    game = Game(
        id=game_id or _new_id(),
        home_team_id=home_team.id,
        away_team_id=away_team.id,
        home_pitcher_id=home_pitcher_id,
        away_pitcher_id=away_pitcher_id,
        lineup=Lineups(
            home=validate_lineup(home_team, home_lineup),
            away=validate_lineup(away_team, away_lineup),
        ),
        start_time=_timestamp(now),
    )
    logger.debug("Game %s created: %s at %s", game.id, away_team.name, home_team.name)
    return game


# ---------------------------------------------------------------------------
# Transitions
# ---------------------------------------------------------------------------

def record_at_bat(game: Game, teams: list[Team], result: AtBatResult | str,
                  direction: BattedBallDirection | str | None = None,
                  rbi: int = 0, *, now: float | None = None) -> Game:
    """Record one plate appearance for the batter due up.

    Raises:
        GameComplete: the game has already ended.
        NoBatterRegistered: the lineup slot resolves to no player.
    """
    result = AtBatResult(result)
    if direction is not None:
        direction = BattedBallDirection(direction)
    _ensure_in_progress(game)

    batter = current_batter(game, teams)
    side = game.batting_side
    if batter is None:
        raise NoBatterRegistered(
            f"No batter registered for the {side.value} lineup slot "
            f"{game.current_batter_index.get(side) + 1}"
        )

    at_bat = AtBat(
        id=_new_id(),
        sequence=game.next_sequence,
        batter_id=batter.id,
        pitcher_id=game.current_pitcher_id,
        result=result,
        direction=direction,
        rbi=rbi,
        inning=game.current_inning,
        outs=game.outs,
        is_top_inning=game.is_top_inning,
        timestamp=_timestamp(now),
    )

    outs = game.outs + (1 if result.is_out else 0)
    score = game.score(side)
    runners = game.runners
    if result.is_home_run:
        score += 1
        runners = ()
    elif result.bases_awarded:
        runners, pushed_off = _advance_on_hit(runners, batter.id, result.bases_awarded)
        if pushed_off:
            logger.debug("Game %s: %s pushed off the bases without scoring", game.id, pushed_off)

    lineup_size = len(game.lineup_for(side))
    next_index = (game.current_batter_index.get(side) + 1) % lineup_size

    changes: dict[str, Any] = {
        "at_bats": game.at_bats + (at_bat,),
        f"{side.value}_score": score,
        "current_batter_index": game.current_batter_index.with_value(side, next_index),
    }
    changes.update(_half_inning_changes(game, outs, runners))
    logger.debug("Game %s: %s %s (rbi %d)", game.id, batter.name, result.value, rbi)
    return _replace(game, **changes)


def record_play(game: Game, play_type: PlayType | str, runner_id: str | None = None,
                to_base: int | None = None, *, now: float | None = None) -> Game:
    """Record a baserunning play.

    Out plays remove the runner and add an out.  Steals and advances with a
    ``to_base`` set the runner's base to ``to_base - 1``; ``to_base`` 4 (home)
    takes the runner off the bases.  Balks, wild pitches and passed balls are
    logged only.

    Raises:
        GameComplete: the game has already ended.
        RunnerNotSelected: the play needs a runner and none on base was given.
        BaseOccupied: another runner already holds the destination base.
    """
    play_type = PlayType(play_type)
    _ensure_in_progress(game)

    runner = game.runner_for(runner_id) if runner_id else None
    if play_type.requires_runner and runner is None:
        raise RunnerNotSelected(
            f"{play_type.value} needs a runner on base"
            + (f"; {runner_id!r} is not on base" if runner_id else "")
        )

    play = Play(
        id=_new_id(),
        sequence=game.next_sequence,
        type=play_type,
        player_id=runner_id,
        pitcher_id=game.current_pitcher_id,
        inning=game.current_inning,
        outs=game.outs,
        is_top_inning=game.is_top_inning,
        timestamp=_timestamp(now),
        from_base=runner.base if runner else None,
        to_base=to_base,
    )

    outs = game.outs
    runners = game.runners
    if play_type.is_out:
        outs += 1
        runners = tuple(r for r in runners if r.player_id != runner.player_id)
    elif play_type.is_advance and to_base is not None:
        others = tuple(r for r in runners if r.player_id != runner.player_id)
        if to_base == HOME_PLATE:
            runners = others
        else:
            new_base = to_base - 1
            if any(r.base == new_base for r in others):
                raise BaseOccupied(f"Base {new_base} is already occupied")
            runners = _sorted_runners(others + (Runner(player_id=runner.player_id, base=new_base),))

    changes: dict[str, Any] = {"plays": game.plays + (play,)}
    changes.update(_half_inning_changes(game, outs, runners))
    logger.debug("Game %s: play %s runner=%s to_base=%s", game.id, play_type.value, runner_id, to_base)
    return _replace(game, **changes)


def change_pitcher(game: Game, teams: list[Team], pitcher_id: str) -> Game:
    """Put *pitcher_id* on the mound for the fielding side.

    Raises:
        GameComplete: the game has already ended.
        UnknownPlayer: the player is not a pitcher on the fielding team.
    """
    _ensure_in_progress(game)
    side = game.fielding_side
    team = find_team(teams, game.team_id(side))
    pitcher = team.get_player(pitcher_id) if team else None
    if pitcher is None:
        raise UnknownPlayer(f"{pitcher_id!r} is not on the {side.value} roster")
    if not pitcher.can_pitch:
        raise UnknownPlayer(f"{pitcher.name} is not registered as a pitcher")
    logger.debug("Game %s: %s pitcher is now %s", game.id, side.value, pitcher.name)
    return _replace(game, **{f"{side.value}_pitcher_id": pitcher_id})


def end_game(game: Game, *, now: float | None = None) -> Game:
    """Stamp the end time and mark the game complete (no-op if already complete)."""
    if game.is_complete:
        return game
    logger.debug("Game %s final: %s", game.id, game.score_display())
    return _replace(game, end_time=_timestamp(now), is_complete=True)
