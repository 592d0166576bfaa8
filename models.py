# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Data models for the baseball scorebook.

Every model is frozen and every sequence is a tuple, so a ``Game`` is an
immutable snapshot: transitions in ``scorekeeping`` build a new one instead
of editing the old one in place.

Enum values are the labels written in the scorebook, so persisted games and
API payloads carry the same strings a scorer would write by hand.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class Side(str, Enum):
    HOME = "home"
    AWAY = "away"

    @property
    def opponent(self) -> Side:
        return Side.AWAY if self is Side.HOME else Side.HOME


class PlayerRole(str, Enum):
    PITCHER = "pitcher"
    BATTER = "batter"
    BOTH = "both"


class Position(str, Enum):
    PITCHER = "投"
    CATCHER = "捕"
    FIRST_BASE = "一"
    SECOND_BASE = "二"
    THIRD_BASE = "三"
    SHORTSTOP = "遊"
    LEFT_FIELD = "左"
    CENTER_FIELD = "中"
    RIGHT_FIELD = "右"
    DESIGNATED_HITTER = "指"


class BattedBallDirection(str, Enum):
    PITCHER = "ピッチャー"
    CATCHER = "キャッチャー"
    FIRST = "ファースト"
    SECOND = "セカンド"
    THIRD = "サード"
    SHORT = "ショート"
    LEFT = "レフト"
    CENTER = "センター"
    RIGHT = "ライト"


class AtBatResult(str, Enum):
    SINGLE = "安打"
    DOUBLE = "二塁打"
    TRIPLE = "三塁打"
    HOME_RUN = "本塁打"
    WALK = "四球"
    HIT_BY_PITCH = "死球"
    SACRIFICE_BUNT = "犠打"
    SACRIFICE_FLY = "犠飛"
    ERROR = "失策"
    FIELDERS_CHOICE = "フィールダーチョイス"
    STRIKEOUT = "三振"
    GROUNDOUT = "ゴロアウト"
    FLYOUT = "フライアウト"
    LINEOUT = "ライナーアウト"
    DOUBLE_PLAY = "併殺打"
    TRIPLE_PLAY = "三重殺"

    @property
    def is_out(self) -> bool:
        return self in _OUT_RESULTS

    @property
    def is_hit(self) -> bool:
        return self in _HIT_BASES

    @property
    def is_home_run(self) -> bool:
        return self is AtBatResult.HOME_RUN

    @property
    def bases_awarded(self) -> int:
        """Base the batter stops at on a single, double or triple (0 otherwise)."""
        return _HIT_BASES.get(self, 0)

    @property
    def is_walk(self) -> bool:
        return self in (AtBatResult.WALK, AtBatResult.HIT_BY_PITCH)

    @property
    def is_sacrifice(self) -> bool:
        return self in (AtBatResult.SACRIFICE_BUNT, AtBatResult.SACRIFICE_FLY)

    @property
    def is_error(self) -> bool:
        return self is AtBatResult.ERROR

    @property
    def counts_as_at_bat(self) -> bool:
        return not (self.is_walk or self.is_sacrifice)


_OUT_RESULTS = frozenset({
    AtBatResult.STRIKEOUT,
    AtBatResult.GROUNDOUT,
    AtBatResult.FLYOUT,
    AtBatResult.LINEOUT,
    AtBatResult.DOUBLE_PLAY,
    AtBatResult.TRIPLE_PLAY,
})

# Home run is a hit but never leaves the batter on base.
_HIT_BASES = {
    AtBatResult.SINGLE: 1,
    AtBatResult.DOUBLE: 2,
    AtBatResult.TRIPLE: 3,
    AtBatResult.HOME_RUN: 0,
}


class PlayType(str, Enum):
    STEAL = "盗塁"
    CAUGHT_STEALING = "盗塁死"
    ADVANCE = "進塁"
    ADVANCE_OUT = "進塁死"
    BALK = "ボーク"
    WILD_PITCH = "暴投"
    PASSED_BALL = "捕逸"
    BASERUNNING_OUT = "走塁死"

    @property
    def is_out(self) -> bool:
        return self in (PlayType.CAUGHT_STEALING, PlayType.ADVANCE_OUT, PlayType.BASERUNNING_OUT)

    @property
    def is_advance(self) -> bool:
        return self in (PlayType.STEAL, PlayType.ADVANCE)

    @property
    def requires_runner(self) -> bool:
        return self.is_out or self.is_advance


HOME_PLATE = 4


# ---------------------------------------------------------------------------
# Roster models
# ---------------------------------------------------------------------------

class Player(BaseModel):
    """A rostered player. Identity is ``id``; everything else may be edited."""
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    number: str = ""
    positions: tuple[Position, ...] = ()
    role: PlayerRole = PlayerRole.BATTER

    @property
    def can_pitch(self) -> bool:
        return self.role in (PlayerRole.PITCHER, PlayerRole.BOTH)


class Team(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(min_length=1)
    name: str = Field(min_length=1)
    players: tuple[Player, ...] = ()

    def get_player(self, player_id: str) -> Player | None:
        for p in self.players:
            if p.id == player_id:
                return p
        return None


def find_team(teams: list[Team], team_id: str) -> Team | None:
    for t in teams:
        if t.id == team_id:
            return t
    return None


# ---------------------------------------------------------------------------
# In-game records
# ---------------------------------------------------------------------------

class LineupSlot(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str = Field(min_length=1)
    position: Position


class Runner(BaseModel):
    model_config = ConfigDict(frozen=True)

    player_id: str
    base: int = Field(ge=1, le=3)


class AtBat(BaseModel):
    """One plate appearance. Never edited once appended to the game log."""
    model_config = ConfigDict(frozen=True)

    id: str
    sequence: int = Field(ge=1, description="Position in the game's combined at-bat/play order")
    batter_id: str
    pitcher_id: str
    result: AtBatResult
    direction: Optional[BattedBallDirection] = None
    rbi: int = Field(default=0, ge=0)
    inning: int = Field(ge=1)
    outs: int = Field(ge=0, le=2, description="Outs when the plate appearance began")
    is_top_inning: bool
    timestamp: float


class Play(BaseModel):
    """A baserunning event recorded between plate appearances."""
    model_config = ConfigDict(frozen=True)

    id: str
    sequence: int = Field(ge=1)
    type: PlayType
    player_id: Optional[str] = None
    pitcher_id: str
    inning: int = Field(ge=1)
    outs: int = Field(ge=0, le=2)
    is_top_inning: bool
    timestamp: float
    from_base: Optional[int] = Field(default=None, ge=1, le=3)
    to_base: Optional[int] = Field(default=None, ge=2, le=HOME_PLATE)


class SidePair(BaseModel):
    model_config = ConfigDict(frozen=True)

    home: int = Field(default=0, ge=0)
    away: int = Field(default=0, ge=0)

    def get(self, side: Side) -> int:
        return self.home if side is Side.HOME else self.away

    def with_value(self, side: Side, value: int) -> SidePair:
        return self.model_copy(update={side.value: value})


class Lineups(BaseModel):
    model_config = ConfigDict(frozen=True)

    home: tuple[LineupSlot, ...] = ()
    away: tuple[LineupSlot, ...] = ()

    def get(self, side: Side) -> tuple[LineupSlot, ...]:
        return self.home if side is Side.HOME else self.away


# ---------------------------------------------------------------------------
# Game
# ---------------------------------------------------------------------------

class Game(BaseModel):
    """Authoritative state of one game. Away bats in the top half, home in the bottom."""
    model_config = ConfigDict(frozen=True)

    id: str
    home_team_id: str
    away_team_id: str
    home_pitcher_id: str
    away_pitcher_id: str
    current_inning: int = Field(default=1, ge=1)
    is_top_inning: bool = True
    outs: int = Field(default=0, ge=0, le=2)
    home_score: int = Field(default=0, ge=0)
    away_score: int = Field(default=0, ge=0)
    at_bats: tuple[AtBat, ...] = ()
    plays: tuple[Play, ...] = ()
    runners: tuple[Runner, ...] = ()
    current_batter_index: SidePair = Field(default_factory=SidePair)
    lineup: Lineups = Field(default_factory=Lineups)
    start_time: float
    end_time: Optional[float] = None
    is_complete: bool = False

    @model_validator(mode="after")
    def _check_runners(self) -> Game:
        bases = [r.base for r in self.runners]
        if len(set(bases)) != len(bases):
            raise ValueError(f"two runners on the same base: {sorted(bases)}")
        players = [r.player_id for r in self.runners]
        if len(set(players)) != len(players):
            raise ValueError("a player appears on base more than once")
        return self

    @property
    def batting_side(self) -> Side:
        return Side.AWAY if self.is_top_inning else Side.HOME

    @property
    def fielding_side(self) -> Side:
        return self.batting_side.opponent

    def team_id(self, side: Side) -> str:
        return self.home_team_id if side is Side.HOME else self.away_team_id

    def pitcher_id(self, side: Side) -> str:
        return self.home_pitcher_id if side is Side.HOME else self.away_pitcher_id

    @property
    def batting_team_id(self) -> str:
        return self.team_id(self.batting_side)

    @property
    def fielding_team_id(self) -> str:
        return self.team_id(self.fielding_side)

    @property
    def current_pitcher_id(self) -> str:
        return self.pitcher_id(self.fielding_side)

    def lineup_for(self, side: Side) -> tuple[LineupSlot, ...]:
        return self.lineup.get(side)

    def score(self, side: Side) -> int:
        return self.home_score if side is Side.HOME else self.away_score

    def runner_on(self, base: int) -> Runner | None:
        for r in self.runners:
            if r.base == base:
                return r
        return None

    def runner_for(self, player_id: str) -> Runner | None:
        for r in self.runners:
            if r.player_id == player_id:
                return r
        return None

    @property
    def next_sequence(self) -> int:
        return len(self.at_bats) + len(self.plays) + 1

    def bases_string(self) -> str:
        """Return base state string like '110' for runners on 1st and 2nd."""
        return "".join("1" if self.runner_on(b) else "0" for b in (1, 2, 3))

    def score_display(self) -> str:
        return f"Away {self.away_score} - Home {self.home_score}"

    def situation_display(self) -> str:
        half_str = "Top" if self.is_top_inning else "Bot"
        on_bases = [name for b, name in ((1, "1st"), (2, "2nd"), (3, "3rd")) if self.runner_on(b)]
        runners_str = "runners on " + ", ".join(on_bases) if on_bases else "bases empty"
        status = " (final)" if self.is_complete else ""
        return f"{half_str} {self.current_inning}, {self.outs} out, {runners_str}, {self.score_display()}{status}"
