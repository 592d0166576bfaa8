# /// script
# requires-python = ">=3.12"
# dependencies = ["pydantic>=2.0"]
# ///
"""Box score aggregation.

Everything here is derived by replaying a game's at-bat and play logs in
recorded order; nothing is read from counters kept on the game, and the game
is never modified.  Calling ``derive_box_score`` twice on the same game gives
equal results.
"""

from __future__ import annotations

import unicodedata
from dataclasses import dataclass, field

from models import AtBat, AtBatResult, Game, Play, PlayType, Side, Team, find_team

REGULATION_INNINGS = 9


# ---------------------------------------------------------------------------
# Stat lines
# ---------------------------------------------------------------------------

@dataclass
class BattingLine:
    player_id: str
    name: str
    position: str = ""
    plate_appearances: int = 0
    at_bats: int = 0
    hits: int = 0
    doubles: int = 0
    triples: int = 0
    home_runs: int = 0
    walks: int = 0  # includes hit-by-pitch
    strikeouts: int = 0
    rbi: int = 0
    sacrifices: int = 0
    stolen_bases: int = 0
    caught_stealing: int = 0

    @property
    def avg(self) -> str:
        """Batting average in scorebook style, e.g. ``.333``."""
        if self.at_bats == 0:
            return ".000"
        text = f"{self.hits / self.at_bats:.3f}"
        return text[1:] if text.startswith("0") else text

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id, "name": self.name, "position": self.position,
            "PA": self.plate_appearances, "AB": self.at_bats, "H": self.hits,
            "2B": self.doubles, "3B": self.triples, "HR": self.home_runs,
            "BB": self.walks, "K": self.strikeouts, "RBI": self.rbi,
            "SAC": self.sacrifices, "SB": self.stolen_bases, "CS": self.caught_stealing,
            "AVG": self.avg,
        }


@dataclass
class PitchingLine:
    player_id: str
    name: str
    batters_faced: int = 0
    hits: int = 0
    walks: int = 0
    strikeouts: int = 0
    home_runs: int = 0
    runs: int = 0
    outs_recorded: int = 0
    innings_pitched: int = 0  # full innings only

    def to_dict(self) -> dict:
        return {
            "player_id": self.player_id, "name": self.name,
            "IP": self.innings_pitched, "outs": self.outs_recorded,
            "BF": self.batters_faced, "H": self.hits, "R": self.runs,
            "HR": self.home_runs, "BB": self.walks, "K": self.strikeouts,
        }


@dataclass
class TeamLine:
    """Runs, hits and errors per inning for one side."""
    team_id: str
    name: str
    runs: list[int]
    hits: list[int]
    errors: list[int]

    @property
    def total_runs(self) -> int:
        return sum(self.runs)

    @property
    def total_hits(self) -> int:
        return sum(self.hits)

    @property
    def total_errors(self) -> int:
        return sum(self.errors)

    def to_dict(self) -> dict:
        return {
            "team_id": self.team_id, "name": self.name,
            "runs": list(self.runs), "hits": list(self.hits), "errors": list(self.errors),
            "R": self.total_runs, "H": self.total_hits, "E": self.total_errors,
        }


@dataclass
class BoxScore:
    """Derived views of one game, keyed by side (``"away"`` / ``"home"``)."""
    innings: int
    per_inning: dict[str, TeamLine] = field(default_factory=dict)
    per_batter: dict[str, dict[str, BattingLine]] = field(default_factory=dict)
    per_pitcher: dict[str, dict[str, PitchingLine]] = field(default_factory=dict)
    per_player_inning_grid: dict[str, dict[str, dict[int, str]]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "innings": self.innings,
            "per_inning": {s: line.to_dict() for s, line in self.per_inning.items()},
            "per_batter": {s: [b.to_dict() for b in lines.values()] for s, lines in self.per_batter.items()},
            "per_pitcher": {s: [p.to_dict() for p in lines.values()] for s, lines in self.per_pitcher.items()},
            "per_player_inning_grid": {
                s: {pid: {str(inning): text for inning, text in cells.items()} for pid, cells in grid.items()}
                for s, grid in self.per_player_inning_grid.items()
            },
        }


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def format_result(at_bat: AtBat) -> str:
    """Scorebook cell text: ``"<result>(<rbi>)"`` with RBI, else ``"<result>"``."""
    if at_bat.rbi > 0:
        return f"{at_bat.result.value}({at_bat.rbi})"
    return at_bat.result.value


def _player_name(team: Team | None, player_id: str) -> str:
    player = team.get_player(player_id) if team else None
    return player.name if player else player_id


def derive_box_score(game: Game, teams: list[Team] | tuple[Team, ...] = ()) -> BoxScore:
    """Replay *game*'s logs into line score, batting, pitching and inning grid.

    Innings pitched come from a running out counter per fielding side that is
    fed by at-bat and play outs in recorded order; each time it reaches three
    the pitcher on the mound for that out is credited with a full inning and
    the counter resets.
    """
    teams = list(teams)
    innings = max(REGULATION_INNINGS, game.current_inning)
    box = BoxScore(innings=innings)
    team_by_side: dict[Side, Team | None] = {}

    for side in (Side.AWAY, Side.HOME):
        team = find_team(teams, game.team_id(side))
        team_by_side[side] = team
        box.per_inning[side.value] = TeamLine(
            team_id=game.team_id(side),
            name=team.name if team else game.team_id(side),
            runs=[0] * innings, hits=[0] * innings, errors=[0] * innings,
        )
        box.per_batter[side.value] = {
            slot.player_id: BattingLine(
                player_id=slot.player_id,
                name=_player_name(team, slot.player_id),
                position=slot.position.value,
            )
            for slot in game.lineup_for(side)
        }
        box.per_pitcher[side.value] = {}
        box.per_player_inning_grid[side.value] = {slot.player_id: {} for slot in game.lineup_for(side)}

    outs_in_field = {Side.AWAY: 0, Side.HOME: 0}
    events: list[AtBat | Play] = sorted([*game.at_bats, *game.plays], key=lambda e: e.sequence)

    for event in events:
        batting = Side.AWAY if event.is_top_inning else Side.HOME
        fielding = batting.opponent
        pitcher = box.per_pitcher[fielding.value].setdefault(
            event.pitcher_id,
            PitchingLine(player_id=event.pitcher_id, name=_player_name(team_by_side[fielding], event.pitcher_id)),
        )

        if isinstance(event, AtBat):
            _tally_at_bat(box, event, batting, fielding, team_by_side[batting], pitcher)
            is_out = event.result.is_out
        else:
            _tally_play(box, event, batting, team_by_side[batting])
            is_out = event.type.is_out

        if is_out:
            pitcher.outs_recorded += 1
            outs_in_field[fielding] += 1
            if outs_in_field[fielding] == 3:
                pitcher.innings_pitched += 1
                outs_in_field[fielding] = 0

    return box


def _tally_at_bat(box: BoxScore, at_bat: AtBat, batting: Side, fielding: Side,
                  team: Team | None, pitcher: PitchingLine) -> None:
    result = at_bat.result
    slot = at_bat.inning - 1
    line = box.per_batter[batting.value].setdefault(
        at_bat.batter_id,
        BattingLine(player_id=at_bat.batter_id, name=_player_name(team, at_bat.batter_id)),
    )

    line.plate_appearances += 1
    line.rbi += at_bat.rbi
    pitcher.batters_faced += 1
    if result.counts_as_at_bat:
        line.at_bats += 1

    if result.is_hit:
        line.hits += 1
        pitcher.hits += 1
        box.per_inning[batting.value].hits[slot] += 1
        if result.bases_awarded == 2:
            line.doubles += 1
        elif result.bases_awarded == 3:
            line.triples += 1
        elif result.is_home_run:
            line.home_runs += 1
            pitcher.home_runs += 1
            pitcher.runs += 1
            box.per_inning[batting.value].runs[slot] += 1
    elif result.is_walk:
        line.walks += 1
        pitcher.walks += 1
    elif result.is_sacrifice:
        line.sacrifices += 1
    elif result.is_error:
        box.per_inning[fielding.value].errors[slot] += 1

    if result is AtBatResult.STRIKEOUT:
        line.strikeouts += 1
        pitcher.strikeouts += 1

    grid = box.per_player_inning_grid[batting.value].setdefault(at_bat.batter_id, {})
    text = format_result(at_bat)
    grid[at_bat.inning] = f"{grid[at_bat.inning]} / {text}" if at_bat.inning in grid else text


def _tally_play(box: BoxScore, play: Play, batting: Side, team: Team | None) -> None:
    if not play.player_id or play.type not in (PlayType.STEAL, PlayType.CAUGHT_STEALING):
        return
    line = box.per_batter[batting.value].setdefault(
        play.player_id,
        BattingLine(player_id=play.player_id, name=_player_name(team, play.player_id)),
    )
    if play.type is PlayType.STEAL:
        line.stolen_bases += 1
    else:
        line.caught_stealing += 1


# ---------------------------------------------------------------------------
# Text rendering
# ---------------------------------------------------------------------------

def display_width(text: str) -> int:
    """Terminal columns taken by *text*; wide (CJK) characters take two."""
    return sum(2 if unicodedata.east_asian_width(ch) in ("W", "F") else 1 for ch in text)


def pad(text: str, width: int) -> str:
    """Left-align *text* in *width* columns, truncating names that do not fit."""
    out = ""
    for ch in text:
        if display_width(out + ch) > width:
            break
        out += ch
    return out + " " * (width - display_width(out))


def format_box_score(box: BoxScore) -> str:
    """Render a fixed-width text box score."""
    lines = []
    lines.append("=" * 72)
    lines.append("BOX SCORE")
    lines.append("=" * 72)

    header = f"{'Team':<20}"
    for i in range(1, box.innings + 1):
        header += f" {i:>3}"
    header += "  |   R   H   E"
    lines.append(header)
    lines.append("-" * len(header))

    for side in ("away", "home"):
        team = box.per_inning[side]
        row = pad(team.name, 20)
        for r in team.runs:
            row += f" {r:>3}"
        row += f"  | {team.total_runs:>3} {team.total_hits:>3} {team.total_errors:>3}"
        lines.append(row)

    for side in ("away", "home"):
        lines.append(f"\n{box.per_inning[side].name} Batting:")
        lines.append(f"  {'Name':<20} {'Pos':<4} {'AB':>3} {'H':>3} {'HR':>3} {'RBI':>4} {'BB':>3} {'K':>3} {'AVG':>5}")
        lines.append(f"  {'-'*20} {'-'*4} {'-'*3} {'-'*3} {'-'*3} {'-'*4} {'-'*3} {'-'*3} {'-'*5}")
        for b in box.per_batter[side].values():
            lines.append(
                f"  {pad(b.name, 20)} {pad(b.position, 4)} {b.at_bats:>3} {b.hits:>3} {b.home_runs:>3} "
                f"{b.rbi:>4} {b.walks:>3} {b.strikeouts:>3} {b.avg:>5}"
            )

    for side in ("away", "home"):
        lines.append(f"\n{box.per_inning[side].name} Pitching:")
        lines.append(f"  {'Name':<20} {'IP':>3} {'H':>3} {'R':>3} {'BB':>3} {'K':>3}")
        lines.append(f"  {'-'*20} {'-'*3} {'-'*3} {'-'*3} {'-'*3} {'-'*3}")
        for p in box.per_pitcher[side].values():
            lines.append(
                f"  {pad(p.name, 20)} {p.innings_pitched:>3} {p.hits:>3} {p.runs:>3} "
                f"{p.walks:>3} {p.strikeouts:>3}"
            )

    return "\n".join(lines)
