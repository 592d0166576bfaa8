# /// script
# requires-python = ">=3.12"
# dependencies = ["pytest>=7.0", "pydantic>=2.0"]
# ///
"""Tests for box score aggregation.

Validates:
  1. Line score runs, hits and errors per inning (errors charged to the fielding side)
  2. Batting lines: PA/AB split, extra-base hits, walks, sacrifices, steals
  3. Pitching lines: batters faced, hits, runs, strikeouts, innings pitched
  4. Innings pitched follow a running out counter across at-bats and plays
  5. Inning grid text, including two plate appearances in one inning
  6. Grid width grows past nine innings for extra-inning games
  7. Aggregation is repeatable and never modifies the game
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from box_score import (
    REGULATION_INNINGS,
    derive_box_score,
    display_width,
    format_box_score,
    format_result,
    pad,
)
from models import AtBatResult, Game, Player, PlayerRole, PlayType, Position, Team
from scorekeeping import change_pitcher, new_game, record_at_bat, record_play


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

LINEUP_POSITIONS = [
    Position.CENTER_FIELD, Position.SECOND_BASE, Position.SHORTSTOP,
    Position.FIRST_BASE, Position.THIRD_BASE, Position.LEFT_FIELD,
    Position.RIGHT_FIELD, Position.CATCHER, Position.DESIGNATED_HITTER,
]


def make_team(prefix: str, name: str) -> Team:
    players = [
        Player(id=f"{prefix}_{i}", name=f"{name} {i}", positions=(LINEUP_POSITIONS[i - 1],))
        for i in range(1, 10)
    ]
    players.append(Player(id=f"{prefix}_sp", name=f"{name} SP", role=PlayerRole.PITCHER))
    players.append(Player(id=f"{prefix}_rp", name=f"{name} RP", role=PlayerRole.PITCHER))
    return Team(id=prefix, name=name, players=tuple(players))


def make_setup() -> tuple[Game, list[Team]]:
    home, away = make_team("h", "Home"), make_team("a", "Away")
    lineups = {
        p: [{"player_id": f"{p}_{i}", "position": LINEUP_POSITIONS[i - 1]} for i in range(1, 10)]
        for p in ("h", "a")
    }
    game = new_game(home, away, "h_sp", "a_sp", lineups["h"], lineups["a"], game_id="g1", now=0.0)
    return game, [home, away]


def play_first_inning_and_a_half() -> tuple[Game, list[Team]]:
    """Top 1: one run, two hits.  Bottom 1: two hits, one error.  Top 2: reliever strikeout."""
    game, teams = make_setup()
    # top 1st, away batting
    game = record_at_bat(game, teams, AtBatResult.SINGLE)            # a_1
    game = record_at_bat(game, teams, AtBatResult.HOME_RUN, rbi=2)   # a_2
    game = record_at_bat(game, teams, AtBatResult.STRIKEOUT)         # a_3
    game = record_at_bat(game, teams, AtBatResult.WALK)              # a_4
    game = record_at_bat(game, teams, AtBatResult.GROUNDOUT)         # a_5
    game = record_at_bat(game, teams, AtBatResult.FLYOUT)            # a_6
    # bottom 1st, home batting
    game = record_at_bat(game, teams, AtBatResult.DOUBLE)            # h_1
    game = record_play(game, PlayType.STEAL, "h_1", to_base=4)
    game = record_at_bat(game, teams, AtBatResult.ERROR)             # h_2
    game = record_at_bat(game, teams, AtBatResult.STRIKEOUT)         # h_3
    game = record_at_bat(game, teams, AtBatResult.SACRIFICE_BUNT)    # h_4
    game = record_at_bat(game, teams, AtBatResult.SINGLE)            # h_5
    game = record_play(game, PlayType.CAUGHT_STEALING, "h_5", to_base=2)
    game = record_at_bat(game, teams, AtBatResult.GROUNDOUT)         # h_6
    # top 2nd
    game = change_pitcher(game, teams, "h_rp")
    game = record_at_bat(game, teams, AtBatResult.STRIKEOUT)         # a_7
    return game, teams


# ===========================================================================
# Line score
# ===========================================================================

def test_line_score_runs_hits_errors():
    game, teams = play_first_inning_and_a_half()
    box = derive_box_score(game, teams)

    away = box.per_inning["away"]
    home = box.per_inning["home"]
    assert away.name == "Away"
    assert away.runs[0] == 1 and away.total_runs == 1
    assert away.hits[0] == 2 and away.total_hits == 2
    assert home.runs[0] == 0
    assert home.hits[0] == 2
    # h_2 reached on an error by the away fielders
    assert away.errors[0] == 1
    assert home.total_errors == 0


def test_line_score_matches_game_score():
    game, teams = play_first_inning_and_a_half()
    box = derive_box_score(game, teams)
    assert box.per_inning["away"].total_runs == game.away_score
    assert box.per_inning["home"].total_runs == game.home_score


def test_grid_has_nine_innings_by_default():
    game, teams = make_setup()
    box = derive_box_score(game, teams)
    assert box.innings == REGULATION_INNINGS
    assert len(box.per_inning["away"].runs) == 9
    assert len(box.per_inning["home"].errors) == 9


def test_grid_grows_for_extra_innings():
    game, teams = make_setup()
    game = Game.model_validate({**dict(game), "current_inning": 11})
    game = record_at_bat(game, teams, AtBatResult.HOME_RUN, rbi=1)
    box = derive_box_score(game, teams)
    assert box.innings == 11
    assert len(box.per_inning["away"].runs) == 11
    assert box.per_inning["away"].runs[10] == 1


# ===========================================================================
# Batting lines
# ===========================================================================

def test_batting_lines():
    game, teams = play_first_inning_and_a_half()
    away = derive_box_score(game, teams).per_batter["away"]
    home = derive_box_score(game, teams).per_batter["home"]

    hr = away["a_2"]
    assert (hr.plate_appearances, hr.at_bats, hr.hits, hr.home_runs, hr.rbi) == (1, 1, 1, 1, 2)
    assert hr.avg == "1.000"

    walk = away["a_4"]
    assert walk.plate_appearances == 1
    assert walk.at_bats == 0
    assert walk.walks == 1
    assert walk.avg == ".000"

    assert away["a_3"].strikeouts == 1
    assert away["a_3"].at_bats == 1
    assert away["a_8"].plate_appearances == 0

    assert home["h_1"].doubles == 1
    assert home["h_1"].stolen_bases == 1
    assert home["h_2"].at_bats == 1 and home["h_2"].hits == 0
    assert home["h_4"].sacrifices == 1 and home["h_4"].at_bats == 0
    assert home["h_5"].caught_stealing == 1


def test_error_and_fielders_choice_count_as_at_bats():
    game, teams = make_setup()
    game = record_at_bat(game, teams, AtBatResult.ERROR)             # a_1
    game = record_at_bat(game, teams, AtBatResult.FIELDERS_CHOICE)   # a_2
    game = record_at_bat(game, teams, AtBatResult.SACRIFICE_FLY)     # a_3
    game = record_at_bat(game, teams, AtBatResult.HIT_BY_PITCH)      # a_4
    lines = derive_box_score(game, teams).per_batter["away"]

    for player_id in ("a_1", "a_2"):
        assert lines[player_id].plate_appearances == 1
        assert lines[player_id].at_bats == 1
        assert lines[player_id].hits == 0
        assert lines[player_id].avg == ".000"
    assert lines["a_3"].at_bats == 0 and lines["a_3"].sacrifices == 1
    assert lines["a_4"].at_bats == 0 and lines["a_4"].walks == 1


def test_batting_lines_keep_lineup_order_and_positions():
    game, teams = make_setup()
    lines = derive_box_score(game, teams).per_batter["away"]
    assert list(lines) == [f"a_{i}" for i in range(1, 10)]
    assert lines["a_9"].position == "指"
    assert lines["a_1"].name == "Away 1"


def test_average_formatting():
    game, teams = make_setup()
    for result in (AtBatResult.SINGLE, AtBatResult.GROUNDOUT, AtBatResult.GROUNDOUT):
        game = Game.model_validate({**dict(game), "current_batter_index": {"home": 0, "away": 0}})
        game = record_at_bat(game, teams, result)
    assert derive_box_score(game, teams).per_batter["away"]["a_1"].avg == ".333"


# ===========================================================================
# Pitching lines
# ===========================================================================

def test_pitching_lines():
    game, teams = play_first_inning_and_a_half()
    box = derive_box_score(game, teams)

    starter = box.per_pitcher["home"]["h_sp"]
    assert starter.name == "Home SP"
    assert starter.batters_faced == 6
    assert starter.hits == 2
    assert starter.home_runs == 1
    assert starter.runs == 1
    assert starter.walks == 1
    assert starter.strikeouts == 1
    assert starter.outs_recorded == 3
    assert starter.innings_pitched == 1

    visitor = box.per_pitcher["away"]["a_sp"]
    assert visitor.batters_faced == 6
    assert visitor.hits == 2
    assert visitor.strikeouts == 1
    assert visitor.outs_recorded == 3
    assert visitor.innings_pitched == 1


def test_relief_pitcher_gets_own_line():
    game, teams = play_first_inning_and_a_half()
    relief = derive_box_score(game, teams).per_pitcher["home"]["h_rp"]
    assert relief.batters_faced == 1
    assert relief.strikeouts == 1
    assert relief.outs_recorded == 1
    assert relief.innings_pitched == 0


def test_innings_pitched_counts_baserunning_outs():
    game, teams = make_setup()
    game = record_at_bat(game, teams, AtBatResult.STRIKEOUT)
    game = record_at_bat(game, teams, AtBatResult.SINGLE)
    game = record_play(game, PlayType.CAUGHT_STEALING, "a_2", to_base=2)
    assert game.outs == 2
    game = record_at_bat(game, teams, AtBatResult.STRIKEOUT)
    line = derive_box_score(game, teams).per_pitcher["home"]["h_sp"]
    assert line.outs_recorded == 3
    assert line.innings_pitched == 1


def test_pitcher_without_appearances_is_not_listed():
    game, teams = make_setup()
    box = derive_box_score(game, teams)
    assert box.per_pitcher == {"away": {}, "home": {}}


# ===========================================================================
# Inning grid
# ===========================================================================

def test_format_result():
    game, teams = make_setup()
    game = record_at_bat(game, teams, AtBatResult.HOME_RUN, rbi=2)
    game = record_at_bat(game, teams, AtBatResult.SINGLE)
    assert format_result(game.at_bats[0]) == "本塁打(2)"
    assert format_result(game.at_bats[1]) == "安打"


def test_inning_grid_cells():
    game, teams = play_first_inning_and_a_half()
    grid = derive_box_score(game, teams).per_player_inning_grid
    assert grid["away"]["a_2"] == {1: "本塁打(2)"}
    assert grid["away"]["a_7"] == {2: "三振"}
    assert grid["home"]["h_2"] == {1: "失策"}
    assert grid["away"]["a_9"] == {}


def test_inning_grid_joins_two_plate_appearances():
    game, teams = make_setup()
    for _ in range(10):
        game = record_at_bat(game, teams, AtBatResult.WALK)
    grid = derive_box_score(game, teams).per_player_inning_grid["away"]
    assert grid["a_1"] == {1: "四球 / 四球"}
    assert grid["a_2"] == {1: "四球"}


# ===========================================================================
# Purity and rendering
# ===========================================================================

def test_derivation_is_repeatable_and_pure():
    game, teams = play_first_inning_and_a_half()
    snapshot = game.model_dump()
    first = derive_box_score(game, teams).to_dict()
    second = derive_box_score(game, teams).to_dict()
    assert first == second
    assert game.model_dump() == snapshot


def test_unresolved_teams_fall_back_to_ids():
    game, _ = play_first_inning_and_a_half()
    box = derive_box_score(game)
    assert box.per_inning["home"].name == "h"
    assert box.per_batter["away"]["a_1"].name == "a_1"
    assert box.per_pitcher["home"]["h_sp"].name == "h_sp"


def test_to_dict_uses_string_inning_keys():
    game, teams = play_first_inning_and_a_half()
    data = derive_box_score(game, teams).to_dict()
    assert data["per_player_inning_grid"]["away"]["a_2"] == {"1": "本塁打(2)"}
    assert data["per_inning"]["away"]["R"] == 1
    assert data["per_batter"]["away"][1]["HR"] == 1


def test_format_box_score_text():
    game, teams = play_first_inning_and_a_half()
    text = format_box_score(derive_box_score(game, teams))
    assert "BOX SCORE" in text
    assert "Away Batting:" in text
    assert "Home Pitching:" in text
    assert "Home SP" in text
    print(text)


def test_pad_counts_wide_characters_twice():
    assert display_width("中") == 2
    assert display_width("Away 1") == 6
    assert pad("巨人", 6) == "巨人  "
    assert pad("ABC", 2) == "AB"
    assert display_width(pad("読売ジャイアンツ", 11)) == 11


def test_format_box_score_aligns_japanese_names():
    home, away = make_team("h", "読売ジャイアンツ"), make_team("a", "阪神タイガース")
    lineups = {
        p: [{"player_id": f"{p}_{i}", "position": LINEUP_POSITIONS[i - 1]} for i in range(1, 10)]
        for p in ("h", "a")
    }
    game = new_game(home, away, "h_sp", "a_sp", lineups["h"], lineups["a"], game_id="g1", now=0.0)
    game = record_at_bat(game, [home, away], AtBatResult.SINGLE)
    lines = format_box_score(derive_box_score(game, [home, away])).splitlines()

    header = next(line for line in lines if line.startswith("Team"))
    score_rows = [line for line in lines if line.startswith(("読売", "阪神")) and "|" in line]
    assert len(score_rows) == 2
    assert all(display_width(row) == display_width(header) for row in score_rows)

    batting_rows = [line for line in lines if line.startswith("  阪神タイガース ")]
    assert len(batting_rows) == 9
    assert len({display_width(row) for row in batting_rows}) == 1
