# /// script
# requires-python = ">=3.12"
# dependencies = ["flask>=3.0", "pydantic>=2.0"]
# ///
"""JSON API for the baseball scorebook.

Exposes rosters, games, at-bat/play recording and derived box scores to a
browser front-end.  All state lives in the configured store; the app itself
only translates HTTP requests into ``Scorebook`` calls.

Usage:
    uv run app.py
"""

from __future__ import annotations

import logging

from flask import Flask, Response, jsonify, request
from pydantic import ValidationError

from box_score import format_box_score
from config import get_data_dir, get_log_level, get_port
from errors import GameComplete, GameNotFound, NothingToUndo, ScorekeepingError, TeamNotFound
from models import Game
from scorebook import Scorebook
from scorekeeping import current_batter, current_pitcher, on_deck_batter
from storage import FileKeyValueStore

logger = logging.getLogger(__name__)

_NOT_FOUND = (GameNotFound, TeamNotFound)
_CONFLICT = (GameComplete, NothingToUndo)


def _status_for(exc: ScorekeepingError) -> int:
    if isinstance(exc, _NOT_FOUND):
        return 404
    if isinstance(exc, _CONFLICT):
        return 409
    return 400


def _int_field(data: dict, name: str, default: int | None = None) -> int | None:
    """Read an optional integer field from a JSON body (null means absent)."""
    value = data.get(name)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValueError(f"{name} must be an integer")
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"{name} must be an integer") from None


def _player_json(player) -> dict | None:
    return player.model_dump(mode="json") if player else None


def create_app(scorebook: Scorebook | None = None) -> Flask:
    """Build the Flask app around *scorebook* (file-backed store by default)."""
    app = Flask(__name__)
    book = scorebook or Scorebook.from_store(FileKeyValueStore(get_data_dir()))
    app.config["SCOREBOOK"] = book

    def game_json(game: Game) -> dict:
        teams = book.teams()
        data = game.model_dump(mode="json")
        data["current_batter"] = _player_json(current_batter(game, teams))
        data["on_deck_batter"] = _player_json(on_deck_batter(game, teams))
        data["current_pitcher"] = _player_json(current_pitcher(game, teams))
        data["bases"] = game.bases_string()
        data["situation"] = game.situation_display()
        return data

    @app.errorhandler(ScorekeepingError)
    def handle_scorekeeping_error(exc: ScorekeepingError):
        return jsonify(exc.to_dict()), _status_for(exc)

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return jsonify({
            "error_code": "INVALID_INPUT",
            "message": f"{exc.error_count()} validation error(s)",
            "details": [f"{'.'.join(str(p) for p in e['loc'])}: {e['msg']}" for e in exc.errors()],
        }), 400

    @app.errorhandler(ValueError)
    @app.errorhandler(TypeError)
    def handle_bad_input(exc: ValueError | TypeError):
        return jsonify({"error_code": "INVALID_INPUT", "message": str(exc)}), 400

    # -----------------------------------------------------------------------
    # Health
    # -----------------------------------------------------------------------

    @app.route("/health")
    def health():
        return jsonify({"status": "ok"})

    # -----------------------------------------------------------------------
    # Teams
    # -----------------------------------------------------------------------

    @app.route("/api/teams", methods=["GET"])
    def api_list_teams():
        return jsonify([t.model_dump(mode="json") for t in book.teams()])

    @app.route("/api/teams", methods=["POST"])
    def api_add_team():
        data = request.get_json(silent=True) or {}
        name = str(data.get("name", "")).strip()
        if not name:
            return jsonify({"error_code": "INVALID_INPUT", "message": "Team name is required"}), 400
        return jsonify(book.add_team(name).model_dump(mode="json")), 201

    @app.route("/api/teams/<team_id>", methods=["DELETE"])
    def api_remove_team(team_id: str):
        book.remove_team(team_id)
        return "", 204

    @app.route("/api/teams/<team_id>/players", methods=["POST"])
    def api_add_player(team_id: str):
        data = request.get_json(silent=True) or {}
        name = str(data.get("name", "")).strip()
        if not name:
            return jsonify({"error_code": "INVALID_INPUT", "message": "Player name is required"}), 400
        player = book.add_player(
            team_id,
            name,
            number=str(data.get("number", "")),
            positions=data.get("positions") or (),
            role=data.get("role", "batter"),
        )
        return jsonify(player.model_dump(mode="json")), 201

    @app.route("/api/teams/<team_id>/players/<player_id>", methods=["DELETE"])
    def api_remove_player(team_id: str, player_id: str):
        book.remove_player(team_id, player_id)
        return "", 204

    # -----------------------------------------------------------------------
    # Games
    # -----------------------------------------------------------------------

    @app.route("/api/games", methods=["GET"])
    def api_list_games():
        return jsonify([g.model_dump(mode="json") for g in book.games()])

    @app.route("/api/games", methods=["POST"])
    def api_start_game():
        data = request.get_json(silent=True) or {}
        required = ("home_team_id", "away_team_id", "home_pitcher_id", "away_pitcher_id")
        missing = [k for k in required if not data.get(k)]
        if missing:
            return jsonify({"error_code": "INVALID_INPUT", "message": f"Missing fields: {', '.join(missing)}"}), 400
        game = book.start_game(
            data["home_team_id"],
            data["away_team_id"],
            data["home_pitcher_id"],
            data["away_pitcher_id"],
            data.get("home_lineup") or [],
            data.get("away_lineup") or [],
        )
        return jsonify(game_json(game)), 201

    @app.route("/api/games/<game_id>", methods=["GET"])
    def api_get_game(game_id: str):
        return jsonify(game_json(book.get_game(game_id)))

    @app.route("/api/games/<game_id>", methods=["DELETE"])
    def api_delete_game(game_id: str):
        book.delete_game(game_id)
        return "", 204

    @app.route("/api/games/<game_id>/at-bats", methods=["POST"])
    def api_record_at_bat(game_id: str):
        data = request.get_json(silent=True) or {}
        game = book.record_at_bat(
            game_id,
            data.get("result", ""),
            direction=data.get("direction") or None,
            rbi=_int_field(data, "rbi", 0),
        )
        return jsonify(game_json(game))

    @app.route("/api/games/<game_id>/plays", methods=["POST"])
    def api_record_play(game_id: str):
        data = request.get_json(silent=True) or {}
        game = book.record_play(
            game_id,
            data.get("type", ""),
            runner_id=data.get("runner_id") or None,
            to_base=_int_field(data, "to_base"),
        )
        return jsonify(game_json(game))

    @app.route("/api/games/<game_id>/pitcher", methods=["POST"])
    def api_change_pitcher(game_id: str):
        data = request.get_json(silent=True) or {}
        return jsonify(game_json(book.change_pitcher(game_id, str(data.get("pitcher_id", "")))))

    @app.route("/api/games/<game_id>/end", methods=["POST"])
    def api_end_game(game_id: str):
        return jsonify(game_json(book.end_game(game_id)))

    @app.route("/api/games/<game_id>/undo", methods=["POST"])
    def api_undo(game_id: str):
        return jsonify(game_json(book.undo(game_id)))

    @app.route("/api/games/<game_id>/box-score", methods=["GET"])
    def api_box_score(game_id: str):
        box = book.box_score(game_id)
        if request.args.get("format") == "text":
            return Response(format_box_score(box), mimetype="text/plain")
        return jsonify(box.to_dict())

    return app


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    logging.basicConfig(
        level=get_log_level(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    port = get_port()
    logger.info("Serving scorebook from %s on port %d", get_data_dir(), port)
    create_app().run(debug=False, host="0.0.0.0", port=port)
