# /// script
# requires-python = ">=3.12"
# dependencies = []
# ///
"""Named failures raised by scorebook transitions.

A transition either returns a new ``Game`` or raises one of these before
anything is changed.  Each class carries a machine-readable ``error_code``
so the HTTP layer can report it the same way for every failure.
"""


class ScorekeepingError(Exception):
    """Base class for every scorebook failure surfaced to the user."""

    error_code = "SCOREKEEPING_ERROR"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error_code": self.error_code, "message": self.message}


class NoBatterRegistered(ScorekeepingError):
    """The current lineup slot does not resolve to a player of the batting team."""

    error_code = "NO_BATTER_REGISTERED"


class RunnerNotSelected(ScorekeepingError):
    """A runner-dependent play was recorded without a runner on base."""

    error_code = "RUNNER_NOT_SELECTED"


class BaseOccupied(ScorekeepingError):
    error_code = "BASE_OCCUPIED"


class GameComplete(ScorekeepingError):
    """The game has ended and accepts no further at-bats or plays."""

    error_code = "GAME_COMPLETE"


class InvalidLineup(ScorekeepingError):
    error_code = "INVALID_LINEUP"


class InvalidGameSetup(ScorekeepingError):
    error_code = "INVALID_GAME_SETUP"


class UnknownPlayer(ScorekeepingError):
    error_code = "UNKNOWN_PLAYER"


class TeamNotFound(ScorekeepingError):
    error_code = "TEAM_NOT_FOUND"


class GameNotFound(ScorekeepingError):
    error_code = "GAME_NOT_FOUND"


class NothingToUndo(ScorekeepingError):
    error_code = "NOTHING_TO_UNDO"
