"""Exception taxonomy shared by the oracles and the game session."""
from __future__ import annotations


class OracleUnavailable(RuntimeError):
    """An oracle process failed to start, timed out, or printed nothing recognizable."""

    def __init__(self, oracle: str, reason: str):
        super().__init__(f"{oracle} unavailable: {reason}")
        self.oracle = oracle
        self.reason = reason


class OracleSetupError(RuntimeError):
    """Oracle location or program is unusable at construction time."""


class IllegalMove(ValueError):
    """The rules oracle rejected a move."""


class MalformedInput(ValueError):
    """Text did not match the coordinate move grammar."""


class SessionTerminal(RuntimeError):
    """A move was attempted after the session reached checkmate or was aborted."""
