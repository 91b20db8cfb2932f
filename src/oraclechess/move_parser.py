"""
Coordinate move grammar shared by console input and decision-oracle replies.

Accepted shape: `<file a-h><rank 1-8><file a-h><rank 1-8>` after removing spaces,
letters case-insensitive ("e2e4", "E2 e4"). Anything else is a parse failure.

Results are MoveChoice values rather than a magic "no move":
- PROPOSED: a structurally valid Move
- QUIT: the player asked to stop
- PARSE_FAILURE: text did not match the grammar
- NO_MOVE_AVAILABLE: a non-interactive source had nothing to offer
"""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional

import chess

from .board import Move
from .errors import MalformedInput

COORD_RE = re.compile(r"^[a-h][1-8][a-h][1-8]$", re.I)
QUIT_COMMANDS = ("quit", "exit")


class ChoiceKind(str, Enum):
    PROPOSED = "proposed"
    QUIT = "quit"
    PARSE_FAILURE = "parse_failure"
    NO_MOVE_AVAILABLE = "no_move_available"


@dataclass(frozen=True)
class MoveChoice:
    kind: ChoiceKind
    move: Optional[Move] = None
    detail: Optional[str] = None

    @classmethod
    def proposed(cls, move: Move) -> "MoveChoice":
        return cls(ChoiceKind.PROPOSED, move=move)

    @classmethod
    def quit(cls, detail: str | None = None) -> "MoveChoice":
        return cls(ChoiceKind.QUIT, detail=detail)

    @classmethod
    def parse_failure(cls, text: str) -> "MoveChoice":
        return cls(ChoiceKind.PARSE_FAILURE, detail=text)

    @classmethod
    def no_move(cls, reason: str) -> "MoveChoice":
        return cls(ChoiceKind.NO_MOVE_AVAILABLE, detail=reason)

    @property
    def ok(self) -> bool:
        return self.kind is ChoiceKind.PROPOSED

    def unwrap(self) -> Move:
        """Return the move or raise MalformedInput for any non-move result."""
        if self.move is None:
            raise MalformedInput(f"no move ({self.kind.value}): {self.detail!r}")
        return self.move


def _square(token: str) -> tuple[int, int]:
    sq = chess.parse_square(token.lower())
    return chess.square_rank(sq), chess.square_file(sq)


def parse_move_text(text: str | None) -> MoveChoice:
    """Parse 'e2e4' / 'e2 e4' into a MoveChoice. Never raises."""
    raw = text or ""
    clean = raw.strip().replace(" ", "")
    if not COORD_RE.fullmatch(clean):
        return MoveChoice.parse_failure(raw)
    from_row, from_col = _square(clean[:2])
    to_row, to_col = _square(clean[2:])
    return MoveChoice.proposed(Move(from_row, from_col, to_row, to_col))


def square_to_text(row: int, col: int) -> str:
    return chess.square_name(chess.square(col, row))


def move_to_text(move: Move) -> str:
    """Lowercase 4-character coordinate form, e.g. 'e2e4'."""
    return square_to_text(move.from_row, move.from_col) + square_to_text(move.to_row, move.to_col)


def is_quit_command(text: str | None) -> bool:
    # case-sensitive: "QUIT" is malformed input
    return (text or "").rstrip("\r\n") in QUIT_COMMANDS


__all__ = [
    "ChoiceKind",
    "MoveChoice",
    "parse_move_text",
    "move_to_text",
    "square_to_text",
    "is_quit_command",
]
