"""
Board and move model.

- Side/PieceKind/Piece: immutable value types; the empty piece has no kind and no side.
- Move: zero-based (row, col) origin and destination; row 0 is rank 1, col 0 is file a.
- Board: dumb 8x8 container. It stores, mutates and serializes; legality belongs to the rules oracle.

"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

SIZE = 8


class Side(str, Enum):
    WHITE = "white"
    BLACK = "black"

    @property
    def opponent(self) -> "Side":
        return Side.BLACK if self is Side.WHITE else Side.WHITE

    def label(self) -> str:
        return self.value.capitalize()


class PieceKind(str, Enum):
    PAWN = "pawn"
    ROOK = "rook"
    KNIGHT = "knight"
    BISHOP = "bishop"
    QUEEN = "queen"
    KING = "king"


@dataclass(frozen=True)
class Piece:
    kind: Optional[PieceKind] = None
    side: Optional[Side] = None

    @property
    def is_empty(self) -> bool:
        return self.kind is None

    def __str__(self) -> str:
        if self.is_empty:
            return "empty"
        return f"{self.side.value} {self.kind.value}"


EMPTY = Piece()

BACK_RANK = (
    PieceKind.ROOK,
    PieceKind.KNIGHT,
    PieceKind.BISHOP,
    PieceKind.QUEEN,
    PieceKind.KING,
    PieceKind.BISHOP,
    PieceKind.KNIGHT,
    PieceKind.ROOK,
)


def on_board(row: int, col: int) -> bool:
    return 0 <= row < SIZE and 0 <= col < SIZE


@dataclass(frozen=True)
class Move:
    """A relocation from (from_row, from_col) to (to_row, to_col), all in 0..7."""

    from_row: int
    from_col: int
    to_row: int
    to_col: int

    def __post_init__(self):
        if not (on_board(self.from_row, self.from_col) and on_board(self.to_row, self.to_col)):
            raise ValueError(
                f"Move coordinates out of range: ({self.from_row},{self.from_col})->({self.to_row},{self.to_col})"
            )

    def one_based(self) -> tuple[int, int, int, int]:
        """(fromRank, fromFile, toRank, toFile) as the rules oracle numbers them."""
        return self.from_row + 1, self.from_col + 1, self.to_row + 1, self.to_col + 1

    @classmethod
    def from_one_based(cls, from_rank: int, from_file: int, to_rank: int, to_file: int) -> "Move":
        return cls(from_rank - 1, from_file - 1, to_rank - 1, to_file - 1)


class Board:
    def __init__(self):
        self._grid: list[list[Piece]] = [[EMPTY] * SIZE for _ in range(SIZE)]
        self.setup_initial_position()

    @classmethod
    def empty(cls) -> "Board":
        board = cls()
        board.clear()
        return board

    def copy(self) -> "Board":
        other = Board.empty()
        other._grid = [list(row) for row in self._grid]
        return other

    def clear(self) -> None:
        self._grid = [[EMPTY] * SIZE for _ in range(SIZE)]

    def setup_initial_position(self) -> None:
        self.clear()
        for col, kind in enumerate(BACK_RANK):
            self._grid[0][col] = Piece(kind, Side.WHITE)
            self._grid[1][col] = Piece(PieceKind.PAWN, Side.WHITE)
            self._grid[6][col] = Piece(PieceKind.PAWN, Side.BLACK)
            self._grid[7][col] = Piece(kind, Side.BLACK)

    # ---------------- Access / Mutation -----------------
    def get(self, row: int, col: int) -> Piece:
        if not on_board(row, col):
            return EMPTY
        return self._grid[row][col]

    def set(self, row: int, col: int, piece: Piece) -> None:
        if on_board(row, col):
            self._grid[row][col] = piece

    def apply_move(self, move: Move) -> Piece:
        """Relocate the piece on the source square; return what stood on the destination."""
        piece = self.get(move.from_row, move.from_col)
        captured = self.get(move.to_row, move.to_col)
        self.set(move.to_row, move.to_col, piece)
        self.set(move.from_row, move.from_col, EMPTY)
        return captured

    def pieces(self) -> Iterator[tuple[int, int, Piece]]:
        for row in range(SIZE):
            for col in range(SIZE):
                piece = self._grid[row][col]
                if not piece.is_empty:
                    yield row, col, piece

    # ---------------- Serialization -----------------
    def to_rules_term(self) -> str:
        """Return the Prolog list `[piece(kind, side, rank, file), ...]` with 1-based rank/file."""
        records = [
            f"piece({piece.kind.value}, {piece.side.value}, {row + 1}, {col + 1})"
            for row, col, piece in self.pieces()
        ]
        return "[" + ", ".join(records) + "]"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._grid == other._grid

    def __repr__(self) -> str:
        return f"Board({self.to_rules_term()})"
