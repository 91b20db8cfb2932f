"""
python-chess bridges for display and the decision-oracle board encoding.

Placement only: the converted chess.Board is never asked about legality.
"""
from __future__ import annotations

import chess

from .board import Board, PieceKind, Side

_PIECE_TYPES = {
    PieceKind.PAWN: chess.PAWN,
    PieceKind.KNIGHT: chess.KNIGHT,
    PieceKind.BISHOP: chess.BISHOP,
    PieceKind.ROOK: chess.ROOK,
    PieceKind.QUEEN: chess.QUEEN,
    PieceKind.KING: chess.KING,
}


def to_chess_board(board: Board, side_to_move: Side = Side.WHITE) -> chess.Board:
    cb = chess.Board.empty()
    for row, col, piece in board.pieces():
        cb.set_piece_at(
            chess.square(col, row),
            chess.Piece(_PIECE_TYPES[piece.kind], piece.side is Side.WHITE),
        )
    cb.turn = side_to_move is Side.WHITE
    return cb


def board_encoding(board: Board) -> str:
    """FEN piece-placement field, e.g. 'rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR'."""
    return to_chess_board(board).board_fen()


def render_board(board: Board, unicode: bool = True) -> str:
    cb = to_chess_board(board)
    if unicode:
        return cb.unicode(borders=True, empty_square="·")
    lines = str(cb).splitlines()
    out = [f"{8 - i} {line}" for i, line in enumerate(lines)]
    out.append("  a b c d e f g h")
    return "\n".join(out)
