from __future__ import annotations
"""Interactive console player that only hands back well-formed moves of its own pieces."""
from typing import Callable

from .board import Board, Side
from .move_parser import MoveChoice, is_quit_command, parse_move_text
from .notation import render_board

PROMPT = "Enter your move (e.g., 'e2 e4' or 'e2e4'), or 'quit': "


class ConsolePlayer:
    name = "Human"
    interactive = True

    def __init__(self, input_fn: Callable[[str], str] | None = None, output_fn: Callable[[str], None] | None = None,
                 show_board: bool = True, unicode: bool = True):
        self._input = input_fn or input
        self._output = output_fn or print
        self.show_board = show_board
        self.unicode = unicode

    def choose(self, board: Board, side: Side) -> MoveChoice:
        """Prompt until the user types a well-formed move of their own piece, or quits."""
        if self.show_board:
            self._output("\n" + render_board(board, unicode=self.unicode))
        self._output(f"{side.label()} to move.")
        while True:
            try:
                raw = self._input(PROMPT)
            except EOFError:
                return MoveChoice.quit("end of input")
            if is_quit_command(raw):
                return MoveChoice.quit(raw.strip())
            choice = parse_move_text(raw)
            if not choice.ok:
                self._output("Invalid format! Use format like 'e2 e4'.")
                continue
            mv = choice.move
            piece = board.get(mv.from_row, mv.from_col)
            if piece.is_empty:
                self._output("No piece at that position!")
                continue
            if piece.side is not side:
                self._output("That's not your piece!")
                continue
            return choice

    def close(self):
        return
