"""
Rules oracle: the single source of truth for legality, check, checkmate and move enumeration.

- Goals are built from Board.to_rules_term() plus a predicate and 1-based coordinates.
- Boolean predicates answer with a SUCCESS/FAILURE token; enumeration prints move(fr,fc,tr,tc) records.
- Output is untrusted text: parse_verdict/scan_move_records return tagged values and never raise on noise.
- RulesOracle is the abstract contract (tests use in-memory fakes); PrologRulesOracle runs swipl once per call.

"""
from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from .board import Board, Move, Side
from .errors import OracleUnavailable
from .oracle_process import require_dir, require_file, resolve_program, run_oracle

log = logging.getLogger("rules_oracle")

VALID_MOVE = "valid_move"
LEGAL_MOVE = "legal_move"
IN_CHECK = "in_check"
IS_CHECKMATE = "is_checkmate"
ALL_LEGAL_MOVES = "all_legal_moves"

MOVE_PREDICATES = frozenset({VALID_MOVE, LEGAL_MOVE})
SIDE_PREDICATES = frozenset({IN_CHECK, IS_CHECKMATE})

SUCCESS_RE = re.compile(r"\bSUCCESS\b")
FAILURE_RE = re.compile(r"\bFAILURE\b")
MOVE_RECORD_RE = re.compile(r"move\(\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*,\s*(\d+)\s*\)")


class Verdict(str, Enum):
    SUCCESS = "success"
    FAILURE = "failure"
    UNAVAILABLE = "unavailable"


# ---------------- Response grammars -----------------
def parse_verdict(output: str | None) -> Verdict:
    """Map raw oracle output to a Verdict. Exactly one of the two tokens must be present."""
    text = output or ""
    has_success = bool(SUCCESS_RE.search(text))
    has_failure = bool(FAILURE_RE.search(text))
    if has_success and not has_failure:
        return Verdict.SUCCESS
    if has_failure and not has_success:
        return Verdict.FAILURE
    return Verdict.UNAVAILABLE


def scan_move_records(output: str | None) -> list[Move]:
    """Collect every well-formed move(fr,fc,tr,tc) record (1-based) as a 0-based Move."""
    moves: list[Move] = []
    for m in MOVE_RECORD_RE.finditer(output or ""):
        try:
            moves.append(Move.from_one_based(*(int(g) for g in m.groups())))
        except ValueError:
            log.debug("Skipping out-of-range move record %r", m.group(0))
    return moves


# ---------------- Goal construction -----------------
def _predicate_call(predicate: str, side: Side, move: Optional[Move]) -> str:
    if predicate in MOVE_PREDICATES:
        if move is None:
            raise ValueError(f"{predicate} requires a move")
        coords = ", ".join(str(n) for n in move.one_based())
        return f"{predicate}(Board, {side.value}, {coords})"
    if predicate in SIDE_PREDICATES:
        return f"{predicate}(Board, {side.value})"
    raise ValueError(f"Unknown rules predicate: {predicate}")


def build_predicate_goal(board: Board, predicate: str, side: Side, move: Optional[Move] = None) -> str:
    query = f"Board = {board.to_rules_term()}, {_predicate_call(predicate, side, move)}"
    return f"({query} -> write('SUCCESS') ; write('FAILURE')), halt"


def build_enumeration_goal(board: Board, side: Side) -> str:
    query = f"Board = {board.to_rules_term()}, {ALL_LEGAL_MOVES}(Board, {side.value}, Moves)"
    return f"({query} -> write(Moves) ; write([])), halt"


# ---------------- Oracle contract -----------------
class RulesOracle(ABC):
    """Stateless rules service. Boolean helpers are fail-closed: only SUCCESS counts as true."""

    name = "rules oracle"

    @abstractmethod
    def evaluate(self, predicate: str, board: Board, side: Side, move: Optional[Move] = None) -> Verdict:
        ...

    @abstractmethod
    def legal_moves(self, board: Board, side: Side) -> list[Move]:
        """All legal moves for side. Raises OracleUnavailable if the oracle cannot be consulted."""

    def is_valid_move(self, board: Board, side: Side, move: Move) -> bool:
        return self.evaluate(VALID_MOVE, board, side, move) is Verdict.SUCCESS

    def is_legal_move(self, board: Board, side: Side, move: Move) -> bool:
        return self.evaluate(LEGAL_MOVE, board, side, move) is Verdict.SUCCESS

    def is_in_check(self, board: Board, side: Side) -> bool:
        return self.evaluate(IN_CHECK, board, side) is Verdict.SUCCESS

    def is_checkmate(self, board: Board, side: Side) -> bool:
        return self.evaluate(IS_CHECKMATE, board, side) is Verdict.SUCCESS


class PrologRulesOracle(RulesOracle):
    name = "prolog rules oracle"

    def __init__(self, oracle_dir: str, program: str = "swipl", source: str = "check_detection.pl", timeout_s: float | None = 30.0):
        """Validate the oracle location up front.

        Raises OracleSetupError if the directory, the rules source or the Prolog binary is missing.
        """
        self.oracle_dir = require_dir(oracle_dir, "Rules oracle")
        self.source = source
        require_file(self.oracle_dir, source, "Rules source")
        self.program = resolve_program(program)
        self.timeout_s = timeout_s

    def _run(self, goal: str) -> str:
        return run_oracle([self.program, "-s", self.source, "-g", goal], self.oracle_dir, self.timeout_s, self.name)

    def evaluate(self, predicate: str, board: Board, side: Side, move: Optional[Move] = None) -> Verdict:
        goal = build_predicate_goal(board, predicate, side, move)
        try:
            output = self._run(goal)
        except OracleUnavailable as e:
            log.warning("%s for %s(%s): treating as failure", e, predicate, side.value)
            return Verdict.UNAVAILABLE
        verdict = parse_verdict(output)
        if verdict is Verdict.UNAVAILABLE:
            log.warning("Unrecognized %s output for %s(%s): %r", self.name, predicate, side.value, output[:200])
        return verdict

    def legal_moves(self, board: Board, side: Side) -> list[Move]:
        output = self._run(build_enumeration_goal(board, side))
        moves = scan_move_records(output)
        log.debug("%s enumerated %d legal moves for %s", self.name, len(moves), side.value)
        return moves
