"""
Decision oracle: picks one move among moves the rules oracle already enumerated.

Advisory only. Whatever it answers is re-parsed and re-validated by the game session.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional, Sequence

from .board import Side
from .errors import OracleUnavailable
from .oracle_process import require_dir, require_file, resolve_program, run_oracle

log = logging.getLogger("decision_oracle")


def first_token(output: str | None) -> Optional[str]:
    """First whitespace-delimited token of output, or None if there is none."""
    tokens = (output or "").split()
    return tokens[0] if tokens else None


class DecisionOracle(ABC):
    name = "decision oracle"

    @abstractmethod
    def choose_move(self, side: Side, board_encoding: str, legal_move_tokens: Sequence[str]) -> Optional[str]:
        """Return the chosen move token, or None for "no move"."""


class RacketDecisionOracle(DecisionOracle):
    name = "racket decision oracle"

    def __init__(self, oracle_dir: str, program: str = "racket", script: str = "ai.rkt", timeout_s: float | None = 30.0):
        self.oracle_dir = require_dir(oracle_dir, "Decision oracle")
        self.script = script
        require_file(self.oracle_dir, script, "Decision script")
        self.program = resolve_program(program)
        self.timeout_s = timeout_s

    def choose_move(self, side: Side, board_encoding: str, legal_move_tokens: Sequence[str]) -> Optional[str]:
        if not legal_move_tokens:
            return None
        args = [self.program, self.script, side.value, board_encoding, *legal_move_tokens]
        try:
            output = run_oracle(args, self.oracle_dir, self.timeout_s, self.name)
        except OracleUnavailable as e:
            log.warning("%s: no move selected", e)
            return None
        token = first_token(output)
        if token is None:
            log.warning("%s printed nothing for %s", self.name, side.value)
        return token
