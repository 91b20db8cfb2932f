"""
Decision-oracle-backed player.

- choose(): enumerates legal moves through the rules oracle, formats them as coordinate tokens,
  asks the decision oracle to pick one and parses the reply with the human move grammar.
- Any failure along the way (enumeration unavailable, empty list, silent or garbled reply)
  becomes NO_MOVE_AVAILABLE; the session decides what that costs.

"""
from __future__ import annotations
import logging

from .board import Board, Side
from .decision_oracle import DecisionOracle
from .errors import OracleUnavailable
from .move_parser import MoveChoice, move_to_text, parse_move_text
from .notation import board_encoding
from .rules_oracle import RulesOracle

log = logging.getLogger("oracle_player")


class OraclePlayer:
    interactive = False

    def __init__(self, rules: RulesOracle, decision: DecisionOracle, name: str | None = None):
        self.rules = rules
        self.decision = decision
        self.name = name or "Computer"

    def choose(self, board: Board, side: Side) -> MoveChoice:
        try:
            legal = self.rules.legal_moves(board, side)
        except OracleUnavailable as e:
            log.warning("Cannot enumerate legal moves for %s: %s", side.value, e)
            return MoveChoice.no_move(str(e))
        tokens = [move_to_text(mv) for mv in legal]
        log.debug("%s legal moves for %s: %s", len(tokens), side.value, " ".join(tokens))
        reply = self.decision.choose_move(side, board_encoding(board), tokens)
        if reply is None:
            reason = "no legal moves enumerated" if not tokens else f"{self.decision.name} selected no move"
            return MoveChoice.no_move(reason)
        choice = parse_move_text(reply)
        if not choice.ok:
            log.warning("%s answered unparsable move %r", self.decision.name, reply)
            return MoveChoice.no_move(f"unparsable reply {reply!r}")
        return choice

    def close(self):
        # Oracles hold no processes between calls
        return
