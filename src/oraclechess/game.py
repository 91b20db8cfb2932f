"""
Single-session turn state machine.

- GameConfig: knobs for max plies, retry limit for non-interactive players, and per-ply logging.
- GameSession: owns the Board and the side to move; each ply asks the bound player for a MoveChoice,
  re-validates it with the rules oracle (whoever proposed it), applies it, then asks the rules oracle
  whether the opponent is checkmated or in check.
  - Human players loop until they produce a legal move or quit.
  - Oracle players are re-asked after an illegal proposal and forfeit the ply when they have no move
    or exhaust their attempts.
  - CHECKMATE and ABORTED are terminal; any later move attempt raises SessionTerminal.

"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Mapping, Optional, Protocol

from .board import Board, Move, Side
from .errors import IllegalMove, OracleUnavailable, SessionTerminal
from .move_parser import ChoiceKind, MoveChoice, move_to_text
from .rules_oracle import LEGAL_MOVE, RulesOracle, Verdict


class Player(Protocol):
    name: str
    interactive: bool

    def choose(self, board: Board, side: Side) -> MoveChoice: ...

    def close(self) -> None: ...


class SessionState(str, Enum):
    AWAITING_MOVE = "awaiting_move"
    EVALUATING = "evaluating"
    CHECK_ANNOUNCED = "check_announced"
    CHECKMATE = "checkmate"
    ABORTED = "aborted"


TERMINAL_STATES = frozenset({SessionState.CHECKMATE, SessionState.ABORTED})


class PlyOutcome(str, Enum):
    APPLIED = "applied"
    CHECK = "check"
    CHECKMATE = "checkmate"
    ILLEGAL = "illegal"
    ORACLE_UNAVAILABLE = "oracle_unavailable"
    FORFEITED = "forfeited"
    QUIT = "quit"


REJECTED = frozenset({PlyOutcome.ILLEGAL, PlyOutcome.ORACLE_UNAVAILABLE})


@dataclass
class GameConfig:
    max_plies: int | None = 240           # None plays until checkmate or quit
    max_attempts_per_ply: int = 3         # rejected proposals tolerated from a non-interactive player
    game_log: bool = False                # log every ply at INFO


class GameSession:
    def __init__(self, rules: RulesOracle, players: Mapping[Side, Player], board: Optional[Board] = None,
                 cfg: GameConfig | None = None, announce: Callable[[str], None] = print,
                 side_to_move: Side = Side.WHITE, render: Callable[[Board], str] | None = None):
        self.log = logging.getLogger("GameSession")
        missing = [s.value for s in Side if s not in players]
        if missing:
            raise ValueError(f"No player bound for: {', '.join(missing)}")
        self.rules = rules
        self.players = dict(players)
        self.cfg = cfg or GameConfig()
        self.announce = announce
        self.render = render  # board diagram announced before every ply
        self._board = board if board is not None else Board()
        self._side = side_to_move
        self._state = SessionState.AWAITING_MOVE
        self.winner: Side | None = None
        self.termination_reason: str | None = None
        self.records: list[dict] = []  # one dict per attempted ply
        self.ply_count = 0  # applied moves plus forfeits

    # ---------------- State -----------------
    @property
    def board(self) -> Board:
        return self._board

    @property
    def side_to_move(self) -> Side:
        return self._side

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def terminal(self) -> bool:
        return self._state in TERMINAL_STATES

    def _ensure_active(self) -> None:
        if self.terminal:
            raise SessionTerminal(f"Session already ended ({self._state.value}: {self.termination_reason})")

    def _record(self, side: Side, move: Move | None, outcome: PlyOutcome, **extra) -> None:
        rec = {"ply": self.ply_count + 1, "side": side.value, "move": move_to_text(move) if move else None, "outcome": outcome.value}
        rec.update(extra)
        self.records.append(rec)
        if self.cfg.game_log:
            self.log.info("[ply %d] %s: move=%s outcome=%s", rec["ply"], side.value, rec["move"] or "(none)", outcome.value)
        else:
            self.log.debug("Ply %d %s move %s outcome=%s", rec["ply"], side.value, rec["move"], outcome.value)

    # ---------------- Transitions -----------------
    def quit(self, reason: str = "quit") -> None:
        self._ensure_active()
        self._state = SessionState.ABORTED
        self.termination_reason = reason
        self.log.info("Session aborted by %s (%s)", self._side.value, reason)

    def require_legal(self, move: Move) -> None:
        """Raise IllegalMove if the rules oracle rejects move, OracleUnavailable if it cannot say."""
        verdict = self.rules.evaluate(LEGAL_MOVE, self._board, self._side, move)
        if verdict is Verdict.FAILURE:
            raise IllegalMove(f"{self._side.label()} cannot play {move_to_text(move)}")
        if verdict is not Verdict.SUCCESS:
            raise OracleUnavailable(self.rules.name, f"no verdict for {move_to_text(move)}")

    def submit_move(self, move: Move) -> PlyOutcome:
        """Validate, apply and evaluate one move for the side to move."""
        self._ensure_active()
        side = self._side
        prior = self._state
        self._state = SessionState.EVALUATING
        try:
            self.require_legal(move)
        except IllegalMove as e:
            self._state = prior
            self.log.debug("%s", e)
            self._record(side, move, PlyOutcome.ILLEGAL)
            return PlyOutcome.ILLEGAL
        except OracleUnavailable as e:
            self._state = prior
            self.log.warning("Move %s rejected: %s", move_to_text(move), e)
            self._record(side, move, PlyOutcome.ORACLE_UNAVAILABLE)
            return PlyOutcome.ORACLE_UNAVAILABLE

        captured = self._board.apply_move(move)
        opponent = side.opponent
        if self.rules.is_checkmate(self._board, opponent):
            self._state = SessionState.CHECKMATE
            self.winner = side
            self.termination_reason = "checkmate"
            self._record(side, move, PlyOutcome.CHECKMATE, captured=None if captured.is_empty else str(captured))
            self.ply_count += 1
            self.announce(f"*** CHECKMATE! {side.label()} wins! ***")
            self.log.info("Checkmate after %d plies, winner=%s", self.ply_count, side.value)
            return PlyOutcome.CHECKMATE

        self._side = opponent
        if self.rules.is_in_check(self._board, opponent):
            self._state = SessionState.CHECK_ANNOUNCED
            outcome = PlyOutcome.CHECK
            self.announce(f"*** CHECK! {opponent.label()} is in check. ***")
        else:
            self._state = SessionState.AWAITING_MOVE
            outcome = PlyOutcome.APPLIED
        self._record(side, move, outcome, captured=None if captured.is_empty else str(captured))
        self.ply_count += 1
        return outcome

    def _forfeit(self, side: Side, reason: str | None) -> PlyOutcome:
        self._record(side, None, PlyOutcome.FORFEITED, reason=reason)
        self.ply_count += 1
        self.announce(f"{side.label()} forfeits the ply ({reason or 'no move'}).")
        self._side = side.opponent
        self._state = SessionState.AWAITING_MOVE
        return PlyOutcome.FORFEITED

    def _reject_message(self, move: Move, outcome: PlyOutcome) -> str:
        if outcome is PlyOutcome.ILLEGAL:
            return f"Illegal move: {move_to_text(move)}."
        return "Rules oracle unavailable; move not accepted."

    def play_ply(self) -> PlyOutcome:
        """Run one ply for the side to move, retrying or forfeiting per the player's kind."""
        self._ensure_active()
        side = self._side
        player = self.players[side]
        if self.render is not None:
            self.announce(self.render(self._board))
        attempts = 0
        while True:
            choice = player.choose(self._board.copy(), side)
            if choice.kind is ChoiceKind.QUIT:
                self.quit(choice.detail or "quit")
                self.announce(f"{side.label()} quits.")
                return PlyOutcome.QUIT
            if choice.kind is not ChoiceKind.PROPOSED:
                if player.interactive:
                    self.announce("Invalid format! Use format like 'e2 e4'.")
                    continue
                return self._forfeit(side, choice.detail)

            outcome = self.submit_move(choice.move)
            if outcome not in REJECTED:
                return outcome
            self.announce(self._reject_message(choice.move, outcome))
            if player.interactive:
                continue
            attempts += 1
            if attempts >= self.cfg.max_attempts_per_ply:
                return self._forfeit(side, f"{attempts} rejected proposals")

    def play(self) -> SessionState:
        """Play plies until checkmate, quit, or cfg.max_plies."""
        while not self.terminal:
            if self.cfg.max_plies is not None and self.ply_count >= self.cfg.max_plies:
                self.termination_reason = "max_plies_reached"
                self.log.info("Stopping after %d plies (max_plies)", self.ply_count)
                break
            self.play_ply()
        self.log.info("Session finished state=%s reason=%s plies=%d", self._state.value, self.termination_reason, self.ply_count)
        return self._state

    # ---------------- Metrics -----------------
    def summary(self) -> dict:
        outcomes = [r["outcome"] for r in self.records]
        return {
            "state": self._state.value,
            "winner": self.winner.value if self.winner else None,
            "termination_reason": self.termination_reason,
            "plies": self.ply_count,
            "illegal_attempts": outcomes.count(PlyOutcome.ILLEGAL.value),
            "oracle_unavailable": outcomes.count(PlyOutcome.ORACLE_UNAVAILABLE.value),
            "forfeits": outcomes.count(PlyOutcome.FORFEITED.value),
            "checks": outcomes.count(PlyOutcome.CHECK.value),
        }
