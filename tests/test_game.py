import unittest

from fakes import FakeDecisionOracle, FakeRulesOracle, ScriptedPlayer

from oraclechess.board import Board, Move, Piece, PieceKind, Side
from oraclechess.errors import IllegalMove, OracleUnavailable, SessionTerminal
from oraclechess.game import GameConfig, GameSession, PlyOutcome, SessionState
from oraclechess.move_parser import MoveChoice, parse_move_text
from oraclechess.oracle_player import OraclePlayer
from oraclechess.rules_oracle import IN_CHECK, IS_CHECKMATE, LEGAL_MOVE

FOOLS_MATE = ["f2f3", "e7e5", "g2g4", "d8h4"]
BLACK_QUEEN = Piece(PieceKind.QUEEN, Side.BLACK)


def queen_on_h4(board, side):
    return side is Side.WHITE and board.get(3, 7) == BLACK_QUEEN


def mv(text):
    return parse_move_text(text).move


def session(rules, white=None, black=None, **cfg):
    announced: list[str] = []
    s = GameSession(
        rules,
        {Side.WHITE: white or ScriptedPlayer(), Side.BLACK: black or ScriptedPlayer()},
        cfg=GameConfig(**cfg),
        announce=announced.append,
    )
    return s, announced


class SubmitMoveTests(unittest.TestCase):
    def test_e2e4_scenario(self):
        rules = FakeRulesOracle(legal=["e2e4"])
        s, announced = session(rules)
        self.assertIs(s.submit_move(mv("e2e4")), PlyOutcome.APPLIED)
        self.assertTrue(s.board.get(1, 4).is_empty)
        self.assertEqual(s.board.get(3, 4), Piece(PieceKind.PAWN, Side.WHITE))
        self.assertIs(s.state, SessionState.AWAITING_MOVE)
        self.assertIs(s.side_to_move, Side.BLACK)
        self.assertFalse(s.terminal)
        self.assertEqual(announced, [])
        self.assertEqual(
            rules.calls,
            [(LEGAL_MOVE, Side.WHITE, mv("e2e4")), (IS_CHECKMATE, Side.BLACK, None), (IN_CHECK, Side.BLACK, None)],
        )

    def test_illegal_move_leaves_board_and_side(self):
        rules = FakeRulesOracle(legal=[])
        s, _ = session(rules)
        before = s.board.copy()
        self.assertIs(s.submit_move(mv("e2e5")), PlyOutcome.ILLEGAL)
        self.assertEqual(s.board, before)
        self.assertIs(s.side_to_move, Side.WHITE)
        self.assertIs(s.state, SessionState.AWAITING_MOVE)
        self.assertEqual(len(rules.calls), 1)

    def test_unavailable_rules_oracle_never_authorizes(self):
        s, _ = session(FakeRulesOracle(legal=["e2e4"], unavailable=True))
        before = s.board.copy()
        self.assertIs(s.submit_move(mv("e2e4")), PlyOutcome.ORACLE_UNAVAILABLE)
        self.assertEqual(s.board, before)
        self.assertIs(s.side_to_move, Side.WHITE)

    def test_check_is_announced(self):
        rules = FakeRulesOracle(legal=["e2e4"], check=lambda board, side: side is Side.BLACK)
        s, announced = session(rules)
        self.assertIs(s.submit_move(mv("e2e4")), PlyOutcome.CHECK)
        self.assertIs(s.state, SessionState.CHECK_ANNOUNCED)
        self.assertIs(s.side_to_move, Side.BLACK)
        self.assertFalse(s.terminal)
        self.assertTrue(any("CHECK!" in a for a in announced))

    def test_checkmate_ends_session(self):
        rules = FakeRulesOracle(legal=FOOLS_MATE, checkmate=queen_on_h4)
        s, announced = session(rules)
        outcomes = [s.submit_move(mv(t)) for t in FOOLS_MATE]
        self.assertEqual(outcomes[-1], PlyOutcome.CHECKMATE)
        self.assertIs(s.state, SessionState.CHECKMATE)
        self.assertTrue(s.terminal)
        self.assertIs(s.winner, Side.BLACK)
        self.assertEqual(s.termination_reason, "checkmate")
        self.assertIn("*** CHECKMATE! Black wins! ***", announced)
        self.assertEqual(s.ply_count, 4)

        with self.assertRaises(SessionTerminal):
            s.submit_move(mv("e2e4"))
        with self.assertRaises(SessionTerminal):
            s.play_ply()
        with self.assertRaises(SessionTerminal):
            s.quit()

    def test_require_legal_raises(self):
        s, _ = session(FakeRulesOracle(legal=[]))
        with self.assertRaises(IllegalMove):
            s.require_legal(mv("e2e4"))
        s, _ = session(FakeRulesOracle(unavailable=True))
        with self.assertRaises(OracleUnavailable):
            s.require_legal(mv("e2e4"))

    def test_missing_player_binding(self):
        with self.assertRaises(ValueError):
            GameSession(FakeRulesOracle(), {Side.WHITE: ScriptedPlayer()})


class PlyTests(unittest.TestCase):
    def test_quit_aborts(self):
        s, _ = session(FakeRulesOracle(), white=ScriptedPlayer([MoveChoice.quit("quit")], interactive=True))
        self.assertIs(s.play_ply(), PlyOutcome.QUIT)
        self.assertIs(s.state, SessionState.ABORTED)
        self.assertTrue(s.terminal)
        with self.assertRaises(SessionTerminal):
            s.submit_move(mv("e2e4"))

    def test_human_is_reprompted_until_legal(self):
        white = ScriptedPlayer(["e2e5", MoveChoice.parse_failure("zz"), "e2e4"], interactive=True)
        s, announced = session(FakeRulesOracle(legal=["e2e4"]), white=white)
        self.assertIs(s.play_ply(), PlyOutcome.APPLIED)
        self.assertEqual(len(white.seen), 3)
        self.assertIn("Illegal move: e2e5.", announced)
        self.assertIs(s.side_to_move, Side.BLACK)

    def test_oracle_player_is_reasked_after_illegal_proposal(self):
        rules = FakeRulesOracle(legal=["e2e4"], moves={Side.WHITE: [mv("e2e4")]})
        white = OraclePlayer(rules, FakeDecisionOracle(["e2e5", "e2e4"]))
        s, announced = session(rules, white=white)
        self.assertIs(s.play_ply(), PlyOutcome.APPLIED)
        self.assertIn("Illegal move: e2e5.", announced)
        self.assertEqual(s.board.get(3, 4), Piece(PieceKind.PAWN, Side.WHITE))

    def test_oracle_player_without_move_forfeits_ply(self):
        rules = FakeRulesOracle(legal=["e2e4"], moves={Side.WHITE: [mv("e2e4")]})
        s, announced = session(rules, white=OraclePlayer(rules, FakeDecisionOracle([])))
        before = s.board.copy()
        self.assertIs(s.play_ply(), PlyOutcome.FORFEITED)
        self.assertEqual(s.board, before)
        self.assertIs(s.side_to_move, Side.BLACK)
        self.assertFalse(s.terminal)
        self.assertTrue(any("forfeits" in a for a in announced))

    def test_unparsable_oracle_reply_forfeits_without_crash(self):
        rules = FakeRulesOracle(legal=["e2e4"], moves={Side.WHITE: [mv("e2e4")]})
        s, _ = session(rules, white=OraclePlayer(rules, FakeDecisionOracle(["banana"])))
        self.assertIs(s.play_ply(), PlyOutcome.FORFEITED)

    def test_retry_limit_for_non_interactive_player(self):
        white = ScriptedPlayer(["e2e5", "e2e6", "e2e7", "e2e4"])
        s, _ = session(FakeRulesOracle(legal=["e2e4"]), white=white, max_attempts_per_ply=3)
        self.assertIs(s.play_ply(), PlyOutcome.FORFEITED)
        self.assertEqual(len(white.seen), 3)
        self.assertEqual(s.summary()["illegal_attempts"], 3)
        self.assertIs(s.side_to_move, Side.BLACK)

    def test_players_get_a_snapshot(self):
        white = ScriptedPlayer(["e2e4"])
        s, _ = session(FakeRulesOracle(legal=["e2e4"]), white=white)
        s.play_ply()
        seen_board, seen_side = white.seen[0]
        self.assertIsNot(seen_board, s.board)
        self.assertFalse(seen_board.get(1, 4).is_empty)
        self.assertIs(seen_side, Side.WHITE)


class PlayLoopTests(unittest.TestCase):
    def test_fools_mate_through_players(self):
        rules = FakeRulesOracle(legal=FOOLS_MATE, checkmate=queen_on_h4)
        white = ScriptedPlayer(["f2f3", "g2g4"], interactive=True)
        black = ScriptedPlayer(["e7e5", "d8h4"], interactive=True)
        s, _ = session(rules, white=white, black=black)
        self.assertIs(s.play(), SessionState.CHECKMATE)
        self.assertIs(s.winner, Side.BLACK)
        self.assertEqual([r["move"] for r in s.records], FOOLS_MATE)
        self.assertEqual(s.board.get(3, 7), BLACK_QUEEN)
        self.assertTrue(s.board.get(7, 3).is_empty)

    def test_max_plies_stops_without_terminal_state(self):
        white = ScriptedPlayer([MoveChoice.no_move("offline")] * 5)
        black = ScriptedPlayer([MoveChoice.no_move("offline")] * 5)
        s, _ = session(FakeRulesOracle(), white=white, black=black, max_plies=4)
        self.assertIs(s.play(), SessionState.AWAITING_MOVE)
        self.assertFalse(s.terminal)
        self.assertEqual(s.termination_reason, "max_plies_reached")
        self.assertEqual(s.summary()["forfeits"], 4)

    def test_board_rendered_before_every_ply(self):
        announced: list[str] = []
        white = ScriptedPlayer([MoveChoice.no_move("offline")] * 3)
        black = ScriptedPlayer([MoveChoice.no_move("offline")] * 3)
        s = GameSession(FakeRulesOracle(), {Side.WHITE: white, Side.BLACK: black}, cfg=GameConfig(max_plies=3),
                        announce=announced.append, render=lambda b: "<board>")
        s.play()
        self.assertEqual(announced.count("<board>"), 3)
        self.assertEqual(announced[0], "<board>")

    def test_quit_mid_game(self):
        white = ScriptedPlayer(["e2e4", MoveChoice.quit("quit")], interactive=True)
        black = ScriptedPlayer(["e7e5"], interactive=True)
        s, _ = session(FakeRulesOracle(legal=["e2e4", "e7e5"]), white=white, black=black)
        self.assertIs(s.play(), SessionState.ABORTED)
        self.assertIsNone(s.winner)
        self.assertEqual(s.ply_count, 2)

    def test_summary(self):
        s, _ = session(FakeRulesOracle(legal=["e2e4"]))
        s.submit_move(mv("e2e5"))
        s.submit_move(mv("e2e4"))
        summary = s.summary()
        self.assertEqual(summary["plies"], 1)
        self.assertEqual(summary["illegal_attempts"], 1)
        self.assertEqual(summary["state"], "awaiting_move")


if __name__ == "__main__":
    unittest.main()
