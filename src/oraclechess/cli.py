"""
Console entry point: play one game against the oracles.

Precedence for every knob: CLI flag -> YAML config passed with --config -> settings.yml/env (SETTINGS).
Exit status is 1 only when the oracles cannot be set up or a knob has an unusable value.
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import Sequence

from .board import Side
from .config import SETTINGS, as_bool, load_yaml, optional_int
from .decision_oracle import RacketDecisionOracle
from .errors import OracleSetupError
from .game import GameConfig, GameSession
from .notation import render_board
from .oracle_player import OraclePlayer
from .rules_oracle import PrologRulesOracle
from .user_player import ConsolePlayer

PLAYER_KINDS = ("human", "oracle")

BANNER = """
  ORACLE CHESS
  Commands:
    * Move format: e2 e4 (or e2e4)
    * Type 'quit' or 'exit' to end
"""


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Play chess with rules and AI delegated to external oracle programs.")
    ap.add_argument("--config", default=None, help="Optional YAML file to load defaults from.")
    ap.add_argument("--rules-dir", default=None, help="Directory holding the Prolog rules (check_detection.pl)")
    ap.add_argument("--rules-program", default=None, help="Prolog binary (default: swipl)")
    ap.add_argument("--decision-dir", default=None, help="Directory holding the Racket AI script (ai.rkt)")
    ap.add_argument("--decision-program", default=None, help="Racket binary (default: racket)")
    ap.add_argument("--white", choices=PLAYER_KINDS, default=None, help="Who plays White")
    ap.add_argument("--black", choices=PLAYER_KINDS, default=None, help="Who plays Black")
    ap.add_argument("--max-plies", type=int, default=None)
    ap.add_argument("--timeout", type=float, default=None, help="Seconds to wait for each oracle process")
    ap.add_argument("--ascii", action="store_true", help="Render the board with ASCII letters instead of Unicode pieces")
    ap.add_argument("--log-level", default=None, help="Python logging level (e.g., INFO, DEBUG)")
    return ap


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    cfg_dict = load_yaml(args.config) if args.config else {}

    def pick(key: str, default=None):
        v = getattr(args, key, None)
        if v is not None:
            return v
        if cfg_dict.get(key) is not None:
            return cfg_dict[key]
        return default

    log_level = str(pick("log_level", default=SETTINGS.log_level)).upper()
    logging.basicConfig(level=getattr(logging, log_level, logging.INFO), format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    log = logging.getLogger("oraclechess")

    kinds = {
        Side.WHITE: str(pick("white", default=SETTINGS.white_player)).lower(),
        Side.BLACK: str(pick("black", default=SETTINGS.black_player)).lower(),
    }
    for side, kind in kinds.items():
        if kind not in PLAYER_KINDS:
            log.error("Unsupported player kind for %s: %r (use one of %s)", side.value, kind, ", ".join(PLAYER_KINDS))
            return 1
    try:
        timeout = float(pick("timeout", default=SETTINGS.oracle_timeout_s))
        unicode = not (args.ascii or as_bool(cfg_dict.get("ascii", False)))
        max_plies = optional_int(pick("max_plies", default=SETTINGS.max_plies))
    except (TypeError, ValueError) as e:
        log.error("Invalid configuration value: %s", e)
        return 1

    try:
        rules = PrologRulesOracle(
            pick("rules_dir", default=SETTINGS.rules_oracle_dir),
            program=pick("rules_program", default=SETTINGS.rules_program),
            source=SETTINGS.rules_source,
            timeout_s=timeout,
        )
        decision = None
        if "oracle" in kinds.values():
            decision = RacketDecisionOracle(
                pick("decision_dir", default=SETTINGS.decision_oracle_dir),
                program=pick("decision_program", default=SETTINGS.decision_program),
                script=SETTINGS.decision_script,
                timeout_s=timeout,
            )
    except OracleSetupError as e:
        log.error("Oracle setup failed: %s", e)
        return 1

    players = {}
    for side, kind in kinds.items():
        if kind == "oracle":
            players[side] = OraclePlayer(rules, decision, name=f"Computer ({side.value})")
        else:
            players[side] = ConsolePlayer(show_board=False)

    gcfg = GameConfig(max_plies=max_plies, game_log=True)
    session = GameSession(rules, players, cfg=gcfg, render=lambda b: render_board(b, unicode=unicode))
    log.info("Starting game: white=%s black=%s rules=%s", kinds[Side.WHITE], kinds[Side.BLACK], rules.oracle_dir)

    print(BANNER)
    try:
        session.play()
    except KeyboardInterrupt:
        if not session.terminal:
            session.quit("interrupted")
    finally:
        for p in players.values():
            p.close()

    print(render_board(session.board, unicode=unicode))
    summary = session.summary()
    print("Result:", summary["state"], f"(winner: {summary['winner']})" if summary["winner"] else "")
    print("Termination:", summary["termination_reason"])
    print("Thanks for playing!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
