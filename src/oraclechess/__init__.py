"""
Oracle Chess package.

Components:
- board/move_parser: board and move model, text move grammar
- rules_oracle: legality/check/checkmate/enumeration via an external Prolog process
- decision_oracle: move selection via an external Racket process
- user_player/oracle_player: move sources (console human or decision oracle)
- game: turn state machine driving one session
- notation: python-chess bridges for rendering and the decision-oracle board encoding
"""
# Package exports are intentionally minimal; import modules directly as needed.
