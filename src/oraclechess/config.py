"""
Configuration and environment loading for Oracle Chess.

- Loads settings.yml (YAML) from repo root, or the file named by ORACLECHESS_SETTINGS; falls back to environment variables.
- Exposes SETTINGS with oracle locations, programs, timeout and per-side player kinds.
"""
from dataclasses import dataclass
import os
from typing import Any, Callable

import yaml
from dotenv import load_dotenv

load_dotenv()


def _repo_root() -> str:
    # this file: src/oraclechess/config.py → repo root is two levels up
    return os.path.abspath(os.path.join(os.path.dirname(__file__), "..", ".."))


def load_yaml(path: str) -> dict:
    """Return the mapping stored in a YAML file, or {} when missing/unreadable/not a mapping."""
    if not os.path.isfile(path):
        return {}
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError:
            return {}
    return data if isinstance(data, dict) else {}


def _settings_path() -> str:
    return os.environ.get("ORACLECHESS_SETTINGS") or os.path.join(_repo_root(), "settings.yml")


def _get(cfg: dict, name: str, default: Any, cast: Callable[[Any], Any] | None = None) -> Any:
    if name in cfg and cfg[name] is not None:
        val = cfg[name]
        return cast(val) if cast else val
    env = os.environ.get(name)
    if env is not None:
        return cast(env) if cast else env
    return default


def optional_int(val: Any) -> int | None:
    if val in (None, "", "none", "None"):
        return None
    return int(val)


def as_bool(val: Any) -> bool:
    if isinstance(val, bool):
        return val
    text = str(val).strip().lower()
    if text in ("1", "true", "yes", "on"):
        return True
    if text in ("", "0", "false", "no", "off", "none"):
        return False
    raise ValueError(f"not a boolean: {val!r}")


@dataclass(frozen=True)
class Settings:
    # Rules oracle (SWI-Prolog)
    rules_oracle_dir: str
    rules_program: str
    rules_source: str

    # Decision oracle (Racket)
    decision_oracle_dir: str
    decision_program: str
    decision_script: str

    # Process / game knobs
    oracle_timeout_s: float
    white_player: str
    black_player: str
    max_plies: int | None
    log_level: str


def load_settings(path: str | None = None) -> Settings:
    cfg = load_yaml(path or _settings_path())
    return Settings(
        rules_oracle_dir=_get(cfg, "ORACLECHESS_RULES_DIR", "prolog"),
        rules_program=_get(cfg, "ORACLECHESS_RULES_PROGRAM", "swipl"),
        rules_source=_get(cfg, "ORACLECHESS_RULES_SOURCE", "check_detection.pl"),
        decision_oracle_dir=_get(cfg, "ORACLECHESS_DECISION_DIR", "scheme"),
        decision_program=_get(cfg, "ORACLECHESS_DECISION_PROGRAM", "racket"),
        decision_script=_get(cfg, "ORACLECHESS_DECISION_SCRIPT", "ai.rkt"),
        oracle_timeout_s=float(_get(cfg, "ORACLECHESS_ORACLE_TIMEOUT_S", 30.0, cast=float)),
        white_player=str(_get(cfg, "ORACLECHESS_WHITE", "human")).lower(),
        black_player=str(_get(cfg, "ORACLECHESS_BLACK", "human")).lower(),
        max_plies=_get(cfg, "ORACLECHESS_MAX_PLIES", 240, cast=optional_int),
        log_level=str(_get(cfg, "ORACLECHESS_LOG_LEVEL", "INFO")).upper(),
    )


SETTINGS = load_settings()
