"""
One-shot oracle process invocation.

Every call spawns a fresh process, merges stderr into stdout (the oracles have
no separate diagnostic channel), waits up to timeout_s and returns the whole
output. The child is reaped before returning, including on timeout.
"""
from __future__ import annotations

import logging
import os
import shutil
import subprocess
from typing import Sequence

from .errors import OracleSetupError, OracleUnavailable

log = logging.getLogger("oracle_process")


def resolve_program(program: str) -> str:
    """Resolve an executable from PATH or an explicit file path.

    Raises OracleSetupError with guidance if it cannot be found.
    """
    resolved = shutil.which(program) or (program if os.path.isfile(program) else None)
    if not resolved:
        raise OracleSetupError(
            f"Oracle program not found (candidate='{program}'). Install it or point the "
            "settings/CLI at the binary path."
        )
    return resolved


def require_dir(path: str, what: str) -> str:
    resolved = os.path.abspath(path)
    if not os.path.isdir(resolved):
        raise OracleSetupError(f"{what} directory does not exist: {resolved}")
    return resolved


def require_file(directory: str, name: str, what: str) -> str:
    path = os.path.join(directory, name)
    if not os.path.isfile(path):
        raise OracleSetupError(f"{what} not found: {path}")
    return path


def run_oracle(args: Sequence[str], cwd: str, timeout_s: float | None, name: str) -> str:
    """Run args in cwd and return combined stdout+stderr text.

    Raises OracleUnavailable if the process cannot be started or does not finish in time.
    """
    log.debug("%s: running %s (cwd=%s)", name, list(args), cwd)
    try:
        proc = subprocess.run(
            list(args),
            cwd=cwd,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            timeout=timeout_s,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
    except subprocess.TimeoutExpired as e:
        raise OracleUnavailable(name, f"no answer within {timeout_s}s") from e
    except OSError as e:
        raise OracleUnavailable(name, f"failed to start: {e}") from e
    output = proc.stdout or ""
    log.debug("%s: exit=%s output=%r", name, proc.returncode, output[:500])
    return output
