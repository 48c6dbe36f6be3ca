"""Subprocess helpers shared by the pipeline phases."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path
from typing import Mapping, Sequence

from .console import info
from .errors import CommandError

logger = logging.getLogger(__name__)


def command_exists(name: str) -> bool:
    """Return True when ``name`` resolves on PATH."""
    return shutil.which(name) is not None


def run_cmd(
    cmd: Sequence[str],
    cwd: str | Path | None = None,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    capture_output: bool = True,
    timeout: float | None = None,
) -> subprocess.CompletedProcess:
    """Run a command and return the result.

    With ``capture_output=False`` the child writes straight to the terminal
    (used for long builds). A non-zero exit raises CommandError when
    ``check`` is set.
    """
    info(f"Running: {' '.join(cmd)}")
    logger.debug("cwd=%s timeout=%s", cwd, timeout)
    result = subprocess.run(
        list(cmd),
        cwd=str(cwd) if cwd else None,
        capture_output=capture_output,
        text=True,
        env=dict(env) if env is not None else None,
        timeout=timeout,
    )
    if check and result.returncode != 0:
        raise CommandError(cmd, result.returncode, result.stdout, result.stderr)
    return result
