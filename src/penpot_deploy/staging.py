"""Overlay staged upstream files onto the working tree."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable

from .console import info, success
from .errors import StagingFailure

logger = logging.getLogger(__name__)


def stage_files(source_dir: Path, target_dir: Path, excludes: Iterable[str]) -> int:
    """
    Copy everything from source_dir into target_dir, skipping excludes.

    This is a merge, not a mirror: nothing in target_dir is deleted, so
    operator-owned files (e.g. .env) survive. Files are copied with
    shutil.copy2 so modification times follow the upstream files.

    Args:
        source_dir: Staging checkout
        target_dir: Working tree
        excludes: Glob patterns matched against entry names at every level

    Returns:
        Number of files copied
    """
    info("Copying source files...")

    if not source_dir.is_dir():
        raise StagingFailure(
            f"Staging directory not found: {source_dir}",
            remediation="Run the source synchronisation first (penpot-deploy build).",
        )

    copied = 0

    def _copy(src: str, dst: str) -> str:
        nonlocal copied
        copied += 1
        logger.debug("copy %s -> %s", src, dst)
        return shutil.copy2(src, dst)

    try:
        shutil.copytree(
            source_dir,
            target_dir,
            ignore=shutil.ignore_patterns(*excludes),
            copy_function=_copy,
            dirs_exist_ok=True,
        )
    except (shutil.Error, OSError) as e:
        raise StagingFailure(f"Failed to copy {source_dir} -> {target_dir}: {e}") from e

    success("Source files copied successfully!", files=copied)
    return copied
