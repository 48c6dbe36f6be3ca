"""
Staging cleanup and the exit guard that guarantees it.

The guard is entered once at process entry and wraps the whole invocation:
normal return, phase failure, usage error, Ctrl+C and SIGTERM/SIGHUP all
leave through its exit path, which runs the CleanupHandler. The handler is
run-once, so an explicit CLEANUP phase followed by the guard still removes
the staging directory exactly once.
"""

from __future__ import annotations

import logging
import shutil
import signal
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from .console import error, info, success
from .errors import CleanupFailure, TerminatedBySignal

logger = logging.getLogger(__name__)

TERMINATION_SIGNALS = tuple(
    sig for sig in (getattr(signal, 'SIGTERM', None), getattr(signal, 'SIGHUP', None))
    if sig is not None
)


class CleanupHandler:
    """Remove the staging directory, at most once per process.

    With ``quiet`` set, progress lines are suppressed so verbs that print
    machine-readable output keep stdout clean. Errors are always reported.
    """

    def __init__(self, staging_dir: Path, remove: Optional[Callable[[Path], None]] = None) -> None:
        self.staging_dir = Path(staging_dir)
        self.runs = 0
        self.quiet = False
        self._remove = remove or shutil.rmtree

    @property
    def completed(self) -> bool:
        return self.runs > 0

    def __call__(self) -> None:
        if self.completed:
            logger.debug("Cleanup already performed, skipping")
            return
        self.runs += 1

        if not self.quiet:
            info("Cleaning up temporary files...")
        if self.staging_dir.exists():
            try:
                self._remove(self.staging_dir)
            except OSError as e:
                raise CleanupFailure(
                    f"Failed to remove {self.staging_dir}: {e}",
                    remediation=f"Remove it manually: rm -rf {self.staging_dir}",
                ) from e
        else:
            logger.debug("Nothing to remove at %s", self.staging_dir)
        if not self.quiet:
            success("Cleanup completed!")

    def run_quietly(self) -> None:
        """Run cleanup while another error is propagating; report, don't raise."""
        try:
            self()
        except CleanupFailure as e:
            error(str(e))
            if e.remediation:
                error(e.remediation)


def _raise_terminated(signum, _frame):
    raise TerminatedBySignal(signum)


def _install_handlers(signals) -> dict:
    if threading.current_thread() is not threading.main_thread():
        logger.debug("Not in main thread; signal handlers not installed")
        return {}
    previous = {}
    for sig in signals:
        previous[sig] = signal.signal(sig, _raise_terminated)
    return previous


def _restore_handlers(previous: dict) -> None:
    for sig, handler in previous.items():
        signal.signal(sig, handler)


@contextmanager
def cleanup_on_exit(handler: CleanupHandler, signals=TERMINATION_SIGNALS) -> Iterator[CleanupHandler]:
    """Run ``handler`` on every way out of the with-block."""
    previous = _install_handlers(signals)
    try:
        try:
            yield handler
        except BaseException:
            handler.run_quietly()
            raise
        handler()
    finally:
        _restore_handlers(previous)
