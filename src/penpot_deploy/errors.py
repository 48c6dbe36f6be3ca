"""Error taxonomy and exit codes for penpot-deploy."""

from __future__ import annotations

import signal
from enum import IntEnum
from typing import Sequence


class ExitDisposition(IntEnum):
    """Terminal state of one invocation, valued as the process exit code."""

    SUCCESS = 0
    USAGE_ERROR = 1
    PREREQUISITE_FAILURE = 3
    PHASE_FAILURE = 4
    INTERRUPTED = 130
    TERMINATED = 143


class DeployError(Exception):
    """Base class for fatal pipeline errors.

    ``remediation`` is printed under the error line so the operator knows
    which command to run or which file to edit.
    """

    disposition = ExitDisposition.PHASE_FAILURE

    def __init__(self, message: str, remediation: str | None = None) -> None:
        super().__init__(message)
        self.remediation = remediation


class UsageError(DeployError):
    disposition = ExitDisposition.USAGE_ERROR

    def __init__(self, message: str, token: str | None = None, remediation: str | None = None) -> None:
        super().__init__(message, remediation)
        self.token = token


class ConfigError(UsageError):
    """Raised when a --config file or PENPOT_DEPLOY_* override is invalid."""


class PrerequisiteFailure(DeployError):
    disposition = ExitDisposition.PREREQUISITE_FAILURE

    def __init__(self, tool: str, remediation: str | None = None) -> None:
        super().__init__(f"{tool} is not installed.", remediation)
        self.tool = tool


class AcquisitionFailure(DeployError):
    """git clone/pull failed; the message carries git's own diagnostic."""


class StagingFailure(DeployError):
    pass


class ConfigurationMissing(DeployError):
    """Neither the env file nor its template exists."""


class BuildFailure(DeployError):
    pass


class LaunchFailure(DeployError):
    """`compose up -d` itself failed (not a health probe miss)."""


class HealthCheckFailure(DeployError):
    pass


class CleanupFailure(DeployError):
    pass


class CommandError(RuntimeError):
    """Raised when a subprocess exits with a non-zero status code."""

    def __init__(self, command: Sequence[str], returncode: int, stdout: str | None, stderr: str | None) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stdout = stdout or ''
        self.stderr = stderr or ''
        super().__init__(f"Command {' '.join(self.command)} failed with exit code {returncode}")

    @property
    def diagnostic(self) -> str:
        """Best available tool output, stderr first."""
        return (self.stderr or self.stdout).strip()


class TerminatedBySignal(BaseException):
    """Raised from a signal handler so ``finally`` blocks still run.

    Derives from BaseException for the same reason KeyboardInterrupt does:
    ``except Exception`` inside a phase must not swallow it.
    """

    def __init__(self, signum: int) -> None:
        self.signum = signum
        try:
            name = signal.Signals(signum).name
        except ValueError:
            name = str(signum)
        super().__init__(f"Terminated by {name}")

    @property
    def exit_code(self) -> int:
        return 128 + self.signum
