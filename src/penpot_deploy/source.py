"""Upstream source acquisition into the staging directory."""

from __future__ import annotations

from .config import RunConfiguration
from .console import info, success, warn
from .errors import AcquisitionFailure, CommandError
from .runner import run_cmd


def sync_source(config: RunConfiguration) -> str:
    """
    Clone the upstream repository, or update an existing staging checkout.

    Both branches leave ``config.staging_dir`` at the current upstream head
    of ``config.source_branch``.

    Returns:
        "clone" or "pull", whichever was performed.

    Raises:
        AcquisitionFailure: with git's diagnostic output.
    """
    staging = config.staging_dir
    info("Cloning the source repository...", source=config.source_repo)

    try:
        if staging.is_dir():
            warn("Source directory already exists. Updating...")
            run_cmd(['git', 'pull', config.source_remote, config.source_branch], cwd=staging)
            action = 'pull'
        else:
            run_cmd(['git', 'clone', config.source_repo, str(staging)], cwd=config.working_dir)
            action = 'clone'
    except CommandError as e:
        raise AcquisitionFailure(
            f"git {e.command[1]} failed (exit {e.returncode}):\n{e.diagnostic}",
            remediation=f"Check network access and that {config.source_repo} "
                        f"has a '{config.source_branch}' branch, then re-run.",
        ) from e
    except FileNotFoundError as e:
        raise AcquisitionFailure(f"git could not be executed: {e}") from e

    success("Source code cloned successfully!")
    return action
