"""Prerequisite validation (runs before any mutating phase)."""

from __future__ import annotations

from typing import Callable, Optional, Sequence

from .compose import ComposeCommand, resolve_compose_command
from .console import info, success
from .errors import PrerequisiteFailure
from .runner import command_exists

# tool -> remediation
REQUIRED_TOOLS = {
    'docker': 'Please install Docker first: https://docs.docker.com/engine/install/',
    'git': 'Please install Git first: https://git-scm.com/downloads',
}
COMPOSE_REMEDIATION = (
    'Please install Docker Compose first (docker-compose or the docker compose plugin): '
    'https://docs.docker.com/compose/install/'
)


def check_prerequisites(
    tools: Sequence[str] = tuple(REQUIRED_TOOLS),
    compose_resolver: Callable[[], Optional[ComposeCommand]] = resolve_compose_command,
) -> ComposeCommand:
    """
    Verify every required tool is present and resolve the compose front-end.

    Plain tools must all resolve on PATH. Compose is satisfied by either
    variant.

    Returns:
        The resolved ComposeCommand, to be reused by later phases.

    Raises:
        PrerequisiteFailure: naming the first missing tool.
    """
    info("Checking prerequisites...")

    for tool in tools:
        if not command_exists(tool):
            raise PrerequisiteFailure(tool, REQUIRED_TOOLS.get(tool, f"Please install {tool} first."))

    compose = compose_resolver()
    if compose is None:
        raise PrerequisiteFailure('Docker Compose', COMPOSE_REMEDIATION)

    success("All prerequisites are met!", compose=compose.display)
    return compose
