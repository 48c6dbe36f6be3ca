"""Compose tooling invocation strategy.

Two equivalent front-ends exist: the legacy standalone ``docker-compose``
binary and the integrated ``docker compose`` plugin. The choice is made once
(see ``resolve_compose_command``) and the resulting ComposeCommand is reused
by every later phase.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants
from .config import RunConfiguration
from .errors import LaunchFailure
from .runner import command_exists

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ComposeCommand:
    base: tuple[str, ...]

    @property
    def display(self) -> str:
        return ' '.join(self.base)

    def argv(self, compose_file: Path | None, *args: str) -> list[str]:
        cmd = list(self.base)
        if compose_file is not None:
            cmd += ['-f', str(compose_file)]
        return cmd + list(args)


LEGACY_COMPOSE = ComposeCommand(('docker-compose',))
INTEGRATED_COMPOSE = ComposeCommand(('docker', 'compose'))


def integrated_compose_available() -> bool:
    """Probe ``docker compose version``; any failure means unavailable."""
    try:
        result = subprocess.run(
            ['docker', 'compose', 'version'],
            capture_output=True,
            text=True,
            timeout=5
        )
    except (FileNotFoundError, subprocess.TimeoutExpired):
        return False
    return result.returncode == 0


def resolve_compose_command() -> Optional[ComposeCommand]:
    """Return the compose front-end to use, preferring the legacy binary."""
    if command_exists('docker-compose'):
        logger.debug("Using legacy docker-compose binary")
        return LEGACY_COMPOSE
    if integrated_compose_available():
        logger.debug("Using integrated docker compose plugin")
        return INTEGRATED_COMPOSE
    return None


def render_compose_file(config: RunConfiguration) -> Path:
    """
    Return the compose file to pass to ``-f``.

    A ``*.j2`` compose file is rendered with the run configuration as Jinja2
    context into the same path without the suffix.
    """
    compose_path = config.compose_file
    if compose_path.suffix != constants.TEMPLATE_SUFFIX:
        return compose_path

    from jinja2 import StrictUndefined, Template, TemplateError

    if not compose_path.exists():
        raise LaunchFailure(
            f"Compose template not found: {compose_path}",
            remediation="Run penpot-deploy build to stage the upstream files first.",
        )

    output_path = compose_path.with_suffix('')
    logger.debug(f"Rendering compose template {compose_path} -> {output_path}")
    try:
        template = Template(compose_path.read_text(encoding='utf-8'), undefined=StrictUndefined)
        rendered = template.render(**config.to_dict())
    except TemplateError as e:
        raise LaunchFailure(f"Failed to render template {compose_path}: {e}") from e

    output_path.write_text(rendered, encoding='utf-8')
    return output_path
