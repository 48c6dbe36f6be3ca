"""Environment file bootstrap (.env from .env.example)."""

from __future__ import annotations

import shutil
from typing import Callable, Optional

from .config import RunConfiguration
from .console import info, plain, success, warn
from .constants import ENV_PLACEHOLDER_KEYS
from .errors import ConfigurationMissing


def bootstrap_environment(
    config: RunConfiguration,
    assume_yes: bool = False,
    prompt: Optional[Callable[[str], str]] = None,
) -> bool:
    """
    Ensure the env file exists, seeding it from the template on first run.

    A freshly created file holds placeholder credentials, so the run blocks
    until the operator acknowledges (unless assume_yes is set). An existing
    file is never touched.

    Returns:
        True when the file was created by this call.

    Raises:
        ConfigurationMissing: when both the env file and its template are absent.
    """
    info("Setting up environment file...")
    env_file = config.env_file
    template = config.env_template

    if env_file.exists():
        success("Environment file already exists.")
        return False

    if not template.exists():
        raise ConfigurationMissing(
            f"Neither {env_file.name} nor its template {template.name} exists in {env_file.parent}",
            remediation=f"Create {env_file} with your credentials, or restore {template.name} "
                        "by running: penpot-deploy build",
        )

    shutil.copy2(template, env_file)
    warn(f"Created {env_file.name} file from template. Please edit it with your Penpot credentials:")
    for line in ENV_PLACEHOLDER_KEYS:
        warn(f"  {line}")
    plain()

    if assume_yes:
        info("Non-interactive mode: continuing without waiting for edits")
        return True

    try:
        (prompt or input)(f"Press Enter to continue after editing the {env_file.name} file...")
    except EOFError:
        # stdin closed: nothing more to wait for
        plain()
    return True
