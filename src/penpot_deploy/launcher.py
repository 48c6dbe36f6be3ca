"""Compose stack start/stop and the post-start health probe."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Callable, Optional

from .compose import ComposeCommand, render_compose_file
from .config import RunConfiguration
from .console import info, plain, success, warn
from .errors import CommandError, LaunchFailure
from .health import probe_health
from .runner import run_cmd


@dataclass(frozen=True)
class LaunchResult:
    healthy: bool
    message: str


def run_compose(
    config: RunConfiguration,
    compose: ComposeCommand,
    *args: str,
    capture_output: bool = False,
):
    """Run one compose sub-command against the configured compose file."""
    compose_file = render_compose_file(config)
    try:
        return run_cmd(
            compose.argv(compose_file, *args),
            cwd=config.working_dir,
            capture_output=capture_output,
        )
    except CommandError as e:
        raise LaunchFailure(
            f"{compose.display} {' '.join(args)} failed with exit code {e.returncode}",
            remediation=f"Check {compose_file.name} and the Docker daemon, then re-run.",
        ) from e


def start_services(
    config: RunConfiguration,
    compose: ComposeCommand,
    sleep: Optional[Callable[[float], None]] = None,
    probe: Optional[Callable[..., tuple[bool, str]]] = None,
) -> LaunchResult:
    """
    Start the stack detached, wait the grace period, probe health once.

    A failed probe is a soft failure: reported as a warning, the phase
    still succeeds. Only a failing ``up -d`` is fatal.
    """
    info("Starting services with Docker Compose...")
    run_compose(config, compose, 'up', '-d')
    success("Services started successfully!")

    info("Waiting for services to be healthy...", grace_seconds=config.startup_grace_seconds)
    (sleep or time.sleep)(config.startup_grace_seconds)

    healthy, message = (probe or probe_health)(config.health_url, timeout=config.health_timeout)
    logs_cmd = f"{compose.display} logs -f {config.service_name}"

    if healthy:
        success("PenPot MCP Server is running and healthy!")
        plain()
        info("You can now:")
        plain(f"  • View logs: {logs_cmd}")
        plain(f"  • Check status: {compose.display} ps")
        plain(f"  • Access health endpoint: {config.health_url}")
        plain(f"  • Stop services: {compose.display} down")
    else:
        warn(
            "Service might still be starting up. "
            f"Check logs with: {compose.display} logs {config.service_name}",
            probe=message,
        )
    return LaunchResult(healthy=healthy, message=message)


def stop_services(config: RunConfiguration, compose: ComposeCommand) -> None:
    info("Stopping PenPot MCP services...")
    run_compose(config, compose, 'down')
    success("Services stopped!")


def restart_services(config: RunConfiguration, compose: ComposeCommand) -> None:
    info("Restarting PenPot MCP services...")
    run_compose(config, compose, 'restart')
    success("Services restarted!")


def show_status(config: RunConfiguration, compose: ComposeCommand) -> None:
    info("Service Status:")
    run_compose(config, compose, 'ps')


def follow_logs(config: RunConfiguration, compose: ComposeCommand) -> None:
    """Stream service logs until interrupted."""
    info(f"Showing logs for {config.service_name} (Ctrl+C to stop)...")
    run_compose(config, compose, 'logs', '-f', config.service_name)
