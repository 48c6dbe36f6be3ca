"""
Pipeline phases and the sequential runner.

Each Phase maps to one function taking the PipelineContext. A phase either
returns (success) or raises; the runner stops at the first raise so no later
phase starts until its predecessor has succeeded.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, TypedDict

from . import launcher
from .build import build_image
from .cleanup import CleanupHandler
from .compose import ComposeCommand
from .config import RunConfiguration, render_config_toml
from .console import info, plain, success
from .environment import bootstrap_environment
from .errors import HealthCheckFailure
from .health import probe_health
from .prerequisites import check_prerequisites
from .source import sync_source
from .staging import stage_files

logger = logging.getLogger(__name__)


class Phase(Enum):
    PREREQUISITES = 'prerequisites'
    SOURCE = 'source'
    STAGE = 'stage'
    ENVIRONMENT = 'environment'
    BUILD = 'build'
    LAUNCH = 'launch'
    CLEANUP = 'cleanup'
    # Operational phases for an already deployed stack
    STOP = 'stop'
    RESTART = 'restart'
    LOGS = 'logs'
    STATUS = 'status'
    HEALTH = 'health'
    CONFIG = 'config'


class RunSummary(TypedDict):
    run_id: str
    verb: Optional[str]
    duration_seconds: int
    phases_completed: list[str]
    phase_failed: Optional[str]


@dataclass
class PipelineContext:
    """Shared state for one invocation.

    ``compose`` is filled in by the prerequisites phase and reused by every
    compose-driven phase afterwards.
    """

    config: RunConfiguration
    cleanup: CleanupHandler
    assume_yes: bool = False
    compose: Optional[ComposeCommand] = None
    prompt: Optional[Callable[[str], str]] = None
    sleep: Optional[Callable[[float], None]] = None
    probe: Optional[Callable[..., tuple[bool, str]]] = None
    verb: Optional[str] = None
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:8])
    start_time: float = field(default_factory=time.time)
    phases_completed: list[Phase] = field(default_factory=list)
    phase_failed: Optional[Phase] = None
    launch_result: Optional[launcher.LaunchResult] = None

    def get_summary(self) -> RunSummary:
        return {
            'run_id': self.run_id,
            'verb': self.verb,
            'duration_seconds': int(time.time() - self.start_time),
            'phases_completed': [phase.value for phase in self.phases_completed],
            'phase_failed': self.phase_failed.value if self.phase_failed else None,
        }


def _require_compose(ctx: PipelineContext) -> ComposeCommand:
    if ctx.compose is None:
        raise RuntimeError("Compose front-end not resolved; the prerequisites phase must run first")
    return ctx.compose


def _prerequisites(ctx: PipelineContext) -> None:
    ctx.compose = check_prerequisites()


def _source(ctx: PipelineContext) -> None:
    sync_source(ctx.config)


def _stage(ctx: PipelineContext) -> None:
    config = ctx.config
    stage_files(config.staging_dir, config.working_dir, config.staging_excludes)


def _environment(ctx: PipelineContext) -> None:
    bootstrap_environment(ctx.config, assume_yes=ctx.assume_yes, prompt=ctx.prompt)


def _build(ctx: PipelineContext) -> None:
    build_image(ctx.config)


def _launch(ctx: PipelineContext) -> None:
    ctx.launch_result = launcher.start_services(
        ctx.config, _require_compose(ctx), sleep=ctx.sleep, probe=ctx.probe
    )


def _cleanup(ctx: PipelineContext) -> None:
    ctx.cleanup()


def _stop(ctx: PipelineContext) -> None:
    launcher.stop_services(ctx.config, _require_compose(ctx))


def _restart(ctx: PipelineContext) -> None:
    launcher.restart_services(ctx.config, _require_compose(ctx))


def _logs(ctx: PipelineContext) -> None:
    launcher.follow_logs(ctx.config, _require_compose(ctx))


def _status(ctx: PipelineContext) -> None:
    launcher.show_status(ctx.config, _require_compose(ctx))


def _health(ctx: PipelineContext) -> None:
    info("Checking service health...", url=ctx.config.health_url)
    healthy, message = (ctx.probe or probe_health)(ctx.config.health_url, timeout=ctx.config.health_timeout)
    if not healthy:
        compose = ctx.compose.display if ctx.compose else 'docker compose'
        raise HealthCheckFailure(
            f"Service is not responding ({message})",
            remediation=f"Check logs with: {compose} logs {ctx.config.service_name}",
        )
    success("Service is healthy!", probe=message)


def _config(ctx: PipelineContext) -> None:
    plain(render_config_toml(ctx.config).rstrip())


PHASE_FUNCTIONS: Mapping[Phase, Callable[[PipelineContext], None]] = {
    Phase.PREREQUISITES: _prerequisites,
    Phase.SOURCE: _source,
    Phase.STAGE: _stage,
    Phase.ENVIRONMENT: _environment,
    Phase.BUILD: _build,
    Phase.LAUNCH: _launch,
    Phase.CLEANUP: _cleanup,
    Phase.STOP: _stop,
    Phase.RESTART: _restart,
    Phase.LOGS: _logs,
    Phase.STATUS: _status,
    Phase.HEALTH: _health,
    Phase.CONFIG: _config,
}


def run_phases(
    phases: Iterable[Phase],
    ctx: PipelineContext,
    registry: Mapping[Phase, Callable[[PipelineContext], None]] = PHASE_FUNCTIONS,
) -> None:
    """Execute phases in order, stopping at the first failure."""
    phases = list(phases)
    for index, phase in enumerate(phases, 1):
        logger.debug("Phase %d/%d: %s", index, len(phases), phase.value)
        try:
            registry[phase](ctx)
        except BaseException:
            ctx.phase_failed = phase
            raise
        ctx.phases_completed.append(phase)
