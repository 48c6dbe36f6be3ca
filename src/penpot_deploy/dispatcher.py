"""Verb -> phase sequence dispatch."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterable, Mapping, Optional, Union

from .console import plain
from .errors import UsageError
from .pipeline import Phase, PipelineContext, run_phases


class Verb(Enum):
    SETUP = 'setup'
    BUILD = 'build'
    START = 'start'
    CLEAN = 'clean'
    HELP = 'help'
    STOP = 'stop'
    RESTART = 'restart'
    LOGS = 'logs'
    STATUS = 'status'
    HEALTH = 'health'
    ENV = 'env'
    CONFIG = 'config'


@dataclass(frozen=True)
class UnknownVerb:
    """Unrecognised command token."""

    token: str


DEFAULT_VERB = Verb.SETUP

VERB_ALIASES = {
    '--help': Verb.HELP,
    '-h': Verb.HELP,
}

VERB_PHASES: Mapping[Verb, tuple[Phase, ...]] = {
    Verb.SETUP: (
        Phase.PREREQUISITES,
        Phase.SOURCE,
        Phase.STAGE,
        Phase.ENVIRONMENT,
        Phase.BUILD,
        Phase.LAUNCH,
        Phase.CLEANUP,
    ),
    Verb.BUILD: (
        Phase.PREREQUISITES,
        Phase.SOURCE,
        Phase.STAGE,
        Phase.BUILD,
        Phase.CLEANUP,
    ),
    Verb.START: (Phase.PREREQUISITES, Phase.LAUNCH),
    Verb.CLEAN: (Phase.CLEANUP,),
    Verb.HELP: (),
    Verb.STOP: (Phase.PREREQUISITES, Phase.STOP),
    Verb.RESTART: (Phase.PREREQUISITES, Phase.RESTART),
    Verb.LOGS: (Phase.PREREQUISITES, Phase.LOGS),
    Verb.STATUS: (Phase.PREREQUISITES, Phase.STATUS),
    Verb.HEALTH: (Phase.HEALTH,),
    Verb.ENV: (Phase.ENVIRONMENT,),
    Verb.CONFIG: (Phase.CONFIG,),
}

VERB_HELP = {
    Verb.SETUP: 'Complete setup (clone, build, start) [default]',
    Verb.BUILD: 'Only build the Docker image',
    Verb.START: 'Start the services',
    Verb.CLEAN: 'Clean up temporary files',
    Verb.STOP: 'Stop and remove the service containers',
    Verb.RESTART: 'Restart the services',
    Verb.LOGS: 'Follow the service logs',
    Verb.STATUS: 'Show service status',
    Verb.HEALTH: 'Probe the health endpoint once',
    Verb.ENV: 'Create the .env file from its template if missing',
    Verb.CONFIG: 'Print the effective configuration as TOML',
    Verb.HELP: 'Show this help message',
}


def parse_verb(token: Optional[str]) -> Union[Verb, UnknownVerb]:
    if token is None:
        return DEFAULT_VERB
    if token in VERB_ALIASES:
        return VERB_ALIASES[token]
    try:
        return Verb(token)
    except ValueError:
        return UnknownVerb(token)


def usage_text(prog: str = 'penpot-deploy') -> str:
    lines = [f"Usage: {prog} [command] [options]", "", "Commands:"]
    for verb, text in VERB_HELP.items():
        lines.append(f"  {verb.value:<9}{text}")
    lines += [
        "",
        "Options:",
        "  -y, --yes              Do not wait for .env edits after creating it",
        "  --config PATH          TOML file with a [deploy] table of overrides",
        "  --working-dir PATH     Working tree (default: current directory)",
        "  --log-level LEVEL      DEBUG, INFO, WARNING or ERROR",
        "  --version              Show version and exit",
    ]
    return "\n".join(lines)


def dispatch(
    verb: Union[Verb, UnknownVerb],
    ctx: PipelineContext,
    runner: Callable[[Iterable[Phase], PipelineContext], None] = run_phases,
    prog: str = 'penpot-deploy',
) -> None:
    """Run the phase sequence bound to ``verb``.

    Raises:
        UsageError: for UnknownVerb; no phase runs.
    """
    if isinstance(verb, UnknownVerb):
        raise UsageError(
            f"Unknown command: {verb.token}",
            token=verb.token,
            remediation=f"Use '{prog} help' for usage information.",
        )
    if verb is Verb.HELP:
        plain(usage_text(prog))
        plain()
        return
    runner(VERB_PHASES[verb], ctx)
