#!/usr/bin/env python3
"""
penpot-deploy CLI entry point.

Commands (first positional argument, default: setup):
    setup      Complete setup (clone, build, start)
    build      Clone/update source, stage files, build the image
    start      Start the services
    clean      Remove the staging directory
    stop       Stop the services (compose down)
    restart    Restart the services
    logs       Follow service logs
    status     Show service status (compose ps)
    health     Probe the health endpoint once
    env        Create .env from .env.example if missing
    config     Print the effective configuration as TOML
    help       Show usage

Examples:
    penpot-deploy                  # Full setup
    penpot-deploy build            # Only build the image
    penpot-deploy setup -y         # Non-interactive setup
    penpot-deploy --config deploy.toml config
"""

from __future__ import annotations

import argparse
import os
import sys
import traceback
from pathlib import Path
from typing import Optional

from . import constants
from .cleanup import CleanupHandler, cleanup_on_exit
from .cli_utils import get_cli_version
from .config import load_run_configuration
from .console import RED, RESET, YELLOW, configure_logging, debug, error, info, plain, success
from .dispatcher import UnknownVerb, Verb, dispatch, parse_verb
from .errors import DeployError, ExitDisposition, TerminatedBySignal, UsageError
from .pipeline import PipelineContext

PROG = 'penpot-deploy'
HELP_HINT = f"Use '{PROG} help' for usage information."

# Verbs whose output should stay machine-readable
QUIET_VERBS = {Verb.CONFIG, Verb.HELP}


class ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that reports bad arguments as a UsageError instead of exiting."""

    def error(self, message):
        raise UsageError(f"{self.prog}: {message}", remediation=HELP_HINT)


def _working_dir_hint(argv: Optional[list] = None) -> Path:
    """Working tree named on the command line, read before full parsing."""
    pre = ArgumentParser(prog=PROG, add_help=False)
    pre.add_argument('--working-dir', type=Path, default=None)
    try:
        known, _ = pre.parse_known_args(argv)
    except UsageError:
        known = argparse.Namespace(working_dir=None)
    return (known.working_dir or Path.cwd()).resolve()


def parse_arguments(argv: Optional[list] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Unknown tokens are not rejected here: the first one becomes the command
    so the dispatcher reports it as an unknown command. Malformed known
    options raise UsageError.
    """
    parser = ArgumentParser(
        prog=PROG,
        description='PenPot MCP Server Docker setup',
        add_help=False,
    )
    parser.add_argument('command', nargs='?', default=None, metavar='COMMAND')
    parser.add_argument('-h', '--help', action='store_true', help='Show usage and exit')
    parser.add_argument(
        '-y', '--yes',
        action='store_true',
        help='Non-interactive mode (do not wait for .env edits)'
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        metavar='PATH',
        help='TOML file with a [deploy] table of overrides'
    )
    parser.add_argument(
        '--working-dir',
        type=Path,
        default=None,
        metavar='PATH',
        help='Working tree (default: current directory)'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        type=str.upper,
        help='Log level (default: INFO or $PENPOT_DEPLOY_LOG_LEVEL)'
    )
    parser.add_argument('--version', action='version', version=f"{PROG} {get_cli_version()}")

    args, extras = parser.parse_known_args(argv)
    if args.help:
        args.command = 'help'
    if args.command is None and extras:
        args.command = extras[0]
    return args


def _report_failure(exc: DeployError) -> None:
    error(str(exc))
    if exc.remediation:
        error(exc.remediation)


def _print_summary(ctx: PipelineContext, failed: bool) -> None:
    summary = ctx.get_summary()
    if failed:
        plain(f"\n{RED}[RUN FAILED]{RESET}")
        plain(f"  Run ID: {summary['run_id']}")
        plain(f"  Command: {summary['verb']}")
        plain(f"  Duration: {summary['duration_seconds']}s")
        plain(f"  Phases completed: {', '.join(summary['phases_completed']) or '-'}")
        plain(f"  Phase failed: {summary['phase_failed'] or '-'}")
    else:
        debug("Run summary", **summary)


def run(args: argparse.Namespace, handler: CleanupHandler) -> int:
    """Resolve configuration and dispatch; map errors to exit codes."""
    verb = parse_verb(args.command)
    quiet = verb in QUIET_VERBS
    handler.quiet = quiet

    if not quiet:
        plain()
        info("PenPot MCP Server Docker Setup Script")
        plain("=" * 43)
        plain()

    ctx: Optional[PipelineContext] = None
    try:
        working_dir = (args.working_dir or Path.cwd()).resolve()
        config = load_run_configuration(working_dir, config_file=args.config)
        handler.staging_dir = config.staging_dir

        assume_yes = args.yes or os.environ.get(constants.ENV_ASSUME_YES) == '1'
        ctx = PipelineContext(
            config=config,
            cleanup=handler,
            assume_yes=assume_yes,
            verb=args.command or verb.value,
        )
        dispatch(verb, ctx, prog=PROG)
    except DeployError as e:
        _report_failure(e)
        if ctx is not None and not isinstance(verb, UnknownVerb):
            _print_summary(ctx, failed=True)
        return int(e.disposition)
    except KeyboardInterrupt:
        plain(f"\n{YELLOW}[INTERRUPTED]{RESET} Interrupted by user")
        return int(ExitDisposition.INTERRUPTED)
    except TerminatedBySignal as e:
        plain(f"\n{YELLOW}[TERMINATED]{RESET} {e}")
        return e.exit_code

    if not quiet:
        _print_summary(ctx, failed=False)
        plain()
        if verb in (Verb.SETUP, Verb.START):
            success("🎉 Done! Your PenPot MCP Server is ready!")
        else:
            success("Done!")
    return int(ExitDisposition.SUCCESS)


def main(argv: Optional[list] = None) -> int:
    # Staging path is refined once the configuration is loaded.
    handler = CleanupHandler(_working_dir_hint(argv) / constants.SOURCE_DIR)
    try:
        with cleanup_on_exit(handler):
            try:
                args = parse_arguments(argv)
            except UsageError as e:
                configure_logging(os.environ.get(constants.ENV_LOG_LEVEL, 'INFO'))
                _report_failure(e)
                handler.run_quietly()
                return int(e.disposition)

            configure_logging(args.log_level or os.environ.get(constants.ENV_LOG_LEVEL, 'INFO'))
            code = run(args, handler)
            if code != ExitDisposition.SUCCESS:
                # A cleanup error must not replace the failure being reported
                handler.run_quietly()
            return code
    except DeployError as e:
        # Only reachable when cleanup itself fails after a successful run
        _report_failure(e)
        return int(e.disposition)
    except KeyboardInterrupt:
        return int(ExitDisposition.INTERRUPTED)
    except TerminatedBySignal as e:
        return e.exit_code


def entrypoint() -> None:
    try:
        sys.exit(main())
    except Exception as e:
        print(f"{RED}[FATAL]{RESET} Unexpected error: {e}", file=sys.stderr)
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    entrypoint()
