"""
Run configuration for one penpot-deploy invocation.

Layering (later wins):
1. Built-in defaults from constants.py
2. Optional TOML file passed with --config ([deploy] table)
3. PENPOT_DEPLOY_<FIELD> environment variables

No external file is required; the defaults describe a complete setup.
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Mapping, Optional

from . import constants
from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RunConfiguration:
    """Immutable settings shared by every phase of one invocation."""

    working_dir: Path
    source_repo: str = constants.SOURCE_REPO
    source_remote: str = constants.SOURCE_REMOTE
    source_branch: str = constants.SOURCE_BRANCH
    staging_dir: Path = Path(constants.SOURCE_DIR)
    image_name: str = constants.IMAGE_NAME
    image_tag: str = constants.IMAGE_TAG
    service_name: str = constants.SERVICE_NAME
    container_name: str = constants.CONTAINER_NAME
    env_file: Path = Path(constants.ENV_FILE)
    env_template: Path = Path(constants.ENV_TEMPLATE)
    compose_file: Path = Path(constants.COMPOSE_FILE)
    health_url: str = constants.HEALTH_URL
    health_timeout: float = constants.HEALTH_TIMEOUT_SECONDS
    startup_grace_seconds: float = constants.STARTUP_GRACE_SECONDS
    staging_excludes: tuple[str, ...] = constants.STAGING_EXCLUDES

    def __post_init__(self) -> None:
        # Relative paths are anchored at the working tree.
        working_dir = Path(self.working_dir).resolve()
        object.__setattr__(self, 'working_dir', working_dir)
        for name in _PATH_FIELDS:
            value = Path(getattr(self, name))
            if not value.is_absolute():
                value = working_dir / value
            object.__setattr__(self, name, value)

        # Cleanup removes staging_dir recursively; it must never cover the working tree.
        staging = self.staging_dir.resolve()
        if staging == working_dir or staging in working_dir.parents:
            raise ConfigError(
                f"staging_dir {self.staging_dir} would contain the working tree {working_dir}",
                remediation=f"Point staging_dir at a dedicated directory such as {constants.SOURCE_DIR}",
            )

    @property
    def image_ref(self) -> str:
        return f"{self.image_name}:{self.image_tag}"

    def to_dict(self) -> dict[str, Any]:
        """Plain-data view used for TOML output and template rendering."""
        data = asdict(self)
        for key, value in data.items():
            if isinstance(value, Path):
                data[key] = str(value)
            elif isinstance(value, tuple):
                data[key] = list(value)
        return data


_PATH_FIELDS = ('staging_dir', 'env_file', 'env_template', 'compose_file')
_FLOAT_FIELDS = ('health_timeout', 'startup_grace_seconds')
_OVERRIDABLE = tuple(f.name for f in fields(RunConfiguration) if f.name != 'working_dir')


def parse_toml(file_path: Path) -> dict:
    """Parse a TOML file, failing with a ConfigError on syntax errors."""
    if not file_path.exists():
        raise ConfigError(f"Config file not found: {file_path}")
    try:
        with open(file_path, 'rb') as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Failed to parse TOML from {file_path}: {e}") from e


def _coerce(name: str, value: Any, source: str) -> Any:
    try:
        if name in _FLOAT_FIELDS:
            return float(value)
        if name == 'staging_excludes':
            if isinstance(value, str):
                return tuple(item.strip() for item in value.split(',') if item.strip())
            return tuple(str(item) for item in value)
        if name in _PATH_FIELDS:
            return Path(value)
        return str(value)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for '{name}' in {source}: {value!r}") from e


def _file_overrides(config_file: Path) -> dict[str, Any]:
    raw = parse_toml(config_file)
    table = raw.get(constants.CONFIG_TABLE, {})
    if not isinstance(table, dict):
        raise ConfigError(f"[{constants.CONFIG_TABLE}] in {config_file} must be a table")

    unknown = sorted(set(table) - set(_OVERRIDABLE))
    if unknown:
        raise ConfigError(
            f"Unknown keys in [{constants.CONFIG_TABLE}] of {config_file}: {', '.join(unknown)}",
            remediation=f"Valid keys: {', '.join(_OVERRIDABLE)}",
        )
    return {key: _coerce(key, value, str(config_file)) for key, value in table.items()}


def _env_overrides(environ: Mapping[str, str]) -> dict[str, Any]:
    overrides = {}
    for name in _OVERRIDABLE:
        env_key = f"{constants.ENV_PREFIX}{name.upper()}"
        if env_key in environ:
            overrides[name] = _coerce(name, environ[env_key], env_key)
    return overrides


def load_run_configuration(
    working_dir: Path | str,
    config_file: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RunConfiguration:
    """Build the RunConfiguration for this invocation."""
    environ = os.environ if environ is None else environ

    values: dict[str, Any] = {}
    if config_file is not None:
        values.update(_file_overrides(Path(config_file)))
        logger.debug("Loaded %d override(s) from %s", len(values), config_file)

    env_values = _env_overrides(environ)
    if env_values:
        logger.debug("Environment overrides: %s", ', '.join(sorted(env_values)))
    values.update(env_values)

    return RunConfiguration(working_dir=Path(working_dir), **values)


def render_config_toml(config: RunConfiguration) -> str:
    """Serialise the effective configuration as a [deploy] TOML table."""
    import tomli_w

    return tomli_w.dumps({constants.CONFIG_TABLE: config.to_dict()})
