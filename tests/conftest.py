"""
Shared fixtures for penpot-deploy tests.
"""
from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[1] / "src"))
from penpot_deploy.cleanup import CleanupHandler  # noqa: E402
from penpot_deploy.config import RunConfiguration  # noqa: E402
from penpot_deploy.pipeline import PipelineContext  # noqa: E402


UPSTREAM_FILES = {
    "Dockerfile": "FROM python:3.12-slim\n",
    "docker-compose.yml": "services:\n  penpot-mcp:\n    image: penpot-mcp:latest\n",
    ".env.example": "PENPOT_USERNAME=your_username\nPENPOT_PASSWORD=your_password\n",
    "penpot_mcp/server.py": "print('hello')\n",
    ".git/HEAD": "ref: refs/heads/main\n",
    "penpot_mcp/__pycache__/server.cpython-312.pyc": "bytecode",
}


def write_tree(root: Path, files: dict) -> None:
    for rel, content in files.items():
        path = root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)


class FakeTools:
    """Stand-in for subprocess.run that records argv and fakes git/docker."""

    def __init__(self, upstream_files: dict | None = None, fail_on: tuple = (), raise_on: tuple = ()):
        self.calls: list[list[str]] = []
        self.upstream_files = UPSTREAM_FILES if upstream_files is None else upstream_files
        self.fail_on = fail_on
        self.raise_on = raise_on

    def __call__(self, cmd, **kwargs):
        cmd = list(cmd)
        self.calls.append(cmd)
        if self.raise_on and cmd[:len(self.raise_on[0])] == list(self.raise_on[0]):
            raise self.raise_on[1]
        if self.fail_on and cmd[:len(self.fail_on)] == list(self.fail_on):
            return Mock(returncode=1, stdout="", stderr="boom")
        if cmd[:2] == ["git", "clone"]:
            write_tree(Path(cmd[3]), self.upstream_files)
        return Mock(returncode=0, stdout="", stderr="")

    def called(self, *prefix: str) -> bool:
        return any(call[:len(prefix)] == list(prefix) for call in self.calls)

    def find(self, *prefix: str) -> list[str]:
        for call in self.calls:
            if call[:len(prefix)] == list(prefix):
                return call
        raise AssertionError(f"No call starting with {prefix}: {self.calls}")


def all_tools(name: str) -> str:
    return f"/usr/bin/{name}"


@pytest.fixture
def config(tmp_path) -> RunConfiguration:
    return RunConfiguration(working_dir=tmp_path, startup_grace_seconds=0)


@pytest.fixture
def ctx(config) -> PipelineContext:
    return PipelineContext(config=config, cleanup=CleanupHandler(config.staging_dir), assume_yes=True)
