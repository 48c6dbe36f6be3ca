"""
Image build tests.
"""
from __future__ import annotations

from unittest.mock import patch

import pytest

from conftest import FakeTools
from penpot_deploy.build import build_image
from penpot_deploy.config import RunConfiguration
from penpot_deploy.errors import BuildFailure, ExitDisposition


def test_builds_tagged_image_from_working_tree(config):
    fake = FakeTools()
    with patch("subprocess.run", side_effect=fake):
        assert build_image(config) == "penpot-mcp:latest"

    assert fake.calls == [["docker", "build", "-t", "penpot-mcp:latest", str(config.working_dir)]]


def test_custom_tag(tmp_path):
    config = RunConfiguration(working_dir=tmp_path, image_tag="dev")
    fake = FakeTools()
    with patch("subprocess.run", side_effect=fake):
        build_image(config)

    assert fake.find("docker", "build")[3] == "penpot-mcp:dev"


def test_non_zero_exit_is_build_failure(config):
    with patch("subprocess.run", side_effect=FakeTools(fail_on=("docker", "build"))):
        with pytest.raises(BuildFailure) as excinfo:
            build_image(config)

    assert "exit code 1" in str(excinfo.value)
    assert excinfo.value.disposition == ExitDisposition.PHASE_FAILURE
