"""
Sequential phase runner tests.
"""
from __future__ import annotations

from unittest.mock import patch

import pytest

from penpot_deploy.errors import BuildFailure
from penpot_deploy.pipeline import PHASE_FUNCTIONS, Phase, run_phases


def _recording_registry(order: list, fail_at: Phase | None = None):
    def make(phase):
        def _run(ctx):
            order.append(phase)
            if phase is fail_at:
                raise BuildFailure("build broke")
        return _run
    return {phase: make(phase) for phase in Phase}


def test_every_phase_has_a_function():
    assert set(PHASE_FUNCTIONS) == set(Phase)


def test_runs_in_declared_order(ctx):
    order = []
    phases = [Phase.PREREQUISITES, Phase.SOURCE, Phase.STAGE, Phase.BUILD, Phase.CLEANUP]

    run_phases(phases, ctx, registry=_recording_registry(order))

    assert order == phases
    assert ctx.phases_completed == phases
    assert ctx.phase_failed is None


def test_failure_short_circuits_remaining_phases(ctx):
    order = []
    phases = [Phase.PREREQUISITES, Phase.SOURCE, Phase.BUILD, Phase.LAUNCH, Phase.CLEANUP]

    with pytest.raises(BuildFailure):
        run_phases(phases, ctx, registry=_recording_registry(order, fail_at=Phase.BUILD))

    assert order == [Phase.PREREQUISITES, Phase.SOURCE, Phase.BUILD]
    assert ctx.phase_failed is Phase.BUILD
    assert ctx.phases_completed == [Phase.PREREQUISITES, Phase.SOURCE]


def test_interrupt_marks_phase_failed(ctx):
    def interrupted(_ctx):
        raise KeyboardInterrupt

    registry = dict(_recording_registry([]))
    registry[Phase.SOURCE] = interrupted

    with pytest.raises(KeyboardInterrupt):
        run_phases([Phase.PREREQUISITES, Phase.SOURCE, Phase.STAGE], ctx, registry=registry)

    assert ctx.phase_failed is Phase.SOURCE


def test_summary_reports_progress(ctx):
    run_phases([Phase.CLEANUP], ctx, registry=_recording_registry([]))
    summary = ctx.get_summary()

    assert summary["phases_completed"] == ["cleanup"]
    assert summary["phase_failed"] is None
    assert len(summary["run_id"]) == 8


def test_health_phase_fails_hard_when_unhealthy(ctx):
    from penpot_deploy.errors import HealthCheckFailure

    ctx.probe = lambda url, timeout: (False, "Connection failed")
    with pytest.raises(HealthCheckFailure, match="not responding"):
        run_phases([Phase.HEALTH], ctx)


def test_config_phase_prints_toml(ctx, capsys):
    run_phases([Phase.CONFIG], ctx)
    out = capsys.readouterr().out

    assert "[deploy]" in out
    assert 'image_name = "penpot-mcp"' in out


def test_compose_phase_without_prerequisites_is_a_programming_error(ctx):
    with patch("subprocess.run") as mock_run, patch("shutil.which") as mock_which:
        with pytest.raises(RuntimeError, match="prerequisites"):
            run_phases([Phase.STOP], ctx)

    mock_run.assert_not_called()
    mock_which.assert_not_called()
