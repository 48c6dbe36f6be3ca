"""
Cleanup handler and exit guard tests.
"""
from __future__ import annotations

import os
import signal
import time
from unittest.mock import Mock

import pytest

from penpot_deploy.cleanup import CleanupHandler, cleanup_on_exit
from penpot_deploy.errors import BuildFailure, CleanupFailure, TerminatedBySignal


@pytest.fixture
def staging(tmp_path):
    path = tmp_path / "penpot-mcp-source"
    (path / "sub").mkdir(parents=True)
    (path / "sub" / "file.txt").write_text("x")
    return path


class TestCleanupHandler:
    def test_removes_directory(self, staging):
        CleanupHandler(staging)()
        assert not staging.exists()

    def test_runs_once(self, staging):
        remove = Mock()
        handler = CleanupHandler(staging, remove=remove)

        handler()
        handler()

        remove.assert_called_once_with(staging)
        assert handler.runs == 1

    def test_absent_directory_is_success(self, tmp_path):
        remove = Mock()
        handler = CleanupHandler(tmp_path / "absent", remove=remove)

        handler()

        remove.assert_not_called()
        assert handler.completed

    def test_removal_error(self, staging):
        handler = CleanupHandler(staging, remove=Mock(side_effect=OSError("busy")))

        with pytest.raises(CleanupFailure, match="busy"):
            handler()

    def test_run_quietly_reports_instead_of_raising(self, staging, capsys):
        handler = CleanupHandler(staging, remove=Mock(side_effect=OSError("busy")))

        handler.run_quietly()

        assert "busy" in capsys.readouterr().out


class TestCleanupGuard:
    def test_normal_exit(self, staging):
        with cleanup_on_exit(CleanupHandler(staging)):
            assert staging.exists()
        assert not staging.exists()

    def test_failure_still_cleans_up(self, staging):
        with pytest.raises(BuildFailure):
            with cleanup_on_exit(CleanupHandler(staging)):
                raise BuildFailure("build broke")
        assert not staging.exists()

    def test_interrupt_still_cleans_up(self, staging):
        with pytest.raises(KeyboardInterrupt):
            with cleanup_on_exit(CleanupHandler(staging)):
                raise KeyboardInterrupt
        assert not staging.exists()

    def test_explicit_cleanup_not_repeated_by_guard(self, staging):
        remove = Mock()
        with cleanup_on_exit(CleanupHandler(staging, remove=remove)) as handler:
            handler()
        remove.assert_called_once()

    def test_cleanup_error_does_not_mask_phase_failure(self, staging):
        handler = CleanupHandler(staging, remove=Mock(side_effect=OSError("busy")))
        with pytest.raises(BuildFailure):
            with cleanup_on_exit(handler):
                raise BuildFailure("build broke")

    @pytest.mark.skipif(not hasattr(signal, "SIGTERM"), reason="no SIGTERM")
    def test_sigterm_cleans_up_and_reports_exit_code(self, staging):
        with pytest.raises(TerminatedBySignal) as excinfo:
            with cleanup_on_exit(CleanupHandler(staging)):
                os.kill(os.getpid(), signal.SIGTERM)
                time.sleep(5)

        assert excinfo.value.exit_code == 143
        assert not staging.exists()

    @pytest.mark.skipif(not hasattr(signal, "SIGTERM"), reason="no SIGTERM")
    def test_previous_handlers_restored(self, staging):
        before = signal.getsignal(signal.SIGTERM)
        with cleanup_on_exit(CleanupHandler(staging)):
            assert signal.getsignal(signal.SIGTERM) is not before
        assert signal.getsignal(signal.SIGTERM) == before


def test_quiet_handler_prints_nothing_on_success(staging, capsys):
    handler = CleanupHandler(staging)
    handler.quiet = True

    handler()

    assert not staging.exists()
    assert capsys.readouterr().out == ""


def test_quiet_handler_still_reports_errors(staging, capsys):
    handler = CleanupHandler(staging, remove=Mock(side_effect=OSError("busy")))
    handler.quiet = True

    handler.run_quietly()

    assert "busy" in capsys.readouterr().out
