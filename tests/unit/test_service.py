"""Tests for service startup and database connection."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from backup_gc import service
from backup_gc.core.errors import DatabaseConnectionError
from backup_gc.core.runner import CleanupRunner, RunStatus
from backup_gc.database import connect_database


class TestConnectDatabase:
    """Tests for connect_database."""

    def test_connects(self, tmp_path: Path) -> None:
        factory = connect_database(f"sqlite:///{tmp_path / 'panel.db'}")
        with factory() as db:
            assert db.bind is not None

    def test_unreachable_database(self, tmp_path: Path) -> None:
        url = f"sqlite:///{tmp_path / 'missing' / 'dir' / 'panel.db'}"

        with pytest.raises(DatabaseConnectionError, match="failed to connect to database"):
            connect_database(url)


@pytest.fixture
def settings_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("BACKUP_PATH", str(tmp_path))
    monkeypatch.setenv("GC_SCHEDULE", "0 2 * * *")
    monkeypatch.setenv("API_ENABLED", "false")
    return monkeypatch


class TestMain:
    """Tests for the service entry point."""

    def test_database_failure_is_fatal(self, settings_env) -> None:
        with patch.object(
            service, "build_runner", side_effect=DatabaseConnectionError("no route to host")
        ), patch.object(service, "create_scheduler") as create_scheduler:
            assert service.main() == 1

        create_scheduler.assert_not_called()

    def test_invalid_schedule_is_fatal(self, settings_env) -> None:
        settings_env.setenv("GC_SCHEDULE", "whenever")
        runner = MagicMock()

        with patch.object(service, "build_runner", return_value=runner):
            assert service.main() == 1

        runner.run.assert_not_called()

    def test_invalid_config_is_fatal(self, settings_env) -> None:
        settings_env.setenv("DB_PORT", "abc")

        with patch.object(service, "build_runner") as build_runner:
            assert service.main() == 1

        build_runner.assert_not_called()

    def test_failed_startup_run_keeps_service_alive(
        self, settings_env, session_factory, tmp_path
    ) -> None:
        """A crash in the initial run is contained and the service keeps waiting."""
        runner = CleanupRunner(session_factory, tmp_path)
        scheduler = MagicMock()

        with patch.object(
            runner.reconciler, "reconcile", side_effect=RuntimeError("driver exploded")
        ), patch.object(service, "build_runner", return_value=runner), patch.object(
            service, "create_scheduler", return_value=scheduler
        ), patch.object(service, "_wait_forever") as wait_forever:
            assert service.main() == 0

        assert runner.last_result.status == RunStatus.FAILED
        assert runner.last_result.trigger == "startup"
        wait_forever.assert_called_once()
        scheduler.shutdown.assert_called_once_with(wait=False)

    def test_starts_scheduler_then_runs_once(self, settings_env) -> None:
        runner = MagicMock()
        scheduler = MagicMock()
        calls = []
        scheduler.start.side_effect = lambda: calls.append("start")
        runner.run.side_effect = lambda trigger: calls.append(trigger)

        with patch.object(service, "build_runner", return_value=runner), patch.object(
            service, "create_scheduler", return_value=scheduler
        ), patch.object(service, "_wait_forever") as wait_forever:
            assert service.main() == 0

        assert calls == ["start", "startup"]
        wait_forever.assert_called_once()
        scheduler.shutdown.assert_called_once_with(wait=False)
