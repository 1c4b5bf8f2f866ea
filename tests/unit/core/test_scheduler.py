"""Tests for cron scheduling of cleanup runs."""

from unittest.mock import MagicMock

import pytest
from apscheduler.triggers.cron import CronTrigger

from backup_gc.core.scheduler import JOB_ID, create_scheduler, next_run_time, parse_schedule


class TestParseSchedule:
    """Tests for parse_schedule."""

    def test_default_schedule(self) -> None:
        trigger = parse_schedule("0 2 * * *")
        assert isinstance(trigger, CronTrigger)
        fields = {f.name: str(f) for f in trigger.fields}
        assert fields["hour"] == "2"
        assert fields["minute"] == "0"

    @pytest.mark.parametrize("expression", ["", "0 2 * *", "61 * * * *", "not a cron"])
    def test_invalid(self, expression: str) -> None:
        with pytest.raises(ValueError, match="invalid cron expression"):
            parse_schedule(expression)


class TestCreateScheduler:
    """Tests for create_scheduler."""

    def test_registers_single_job(self) -> None:
        runner = MagicMock()
        scheduler = create_scheduler(runner, "*/15 * * * *")

        jobs = scheduler.get_jobs()
        assert len(jobs) == 1
        job = jobs[0]
        assert job.id == JOB_ID
        assert job.max_instances == 1
        assert job.coalesce is True
        assert job.kwargs == {"trigger": "schedule"}

    def test_next_run_time_after_start(self) -> None:
        scheduler = create_scheduler(MagicMock(), "0 2 * * *")
        scheduler.start(paused=True)
        try:
            assert next_run_time(scheduler) is not None
        finally:
            scheduler.shutdown(wait=False)

    def test_invalid_schedule_raises(self) -> None:
        with pytest.raises(ValueError):
            create_scheduler(MagicMock(), "every day")
