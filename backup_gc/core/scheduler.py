"""
定时调度
标准 5 段 cron 表达式，例如 "0 2 * * *"（每天凌晨 2 点）
"""
import logging

from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from backup_gc.core.runner import CleanupRunner

logger = logging.getLogger(__name__)

JOB_ID = "backup-cleanup"


def parse_schedule(schedule: str, timezone: str = "UTC") -> CronTrigger:
    """
    解析 cron 表达式

    Raises:
        ValueError: 表达式无效
    """
    try:
        return CronTrigger.from_crontab(schedule, timezone=timezone)
    except (ValueError, TypeError) as e:
        raise ValueError(f"invalid cron expression {schedule!r}: {e}") from e


def create_scheduler(
    runner: CleanupRunner,
    schedule: str,
    timezone: str = "UTC",
) -> BackgroundScheduler:
    """创建调度器并注册清理任务（不启动）"""
    trigger = parse_schedule(schedule, timezone)

    scheduler = BackgroundScheduler(timezone=timezone)
    scheduler.add_job(
        runner.run,
        trigger,
        kwargs={"trigger": "schedule"},
        id=JOB_ID,
        name="Orphaned backup cleanup",
        max_instances=1,
        coalesce=True,
        replace_existing=True,
    )
    return scheduler


def next_run_time(scheduler: BackgroundScheduler):
    """下次调度时间（调度器未启动时为 None）"""
    job = scheduler.get_job(JOB_ID)
    if job is None:
        return None
    return getattr(job, "next_run_time", None)
