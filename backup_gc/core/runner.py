"""
清理任务运行控制
加载有效集合 -> 扫描删除，两步严格串行；同一时间只允许一个任务运行
"""
import logging
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import sessionmaker

from backup_gc.core.errors import LiveSetError, ReconcileError
from backup_gc.core.live_set import load_live_identifiers
from backup_gc.core.reconciler import OrphanReconciler, ReconcileReport

logger = logging.getLogger(__name__)


class RunStatus:
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass
class RunResult:
    """单次运行结果"""
    status: str
    trigger: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    live_count: Optional[int] = None
    report: Optional[ReconcileReport] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == RunStatus.SUCCEEDED


class CleanupRunner:
    """
    清理任务执行器

    数据库 Session 工厂由外部注入，进程内所有运行共用同一个连接池。
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        backup_dir,
        dry_run: bool = False,
    ):
        self.session_factory = session_factory
        self.reconciler = OrphanReconciler(backup_dir, dry_run=dry_run)
        self.last_result: Optional[RunResult] = None
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def run(self, trigger: str = "manual") -> RunResult:
        """
        执行一次清理

        已有任务在运行时直接跳过（非阻塞锁），不会排队等待。
        运行级错误只记录日志并返回 failed 结果，不向上抛出。
        """
        started_at = datetime.utcnow()

        if not self._lock.acquire(blocking=False):
            logger.warning(f"Backup cleanup already running, skipping {trigger} trigger")
            return RunResult(
                status=RunStatus.SKIPPED,
                trigger=trigger,
                started_at=started_at,
                finished_at=started_at,
                error="cleanup already running",
            )

        try:
            try:
                result = self._run(trigger, started_at)
            except Exception as e:
                # 任何意外错误只中止本次运行，进程继续等待下次调度
                logger.exception(f"✗ Backup cleanup task crashed: {e}")
                result = RunResult(
                    status=RunStatus.FAILED,
                    trigger=trigger,
                    started_at=started_at,
                    finished_at=datetime.utcnow(),
                    error=f"unexpected error: {e}",
                )
            self.last_result = result
            return result
        finally:
            self._lock.release()

    def _run(self, trigger: str, started_at: datetime) -> RunResult:
        logger.info(f"Starting backup cleanup task (trigger: {trigger})")
        result = RunResult(status=RunStatus.FAILED, trigger=trigger, started_at=started_at)

        # 1. 加载有效备份集合
        try:
            live_ids = load_live_identifiers(self.session_factory)
        except LiveSetError as e:
            logger.error(f"✗ Failed to get valid backup UUIDs: {e}")
            result.error = str(e)
            result.finished_at = datetime.utcnow()
            return result

        result.live_count = len(live_ids)

        # 2. 清理孤立文件
        try:
            result.report = self.reconciler.reconcile(live_ids)
        except ReconcileError as e:
            logger.error(f"✗ Failed to clean orphaned backup files: {e}")
            result.error = str(e)
            result.finished_at = datetime.utcnow()
            return result

        result.status = RunStatus.SUCCEEDED
        result.finished_at = datetime.utcnow()
        logger.info("✓ Backup cleanup task completed")
        return result
