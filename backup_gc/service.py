"""
服务入口
启动流程：加载配置 -> 连接数据库 -> 启动定时任务 -> 立即执行一次清理 -> 等待调度
"""
import logging
import signal
import sys
import threading

from backup_gc.config import Settings, configure_logging
from backup_gc.core.errors import BackupGCError
from backup_gc.core.runner import CleanupRunner
from backup_gc.core.scheduler import create_scheduler, next_run_time
from backup_gc.database import connect_database

logger = logging.getLogger(__name__)


def build_runner(settings: Settings) -> CleanupRunner:
    """连接数据库并创建 runner（连接失败抛出 DatabaseConnectionError）"""
    session_factory = connect_database(settings.sqlalchemy_url(), echo=settings.db_echo)
    return CleanupRunner(session_factory, settings.backup_path, dry_run=settings.dry_run)


def _wait_forever(stop_event: threading.Event):
    def _handle_signal(signum, frame):
        logger.info(f"Received signal {signum}, shutting down")
        stop_event.set()

    signal.signal(signal.SIGTERM, _handle_signal)
    signal.signal(signal.SIGINT, _handle_signal)

    while not stop_event.wait(timeout=60):
        pass


def main() -> int:
    """主函数"""
    configure_logging("INFO")
    logger.info("🚀 Backup cleaner service starting...")

    # 1. 加载配置
    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
    except BackupGCError as e:
        logger.critical(f"✗ Invalid configuration: {e}")
        return 1

    logger.info(
        f"Configuration loaded - Backup path: {settings.backup_path}, "
        f"Cron expression: [{settings.gc_schedule}], Dry run: {settings.dry_run}"
    )

    # 2. 连接数据库（失败直接退出）
    try:
        runner = build_runner(settings)
    except BackupGCError as e:
        logger.critical(f"✗ Database connection failed: {e}")
        return 1

    # 3. 创建定时任务
    try:
        scheduler = create_scheduler(runner, settings.gc_schedule, settings.gc_timezone)
    except ValueError as e:
        logger.critical(f"✗ Failed to add cron job: {e}")
        return 1

    scheduler.start()
    logger.info(
        f"Scheduled task started with cron expression: '{settings.gc_schedule}' "
        f"(next run: {next_run_time(scheduler)})"
    )

    try:
        # 4. 启动时立即执行一次
        logger.info("Running initial cleanup...")
        runner.run(trigger="startup")

        # 5. 等待调度
        if settings.api_enabled:
            import uvicorn
            from backup_gc.api import create_app

            uvicorn.run(
                create_app(runner, scheduler),
                host=settings.api_host,
                port=settings.api_port,
            )
        else:
            _wait_forever(threading.Event())
    finally:
        scheduler.shutdown(wait=False)
        logger.info("Backup cleaner service stopped")

    return 0


if __name__ == "__main__":
    sys.exit(main())
