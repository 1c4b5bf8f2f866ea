"""
Backup GC - Status API
FastAPI 应用：健康检查、最近一次运行结果、手动触发清理
"""
from fastapi import FastAPI, HTTPException, status
from datetime import datetime
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from backup_gc import __version__
from backup_gc.api.schemas import HealthResponse, RunResultResponse
from backup_gc.core.runner import CleanupRunner, RunStatus
from backup_gc.core.scheduler import next_run_time

SERVICE_NAME = "backup-gc"


def create_app(
    runner: CleanupRunner,
    scheduler: Optional[BackgroundScheduler] = None,
) -> FastAPI:
    """创建 FastAPI 应用（runner 由服务进程注入）"""
    app = FastAPI(
        title="Backup GC API",
        description="孤立备份文件清理服务",
        version=__version__,
    )

    # ==================== 健康检查 ====================

    @app.get("/health", response_model=HealthResponse)
    def health_check():
        """健康检查接口"""
        return HealthResponse(
            status="healthy",
            timestamp=datetime.utcnow(),
            service=SERVICE_NAME,
            running=runner.is_running,
            next_run_time=next_run_time(scheduler) if scheduler is not None else None,
        )

    # ==================== 清理任务 ====================

    @app.get("/runs/last", response_model=RunResultResponse)
    def last_run():
        """最近一次运行结果"""
        if runner.last_result is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="No cleanup run has completed yet",
            )
        return RunResultResponse.model_validate(runner.last_result)

    @app.post("/runs", response_model=RunResultResponse)
    def trigger_run():
        """
        手动触发一次清理（同步执行）

        已有任务在运行时返回 409。
        """
        result = runner.run(trigger="api")
        if result.status == RunStatus.SKIPPED:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Cleanup already running",
            )
        return RunResultResponse.model_validate(result)

    return app
