"""
API Schemas (Pydantic Models)
用于响应序列化
"""
from pydantic import BaseModel
from typing import Optional, List
from datetime import datetime


class HealthResponse(BaseModel):
    """健康检查响应"""
    status: str
    timestamp: datetime
    service: str
    running: bool
    next_run_time: Optional[datetime] = None


class ReconcileReportResponse(BaseModel):
    """对账统计"""
    found: int
    kept: int
    skipped_invalid: int
    orphaned: int
    deleted: int
    failed: int
    dry_run: bool
    deleted_files: List[str] = []

    class Config:
        from_attributes = True


class RunResultResponse(BaseModel):
    """运行结果响应"""
    status: str
    trigger: str
    started_at: datetime
    finished_at: Optional[datetime] = None
    live_count: Optional[int] = None
    report: Optional[ReconcileReportResponse] = None
    error: Optional[str] = None

    class Config:
        from_attributes = True
