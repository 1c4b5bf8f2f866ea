"""
Backup GC - Database Models
面板备份表结构（由面板维护，本服务只读）
"""
from sqlalchemy import (
    Column, String, Integer, BigInteger, Boolean, DateTime, Text, Index
)
from sqlalchemy.orm import declarative_base

Base = declarative_base()


class Backup(Base):
    """备份记录表"""
    __tablename__ = "backups"

    id = Column(Integer, primary_key=True, autoincrement=True)
    server_id = Column(Integer, nullable=False)

    # 备份标识（文件名即 <uuid>.tar.gz）
    uuid = Column(String(36), nullable=False, unique=True)
    upload_id = Column(Text)

    # 状态
    is_successful = Column(Boolean, default=False)
    is_locked = Column(Boolean, default=False)

    # 备份信息
    name = Column(String(191))
    ignored_files = Column(Text)
    disk = Column(String(191))
    checksum = Column(String(191))
    bytes = Column(BigInteger, default=0)

    # 时间
    completed_at = Column(DateTime)
    created_at = Column(DateTime)
    updated_at = Column(DateTime)
    deleted_at = Column(DateTime)  # 软删除标记，NULL 表示有效

    # 索引
    __table_args__ = (
        Index("idx_backups_deleted_at", "deleted_at"),
    )

    def __repr__(self):
        return f"<Backup {self.uuid} deleted_at={self.deleted_at}>"
