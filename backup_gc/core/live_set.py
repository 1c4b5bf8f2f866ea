"""
有效备份集合加载
"""
import logging
from typing import Set

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from backup_gc.core.errors import LiveSetError
from backup_gc.database import get_db
from backup_gc.database.models import Backup

logger = logging.getLogger(__name__)


def load_live_identifiers(session_factory: sessionmaker) -> Set[str]:
    """
    查询所有未软删除的备份记录，返回其 UUID 集合

    每次运行都重新查询，不做跨运行缓存。

    Args:
        session_factory: 数据库 Session 工厂（由调用方注入）

    Returns:
        UUID 集合（保持数据库中的大小写）

    Raises:
        LiveSetError: 查询失败。调用方必须中止本次运行，
            不能把查询失败当作"没有有效备份"处理。
    """
    try:
        with get_db(session_factory) as db:
            rows = db.query(Backup.uuid).filter(Backup.deleted_at.is_(None)).all()
    except SQLAlchemyError as e:
        raise LiveSetError(f"failed to query backup records: {e}") from e

    live_ids = {uuid for (uuid,) in rows if uuid}

    logger.info(f"Found {len(live_ids)} valid backup records in database")
    return live_ids
