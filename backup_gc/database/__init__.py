"""
Database initialization and connection management
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import QueuePool

from backup_gc.core.errors import DatabaseConnectionError
from .models import Base

logger = logging.getLogger(__name__)


def create_database_engine(url, echo: bool = False) -> Engine:
    """
    创建引擎

    连接在整个进程生命周期内复用，每次清理任务从连接池中取连接。
    """
    return create_engine(
        url,
        poolclass=QueuePool,
        pool_size=2,
        max_overflow=2,
        pool_pre_ping=True,  # 连接前检查
        pool_recycle=3600,  # MySQL wait_timeout
        echo=echo,
    )


def create_session_factory(engine: Engine) -> sessionmaker:
    """Session 工厂"""
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def connect_database(url, echo: bool = False) -> sessionmaker:
    """
    建立数据库连接并验证连通性

    失败时抛出 DatabaseConnectionError，调用方应直接退出进程。
    """
    engine = create_database_engine(url, echo=echo)
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        engine.dispose()
        raise DatabaseConnectionError(f"failed to connect to database: {e}") from e

    logger.info("✓ Database connection established successfully")
    return create_session_factory(engine)


def init_database(engine: Engine):
    """创建所有表（仅用于开发和测试，生产环境的表由面板维护）"""
    Base.metadata.create_all(bind=engine)
    logger.info("✓ Database initialized successfully")


@contextmanager
def get_db(session_factory: sessionmaker) -> Session:
    """
    获取只读数据库会话（上下文管理器）

    使用示例：
    with get_db(SessionLocal) as db:
        rows = db.query(Backup).all()
    """
    db = session_factory()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
