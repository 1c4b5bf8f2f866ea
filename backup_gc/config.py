"""
Configuration loading
从环境变量（以及可选的 .env 文件）读取配置
"""
import logging
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv
from sqlalchemy.engine import URL

from backup_gc.core.errors import ConfigError

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off", ""}

# 日志中不回显的变量
_SECRET_KEYS = {"DB_PASSWORD", "DATABASE_URL"}


def get_env(key: str, default: str) -> str:
    """读取环境变量，未设置时使用默认值并记录日志"""
    value = os.getenv(key)
    if value:
        return value

    shown = "***" if key in _SECRET_KEYS and default else default
    logger.info(f"Environment variable {key} not set, using default value: {shown}")
    return default


def parse_bool(key: str, value: str) -> bool:
    normalized = value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ConfigError(f"{key} must be a boolean, got {value!r}")


def parse_int(key: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {value!r}") from None


@dataclass
class Settings:
    """服务配置"""

    db_driver: str = "mysql+pymysql"
    db_host: str = "localhost"
    db_port: int = 3306
    db_user: str = "pterodactyl"
    db_password: str = ""
    db_name: str = "panel"
    db_echo: bool = False
    database_url: Optional[str] = None

    backup_path: str = "/mnt/pterodactyl"
    gc_schedule: str = "0 2 * * *"
    gc_timezone: str = "UTC"
    dry_run: bool = False

    log_level: str = "INFO"

    api_enabled: bool = False
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "Settings":
        """
        从环境变量构建配置

        默认读取当前工作目录（或其上级目录）中的 .env，
        文件中的值不会覆盖已存在的环境变量。
        """
        load_dotenv(env_file or find_dotenv(usecwd=True))

        return cls(
            db_driver=get_env("DB_DRIVER", cls.db_driver),
            db_host=get_env("DB_HOST", cls.db_host),
            db_port=parse_int("DB_PORT", get_env("DB_PORT", str(cls.db_port))),
            db_user=get_env("DB_USER", cls.db_user),
            db_password=get_env("DB_PASSWORD", cls.db_password),
            db_name=get_env("DB_NAME", cls.db_name),
            db_echo=parse_bool("DB_ECHO", get_env("DB_ECHO", "false")),
            database_url=get_env("DATABASE_URL", "") or None,
            backup_path=get_env("BACKUP_PATH", cls.backup_path),
            gc_schedule=get_env("GC_SCHEDULE", cls.gc_schedule),
            gc_timezone=get_env("GC_TIMEZONE", cls.gc_timezone),
            dry_run=parse_bool("GC_DRY_RUN", get_env("GC_DRY_RUN", "false")),
            log_level=get_env("LOG_LEVEL", cls.log_level).upper(),
            api_enabled=parse_bool("API_ENABLED", get_env("API_ENABLED", "false")),
            api_host=get_env("API_HOST", cls.api_host),
            api_port=parse_int("API_PORT", get_env("API_PORT", str(cls.api_port))),
        )

    def sqlalchemy_url(self):
        """DATABASE_URL 优先，否则由 DB_* 拼接"""
        if self.database_url:
            return self.database_url

        query = {"charset": "utf8mb4"} if self.db_driver.startswith("mysql") else {}
        return URL.create(
            self.db_driver,
            username=self.db_user,
            password=self.db_password or None,
            host=self.db_host,
            port=self.db_port,
            database=self.db_name,
            query=query,
        )


def configure_logging(level: str = "INFO"):
    """初始化根日志（进程启动时调用一次）"""
    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        raise ConfigError(f"Unknown LOG_LEVEL: {level}")

    logging.basicConfig(level=numeric_level, format=LOG_FORMAT)
    logging.getLogger().setLevel(numeric_level)
