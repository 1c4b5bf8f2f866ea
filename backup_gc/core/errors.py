"""
异常定义
"""


class BackupGCError(Exception):
    """所有清理服务异常的基类"""


class ConfigError(BackupGCError):
    """配置值无效"""


class DatabaseConnectionError(BackupGCError):
    """启动时无法连接数据库（致命）"""


class LiveSetError(BackupGCError):
    """查询有效备份记录失败，本次运行中止"""


class ReconcileError(BackupGCError):
    """目录级错误，本次运行中止且不删除任何文件"""


class BackupDirectoryMissing(ReconcileError):
    """备份目录不存在"""


class EnumerationError(ReconcileError):
    """无法列出备份目录"""
