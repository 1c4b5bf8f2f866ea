"""
Backup GC - 孤立备份文件清理服务
"""

__version__ = "1.0.0"
