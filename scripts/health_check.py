#!/usr/bin/env python3
"""
清理服务健康检查脚本
Cron: */5 * * * * (每 5 分钟)

检查数据库连通性和备份目录状态，不做任何删除。
"""
import os
import sys
from datetime import datetime

from backup_gc.config import Settings, configure_logging
from backup_gc.core.errors import BackupGCError
from backup_gc.core.live_set import load_live_identifiers
from backup_gc.core.reconciler import ARCHIVE_EXTENSION
from backup_gc.database import connect_database


def main():
    configure_logging("WARNING")
    print(f"🔍 Health Check Started at {datetime.utcnow()}")
    print("=" * 60)

    problems = 0

    try:
        settings = Settings.from_env()
    except BackupGCError as e:
        print(f"  ✗ config: {e}")
        sys.exit(1)

    # 1. 数据库
    try:
        session_factory = connect_database(settings.sqlalchemy_url())
        live_ids = load_live_identifiers(session_factory)
        print(f"  ✓ database: {len(live_ids)} valid backup records")
    except BackupGCError as e:
        print(f"  ✗ database: {e}")
        problems += 1

    # 2. 备份目录
    backup_path = settings.backup_path
    if not os.path.isdir(backup_path):
        print(f"  ✗ backup directory missing: {backup_path}")
        problems += 1
    elif not os.access(backup_path, os.R_OK | os.W_OK | os.X_OK):
        print(f"  ⚠️  backup directory not writable: {backup_path}")
        problems += 1
    else:
        try:
            count = sum(1 for name in os.listdir(backup_path) if name.endswith(ARCHIVE_EXTENSION))
            print(f"  ✓ backup directory: {count} archive files")
        except OSError as e:
            print(f"  ✗ backup directory unreadable: {e}")
            problems += 1

    print("\n" + "=" * 60)
    if problems == 0:
        print("✓ Backup cleaner is healthy")
    else:
        print(f"⚠️  {problems} problems found")
        sys.exit(1)


if __name__ == "__main__":
    main()
