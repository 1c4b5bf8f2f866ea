#!/usr/bin/env python3
"""
单次清理孤立备份文件脚本（供外部 cron 使用）
Cron: 0 2 * * * (每天凌晨 2 点)
"""
import sys
from datetime import datetime

from backup_gc.config import Settings, configure_logging
from backup_gc.core.errors import BackupGCError
from backup_gc.service import build_runner


def main():
    configure_logging("INFO")
    print(f"🗑️  Orphaned Backup Cleanup Started at {datetime.utcnow()}")
    print("=" * 60)

    try:
        settings = Settings.from_env()
        configure_logging(settings.log_level)
        runner = build_runner(settings)
    except BackupGCError as e:
        print(f"\n✗ Cleanup failed: {e}")
        sys.exit(1)

    result = runner.run(trigger="manual")

    if not result.ok:
        print(f"\n✗ Cleanup failed: {result.error}")
        sys.exit(1)

    report = result.report
    print(
        f"\n✓ Cleanup completed successfully: {report.found} found, "
        f"{report.deleted} deleted, {report.skipped_invalid} skipped, {report.failed} failed"
    )


if __name__ == "__main__":
    main()
