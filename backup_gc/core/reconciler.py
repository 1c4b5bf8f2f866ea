"""
孤立备份文件对账
扫描备份目录，删除数据库中没有有效记录的备份文件
"""
import logging
import os
import re
import stat
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Iterable, List, Set

from backup_gc.core.errors import BackupDirectoryMissing, EnumerationError, ReconcileError

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".tar.gz"

# UUID (8-4-4-4-12)
UUID_PATTERN = re.compile(r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$")


def is_valid_uuid(value: str) -> bool:
    """校验 UUID 格式（不区分大小写）"""
    return UUID_PATTERN.fullmatch(value.lower()) is not None


@dataclass
class ReconcileReport:
    """单次对账结果统计"""
    found: int = 0
    kept: int = 0
    skipped_invalid: int = 0
    orphaned: int = 0
    deleted: int = 0
    failed: int = 0
    dry_run: bool = False
    deleted_files: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return asdict(self)


class OrphanReconciler:
    """
    孤立备份清理器

    流程：
    1. 检查备份目录是否存在（不存在直接报错，不做任何删除）
    2. 列出目录下所有 *.tar.gz（不递归）
    3. 逐个文件：提取 UUID -> 校验格式 -> 对比有效集合 -> 删除孤立文件

    单个文件删除失败只记录日志，不影响其它文件。
    """

    def __init__(
        self,
        backup_dir,
        extension: str = ARCHIVE_EXTENSION,
        dry_run: bool = False,
    ):
        self.backup_dir = Path(backup_dir)
        self.extension = extension
        self.dry_run = dry_run

    def reconcile(self, live_ids: Iterable[str]) -> ReconcileReport:
        """
        执行一次对账

        Args:
            live_ids: 有效备份 UUID 集合

        Returns:
            ReconcileReport

        Raises:
            BackupDirectoryMissing: 备份目录不存在
            EnumerationError: 无法列出备份目录
            ReconcileError: 无法访问备份目录（权限、IO 错误等）
        """
        # 比较前统一转小写
        live = {uuid.lower() for uuid in live_ids}

        # 1. 检查目录
        self._check_directory()

        # 2. 列出文件（完整列出后才开始删除）
        files = self._list_archives()
        logger.info(f"Found {len(files)} backup files in {self.backup_dir}")

        report = ReconcileReport(found=len(files), dry_run=self.dry_run)

        # 3. 逐个处理
        for path in files:
            self._process(path, live, report)

        if self.dry_run:
            logger.info(
                f"Dry run completed, {report.orphaned} orphaned backup files would be deleted"
            )
        else:
            logger.info(f"Cleanup completed, deleted {report.deleted} orphaned backup files")

        if report.skipped_invalid:
            logger.info(f"Skipped {report.skipped_invalid} files with non-standard UUID format")
        if report.failed:
            logger.warning(f"⚠️  Failed to delete {report.failed} orphaned backup files")

        return report

    def _check_directory(self):
        try:
            st = self.backup_dir.stat()
        except FileNotFoundError as e:
            raise BackupDirectoryMissing(f"backup directory does not exist: {self.backup_dir}") from e
        except OSError as e:
            raise ReconcileError(f"failed to access backup directory: {e}") from e

        if not stat.S_ISDIR(st.st_mode):
            raise BackupDirectoryMissing(f"backup path is not a directory: {self.backup_dir}")

    def _list_archives(self) -> List[Path]:
        """列出目录下的备份文件（单层，跳过子目录）"""
        try:
            with os.scandir(self.backup_dir) as entries:
                files = [
                    Path(entry.path)
                    for entry in entries
                    if entry.name.endswith(self.extension)
                    and not entry.is_dir(follow_symlinks=False)
                ]
        except OSError as e:
            raise EnumerationError(f"failed to read backup directory: {e}") from e

        return sorted(files)

    def extract_uuid(self, basename: str) -> str:
        """去掉扩展名得到 UUID（只去掉一次后缀）"""
        return basename[: -len(self.extension)]

    def _process(self, path: Path, live: Set[str], report: ReconcileReport):
        basename = path.name
        uuid = self.extract_uuid(basename)

        # 校验文件名格式
        if not is_valid_uuid(uuid):
            logger.info(f"Skipping file with non-standard UUID format: {basename} (UUID: {uuid})")
            report.skipped_invalid += 1
            return

        if uuid.lower() in live:
            report.kept += 1
            return

        report.orphaned += 1
        logger.info(f"Found orphaned backup file: {basename} (UUID: {uuid})")

        if self.dry_run:
            logger.info(f"[DRY RUN] Would delete {basename}")
            return

        try:
            path.unlink()
        except OSError as e:
            logger.error(f"Failed to delete file {basename}: {e}")
            report.failed += 1
            return

        logger.info(f"✓ Successfully deleted orphaned backup file: {basename}")
        report.deleted += 1
        report.deleted_files.append(basename)


def reconcile(backup_dir, live_ids: Iterable[str], dry_run: bool = False) -> ReconcileReport:
    """清理 backup_dir 中的孤立备份文件"""
    return OrphanReconciler(backup_dir, dry_run=dry_run).reconcile(live_ids)
