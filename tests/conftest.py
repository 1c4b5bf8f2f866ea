"""Pytest configuration and shared fixtures.

This module contains fixtures used across all test modules.
"""

from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from backup_gc.database import create_session_factory, init_database
from backup_gc.database.models import Backup


@pytest.fixture
def engine():
    """In-memory SQLite engine with the backups table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_database(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine) -> sessionmaker:
    return create_session_factory(engine)


@pytest.fixture
def add_backup(session_factory):
    """Insert a backup record; pass deleted=True to soft-delete it."""
    counter = {"server_id": 0}

    def _add(uuid: str, deleted: bool = False) -> None:
        counter["server_id"] += 1
        now = datetime.utcnow()
        with session_factory() as db:
            db.add(
                Backup(
                    server_id=counter["server_id"],
                    uuid=uuid,
                    name=f"backup {uuid[:8]}",
                    disk="wings",
                    is_successful=True,
                    created_at=now,
                    updated_at=now,
                    completed_at=now,
                    deleted_at=now if deleted else None,
                )
            )
            db.commit()

    return _add


@pytest.fixture
def backup_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "backups"
    directory.mkdir()
    return directory


@pytest.fixture
def make_files(backup_dir: Path):
    """Create empty files by name inside the backup directory."""

    def _make(*names: str) -> list:
        paths = []
        for name in names:
            path = backup_dir / name
            path.write_bytes(b"")
            paths.append(path)
        return paths

    return _make
