"""Unit tests for database migrator."""

from pathlib import Path

import aiosqlite
import pytest

from src.infrastructure.storage.sqlite.migrations.migrator import (
    MigrationInfo,
    create_backup,
    discover_migrations,
    get_applied_migrations,
    get_migration_status,
    initialize_database,
    restore_backup,
)


class TestMigrationInfo:
    """Tests for MigrationInfo dataclass."""

    def test_from_file_parses_filename(self, tmp_path: Path):
        """from_file() parses version and name from filename."""
        migration_file = tmp_path / "v001_key_value_store.sql"
        migration_file.write_text("SELECT 1;")

        info = MigrationInfo.from_file(migration_file)

        assert info.version == "001"
        assert info.name == "key_value_store"
        assert info.path == migration_file
        assert len(info.checksum) == 16

    def test_from_file_invalid_filename_raises(self, tmp_path: Path):
        invalid_file = tmp_path / "invalid_migration.sql"
        invalid_file.write_text("SELECT 1;")

        with pytest.raises(ValueError, match="Invalid migration filename"):
            MigrationInfo.from_file(invalid_file)


class TestDiscoverMigrations:
    def test_bundled_migrations(self):
        """The package ships the key-value table migration."""
        migrations = discover_migrations()
        assert [m.version for m in migrations][0] == "001"
        assert migrations[0].name == "key_value_store"

    def test_skips_invalid_names(self, tmp_path: Path):
        (tmp_path / "v002_second.sql").write_text("SELECT 2;")
        (tmp_path / "v001_first.sql").write_text("SELECT 1;")
        (tmp_path / "vbad.sql").write_text("SELECT 3;")

        assert [m.name for m in discover_migrations(tmp_path)] == ["first", "second"]


class TestInitializeDatabase:
    async def test_creates_tables(self, temp_db_path: Path):
        results = await initialize_database(temp_db_path, create_backup_before=False)

        assert [r.version for r in results] == ["001"]
        assert all(r.success for r in results)
        async with aiosqlite.connect(temp_db_path) as conn:
            cursor = await conn.execute(
                "SELECT name FROM sqlite_master WHERE type='table' AND name='kv_entries'"
            )
            assert await cursor.fetchone() is not None
            assert "001" in await get_applied_migrations(conn)

    async def test_second_run_is_noop(self, initialized_db: Path):
        assert await initialize_database(initialized_db, create_backup_before=False) == []

    async def test_backup_removed_after_success(self, initialized_db: Path):
        await initialize_database(initialized_db, create_backup_before=True)
        assert list(initialized_db.parent.glob("*.backup_*")) == []


class TestMigrationStatus:
    async def test_missing_database(self, temp_db_path: Path):
        status = await get_migration_status(temp_db_path)
        assert status["exists"] is False
        assert "001" in status["pending_migrations"]

    async def test_migrated_database(self, initialized_db: Path):
        status = await get_migration_status(initialized_db)
        assert status["exists"] is True
        assert status["applied_migrations"] == ["001"]
        assert status["pending_migrations"] == []


class TestBackup:
    def test_backup_and_restore(self, tmp_path: Path):
        db_path = tmp_path / "ledger.db"
        db_path.write_bytes(b"original")

        backup = create_backup(db_path)
        db_path.write_bytes(b"changed")
        restore_backup(db_path, backup)

        assert db_path.read_bytes() == b"original"
