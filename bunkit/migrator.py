"""Applies and rolls back migrations, recording their status in a table."""

from __future__ import annotations

import os
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Sequence, Tuple

from .migration import (
    PY_TEMPLATE,
    SQL_TEMPLATE,
    Migration,
    MigrationError,
    MigrationFailedError,
    MigrationFile,
    MigrationGroup,
    MigrationLockedError,
    MigrationSlice,
)
from .migrations import Migrations
from .timeparse import parse_time

_NAME_RE = re.compile(r"^[0-9a-z_\-]+$")
_VERSION_FORMAT = "%Y%m%d%H%M%S"


def _to_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    if isinstance(value, bytes):
        value = value.decode("utf-8")
    return parse_time(str(value))


class Migrator:
    """Runs migrations against a DB-API connection using ``?`` parameters."""

    def __init__(
        self,
        db: Any,
        migrations: Migrations,
        table: str = "bun_migrations",
        locks_table: str = "bun_migration_locks",
        mark_applied_on_success: bool = False,
    ) -> None:
        self.db = db
        self.migrations = migrations
        self.table = table
        self.locks_table = locks_table
        self.mark_applied_on_success = mark_applied_on_success

    def _execute(self, sql: str, params: Sequence[Any] = ()) -> Optional[int]:
        cursor = self.db.cursor()
        try:
            cursor.execute(sql, tuple(params))
            self.db.commit()
            return cursor.lastrowid
        finally:
            cursor.close()

    def _query(self, sql: str) -> List[tuple]:
        cursor = self.db.cursor()
        try:
            cursor.execute(sql)
            return list(cursor.fetchall())
        finally:
            cursor.close()

    def migrations_with_status(self) -> MigrationSlice:
        """Return all migrations in ascending order with their applied status."""
        return self._migrations_with_status()[0]

    def _migrations_with_status(self) -> Tuple[MigrationSlice, int]:
        ordered = self.migrations.sorted()
        applied = self.applied_migrations()
        by_name = {m.name: m for m in applied}
        for migration in ordered:
            found = by_name.get(migration.name)
            if found is not None:
                migration.id = found.id
                migration.group_id = found.group_id
                migration.migrated_at = found.migrated_at
        return ordered, applied.last_group_id()

    def init(self) -> None:
        """Create the migrations and locks tables if they do not exist."""
        self._execute(
            f"CREATE TABLE IF NOT EXISTS {self.table} ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "name VARCHAR, "
            "group_id BIGINT, "
            "migrated_at TIMESTAMP NOT NULL DEFAULT CURRENT_TIMESTAMP)"
        )
        self._execute(
            f"CREATE TABLE IF NOT EXISTS {self.locks_table} ("
            "id INTEGER PRIMARY KEY AUTOINCREMENT, "
            "table_name VARCHAR UNIQUE)"
        )

    def reset(self) -> None:
        """Drop and recreate the migrations and locks tables."""
        self._execute(f"DROP TABLE IF EXISTS {self.table}")
        self._execute(f"DROP TABLE IF EXISTS {self.locks_table}")
        self.init()

    def _validate(self) -> None:
        if len(self.migrations) == 0:
            raise MigrationError("migrate: there are no migrations")

    def migrate(self, nop: bool = False) -> MigrationGroup:
        """Apply unapplied migrations as a new group, stopping at the first failure."""
        self._validate()
        ordered, last_group_id = self._migrations_with_status()
        pending = ordered.unapplied()

        group = MigrationGroup()
        if not pending:
            return group
        group.id = last_group_id + 1

        try:
            for i, migration in enumerate(pending):
                migration.group_id = group.id
                if not self.mark_applied_on_success:
                    self.mark_applied(migration)

                group.migrations = MigrationSlice(pending[: i + 1])

                if not nop and migration.up is not None:
                    migration.up(self.db)

                if self.mark_applied_on_success:
                    self.mark_applied(migration)
        except Exception as exc:
            raise MigrationFailedError(group, exc) from exc
        return group

    def rollback(self, nop: bool = False) -> MigrationGroup:
        """Roll back the last applied group, newest migration first."""
        self._validate()
        last_group = self.migrations_with_status().last_group()

        try:
            for migration in reversed(last_group.migrations):
                if not self.mark_applied_on_success:
                    self.mark_unapplied(migration)

                if not nop and migration.down is not None:
                    migration.down(self.db)

                if self.mark_applied_on_success:
                    self.mark_unapplied(migration)
        except Exception as exc:
            raise MigrationFailedError(last_group, exc) from exc
        return last_group

    def _gen_migration_name(self, name: str) -> str:
        if not name:
            raise ValueError("migrate: migration name can't be empty")
        if not _NAME_RE.match(name):
            raise ValueError(f"migrate: invalid migration name: {name!r}")
        version = datetime.now(timezone.utc).strftime(_VERSION_FORMAT)
        return f"{version}_{name}"

    def _write(self, fname: str, content: str) -> MigrationFile:
        fpath = os.path.join(self.migrations.get_directory(), fname)
        Path(fpath).write_text(content, encoding="utf-8")
        return MigrationFile(name=fname, path=fpath, content=content)

    def create_py_migration(self, name: str) -> MigrationFile:
        """Create a Python migration module in the migrations directory."""
        return self._write(self._gen_migration_name(name) + ".py", PY_TEMPLATE)

    def create_sql_migrations(self, name: str) -> List[MigrationFile]:
        """Create up and down SQL migration files."""
        name = self._gen_migration_name(name)
        up = self._write(name + ".up.sql", SQL_TEMPLATE)
        down = self._write(name + ".down.sql", SQL_TEMPLATE)
        return [up, down]

    def mark_applied(self, migration: Migration) -> None:
        """Record the migration as applied."""
        row_id = self._execute(
            f"INSERT INTO {self.table} (name, group_id) VALUES (?, ?)",
            (migration.name, migration.group_id),
        )
        if row_id is not None and row_id > 0:
            migration.id = row_id

    def mark_unapplied(self, migration: Migration) -> None:
        """Remove the migration's applied record."""
        self._execute(f"DELETE FROM {self.table} WHERE id = ?", (migration.id,))

    def truncate_table(self) -> None:
        """Remove every applied record."""
        self._execute(f"DELETE FROM {self.table}")

    def missing_migrations(self) -> MigrationSlice:
        """Return applied migrations that are no longer registered."""
        existing = {m.name for m in self.migrations}
        return MigrationSlice(m for m in self.applied_migrations() if m.name not in existing)

    def applied_migrations(self) -> MigrationSlice:
        """Return the migrations recorded as applied."""
        rows = self._query(f"SELECT id, name, group_id, migrated_at FROM {self.table}")
        return MigrationSlice(
            Migration(
                id=row[0],
                name=row[1] or "",
                group_id=row[2] or 0,
                migrated_at=_to_datetime(row[3]),
            )
            for row in rows
        )

    def lock(self) -> None:
        """Take the migrations lock, failing if it is already held."""
        error_type = getattr(self.db, "Error", Exception)
        try:
            self._execute(
                f"INSERT INTO {self.locks_table} (table_name) VALUES (?)", (self.table,)
            )
        except error_type as exc:
            self.db.rollback()
            raise MigrationLockedError(
                f"migrate: migrations table is already locked ({exc})"
            ) from exc

    def unlock(self) -> None:
        """Release the migrations lock."""
        self._execute(
            f"DELETE FROM {self.locks_table} WHERE table_name = ?", (self.table,)
        )