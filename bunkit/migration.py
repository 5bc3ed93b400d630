"""Migration records, migration groups and SQL migration scripts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, TextIO, Union

MigrationFunc = Callable[[Any], None]

_DIRECTIVE = "--bun:"

PY_TEMPLATE = '''from . import migrations


def up(db):
    print(" [up migration] ", end="")


def down(db):
    print(" [down migration] ", end="")


migrations.register(up, down)
'''

SQL_TEMPLATE = """SET statement_timeout = 0;

--bun:split

SELECT 1

--bun:split

SELECT 2
"""


class MigrationError(Exception):
    """Raised when migrations cannot be run."""


class MigrationFailedError(MigrationError):
    """Raised when a migration step fails; ``group`` holds what was attempted."""

    def __init__(self, group: "MigrationGroup", cause: BaseException) -> None:
        super().__init__(str(cause))
        self.group = group


class MigrationLockedError(MigrationError):
    """Raised when the migrations table is already locked."""


@dataclass
class Migration:
    """A single migration and, once loaded from the database, its status."""

    name: str = ""
    comment: str = ""
    id: int = 0
    group_id: int = 0
    migrated_at: Optional[datetime] = None
    up: Optional[MigrationFunc] = field(default=None, compare=False, repr=False)
    down: Optional[MigrationFunc] = field(default=None, compare=False, repr=False)

    def __str__(self) -> str:
        return f"{self.name}_{self.comment}"

    def is_applied(self) -> bool:
        """Return True if the migration has been recorded as applied."""
        return self.id > 0


class MigrationSlice(list):
    """A list of migrations with helpers for their status."""

    def __str__(self) -> str:
        if not self:
            return "empty"
        if len(self) > 5:
            return f"{len(self)} migrations ({self[0].name} ... {self[-1].name})"
        return ", ".join(str(m) for m in self)

    def applied(self) -> "MigrationSlice":
        """Return applied migrations, newest name first."""
        return MigrationSlice(
            sorted((m for m in self if m.is_applied()), key=lambda m: m.name, reverse=True)
        )

    def unapplied(self) -> "MigrationSlice":
        """Return unapplied migrations, oldest name first."""
        return MigrationSlice(
            sorted((m for m in self if not m.is_applied()), key=lambda m: m.name)
        )

    def last_group_id(self) -> int:
        """Return the highest group id, or 0 when there are no groups."""
        return max((m.group_id for m in self), default=0)

    def last_group(self) -> "MigrationGroup":
        """Return the most recently applied migration group."""
        group = MigrationGroup(id=self.last_group_id())
        if group.id == 0:
            return group
        group.migrations = MigrationSlice(m for m in self if m.group_id == group.id)
        return group


@dataclass
class MigrationGroup:
    """Migrations applied together in one run."""

    id: int = 0
    migrations: MigrationSlice = field(default_factory=MigrationSlice)

    def is_zero(self) -> bool:
        """Return True for an empty group."""
        return self.id == 0 and not self.migrations

    def __str__(self) -> str:
        if self.is_zero():
            return "nil"
        return f"group #{self.id} ({self.migrations})"


@dataclass
class MigrationFile:
    """A migration file that was created on disk."""

    name: str
    path: str
    content: str


def split_sql(lines: Iterable[str]) -> List[str]:
    """Split script lines into queries at ``--bun:split`` directives."""
    queries: List[str] = []
    query: List[str] = []
    for line in lines:
        line = line.rstrip("\n")
        if line.endswith("\r"):
            line = line[:-1]
        if line.startswith(_DIRECTIVE):
            directive = line[len(_DIRECTIVE):]
            if directive == "split":
                queries.append("".join(query))
                query = []
                continue
            raise ValueError(f"bun: unknown directive: {directive!r}")
        query.append(line + "\n")
    if query:
        queries.append("".join(query))
    return queries


def exec_sql(db: Any, source: Union[str, TextIO, Iterable[str]], is_tx: bool) -> None:
    """Run an SQL migration script on a DB-API connection.

    With ``is_tx`` the queries are committed together at the end; otherwise
    each query is committed as soon as it has run.
    """
    lines = source.splitlines() if isinstance(source, str) else source
    queries = split_sql(lines)

    cursor = db.cursor()
    try:
        for query in queries:
            cursor.execute(query)
            if not is_tx:
                db.commit()
    finally:
        if is_tx:
            db.commit()
        cursor.close()


def new_sql_migration_func(directory: Union[str, Path], name: str) -> MigrationFunc:
    """Return a migration function that runs the SQL file ``name`` in ``directory``."""
    path = Path(directory) / name
    is_tx = name.endswith(".tx.up.sql") or name.endswith(".tx.down.sql")

    def run(db: Any) -> None:
        with open(path, encoding="utf-8") as f:
            exec_sql(db, f, is_tx)

    return run