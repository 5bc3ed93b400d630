"""A registry of migrations defined in code or discovered as SQL files."""

from __future__ import annotations

import dataclasses
import inspect
import os
import re
from pathlib import Path
from typing import Iterator, Optional, Tuple, Union

from .migration import Migration, MigrationFunc, MigrationSlice, new_sql_migration_func

_FNAME_RE = re.compile(r"^([0-9]{14})_([0-9a-z_\-]+)\.")
_PACKAGE_DIR = os.path.dirname(os.path.abspath(__file__))


def _caller_file() -> str:
    """Return the file of the nearest caller outside this package."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            fname = frame.f_code.co_filename
            if os.path.dirname(os.path.abspath(fname)) != _PACKAGE_DIR:
                return fname
            frame = frame.f_back
    finally:
        del frame
    return ""


def extract_migration_name(fpath: Union[str, Path]) -> Tuple[str, str]:
    """Split a migration file name into its 14-digit version and its comment."""
    fname = os.path.basename(str(fpath))
    match = _FNAME_RE.match(fname)
    if match is None:
        raise ValueError(f"migrate: unsupported migration name format: {fname!r}")
    return match.group(1), match.group(2)


def _walk_files(root: Path) -> Iterator[Path]:
    for entry in sorted(root.iterdir(), key=lambda p: p.name):
        if entry.is_dir():
            yield from _walk_files(entry)
        else:
            yield entry


class Migrations:
    """Migrations known to the application."""

    def __init__(self, directory: Optional[Union[str, Path]] = None) -> None:
        self._ms = MigrationSlice()
        self.explicit_directory = str(directory) if directory else ""
        self.implicit_directory = os.path.dirname(_caller_file())

    def __iter__(self) -> Iterator[Migration]:
        return iter(self._ms)

    def __len__(self) -> int:
        return len(self._ms)

    def sorted(self) -> MigrationSlice:
        """Return copies of the migrations in ascending name order."""
        return MigrationSlice(
            sorted((dataclasses.replace(m) for m in self._ms), key=lambda m: m.name)
        )

    def register(self, up: Optional[MigrationFunc], down: Optional[MigrationFunc]) -> None:
        """Add a migration named after the file that calls this method."""
        name, comment = extract_migration_name(_caller_file())
        self.add(Migration(name=name, comment=comment, up=up, down=down))

    def add(self, migration: Migration) -> None:
        """Add a migration; its name is required."""
        if not migration.name:
            raise ValueError("migration name is required")
        self._ms.append(migration)

    def discover_caller(self) -> None:
        """Discover SQL migrations next to the calling file."""
        self.discover(os.path.dirname(_caller_file()))

    def discover(self, directory: Union[str, Path]) -> None:
        """Add ``*.up.sql`` and ``*.down.sql`` files found under ``directory``."""
        root = Path(directory)
        for path in _walk_files(root):
            rel = path.relative_to(root).as_posix()
            is_up = rel.endswith(".up.sql")
            if not is_up and not rel.endswith(".down.sql"):
                continue

            name, comment = extract_migration_name(rel)
            migration = self._get_or_create(name)
            migration.comment = comment
            func = new_sql_migration_func(root, rel)
            if is_up:
                migration.up = func
            else:
                migration.down = func

    def _get_or_create(self, name: str) -> Migration:
        for migration in self._ms:
            if migration.name == name:
                return migration
        migration = Migration(name=name)
        self._ms.append(migration)
        return migration

    def get_directory(self) -> str:
        """Return the directory where new migration files are created."""
        if self.explicit_directory:
            return self.explicit_directory
        if self.implicit_directory:
            return self.implicit_directory
        return os.path.dirname(_caller_file())