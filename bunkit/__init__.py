"""Tag parsing, naming and time helpers, and a schema migration runner."""

__version__ = "0.1.0"

__all__ = [
    "flag",
    "hexenc",
    "mapkey",
    "timeparse",
    "naming",
    "parser",
    "tagparser",
    "migration",
    "migrations",
    "migrator",
]