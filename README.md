# bunkit

Small, dependency-free building blocks for SQL tooling, plus a migration
runner that records which schema changes have been applied.

## Installation

```
pip install bunkit
```

To run the test suite, install the `test` extra and run `pytest`:

```
pip install "bunkit[test]"
pytest
```

## What is inside

| Module              | Purpose                                                                   |
|---------------------|---------------------------------------------------------------------------|
| `bunkit.tagparser`  | `parse` turns tags such as `"name,pk,type:varchar(50)"` into a `Tag`.     |
| `bunkit.naming`     | `underscore`, `camel_cased` and `to_exported` name conversions.           |
| `bunkit.timeparse`  | `parse_time` for the date, time and timestamp forms SQL servers return.   |
| `bunkit.parser`     | `Parser`, a cursor over text for small query-template grammars.           |
| `bunkit.hexenc`     | `HexEncoder`, which writes bytes as a quoted `'\x...'` literal or `NULL`. |
| `bunkit.mapkey`     | `map_key`, a hashable key built from a sequence of values.                |
| `bunkit.flag`       | `Flag`, a 64-bit set of bits with `has`, `set` and `remove`.              |
| `bunkit.migration`  | `Migration`, `MigrationSlice`, `MigrationGroup`, `split_sql`, `exec_sql`. |
| `bunkit.migrations` | `Migrations`, a registry that also discovers `*.up.sql` / `*.down.sql`.   |
| `bunkit.migrator`   | `Migrator`, which applies and rolls back migrations in groups.            |

## Tags

```python
from bunkit.tagparser import parse

tag = parse("hello:world,foo")
tag.name                  # ""
tag.options               # {"hello": ["world"], "foo": [""]}
tag.option("hello")       # "world"
tag.has_option("bar")     # False
```

Quoted values keep their commas and colons, and parentheses are balanced,
so `parse("type:geometry(POINT, 4326)")` yields a single `type` option.
An option given more than once keeps every value; `option` returns the last.

## Names and times

```python
from bunkit.naming import underscore, camel_cased
from bunkit.timeparse import parse_time

underscore("CamelCasedString")   # "camel_cased_string"
camel_cased("camel_cased")       # "CamelCased"
parse_time("2021-09-15 10:20:30+03:00")
```

`parse_time` always returns an aware `datetime`: values without an offset
are taken as UTC, time-only values fall on 0001-01-01, and fractions finer
than a microsecond are truncated. Unparseable input raises `ValueError`.

## Migrations

Migrations are named by a 14-digit version, optionally followed by a
comment. SQL files are named `<version>_<comment>.up.sql` and
`<version>_<comment>.down.sql`. A line `--bun:split` separates statements
that are executed one after another; any other `--bun:` directive is an
error. Files ending in `.tx.up.sql` or `.tx.down.sql` are committed once
at the end, the others after every statement.

`Migrator` works with a DB-API connection that uses `?` parameters, such
as `sqlite3`. Migration functions are called with that connection.

```python
import sqlite3

from bunkit.migration import Migration
from bunkit.migrations import Migrations
from bunkit.migrator import Migrator

migrations = Migrations()
migrations.discover("migrations")
migrations.add(Migration(
    name="20240101000000",
    up=lambda db: db.execute("CREATE TABLE items (id INTEGER)"),
    down=lambda db: db.execute("DROP TABLE items"),
))

migrator = Migrator(sqlite3.connect("app.db"), migrations)
migrator.init()
group = migrator.migrate()
print(group)          # group #1 (...)
migrator.rollback()
```

Each call to `migrate` applies every pending migration, in ascending name
order, as one new group; `rollback` undoes the most recent group in
reverse order. If a step fails, `MigrationFailedError` is raised and its
`group` attribute holds the migrations attempted so far. With
`mark_applied_on_success=True` a migration is recorded only after its
function succeeds; `nop=True` records status without running functions.

`lock` and `unlock` guard against two runners working on the same table at
once (`MigrationLockedError` when the lock is held). `create_sql_migrations`
writes a new timestamped up/down pair and `create_py_migration` a Python
module into the directory given to `Migrations(directory=...)`, or by
default the directory of the file that created the registry.
`missing_migrations` lists applied records that are no longer registered.

## What it does not do

There is no query builder or ORM and no command-line tool: migrations are
run from your own Python code. The tables that `Migrator.init` creates use
SQLite-style DDL (`INTEGER PRIMARY KEY AUTOINCREMENT`), so other databases
may need those tables created by hand.