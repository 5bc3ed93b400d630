import sqlite3

import pytest

from bunkit.migration import (
    SQL_TEMPLATE,
    Migration,
    MigrationGroup,
    MigrationSlice,
    exec_sql,
    new_sql_migration_func,
    split_sql,
)


@pytest.fixture
def db():
    conn = sqlite3.connect(":memory:")
    yield conn
    conn.close()


def _count(db, table):
    return db.execute(f"SELECT count(*) FROM {table}").fetchone()[0]


def test_migration_str_joins_name_and_comment():
    m = Migration(name="20230101120000", comment="init")
    assert str(m) == "20230101120000_init"


def test_is_applied_depends_on_id():
    assert not Migration(name="a").is_applied()
    assert Migration(name="a", id=3).is_applied()


def test_applied_and_unapplied_order():
    ms = MigrationSlice(
        [
            Migration(name="2", id=1),
            Migration(name="1", id=2),
            Migration(name="4"),
            Migration(name="3"),
        ]
    )
    assert [m.name for m in ms.applied()] == ["2", "1"]
    assert [m.name for m in ms.unapplied()] == ["3", "4"]
    assert isinstance(ms.applied(), MigrationSlice)


def test_last_group_id():
    assert MigrationSlice().last_group_id() == 0
    ms = MigrationSlice([Migration(name="a", group_id=1), Migration(name="b", group_id=2)])
    assert ms.last_group_id() == 2


def test_last_group_filters_by_group():
    ms = MigrationSlice(
        [
            Migration(name="a", id=1, group_id=1),
            Migration(name="b", id=2, group_id=2),
            Migration(name="c", id=3, group_id=2),
        ]
    )
    group = ms.last_group()
    assert group.id == 2
    assert [m.name for m in group.migrations] == ["b", "c"]


def test_last_group_of_empty_slice_is_zero():
    group = MigrationSlice().last_group()
    assert group.is_zero()
    assert str(group) == "nil"


def test_slice_str():
    assert str(MigrationSlice()) == "empty"
    ms = MigrationSlice([Migration(name="a", comment="x"), Migration(name="b", comment="y")])
    assert str(ms) == "a_x, b_y"
    many = MigrationSlice(Migration(name=f"n{i}") for i in range(1, 7))
    assert str(many) == "6 migrations (n1 ... n6)"


def test_group_str():
    group = MigrationGroup(id=2, migrations=MigrationSlice([Migration(name="a", comment="x")]))
    assert not group.is_zero()
    assert str(group) == "group #2 (a_x)"


def test_split_sql_template():
    queries = split_sql(SQL_TEMPLATE.splitlines())
    assert len(queries) == 3
    assert "".join(queries) == SQL_TEMPLATE.replace("--bun:split\n", "")


def test_split_sql_leading_split_gives_empty_query():
    assert split_sql(["--bun:split", "SELECT 1"]) == ["", "SELECT 1\n"]


def test_split_sql_strips_line_endings():
    assert split_sql(["SELECT 1\r\n"]) == ["SELECT 1\n"]


def test_split_sql_unknown_directive():
    with pytest.raises(ValueError, match="unknown directive"):
        split_sql(["--bun:nope"])


@pytest.mark.parametrize("is_tx", [True, False])
def test_exec_sql_runs_queries(db, is_tx):
    script = "CREATE TABLE t (x INTEGER);\n--bun:split\nINSERT INTO t VALUES (1);\n"
    exec_sql(db, script, is_tx)
    assert _count(db, "t") == 1


def test_exec_sql_propagates_errors(db):
    with pytest.raises(sqlite3.OperationalError):
        exec_sql(db, "INSERT INTO missing VALUES (1)", False)


def test_new_sql_migration_func_reads_file(db, tmp_path):
    (tmp_path / "20230101120000_t.tx.up.sql").write_text(
        "CREATE TABLE t (x INTEGER)\n--bun:split\nINSERT INTO t VALUES (7)\n",
        encoding="utf-8",
    )
    run = new_sql_migration_func(tmp_path, "20230101120000_t.tx.up.sql")
    run(db)
    assert db.execute("SELECT x FROM t").fetchall() == [(7,)]


def test_new_sql_migration_func_missing_file(db, tmp_path):
    run = new_sql_migration_func(tmp_path, "nope.up.sql")
    with pytest.raises(FileNotFoundError):
        run(db)