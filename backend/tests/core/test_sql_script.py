"""SQL Script Parsing — tests for statement splitting and migration metadata."""

from lmpg.core.sql_script import (
    describe_migration, is_valid_version, split_statements, version_from_filename,
)


def test_version_from_filename():
    assert version_from_filename("001_add_indexes.sql") == "001_add_indexes"
    assert version_from_filename("README") == "README"


def test_is_valid_version():
    assert is_valid_version("001_add_indexes")
    assert is_valid_version("2026.10.18-hotfix")
    assert not is_valid_version("../etc/passwd")
    assert not is_valid_version("a/b")
    assert not is_valid_version("")


def test_version_fits_record_column():
    assert is_valid_version("0" * 50)
    assert not is_valid_version("0" * 51)


def test_describe_migration_uses_first_comment():
    sql = "\n-- \n--   Add attendance indexes\n-- second line\nCREATE INDEX x ON t (c);"
    assert describe_migration("001", sql) == "Add attendance indexes"


def test_describe_migration_falls_back_to_version():
    assert describe_migration("002_x", "CREATE TABLE t (id INT);\n-- late") == "Migration 002_x"


def test_split_statements_drops_comments_and_blanks():
    sql = "-- header\nCREATE TABLE a (id INT);\n\n  ;\nCREATE TABLE b (id INT);  -- trailing\n"
    assert split_statements(sql) == [
        "CREATE TABLE a (id INT)",
        "CREATE TABLE b (id INT)",
    ]


def test_split_statements_respects_quoted_semicolons():
    sql = "INSERT INTO t VALUES ('a;b');INSERT INTO t VALUES (\"c;d\")"
    assert split_statements(sql) == [
        "INSERT INTO t VALUES ('a;b')",
        'INSERT INTO t VALUES ("c;d")',
    ]
