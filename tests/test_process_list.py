import logging

import pytest
from sqlalchemy.exc import OperationalError

from myprofiler.process_list import (
    MYSQL_PROCESS_LIST,
    POSTGRES_PROCESS_LIST,
    Process,
    ProcessListSource,
    UnknownColumnsError,
    decode_row,
)


def test_snapshot_filters_idle_and_own_statement(make_connector, make_row):
    connector = make_connector(
        rows=[
            make_row(1, "SELECT * FROM orders WHERE id = 1"),
            make_row(2, None, command="Sleep"),
            make_row(3, ""),
            make_row(4, MYSQL_PROCESS_LIST),
            make_row(5, "SELECT * FROM orders WHERE id = 2"),
        ]
    )
    source = ProcessListSource(connector)

    assert source.snapshot() == ["SELECT * FROM orders WHERE id = 1", "SELECT * FROM orders WHERE id = 2"]
    assert connector.statements == [MYSQL_PROCESS_LIST]


def test_progress_column_is_accepted(make_connector, make_row):
    connector = make_connector(
        columns=["Id", "User", "Host", "db", "Command", "Time", "State", "Info", "Progress"],
        rows=[make_row(1, "SELECT 1") + (0.0,)],
    )
    assert ProcessListSource(connector).snapshot() == ["SELECT 1"]


def test_unknown_columns_are_fatal(make_connector):
    connector = make_connector(columns=["Id", "User", "Host"], rows=[(1, "app", "localhost")])
    with pytest.raises(UnknownColumnsError) as excinfo:
        ProcessListSource(connector).snapshot()
    assert excinfo.value.columns == ["Id", "User", "Host"]


def test_query_failure_gives_empty_round(make_connector, caplog):
    error = OperationalError(MYSQL_PROCESS_LIST, {}, Exception("server has gone away"))
    source = ProcessListSource(make_connector(error=error))

    with caplog.at_level(logging.ERROR):
        assert source.snapshot() == []
    assert "Process list query failed" in caplog.text


def test_undecodable_rows_are_skipped(make_connector, make_row, caplog):
    connector = make_connector(
        rows=[
            make_row("not-a-number", "SELECT 1"),
            make_row(2, "SELECT 2", time_sec="soon"),
            (3, "app"),
            make_row(4, "SELECT 4"),
        ]
    )
    with caplog.at_level(logging.WARNING):
        assert ProcessListSource(connector).snapshot() == ["SELECT 4"]
    assert caplog.text.count("Skipping process list row") == 3


def test_bytes_are_decoded(make_connector, make_row):
    connector = make_connector(rows=[make_row(1, b"SELECT 'caf\xc3\xa9'"), make_row(2, b"SELECT \xff")])
    assert ProcessListSource(connector).snapshot() == ["SELECT 'café'", "SELECT \ufffd"]


def test_decode_row():
    row = (7, "app", b"host", None, "Query", None, "executing", "SELECT 1", 12.5)
    assert decode_row(row, 9) == Process(7, "app", "host", None, "Query", 0, "executing", "SELECT 1")


def test_postgresql_uses_pg_stat_activity(make_connector, make_row):
    connector = make_connector(
        dialect="postgresql",
        rows=[make_row(10, "SELECT now()"), make_row(11, POSTGRES_PROCESS_LIST)],
    )
    source = ProcessListSource(connector)
    assert source.statement == POSTGRES_PROCESS_LIST
    assert source.snapshot() == ["SELECT now()"]


def test_unsupported_dialect(make_connector):
    with pytest.raises(ValueError):
        ProcessListSource(make_connector(dialect="oracle"))


def test_explicit_statement(make_connector, make_row):
    connector = make_connector(dialect="sqlite", rows=[make_row(1, "SELECT * FROM processes")])
    source = ProcessListSource(connector, statement="SELECT * FROM processes")
    assert source.snapshot() == []
