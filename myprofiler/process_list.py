import collections
import logging

from sqlalchemy.exc import SQLAlchemyError


MYSQL_PROCESS_LIST = "SHOW FULL PROCESSLIST"

# Shaped like the MySQL process list: id, user, host, db, command, time, state, info
POSTGRES_PROCESS_LIST = (
    "SELECT pid, usename, CAST(client_addr AS text), datname, backend_type, "
    "CAST(EXTRACT(EPOCH FROM (now() - query_start)) AS integer), state, query "
    "FROM pg_stat_activity WHERE state = 'active'"
)

SNAPSHOT_STATEMENTS = {
    "mysql": MYSQL_PROCESS_LIST,
    "postgresql": POSTGRES_PROCESS_LIST,
}

# MariaDB and some MySQL forks append a Progress column
KNOWN_COLUMN_COUNTS = (8, 9)

Process = collections.namedtuple("Process", ["id", "user", "host", "db", "command", "time", "state", "info"])


class UnknownColumnsError(RuntimeError):
    def __init__(self, columns):
        super().__init__(f"Unknown columns: {columns}")
        self.columns = columns


def _decode_text(value):
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    return value


def decode_row(row, column_count):
    if len(row) != column_count:
        raise ValueError(f"Expected {column_count} fields, got {len(row)}")
    process_id, user, host, db, command, time_sec, state, info = row[:8]
    return Process(
        int(process_id),
        _decode_text(user),
        _decode_text(host),
        _decode_text(db),
        _decode_text(command),
        int(time_sec) if time_sec is not None else 0,
        _decode_text(state),
        _decode_text(info),
    )


class ProcessListSource:
    def __init__(self, db_connector, statement=None):
        self.db_connector = db_connector
        if statement is None:
            if db_connector.dialect not in SNAPSHOT_STATEMENTS:
                raise ValueError(f"Dialect not supported - {db_connector.dialect}")
            statement = SNAPSHOT_STATEMENTS[db_connector.dialect]
        self.statement = statement

    def processes(self):
        try:
            columns, rows = self.db_connector.exec_fetch_all(self.statement)
        except SQLAlchemyError as e:
            logging.error(f"Process list query failed: {e}")
            return []

        column_count = len(columns)
        if column_count not in KNOWN_COLUMN_COUNTS:
            raise UnknownColumnsError(columns)

        processes = []
        for row in rows:
            try:
                processes.append(decode_row(row, column_count))
            except (TypeError, ValueError) as e:
                logging.warning(f"Skipping process list row: {e}")
        return processes

    def snapshot(self):
        queries = []
        for process in self.processes():
            info = process.info
            if info and info != self.statement:
                queries.append(info)
        return queries
