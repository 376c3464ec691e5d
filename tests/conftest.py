import pytest


PROCESS_LIST_COLUMNS = ["Id", "User", "Host", "db", "Command", "Time", "State", "Info"]


class FakeConnector:
    def __init__(self, dialect="mysql", columns=None, rows=None, error=None):
        self.dialect = dialect
        self.columns = PROCESS_LIST_COLUMNS if columns is None else columns
        self.rows = [] if rows is None else rows
        self.error = error
        self.statements = []
        self.closed = False

    def exec_fetch_all(self, statement):
        self.statements.append(statement)
        if self.error is not None:
            raise self.error
        return list(self.columns), list(self.rows)

    def close(self):
        self.closed = True


def process_row(process_id, info, user="app", command="Query", time_sec=0):
    return (process_id, user, "10.0.0.1:51234", "shop", command, time_sec, "executing", info)


@pytest.fixture
def make_connector():
    return FakeConnector


@pytest.fixture
def make_row():
    return process_row
