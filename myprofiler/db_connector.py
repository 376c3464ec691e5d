import logging

from sqlalchemy import create_engine


# Thin wrapper around a SQLAlchemy engine. Statements are sent verbatim to
# the driver, so the text the server records for this session is exactly
# the text passed to exec_fetch_all.
class DatabaseConnector:
    def __init__(self, url, engine=None):
        logging.debug("Init DatabaseConnector")
        self.engine = engine if engine is not None else create_engine(url, pool_pre_ping=True)
        self.dialect = self.engine.dialect.name

    def exec_fetch_all(self, statement):
        with self.engine.connect() as connection:
            result = connection.exec_driver_sql(statement)
            columns = list(result.keys())
            rows = result.fetchall()
        return columns, rows

    def close(self):
        self.engine.dispose()
