import configparser
import getpass
import logging
import math
import os
import threading

from sqlalchemy.engine import URL


DRIVERS = {
    "mysql": "mysql+pymysql",
    "postgresql": "postgresql+psycopg2",
}

PASSWORD_ENVIRONMENT_VARIABLES = {
    "mysql": "MYSQL_PWD",
    "postgresql": "PGPASSWORD",
}

DEFAULTS_FILE = os.path.join("~", ".my.cnf")


class ProfilerConfig:
    def __init__(self, interval=1.0, delay=1, top_n=10, last=0):
        if not math.isfinite(interval) or not 0 <= interval <= threading.TIMEOUT_MAX:
            raise ValueError(f"interval must be between 0 and {threading.TIMEOUT_MAX} seconds, got {interval}")
        if delay < 1:
            raise ValueError(f"delay must be at least 1, got {delay}")
        if top_n < 0:
            raise ValueError(f"top must not be negative, got {top_n}")
        if last < 0:
            raise ValueError(f"last must not be negative, got {last}")

        # Seconds between two samples
        self.interval = interval
        # Number of samples between two reports
        self.delay = delay
        self.top_n = top_n
        # 0 summarizes every sample taken so far
        self.last = last

    def __repr__(self):
        return (
            f"ProfilerConfig(interval={self.interval}, delay={self.delay}, "
            f"top_n={self.top_n}, last={self.last})"
        )


# Reads the [client] section of a MySQL option file. Missing files and files
# without a [client] section give an empty dict.
def read_defaults_file(path):
    path = os.path.expanduser(path)
    if not os.path.exists(path):
        return {}

    parser = configparser.ConfigParser(allow_no_value=True, strict=False, interpolation=None)
    try:
        parser.read(path)
    except configparser.Error as e:
        raise ValueError(f"Cannot read {path}: {e}") from e
    if not parser.has_section("client"):
        return {}

    options = {}
    for key in ("host", "user", "password", "port", "socket"):
        value = parser.get("client", key, fallback=None)
        if value is None:
            continue
        options[key] = value.strip().strip('"').strip("'")
    logging.debug(f"Read {sorted(options)} from {path}")
    return options


class ConnectionConfig:
    def __init__(self, dialect="mysql", host=None, user=None, password=None, port=None, socket=None, database=None):
        if dialect not in DRIVERS:
            raise ValueError(f"Dialect not supported - {dialect}")
        self.dialect = dialect
        self.host = host
        self.user = user
        self.password = password
        self.port = port
        self.socket = socket
        self.database = database

    @classmethod
    def resolve(cls, dialect="mysql", host=None, user=None, password=None, port=None, socket=None,
                defaults_file=DEFAULTS_FILE, environ=None):
        environ = os.environ if environ is None else environ
        config = cls(dialect)

        if dialect == "mysql" and defaults_file:
            options = read_defaults_file(defaults_file)
            config.host = options.get("host")
            config.user = options.get("user")
            config.password = options.get("password")
            config.socket = options.get("socket")
            if options.get("port"):
                config.port = int(options["port"])

        if host:
            config.host = host
        if user:
            config.user = user
        if password:
            config.password = password
        elif environ.get(PASSWORD_ENVIRONMENT_VARIABLES[dialect]):
            config.password = environ[PASSWORD_ENVIRONMENT_VARIABLES[dialect]]
        if port:
            config.port = port
        if socket:
            config.socket = socket

        if not config.host:
            config.host = "localhost"
        if not config.user:
            try:
                config.user = getpass.getuser()
            except (KeyError, OSError):
                logging.info("Could not determine the current user name")

        return config

    def url(self):
        query = {}
        if self.socket:
            query["unix_socket" if self.dialect == "mysql" else "host"] = self.socket
        return URL.create(
            DRIVERS[self.dialect],
            username=self.user,
            password=self.password,
            host=self.host,
            port=self.port,
            database=self.database,
            query=query,
        )
