import argparse
import contextlib
import logging
import signal
import sys

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from .config import DRIVERS, ConnectionConfig, ProfilerConfig
from .db_connector import DatabaseConnector
from .process_list import ProcessListSource, UnknownColumnsError
from .profiler import Profiler


LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def build_parser():
    parser = argparse.ArgumentParser(
        prog="myprofiler",
        description="Sample the statements running on a database server and show the most frequent ones.",
    )
    parser.add_argument("--host", default="", help="Host of database")
    parser.add_argument("--user", default="", help="User")
    parser.add_argument("--password", default="", help="Password")
    parser.add_argument("--port", type=int, default=0, help="Port")
    parser.add_argument("--socket", default="", help="Unix socket of the database server")
    parser.add_argument("--dialect", choices=sorted(DRIVERS), default="mysql", help="Database server type")
    parser.add_argument("--url", default="", help="SQLAlchemy URL, overrides every other connection option")

    parser.add_argument("--dump", default="", help="Write raw queries to this file")

    parser.add_argument("--top", type=int, default=10, help="(int) Show N most common queries")
    parser.add_argument(
        "--last", type=int, default=0, help="(int) Last N samples are summarized. 0 means summarize all samples"
    )
    parser.add_argument("--interval", type=float, default=1.0, help="(float) Sampling interval")
    parser.add_argument(
        "--delay",
        type=int,
        default=1,
        help="(int) Show summary for each `delay` samples. --interval=0.1 --delay=30 shows summary for every 3sec",
    )
    parser.add_argument("--rounds", type=int, default=0, help="(int) Stop after N samples. 0 means run until interrupted")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Logging level",
    )
    return parser


def connection_url(args):
    if args.url:
        return make_url(args.url)
    return ConnectionConfig.resolve(
        dialect=args.dialect,
        host=args.host,
        user=args.user,
        password=args.password,
        port=args.port,
        socket=args.socket,
    ).url()


@contextlib.contextmanager
def stop_on_signals(profiler, signums=(signal.SIGINT, signal.SIGTERM)):
    def _stop(signum, frame):
        logging.info(f"Received signal {signum}, stopping")
        profiler.stop()

    previous = {signum: signal.signal(signum, _stop) for signum in signums}
    try:
        yield profiler
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


def main(argv=None, connector_factory=DatabaseConnector, out=None):
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=args.log_level)

    try:
        config = ProfilerConfig(interval=args.interval, delay=args.delay, top_n=args.top, last=args.last)
        if args.rounds < 0:
            raise ValueError(f"rounds must not be negative, got {args.rounds}")
        url = connection_url(args)
    except (ArgumentError, ValueError) as e:
        logging.critical(f"Invalid configuration: {e}")
        return 1

    logging.info(f"Connecting to {url.render_as_string(hide_password=True)}")
    try:
        connector = connector_factory(url)
    except ImportError as e:
        logging.critical(f"Database driver is not installed: {e}")
        return 1

    try:
        source = ProcessListSource(connector)
    except ValueError as e:
        logging.critical(f"Invalid configuration: {e}")
        connector.close()
        return 1

    try:
        with contextlib.ExitStack() as stack:
            dump = None
            if args.dump:
                dump = stack.enter_context(open(args.dump, "w", encoding="utf-8"))

            profiler = Profiler(source, config, out=out, dump=dump)
            stack.enter_context(stop_on_signals(profiler))
            profiler.run(max_rounds=args.rounds or None)
    except UnknownColumnsError as e:
        logging.critical(str(e))
        return 1
    except (OSError, ValueError) as e:
        logging.critical(f"Profiler stopped: {e}")
        return 1
    finally:
        connector.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
