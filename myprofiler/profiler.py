import datetime
import logging
import sys
import threading

from .normalizer import normalize_query
from .summarizer import make_summarizer


def format_timestamp(now):
    centiseconds = now.microsecond // 10000
    return f"{now:%Y-%m-%d %H:%M:%S}.{centiseconds:02d} {now:%z}".rstrip()


def local_now():
    return datetime.datetime.now().astimezone()


# Drives the sampling loop: snapshot -> dump -> normalize -> summarize and,
# every `delay` rounds, a report on `out`.
class Profiler:
    def __init__(self, source, config, out=None, dump=None, stop_event=None, clock=local_now):
        logging.debug(f"Init Profiler with {config}")
        self.source = source
        self.config = config
        self.out = out if out is not None else sys.stdout
        self.dump = dump
        self.stop_event = stop_event if stop_event is not None else threading.Event()
        self.clock = clock

        self.summarizer = make_summarizer(config.last)
        self.rounds_since_report = 0
        self.rounds_taken = 0
        self.reports_shown = 0

    def stop(self):
        self.stop_event.set()

    def sample_round(self):
        queries = self.source.snapshot()

        if self.dump is not None:
            self._write_dump(queries)

        queries = [normalize_query(query) for query in queries]
        self.summarizer.update(queries)
        self.rounds_taken += 1

        self.rounds_since_report += 1
        if self.rounds_since_report >= self.config.delay:
            self.rounds_since_report = 0
            self.report()

        return queries

    def _write_dump(self, queries):
        for query in queries:
            self.dump.write(query)
            self.dump.write("\n")
        self.dump.flush()

    def report(self):
        self.out.write(f"## {format_timestamp(self.clock())}\n")
        self.summarizer.show(self.out, self.config.top_n)
        self.out.flush()
        self.reports_shown += 1

    def run(self, max_rounds=None):
        while not self.stop_event.is_set():
            self.sample_round()

            if max_rounds is not None and self.rounds_taken >= max_rounds:
                break
            # wait() returns early once stop() is called
            if self.stop_event.wait(self.config.interval):
                break

        logging.info(f"Profiler stopped after {self.rounds_taken} rounds and {self.reports_shown} reports")
        return self.rounds_taken
