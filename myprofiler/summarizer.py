import collections
import itertools

from .ranking import show_summary


QueryCount = collections.namedtuple("QueryCount", ["query", "count"])


def make_round(queries):
    # Sorted by text, one QueryCount per distinct statement
    return [QueryCount(query, len(list(group))) for query, group in itertools.groupby(sorted(queries))]


class Summarizer(object):
    def update(self, queries):
        raise NotImplementedError

    def counts(self):
        raise NotImplementedError

    def show(self, out, top_n):
        show_summary(out, self.counts(), top_n)


# Lifetime totals. Grows with the number of distinct statement shapes.
class CumulativeSummarizer(Summarizer):
    def __init__(self):
        self._counts = collections.defaultdict(int)

    def update(self, queries):
        for query in queries:
            self._counts[query] += 1

    def counts(self):
        return dict(self._counts)


# Keeps only the last `last` rounds. The aggregate is rebuilt from the
# retained rounds on every call, so evicted rounds stop contributing.
class RecentSummarizer(Summarizer):
    def __init__(self, last):
        if last <= 0:
            raise ValueError(f"Retention must be positive, got {last}")
        self.last = last
        self.rounds = collections.deque(maxlen=last)

    def update(self, queries):
        self.rounds.append(make_round(queries))

    def counts(self):
        total = collections.defaultdict(int)
        for query_counts in self.rounds:
            for query_count in query_counts:
                total[query_count.query] += query_count.count
        return dict(total)


def make_summarizer(last):
    if last < 0:
        raise ValueError(f"last must not be negative, got {last}")
    if last > 0:
        return RecentSummarizer(last)
    return CumulativeSummarizer()
