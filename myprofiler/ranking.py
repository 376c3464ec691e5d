# Equal counts are ordered by statement text so reports are reproducible.
def rank_queries(counts, top_n):
    if top_n <= 0:
        return []
    ranked = sorted(counts.items(), key=lambda x: (-x[1], x[0]))
    return [(count, query) for query, count in ranked[:top_n]]


def format_line(count, query):
    return f"{count:4d} {query}\n"


def show_summary(out, counts, top_n):
    for count, query in rank_queries(counts, top_n):
        out.write(format_line(count, query))
