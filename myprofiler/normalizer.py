import re


class NormalizePattern:
    def __init__(self, pattern, replacement):
        self.regex = re.compile(pattern, re.ASCII)
        self.replacement = replacement

    def normalize(self, query):
        return self.regex.sub(self.replacement, query)

    def __repr__(self):
        return f"NormalizePattern({self.regex.pattern!r} -> {self.replacement!r})"


# Order matters: literal rules expect collapsed spaces and the last rule
# folds the N/S tokens produced by the earlier ones.
NORMALIZE_PATTERNS = (
    NormalizePattern(r" +", " "),
    NormalizePattern(r"[+\-]?\b\d+\b", "N"),
    NormalizePattern(r"\b0x[0-9A-Fa-f]+\b", "0xN"),
    NormalizePattern(r"(\\')", ""),
    NormalizePattern(r'(\\")', ""),
    NormalizePattern(r"'[^']+'", "S"),
    NormalizePattern(r'"[^"]+"', "S"),
    NormalizePattern(r"(([NS]\s*,\s*){4,})", "..."),
)


def normalize_query(query):
    if isinstance(query, bytes):
        query = query.decode("utf-8", errors="replace")
    for pattern in NORMALIZE_PATTERNS:
        query = pattern.normalize(query)
    return query
