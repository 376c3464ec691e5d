import argparse
import sys

from myprofiler.normalizer import normalize_query
from myprofiler.summarizer import CumulativeSummarizer


def summarize_dump(path, top_n, out):
    summarizer = CumulativeSummarizer()
    with open(path, "r", encoding="utf-8", errors="replace") as f:
        summarizer.update(normalize_query(line.rstrip("\n")) for line in f if line.strip())
    summarizer.show(out, top_n)
    return summarizer


def main(argv=None, out=None):
    parser = argparse.ArgumentParser(description="Summarize a raw query dump written with --dump.")
    parser.add_argument("dump", help="Dump file, one statement per line")
    parser.add_argument("--top", type=int, default=10, help="(int) Show N most common queries")
    args = parser.parse_args(argv)

    summarize_dump(args.dump, args.top, out if out is not None else sys.stdout)
    return 0


if __name__ == '__main__':
    sys.exit(main())
