#! /usr/bin/env python3

"""Simple line scanner reading from standard input."""

import argparse
import sys

import linegrep


def on_match(result: linegrep.SearchResult) -> None:
    """Print a matching line with its line number.

    Args:
        result: Matching line found by the searcher.

    Raises:
        WriteError if standard output could not be written.
    """
    try:
        print(f"{result.line_number}: {result.line}")
    except OSError as error:
        raise linegrep.WriteError(f"failed to write output: {error}") from error


def parse_args(args: list | None = None) -> argparse.Namespace:
    """Parse user arguments.

    Returns:
        Namespace with all the user arguments.
    """
    parser = argparse.ArgumentParser(description="Print lines from standard input matching a pattern.")
    parser.add_argument("pattern", help="Regular expression to use.")
    return parser.parse_args(args=args)


def scan(pattern: str) -> int:
    """Search standard input for a pattern and print every matching line.

    Args:
        pattern: Regex pattern in Python "re" syntax.

    Returns:
        Number of lines that matched.
    """
    searcher = linegrep.Searcher(pattern, linegrep.Options(show_line_number=True))
    count = 0
    for result in searcher.search(sys.stdin):
        count += 1
        on_match(result)
    return count


def main() -> None:
    """Primary function to scan standard input."""
    args = parse_args()
    try:
        count = scan(args.pattern)
    except linegrep.SearchError as error:
        print(f"Application error: {error}", file=sys.stderr)
        raise SystemExit(2) from error
    print(f"Total matched lines: {count}", file=sys.stderr)


if __name__ == "__main__":
    main()
