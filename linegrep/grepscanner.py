#! /usr/bin/env python3

"""Grep like command line search of a single text input."""

import argparse
import itertools
import os
import sys
from textwrap import dedent
from typing import BinaryIO
from typing import Iterable
from typing import TextIO

import linegrep


def get_argparse_options(args: argparse.Namespace) -> linegrep.Options:
    """Pull the search options requested by the user from "grep" argparse arguments.

    Args:
        args: Processed argparse namespace.

    Returns:
        Immutable search options. Conflicting output flags are resolved later by priority.
    """
    return linegrep.Options(
        show_line_number=args.line_number,
        count_only=args.count,
        case_ignore=args.ignore_case,
        match_only=args.only_matching,
    )


def open_input(file: str | None) -> BinaryIO:
    """Open the user requested input for reading.

    Input is read as bytes and decoded by the searcher, to report invalid UTF-8 with the line number it occurred on.

    Args:
        file: Path to a file on the local filesystem. Standard input is used if not provided, or "-".

    Returns:
        Open binary stream. The caller is responsible for closing it, unless it is standard input.

    Raises:
        OSError if the file cannot be opened, such as if it does not exist or is a directory.
    """
    if not file or file == "-":
        # Replacement text streams without a buffer, such as in tests, are searched as is.
        return getattr(sys.stdin, "buffer", sys.stdin)
    return open(file, "rb")  # pylint: disable=consider-using-with


def write_lines(lines: Iterable[str], output: TextIO | None = None) -> None:
    """Write lines to an output stream, adding line endings.

    Args:
        lines: Lines to write, without line endings.
        output: Where to write the lines. Defaults to standard output.

    Raises:
        BrokenPipeError if the reader of the output closed it early.
        WriteError if the output could not be written for any other reason.
    """
    output = output or sys.stdout
    try:
        for line in lines:
            output.write(f"{line}\n")
    except BrokenPipeError:
        raise
    except OSError as error:
        raise linegrep.WriteError(f"failed to write output: {error}") from error


def write_results(
    results: Iterable[linegrep.SearchResult],
    output_format: linegrep.OutputFormat,
    output: TextIO | None = None,
) -> int:
    """Write every search result to an output stream as it is found.

    Args:
        results: Lazily produced search results.
        output_format: Formatting strategy to apply to each result.
        output: Where to write the formatted lines. Defaults to standard output.

    Returns:
        Number of results, which is the number of matching lines.

    Raises:
        BrokenPipeError if the reader of the output closed it early.
        WriteError if the output could not be written for any other reason.
    """
    count = 0
    for result in results:
        count += 1
        write_lines(linegrep.format_result(result, output_format), output=output)
    return count


def search(
    searcher: linegrep.Searcher,
    source: Iterable[str | bytes],
    max_match_count: int = 0,
    quiet: bool = False,
) -> int:
    """Search a source of lines and print the results based on user requested formatting.

    Args:
        searcher: Compiled search to run.
        source: Lines to search.
        max_match_count: Stop reading the source after requested number of matches found.
            Use 0, or a negative number, to indicate no limit.
        quiet: Whether to skip writing to standard output and stop on the first match.

    Returns:
        Number of matching lines.

    Raises:
        LineReadError if the source fails to produce a line.
        WriteError if the results could not be written.
    """
    if quiet:
        # Override max match count, quiet always stops on first hit.
        max_match_count = 1
    results = searcher.search(source)
    if max_match_count > 0:
        # Stop consuming the lazy search, the remaining lines are never read.
        results = itertools.islice(results, max_match_count)
    if quiet:
        return sum(1 for _ in results)
    count = write_results(results, searcher.output_format)
    if searcher.output_format is linegrep.OutputFormat.COUNT_ONLY:
        write_lines([str(count)])
    return count


def parse_args(args: list | None = None) -> argparse.Namespace:
    """Parse the args for the linegrep command.

    Returns:
        Processed args from CLI input.
    """
    parser = argparse.ArgumentParser(
        prog="linegrep",
        formatter_class=argparse.RawTextHelpFormatter,
        # Do not add the default help, add it manually. Grep uses -h as a standard arg.
        add_help=False,
        description=dedent(
            """\
            Line oriented grep (Global Regular Expression Print).

            Searches a single input, one line at a time, for a Python regular expression.
            Lines are never buffered, allowing unbounded input such as pipes and logs that are still being written.

            Differences from standard "grep" derivatives:
                1. Patterns always use Python "re" syntax. There are no basic or extended regex modes.
                2. Only one input is searched. Directories and multiple files are not supported.

            Examples:
                Search a file, matching standard "grep":
                    $ linegrep <regex> <file>
                Search standard input, usually piped from another command:
                    $ cat <file> | linegrep <regex>"""
        ),
    )
    parser.add_argument("pattern", help="Regex pattern to use.")
    parser.add_argument("file", nargs="?", help='File to search. Reads standard input if not provided, or "-".')

    generic_args = parser.add_argument_group("Generic Program Information")
    # Add help manually, using only --help. Grep uses -h as a standard arg.
    generic_args.add_argument(
        "--help", action="help", default=argparse.SUPPRESS, help="show this help message and exit"
    )
    generic_args.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {linegrep.__version__}",
        help="Print the version number and exit.",
    )

    matching_args = parser.add_argument_group("Matching Control")
    matching_args.add_argument(
        "-i",
        "--ignore-case",
        action="store_true",
        help="Perform case insensitive matching.  By default, matching is case sensitive.",
    )

    output_args = parser.add_argument_group("General Output Control")
    output_args.add_argument(
        "-c",
        "--count",
        action="store_true",
        help="Suppress normal output; instead print a count of matching lines. Takes priority over -o and -n.",
    )
    output_args.add_argument(
        "-m",
        "--max-count",
        type=int,
        default=0,
        help="Stop reading the input after NUM matching lines. A negative NUM means no limit. When the -c or --count option is also used, the count is not greater than NUM.",
    )
    output_args.add_argument(
        "-o",
        "--only-matching",
        action="store_true",
        help="Print only the matched parts of a matching line, with each such part on a separate output line. Takes priority over -n.",
    )
    output_args.add_argument(
        "-q",
        "--quiet",
        "--silent",
        action="store_true",
        help="Quiet; do not write anything to standard output. Exit immediately with zero status if any match is found.",
    )
    output_args.add_argument(
        "-s",
        "--no-messages",
        action="store_true",
        help="Suppress error messages about nonexistent or unreadable input.",
    )

    prefix_args = parser.add_argument_group("Output Line Prefix Control")
    prefix_args.add_argument(
        "-n",
        "--line-number",
        action="store_true",
        help="Prefix each line of output with the 1-based line number within its input.",
    )

    # Arguments not reserved by "grep" (unique to this command):
    unique_args = parser.add_argument_group("Unique arguments to linegrep")
    unique_args.add_argument(
        "-t",
        "--total",
        action="store_true",
        help="Print the total number of matching lines to standard error after the search completes.",
    )

    args = parser.parse_args(args=args)
    return args


def main() -> None:
    """Primary logic for linegrep command."""
    args = parse_args()
    options = get_argparse_options(args)
    try:
        searcher = linegrep.Searcher(args.pattern, options)
    except linegrep.InvalidPatternError as error:
        print(f"linegrep: {error}", file=sys.stderr)
        raise SystemExit(2) from error  # Match grep behavior of exiting with a 2 (Misuse of shell builtins).

    name = args.file if args.file and args.file != "-" else "(standard input)"
    try:
        source = open_input(args.file)
    except OSError as error:
        if not args.no_messages:
            # Error message style taken from "grep" output format.
            print(f"linegrep: {name}: {error.strerror}", file=sys.stderr)
        raise SystemExit(2) from error

    try:
        count = search(searcher, source, max_match_count=args.max_count, quiet=args.quiet)
    except linegrep.LineReadError as error:
        if not args.no_messages:
            print(f"linegrep: {name}: {error}", file=sys.stderr)
        raise SystemExit(2) from error
    except linegrep.WriteError as error:
        print(f"linegrep: {error}", file=sys.stderr)
        raise SystemExit(2) from error
    except BrokenPipeError:
        # NOTE: Piping output to additional commands such as head may close the output file.
        # Redirect the remaining output to devnull to prevent another error when Python flushes on exit.
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        raise SystemExit(0) from None
    finally:
        if args.file and args.file != "-":
            source.close()

    if args.total:
        print(f"Total matched lines: {count}", file=sys.stderr)

    # Match the corresponding exit code for grep based the following:
    # 2 - Any errors, regardless of match status.
    # 1 - No matches and no errors.
    # 0 - Matches and no errors.
    raise SystemExit(0 if count else 1)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt as user_interrupt:
        raise SystemExit(130) from user_interrupt  # Exit with 130 for "script exited with ctrl+c".
