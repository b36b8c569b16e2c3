"""Utilities for searching text lines with regular expressions."""

import enum
import re
from dataclasses import dataclass
from typing import Generator
from typing import Iterable

# Exactly one line terminator is removed from the end of a line, never other whitespace.
LINE_TERMINATORS = ("\r\n", "\n")


class SearchError(Exception):
    """Base class for all errors raised while searching lines."""


class InvalidPatternError(SearchError, ValueError):
    """The regex pattern could not be compiled.

    Fields:
        pattern: The raw pattern provided by the user.
    """

    def __init__(self, pattern: str, error: re.error) -> None:
        super().__init__(f"invalid regex: {error}")
        self.pattern = pattern


class LineReadError(SearchError):
    """The line source failed while producing a line.

    Fields:
        line_number: The 1-based number of the line that could not be read.
    """

    def __init__(self, line_number: int, error: Exception) -> None:
        super().__init__(f"failed to read line {line_number}: {error}")
        self.line_number = line_number


class WriteError(SearchError):
    """Formatted results could not be written to the output."""


class OutputFormat(enum.Enum):
    """Formatting strategy applied to every matching line."""

    # Count the matching lines, without printing them.
    COUNT_ONLY = "count_only"
    # Print only the matched parts of each line, one per output line.
    MATCH_ONLY = "match_only"
    # Print the full line prefixed with its line number.
    LINE_NUMBERED = "line_numbered"
    # Print the full line without a prefix.
    FULL_LINE = "full_line"

    @classmethod
    def from_options(cls, options: "Options") -> "OutputFormat":
        """Resolve the single output format requested by a set of options.

        Multiple flags may be enabled at once. The first enabled flag wins in this order:
        count_only > match_only > show_line_number > full line.

        Args:
            options: User options to resolve.

        Returns:
            The output format with the highest priority.
        """
        if options.count_only:
            return cls.COUNT_ONLY
        if options.match_only:
            return cls.MATCH_ONLY
        if options.show_line_number:
            return cls.LINE_NUMBERED
        return cls.FULL_LINE


@dataclass(frozen=True)
class Options:
    """User options controlling how lines are matched and displayed.

    Fields:
        show_line_number: Prefix each matching line with its 1-based line number.
        count_only: Count matching lines instead of displaying them.
        case_ignore: Perform case-insensitive matching.
        match_only: Display only the matched parts of a matching line.
    """

    show_line_number: bool = False
    count_only: bool = False
    case_ignore: bool = False
    match_only: bool = False

    def output_format(self) -> OutputFormat:
        """Find the output format these options resolve to."""
        return OutputFormat.from_options(self)


@dataclass(frozen=True)
class SearchResult:
    """A single line that matched the pattern at least once.

    Fields:
        line_number: The 1-based index of the line in the source.
        line: Contents of the line, with its trailing line terminator removed.
        matches: Half-open (start, end) offsets of every match within the line, in left-to-right order.
            Offsets are character (code point) indexes into the decoded line, not byte offsets,
            so line[start:end] is always the matched text.
    """

    line_number: int
    line: str
    matches: tuple[tuple[int, int], ...]

    def match_texts(self) -> list[str]:
        """Find the text of every match within the line."""
        return [self.line[start:end] for start, end in self.matches]

    def format_lines(self, output_format: OutputFormat) -> list[str]:
        """Convert the result into the lines to display.

        Args:
            output_format: Formatting strategy to apply.

        Returns:
            Lines to display, without line endings. Empty if the format does not display lines.
        """
        if output_format is OutputFormat.COUNT_ONLY:
            return []
        if output_format is OutputFormat.MATCH_ONLY:
            return self.match_texts()
        if output_format is OutputFormat.LINE_NUMBERED:
            return [f"{self.line_number}: {self.line}"]
        return [self.line]


class Searcher:
    """Regex search over a source of lines, compiled once and reusable for multiple sources."""

    def __init__(self, pattern: str, options: Options | None = None) -> None:
        """Compile the pattern for the requested options.

        Args:
            pattern: Regex pattern in Python "re" syntax.
            options: User options. Defaults to case-sensitive matching displaying full lines.

        Raises:
            InvalidPatternError if the pattern is not a valid regex.
        """
        self._options = options or Options()
        # IGNORECASE applies to the entire expression, the same as a leading "(?i)".
        flags = re.IGNORECASE if self._options.case_ignore else 0
        try:
            self._regex = re.compile(pattern, flags)
        except re.error as error:
            raise InvalidPatternError(pattern, error) from error
        self._output_format = self._options.output_format()

    @property
    def options(self) -> Options:
        """User options the searcher was created with."""
        return self._options

    @property
    def output_format(self) -> OutputFormat:
        """Formatting strategy resolved from the options."""
        return self._output_format

    @property
    def regex(self) -> re.Pattern:
        """Compiled pattern used to match every line."""
        return self._regex

    def search(self, source: Iterable[str | bytes]) -> Generator[SearchResult, None, None]:
        """Lazily search every line in a source for the pattern.

        Only one line is held at a time. The next line is not read until the previous result has been consumed.
        Every call returns a new generator, and each generator can only be iterated once.

        Args:
            source: Lines to search, such as an open file or standard input. Byte lines are decoded as UTF-8.
                The caller is responsible for opening and closing the source.

        Yields:
            A result for every line with at least one match, in source order.

        Raises:
            LineReadError if the source fails to produce a line. No further lines are read after a failure.
        """
        lines = iter(source)
        line_number = 0
        while True:
            # The line number advances for every line read, even if it fails or does not match.
            line_number += 1
            try:
                line = next(lines)
                if isinstance(line, bytes):
                    line = line.decode("utf-8")
            except StopIteration:
                return
            except (OSError, ValueError) as error:
                # UnicodeDecodeError is a ValueError. Stop, lines after a read failure cannot be numbered reliably.
                raise LineReadError(line_number, error) from error
            result = self.search_line(line_number, line)
            if result is not None:
                yield result

    def search_line(self, line_number: int, line: str) -> SearchResult | None:
        """Search a single line for every non-overlapping match of the pattern.

        Args:
            line_number: The 1-based index of the line in its source.
            line: Contents of the line. A single trailing line terminator is removed before matching.

        Returns:
            A result with all matches if the line matched, None otherwise.
        """
        line = strip_line_terminator(line)
        matches = []
        previous_end = None
        # NOTE: finditer resumes each search at the end of the previous match, and steps past empty matches.
        for match in self._regex.finditer(line):
            start, end = match.span()
            if start == end == previous_end:
                # Empty matches touching the end of the previous match are not separate occurrences.
                continue
            matches.append((start, end))
            previous_end = end
        if not matches:
            return None
        return SearchResult(line_number, line, tuple(matches))


def strip_line_terminator(line: str) -> str:
    """Remove a single trailing "\\n" or "\\r\\n" from a line.

    Args:
        line: Line as read from its source.

    Returns:
        The line without its terminator. Other trailing characters, including extra "\\r", are kept.
    """
    for terminator in LINE_TERMINATORS:
        if line.endswith(terminator):
            return line[: -len(terminator)]
    return line


def format_result(result: SearchResult, output_format: OutputFormat) -> list[str]:
    """Convert a search result into the lines to display.

    Args:
        result: Matching line found by a searcher.
        output_format: Formatting strategy to apply.

    Returns:
        Lines to display, without line endings.
    """
    return result.format_lines(output_format)


def grep(
    source: Iterable[str | bytes],
    pattern: str,
    options: Options | None = None,
) -> tuple[list[str], int]:
    """Basic reusable grep like function.

    Contrary to the "grep" in the name, it returns the lines instead of printing them. Useful for testing
    basic functionality, or simple use cases where all output fits in memory.

    Args:
        source: Lines to search, such as an open file or standard input.
        pattern: Regex pattern in Python "re" syntax.
        options: User options controlling matching and formatting.

    Returns:
        Formatted output lines, and the number of matching lines.

    Raises:
        InvalidPatternError if the pattern is not a valid regex.
        LineReadError if the source fails to produce a line.
    """
    searcher = Searcher(pattern, options)
    output_format = searcher.output_format
    lines = []
    count = 0
    for result in searcher.search(source):
        count += 1
        lines.extend(format_result(result, output_format))
    return lines, count
