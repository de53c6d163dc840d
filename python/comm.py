#!/usr/bin/env python3
"""
Name: comm
Description: compare two sorted files line by line
Author: Mark-Jason Dominus (Original Perl Author)
License: public domain
"""

import sys
import os
import argparse
from collections import namedtuple
from enum import Enum
from typing import Optional

# --- Exit Codes ---
EX_SUCCESS = 0
EX_FAILURE = 1

STDIN_ALIAS = '-'

class Side(Enum):
    FIRST = 1
    SECOND = 2

# One comparison step. Each slot holds a line or None.
ClassifiedRecord = namedtuple('ClassifiedRecord', ['first', 'second', 'both'])

Config = namedtuple(
    'Config',
    ['suppress_first', 'suppress_second', 'suppress_third',
     'case_insensitive', 'delimiter', 'fold_output'],
    defaults=[False, False, False, False, '\t', True]
)

# --- Errors ---

class CommError(Exception):
    """Base class for every fatal condition reported by comm."""

class ConfigurationError(CommError):
    pass

class SourceOpenError(CommError):
    def __init__(self, path, reason):
        self.path = path
        self.reason = reason
        if reason == 'is a directory':
            message = f"'{path}' is a directory"
        else:
            message = f"Couldn't open file '{path}': {reason}"
        super().__init__(message)

class SourceReadError(CommError):
    def __init__(self, side, reason):
        self.side = side
        self.reason = reason
        super().__init__(f"I/O error reading file{side.value}: {reason}")

# --- Line Sources ---

class LineSource:
    """
    Pulls lines one at a time from a text stream (an open file, stdin,
    or any iterable of strings). Trailing whitespace and the newline are
    stripped. End of input is reported as None, so it can never be
    mistaken for an empty line.
    """
    def __init__(self, stream, side):
        self.side = side
        self._lines = iter(stream)

    def next_line(self) -> Optional[str]:
        try:
            line = next(self._lines, None)
        except (OSError, UnicodeDecodeError) as e:
            reason = getattr(e, 'strerror', None) or str(e)
            raise SourceReadError(self.side, reason) from e
        if line is None:
            return None
        return line.rstrip()

def open_source(path: str, side: Side):
    """
    Opens a file for reading or returns the stdin stream.
    Directories and unreadable paths raise SourceOpenError.
    """
    if path == STDIN_ALIAS:
        return sys.stdin

    if os.path.isdir(path):
        raise SourceOpenError(path, 'is a directory')

    try:
        return open(path, 'r')
    except OSError as e:
        raise SourceOpenError(path, e.strerror or str(e)) from e

# --- Merge Classifier ---

class MergeClassifier:
    """
    Walks two sources in lock-step, one line from each per step.

    Both sides advance on every step regardless of ordering, so two
    unequal lines are reported together as a single divergent record
    instead of being re-aligned the way a merge-join would.
    """
    def __init__(self, config):
        self.config = config

    def _key(self, line: str) -> str:
        if self.config.case_insensitive:
            return line.lower()
        return line

    def classify(self, line1: Optional[str], line2: Optional[str]):
        """Classifies a single step. Either line may be None (exhausted)."""
        if line1 is None and line2 is None:
            return None

        # An exhausted side compares as the empty string for this step only.
        key1 = self._key(line1 if line1 is not None else '')
        key2 = self._key(line2 if line2 is not None else '')

        if self.config.case_insensitive and self.config.fold_output:
            line1 = key1 if line1 is not None else None
            line2 = key2 if line2 is not None else None

        if line2 is None:
            return ClassifiedRecord(line1, None, None)
        if line1 is None:
            return ClassifiedRecord(None, line2, None)
        if key1 == key2:
            return ClassifiedRecord(None, None, line1)
        return ClassifiedRecord(line1, line2, None)

    def records(self, source1, source2):
        """Yields one ClassifiedRecord per step until both sources are exhausted."""
        while True:
            line1 = source1.next_line()
            line2 = source2.next_line()
            record = self.classify(line1, line2)
            if record is None:
                return
            yield record

# --- Column Renderer ---

class ColumnRenderer:
    """Formats classified records into delimiter-separated columns."""
    def __init__(self, config):
        self.config = config
        self.show_col = [not config.suppress_first,
                         not config.suppress_second,
                         not config.suppress_third]

    def render(self, record) -> Optional[str]:
        """
        Returns the output text for a record, or None when no column
        contributed anything and the record should be dropped.
        """
        delimiter = self.config.delimiter
        parts = []
        has_content = False
        for show, field in zip(self.show_col, record):
            if show and field:
                parts.append(field)
                has_content = True
            else:
                parts.append('')

        if not has_content:
            return None

        text = delimiter.join(parts)
        if delimiter and text.endswith(delimiter):
            text = text[:-len(delimiter)]
        return text

    def write(self, records, out):
        """Writes every non-empty rendered record to out. Returns the line count."""
        count = 0
        for record in records:
            text = self.render(record)
            if text is None:
                continue
            out.write(text + '\n')
            count += 1
        return count

# --- Pipeline ---

def compare(stream1, stream2, config, out):
    """Compares two open text streams and writes the columns to out."""
    source1 = LineSource(stream1, Side.FIRST)
    source2 = LineSource(stream2, Side.SECOND)
    records = MergeClassifier(config).records(source1, source2)
    return ColumnRenderer(config).write(records, out)

def run(path1: str, path2: str, config, out=None):
    """Opens both inputs, compares them and closes whatever was opened here."""
    if out is None:
        out = sys.stdout

    if path1 == STDIN_ALIAS and path2 == STDIN_ALIAS:
        raise ConfigurationError("only one file argument may be standard input")

    f1 = open_source(path1, Side.FIRST)
    try:
        f2 = open_source(path2, Side.SECOND)
    except SourceOpenError:
        if f1 is not sys.stdin:
            f1.close()
        raise

    try:
        return compare(f1, f2, config, out)
    finally:
        # stdin belongs to the caller.
        for f in (f1, f2):
            if f is not sys.stdin:
                f.close()

def main(argv=None):
    """Parses arguments and runs the line comparison logic."""
    parser = argparse.ArgumentParser(
        description="Compare two sorted files line by line.",
        usage="%(prog)s [-123i] [-d delimiter] [--preserve-case] file1 file2"
    )
    parser.add_argument('-1', '--suppress1', dest='suppress1', action='store_true', help='Suppress column 1 (lines unique to file1)')
    parser.add_argument('-2', '--suppress2', dest='suppress2', action='store_true', help='Suppress column 2 (lines unique to file2)')
    parser.add_argument('-3', '--suppress3', dest='suppress3', action='store_true', help='Suppress column 3 (lines common to both files)')
    parser.add_argument('-i', '--insensitive', action='store_true', help='Compare lines case-insensitively.')
    parser.add_argument('-d', '--output-delimiter', dest='delimiter', default='\t', metavar='STR', help='Separate columns with STR (default: TAB).')
    parser.add_argument('--preserve-case', action='store_true', help='With -i, print lines as read instead of lowercased.')
    parser.add_argument('file1', help='First file to compare, or - for stdin.')
    parser.add_argument('file2', help='Second file to compare, or - for stdin.')

    args = parser.parse_args(argv)
    program_name = os.path.basename(sys.argv[0])

    config = Config(
        suppress_first=args.suppress1,
        suppress_second=args.suppress2,
        suppress_third=args.suppress3,
        case_insensitive=args.insensitive,
        delimiter=args.delimiter,
        fold_output=not args.preserve_case,
    )

    try:
        run(args.file1, args.file2, config)
    except CommError as e:
        print(f"{program_name}: {e}", file=sys.stderr)
        sys.exit(EX_FAILURE)

    return EX_SUCCESS

if __name__ == "__main__":
    sys.exit(main())
