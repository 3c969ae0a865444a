#!/usr/bin/env python3
"""
remove blacklisted records from a fasta file or a crabs-format table.

this is the blacklist step of the reference database build. it runs after the
bold / ncbi downloads (fasta mode) and again after amplicon retrieval on the
crabs tab-separated table (tabular mode). records are streamed, never loaded
into memory, and every record that survives is written out byte for byte in
its original order.

fasta mode only tests header lines. a matching header drops the whole record,
i.e. the header and every line up to the next header. tabular mode tests one
field per row (the accession in column 1 by default) or the whole row.

usage:
    python filter_blacklisted.py \\
        --input bold_COI5P.fasta \\
        --output bold_COI5P_noblacklisted.fasta \\
        --blacklist blacklist.txt \\
        --source BOLD --marker COI

    python filter_blacklisted.py \\
        --input aligned.txt \\
        --output aligned_noblacklisted.txt \\
        --blacklist blacklist.txt \\
        --source NCBI --marker 12S --marker mtDNA \\
        --mode tabular --field 1
"""

import argparse
import sys
from pathlib import Path

from blacklist import build_matcher, load_blacklist

# fasta filter states
SCANNING = 'scanning'
SKIPPING = 'skipping'


def parse_arguments(argv=None):
    """parse command-line arguments."""
    parser = argparse.ArgumentParser(description='remove blacklisted records from fasta or crabs tables.')
    parser.add_argument('--input', required=True, type=Path, help='input fasta file or tab-separated table.')
    parser.add_argument('--output', required=True, type=Path, help='path for the filtered output file.')
    parser.add_argument('--blacklist', required=True, type=Path, help='tab-separated blacklist, patterns in column 1.')
    parser.add_argument('--source', default=None, help='only use blacklist lines mentioning this repository (e.g. BOLD, NCBI).')
    parser.add_argument('--marker', action='append', default=None,
                        help='only use blacklist lines mentioning this marker. can be given more than once.')
    parser.add_argument('--mode', choices=['fasta', 'tabular'], default='fasta', help='input format (default: fasta).')
    parser.add_argument('--field', type=int, default=1, help='1-based column holding the identifier in tabular mode (default: 1).')
    parser.add_argument('--whole-line', action='store_true', help='tabular mode: match against the whole row instead of one field.')
    parser.add_argument('--regex', action='store_true', help='treat blacklist patterns as regular expressions instead of literal text.')
    args = parser.parse_args(argv)
    if args.field < 1:
        parser.error('--field must be 1 or greater.')
    return args


class RecordFilter:
    """streaming record filter that keeps count of what it kept and removed."""

    def __init__(self, matcher):
        self.matcher = matcher
        self.kept = 0
        self.removed = 0

    def filter_fasta(self, lines):
        """
        yield the lines of every fasta record whose header does not match.

        the filter is a two-state machine. in SCANNING it emits lines; in
        SKIPPING it drops them. only a header line can change the state.
        lines before the first header do not belong to any record and are
        passed through as they are.
        """
        state = SCANNING
        for line in lines:
            if line.startswith('>'):
                if self.matcher(line):
                    state = SKIPPING
                    self.removed += 1
                else:
                    state = SCANNING
                    self.kept += 1
            if state == SCANNING:
                yield line

    def filter_tabular(self, lines, field=1):
        """
        yield every row whose identifier does not match.

        `field` is the 1-based column tested against the blacklist; pass
        None to test the whole row.
        """
        for line in lines:
            if field is None:
                identifier = line.rstrip('\r\n')
            else:
                columns = line.rstrip('\r\n').split('\t')
                identifier = columns[field - 1] if len(columns) >= field else ''
            if self.matcher(identifier):
                self.removed += 1
                continue
            self.kept += 1
            yield line


def filter_file(input_path, output_path, patterns, mode='fasta', field=1, use_regex=False):
    """
    filter `input_path` into a new file at `output_path`.

    returns a (kept, removed) tuple of record counts.
    """
    if mode not in ('fasta', 'tabular'):
        raise ValueError(f"unknown mode '{mode}', expected 'fasta' or 'tabular'")
    if Path(input_path).resolve() == Path(output_path).resolve():
        raise ValueError(f"output {output_path} is the same file as input {input_path}")

    record_filter = RecordFilter(build_matcher(patterns, use_regex=use_regex))

    # newline='' keeps the original line endings and surrogateescape keeps
    # bytes that are not valid utf-8, so surviving records are written back as read
    text_options = {'newline': '', 'encoding': 'utf-8', 'errors': 'surrogateescape'}
    try:
        with open(input_path, 'r', **text_options) as f_in, open(output_path, 'w', **text_options) as f_out:
            if mode == 'fasta':
                records = record_filter.filter_fasta(f_in)
            else:
                records = record_filter.filter_tabular(f_in, field=field)
            f_out.writelines(records)
    except Exception:
        # do not leave a truncated output behind
        Path(output_path).unlink(missing_ok=True)
        raise

    return record_filter.kept, record_filter.removed


def main(argv=None):
    args = parse_arguments(argv)

    print(f"reading blacklist: {args.blacklist}")
    try:
        patterns = load_blacklist(args.blacklist, source=args.source, markers=args.marker)
    except OSError as e:
        print(f"error: could not read blacklist {args.blacklist}: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"found {len(patterns)} blacklisted patterns.")

    if not args.input.exists():
        print(f"error: input file '{args.input}' does not exist.", file=sys.stderr)
        sys.exit(1)

    field = None if args.whole_line else args.field
    print(f"filtering {args.mode} records from {args.input}")
    try:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        kept, removed = filter_file(args.input, args.output, patterns,
                                    mode=args.mode, field=field, use_regex=args.regex)
    except ValueError as e:
        print(f"error: {e}", file=sys.stderr)
        sys.exit(1)
    except OSError as e:
        print(f"error: could not filter {args.input} into {args.output}: {e}", file=sys.stderr)
        sys.exit(1)

    print(f"kept {kept} records, removed {removed} blacklisted records.")
    print(f"wrote filtered records to: {args.output}")


if __name__ == "__main__":
    main()
