#!/usr/bin/env python3
"""
check downloaded fasta files before they enter the pipeline.

a bold or ncbi download that is cut short still produces a fasta file, just
a broken one. this script catches that early. a file fails if it is missing
or empty, if it does not start with a '>' header, or if the number of header
lines differs from the number of sequence lines.

the line count check assumes one sequence line per record, which is what the
crabs downloads write. pass --allow-multiline for wrapped fasta files; records
are then parsed with biopython and a file only fails on a header that has no
sequence.

the first failing file stops the script with exit code 1.

usage:
    python validate_fasta.py bold_Mollusca.fasta bold_Arachnida.fasta
"""

import argparse
import os
import sys
from collections import namedtuple

from Bio import SeqIO

FastaCheck = namedtuple('FastaCheck', ['ok', 'reason', 'headers', 'sequences'])


def parse_arguments(argv=None):
    """parse command-line arguments."""
    parser = argparse.ArgumentParser(description='validate the structure of fasta files.')
    parser.add_argument('fasta', nargs='+', help='fasta file(s) to check.')
    parser.add_argument('--allow-multiline', action='store_true',
                        help='accept sequences wrapped over several lines.')
    return parser.parse_args(argv)


def count_lines(filepath):
    """count header lines and non-header lines, the way `grep -c '^>'` does."""
    headers = 0
    sequences = 0
    with open(filepath, 'r', encoding='utf-8', errors='surrogateescape') as f:
        for line in f:
            if line.startswith('>'):
                headers += 1
            else:
                sequences += 1
    return headers, sequences


def count_records(filepath):
    """count records and records with a non-empty sequence using biopython."""
    headers = 0
    sequences = 0
    with open(filepath, 'r', encoding='utf-8', errors='surrogateescape') as handle:
        for record in SeqIO.parse(handle, 'fasta'):
            headers += 1
            if len(record.seq) > 0:
                sequences += 1
    return headers, sequences


def validate_fasta(filepath, allow_multiline=False):
    """
    check a fasta file and return a FastaCheck(ok, reason, headers, sequences).

    `reason` is None for a file that passes.
    """
    if not os.path.isfile(filepath) or os.path.getsize(filepath) == 0:
        return FastaCheck(False, f"file {filepath} is missing or empty.", 0, 0)

    with open(filepath, 'r', encoding='utf-8', errors='surrogateescape') as f:
        first_line = f.readline()
    if not first_line.startswith('>'):
        return FastaCheck(False, f"file {filepath} does not start with a valid fasta header.", 0, 0)

    if allow_multiline:
        headers, sequences = count_records(filepath)
    else:
        headers, sequences = count_lines(filepath)

    if headers != sequences:
        reason = (f"file {filepath} has mismatched headers and sequences "
                  f"(headers: {headers}, sequences: {sequences}).")
        return FastaCheck(False, reason, headers, sequences)

    return FastaCheck(True, None, headers, sequences)


def main(argv=None):
    args = parse_arguments(argv)

    for filepath in args.fasta:
        try:
            check = validate_fasta(filepath, allow_multiline=args.allow_multiline)
        except (OSError, ValueError) as e:
            print(f"error: could not read {filepath}: {e}", file=sys.stderr)
            sys.exit(1)

        if not check.ok:
            print(f"error: {check.reason}", file=sys.stderr)
            print("error: file failed integrity checks. consider splitting the taxon into "
                  "smaller taxonomic entities for download.", file=sys.stderr)
            sys.exit(1)

        with open(filepath, 'r', encoding='utf-8', errors='surrogateescape') as f:
            total_lines = sum(1 for _ in f)
        print(f"file {filepath} passed integrity checks.")
        print(f"  lines in file: {total_lines}")
        print(f"  headers in file: {check.headers}")
        print(f"  line/header ratio: {total_lines // check.headers}")

    print("validation successful.")


if __name__ == "__main__":
    main()
