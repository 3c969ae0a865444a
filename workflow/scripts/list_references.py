#!/usr/bin/env python3
"""
write the sorted accession and lineage listing for a finished database.

the listing (refs_sorted.txt) is shipped next to the exported blast database
so users can look up what a reference accession was assigned to without
opening the database itself. it has one line per record: the accession
followed by domain, phylum, class, order, family, genus and species, sorted.

usage:
    python list_references.py --input FilteredRefs_CRABS.txt --output refs_sorted.txt
"""

import argparse
import sys
from pathlib import Path

from correct_taxonomy import ACCESSION, DOMAIN, SPECIES, read_crabs_table

LISTING_COLUMNS = [ACCESSION] + list(range(DOMAIN, SPECIES + 1))


def parse_arguments(argv=None):
    """parse command-line arguments."""
    parser = argparse.ArgumentParser(description='write a sorted accession/lineage listing from a crabs table.')
    parser.add_argument('--input', required=True, type=Path, help='filtered crabs table.')
    parser.add_argument('--output', required=True, type=Path, help='path for the listing.')
    return parser.parse_args(argv)


def reference_listing(df):
    """return the sorted listing lines (without newlines) for a crabs table."""
    if df.empty:
        return []
    if df.shape[1] <= SPECIES:
        raise ValueError(f"expected a crabs table with at least {SPECIES + 1} columns, found {df.shape[1]}.")
    rows = df[LISTING_COLUMNS].astype(str).apply('\t'.join, axis=1)
    return sorted(rows)


def main(argv=None):
    args = parse_arguments(argv)

    if not args.input.exists():
        print(f"error: input file '{args.input}' does not exist.", file=sys.stderr)
        sys.exit(1)

    print(f"reading crabs table: {args.input}")
    try:
        lines = reference_listing(read_crabs_table([args.input]))
    except (OSError, ValueError) as e:
        print(f"error: could not read {args.input}: {e}", file=sys.stderr)
        sys.exit(1)

    try:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with open(args.output, 'w') as f_out:
            for line in lines:
                f_out.write(f"{line}\n")
    except OSError as e:
        print(f"error: could not write {args.output}: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"wrote {len(lines)} references to: {args.output}")


if __name__ == "__main__":
    main()
