#!/usr/bin/env python3
"""
apply manual taxonomy corrections to a crabs-format reference table.

ncbi taxonomy lags behind the accepted names for a number of nordic fishes,
and its genus/family/order placement does not always follow eschmeyer's
catalog of fishes. this script fixes both, using the tables kept in
resources/taxonomy_corrections.yaml. it can also append records that the
crabs amplicon retrieval missed (the 'to be added' tables) before correcting.

the crabs table has no header and one record per row:
    accession, name, taxid, domain, phylum, class, order, family, genus, species, sequence

corrections run in this order, each one seeing the result of the previous:
  1. synonyms: old species name -> accepted name (and genus/species columns)
  2. taxids: species name -> species-level taxid
  3. genus_family: genus -> family
  4. family_names: family label clean-up
  5. family_order: family -> order
  6. order_class: order -> class

usage:
    python correct_taxonomy.py \\
        --input aligned_noblacklisted.txt \\
        --append ToBeAdded_CRABS.txt \\
        --corrections resources/taxonomy_corrections.yaml \\
        --output aligned_curated.txt
"""

import argparse
import csv
import sys
from pathlib import Path

import pandas as pd
import yaml

# 0-based column positions in a crabs table
ACCESSION = 0
NAME = 1
TAXID = 2
DOMAIN = 3
PHYLUM = 4
CLASS = 5
ORDER = 6
FAMILY = 7
GENUS = 8
SPECIES = 9
SEQUENCE = 10

CORRECTION_TABLES = ['synonyms', 'taxids', 'genus_family', 'family_names', 'family_order', 'order_class']


def parse_arguments(argv=None):
    """parse command-line arguments."""
    parser = argparse.ArgumentParser(description='apply manual taxonomy corrections to a crabs table.')
    parser.add_argument('--input', required=True, type=Path, help='crabs-format tab-separated table.')
    parser.add_argument('--corrections', required=True, type=Path, help='yaml file with the correction tables.')
    parser.add_argument('--output', required=True, type=Path, help='path for the corrected table.')
    parser.add_argument('--append', action='append', type=Path, default=[],
                        help='extra crabs table appended before correcting. can be given more than once.')
    return parser.parse_args(argv)


def load_corrections(filepath):
    """
    read correction tables from yaml.

    returns a dict with every known table name. synonym entries are normalised
    to {'name': accepted_name, 'taxid': taxid_or_None}.
    """
    with open(filepath, 'r') as f:
        raw = yaml.safe_load(f) or {}

    unknown = set(raw) - set(CORRECTION_TABLES)
    if unknown:
        raise ValueError(f"unknown correction tables in {filepath}: {sorted(unknown)}")

    corrections = {}
    for table in CORRECTION_TABLES:
        entries = raw.get(table) or {}
        if table == 'synonyms':
            synonyms = {}
            for old_name, value in entries.items():
                if isinstance(value, dict):
                    taxid = value.get('taxid')
                    synonyms[str(old_name)] = {
                        'name': str(value['name']),
                        'taxid': str(taxid) if taxid is not None else None,
                    }
                else:
                    synonyms[str(old_name)] = {'name': str(value), 'taxid': None}
            corrections[table] = synonyms
        else:
            corrections[table] = {str(k): str(v) for k, v in entries.items()}
    return corrections


def read_crabs_table(filepaths):
    """read one or more crabs tables into a single dataframe of strings, in order."""
    frames = []
    for filepath in filepaths:
        try:
            df = pd.read_csv(filepath, sep='\t', header=None, dtype=str,
                             keep_default_na=False, quoting=csv.QUOTE_NONE)
        except pd.errors.EmptyDataError:
            print(f"warning: {filepath} is empty, skipping.")
            continue
        frames.append(df)

    if not frames:
        return pd.DataFrame(columns=range(SEQUENCE + 1), dtype=str)
    # rows from tables with fewer columns get empty cells, not NaN
    return pd.concat(frames, ignore_index=True).fillna('')


def write_crabs_table(df, filepath):
    df.to_csv(filepath, sep='\t', header=False, index=False, quoting=csv.QUOTE_NONE)


def _remap(df, key_column, target_column, table):
    """set target_column from table[key_column] wherever the key is in the table."""
    if not table:
        return 0
    mapped = df[key_column].map(table)
    hit = mapped.notna()
    if hit.any():
        df.loc[hit, target_column] = mapped[hit]
    return int(hit.sum())


def apply_corrections(df, corrections):
    """
    return a corrected copy of `df` and the number of rows each table touched.

    the input frame is left unchanged.
    """
    if df.shape[1] <= SPECIES:
        raise ValueError(f"expected a crabs table with at least {SPECIES + 1} columns, found {df.shape[1]}.")

    df = df.copy()
    counts = {}

    # synonyms rewrite the name, genus and species columns together. the
    # optional taxid is looked up on the old name before it is overwritten.
    synonyms = corrections.get('synonyms') or {}
    old_names = df[NAME].copy()
    new_names = old_names.map({k: v['name'] for k, v in synonyms.items()})
    hit = new_names.notna()
    if hit.any():
        df.loc[hit, NAME] = new_names[hit]
        df.loc[hit, SPECIES] = new_names[hit]
        df.loc[hit, GENUS] = new_names[hit].str.split().str[0]
        new_taxids = old_names.map({k: v['taxid'] for k, v in synonyms.items() if v['taxid']})
        taxid_hit = new_taxids.notna()
        if taxid_hit.any():
            df.loc[taxid_hit, TAXID] = new_taxids[taxid_hit]
    counts['synonyms'] = int(hit.sum())

    counts['taxids'] = _remap(df, NAME, TAXID, corrections.get('taxids'))
    counts['genus_family'] = _remap(df, GENUS, FAMILY, corrections.get('genus_family'))
    counts['family_names'] = _remap(df, FAMILY, FAMILY, corrections.get('family_names'))
    counts['family_order'] = _remap(df, FAMILY, ORDER, corrections.get('family_order'))
    counts['order_class'] = _remap(df, ORDER, CLASS, corrections.get('order_class'))

    return df, counts


def main(argv=None):
    args = parse_arguments(argv)

    print(f"reading correction tables from: {args.corrections}")
    try:
        corrections = load_corrections(args.corrections)
    except (OSError, yaml.YAMLError, ValueError) as e:
        print(f"error: could not load corrections {args.corrections}: {e}", file=sys.stderr)
        sys.exit(1)
    for table in CORRECTION_TABLES:
        print(f"  {table}: {len(corrections[table])} entries")

    inputs = [args.input] + args.append
    for filepath in inputs:
        if not filepath.exists():
            print(f"error: input file '{filepath}' does not exist.", file=sys.stderr)
            sys.exit(1)

    print(f"reading crabs table(s): {', '.join(str(p) for p in inputs)}")
    try:
        df = read_crabs_table(inputs)
        corrected, counts = apply_corrections(df, corrections)
    except (OSError, ValueError) as e:
        print(f"error: could not correct {args.input}: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"processing {len(df)} records.")

    for table in CORRECTION_TABLES:
        print(f"corrected {counts[table]} records using {table}.")

    try:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        write_crabs_table(corrected, args.output)
    except OSError as e:
        print(f"error: could not write {args.output}: {e}", file=sys.stderr)
        sys.exit(1)
    print(f"wrote corrected table to: {args.output}")


if __name__ == "__main__":
    main()
