#!/usr/bin/env python3
"""
Setup script for the reference database build.
This script checks that the configuration and input files are in place
before the crabs steps are run.
"""

import argparse
import os
import shutil
import sys
import yaml

REQUIRED_FIELDS = ['project_name', 'marker', 'blacklist', 'corrections', 'taxon_list']

SCRIPT_FILES = [
    "workflow/scripts/blacklist.py",
    "workflow/scripts/filter_blacklisted.py",
    "workflow/scripts/validate_fasta.py",
    "workflow/scripts/correct_taxonomy.py",
    "workflow/scripts/list_references.py",
]


def load_config(config_file):
    """Load the yaml configuration, or return None if it is missing or invalid."""
    if not os.path.exists(config_file):
        print(f"ERROR: Configuration file {config_file} not found!")
        return None

    try:
        with open(config_file, 'r') as f:
            config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        print(f"ERROR: Could not parse configuration file: {e}")
        return None

    if not isinstance(config, dict):
        print(f"ERROR: Configuration file {config_file} must contain a mapping")
        return None
    return config


def check_config(config):
    """Check that all required fields are present."""
    missing_fields = [field for field in REQUIRED_FIELDS if field not in config]
    if missing_fields:
        print(f"ERROR: Missing required configuration fields: {missing_fields}")
        return False

    print("✓ Configuration file is valid")
    return True


def check_data_files(config):
    """Check if the files named in the configuration exist."""
    print("\nChecking data files...")

    for field in ['blacklist', 'corrections', 'taxon_list']:
        path = config.get(field)
        if not path:
            continue
        if not os.path.exists(path):
            print(f"⚠️  WARNING: {field} file {path} not found")
        else:
            print(f"✓ {field} file exists: {path}")

    for path in config.get('to_be_added', []) or []:
        if not os.path.exists(path):
            print(f"⚠️  WARNING: Extra records file {path} not found")
        else:
            print(f"✓ Extra records file exists: {path}")


def report_settings(config):
    """Print the blacklist selection and the values for the crabs calls."""
    print("\nBuild settings...")

    source = config.get('blacklist_source')
    markers = config.get('blacklist_markers') or []
    selection = []
    if source:
        selection += ["--source", str(source)]
    for marker in markers:
        selection += ["--marker", str(marker)]
    print(f"✓ Blacklist selection: {' '.join(selection) if selection else 'all entries'}")

    primers = config.get('primers') or {}
    if primers.get('forward') and primers.get('reverse'):
        print(f"✓ Primers for crabs --in-silico-pcr: --forward {primers['forward']} --reverse {primers['reverse']}")
    else:
        print("⚠️  WARNING: primers.forward and primers.reverse are not both set")

    filter_options = config.get('filter') or {}
    if filter_options:
        flags = ' '.join(f"--{key.replace('_', '-')} {value}" for key, value in filter_options.items())
        print(f"✓ Options for crabs --filter: {flags}")
    else:
        print("⚠️  WARNING: no crabs --filter options configured")


def check_crabs():
    """Check if the crabs executable is on PATH."""
    print("\nChecking crabs...")

    crabs = shutil.which("crabs")
    if crabs:
        print(f"✓ crabs found: {crabs}")
    else:
        print("⚠️  WARNING: crabs not found on PATH")
        print("   Please activate the environment that provides crabs")


def check_scripts():
    """Check if required scripts exist."""
    print("\nChecking workflow scripts...")

    for script_file in SCRIPT_FILES:
        if os.path.exists(script_file):
            print(f"✓ Script exists: {script_file}")
        else:
            print(f"⚠️  WARNING: Script missing: {script_file}")


def main(argv=None):
    """Run all checks."""
    parser = argparse.ArgumentParser(description='check the reference database build setup.')
    parser.add_argument('--config', default='config/refdb.yaml', help='pipeline configuration file.')
    args = parser.parse_args(argv)

    print("Reference Database Build Setup Check")
    print("=" * 40)

    config = load_config(args.config)
    config_ok = config is not None and check_config(config)
    if config_ok:
        check_data_files(config)
        report_settings(config)
    check_crabs()
    check_scripts()

    print("\n" + "=" * 40)
    print("SETUP SUMMARY:")

    if config_ok:
        print("✓ Configuration is valid")
        print(f"\nNEXT STEPS for {config['project_name']} ({config['marker']}):")
        print("1. Download taxonomy and sequences with crabs")
        print("2. Check each download: validate_fasta.py <file.fasta>")
        print("3. Remove blacklisted records: filter_blacklisted.py")
        print("4. Import, merge and run in-silico PCR with crabs")
        print("5. Curate the taxonomy: correct_taxonomy.py")
        print("6. Filter and export with crabs, then list_references.py")
    else:
        print("✗ Configuration has issues - please fix them before proceeding")
        sys.exit(1)


if __name__ == "__main__":
    main()
