#!/usr/bin/env python3
"""
load blacklisted accessions and turn them into a match function.

the blacklist is a tab-separated text file with one entry per line. the first
field is the pattern itself (usually an accession number, sometimes a longer
substring such as a bold process id). the remaining fields are free text that
say which repository and marker the entry applies to, e.g.:

    MN123456    NCBI    12S    misidentified salmonid
    ABCD123-20  BOLD    COI    contaminated

the original pipelines selected entries with `grep 'NCBI' | grep -E 'COI|mtDNA'`
and kept the first column, so `source` and `markers` are plain substring tests
against the whole line.
"""

import re


def load_blacklist(filepath, source=None, markers=None):
    """
    read blacklist patterns from a file.

    args:
        filepath: path to the blacklist file.
        source (str): only keep lines that contain this text (e.g. 'NCBI').
        markers (list[str]): only keep lines that contain at least one of these.

    returns a list of patterns in file order with duplicates removed.
    """
    patterns = {}
    with open(filepath, 'r', encoding='utf-8', errors='surrogateescape') as f:
        for line in f:
            line = line.rstrip('\r\n')
            if not line.strip() or line.startswith('#'):
                continue
            if source and source not in line:
                continue
            if markers and not any(marker in line for marker in markers):
                continue
            pattern = line.split('\t', 1)[0].strip()
            if pattern:
                # a dict keeps first-seen order and drops repeats
                patterns[pattern] = None
    return list(patterns)


def build_matcher(patterns, use_regex=False):
    """
    build a predicate that reports whether a line matches any pattern.

    by default patterns are literal, case-sensitive substrings. with
    `use_regex=True` each pattern is compiled as a regular expression and
    searched for anywhere in the line.
    """
    if not patterns:
        return lambda text: False

    if use_regex:
        regexes = []
        for pattern in patterns:
            try:
                regexes.append(re.compile(pattern))
            except re.error as e:
                raise ValueError(f"invalid regular expression '{pattern}': {e}") from e

        def matches(text):
            text = text.rstrip('\r\n')
            return any(rx.search(text) for rx in regexes)
    else:
        literals = list(patterns)

        def matches(text):
            text = text.rstrip('\r\n')
            return any(p in text for p in literals)

    return matches
