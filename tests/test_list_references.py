import pandas as pd
import pytest

from conftest import crabs_row
from list_references import main, reference_listing


def test_listing_has_accession_and_lineage_sorted():
    df = pd.DataFrame([
        crabs_row('MN2', 'Salmo trutta', family='Salmonidae', order='Salmoniformes'),
        crabs_row('AB1', 'Perca fluviatilis'),
    ])

    assert reference_listing(df) == [
        'AB1\tEukaryota\tChordata\tActinopteri\tPerciformes\tPercidae\tPerca\tPerca fluviatilis',
        'MN2\tEukaryota\tChordata\tActinopteri\tSalmoniformes\tSalmonidae\tSalmo\tSalmo trutta',
    ]


def test_empty_table_gives_empty_listing():
    assert reference_listing(pd.DataFrame()) == []


def test_short_table_raises():
    with pytest.raises(ValueError):
        reference_listing(pd.DataFrame([['AB1', 'Perca fluviatilis']]))


def test_main_writes_listing(write_file, tmp_path, capsys):
    table = write_file('FilteredRefs_CRABS.txt', ''.join(
        '\t'.join(row) + '\n' for row in [crabs_row('MN2', 'Salmo trutta'), crabs_row('AB1', 'Perca fluviatilis')]
    ))
    target = tmp_path / 'BLAST_TAX_12S' / 'refs_sorted.txt'

    main(['--input', str(table), '--output', str(target)])

    assert [line.split('\t')[0] for line in target.read_text().splitlines()] == ['AB1', 'MN2']
    assert "wrote 2 references" in capsys.readouterr().out


def test_main_missing_input_exits(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(['--input', str(tmp_path / 'missing.txt'), '--output', str(tmp_path / 'out.txt')])
    assert exc.value.code == 1
