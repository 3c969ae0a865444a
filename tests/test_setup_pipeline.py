import pytest

from setup_pipeline import check_config, load_config, main, report_settings

CONFIG = (
    "project_name: MiFish_12S\n"
    "marker: 12S\n"
    "blacklist: blacklist.txt\n"
    "corrections: corrections.yaml\n"
    "taxon_list: taxonlist.txt\n"
)


def test_load_config_missing_file(tmp_path, capsys):
    assert load_config(str(tmp_path / 'refdb.yaml')) is None
    assert "not found" in capsys.readouterr().out


def test_load_config_rejects_non_mapping(write_file):
    assert load_config(str(write_file('refdb.yaml', "- just\n- a list\n"))) is None


def test_check_config_reports_missing_fields(capsys):
    assert not check_config({'project_name': 'COI'})
    assert "marker" in capsys.readouterr().out


def test_main_with_valid_config(write_file, capsys):
    path = write_file('refdb.yaml', CONFIG)
    write_file('blacklist.txt', "MN100001\tNCBI\t12S\n")

    main(['--config', str(path)])

    out = capsys.readouterr().out
    assert "✓ Configuration is valid" in out
    assert "MiFish_12S (12S)" in out


def test_main_with_incomplete_config_exits(write_file):
    path = write_file('refdb.yaml', "project_name: COI\n")

    with pytest.raises(SystemExit) as exc:
        main(['--config', str(path)])
    assert exc.value.code == 1


def test_report_settings_prints_blacklist_and_crabs_options(capsys):
    report_settings({
        'blacklist_source': 'NCBI',
        'blacklist_markers': ['12S', 'mtDNA'],
        'primers': {'forward': 'GCCGGTAAAACTCGTGCCAGC', 'reverse': 'CATAGTGGGGTATCTAATCCCAGTTTG'},
        'filter': {'minimum_length': 150, 'maximum_n': 1, 'rank_na': 3},
    })

    out = capsys.readouterr().out
    assert "Blacklist selection: --source NCBI --marker 12S --marker mtDNA" in out
    assert "--forward GCCGGTAAAACTCGTGCCAGC --reverse CATAGTGGGGTATCTAATCCCAGTTTG" in out
    assert "--minimum-length 150 --maximum-n 1 --rank-na 3" in out


def test_report_settings_warns_about_missing_crabs_options(capsys):
    report_settings({})

    out = capsys.readouterr().out
    assert "Blacklist selection: all entries" in out
    assert "primers.forward and primers.reverse are not both set" in out
    assert "no crabs --filter options configured" in out
