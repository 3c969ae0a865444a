import pytest


@pytest.fixture
def write_file(tmp_path):
    """write text to a file under tmp_path and return its path."""
    def _write(name, text):
        path = tmp_path / name
        with open(path, 'w', newline='') as f:
            f.write(text)
        return path
    return _write


def crabs_row(accession, name, taxid='1', domain='Eukaryota', phylum='Chordata',
              klass='Actinopteri', order='Perciformes', family='Percidae',
              genus=None, species=None, sequence='ACGT'):
    """build one crabs table row as a list of strings."""
    if genus is None:
        genus = name.split()[0]
    if species is None:
        species = name
    return [accession, name, taxid, domain, phylum, klass, order, family, genus, species, sequence]
