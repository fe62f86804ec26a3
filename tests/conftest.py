"""
Pytest configuration and shared fixtures.
"""

import pytest
from typer.testing import CliRunner

from seqsuite.io.alphabet import DNA, codon_alphabet
from seqsuite.io.sequences import Alignment


# Four sequences, 12 sites: 10 segregating sites (8 'AACC' columns plus
# two columns with one singleton each) and 2 constant sites.
SEGREGATING_SEQUENCES = {
    "s1": "AAAAAAAAAATG",
    "s2": "AAAAAAAAAATG",
    "s3": "CCCCCCCCAATG",
    "s4": "CCCCCCCCCGTG",
}

# Codon sequences: site 1 has a synonymous polymorphism, site 4 a
# non-synonymous one, sites 2 and 3 a non-synonymous and a synonymous fixed
# difference with the outgroup 'o1', and site 5 ends with a stop codon.
CODON_SEQUENCES = {
    "i1": "CTTTTTGGGAAATGG",
    "i2": "CTTTTTGGGGAATGG",
    "i3": "CTCTTTGGGAAATAA",
    "o1": "CTTTTAGGAAAATGG",
}


def write_fasta(path, sequences):
    with open(path, "w") as f:
        for name, seq in sequences.items():
            f.write(f">{name}\n{seq}\n")
    return path


@pytest.fixture
def cli_runner():
    """CLI test runner for Typer apps."""
    return CliRunner()


@pytest.fixture
def segregating_alignment():
    """DNA alignment with 10 segregating sites and 2 singletons."""
    return Alignment.from_strings(
        list(SEGREGATING_SEQUENCES), list(SEGREGATING_SEQUENCES.values()), DNA
    )


@pytest.fixture
def codon_alignment():
    """Codon alignment, ingroup i1-i3 and outgroup o1."""
    return Alignment.from_strings(
        list(CODON_SEQUENCES), list(CODON_SEQUENCES.values()), codon_alphabet("DNA")
    )


@pytest.fixture
def segregating_fasta(tmp_path):
    return write_fasta(tmp_path / "segregating.fasta", SEGREGATING_SEQUENCES)


@pytest.fixture
def monomorphic_fasta(tmp_path):
    return write_fasta(
        tmp_path / "monomorphic.fasta",
        {"a": "ACGTACGT", "b": "ACGTACGT", "c": "ACGTACGT"},
    )


@pytest.fixture
def codon_fasta(tmp_path):
    return write_fasta(tmp_path / "codons.fasta", CODON_SEQUENCES)


@pytest.fixture
def tree_file(tmp_path):
    """Four-leaf tree in Newick format."""
    path = tmp_path / "tree.nwk"
    path.write_text("((A:0.1,B:0.2):0.15,(C:0.3,D:0.1):0.05);\n")
    return path


@pytest.fixture
def segments_file(tmp_path):
    """Two tree segments covering [0, 0.5] and [0.5, 1]."""
    path = tmp_path / "segments.txt"
    path.write_text(
        "# two segments\n"
        "0 0.5 ((A:0.1,B:0.2):0.15,(C:0.3,D:0.1):0.05);\n"
        "\n"
        "0.5 1 ((A:0.1,C:0.2):0.15,\n"
        "       (B:0.3,D:0.1):0.05);\n"
    )
    return path
