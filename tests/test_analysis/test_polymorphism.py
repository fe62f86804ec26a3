"""
Tests for ingroup/outgroup alignments, site filters and stop codon policies.
"""

import numpy as np
import pytest

from seqsuite.analysis.polymorphism import PolymorphismAlignment, filter_sites
from seqsuite.io.alphabet import DNA, GeneticCode
from seqsuite.io.sequences import Alignment


@pytest.fixture
def gapped_alignment():
    return Alignment.from_strings(
        ["a", "b", "c", "d"], ["AC-TA", "ACNTA", "AC-T-", "ACGTA"], DNA
    )


class TestFilterSites:
    """Test site selection policies."""

    def test_all_keeps_every_site(self, gapped_alignment):
        assert filter_sites(gapped_alignment, "all").n_sites == 5

    def test_max_gap_allowed(self, gapped_alignment):
        filtered = filter_sites(gapped_alignment, "all", max_gap_allowed=0.25)
        assert list(filtered.positions) == [1, 2, 4, 5]

    def test_nogap(self, gapped_alignment):
        assert list(filter_sites(gapped_alignment, "nogap").positions) == [1, 2, 4]

    def test_complete(self, gapped_alignment):
        assert list(filter_sites(gapped_alignment, "complete").positions) == [1, 2, 4]

    def test_unknown_policy(self, gapped_alignment):
        with pytest.raises(ValueError, match="Unknown site selection"):
            filter_sites(gapped_alignment, "some")


class TestOutgroup:
    """Test outgroup assignment."""

    def test_outgroup_by_index(self, codon_alignment):
        pa = PolymorphismAlignment(codon_alignment)
        assert not pa.has_outgroup
        pa.set_outgroup_by_index([4])
        assert pa.n_outgroup == 1
        assert pa.ingroup().names == ["i1", "i2", "i3"]
        assert pa.outgroup().names == ["o1"]

    def test_index_out_of_range(self, codon_alignment):
        pa = PolymorphismAlignment(codon_alignment)
        with pytest.raises(ValueError, match="out of range"):
            pa.set_outgroup_by_index([5])
        with pytest.raises(ValueError, match="out of range"):
            pa.set_outgroup_by_index([0])

    def test_outgroup_by_name(self, codon_alignment):
        pa = PolymorphismAlignment(codon_alignment)
        pa.set_outgroup_by_name(["o1"])
        assert list(pa.outgroup_mask) == [False, False, False, True]
        with pytest.raises(ValueError, match="not found"):
            pa.set_outgroup_by_name(["o2"])

    def test_append_outgroup(self, segregating_alignment):
        pa = PolymorphismAlignment(segregating_alignment)
        pa.append_outgroup(Alignment.from_strings(["out"], ["G" * 12], DNA))
        assert pa.n_outgroup == 1
        assert pa.outgroup().sequence_string(0) == "G" * 12
        assert pa.ingroup().n_species == 4


class TestStopCodons:
    """Test the removal of stop codon sites."""

    def test_remove_last_site_if_stop(self, codon_alignment):
        code = GeneticCode("Standard")
        pa = PolymorphismAlignment(codon_alignment)
        assert pa.remove_last_site_if_stop(code)
        assert pa.n_sites == 4
        # Last site is now AAA/GAA: nothing more to remove
        assert not pa.remove_last_site_if_stop(code)
        assert pa.n_sites == 4

    def test_remove_stop_codon_sites(self, codon_alignment):
        code = GeneticCode("Standard")
        pa = PolymorphismAlignment(codon_alignment)
        assert pa.remove_stop_codon_sites(code) == 1
        assert list(pa.alignment.positions) == [1, 2, 3, 4]
        assert pa.remove_stop_codon_sites(code) == 0

    def test_requires_codon_alphabet(self, segregating_alignment):
        pa = PolymorphismAlignment(segregating_alignment)
        with pytest.raises(ValueError, match="codon alphabet"):
            pa.remove_stop_codon_sites(GeneticCode("Standard"))

    def test_mask_length_checked(self, segregating_alignment):
        with pytest.raises(ValueError, match="One outgroup flag"):
            PolymorphismAlignment(segregating_alignment, np.array([True]))
