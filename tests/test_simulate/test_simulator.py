"""
Tests for sequence simulation along one tree and along tree segments.
"""

import numpy as np
import pytest

from seqsuite.io.alphabet import DNA, GeneticCode, codon_alphabet
from seqsuite.io.sequences import Alignment
from seqsuite.io.trees import Tree, read_tree_segments
from seqsuite.models import JC69, K80, TS98, YN98, SubstitutionModelSet
from seqsuite.models.rates import constant_distribution, gamma_distribution
from seqsuite.simulate import (
    SequenceSimulator,
    SimulationOutput,
    round_half_up,
    segment_boundaries,
    simulate_segments,
)


@pytest.fixture
def tree():
    return Tree.from_newick("((A:0.1,B:0.2):0.15,(C:0.3,D:0.1):0.05);")


@pytest.fixture
def k80_set():
    return SubstitutionModelSet.homogeneous(K80(DNA, kappa=2))


class TestSequenceSimulator:
    """Test simulation along a single tree."""

    def test_output_shape_and_names(self, k80_set, tree):
        sim = SequenceSimulator(k80_set, tree, seed=1)
        aln = sim.simulate(200)
        assert aln.names == ["A", "B", "C", "D"]
        assert aln.n_sites == 200
        assert np.all((aln.sequences >= 0) & (aln.sequences < 4))

    def test_same_seed_same_alignment(self, k80_set, tree):
        aln1 = SequenceSimulator(k80_set, tree, gamma_distribution(4, 0.5), seed=7).simulate(100)
        aln2 = SequenceSimulator(k80_set, tree, gamma_distribution(4, 0.5), seed=7).simulate(100)
        np.testing.assert_array_equal(aln1.sequences, aln2.sequences)

    def test_zero_branch_lengths_copy_the_root(self, k80_set):
        tree = Tree.from_newick("((A:0,B:0):0,C:0);")
        aln = SequenceSimulator(k80_set, tree, seed=3).simulate(100)
        np.testing.assert_array_equal(aln.sequences[0], aln.sequences[1])
        np.testing.assert_array_equal(aln.sequences[0], aln.sequences[2])

    def test_zero_rates_copy_the_root(self, k80_set, tree):
        aln = SequenceSimulator(k80_set, tree, seed=3).simulate_sites(np.zeros(50))
        assert np.all(aln.sequences == aln.sequences[0])

    def test_root_frequencies_are_followed(self, tree):
        root = np.array([0.0, 0.0, 1.0, 0.0])
        model_set = SubstitutionModelSet.homogeneous(JC69(DNA), root)
        short = Tree.from_newick("(A:0,B:0);")
        aln = SequenceSimulator(model_set, short, seed=5).simulate(30)
        assert set(aln.sequence_string(0)) == {"A"}

    def test_long_branches_reach_equilibrium(self):
        root = np.array([1.0, 0.0, 0.0, 0.0])
        model_set = SubstitutionModelSet.homogeneous(JC69(DNA), root)
        tree = Tree.from_newick("(A:50,B:50);")
        aln = SequenceSimulator(model_set, tree, seed=11).simulate(4000)
        counts = np.bincount(aln.sequences[0], minlength=4) / 4000
        np.testing.assert_allclose(counts, 0.25, atol=0.04)

    def test_codon_simulation_avoids_stops(self, tree):
        code = GeneticCode("Standard")
        model_set = SubstitutionModelSet.homogeneous(YN98(codon_alphabet(), code, kappa=2, omega=0.5))
        aln = SequenceSimulator(model_set, tree, seed=2).simulate(100)
        assert not any(code.is_stop(int(c)) for c in aln.sequences.ravel())

    def test_ts98_states_collapse_to_alphabet(self, tree):
        model_set = SubstitutionModelSet.homogeneous(TS98(K80(DNA, kappa=2), s1=1, s2=1))
        aln = SequenceSimulator(model_set, tree, seed=4).simulate(100)
        assert aln.alphabet is DNA
        assert np.all((aln.sequences >= 0) & (aln.sequences < 4))

    def test_non_homogeneous(self, tree):
        slow = K80(DNA, kappa=2)
        model_set = SubstitutionModelSet.general([slow, slow.with_parameters(kappa=8)], [[1, 2, 3], [4, 5, 6]], tree)
        aln = SequenceSimulator(model_set, tree, seed=9).simulate(50)
        assert aln.n_sites == 50

    def test_negative_branch_length(self, k80_set):
        tree = Tree.from_newick("(A:0.1,B:-0.2);")
        with pytest.raises(ValueError, match="negative branch length"):
            SequenceSimulator(k80_set, tree)

    def test_duplicate_leaf_names(self, k80_set):
        tree = Tree.from_newick("(A:0.1,A:0.2);")
        with pytest.raises(ValueError, match="unique"):
            SequenceSimulator(k80_set, tree)

    def test_model_set_must_cover_tree(self, tree):
        small = Tree.from_newick("(A:0.1,B:0.2);")
        model_set = SubstitutionModelSet.general([JC69(DNA)], [[1, 2]], small)
        with pytest.raises(ValueError, match="No model assigned"):
            SequenceSimulator(model_set, tree)


class TestSegments:
    """Test simulation along tree segments."""

    def test_round_half_up(self):
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2

    def test_segment_boundaries(self):
        assert segment_boundaries([0, 0.5, 1], 100) == [0, 50, 100]
        assert segment_boundaries([0, 0.25, 1], 10) == [0, 3, 10]

    def test_two_segments(self, segments_file, k80_set):
        trees, positions = read_tree_segments(segments_file)
        aln = simulate_segments(trees, positions, k80_set, constant_distribution(), n_sites=100, seed=1)
        assert aln.n_sites == 100
        assert aln.names == ["A", "B", "C", "D"]

    def test_segments_are_concatenated_in_order(self, k80_set):
        still = Tree.from_newick("((A:0,B:0):0,(C:0,D:0):0);")
        moving = Tree.from_newick("((A:2,B:2):2,(C:2,D:2):2);")
        aln = simulate_segments([still, moving], [0, 0.5, 1], k80_set, n_sites=100, seed=5)
        constant = np.all(aln.sequences == aln.sequences[0], axis=0)
        assert np.all(constant[:50])
        assert not np.all(constant[50:])

    def test_segment_with_identical_trees(self, k80_set):
        star = Tree.from_newick("(A:0,B:0,C:0);")
        aln = simulate_segments([star, star, star], [0, 0.2, 0.7, 1], k80_set, n_sites=10, seed=1)
        assert aln.n_sites == 10
        np.testing.assert_array_equal(aln.sequences[0], aln.sequences[2])

    def test_site_rates(self, k80_set, tree):
        rates = np.concatenate([np.zeros(5), np.ones(5)])
        aln = simulate_segments([tree], [0, 1], k80_set, site_rates=rates, seed=1)
        assert aln.n_sites == 10
        assert np.all(aln.sequences[:, :5] == aln.sequences[0, :5])

    def test_boundaries_must_match_trees(self, k80_set, tree):
        with pytest.raises(ValueError, match="boundaries"):
            simulate_segments([tree], [0, 0.5, 1], k80_set, n_sites=10)
        with pytest.raises(ValueError, match="number of sites"):
            simulate_segments([tree], [0, 1], k80_set)


class TestSimulationOutput:
    """Test writing of simulated data."""

    def test_write_sequences(self, tmp_path, k80_set, tree):
        aln = SequenceSimulator(k80_set, tree, seed=1).simulate(20)
        path = tmp_path / "sim.phy"
        SimulationOutput.write_sequences(aln, path, "Phylip")
        again = Alignment.read(path, DNA, "Phylip")
        assert again.names == aln.names
        np.testing.assert_array_equal(again.sequences, aln.sequences)

    def test_write_tagged_tree(self, tmp_path):
        tree = Tree.from_newick("((A:0.1,B:0.2):0.15,C:0.3);")
        path = tmp_path / "tagged.nwk"
        SimulationOutput.write_tagged_tree(tree, path)
        assert path.read_text() == "((2_A:0.1,3_B:0.2)1:0.15,4_C:0.3)0;\n"
