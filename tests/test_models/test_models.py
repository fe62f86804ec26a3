"""
Tests for substitution models and the rate matrix helpers.
"""

import numpy as np
import pytest

from seqsuite.core.matrix import matrix_exponential
from seqsuite.io.alphabet import CODON_TO_INDEX, DNA, PROTEIN, GeneticCode, codon_alphabet
from seqsuite.models import GTR, HKY85, JC69, K80, T92, TN93, TS98, YN98


def expected_rate(model):
    return -np.dot(model.frequencies, model.generator.diagonal())


def check_detailed_balance(Q, pi):
    """π_i * Q[i,j] = π_j * Q[j,i] for all i, j."""
    flux = pi[:, np.newaxis] * Q
    return bool(np.allclose(flux, flux.T, rtol=1e-10, atol=1e-12))


class TestMatrix:
    """Test the matrix exponential."""

    def test_rows_sum_to_one(self):
        P = matrix_exponential(K80(DNA, kappa=3).generator, 0.5)
        np.testing.assert_allclose(P.sum(axis=1), 1.0)
        assert np.all(P >= 0)

    def test_zero_time_is_identity(self):
        P = matrix_exponential(JC69(DNA).generator, 0.0)
        np.testing.assert_allclose(P, np.eye(4), atol=1e-12)

    def test_jc69_closed_form(self):
        t = 0.3
        P = JC69(DNA).transition_matrix(t)
        same = 0.25 + 0.75 * np.exp(-4 * t / 3)
        np.testing.assert_allclose(np.diag(P), same)


class TestNucleotideModels:
    """Test nucleotide models."""

    @pytest.mark.parametrize("model", [
        JC69(DNA),
        K80(DNA, kappa=2),
        T92(DNA, kappa=2, theta=0.7),
        HKY85(DNA, kappa=3, theta=0.6, theta1=0.4, theta2=0.3),
        TN93(DNA, kappa1=2, kappa2=4, theta=0.4),
        GTR(DNA, a=0.5, b=2, c=1.5, d=0.8, e=1.2, theta=0.55),
    ])
    def test_normalized_and_reversible(self, model):
        assert expected_rate(model) == pytest.approx(1.0)
        assert check_detailed_balance(model.generator, model.frequencies)
        np.testing.assert_allclose(model.generator.sum(axis=1), 0.0, atol=1e-12)

    def test_hky85_frequencies(self):
        model = HKY85(DNA, theta=0.6, theta1=0.4, theta2=0.3)
        freqs = dict(zip(model.state_labels, model.frequencies))
        assert freqs["G"] == pytest.approx(0.18)
        assert freqs["C"] == pytest.approx(0.42)
        assert freqs["A"] == pytest.approx(0.16)
        assert freqs["T"] == pytest.approx(0.24)

    def test_kappa_scales_transitions(self):
        model = K80(DNA, kappa=4)
        Q = model.generator
        t, c, a = 0, 1, 2
        assert Q[t, c] == pytest.approx(4 * Q[t, a])

    def test_unknown_parameter(self):
        with pytest.raises(ValueError, match="Unknown parameter 'omega'"):
            K80(DNA, omega=2)

    def test_out_of_bounds(self):
        with pytest.raises(ValueError, match="out of bounds"):
            HKY85(DNA, theta=1.5)
        with pytest.raises(ValueError, match="out of bounds"):
            K80(DNA, kappa=-1)

    def test_protein_alphabet_rejected(self):
        with pytest.raises(ValueError, match="nucleotide alphabet"):
            HKY85(PROTEIN)

    def test_with_parameters(self):
        model = HKY85(DNA, kappa=2)
        other = model.with_parameters(theta=0.7)
        assert other.parameters["kappa"] == 2
        assert other.parameters["theta"] == 0.7
        assert model.parameters["theta"] == 0.5

    def test_describe(self):
        assert K80(DNA, kappa=2).describe() == "K80(kappa=2)"

    def test_protein_jc69(self):
        model = JC69(PROTEIN)
        assert model.n_states == 20
        assert expected_rate(model) == pytest.approx(1.0)


class TestCodonModel:
    """Test the YN98 codon model."""

    def test_states_are_sense_codons(self):
        model = YN98(codon_alphabet(), GeneticCode("Standard"), kappa=2, omega=0.5)
        assert model.n_states == 61
        assert CODON_TO_INDEX["TAA"] not in set(model.states)
        assert expected_rate(model) == pytest.approx(1.0)

    def test_omega_scales_non_synonymous_rates(self):
        model = YN98(codon_alphabet(), kappa=1, omega=0.25)
        states = list(model.states)
        Q = model.generator
        ctt = states.index(CODON_TO_INDEX["CTT"])
        ctc = states.index(CODON_TO_INDEX["CTC"])
        cct = states.index(CODON_TO_INDEX["CCT"])
        # CTT->CTC and CTT->CCT are both transitions
        assert Q[ctt, cct] == pytest.approx(0.25 * Q[ctt, ctc])
        # Two nucleotide changes are not allowed
        assert Q[ctt, states.index(CODON_TO_INDEX["AAT"])] == 0.0

    def test_mitochondrial_code(self):
        model = YN98(codon_alphabet(), GeneticCode("VertebrateMitochondrial"))
        assert model.n_states == 60

    def test_dna_alphabet_rejected(self):
        with pytest.raises(ValueError, match="codon alphabet"):
            YN98(DNA)


class TestTS98:
    """Test the covarion model."""

    def test_state_space(self):
        model = TS98(K80(DNA, kappa=2), s1=0.5, s2=1.5)
        assert model.n_states == 8
        assert list(model.states) == [0, 1, 2, 3, 0, 1, 2, 3]
        np.testing.assert_allclose(model.rate_class_frequencies, [0.75, 0.25])

    def test_stationary_distribution(self):
        model = TS98(HKY85(DNA, kappa=2, theta=0.6), s1=0.5, s2=1.5)
        np.testing.assert_allclose(model.frequencies @ model.generator, 0.0, atol=1e-12)
        assert model.frequencies.sum() == pytest.approx(1.0)

    def test_off_class_does_not_substitute(self):
        model = TS98(JC69(DNA), s1=1, s2=1)
        Q = model.generator
        # Off-class states only switch to the on-class copy of themselves
        assert Q[0, 1] == 0.0
        assert Q[0, 4] == pytest.approx(1.0)

    def test_base_parameters_are_forwarded(self):
        model = TS98(K80(DNA), s1=2, kappa=3)
        assert model.base.parameters["kappa"] == 3
        assert "kappa" in model.parameter_names
        other = model.with_parameters(s2=4)
        assert other.parameters["s2"] == 4
        assert other.base.parameters["kappa"] == 3

    def test_describe(self):
        model = TS98(K80(DNA, kappa=2), s1=0.5, s2=1)
        assert model.describe() == "TS98(model=K80(kappa=2), s1=0.5, s2=1)"
