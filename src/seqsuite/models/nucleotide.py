"""
Nucleotide substitution models.

States are ordered T, C, A, G. Base frequencies are parameterised as
theta = G+C content, theta1 = A/(A+T), theta2 = G/(G+C).
"""

import numpy as np

from .base import SubstitutionModel
from ..core.matrix import create_reversible_Q
from ..io.alphabet import NUCLEOTIDE_TO_INDEX

_T = NUCLEOTIDE_TO_INDEX['T']
_C = NUCLEOTIDE_TO_INDEX['C']
_A = NUCLEOTIDE_TO_INDEX['A']
_G = NUCLEOTIDE_TO_INDEX['G']

_FREQUENCY_BOUNDS = {'theta': (0.0, 1.0), 'theta1': (0.0, 1.0), 'theta2': (0.0, 1.0)}


def theta_frequencies(theta: float, theta1: float = 0.5, theta2: float = 0.5) -> np.ndarray:
    """
    Base frequencies (T, C, A, G) from GC content and strand ratios.

    Examples
    --------
    >>> theta_frequencies(0.5)
    array([0.25, 0.25, 0.25, 0.25])
    """
    pi = np.zeros(4)
    pi[_A] = theta1 * (1.0 - theta)
    pi[_T] = (1.0 - theta1) * (1.0 - theta)
    pi[_G] = theta2 * theta
    pi[_C] = (1.0 - theta2) * theta
    return pi


def _exchangeabilities(**pairs) -> np.ndarray:
    """Symmetric exchangeability matrix from 'XY' pair names, default 1."""
    S = np.ones((4, 4))
    for pair, value in pairs.items():
        i = NUCLEOTIDE_TO_INDEX[pair[0]]
        j = NUCLEOTIDE_TO_INDEX[pair[1]]
        S[i, j] = S[j, i] = value
    return S


class NucleotideModel(SubstitutionModel):
    """Base for models over DNA or RNA."""

    def __init__(self, alphabet, **params):
        if not alphabet.is_nucleic:
            raise ValueError(f"Model {self.name} requires a nucleotide alphabet, got {alphabet.name}")
        super().__init__(alphabet, **params)

    def _frequencies(self) -> np.ndarray:
        p = self.parameters
        return theta_frequencies(
            p.get('theta', 0.5), p.get('theta1', 0.5), p.get('theta2', 0.5)
        )


class K80(NucleotideModel):
    """Kimura (1980) two-parameter model."""

    name = "K80"
    parameter_defaults = {'kappa': 1.0}

    def _build(self):
        pi = np.ones(4) / 4
        kappa = self.parameters['kappa']
        S = _exchangeabilities(AG=kappa, CT=kappa)
        return create_reversible_Q(S, pi), pi


class T92(NucleotideModel):
    """Tamura (1992) model: K80 with unequal GC content."""

    name = "T92"
    parameter_defaults = {'kappa': 1.0, 'theta': 0.5}
    parameter_bounds = _FREQUENCY_BOUNDS

    def _build(self):
        pi = self._frequencies()
        kappa = self.parameters['kappa']
        S = _exchangeabilities(AG=kappa, CT=kappa)
        return create_reversible_Q(S, pi), pi


class HKY85(NucleotideModel):
    """Hasegawa, Kishino and Yano (1985) model."""

    name = "HKY85"
    parameter_defaults = {'kappa': 1.0, 'theta': 0.5, 'theta1': 0.5, 'theta2': 0.5}
    parameter_bounds = _FREQUENCY_BOUNDS

    def _build(self):
        pi = self._frequencies()
        kappa = self.parameters['kappa']
        S = _exchangeabilities(AG=kappa, CT=kappa)
        return create_reversible_Q(S, pi), pi


class TN93(NucleotideModel):
    """Tamura and Nei (1993) model: kappa1 for A<->G, kappa2 for C<->T."""

    name = "TN93"
    parameter_defaults = {
        'kappa1': 1.0, 'kappa2': 1.0, 'theta': 0.5, 'theta1': 0.5, 'theta2': 0.5,
    }
    parameter_bounds = _FREQUENCY_BOUNDS

    def _build(self):
        pi = self._frequencies()
        p = self.parameters
        S = _exchangeabilities(AG=p['kappa1'], CT=p['kappa2'])
        return create_reversible_Q(S, pi), pi


class GTR(NucleotideModel):
    """
    General time-reversible model.

    Exchangeabilities: a (C<->T), b (A<->T), c (G<->T), d (A<->C),
    e (C<->G), and 1 for A<->G.
    """

    name = "GTR"
    parameter_defaults = {
        'a': 1.0, 'b': 1.0, 'c': 1.0, 'd': 1.0, 'e': 1.0,
        'theta': 0.5, 'theta1': 0.5, 'theta2': 0.5,
    }
    parameter_bounds = _FREQUENCY_BOUNDS

    def _build(self):
        pi = self._frequencies()
        p = self.parameters
        S = _exchangeabilities(CT=p['a'], AT=p['b'], GT=p['c'], AC=p['d'], CG=p['e'])
        return create_reversible_Q(S, pi), pi
