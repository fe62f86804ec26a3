"""
Codon substitution models.
"""

import numpy as np

from .base import SubstitutionModel
from ..core.matrix import create_reversible_Q
from ..io.alphabet import CODONS, GeneticCode, is_transition


def build_codon_Q_matrix(
    kappa: float, omega: float, pi: np.ndarray, genetic_code: GeneticCode
) -> np.ndarray:
    """
    Build a codon rate matrix Q over the sense codons of a genetic code.

    Parameters
    ----------
    kappa : float
        Transition/transversion ratio
    omega : float
        dN/dS ratio
    pi : np.ndarray, shape (n_sense,)
        Sense codon frequencies, in genetic_code.sense_codons order
    genetic_code : GeneticCode
        Genetic code defining sense codons and synonymy

    Returns
    -------
    np.ndarray, shape (n_sense, n_sense)
        Rate matrix Q, normalized to one substitution per time unit
    """
    sense = genetic_code.sense_codons
    n = len(sense)
    S = np.zeros((n, n))

    for i, ci in enumerate(sense):
        codon_i = CODONS[ci]
        for j, cj in enumerate(sense):
            if i == j:
                continue
            codon_j = CODONS[cj]

            diffs = [k for k in range(3) if codon_i[k] != codon_j[k]]
            if len(diffs) != 1:
                # Only single nucleotide changes allowed
                continue

            s = 1.0
            if is_transition(codon_i[diffs[0]], codon_j[diffs[0]]):
                s *= kappa
            if not genetic_code.are_synonymous(ci, cj):
                s *= omega
            S[i, j] = s

    return create_reversible_Q(S, pi, normalize=True)


class YN98(SubstitutionModel):
    """
    Yang and Nielsen (1998) codon model with F0 (uniform) codon frequencies.

    Model states are the sense codons of the genetic code; stop codons are
    never reached.

    Parameters
    ----------
    alphabet : Alphabet
        Codon alphabet
    genetic_code : GeneticCode
        Genetic code
    kappa : float
        Transition/transversion ratio
    omega : float
        dN/dS ratio
    """

    name = "YN98"
    parameter_defaults = {'kappa': 1.0, 'omega': 1.0}

    def __init__(self, alphabet, genetic_code: GeneticCode = None, **params):
        if not alphabet.is_codon:
            raise ValueError(f"Model {self.name} requires a codon alphabet, got {alphabet.name}")
        self.genetic_code = genetic_code or GeneticCode('Standard')
        super().__init__(alphabet, **params)

    @property
    def states(self) -> np.ndarray:
        return np.array(self.genetic_code.sense_codons)

    def _build(self):
        n = len(self.genetic_code.sense_codons)
        pi = np.ones(n) / n
        p = self.parameters
        Q = build_codon_Q_matrix(p['kappa'], p['omega'], pi, self.genetic_code)
        return Q, pi

    def with_parameters(self, **overrides) -> "YN98":
        params = dict(self.parameters)
        params.update(overrides)
        return YN98(self.alphabet, genetic_code=self.genetic_code, **params)
