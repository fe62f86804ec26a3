"""
Per-column tools for codon alignments.

Codon states are indices 0-63 in TCAG order, so the nucleotide at codon
position k (0, 1, 2) is ``(codon // 4 ** (2 - k)) % 4``.
"""

from functools import lru_cache
from itertools import permutations

import numpy as np

from .sites import is_complete, is_constant, state_counts
from ..io.alphabet import GeneticCode


def codon_nucleotides(codon: int) -> tuple[int, int, int]:
    """Nucleotide indices of a codon."""
    return codon // 16, (codon // 4) % 4, codon % 4


def codon_from_nucleotides(n0: int, n1: int, n2: int) -> int:
    return n0 * 16 + n1 * 4 + n2


def number_of_differences(codon1: int, codon2: int) -> int:
    """Number of codon positions at which two codons differ."""
    return sum(a != b for a, b in zip(codon_nucleotides(codon1), codon_nucleotides(codon2)))


@lru_cache(maxsize=None)
def _synonymous_differences(codon1: int, codon2: int, code_name: str) -> float:
    code = GeneticCode(code_name)
    n1 = codon_nucleotides(codon1)
    n2 = codon_nucleotides(codon2)
    diffs = [k for k in range(3) if n1[k] != n2[k]]
    if not diffs:
        return 0.0

    # Average over all orders of the single changes, skipping paths that
    # pass through an intermediate stop codon
    total = 0.0
    n_paths = 0
    for order in permutations(diffs):
        current = list(n1)
        previous = codon1
        syn = 0
        valid = True
        for step, k in enumerate(order):
            current[k] = n2[k]
            codon = codon_from_nucleotides(*current)
            if step < len(order) - 1 and code.is_stop(codon):
                valid = False
                break
            if code.are_synonymous(previous, codon):
                syn += 1
            previous = codon
        if valid:
            total += syn
            n_paths += 1
    return total / n_paths if n_paths else 0.0


def number_of_synonymous_differences(codon1: int, codon2: int, code: GeneticCode) -> float:
    """
    Mean number of synonymous changes between two codons.

    The mean is taken over all mutational paths made of single nucleotide
    changes that do not go through a stop codon. Returns 0 when no such
    path exists.

    Examples
    --------
    >>> from seqsuite.io.alphabet import CODON_TO_INDEX
    >>> code = GeneticCode('Standard')
    >>> number_of_synonymous_differences(CODON_TO_INDEX['CTT'], CODON_TO_INDEX['CTC'], code)
    1.0
    """
    return _synonymous_differences(int(codon1), int(codon2), code.name)


def number_of_non_synonymous_differences(codon1: int, codon2: int, code: GeneticCode) -> float:
    return number_of_differences(codon1, codon2) - number_of_synonymous_differences(
        codon1, codon2, code
    )


@lru_cache(maxsize=None)
def _synonymous_positions(codon: int, code_name: str) -> float:
    code = GeneticCode(code_name)
    if code.is_stop(codon):
        return 0.0
    nucleotides = codon_nucleotides(codon)
    total = 0.0
    for k in range(3):
        n_syn = 0
        n_sense = 0
        for nuc in range(4):
            if nuc == nucleotides[k]:
                continue
            mutant = list(nucleotides)
            mutant[k] = nuc
            mutant_codon = codon_from_nucleotides(*mutant)
            if code.is_stop(mutant_codon):
                continue
            n_sense += 1
            if code.are_synonymous(codon, mutant_codon):
                n_syn += 1
        if n_sense:
            total += n_syn / n_sense
    return total


def number_of_synonymous_positions(codon: int, code: GeneticCode) -> float:
    """
    Number of synonymous positions of a codon (Nei and Gojobori 1986).

    For each codon position, the fraction of the single nucleotide changes
    that are synonymous, among the changes that do not create a stop codon.
    Stop codons have no synonymous position.
    """
    return _synonymous_positions(int(codon), code.name)


def mean_number_of_synonymous_positions(site: np.ndarray, code: GeneticCode) -> float:
    """Mean number of synonymous positions over the sequences of a complete site."""
    if not is_complete(site):
        raise ValueError("Site is not complete")
    return float(np.mean([number_of_synonymous_positions(c, code) for c in site]))


def has_stop(site: np.ndarray, code: GeneticCode) -> bool:
    """True if any resolved codon of the site is a stop codon."""
    return any(code.is_stop(int(c)) for c in site if c >= 0)


def is_synonymous_polymorphic(site: np.ndarray, code: GeneticCode) -> bool:
    """True for a complete, polymorphic site whose codons all encode the same amino acid."""
    if not is_complete(site) or is_constant(site):
        return False
    amino_acids = {code.translate(int(c)) for c in site}
    return len(amino_acids) == 1 and '*' not in amino_acids


def is_four_fold_degenerated(site: np.ndarray, code: GeneticCode) -> bool:
    """
    True if the site only varies at a four-fold degenerate third position.

    The site must be complete, its codons must share their first two
    positions, and each codon must be four-fold degenerate.
    """
    if not is_complete(site):
        return False
    prefixes = {int(c) // 4 for c in site}
    if len(prefixes) != 1:
        return False
    return all(code.is_four_fold_degenerated(int(c)) for c in site)


def _pairwise_diversity(site: np.ndarray, distance) -> float:
    counts = state_counts(site)
    n = sum(counts.values())
    if n < 2:
        return 0.0
    pi = 0.0
    for c1, k1 in counts.items():
        for c2, k2 in counts.items():
            if c1 != c2:
                pi += (k1 / n) * (k2 / n) * distance(c1, c2)
    return pi * n / (n - 1)


def pi_synonymous(site: np.ndarray, code: GeneticCode) -> float:
    """
    Synonymous nucleotide diversity of a site.

    ``n / (n - 1) * sum_ij f_i f_j d_S(i, j)``, over ordered pairs of codons.
    """
    return _pairwise_diversity(site, lambda a, b: number_of_synonymous_differences(a, b, code))


def pi_non_synonymous(site: np.ndarray, code: GeneticCode) -> float:
    """Non-synonymous nucleotide diversity of a site."""
    return _pairwise_diversity(
        site, lambda a, b: number_of_non_synonymous_differences(a, b, code)
    )
