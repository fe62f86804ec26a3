"""
Population genetics summary statistics.

All estimators are computed on the complete sites of an ingroup alignment
(sites without gap or unknown state). The sample size n is the number of
sequences.

References
----------
Watterson (1975), Tajima (1983, 1989), Fu and Li (1993),
Simonsen, Churchill and Aquadro (1995), Nei and Gojobori (1986),
McDonald and Kreitman (1991).
"""

import logging
from typing import Optional

import numpy as np

from .codon_sites import (
    codon_nucleotides,
    codon_from_nucleotides,
    has_stop,
    is_synonymous_polymorphic,
    mean_number_of_synonymous_positions,
    pi_non_synonymous,
    pi_synonymous,
)
from .sites import heterozygosity, major_allele, number_of_alleles
from .sites import number_of_singletons as site_singletons
from ..io.alphabet import GeneticCode
from ..io.sequences import Alignment

logger = logging.getLogger(__name__)


def _check_sample(alignment: Alignment, minimum: int = 2) -> int:
    n = alignment.n_species
    if n < minimum:
        raise ValueError(f"At least {minimum} ingroup sequences are required, got {n}")
    return n


def _complete_columns(alignment: Alignment) -> np.ndarray:
    """Matrix of the complete sites, shape (n_species, n_complete)."""
    return alignment.sequences[:, alignment.complete_sites()]


def _check_codon(alignment: Alignment):
    if not alignment.alphabet.is_codon:
        raise ValueError("A codon alignment is required")


def number_of_complete_sites(alignment: Alignment) -> int:
    return int(alignment.complete_sites().sum())


def number_of_polymorphic_sites(alignment: Alignment) -> int:
    """Number of complete sites with more than one state (S)."""
    columns = _complete_columns(alignment)
    return sum(1 for j in range(columns.shape[1]) if number_of_alleles(columns[:, j]) > 1)


def number_of_singletons(alignment: Alignment) -> int:
    """Number of states seen once in a complete site, summed over sites."""
    columns = _complete_columns(alignment)
    return sum(site_singletons(columns[:, j]) for j in range(columns.shape[1]))


def total_number_of_mutations(alignment: Alignment) -> int:
    """Minimum number of mutations (eta): distinct states minus one, summed over sites."""
    columns = _complete_columns(alignment)
    return sum(number_of_alleles(columns[:, j]) - 1 for j in range(columns.shape[1]))


def _harmonic_sums(n: int) -> tuple[float, float]:
    i = np.arange(1, n)
    return float(np.sum(1.0 / i)), float(np.sum(1.0 / i ** 2))


def _scale(value: float, alignment: Alignment, scaled: bool) -> float:
    if not scaled:
        return value
    n_sites = number_of_complete_sites(alignment)
    if n_sites == 0:
        raise ValueError("No complete site in alignment")
    return value / n_sites


def watterson75(alignment: Alignment, scaled: bool = True, tot_mut: bool = False) -> float:
    """
    Watterson's (1975) theta.

    Parameters
    ----------
    alignment : Alignment
        Ingroup sequences
    scaled : bool
        Divide by the number of complete sites
    tot_mut : bool
        Use the total number of mutations instead of the number of
        segregating sites

    Returns
    -------
    float
        theta_W = S / a1, with a1 = sum_{i=1}^{n-1} 1/i
    """
    n = _check_sample(alignment)
    a1, _ = _harmonic_sums(n)
    s = total_number_of_mutations(alignment) if tot_mut else number_of_polymorphic_sites(alignment)
    return _scale(s / a1, alignment, scaled)


def tajima83(alignment: Alignment, scaled: bool = True) -> float:
    """
    Tajima's (1983) mean pairwise diversity.

    Sum over complete sites of the unbiased heterozygosity
    ``1 - sum k_i (k_i - 1) / (n (n - 1))``.
    """
    _check_sample(alignment)
    columns = _complete_columns(alignment)
    pi = sum(heterozygosity(columns[:, j]) for j in range(columns.shape[1]))
    return _scale(pi, alignment, scaled)


def tajima_d(alignment: Alignment) -> float:
    """
    Tajima's (1989) D, using the number of segregating sites.

    Returns NaN when there is no segregating site. At least three
    sequences are required.
    """
    n = _check_sample(alignment, minimum=3)
    s = number_of_polymorphic_sites(alignment)
    if s == 0:
        return float('nan')
    pi = tajima83(alignment, scaled=False)
    a1, a2 = _harmonic_sums(n)
    b1 = (n + 1) / (3 * (n - 1))
    b2 = 2 * (n ** 2 + n + 3) / (9 * n * (n - 1))
    c1 = b1 - 1 / a1
    c2 = b2 - (n + 2) / (a1 * n) + a2 / a1 ** 2
    e1 = c1 / a1
    e2 = c2 / (a1 ** 2 + a2)
    return float((pi - s / a1) / np.sqrt(e1 * s + e2 * s * (s - 1)))


def _fu_li_constants(n: int) -> dict[str, float]:
    """Variance coefficients of D* and F* (Simonsen et al. 1995)."""
    a1, a2 = _harmonic_sums(n)
    a1n = a1 + 1.0 / n
    cn = 2 * (n * a1 - 2 * (n - 1)) / ((n - 1) * (n - 2))
    dn = cn + (n - 2) / (n - 1) ** 2 + 2 / (n - 1) * (1.5 - (2 * a1n - 3) / (n - 2) - 1.0 / n)

    vD = ((n / (n - 1)) ** 2 * a2 + a1 ** 2 * dn - 2 * n * a1 * (a1 + 1) / (n - 1) ** 2) / (
        a1 ** 2 + a2
    )
    uD = n / (n - 1) * (a1 - n / (n - 1)) - vD

    vF = (
        (2 * n ** 3 + 110 * n ** 2 - 255 * n + 153) / (9 * n ** 2 * (n - 1))
        + 2 * (n - 1) * a1 / n ** 2
        - 8 * a2 / n
    ) / (a1 ** 2 + a2)
    uF = ((4 * n ** 2 + 19 * n + 3 - 12 * (n + 1) * a1n) / (3 * n * (n - 1))) / a1 - vF

    return {'a1': a1, 'a2': a2, 'vD': vD, 'uD': uD, 'vF': vF, 'uF': uF}


def fu_li_d_star(alignment: Alignment, tot_mut: bool = True) -> float:
    """
    Fu and Li's (1993) D* (no outgroup).

    Parameters
    ----------
    alignment : Alignment
        Ingroup sequences (at least 3)
    tot_mut : bool
        Use the total number of mutations (True) or the number of
        segregating sites (False) as eta

    Returns
    -------
    float
        D*, or NaN when eta is 0
    """
    n = _check_sample(alignment, minimum=3)
    eta = total_number_of_mutations(alignment) if tot_mut else number_of_polymorphic_sites(alignment)
    if eta == 0:
        return float('nan')
    eta_s = number_of_singletons(alignment)
    k = _fu_li_constants(n)
    return float(
        (n / (n - 1) * eta - k['a1'] * eta_s) / np.sqrt(k['uD'] * eta + k['vD'] * eta ** 2)
    )


def fu_li_f_star(alignment: Alignment, tot_mut: bool = True) -> float:
    """
    Fu and Li's (1993) F* (no outgroup), with the variance of Simonsen et al. (1995).

    Returns NaN when eta is 0.
    """
    n = _check_sample(alignment, minimum=3)
    eta = total_number_of_mutations(alignment) if tot_mut else number_of_polymorphic_sites(alignment)
    if eta == 0:
        return float('nan')
    eta_s = number_of_singletons(alignment)
    pi = tajima83(alignment, scaled=False)
    k = _fu_li_constants(n)
    return float((pi - (n - 1) / n * eta_s) / np.sqrt(k['uF'] * eta + k['vF'] * eta ** 2))


def pi_synonymous_total(alignment: Alignment, code: GeneticCode) -> float:
    """Synonymous diversity summed over complete sites."""
    _check_codon(alignment)
    _check_sample(alignment)
    columns = _complete_columns(alignment)
    return float(sum(pi_synonymous(columns[:, j], code) for j in range(columns.shape[1])))


def pi_non_synonymous_total(alignment: Alignment, code: GeneticCode) -> float:
    """Non-synonymous diversity summed over complete sites."""
    _check_codon(alignment)
    _check_sample(alignment)
    columns = _complete_columns(alignment)
    return float(sum(pi_non_synonymous(columns[:, j], code) for j in range(columns.shape[1])))


def mean_number_of_synonymous_sites(alignment: Alignment, code: GeneticCode) -> float:
    """Number of synonymous sites (#S): mean synonymous positions, summed over complete sites."""
    _check_codon(alignment)
    columns = _complete_columns(alignment)
    return float(sum(
        mean_number_of_synonymous_positions(columns[:, j], code) for j in range(columns.shape[1])
    ))


def mean_number_of_non_synonymous_sites(alignment: Alignment, code: GeneticCode) -> float:
    """Number of non-synonymous sites (#N = 3 x complete sites - #S)."""
    return 3.0 * number_of_complete_sites(alignment) - mean_number_of_synonymous_sites(alignment, code)


def synonymous_sites(alignment: Alignment, code: GeneticCode) -> Alignment:
    """Polymorphic complete sites whose codons all encode the same amino acid."""
    _check_codon(alignment)
    mask = np.array(
        [is_synonymous_polymorphic(alignment.sequences[:, j], code) for j in range(alignment.n_sites)],
        dtype=bool,
    )
    return alignment.select_sites(mask)


def non_synonymous_sites(alignment: Alignment, code: GeneticCode) -> Alignment:
    """Polymorphic complete sites that are not synonymous polymorphisms."""
    _check_codon(alignment)
    complete = alignment.complete_sites()
    mask = np.array(
        [
            complete[j]
            and number_of_alleles(alignment.sequences[:, j]) > 1
            and not is_synonymous_polymorphic(alignment.sequences[:, j], code)
            for j in range(alignment.n_sites)
        ],
        dtype=bool,
    )
    return alignment.select_sites(mask)


def _nucleotide_major(nucleotides: np.ndarray) -> int:
    values, counts = np.unique(nucleotides, return_counts=True)
    return int(values[np.argmax(counts)])


def mk_table(
    ingroup: Alignment, outgroup: Alignment, code: GeneticCode
) -> list[int]:
    """
    McDonald-Kreitman table.

    Only sites complete in both groups and free of stop codons are used.
    Polymorphisms are the ingroup nucleotides that differ from the ingroup
    major codon at each codon position; fixed differences are codon
    positions where ingroup and outgroup share no nucleotide. Each change is
    classified by substituting it into the ingroup major codon.

    Parameters
    ----------
    ingroup : Alignment
        Ingroup codon sequences
    outgroup : Alignment
        Outgroup codon sequences (at least one)
    code : GeneticCode
        Genetic code

    Returns
    -------
    list[int]
        [Pa, Ps, Da, Ds]: non-synonymous and synonymous polymorphisms, then
        non-synonymous and synonymous fixed differences
    """
    _check_codon(ingroup)
    if outgroup.n_species == 0:
        raise ValueError("MacDonald-Kreitman test requires at least one outgroup sequence.")
    if ingroup.n_sites != outgroup.n_sites:
        raise ValueError("Ingroup and outgroup must have the same number of sites")

    pa = ps = da = ds = 0
    keep = ingroup.complete_sites() & outgroup.complete_sites()
    for j in np.flatnonzero(keep):
        in_site = ingroup.sequences[:, j]
        out_site = outgroup.sequences[:, j]
        if has_stop(in_site, code) or has_stop(out_site, code):
            continue

        major = major_allele(in_site)
        major_nucs = codon_nucleotides(major)
        in_nucs = np.array([codon_nucleotides(int(c)) for c in in_site])
        out_nucs = np.array([codon_nucleotides(int(c)) for c in out_site])

        for k in range(3):
            in_set = set(in_nucs[:, k].tolist())
            out_set = set(out_nucs[:, k].tolist())

            for nuc in sorted(in_set - {major_nucs[k]}):
                mutant = list(major_nucs)
                mutant[k] = nuc
                if code.are_synonymous(major, codon_from_nucleotides(*mutant)):
                    ps += 1
                else:
                    pa += 1

            if in_set.isdisjoint(out_set):
                mutant = list(major_nucs)
                mutant[k] = _nucleotide_major(out_nucs[:, k])
                if code.are_synonymous(major, codon_from_nucleotides(*mutant)):
                    ds += 1
                else:
                    da += 1

    logger.debug("MK table: Pa=%d Ps=%d Da=%d Ds=%d", pa, ps, da, ds)
    return [pa, ps, da, ds]


def pi_n_pi_s_ratio(
    pi_n: float, pi_s: float, nb_n: float, nb_s: float
) -> Optional[float]:
    """
    PiN / PiS corrected for the numbers of sites: (piN / #N) / (piS / #S).

    Returns None when the ratio is undefined.
    """
    if pi_s == 0 or nb_n == 0 or nb_s == 0:
        return None
    return (pi_n / nb_n) / (pi_s / nb_s)
