"""
Per-column summaries of an alignment.

A site is a 1-D array of state codes, one per sequence; negative codes are
gaps or unknown states and are ignored when counting alleles.
"""

import numpy as np


def is_complete(site: np.ndarray) -> bool:
    """True if the site has no gap or unknown state."""
    return bool(np.all(site >= 0))


def state_counts(site: np.ndarray) -> dict[int, int]:
    """Number of occurrences of each resolved state."""
    states, counts = np.unique(site[site >= 0], return_counts=True)
    return {int(s): int(c) for s, c in zip(states, counts)}


def number_of_alleles(site: np.ndarray) -> int:
    """Number of distinct resolved states."""
    return len(np.unique(site[site >= 0]))


def is_constant(site: np.ndarray) -> bool:
    """True if at most one resolved state is present."""
    return number_of_alleles(site) <= 1


def is_polymorphic(site: np.ndarray) -> bool:
    return number_of_alleles(site) > 1


def number_of_singletons(site: np.ndarray) -> int:
    """Number of states seen exactly once."""
    return sum(1 for count in state_counts(site).values() if count == 1)


def major_allele(site: np.ndarray) -> int:
    """
    Most frequent resolved state (smallest code on ties).

    Raises
    ------
    ValueError
        If the site has no resolved state
    """
    counts = state_counts(site)
    if not counts:
        raise ValueError("Site has no resolved state")
    return max(counts, key=lambda s: (counts[s], -s))


def minor_allele(site: np.ndarray) -> int:
    """Least frequent resolved state (smallest code on ties)."""
    counts = state_counts(site)
    if not counts:
        raise ValueError("Site has no resolved state")
    return min(counts, key=lambda s: (counts[s], s))


def allele_frequencies(site: np.ndarray) -> dict[int, float]:
    """Relative frequency of each resolved state."""
    counts = state_counts(site)
    total = sum(counts.values())
    return {s: c / total for s, c in counts.items()}


def major_allele_frequency(site: np.ndarray) -> float:
    return allele_frequencies(site)[major_allele(site)]


def minor_allele_frequency(site: np.ndarray) -> float:
    return allele_frequencies(site)[minor_allele(site)]


def heterozygosity(site: np.ndarray) -> float:
    """
    Unbiased gene diversity of a site.

    H = n / (n - 1) * (1 - sum p_i^2), n the number of resolved states.
    Equivalent to ``1 - sum k_i (k_i - 1) / (n (n - 1))``.
    """
    counts = np.array(list(state_counts(site).values()), dtype=float)
    n = counts.sum()
    if n < 2:
        return 0.0
    return float(1.0 - np.sum(counts * (counts - 1)) / (n * (n - 1)))
