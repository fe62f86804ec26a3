"""
Alignments of population samples with an optional outgroup.
"""

import logging
from typing import Sequence

import numpy as np

from .codon_sites import has_stop
from ..io.alphabet import GAP_CODE, GeneticCode
from ..io.sequences import Alignment

logger = logging.getLogger(__name__)

SITES_TO_USE = ('all', 'nogap', 'complete')


def filter_sites(
    alignment: Alignment, sites_to_use: str = 'all', max_gap_allowed: float = 1.0
) -> Alignment:
    """
    Keep the sites of an alignment selected by a site policy.

    Parameters
    ----------
    alignment : Alignment
        Input alignment
    sites_to_use : str
        'all' keeps every site whose gap fraction is at most max_gap_allowed,
        'nogap' removes sites containing a gap, 'complete' removes sites
        containing a gap or an unknown state
    max_gap_allowed : float
        Maximum fraction of gaps in a site, for 'all'

    Returns
    -------
    Alignment
        Filtered alignment (original positions are kept)
    """
    if sites_to_use == 'all':
        if max_gap_allowed >= 1.0:
            return alignment
        mask = alignment.gap_fraction() <= max_gap_allowed
    elif sites_to_use == 'nogap':
        mask = ~np.any(alignment.sequences == GAP_CODE, axis=0)
    elif sites_to_use == 'complete':
        mask = alignment.complete_sites()
    else:
        raise ValueError(
            f"Unknown site selection '{sites_to_use}'. Valid values: {', '.join(SITES_TO_USE)}"
        )
    removed = int(np.sum(~mask))
    if removed:
        logger.info("Removed %d sites (sites_to_use=%s)", removed, sites_to_use)
    return alignment.select_sites(mask)


class PolymorphismAlignment:
    """
    Alignment whose sequences are flagged as ingroup or outgroup.

    Parameters
    ----------
    alignment : Alignment
        Sequences
    outgroup : array-like of bool, optional
        Outgroup flag of each sequence (default: no outgroup)

    Examples
    --------
    >>> from seqsuite.io.alphabet import DNA
    >>> aln = Alignment.from_strings(["a", "b", "o"], ["AC", "AT", "GT"], DNA)
    >>> pa = PolymorphismAlignment(aln)
    >>> pa.set_outgroup_by_name(["o"])
    >>> pa.ingroup().names
    ['a', 'b']
    """

    def __init__(self, alignment: Alignment, outgroup=None):
        self.alignment = alignment
        if outgroup is None:
            outgroup = np.zeros(alignment.n_species, dtype=bool)
        self.outgroup_mask = np.asarray(outgroup, dtype=bool)
        if len(self.outgroup_mask) != alignment.n_species:
            raise ValueError("One outgroup flag is needed per sequence")

    @property
    def names(self) -> list[str]:
        return self.alignment.names

    @property
    def n_sites(self) -> int:
        return self.alignment.n_sites

    @property
    def alphabet(self):
        return self.alignment.alphabet

    @property
    def n_outgroup(self) -> int:
        return int(self.outgroup_mask.sum())

    @property
    def has_outgroup(self) -> bool:
        return self.n_outgroup > 0

    def append_outgroup(self, other: Alignment) -> None:
        """Append sequences flagged as outgroup."""
        self.alignment.append_sequences(other)
        self.outgroup_mask = np.concatenate(
            [self.outgroup_mask, np.ones(other.n_species, dtype=bool)]
        )

    def set_outgroup_by_index(self, indices: Sequence[int]) -> None:
        """Flag sequences as outgroup by 1-based index."""
        for index in indices:
            if not 1 <= index <= self.alignment.n_species:
                raise ValueError(
                    f"Outgroup index {index} out of range [1, {self.alignment.n_species}]"
                )
            self.outgroup_mask[index - 1] = True

    def set_outgroup_by_name(self, names: Sequence[str]) -> None:
        """Flag sequences as outgroup by name."""
        for name in names:
            if name not in self.alignment.names:
                raise ValueError(f"Outgroup sequence '{name}' not found in alignment")
            self.outgroup_mask[self.alignment.names.index(name)] = True

    def ingroup(self) -> Alignment:
        """Alignment of the ingroup sequences."""
        return self.alignment.select_sequences(~self.outgroup_mask)

    def outgroup(self) -> Alignment:
        """Alignment of the outgroup sequences."""
        return self.alignment.select_sequences(self.outgroup_mask)

    def _check_codon(self):
        if not self.alignment.alphabet.is_codon:
            raise ValueError("Stop codon removal requires a codon alphabet")

    def remove_last_site_if_stop(self, code: GeneticCode) -> bool:
        """
        Remove the last site if it contains a stop codon.

        Returns
        -------
        bool
            True if the site was removed
        """
        self._check_codon()
        if self.n_sites == 0:
            return False
        if has_stop(self.alignment.sequences[:, -1], code):
            self.alignment.delete_site(self.n_sites - 1)
            return True
        return False

    def remove_stop_codon_sites(self, code: GeneticCode) -> int:
        """
        Remove every site containing a stop codon.

        Returns
        -------
        int
            Number of removed sites
        """
        self._check_codon()
        stops = np.array(
            [has_stop(self.alignment.sequences[:, j], code) for j in range(self.n_sites)],
            dtype=bool,
        )
        removed = int(stops.sum())
        if removed:
            self.alignment = self.alignment.select_sites(~stops)
        return removed

    def __repr__(self) -> str:
        return (
            f"PolymorphismAlignment(n_ingroup={self.alignment.n_species - self.n_outgroup}, "
            f"n_outgroup={self.n_outgroup}, n_sites={self.n_sites})"
        )
