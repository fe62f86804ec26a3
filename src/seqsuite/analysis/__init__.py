"""
Population genetics analysis of aligned samples.

- **sites**: per-column allele summaries
- **codon_sites**: synonymous/non-synonymous per-column tools
- **polymorphism**: ingroup/outgroup alignments and stop-codon policies
- **statistics**: diversity estimators, neutrality tests and MK table
"""

from seqsuite.analysis.polymorphism import PolymorphismAlignment, filter_sites
from seqsuite.analysis.statistics import (
    fu_li_d_star,
    fu_li_f_star,
    mk_table,
    number_of_polymorphic_sites,
    number_of_singletons,
    tajima83,
    tajima_d,
    total_number_of_mutations,
    watterson75,
)

__all__ = [
    "PolymorphismAlignment",
    "filter_sites",
    "number_of_polymorphic_sites",
    "number_of_singletons",
    "total_number_of_mutations",
    "watterson75",
    "tajima83",
    "tajima_d",
    "fu_li_d_star",
    "fu_li_f_star",
    "mk_table",
]
