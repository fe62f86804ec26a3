"""
Substitution models, frequency sets and rate distributions.
"""

from seqsuite.models.base import JC69, SubstitutionModel
from seqsuite.models.codon import YN98
from seqsuite.models.factory import (
    get_rate_distribution,
    get_root_frequencies,
    get_substitution_model,
)
from seqsuite.models.markov_modulated import TS98
from seqsuite.models.model_set import SubstitutionModelSet
from seqsuite.models.nucleotide import GTR, HKY85, K80, T92, TN93
from seqsuite.models.rates import RateDistribution

__all__ = [
    "SubstitutionModel",
    "JC69",
    "K80",
    "T92",
    "HKY85",
    "TN93",
    "GTR",
    "YN98",
    "TS98",
    "SubstitutionModelSet",
    "RateDistribution",
    "get_substitution_model",
    "get_root_frequencies",
    "get_rate_distribution",
]
