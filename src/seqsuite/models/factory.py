"""
Build models, frequency sets and rate distributions from text descriptions.

Descriptions use the procedure syntax of ``seqsuite.io.keyval``, e.g.
``HKY85(kappa=2, theta=0.6)``, ``TS98(model=JC69, s1=0.5, s2=1)`` or
``Invariant(dist=Gamma(n=4, alpha=0.5), p=0.1)``.
"""

import logging
from typing import Optional

import numpy as np

from .base import JC69, SubstitutionModel
from .codon import YN98
from .frequencies import fixed_frequencies, full_frequencies, gc_frequencies
from .markov_modulated import TS98
from .nucleotide import GTR, HKY85, K80, T92, TN93
from .rates import (
    RateDistribution,
    constant_distribution,
    gamma_distribution,
    invariant_distribution,
)
from ..io.alphabet import Alphabet, GeneticCode
from ..io.keyval import parse_procedure

logger = logging.getLogger(__name__)

NUCLEOTIDE_MODELS = {
    'JC69': JC69,
    'K80': K80,
    'T92': T92,
    'HKY85': HKY85,
    'TN93': TN93,
    'GTR': GTR,
}

CODON_MODELS = {
    'YN98': YN98,
}


def _float_arguments(name: str, args: dict[str, str]) -> dict[str, float]:
    values = {}
    for key, value in args.items():
        try:
            values[key] = float(value)
        except ValueError:
            raise ValueError(f"Invalid value for {name}.{key}: '{value}'")
    return values


def get_substitution_model(
    description: str, alphabet: Alphabet, genetic_code: Optional[GeneticCode] = None
) -> SubstitutionModel:
    """
    Instantiate a substitution model from its description.

    Parameters
    ----------
    description : str
        Model description, e.g. ``K80(kappa=2)``
    alphabet : Alphabet
        Alphabet of the simulated sequences
    genetic_code : GeneticCode, optional
        Genetic code, for codon models

    Raises
    ------
    ValueError
        If the model is unknown, unavailable for the alphabet, or given
        invalid parameters.
    """
    name, args = parse_procedure(description)

    if name == 'TS98':
        if 'model' not in args:
            raise ValueError("TS98 requires a 'model' argument")
        base = get_substitution_model(args.pop('model'), alphabet, genetic_code)
        if isinstance(base, TS98):
            raise ValueError("TS98 cannot be nested")
        model = TS98(base, **_float_arguments(name, args))
    elif alphabet.is_codon:
        if name not in CODON_MODELS:
            raise ValueError(
                f"Model '{name}' unknown or not available for codon alphabet. "
                f"Valid models: {', '.join(CODON_MODELS)}, TS98"
            )
        model = CODON_MODELS[name](
            alphabet, genetic_code=genetic_code, **_float_arguments(name, args)
        )
    elif alphabet.is_nucleic:
        if name not in NUCLEOTIDE_MODELS:
            raise ValueError(
                f"Model '{name}' unknown or not available for nucleotide alphabet. "
                f"Valid models: {', '.join(NUCLEOTIDE_MODELS)}, TS98"
            )
        model = NUCLEOTIDE_MODELS[name](alphabet, **_float_arguments(name, args))
    else:
        if name != 'JC69':
            raise ValueError(
                f"Model '{name}' unknown or not available for protein alphabet. "
                f"Valid models: JC69, TS98"
            )
        model = JC69(alphabet, **_float_arguments(name, args))

    logger.debug("Substitution model: %s", model.describe())
    return model


def get_root_frequencies(description: str, model: SubstitutionModel) -> np.ndarray:
    """
    Root frequencies from a frequency-set description.

    ``Fixed()`` is uniform over states, ``GC(theta=0.6)`` sets the GC
    content of nucleotides, ``Full(A=0.3, C=0.2, G=0.2, T=0.3)`` gives
    every state explicitly.
    """
    name, args = parse_procedure(description)
    if name == 'Fixed':
        if args:
            raise ValueError("Fixed() frequency set takes no argument")
        return fixed_frequencies(model)
    if name == 'GC':
        values = _float_arguments(name, args)
        if set(values) - {'theta'}:
            raise ValueError("GC() frequency set only takes 'theta'")
        return gc_frequencies(model, values.get('theta', 0.5))
    if name == 'Full':
        return full_frequencies(model, _float_arguments(name, args))
    raise ValueError(f"Unknown frequency set: {name}. Valid sets: Fixed, GC, Full")


def get_rate_distribution(description: str) -> RateDistribution:
    """
    Rate distribution from its description.

    Examples
    --------
    >>> get_rate_distribution("Gamma(n=4, alpha=0.5)").n_categories
    4
    """
    name, args = parse_procedure(description)
    if name == 'Constant':
        if args:
            raise ValueError("Constant() rate distribution takes no argument")
        return constant_distribution()
    if name == 'Gamma':
        values = _float_arguments(name, args)
        unknown = set(values) - {'n', 'alpha'}
        if unknown:
            raise ValueError(f"Unknown Gamma parameter(s): {', '.join(sorted(unknown))}")
        n = values.get('n', 4)
        if n != int(n):
            raise ValueError(f"Gamma number of categories must be an integer, got {n}")
        return gamma_distribution(int(n), values.get('alpha', 1.0))
    if name == 'Invariant':
        if 'dist' not in args:
            raise ValueError("Invariant requires a 'dist' argument")
        dist = get_rate_distribution(args.pop('dist'))
        values = _float_arguments(name, args)
        if set(values) - {'p'}:
            raise ValueError("Invariant only takes 'dist' and 'p'")
        return invariant_distribution(dist, values.get('p', 0.0))
    raise ValueError(
        f"Unknown rate distribution: {name}. Valid distributions: Constant, Gamma, Invariant"
    )
