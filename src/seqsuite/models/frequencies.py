"""
Root frequency sets for non-homogeneous models.
"""

import numpy as np

from .base import SubstitutionModel
from .markov_modulated import TS98
from .nucleotide import theta_frequencies


def _expand_hidden_classes(model: SubstitutionModel, freqs: np.ndarray) -> np.ndarray:
    """Spread frequencies over the rate classes of a hidden-rate model, equally."""
    if isinstance(model, TS98):
        return np.kron(np.ones(2) / 2, freqs)
    return freqs


def _base_model(model: SubstitutionModel) -> SubstitutionModel:
    return model.base if isinstance(model, TS98) else model


def fixed_frequencies(model: SubstitutionModel) -> np.ndarray:
    """Uniform frequencies over the model states."""
    base = _base_model(model)
    freqs = np.ones(base.n_states) / base.n_states
    return _expand_hidden_classes(model, freqs)


def gc_frequencies(model: SubstitutionModel, theta: float) -> np.ndarray:
    """Nucleotide frequencies from a GC content, equal A/T and G/C."""
    base = _base_model(model)
    if not base.alphabet.is_nucleic:
        raise ValueError("GC frequency set requires a nucleotide alphabet")
    if not 0.0 <= theta <= 1.0:
        raise ValueError(f"GC content must be in [0, 1], got {theta}")
    return _expand_hidden_classes(model, theta_frequencies(theta))


def full_frequencies(model: SubstitutionModel, values: dict[str, float]) -> np.ndarray:
    """
    Frequencies given state by state.

    Parameters
    ----------
    model : SubstitutionModel
        Model whose states the frequencies refer to
    values : dict
        Frequency of each state label (e.g. ``{'A': 0.3, 'C': 0.2, ...}``);
        every model state must be given and the values must sum to 1
    """
    base = _base_model(model)
    labels = base.state_labels
    if base.alphabet.name == 'RNA' or base.alphabet.letter == 'RNA':
        values = {key.upper().replace('U', 'T'): v for key, v in values.items()}
    else:
        values = {key.upper(): v for key, v in values.items()}

    unknown = set(values) - set(labels)
    if unknown:
        raise ValueError(f"Unknown states in frequency set: {', '.join(sorted(unknown))}")
    missing = [label for label in labels if label not in values]
    if missing:
        raise ValueError(f"Missing frequencies for states: {', '.join(missing)}")

    freqs = np.array([float(values[label]) for label in labels])
    if np.any(freqs < 0) or not np.isclose(freqs.sum(), 1.0):
        raise ValueError(f"Frequencies must be non-negative and sum to 1, got sum {freqs.sum()}")
    return _expand_hidden_classes(model, freqs)
