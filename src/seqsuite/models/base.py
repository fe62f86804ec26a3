"""
Base class for substitution models.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

import numpy as np

from ..core.matrix import create_reversible_Q, matrix_exponential
from ..io.alphabet import Alphabet


class SubstitutionModel(ABC):
    """
    Continuous-time Markov model of character substitution.

    Subclasses declare their parameters in ``parameter_defaults`` (with
    open-interval bounds in ``parameter_bounds``) and build the rate matrix
    and equilibrium frequencies in ``_build``.

    Parameters
    ----------
    alphabet : Alphabet
        Alphabet of the simulated characters
    **params
        Values for the model parameters; unknown names are rejected

    Attributes
    ----------
    parameters : dict
        Current parameter values
    states : np.ndarray
        Alphabet state code of each model state
    """

    name = "Model"
    parameter_defaults: Dict[str, float] = {}
    parameter_bounds: Dict[str, tuple] = {}

    def __init__(self, alphabet: Alphabet, **params):
        self.alphabet = alphabet
        self.parameters = dict(self.parameter_defaults)
        for key, value in params.items():
            if key not in self.parameters:
                raise ValueError(
                    f"Unknown parameter '{key}' for model {self.name}. "
                    f"Valid parameters: {', '.join(self.parameters) or 'none'}"
                )
            self.parameters[key] = float(value)
        self._validate_parameters()
        self._Q: Optional[np.ndarray] = None
        self._pi: Optional[np.ndarray] = None

    def _validate_parameters(self):
        for key, value in self.parameters.items():
            low, high = self.parameter_bounds.get(key, (0.0, np.inf))
            if not low < value < high:
                raise ValueError(
                    f"Parameter {self.name}.{key} = {value} is out of bounds ({low}, {high})"
                )

    @abstractmethod
    def _build(self) -> tuple[np.ndarray, np.ndarray]:
        """
        Build the rate matrix and equilibrium frequencies.

        Returns
        -------
        Q : np.ndarray, shape (n_states, n_states)
            Rate matrix, normalized to one substitution per unit time
        pi : np.ndarray, shape (n_states,)
            Equilibrium frequencies
        """
        pass

    def _ensure_built(self):
        if self._Q is None:
            self._Q, self._pi = self._build()

    @property
    def states(self) -> np.ndarray:
        return np.arange(self.alphabet.size)

    @property
    def n_states(self) -> int:
        return len(self.states)

    @property
    def generator(self) -> np.ndarray:
        """Rate matrix Q."""
        self._ensure_built()
        return self._Q

    @property
    def frequencies(self) -> np.ndarray:
        """Equilibrium frequencies over model states."""
        self._ensure_built()
        return self._pi

    @property
    def state_labels(self) -> list[str]:
        return [self.alphabet.states[s] for s in self.states]

    def transition_matrix(self, t: float) -> np.ndarray:
        """P(t) = exp(Qt)."""
        return matrix_exponential(self.generator, t)

    @property
    def parameter_names(self) -> list[str]:
        """Names accepted by with_parameters."""
        return list(self.parameters)

    def with_parameters(self, **overrides) -> "SubstitutionModel":
        """Copy of the model with some parameters changed."""
        params = dict(self.parameters)
        params.update(overrides)
        return type(self)(self.alphabet, **params)

    def describe(self) -> str:
        """Description in procedure syntax."""
        args = ", ".join(f"{k}={v:g}" for k, v in self.parameters.items())
        return f"{self.name}({args})"

    def __repr__(self) -> str:
        return self.describe()


class JC69(SubstitutionModel):
    """
    Jukes-Cantor model: equal rates and frequencies over all states.

    Works for any non-codon alphabet (JC69 for nucleotides, Poisson-like
    model for proteins).
    """

    name = "JC69"

    def _build(self):
        n = self.alphabet.size
        pi = np.ones(n) / n
        Q = create_reversible_Q(np.ones((n, n)), pi)
        return Q, pi
