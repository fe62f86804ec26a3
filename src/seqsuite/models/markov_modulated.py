"""
Markov-modulated (hidden rate class) substitution models.
"""

import numpy as np

from .base import SubstitutionModel


class TS98(SubstitutionModel):
    """
    Tuffley and Steel (1998) covarion model.

    Each character is either 'off' (no substitution) or 'on' (substitutes
    under the base model); it switches off->on at rate s1 and on->off at
    rate s2. The state space is twice the base model's, so the number of
    model states exceeds the alphabet size.

    Parameters
    ----------
    base : SubstitutionModel
        Model followed in the 'on' class
    s1 : float
        Switching rate off -> on
    s2 : float
        Switching rate on -> off

    Notes
    -----
    The 'on' rate is (s1 + s2) / s1 so that the mean substitution rate at
    equilibrium is 1. Model states are ordered off-class first.
    """

    name = "TS98"
    parameter_defaults = {'s1': 1.0, 's2': 1.0}

    def __init__(self, base: SubstitutionModel, **params):
        self.base = base
        own = {k: v for k, v in params.items() if k in self.parameter_defaults}
        base_overrides = {k: v for k, v in params.items() if k not in self.parameter_defaults}
        if base_overrides:
            self.base = base.with_parameters(**base_overrides)
        super().__init__(base.alphabet, **own)

    @property
    def states(self) -> np.ndarray:
        return np.tile(self.base.states, 2)

    @property
    def rate_class_frequencies(self) -> np.ndarray:
        s1, s2 = self.parameters['s1'], self.parameters['s2']
        return np.array([s2, s1]) / (s1 + s2)

    def _build(self):
        s1, s2 = self.parameters['s1'], self.parameters['s2']
        n = self.base.n_states
        on_rate = (s1 + s2) / s1
        switching = np.array([[-s1, s1], [s2, -s2]])
        Q = np.kron(np.diag([0.0, on_rate]), self.base.generator) + np.kron(switching, np.eye(n))
        pi = np.kron(self.rate_class_frequencies, self.base.frequencies)
        return Q, pi

    @property
    def parameter_names(self) -> list[str]:
        return list(self.parameters) + self.base.parameter_names

    def with_parameters(self, **overrides) -> "TS98":
        params = dict(self.parameters)
        params.update(overrides)
        return TS98(self.base, **params)

    def describe(self) -> str:
        p = self.parameters
        return f"{self.name}(model={self.base.describe()}, s1={p['s1']:g}, s2={p['s2']:g})"
