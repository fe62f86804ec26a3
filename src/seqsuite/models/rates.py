"""
Discrete distributions of substitution rates across sites.
"""

from dataclasses import dataclass

import numpy as np
from scipy.special import gammainc
from scipy.stats import gamma


@dataclass
class RateDistribution:
    """
    Discrete rate distribution.

    Attributes
    ----------
    name : str
        Distribution description
    rates : np.ndarray
        Rate of each category
    probabilities : np.ndarray
        Probability of each category (sums to 1)
    """

    name: str
    rates: np.ndarray
    probabilities: np.ndarray

    def __post_init__(self):
        self.rates = np.asarray(self.rates, dtype=float)
        self.probabilities = np.asarray(self.probabilities, dtype=float)
        if len(self.rates) != len(self.probabilities):
            raise ValueError("rates and probabilities must have same length")
        if not np.isclose(self.probabilities.sum(), 1.0):
            raise ValueError(f"Category probabilities must sum to 1, got {self.probabilities.sum()}")

    @property
    def n_categories(self) -> int:
        return len(self.rates)

    @property
    def mean(self) -> float:
        return float(np.dot(self.rates, self.probabilities))

    def sample(self, n_sites: int, rng: np.random.Generator) -> np.ndarray:
        """Draw one rate per site."""
        if self.n_categories == 1:
            return np.full(n_sites, self.rates[0])
        categories = rng.choice(self.n_categories, size=n_sites, p=self.probabilities)
        return self.rates[categories]


def constant_distribution(rate: float = 1.0) -> RateDistribution:
    """Single category: every site evolves at the same rate."""
    return RateDistribution("Constant()", [rate], [1.0])


def gamma_distribution(n: int = 4, alpha: float = 1.0) -> RateDistribution:
    """
    Discretized gamma distribution with mean 1 (Yang 1994).

    Categories have equal probability; each category's rate is the mean of
    the gamma distribution over that category.

    Parameters
    ----------
    n : int
        Number of categories
    alpha : float
        Shape parameter (rate parameter equals alpha, so the mean is 1)
    """
    if n < 1:
        raise ValueError(f"Gamma distribution needs at least one category, got {n}")
    if alpha <= 0:
        raise ValueError(f"Gamma shape parameter must be positive, got {alpha}")

    # Category boundaries at quantiles k/n
    bounds = gamma.ppf(np.arange(n + 1) / n, alpha, scale=1.0 / alpha)
    # Mean of each category via the incomplete gamma function of shape alpha+1
    cumulative = gammainc(alpha + 1, bounds * alpha)
    cumulative[-1] = 1.0
    rates = n * np.diff(cumulative)
    return RateDistribution(f"Gamma(n={n}, alpha={alpha:g})", rates, np.ones(n) / n)


def invariant_distribution(dist: RateDistribution, p: float) -> RateDistribution:
    """
    Mixture of invariant sites (rate 0, probability p) with another distribution.

    Rates of the variable categories are divided by (1 - p) so that the mean
    rate stays 1.
    """
    if not 0.0 <= p < 1.0:
        raise ValueError(f"Proportion of invariant sites must be in [0, 1), got {p}")
    rates = np.concatenate([[0.0], dist.rates / (1.0 - p)])
    probabilities = np.concatenate([[p], dist.probabilities * (1.0 - p)])
    return RateDistribution(f"Invariant(dist={dist.name}, p={p:g})", rates, probabilities)
