"""
Matrix operations for substitution models.

This module provides core matrix operations needed for computing transition
probabilities along branches.
"""

import numpy as np
from scipy.linalg import expm


def matrix_exponential(Q: np.ndarray, t: float) -> np.ndarray:
    """
    Compute transition probability matrix P(t) = exp(Q*t).

    Uses scipy's matrix exponential (Padé approximation with scaling and
    squaring). Tiny negative entries from rounding are clipped and rows
    renormalized so that P can be sampled from directly.

    Parameters
    ----------
    Q : ndarray, shape (n, n)
        Rate matrix (instantaneous substitution rate matrix)
    t : float
        Branch length (time)

    Returns
    -------
    P : ndarray, shape (n, n)
        Transition probability matrix where P[i,j] is the probability
        of state i transitioning to state j over time t

    Examples
    --------
    >>> # JC69 model (equal rates)
    >>> alpha = 0.25
    >>> Q = np.array([[-3*alpha, alpha, alpha, alpha],
    ...               [alpha, -3*alpha, alpha, alpha],
    ...               [alpha, alpha, -3*alpha, alpha],
    ...               [alpha, alpha, alpha, -3*alpha]])
    >>> P = matrix_exponential(Q, 0.1)
    >>> np.sum(P[0])  # Row sum should be 1
    1.0
    """
    P = expm(Q * t)
    P = np.maximum(P, 0.0)
    return P / P.sum(axis=1, keepdims=True)


def create_reversible_Q(
    rates: np.ndarray, pi: np.ndarray, normalize: bool = True
) -> np.ndarray:
    """
    Create a reversible rate matrix from exchangeability rates and stationary distribution.

    Parameters
    ----------
    rates : ndarray, shape (n, n)
        Symmetric exchangeability matrix (r[i,j] = r[j,i])
    pi : ndarray, shape (n,)
        Stationary distribution (equilibrium frequencies)
    normalize : bool, default=True
        If True, scale Q so that expected rate is 1 substitution per time unit

    Returns
    -------
    Q : ndarray, shape (n, n)
        Reversible rate matrix satisfying detailed balance

    Notes
    -----
    The rate matrix is constructed as Q[i,j] = r[i,j] * pi[j] for i ≠ j,
    and Q[i,i] = -sum(Q[i,j] for j ≠ i).

    Examples
    --------
    >>> # JC69 model
    >>> rates = np.ones((4, 4)) - np.eye(4)  # All rates equal
    >>> pi = np.ones(4) / 4
    >>> Q = create_reversible_Q(rates, pi)
    """
    Q = rates * pi[np.newaxis, :]

    # Zero out diagonal first (in case rates has non-zero diagonal)
    np.fill_diagonal(Q, 0.0)
    np.fill_diagonal(Q, -np.sum(Q, axis=1))

    if normalize:
        Q = normalize_rate_matrix(Q, pi)

    return Q


def normalize_rate_matrix(Q: np.ndarray, pi: np.ndarray) -> np.ndarray:
    """
    Scale Q to one expected substitution per unit time.

    Expected rate = -sum(π_i * Q[i,i]).
    """
    expected_rate = -np.dot(pi, Q.diagonal())
    if expected_rate <= 0:
        raise ValueError("Rate matrix has no substitution at equilibrium")
    return Q / expected_rate
