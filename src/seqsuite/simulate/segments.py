"""
Simulation along a sequence of trees, each covering a segment of the alignment.
"""

import logging
import math
from typing import Optional, Sequence, Union

import numpy as np

from .base import SequenceSimulator
from ..io.sequences import Alignment
from ..io.trees import Tree
from ..models.model_set import SubstitutionModelSet
from ..models.rates import RateDistribution

logger = logging.getLogger(__name__)


def round_half_up(x: float) -> int:
    """
    Round to the nearest integer, halves away from zero (x >= 0).

    Examples
    --------
    >>> round_half_up(2.5)
    3
    >>> round_half_up(1.49)
    1
    """
    return int(math.floor(x + 0.5))


def segment_boundaries(positions: Sequence[float], n_sites: int) -> list[int]:
    """
    Site index at each segment boundary.

    Parameters
    ----------
    positions : sequence of float
        Segment boundaries as fractions of the alignment, from 0 to 1
    n_sites : int
        Total number of sites

    Returns
    -------
    list[int]
        Boundaries in sites; segment i covers sites [b[i], b[i+1])

    Examples
    --------
    >>> segment_boundaries([0, 0.5, 1], 100)
    [0, 50, 100]
    """
    return [round_half_up(p * n_sites) for p in positions]


def simulate_segments(
    trees: Sequence[Tree],
    positions: Sequence[float],
    model_set: SubstitutionModelSet,
    rate_distribution: Optional[RateDistribution] = None,
    n_sites: Optional[int] = None,
    site_rates: Optional[np.ndarray] = None,
    seed: Union[int, np.random.Generator, None] = None,
) -> Alignment:
    """
    Simulate an alignment whose sites evolve along different trees.

    Sites are split among segments proportionally to the boundary fractions;
    each segment is simulated with its own simulator and the results are
    concatenated in segment order, keeping the leaf order of the first tree.

    Parameters
    ----------
    trees : sequence of Tree
        One tree per segment, all with the same leaf names
    positions : sequence of float
        Segment boundaries (len(trees) + 1 values from 0 to 1)
    model_set : SubstitutionModelSet
        Models used on every tree
    rate_distribution : RateDistribution, optional
        Distribution of rates across sites, when site_rates is not given
    n_sites : int, optional
        Number of sites; required unless site_rates is given
    site_rates : np.ndarray, optional
        Rate of each site; the alignment then has one site per rate
    seed : int or numpy.random.Generator, optional
        Random seed

    Returns
    -------
    Alignment
        Simulated alignment
    """
    if len(positions) != len(trees) + 1:
        raise ValueError(f"{len(positions)} boundaries given for {len(trees)} trees")
    if site_rates is not None:
        site_rates = np.asarray(site_rates, dtype=float)
        n_sites = len(site_rates)
    elif n_sites is None:
        raise ValueError("Either a number of sites or site rates must be given")

    rng = np.random.default_rng(seed)
    bounds = segment_boundaries(positions, n_sites)

    result = None
    for i, tree in enumerate(trees):
        start, stop = bounds[i], bounds[i + 1]
        logger.info("Segment %d: sites %d to %d", i + 1, start + 1, stop)
        simulator = SequenceSimulator(model_set, tree, rate_distribution, seed=rng)
        if site_rates is not None:
            segment = simulator.simulate_sites(site_rates[start:stop])
        else:
            segment = simulator.simulate(stop - start)
        result = segment if result is None else result.concatenate(segment)

    return result
