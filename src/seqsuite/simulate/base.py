"""
Simulation of sequence evolution along a tree.
"""

import logging
from typing import Optional, Union

import numpy as np

from ..io.sequences import Alignment
from ..io.trees import Tree, TreeNode
from ..models.model_set import SubstitutionModelSet
from ..models.rates import RateDistribution, constant_distribution

logger = logging.getLogger(__name__)


class SequenceSimulator:
    """
    Simulate sequences on a tree under a set of substitution models.

    Parameters
    ----------
    model_set : SubstitutionModelSet
        Models on the branches and root frequencies
    tree : Tree
        Phylogenetic tree with branch lengths
    rate_distribution : RateDistribution, optional
        Distribution of rates across sites (default: constant)
    seed : int or numpy.random.Generator, optional
        Random seed, or an existing generator to draw from

    Attributes
    ----------
    rng : numpy.random.Generator
        Random number generator

    Examples
    --------
    >>> from seqsuite.io.alphabet import DNA
    >>> from seqsuite.models import K80, SubstitutionModelSet
    >>> tree = Tree.from_newick("((A:0.1,B:0.2):0.15,C:0.3);")
    >>> sim = SequenceSimulator(SubstitutionModelSet.homogeneous(K80(DNA, kappa=2)), tree, seed=1)
    >>> sim.simulate(50).n_sites
    50
    """

    def __init__(
        self,
        model_set: SubstitutionModelSet,
        tree: Tree,
        rate_distribution: Optional[RateDistribution] = None,
        seed: Union[int, np.random.Generator, None] = None,
    ):
        self.model_set = model_set
        self.tree = tree
        self.rate_distribution = rate_distribution or constant_distribution()
        self.rng = np.random.default_rng(seed)

        self._validate_tree()

    def _validate_tree(self):
        """Ensure tree is suitable for simulation."""
        for node in self.tree.preorder():
            if node.parent is not None and node.branch_length < 0:
                raise ValueError(
                    f"Node {node.name if node.name else node.id} has a negative branch length"
                )
        if len(set(self.tree.leaf_names)) != len(self.tree.leaf_names):
            raise ValueError("Leaf names must be unique for simulation")
        self.model_set.check_tree(self.tree)

    def _sample_states(self, probabilities: np.ndarray) -> np.ndarray:
        """Draw one state per row of a matrix of probability vectors."""
        cumulative = np.cumsum(probabilities, axis=1)
        u = self.rng.random(probabilities.shape[0])
        states = (u[:, np.newaxis] > cumulative).sum(axis=1)
        return np.minimum(states, probabilities.shape[1] - 1)

    def _generate_ancestral_sequence(self, n_sites: int) -> np.ndarray:
        """Sample root states from the root frequencies."""
        freqs = self.model_set.root_frequencies
        return self._sample_states(np.broadcast_to(freqs, (n_sites, len(freqs))))

    def _evolve_sequence(
        self, parent_seq: np.ndarray, node: TreeNode, rates: np.ndarray
    ) -> np.ndarray:
        """
        Evolve a sequence along the branch above a node.

        Sites are grouped by rate so that one transition matrix is computed
        per distinct rate.
        """
        model = self.model_set.model_for(node.id)
        child_seq = np.empty_like(parent_seq)
        for rate in np.unique(rates):
            sites = np.flatnonzero(rates == rate)
            P = model.transition_matrix(node.branch_length * rate)
            child_seq[sites] = self._sample_states(P[parent_seq[sites]])
        return child_seq

    def simulate(self, n_sites: int) -> Alignment:
        """
        Simulate sites with rates drawn from the rate distribution.

        Parameters
        ----------
        n_sites : int
            Number of sites to simulate

        Returns
        -------
        Alignment
            Leaf sequences, in the tree's leaf order
        """
        if n_sites < 0:
            raise ValueError(f"Number of sites must be non-negative, got {n_sites}")
        rates = self.rate_distribution.sample(n_sites, self.rng)
        return self.simulate_sites(rates)

    def simulate_sites(self, rates: np.ndarray) -> Alignment:
        """
        Simulate one site per given rate.

        Parameters
        ----------
        rates : np.ndarray
            Relative substitution rate of each site

        Returns
        -------
        Alignment
            Leaf sequences, in the tree's leaf order
        """
        rates = np.asarray(rates, dtype=float)
        if np.any(rates < 0):
            raise ValueError("Site rates must be non-negative")
        n_sites = len(rates)
        logger.debug("Simulating %d sites on a tree with %d leaves", n_sites, self.tree.n_leaves)

        sequences = {self.tree.root.id: self._generate_ancestral_sequence(n_sites)}
        for parent, child in self.tree.get_branches():
            sequences[child.id] = self._evolve_sequence(sequences[parent.id], child, rates)

        # Model states map to alphabet codes; hidden rate classes collapse here
        states = self.model_set.states
        leaves = self.tree.leaves()
        names = [leaf.name if leaf.name else str(leaf.id) for leaf in leaves]
        matrix = np.vstack([states[sequences[leaf.id]] for leaf in leaves])
        return Alignment(names=names, sequences=matrix, alphabet=self.model_set.alphabet)
