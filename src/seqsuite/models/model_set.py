"""
Assignment of substitution models to the branches of a tree.
"""

import logging
from typing import Optional, Sequence

import numpy as np

from .base import SubstitutionModel
from ..io.trees import Tree

logger = logging.getLogger(__name__)


class SubstitutionModelSet:
    """
    Substitution models attached to branches, plus root frequencies.

    A homogeneous set holds a single model used on every branch and does
    not depend on a particular tree. Non-homogeneous sets map the id of the
    node below each branch to one of their models.

    Parameters
    ----------
    models : list[SubstitutionModel]
        Distinct models of the set; all must share the same states
    assignment : dict[int, int], optional
        Node id -> index in models. None for a homogeneous set.
    root_frequencies : np.ndarray, optional
        State frequencies at the root (default: equilibrium of the first model)
    """

    def __init__(
        self,
        models: Sequence[SubstitutionModel],
        assignment: Optional[dict[int, int]] = None,
        root_frequencies: Optional[np.ndarray] = None,
    ):
        if not models:
            raise ValueError("A model set needs at least one model")
        self.models = list(models)
        reference = self.models[0].states
        for model in self.models[1:]:
            if not np.array_equal(model.states, reference):
                raise ValueError(
                    f"Models {self.models[0].name} and {model.name} do not share the same states"
                )
        self.assignment = assignment
        if root_frequencies is None:
            root_frequencies = self.models[0].frequencies
        root_frequencies = np.asarray(root_frequencies, dtype=float)
        if root_frequencies.shape != (self.n_states,):
            raise ValueError(
                f"Root frequencies have {root_frequencies.size} values for {self.n_states} states"
            )
        self.root_frequencies = root_frequencies

    @classmethod
    def homogeneous(
        cls, model: SubstitutionModel, root_frequencies: Optional[np.ndarray] = None
    ) -> "SubstitutionModelSet":
        return cls([model], None, root_frequencies)

    @classmethod
    def one_per_branch(
        cls,
        model: SubstitutionModel,
        tree: Tree,
        root_frequencies: Optional[np.ndarray] = None,
        shared_parameters: Sequence[str] = (),
        branch_parameters: Optional[dict[int, dict[str, float]]] = None,
    ) -> "SubstitutionModelSet":
        """
        One copy of a model per branch.

        Parameters
        ----------
        model : SubstitutionModel
            Model copied on each branch
        tree : Tree
            Tree whose branches receive the models
        root_frequencies : np.ndarray, optional
            Root frequencies
        shared_parameters : sequence of str
            Parameters that keep one value over all branches
        branch_parameters : dict, optional
            Node id -> {parameter: value} overrides for non-shared parameters

        Raises
        ------
        ValueError
            If a shared or unknown parameter is overridden, or an override
            refers to a node that has no branch.
        """
        for name in shared_parameters:
            if name not in model.parameter_names:
                raise ValueError(f"Shared parameter '{name}' is not a parameter of {model.name}")
        branch_parameters = branch_parameters or {}
        branch_ids = tree.branch_ids()
        for node_id, overrides in branch_parameters.items():
            if node_id not in branch_ids:
                raise ValueError(f"Node {node_id} has no branch in the tree")
            for name in overrides:
                if name not in model.parameter_names:
                    raise ValueError(f"Unknown parameter '{name}' for model {model.name}")
                if name in shared_parameters:
                    raise ValueError(
                        f"Parameter '{name}' is shared among branches and cannot be set for node {node_id}"
                    )

        models = []
        assignment = {}
        for node_id in branch_ids:
            overrides = branch_parameters.get(node_id, {})
            models.append(model.with_parameters(**overrides) if overrides else model)
            assignment[node_id] = len(models) - 1
        logger.info("Non-homogeneous model with %d branch models", len(models))
        return cls(models, assignment, root_frequencies)

    @classmethod
    def general(
        cls,
        models: Sequence[SubstitutionModel],
        nodes: Sequence[Sequence[int]],
        tree: Tree,
        root_frequencies: Optional[np.ndarray] = None,
    ) -> "SubstitutionModelSet":
        """
        Arbitrary models on arbitrary branches.

        Parameters
        ----------
        models : sequence of SubstitutionModel
            The models
        nodes : sequence of sequences of int
            For each model, the ids of the nodes whose branch it is used on
        tree : Tree
            Tree whose branches receive the models

        Raises
        ------
        ValueError
            If a branch gets no model or more than one, or a node id does not
            exist in the tree.
        """
        if len(models) != len(nodes):
            raise ValueError(f"{len(models)} models given with {len(nodes)} node lists")
        branch_ids = set(tree.branch_ids())
        assignment = {}
        for index, node_ids in enumerate(nodes):
            for node_id in node_ids:
                if node_id not in branch_ids:
                    raise ValueError(f"Node {node_id} has no branch in the tree")
                if node_id in assignment:
                    raise ValueError(
                        f"Node {node_id} is assigned to models {assignment[node_id] + 1} and {index + 1}"
                    )
                assignment[node_id] = index
        missing = sorted(branch_ids - set(assignment))
        if missing:
            raise ValueError(f"No model assigned to nodes: {', '.join(map(str, missing))}")
        return cls(models, assignment, root_frequencies)

    @property
    def is_homogeneous(self) -> bool:
        return self.assignment is None

    @property
    def states(self) -> np.ndarray:
        return self.models[0].states

    @property
    def n_states(self) -> int:
        return self.models[0].n_states

    @property
    def alphabet(self):
        return self.models[0].alphabet

    def model_for(self, node_id: int) -> SubstitutionModel:
        """Model on the branch above a node."""
        if self.assignment is None:
            return self.models[0]
        if node_id not in self.assignment:
            raise ValueError(f"No model assigned to node {node_id}")
        return self.models[self.assignment[node_id]]

    def check_tree(self, tree: Tree) -> None:
        """Verify that every branch of a tree has a model."""
        if self.assignment is None:
            return
        missing = [node_id for node_id in tree.branch_ids() if node_id not in self.assignment]
        if missing:
            raise ValueError(f"No model assigned to nodes: {', '.join(map(str, missing))}")
