"""
Output of simulated data.
"""

import logging
from pathlib import Path

from ..io.sequences import Alignment
from ..io.trees import Tree

logger = logging.getLogger(__name__)


class SimulationOutput:
    """
    Write simulated alignments and the trees they were simulated on.
    """

    @staticmethod
    def write_sequences(alignment: Alignment, output_path: Path | str, format: str = "Fasta"):
        """
        Write the simulated alignment.

        Parameters
        ----------
        alignment : Alignment
            Simulated sequences
        output_path : Path or str
            Output file path
        format : str
            'Fasta' or 'Phylip'
        """
        alignment.write(output_path, format)
        logger.info(
            "Wrote %d sequences of %d sites to %s", alignment.n_species, alignment.n_sites, output_path
        )

    @staticmethod
    def write_tagged_tree(tree: Tree, output_path: Path | str):
        """
        Write a tree with node ids made visible.

        Leaves are renamed '<id>_<name>' and internal nodes are labelled with
        their id, so that ids can be picked for per-branch model options.
        """
        with open(Path(output_path), 'w') as f:
            f.write(tree.to_newick(tag_ids=True) + '\n')
        logger.info("Wrote tagged tree to %s", output_path)
