"""
Input/Output modules for alphabets, sequence alignments and phylogenetic trees.

This module provides classes for reading and working with:

- **Alphabets**: DNA, RNA, Protein and Codon states, genetic codes
- **Sequence alignments**: FASTA and PHYLIP formats
- **Phylogenetic trees**: Newick format, multi-tree segment files

The main classes handle file parsing, writing and validation.
"""

from seqsuite.io.alphabet import Alphabet, GeneticCode, get_alphabet
from seqsuite.io.sequences import Alignment
from seqsuite.io.trees import Tree, TreeNode, read_tree_segments

__all__ = [
    "Alphabet",
    "GeneticCode",
    "get_alphabet",
    "Alignment",
    "Tree",
    "TreeNode",
    "read_tree_segments",
]
