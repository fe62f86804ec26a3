"""
seqsuite: population genetics statistics and sequence simulation.

Two command line tools sit on top of a small library of alignments, trees,
substitution models and estimators:

- ``seqsuite popstats`` computes summary statistics (segregating sites,
  Tajima's D, Fu and Li's D*/F*, PiN/PiS, McDonald-Kreitman table) from an
  alignment with an optional outgroup.
- ``seqsuite seqgen`` simulates sequences along one tree, or along a series
  of trees each covering a segment of the alignment.

Quick Start
-----------
Compute statistics:

>>> from seqsuite import Alignment, get_alphabet, tajima_d
>>> aln = Alignment.read("alignment.fasta", get_alphabet("DNA"))
>>> print(tajima_d(aln))

Simulate sequences:

>>> from seqsuite import Tree, SequenceSimulator, SubstitutionModelSet, get_substitution_model
>>> model = get_substitution_model("HKY85(kappa=2, theta=0.6)", get_alphabet("DNA"))
>>> tree = Tree.from_newick("((A:0.1,B:0.2):0.05,C:0.3);")
>>> sim = SequenceSimulator(SubstitutionModelSet.homogeneous(model), tree, seed=42)
>>> sim.simulate(1000).write("sim.fasta")
"""

__version__ = "0.1.0"

# I/O classes
from .io.alphabet import Alphabet, GeneticCode, get_alphabet
from .io.sequences import Alignment
from .io.trees import Tree, read_tree_segments

# Statistics
from .analysis import (
    PolymorphismAlignment,
    fu_li_d_star,
    fu_li_f_star,
    mk_table,
    number_of_polymorphic_sites,
    number_of_singletons,
    tajima83,
    tajima_d,
    watterson75,
)

# Models and simulation
from .models import (
    SubstitutionModelSet,
    get_rate_distribution,
    get_root_frequencies,
    get_substitution_model,
)
from .simulate import SequenceSimulator, simulate_segments

__all__ = [
    "Alphabet",
    "GeneticCode",
    "get_alphabet",
    "Alignment",
    "Tree",
    "read_tree_segments",
    "PolymorphismAlignment",
    "number_of_polymorphic_sites",
    "number_of_singletons",
    "watterson75",
    "tajima83",
    "tajima_d",
    "fu_li_d_star",
    "fu_li_f_star",
    "mk_table",
    "SubstitutionModelSet",
    "get_substitution_model",
    "get_root_frequencies",
    "get_rate_distribution",
    "SequenceSimulator",
    "simulate_segments",
]
