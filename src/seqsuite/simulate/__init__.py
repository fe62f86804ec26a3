"""
Sequence simulation module for seqsuite.

Sequences evolve along a tree under a set of substitution models, with
rates varying across sites. Alignments can also be simulated along a
series of trees, each covering a segment of the sites.

Available tools:
- SequenceSimulator: simulation along one tree
- simulate_segments: simulation along successive tree segments
- SimulationOutput: writers for sequences and tagged trees
"""

from .base import SequenceSimulator
from .output import SimulationOutput
from .segments import round_half_up, segment_boundaries, simulate_segments

__all__ = [
    'SequenceSimulator',
    'SimulationOutput',
    'simulate_segments',
    'segment_boundaries',
    'round_half_up',
]
