"""
Core numerical routines shared by substitution models and simulators.

- **Matrix operations**: reversible rate matrices and matrix exponential

These are expert-level functions typically not needed by end users.
"""

from seqsuite.core.matrix import create_reversible_Q, matrix_exponential

__all__ = ["matrix_exponential", "create_reversible_Q"]
