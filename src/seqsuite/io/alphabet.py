"""
Sequence alphabets and genetic codes.
"""

from dataclasses import dataclass, field
from typing import Optional

import numpy as np


# Special codes for missing data
GAP_CODE = -1  # Gap ('-' or '---')
UNKNOWN_CODE = -2  # Ambiguous or unknown character

# Nucleotides are ordered T, C, A, G so that codon i has index n0*16 + n1*4 + n2
NUCLEOTIDES = 'TCAG'
NUCLEOTIDE_TO_INDEX = {nuc: i for i, nuc in enumerate(NUCLEOTIDES)}
INDEX_TO_NUCLEOTIDE = {i: nuc for i, nuc in enumerate(NUCLEOTIDES)}

CODONS = [a + b + c for a in NUCLEOTIDES for b in NUCLEOTIDES for c in NUCLEOTIDES]
CODON_TO_INDEX = {codon: i for i, codon in enumerate(CODONS)}
INDEX_TO_CODON = {i: codon for i, codon in enumerate(CODONS)}

AMINO_ACIDS = 'ARNDCQEGHILKMFPSTWYV'

# IUPAC ambiguity codes, read as unknown states
_NUCLEOTIDE_AMBIGUITY = set('NRYKMSWBDHV?X')
_PROTEIN_AMBIGUITY = set('XBZJ*?')
_GAP_CHARS = set('-.')

# NCBI translation tables, amino acids listed in TCAG codon order
GENETIC_CODE_TABLES = {
    'Standard':
        'FFLLSSSSYY**CC*WLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG',
    'VertebrateMitochondrial':
        'FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSS**VVVVAAAADDEEGGGG',
    'YeastMitochondrial':
        'FFLLSSSSYY**CCWWTTTTPPPPHHQQRRRRIIMMTTTTNNKKSSRRVVVVAAAADDEEGGGG',
    'MoldMitochondrial':
        'FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIIMTTTTNNKKSSRRVVVVAAAADDEEGGGG',
    'InvertebrateMitochondrial':
        'FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSSSSVVVVAAAADDEEGGGG',
    'EchinodermMitochondrial':
        'FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIIMTTTTNNNKSSSSVVVVAAAADDEEGGGG',
    'AscidianMitochondrial':
        'FFLLSSSSYY**CCWWLLLLPPPPHHQQRRRRIIMMTTTTNNKKSSGGVVVVAAAADDEEGGGG',
}


@dataclass(frozen=True)
class Alphabet:
    """
    Ordered set of character states.

    Attributes
    ----------
    name : str
        Alphabet name ('DNA', 'RNA', 'Protein' or 'Codon')
    states : tuple[str, ...]
        State labels; codon states are nucleotide triplets
    letter : str, optional
        Nucleotide alphabet of a codon alphabet ('DNA' or 'RNA')
    """

    name: str
    states: tuple
    letter: Optional[str] = None
    _index: dict = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        object.__setattr__(self, '_index', {s: i for i, s in enumerate(self.states)})

    @property
    def size(self) -> int:
        """Number of resolved states."""
        return len(self.states)

    @property
    def width(self) -> int:
        """Number of characters per state (3 for codons)."""
        return 3 if self.is_codon else 1

    @property
    def is_codon(self) -> bool:
        return self.name == 'Codon'

    @property
    def is_nucleic(self) -> bool:
        return self.name in ('DNA', 'RNA')

    def _normalize(self, text: str) -> str:
        text = text.upper()
        if self.name == 'RNA' or self.letter == 'RNA':
            text = text.replace('U', 'T')
        return text

    def _denormalize(self, text: str) -> str:
        if self.name == 'RNA' or self.letter == 'RNA':
            return text.replace('T', 'U')
        return text

    def char_to_int(self, chars: str) -> int:
        """
        Encode one state.

        Raises
        ------
        ValueError
            If the characters are not valid for this alphabet
        """
        key = self._normalize(chars)
        if key in self._index:
            return self._index[key]
        if all(c in _GAP_CHARS for c in key):
            return GAP_CODE
        ambiguous = _PROTEIN_AMBIGUITY if self.name == 'Protein' else _NUCLEOTIDE_AMBIGUITY
        valid = set(NUCLEOTIDES) if self.name != 'Protein' else set(AMINO_ACIDS)
        if all(c in ambiguous or c in valid or c in _GAP_CHARS for c in key):
            return UNKNOWN_CODE
        raise ValueError(f"Invalid character(s) '{chars}' for alphabet {self.name}")

    def int_to_char(self, code: int) -> str:
        """Decode one state code."""
        code = int(code)
        if code == GAP_CODE:
            return '-' * self.width
        if code == UNKNOWN_CODE:
            return ('X' if self.name == 'Protein' else 'N') * self.width
        return self._denormalize(self.states[code])

    def encode(self, sequence: str) -> np.ndarray:
        """Encode a character string as an array of state codes."""
        if len(sequence) % self.width != 0:
            raise ValueError(
                f"Sequence length {len(sequence)} not divisible by {self.width}"
            )
        n = len(sequence) // self.width
        encoded = np.empty(n, dtype=np.int8)
        for j in range(n):
            encoded[j] = self.char_to_int(sequence[j * self.width:(j + 1) * self.width])
        return encoded

    def decode(self, codes: np.ndarray) -> str:
        """Decode an array of state codes to a character string."""
        return ''.join(self.int_to_char(c) for c in codes)

    def __repr__(self) -> str:
        if self.is_codon:
            return f"Alphabet(Codon(letter={self.letter}))"
        return f"Alphabet({self.name})"


DNA = Alphabet('DNA', tuple(NUCLEOTIDES))
RNA = Alphabet('RNA', tuple(NUCLEOTIDES))
PROTEIN = Alphabet('Protein', tuple(AMINO_ACIDS))


def codon_alphabet(letter: str = 'DNA') -> Alphabet:
    """Codon alphabet (all 64 triplets, stop codons included)."""
    if letter not in ('DNA', 'RNA'):
        raise ValueError(f"Codon alphabet letter must be DNA or RNA, got {letter}")
    return Alphabet('Codon', tuple(CODONS), letter=letter)


def get_alphabet(name: str, letter: Optional[str] = None) -> Alphabet:
    """
    Look up an alphabet by name.

    Parameters
    ----------
    name : str
        'DNA', 'RNA', 'Protein' or 'Codon'
    letter : str, optional
        Nucleotide alphabet for codons (default 'DNA')
    """
    if name == 'DNA':
        return DNA
    if name == 'RNA':
        return RNA
    if name in ('Protein', 'Proteins'):
        return PROTEIN
    if name == 'Codon':
        return codon_alphabet(letter or 'DNA')
    raise ValueError(f"Alphabet not known: {name}")


def is_transition(nuc1: str, nuc2: str) -> bool:
    """Check if nucleotide change is a transition (A<->G or C<->T)."""
    transitions = {('A', 'G'), ('G', 'A'), ('C', 'T'), ('T', 'C')}
    return (nuc1, nuc2) in transitions


class GeneticCode:
    """
    Translation table from the 64 codons to amino acids.

    Parameters
    ----------
    name : str
        Table name, one of GENETIC_CODE_TABLES

    Examples
    --------
    >>> code = GeneticCode('Standard')
    >>> code.translate(CODON_TO_INDEX['ATG'])
    'M'
    >>> code.is_stop(CODON_TO_INDEX['TGA'])
    True
    """

    def __init__(self, name: str = 'Standard'):
        if name not in GENETIC_CODE_TABLES:
            raise ValueError(
                f"Unknown genetic code: {name}. "
                f"Valid codes: {', '.join(GENETIC_CODE_TABLES)}"
            )
        self.name = name
        self.table = GENETIC_CODE_TABLES[name]
        self.sense_codons = [i for i, aa in enumerate(self.table) if aa != '*']

    def translate(self, codon: int) -> str:
        """Amino acid letter of a codon index ('*' for stop)."""
        return self.table[codon]

    def is_stop(self, codon: int) -> bool:
        return self.table[codon] == '*'

    def are_synonymous(self, codon1: int, codon2: int) -> bool:
        """Check if two codons code for the same amino acid."""
        return self.table[codon1] == self.table[codon2]

    def is_four_fold_degenerated(self, codon: int) -> bool:
        """
        Check if the third position of a codon is four-fold degenerate.

        True when the four codons sharing the first two positions all code
        for the same amino acid.
        """
        if self.is_stop(codon):
            return False
        first = (codon // 4) * 4
        aa = self.table[codon]
        return all(self.table[first + k] == aa for k in range(4))

    def __repr__(self) -> str:
        return f"GeneticCode('{self.name}')"
