"""
Sequence file parsing and alignment handling.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

import numpy as np

from .alphabet import Alphabet, GAP_CODE

SEQUENCE_FORMATS = ('Fasta', 'Phylip')


@dataclass
class Alignment:
    """
    Multiple sequence alignment.

    Attributes
    ----------
    names : list[str]
        Sequence names/labels
    sequences : ndarray, shape (n_species, n_sites)
        Encoded sequences as integer arrays (negative codes are gaps/unknown)
    alphabet : Alphabet
        Alphabet the states belong to
    positions : ndarray, shape (n_sites,)
        1-based position of each site in the original alignment
    """

    names: list[str]
    sequences: np.ndarray
    alphabet: Alphabet
    positions: Optional[np.ndarray] = field(default=None)

    def __post_init__(self):
        self.sequences = np.asarray(self.sequences, dtype=np.int8)
        if self.sequences.ndim != 2:
            raise ValueError("sequences must be a 2-dimensional array")
        if len(self.names) != self.sequences.shape[0]:
            raise ValueError(
                f"{len(self.names)} names given for {self.sequences.shape[0]} sequences"
            )
        if len(set(self.names)) != len(self.names):
            raise ValueError("Sequence names must be unique")
        if self.positions is None:
            self.positions = np.arange(1, self.sequences.shape[1] + 1)
        else:
            self.positions = np.asarray(self.positions, dtype=int)

    @property
    def n_species(self) -> int:
        """Number of sequences."""
        return self.sequences.shape[0]

    @property
    def n_sites(self) -> int:
        """Number of sites (alignment length, in states)."""
        return self.sequences.shape[1]

    @classmethod
    def from_strings(
        cls, names: Sequence[str], sequences: Sequence[str], alphabet: Alphabet
    ) -> "Alignment":
        """
        Build an alignment from raw character strings.

        Examples
        --------
        >>> from seqsuite.io.alphabet import DNA
        >>> aln = Alignment.from_strings(["a", "b"], ["ACGT", "ACGA"], DNA)
        >>> aln.n_sites
        4
        """
        sequences_clean = [re.sub(r'\s', '', seq) for seq in sequences]
        seq_lengths = {len(seq) for seq in sequences_clean}
        if len(seq_lengths) > 1:
            raise ValueError(f"Sequences have different lengths: {seq_lengths}")
        if not sequences_clean:
            return cls(names=[], sequences=np.zeros((0, 0), dtype=np.int8), alphabet=alphabet)
        encoded = np.vstack([alphabet.encode(seq) for seq in sequences_clean])
        return cls(names=list(names), sequences=encoded, alphabet=alphabet)

    @classmethod
    def from_phylip(cls, filepath: Path | str, alphabet: Alphabet) -> "Alignment":
        """
        Parse PHYLIP format alignment file (sequential).

        The first line contains n_sequences and sequence_length (in characters).
        A sequence name is either on its own line, followed by the sequence
        data, or separated from the data by whitespace on the same line.

        Parameters
        ----------
        filepath : Path or str
            Path to PHYLIP format file
        alphabet : Alphabet
            Alphabet of the sequences

        Returns
        -------
        Alignment
            Parsed alignment
        """
        filepath = Path(filepath)

        with open(filepath, 'r') as f:
            lines = [line.rstrip() for line in f.readlines()]

        # Parse header
        header = lines[0].strip().split()
        if len(header) < 2:
            raise ValueError(f"Invalid PHYLIP header: {lines[0]}")
        n_species = int(header[0])
        n_chars = int(header[1])

        names = []
        sequences_raw = []

        i = 1
        while i < len(lines) and len(names) < n_species:
            line = lines[i].strip()
            i += 1

            # Skip empty lines
            if not line:
                continue

            # Name on the same line as (part of) the data
            parts = line.split(None, 1)
            names.append(parts[0])
            seq_data = re.sub(r'\s', '', parts[1]) if len(parts) > 1 else ""

            # Collect sequence data until we have enough chars
            while len(seq_data) < n_chars and i < len(lines):
                clean = re.sub(r'\s', '', lines[i])
                i += 1
                seq_data += clean

            sequences_raw.append(seq_data)

        if len(names) != n_species:
            raise ValueError(f"Expected {n_species} sequences, found {len(names)}")

        # Verify all sequences have correct length
        for name, seq in zip(names, sequences_raw):
            if len(seq) != n_chars:
                raise ValueError(
                    f"Sequence {name} has length {len(seq)}, expected {n_chars}"
                )

        return cls.from_strings(names, sequences_raw, alphabet)

    @classmethod
    def from_fasta(cls, filepath: Path | str, alphabet: Alphabet) -> "Alignment":
        """
        Parse FASTA format alignment file.

        Parameters
        ----------
        filepath : Path or str
            Path to FASTA format file
        alphabet : Alphabet
            Alphabet of the sequences

        Returns
        -------
        Alignment
            Parsed alignment

        Examples
        --------
        >>> aln = Alignment.from_fasta("alignment.fasta", DNA)
        """
        filepath = Path(filepath)

        names = []
        sequences_raw = []

        with open(filepath, 'r') as f:
            current_name = None
            current_seq = []

            for line in f:
                line = line.strip()

                if not line:
                    continue

                if line.startswith('>'):
                    # Save previous sequence if exists
                    if current_name is not None:
                        names.append(current_name)
                        sequences_raw.append(''.join(current_seq))

                    # Start new sequence (name is the first word of the header)
                    header = line[1:].strip()
                    current_name = header.split()[0] if header else ""
                    current_seq = []
                else:
                    current_seq.append(line)

            # Don't forget last sequence
            if current_name is not None:
                names.append(current_name)
                sequences_raw.append(''.join(current_seq))

        if not names:
            raise ValueError(f"No sequences found in FASTA file {filepath}")

        return cls.from_strings(names, sequences_raw, alphabet)

    @classmethod
    def read(
        cls, filepath: Path | str, alphabet: Alphabet, format: str = "Fasta"
    ) -> "Alignment":
        """Read an alignment in one of SEQUENCE_FORMATS."""
        if format == 'Fasta':
            return cls.from_fasta(filepath, alphabet)
        if format == 'Phylip':
            return cls.from_phylip(filepath, alphabet)
        raise ValueError(
            f"Unknown sequence format: {format}. Valid formats: {', '.join(SEQUENCE_FORMATS)}"
        )

    def sequence_string(self, index: int) -> str:
        """Decoded character string of one sequence."""
        return self.alphabet.decode(self.sequences[index])

    def to_phylip(self, filepath: Path | str) -> None:
        """
        Write alignment to PHYLIP format file.

        Parameters
        ----------
        filepath : Path or str
            Output file path
        """
        filepath = Path(filepath)

        with open(filepath, 'w') as f:
            # Header
            n_chars = self.n_sites * self.alphabet.width
            f.write(f" {self.n_species}   {n_chars}\n\n")

            for i, name in enumerate(self.names):
                f.write(f"{name}\n")
                seq = self.sequence_string(i)

                # Write in blocks of 60
                for j in range(0, len(seq), 60):
                    f.write(seq[j:j+60] + '\n')

                f.write('\n')

    def to_fasta(self, filepath: Path | str) -> None:
        """
        Write alignment to FASTA format file.

        Parameters
        ----------
        filepath : Path or str
            Output file path
        """
        filepath = Path(filepath)

        with open(filepath, 'w') as f:
            for i, name in enumerate(self.names):
                f.write(f">{name}\n")
                seq = self.sequence_string(i)

                # Write in blocks of 60
                for j in range(0, len(seq), 60):
                    f.write(seq[j:j+60] + '\n')

    def write(self, filepath: Path | str, format: str = "Fasta") -> None:
        """Write the alignment in one of SEQUENCE_FORMATS."""
        if format == 'Fasta':
            self.to_fasta(filepath)
        elif format == 'Phylip':
            self.to_phylip(filepath)
        else:
            raise ValueError(
                f"Unknown sequence format: {format}. Valid formats: {', '.join(SEQUENCE_FORMATS)}"
            )

    def select_sequences(self, indices) -> "Alignment":
        """New alignment with the given sequence rows (indices or boolean mask)."""
        indices = np.asarray(indices)
        if indices.dtype == bool:
            indices = np.flatnonzero(indices)
        indices = indices.astype(int)
        return Alignment(
            names=[self.names[i] for i in indices],
            sequences=self.sequences[indices].copy(),
            alphabet=self.alphabet,
            positions=self.positions.copy(),
        )

    def select_sites(self, mask: np.ndarray) -> "Alignment":
        """New alignment restricted to the sites where mask is True."""
        mask = np.asarray(mask, dtype=bool)
        return Alignment(
            names=list(self.names),
            sequences=self.sequences[:, mask].copy(),
            alphabet=self.alphabet,
            positions=self.positions[mask].copy(),
        )

    def delete_site(self, index: int) -> None:
        """Remove one site in place."""
        self.sequences = np.delete(self.sequences, index, axis=1)
        self.positions = np.delete(self.positions, index)

    def append_sequences(self, other: "Alignment") -> None:
        """Append the sequences of another alignment (same length) in place."""
        if other.n_sites != self.n_sites:
            raise ValueError(
                f"Cannot append sequences of length {other.n_sites} "
                f"to an alignment of length {self.n_sites}"
            )
        if other.alphabet != self.alphabet:
            raise ValueError("Cannot append sequences with a different alphabet")
        self.names = self.names + list(other.names)
        if len(set(self.names)) != len(self.names):
            raise ValueError("Sequence names must be unique")
        self.sequences = np.vstack([self.sequences, other.sequences])

    def concatenate(self, other: "Alignment") -> "Alignment":
        """
        Concatenate the sites of another alignment, matching sequences by name.

        The result keeps the sequence order of self.
        """
        if sorted(self.names) != sorted(other.names):
            raise ValueError("Alignments to concatenate must contain the same sequence names")
        order = [other.names.index(name) for name in self.names]
        return Alignment(
            names=list(self.names),
            sequences=np.hstack([self.sequences, other.sequences[order]]),
            alphabet=self.alphabet,
        )

    def complete_sites(self) -> np.ndarray:
        """Boolean mask of sites without gap or unknown state."""
        return np.all(self.sequences >= 0, axis=0)

    def gap_fraction(self) -> np.ndarray:
        """Fraction of gap states in each site."""
        if self.n_species == 0:
            return np.zeros(self.n_sites)
        return np.mean(self.sequences == GAP_CODE, axis=0)

    def __repr__(self) -> str:
        return (
            f"Alignment(n_species={self.n_species}, n_sites={self.n_sites}, "
            f"alphabet={self.alphabet!r})"
        )
