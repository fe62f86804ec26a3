"""
Unit tests for I/O modules (alphabets, sequences and trees).
"""

import numpy as np
import pytest

from seqsuite.io.alphabet import (
    CODON_TO_INDEX,
    DNA,
    GAP_CODE,
    PROTEIN,
    RNA,
    UNKNOWN_CODE,
    GeneticCode,
    codon_alphabet,
    get_alphabet,
)
from seqsuite.io.sequences import Alignment
from seqsuite.io.trees import Tree, read_tree_segments


class TestAlphabet:
    """Test alphabets and genetic codes."""

    def test_dna_encoding(self):
        encoded = DNA.encode("TCAG-N")
        assert list(encoded[:4]) == [0, 1, 2, 3]
        assert encoded[4] == GAP_CODE
        assert encoded[5] == UNKNOWN_CODE

    def test_rna_reads_uracil(self):
        assert RNA.char_to_int("U") == DNA.char_to_int("T")
        assert RNA.int_to_char(0) == "U"

    def test_invalid_character(self):
        with pytest.raises(ValueError, match="Invalid character"):
            DNA.char_to_int("Z")

    def test_codon_alphabet(self):
        codons = codon_alphabet("DNA")
        assert codons.size == 64
        assert codons.width == 3
        assert codons.char_to_int("ATG") == CODON_TO_INDEX["ATG"]
        assert codons.char_to_int("---") == GAP_CODE
        assert codons.int_to_char(GAP_CODE) == "---"

    def test_get_alphabet(self):
        assert get_alphabet("Protein") is PROTEIN
        assert get_alphabet("Codon", "RNA").letter == "RNA"
        with pytest.raises(ValueError, match="Alphabet not known"):
            get_alphabet("Binary")

    def test_genetic_code(self):
        code = GeneticCode("Standard")
        assert len(code.sense_codons) == 61
        assert code.translate(CODON_TO_INDEX["ATG"]) == "M"
        assert code.is_stop(CODON_TO_INDEX["TAA"])
        assert code.are_synonymous(CODON_TO_INDEX["CTT"], CODON_TO_INDEX["TTA"])

    def test_mitochondrial_code(self):
        code = GeneticCode("VertebrateMitochondrial")
        assert len(code.sense_codons) == 60
        assert code.translate(CODON_TO_INDEX["TGA"]) == "W"
        assert code.is_stop(CODON_TO_INDEX["AGA"])

    def test_four_fold_degenerate_codons(self):
        code = GeneticCode("Standard")
        assert code.is_four_fold_degenerated(CODON_TO_INDEX["GGA"])
        assert not code.is_four_fold_degenerated(CODON_TO_INDEX["TTT"])

    def test_unknown_genetic_code(self):
        with pytest.raises(ValueError, match="Unknown genetic code"):
            GeneticCode("Martian")


class TestAlignment:
    """Test alignment parsing, writing and site operations."""

    def test_from_strings(self):
        aln = Alignment.from_strings(["a", "b"], ["ACGT", "AC-T"], DNA)
        assert aln.n_species == 2
        assert aln.n_sites == 4
        assert list(aln.positions) == [1, 2, 3, 4]
        assert list(aln.complete_sites()) == [True, True, False, True]

    def test_unequal_lengths(self):
        with pytest.raises(ValueError, match="different lengths"):
            Alignment.from_strings(["a", "b"], ["ACGT", "ACG"], DNA)

    def test_duplicate_names(self):
        with pytest.raises(ValueError, match="unique"):
            Alignment.from_strings(["a", "a"], ["ACGT", "ACGT"], DNA)

    def test_read_fasta(self, tmp_path):
        path = tmp_path / "aln.fasta"
        path.write_text(">seq1 description\nACGT\nAC\n>seq2\nTTGTAA\n")
        aln = Alignment.read(path, DNA, "Fasta")
        assert aln.names == ["seq1", "seq2"]
        assert aln.n_sites == 6
        assert aln.sequence_string(1) == "TTGTAA"

    def test_read_phylip(self, tmp_path):
        path = tmp_path / "aln.phy"
        path.write_text(" 2 6\nseq1  ACGTAC\nseq2  ACGTTT\n")
        aln = Alignment.read(path, DNA, "Phylip")
        assert aln.names == ["seq1", "seq2"]
        assert aln.sequence_string(1) == "ACGTTT"

    def test_fasta_written_then_read(self, tmp_path):
        aln = Alignment.from_strings(["x", "y"], ["ACGTAC" * 15, "TTGTAC" * 15], DNA)
        aln.write(tmp_path / "out.fasta", "Fasta")
        again = Alignment.read(tmp_path / "out.fasta", DNA)
        assert again.names == aln.names
        np.testing.assert_array_equal(again.sequences, aln.sequences)

    def test_codon_alignment(self):
        aln = Alignment.from_strings(["a", "b"], ["ATGCCC", "ATGCC-"], codon_alphabet())
        assert aln.n_sites == 2
        assert aln.sequences[0, 0] == CODON_TO_INDEX["ATG"]
        # A partially gapped codon is unknown
        assert aln.sequences[1, 1] == UNKNOWN_CODE

    def test_unknown_format(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown sequence format"):
            Alignment.read(tmp_path / "x", DNA, "Nexus")

    def test_site_selection_keeps_positions(self):
        aln = Alignment.from_strings(["a", "b"], ["ACGT", "AC-T"], DNA)
        complete = aln.select_sites(aln.complete_sites())
        assert list(complete.positions) == [1, 2, 4]
        aln.delete_site(0)
        assert list(aln.positions) == [2, 3, 4]

    def test_append_and_select_sequences(self):
        aln = Alignment.from_strings(["a", "b"], ["ACGT", "ACGA"], DNA)
        aln.append_sequences(Alignment.from_strings(["c"], ["TCGA"], DNA))
        assert aln.names == ["a", "b", "c"]
        subset = aln.select_sequences(np.array([False, True, True]))
        assert subset.names == ["b", "c"]

    def test_append_different_length(self):
        aln = Alignment.from_strings(["a"], ["ACGT"], DNA)
        with pytest.raises(ValueError, match="Cannot append"):
            aln.append_sequences(Alignment.from_strings(["c"], ["TCG"], DNA))

    def test_concatenate_matches_names(self):
        first = Alignment.from_strings(["a", "b"], ["AA", "CC"], DNA)
        second = Alignment.from_strings(["b", "a"], ["GG", "TT"], DNA)
        joined = first.concatenate(second)
        assert joined.names == ["a", "b"]
        assert joined.sequence_string(0) == "AATT"
        assert joined.sequence_string(1) == "CCGG"
        assert list(joined.positions) == [1, 2, 3, 4]

    def test_gap_fraction(self):
        aln = Alignment.from_strings(["a", "b"], ["A-", "--"], DNA)
        np.testing.assert_allclose(aln.gap_fraction(), [0.5, 1.0])


class TestTree:
    """Test Newick parsing and tree output."""

    def test_parse_newick(self):
        tree = Tree.from_newick("((A:0.1,B:0.2):0.15,C:0.3);")
        assert tree.n_leaves == 3
        assert tree.n_nodes == 5
        assert tree.leaf_names == ["A", "B", "C"]
        assert tree.root.id == 0
        assert tree.branch_ids() == [1, 2, 3, 4]

    def test_parse_comments_and_labels(self):
        tree = Tree.from_newick("((A:0.1,B:0.2)lab[&&NHX]:0.15,C:0.3);")
        assert tree.root.children[0].name == "lab"

    def test_invalid_newick(self):
        with pytest.raises(ValueError, match="missing semicolon"):
            Tree.from_newick("((A,B),C)")
        with pytest.raises(ValueError):
            Tree.from_newick("((A,B,C);")

    def test_tagged_newick(self):
        tree = Tree.from_newick("((A:0.1,B:0.2):0.15,C:0.3);")
        assert tree.to_newick(tag_ids=True) == "((2_A:0.1,3_B:0.2)1:0.15,4_C:0.3)0;"
        assert tree.to_newick() == "((A:0.1,B:0.2):0.15,C:0.3);"


class TestTreeSegments:
    """Test the multi-tree segment file loader."""

    def test_read_segments(self, segments_file):
        trees, positions = read_tree_segments(segments_file)
        assert len(trees) == 2
        assert positions == [0.0, 0.5, 1.0]
        assert sorted(trees[1].leaf_names) == ["A", "B", "C", "D"]

    def test_tokens_wrapped_across_lines(self, tmp_path):
        path = tmp_path / "wrapped.txt"
        path.write_text("0 0.5 ((Al\npha:0.1,C:0.2):0.1,B:0.3);\n0.5 1 ((Alpha:0.1,B:0.2):0.\n15,C:0.3);\n")
        trees, positions = read_tree_segments(path)
        assert positions == [0.0, 0.5, 1.0]
        assert sorted(trees[0].leaf_names) == ["Alpha", "B", "C"]
        assert trees[1].to_newick() == "((Alpha:0.1,B:0.2):0.15,C:0.3);"

    def test_non_contiguous_segments(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("0 0.4 (A:1,B:1);\n0.5 1 (A:1,B:1);\n")
        with pytest.raises(ValueError, match="segments do not match"):
            read_tree_segments(path)

    def test_first_segment_starts_at_zero(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("0.1 1 (A:1,B:1);\n")
        with pytest.raises(ValueError, match="segments do not match"):
            read_tree_segments(path)

    def test_leaf_names_must_match(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("0 0.5 (A:1,B:1);\n0.5 1 (A:1,C:1);\n")
        with pytest.raises(ValueError, match="same leaf names"):
            read_tree_segments(path)

    def test_last_segment_must_end_at_one(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("0 0.5 (A:1,B:1);\n")
        with pytest.raises(ValueError, match="expected 1"):
            read_tree_segments(path)

    def test_incomplete_tree(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("0 1 (A:1,B:1)\n")
        with pytest.raises(ValueError, match="incomplete tree"):
            read_tree_segments(path)

    def test_invalid_positions(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text("zero 1 (A:1,B:1);\n")
        with pytest.raises(ValueError, match="invalid segment positions"):
            read_tree_segments(path)
