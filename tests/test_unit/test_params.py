"""
Unit tests for option files, the option mapping and key/value syntax.
"""

import pytest

from seqsuite.cli.params import Parameters, read_alphabet, read_option_file
from seqsuite.io.keyval import parse_boolean, parse_procedure, split_top_level


class TestKeyValSyntax:
    """Test procedure descriptions and top-level splitting."""

    def test_split_ignores_nested_commas(self):
        tokens = split_top_level("SiteFrequencies, TajimaD(positions=all), Invariant(dist=Gamma(n=4, alpha=1), p=0.1)")
        assert tokens == [
            "SiteFrequencies",
            "TajimaD(positions=all)",
            "Invariant(dist=Gamma(n=4, alpha=1), p=0.1)",
        ]

    def test_parse_nested_procedure(self):
        name, args = parse_procedure("Invariant(dist=Gamma(n=4, alpha=0.5), p=0.1)")
        assert name == "Invariant"
        assert args == {"dist": "Gamma(n=4, alpha=0.5)", "p": "0.1"}

    def test_bare_name(self):
        assert parse_procedure(" Watterson75 ") == ("Watterson75", {})

    def test_invalid_procedures(self):
        with pytest.raises(ValueError, match="Unbalanced"):
            parse_procedure("HKY85(kappa=2")
        with pytest.raises(ValueError, match="not of the form key=value"):
            parse_procedure("HKY85(2)")
        with pytest.raises(ValueError, match="given twice"):
            parse_procedure("HKY85(kappa=2, kappa=3)")

    def test_parse_boolean(self):
        assert parse_boolean("Yes") is True
        assert parse_boolean("false") is False
        with pytest.raises(ValueError):
            parse_boolean("maybe")


class TestOptionFiles:
    """Test option file reading."""

    def test_comments_and_continuations(self, tmp_path):
        path = tmp_path / "opts.bpp"
        path.write_text(
            "# comment line\n"
            "alphabet = DNA  # trailing comment\n"
            "pop.stats = SiteFrequencies,\\\n"
            "    TajimaD\n"
        )
        options = read_option_file(path)
        assert options["alphabet"] == "DNA"
        assert options["pop.stats"] == "SiteFrequencies,    TajimaD"

    def test_nested_files(self, tmp_path):
        inner = tmp_path / "inner.bpp"
        inner.write_text("seed = 1\nnumber_of_sites = 50\n")
        outer = tmp_path / "outer.bpp"
        outer.write_text(f"number_of_sites = 10\nparam = {inner}\nseed = 2\n")
        options = read_option_file(outer)
        assert options == {"number_of_sites": "50", "seed": "2"}

    def test_self_inclusion(self, tmp_path):
        path = tmp_path / "loop.bpp"
        path.write_text(f"param = {path}\n")
        with pytest.raises(ValueError, match="includes itself"):
            read_option_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_option_file(tmp_path / "missing.bpp")

    def test_malformed_line(self, tmp_path):
        path = tmp_path / "bad.bpp"
        path.write_text("alphabet DNA\n")
        with pytest.raises(ValueError, match="Invalid line"):
            read_option_file(path)


class TestParameters:
    """Test the option mapping built from command line tokens."""

    def test_command_line_overrides_file(self, tmp_path):
        path = tmp_path / "opts.bpp"
        path.write_text("alphabet = RNA\nseed = 3\n")
        params = Parameters.from_arguments(["alphabet=DNA", f"param={path}"])
        assert params["alphabet"] == "DNA"
        assert params.get_int("seed") == 3

    def test_token_without_equals_warns(self):
        with pytest.warns(UserWarning, match="Ignoring"):
            params = Parameters.from_arguments(["verbose", "seed=1"])
        assert dict(params) == {"seed": "1"}

    def test_references(self):
        params = Parameters.from_arguments(["data=run1", "input.sequence.file=$(data).fasta", "logfile=$(input.sequence.file).log"])
        assert params["input.sequence.file"] == "run1.fasta"
        assert params["logfile"] == "run1.fasta.log"

    def test_unknown_reference(self):
        with pytest.raises(ValueError, match="unknown option"):
            Parameters.from_arguments(["logfile=$(missing).log"])

    def test_circular_reference(self):
        with pytest.raises(ValueError, match="Circular"):
            Parameters.from_arguments(["a=$(b)", "b=$(a)"])

    def test_typed_getters(self):
        params = Parameters({
            "n": "200", "x": "0.25", "flag": "yes", "gaps": "50%",
            "list": "A, B(x=1, y=2)", "bad": "abc",
        })
        assert params.get_int("n") == 200
        assert params.get_float("x") == 0.25
        assert params.get_bool("flag") is True
        assert params.get_bool("absent", default=True) is True
        assert params.get_fraction("gaps") == 0.5
        assert params.get_fraction("x") == 0.25
        assert params.get_vector("list") == ["A", "B(x=1, y=2)"]
        assert params.get_int("absent", 7) == 7
        with pytest.raises(ValueError, match="must be an integer"):
            params.get_int("bad")

    def test_required_option(self):
        with pytest.raises(ValueError, match="not specified"):
            Parameters({}).get_string("alphabet", required=True)

    def test_file_path(self, tmp_path):
        existing = tmp_path / "tree.nwk"
        existing.write_text("(A:1,B:1);")
        params = Parameters({"tree": str(existing), "missing": str(tmp_path / "no.nwk")})
        assert params.get_file_path("tree") == str(existing)
        assert params.get_file_path("other", required=False) == "none"
        assert params.get_file_path("missing", must_exist=False).endswith("no.nwk")
        with pytest.raises(FileNotFoundError):
            params.get_file_path("missing")
        with pytest.raises(ValueError, match="not specified"):
            params.get_file_path("other")

    def test_read_alphabet(self):
        alphabet, code = read_alphabet(Parameters({"alphabet": "DNA"}))
        assert alphabet.name == "DNA"
        assert code is None

        alphabet, code = read_alphabet(Parameters({
            "alphabet": "Codon(letter=RNA)",
            "genetic_code": "VertebrateMitochondrial",
        }))
        assert alphabet.is_codon
        assert alphabet.letter == "RNA"
        assert code.name == "VertebrateMitochondrial"

    def test_invalid_alphabet(self):
        with pytest.raises(ValueError, match="Invalid alphabet"):
            read_alphabet(Parameters({"alphabet": "DNA(letter=RNA)"}))
        with pytest.raises(ValueError, match="not known"):
            read_alphabet(Parameters({"alphabet": "Binary"}))
