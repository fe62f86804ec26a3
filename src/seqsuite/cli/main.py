"""Main CLI application for seqsuite."""

from typing import List, Optional

import typer

from .commands.popstats import run_popstats
from .commands.seqgen import run_seqgen

app = typer.Typer(
    name="seqsuite",
    help="Population genetics statistics and sequence simulation",
    no_args_is_help=True,
)

POPSTATS_USAGE = """\
__________________________________________________________________________
popstats parameter1_name=parameter1_value
      parameter2_name=parameter2_value ... param=option_file

  Main options:
    alphabet                        DNA, RNA, Protein or Codon(letter=DNA)
    genetic_code                    genetic code of codon alignments
    input.sequence.file             alignment (or .ingroup / .outgroup files)
    input.sequence.outgroup.index   1-based indices of outgroup sequences
    input.sequence.outgroup.name    names of outgroup sequences
    input.sequence.stop_codons_policy   Keep, RemoveIfLast or RemoveAll
    pop.stats                       comma separated list of statistics
    logfile                         file receiving 'name = value' results
__________________________________________________________________________"""

SEQGEN_USAGE = """\
__________________________________________________________________________
seqgen parameter1_name=parameter1_value
      parameter2_name=parameter2_value ... param=option_file

  Main options:
    alphabet                        DNA, RNA, Protein or Codon(letter=DNA)
    input.tree.method               single or multiple
    input.tree.file                 tree file (Newick, or segment file)
    model                           substitution model, e.g. K80(kappa=2)
    nonhomogeneous                  no, one_per_branch or general
    rate_distribution               Constant(), Gamma(n=4, alpha=0.5), ...
    number_of_sites                 number of sites to simulate
    output.sequence.file            output alignment
__________________________________________________________________________"""


@app.command(name="popstats")
def popstats(
    arguments: Optional[List[str]] = typer.Argument(
        None,
        help="Options as key=value pairs; param=<file> reads options from a file",
        show_default=False,
    ),
):
    """
    Compute population genetics statistics from an alignment.

    Example:
        seqsuite popstats alphabet=DNA input.sequence.file=aln.fasta pop.stats=SiteFrequencies,TajimaD
    """
    if not arguments:
        typer.echo(POPSTATS_USAGE)
        raise typer.Exit(code=0)
    run_popstats(arguments)


@app.command(name="seqgen")
def seqgen(
    arguments: Optional[List[str]] = typer.Argument(
        None,
        help="Options as key=value pairs; param=<file> reads options from a file",
        show_default=False,
    ),
):
    """
    Simulate sequences along one tree or a series of tree segments.

    Example:
        seqsuite seqgen alphabet=DNA input.tree.file=tree.nwk model=K80(kappa=2) output.sequence.file=sim.fasta
    """
    if not arguments:
        typer.echo(SEQGEN_USAGE)
        raise typer.Exit(code=0)
    run_seqgen(arguments)


def main():
    """Entry point for the seqsuite command."""
    app()


def popstats_main():
    """Entry point for the standalone popstats command."""
    typer.run(popstats)


def seqgen_main():
    """Entry point for the standalone seqgen command."""
    typer.run(seqgen)


if __name__ == "__main__":
    main()
