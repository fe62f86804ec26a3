"""Population statistics command for seqsuite CLI."""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, TextIO

import numpy as np
import typer

from ..display import display_error, display_message, display_result, format_value, setup_logging
from ..params import Parameters, read_alphabet
from ...analysis import codon_sites, sites, statistics
from ...analysis.polymorphism import PolymorphismAlignment, filter_sites
from ...io.alphabet import Alphabet, GeneticCode
from ...io.keyval import parse_procedure
from ...io.sequences import Alignment

logger = logging.getLogger(__name__)

STOP_CODON_POLICIES = ('Keep', 'RemoveIfLast', 'RemoveAll')
TAJIMA_POSITIONS = ('all', 'synonymous', 'non-synonymous')


@dataclass
class SequenceInput:
    """One alignment file and how to read it."""

    path: str
    format: str = 'Fasta'
    sites_to_use: str = 'all'
    max_gap_allowed: float = 1.0

    @classmethod
    def from_parameters(cls, params: Parameters, suffix: str = "") -> "SequenceInput":
        return cls(
            path=params.get_file_path(f"input.sequence.file{suffix}"),
            format=params.get_string(f"input.sequence.format{suffix}", 'Fasta'),
            sites_to_use=params.get_string(f"input.sequence.sites_to_use{suffix}", 'all'),
            max_gap_allowed=params.get_fraction(f"input.sequence.max_gap_allowed{suffix}", 1.0),
        )

    def read(self, alphabet: Alphabet) -> Alignment:
        alignment = Alignment.read(self.path, alphabet, self.format)
        logger.info("Read %d sequences from %s", alignment.n_species, self.path)
        return filter_sites(alignment, self.sites_to_use, self.max_gap_allowed)


@dataclass
class PopStatsConfig:
    """
    Validated options of the popstats command.

    Attributes
    ----------
    alphabet : Alphabet
        Alphabet of the input sequences
    genetic_code : GeneticCode or None
        Genetic code, for codon alphabets
    sequences : SequenceInput or None
        Combined alignment (when no separate ingroup file is given)
    ingroup, outgroup : SequenceInput or None
        Separate alignments
    outgroup_indices : list[int]
        1-based indices of outgroup sequences in the combined alignment
    outgroup_names : list[str]
        Names of outgroup sequences in the combined alignment
    stop_codons_policy : str
        'Keep', 'RemoveIfLast' or 'RemoveAll'
    actions : list[str]
        Action descriptions, in execution order
    logfile : str
        Results log path, or 'none'
    """

    alphabet: Alphabet
    genetic_code: Optional[GeneticCode]
    sequences: Optional[SequenceInput]
    ingroup: Optional[SequenceInput]
    outgroup: Optional[SequenceInput]
    outgroup_indices: list[int] = field(default_factory=list)
    outgroup_names: list[str] = field(default_factory=list)
    stop_codons_policy: str = 'Keep'
    actions: list[str] = field(default_factory=list)
    logfile: str = 'none'

    @classmethod
    def from_parameters(cls, params: Parameters) -> "PopStatsConfig":
        alphabet, code = read_alphabet(params)

        sequences = ingroup = outgroup = None
        if 'input.sequence.file.ingroup' in params:
            ingroup = SequenceInput.from_parameters(params, ".ingroup")
            if 'input.sequence.file.outgroup' in params:
                outgroup = SequenceInput.from_parameters(params, ".outgroup")
        else:
            sequences = SequenceInput.from_parameters(params)

        try:
            indices = [int(i) for i in params.get_vector('input.sequence.outgroup.index')]
        except ValueError:
            raise ValueError("input.sequence.outgroup.index must be a list of integers")

        policy = params.get_string('input.sequence.stop_codons_policy', 'Keep')
        if policy not in STOP_CODON_POLICIES:
            raise ValueError(f"Unrecognized option for input.sequence.stop_codons_policy: {policy}")
        if policy != 'Keep' and not alphabet.is_codon:
            raise ValueError(f"Stop codon policy {policy} requires a codon alphabet")

        actions = params.get_vector('pop.stats')
        if not actions:
            raise ValueError("Parameter 'pop.stats' not specified.")

        return cls(
            alphabet=alphabet,
            genetic_code=code,
            sequences=sequences,
            ingroup=ingroup,
            outgroup=outgroup,
            outgroup_indices=indices,
            outgroup_names=params.get_vector('input.sequence.outgroup.name'),
            stop_codons_policy=policy,
            actions=actions,
            logfile=params.get_file_path('logfile', required=False, must_exist=False),
        )


class ResultsLog:
    """
    Machine-readable results file of ``# comment`` and ``Name = value`` lines.

    Writing is a no-op when no file is configured.
    """

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream

    def comment(self, text: str) -> None:
        if self.stream is not None:
            self.stream.write(f"# {text}\n")
            self.stream.flush()

    def value(self, name: str, value, suffix: str = "") -> None:
        if self.stream is not None:
            self.stream.write(f"{name}{suffix} = {format_value(value)}\n")
            self.stream.flush()


@dataclass
class PopStatsContext:
    """Data shared by the actions of one run."""

    ingroup: Alignment
    outgroup: Optional[Alignment]
    alphabet: Alphabet
    genetic_code: Optional[GeneticCode]
    log: ResultsLog

    def require_codon(self, message: str) -> None:
        if not self.alphabet.is_codon:
            raise ValueError(message)


def assemble_input(config: PopStatsConfig, log: ResultsLog) -> PopStatsContext:
    """
    Read the sequences, flag the outgroup and apply the stop codon policy.

    Returns
    -------
    PopStatsContext
        Ingroup and (if any) outgroup alignments
    """
    if config.ingroup is not None:
        data = PolymorphismAlignment(config.ingroup.read(config.alphabet))
        if config.outgroup is not None:
            data.append_outgroup(config.outgroup.read(config.alphabet))
    else:
        data = PolymorphismAlignment(config.sequences.read(config.alphabet))
        if config.outgroup_indices:
            data.set_outgroup_by_index(config.outgroup_indices)
        if config.outgroup_names:
            data.set_outgroup_by_name(config.outgroup_names)

    display_result("Stop codons policy", config.stop_codons_policy)
    if config.stop_codons_policy == 'RemoveIfLast':
        if data.remove_last_site_if_stop(config.genetic_code):
            message = "Info: last site contained a stop codon and was discarded."
            display_message(message)
            log.comment(message)
    elif config.stop_codons_policy == 'RemoveAll':
        removed = data.remove_stop_codon_sites(config.genetic_code)
        if removed:
            message = f"Info: discarded {removed} sites with stop codons."
            display_message(message)
            log.comment(message)

    ingroup = data.ingroup()
    outgroup = data.outgroup() if data.has_outgroup else None
    if ingroup.n_species == 0:
        raise ValueError("No ingroup sequence left after outgroup assignment")
    display_result("Number of sequences in ingroup", ingroup.n_species)
    display_result("Number of sequences in outgroup", outgroup.n_species if outgroup is not None else 0)
    return PopStatsContext(ingroup, outgroup, config.alphabet, config.genetic_code, log)


def _site_frequencies(ctx: PopStatsContext, args: Parameters, suffix: str) -> None:
    s = statistics.number_of_polymorphic_sites(ctx.ingroup)
    display_result("Number of segregating sites", s)
    nsg = statistics.number_of_singletons(ctx.ingroup)
    display_result("Number of singletons", nsg)
    ctx.log.comment("Site frequencies")
    ctx.log.value("NbSegSites", s, suffix)
    ctx.log.value("NbSingl", nsg, suffix)


def _watterson75(ctx: PopStatsContext, args: Parameters, suffix: str) -> None:
    theta = statistics.watterson75(ctx.ingroup)
    display_result("Watterson's (1975) theta", theta)
    ctx.log.comment("Watterson's (1975) theta")
    ctx.log.value("thetaW75", theta, suffix)


def _tajima83(ctx: PopStatsContext, args: Parameters, suffix: str) -> None:
    pi = statistics.tajima83(ctx.ingroup)
    display_result("Tajima's (1983) pi", pi)
    ctx.log.comment("Tajima's (1983) pi")
    ctx.log.value("piT83", pi, suffix)


def _tajima_d(ctx: PopStatsContext, args: Parameters, suffix: str) -> None:
    positions = args.get_string('positions', 'all')
    if positions in ('synonymous', 'non-synonymous') and not ctx.alphabet.is_codon:
        raise ValueError(
            "Error: synonymous and non-synonymous positions can only be defined with a codon alphabet."
        )
    if positions == 'synonymous':
        alignment = statistics.synonymous_sites(ctx.ingroup, ctx.genetic_code)
    elif positions == 'non-synonymous':
        alignment = statistics.non_synonymous_sites(ctx.ingroup, ctx.genetic_code)
    elif positions == 'all':
        alignment = ctx.ingroup
    else:
        raise ValueError(f"Unrecognized option for argument 'positions': {positions}")

    ctx.log.comment(f"Tajima's (1989) D ({positions} sites)")
    if statistics.number_of_polymorphic_sites(alignment) > 0:
        d = statistics.tajima_d(alignment)
        display_result("Tajima's (1989) D", d)
        ctx.log.value("tajD", d, suffix)
    else:
        display_result("Tajima's (1989) D", "NA (0 polymorphic sites)")
        ctx.log.value("tajD", None, suffix)


def _fu_li(estimator: Callable, label: str, variable: str):
    def action(ctx: PopStatsContext, args: Parameters, suffix: str) -> None:
        tot_mut = args.get_bool('tot_mut', True)
        value = estimator(ctx.ingroup, tot_mut=tot_mut)
        display_result(label, value)
        display_result(
            "  computed using",
            "total number of mutations" if tot_mut else "number of segregating sites",
        )
        ctx.log.comment(label)
        ctx.log.value(variable + ("TotMut" if tot_mut else "SegSit"), value, suffix)
    return action


def _pin_pis(ctx: PopStatsContext, args: Parameters, suffix: str) -> None:
    ctx.require_codon("PiN_PiS can only be used with a codon alignment. Check the input alphabet!")
    pi_s = statistics.pi_synonymous_total(ctx.ingroup, ctx.genetic_code)
    pi_n = statistics.pi_non_synonymous_total(ctx.ingroup, ctx.genetic_code)
    nb_s = statistics.mean_number_of_synonymous_sites(ctx.ingroup, ctx.genetic_code)
    nb_n = statistics.mean_number_of_non_synonymous_sites(ctx.ingroup, ctx.genetic_code)
    ratio = statistics.pi_n_pi_s_ratio(pi_n, pi_s, nb_n, nb_s)
    display_result("PiN", pi_n)
    display_result("PiS", pi_s)
    display_result("#N", nb_n)
    display_result("#S", nb_s)
    display_result("PiN / PiS (corrected for #N and #S)", ratio)
    ctx.log.comment("PiN and PiS")
    ctx.log.value("PiN", pi_n, suffix)
    ctx.log.value("PiS", pi_s, suffix)
    ctx.log.value("NbN", nb_n, suffix)
    ctx.log.value("NbS", nb_s, suffix)


def _mkt(ctx: PopStatsContext, args: Parameters, suffix: str) -> None:
    ctx.require_codon(
        "MacDonald-Kreitman test can only be performed on a codon alignment. Check the input alphabet!"
    )
    if ctx.outgroup is None:
        raise ValueError("MacDonald-Kreitman test requires at least one outgroup sequence.")
    table = statistics.mk_table(ctx.ingroup, ctx.outgroup, ctx.genetic_code)
    for label, count in zip(("Pa", "Ps", "Da", "Ds"), table):
        display_result(f"MK table, {label}", count)
    ctx.log.comment("MK table")
    ctx.log.comment("Pa Ps Da Ds")
    ctx.log.value("MKtable", " ".join(str(count) for count in table), suffix)


def write_codon_site_statistics(
    path: str, ingroup: Alignment, outgroup: Optional[Alignment], code: GeneticCode
) -> None:
    """
    Write one tab-separated row of codon statistics per site.

    The outgroup allele column is present only when there is exactly one
    outgroup sequence. Codon statistics of incomplete sites are 'NA'.
    """
    alphabet = ingroup.alphabet
    with_outgroup = outgroup is not None and outgroup.n_species == 1
    header = [
        "Site", "IsComplete", "NbAlleles", "MinorAlleleFrequency", "MajorAlleleFrequency",
        "MinorAllele", "MajorAllele",
    ]
    if with_outgroup:
        header.append("OutgroupAllele")
    header += ["MeanNumberSynPos", "IsSynPoly", "Is4Degenerated", "PiN", "PiS"]

    with open(path, 'w') as out:
        out.write("\t".join(header) + "\n")
        for j in range(ingroup.n_sites):
            site = ingroup.sequences[:, j]
            complete = sites.is_complete(site)
            row = [ingroup.positions[j], complete, sites.number_of_alleles(site)]
            if np.any(site >= 0):
                row += [
                    sites.minor_allele_frequency(site),
                    sites.major_allele_frequency(site),
                    alphabet.int_to_char(sites.minor_allele(site)),
                    alphabet.int_to_char(sites.major_allele(site)),
                ]
            else:
                row += [None] * 4
            if with_outgroup:
                row.append(outgroup.alphabet.int_to_char(outgroup.sequences[0, j]))
            if complete:
                row += [
                    codon_sites.mean_number_of_synonymous_positions(site, code),
                    codon_sites.is_synonymous_polymorphic(site, code),
                    codon_sites.is_four_fold_degenerated(site, code),
                    codon_sites.pi_non_synonymous(site, code),
                    codon_sites.pi_synonymous(site, code),
                ]
            else:
                row += [None] * 5
            out.write("\t".join(format_value(v) for v in row) + "\n")


def _codon_site_statistics(ctx: PopStatsContext, args: Parameters, suffix: str) -> None:
    ctx.require_codon(
        "CodonSiteStatistics can only be used with a codon alignment. Check the input alphabet!"
    )
    path = args.get_file_path('output.file', required=False, must_exist=False)
    if path == 'none':
        raise ValueError("You must specify an output file for CodonSiteStatistics")
    display_result("Site statistics output to", path)
    write_codon_site_statistics(path, ctx.ingroup, ctx.outgroup, ctx.genetic_code)


ACTIONS = {
    'SiteFrequencies': _site_frequencies,
    'Watterson75': _watterson75,
    'Tajima83': _tajima83,
    'TajimaD': _tajima_d,
    'FuAndLiDStar': _fu_li(statistics.fu_li_d_star, "Fu and Li's (1993) D*", "fuLiDstar"),
    'FuAndLiFStar': _fu_li(statistics.fu_li_f_star, "Fu and Li's (1993) F*", "fuLiFstar"),
    'PiN_PiS': _pin_pis,
    'MKT': _mkt,
    'CodonSiteStatistics': _codon_site_statistics,
}


def run_actions(ctx: PopStatsContext, actions: list[str]) -> None:
    """
    Run actions in order.

    The Nth occurrence (N > 1) of an action appends N to the names of the
    variables it writes to the results log.

    Raises
    ------
    ValueError
        On an unknown action; actions already run keep their output
    """
    counter: dict[str, int] = {}
    for description in actions:
        name, args = parse_procedure(description)
        counter[name] = counter.get(name, 0) + 1
        if name not in ACTIONS:
            raise ValueError(f"Unknown operation {name}.")
        suffix = str(counter[name]) if counter[name] > 1 else ""
        logger.debug("Running %s %s", name, args)
        ACTIONS[name](ctx, Parameters(args), suffix)


def run_popstats(arguments: list[str]) -> None:
    """
    Run the popstats command on ``key=value`` arguments.

    Errors are printed and written to the results log, then the command
    exits with status 1.
    """
    typer.echo("seqsuite popstats - population genetics statistics")
    typer.echo("=" * 50)

    log_stream = None
    failed = False
    try:
        params = Parameters.from_arguments(arguments)
        setup_logging(params.get_int('verbose', 1))
        logfile = params.get_file_path('logfile', required=False, must_exist=False)
        if logfile != 'none':
            log_stream = open(logfile, 'w')
        log = ResultsLog(log_stream)

        config = PopStatsConfig.from_parameters(params)
        if config.genetic_code is not None:
            display_result("Genetic Code", config.genetic_code.name)
        ctx = assemble_input(config, log)
        run_actions(ctx, config.actions)
    except Exception as e:
        failed = True
        if log_stream is not None:
            log_stream.write(f"# Error: {e}\n")
        display_error(str(e))
    finally:
        if log_stream is not None:
            log_stream.close()

    if failed:
        raise typer.Exit(code=1)
