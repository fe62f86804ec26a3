"""Sequence simulation command for seqsuite CLI."""

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

import numpy as np
import pandas as pd
import typer

from ..display import display_error, display_result, setup_logging
from ..params import Parameters, read_alphabet
from ...io.alphabet import Alphabet, GeneticCode
from ...io.sequences import SEQUENCE_FORMATS
from ...io.trees import Tree, read_tree_segments
from ...models.factory import get_rate_distribution, get_root_frequencies, get_substitution_model
from ...models.markov_modulated import TS98
from ...models.model_set import SubstitutionModelSet
from ...models.rates import constant_distribution
from ...simulate.output import SimulationOutput
from ...simulate.segments import simulate_segments

logger = logging.getLogger(__name__)

TREE_METHODS = ('single', 'multiple')
NONHOMOGENEOUS_MODES = ('no', 'one_per_branch', 'general')


@dataclass
class SeqGenConfig:
    """
    Validated options of the seqgen command.

    Model, frequency and rate descriptions are kept as text and turned into
    objects once the tree is known.
    """

    alphabet: Alphabet
    genetic_code: Optional[GeneticCode]
    tree_method: str
    tree_file: str
    tree_output: str
    infos_file: str
    infos_rates_column: str
    nonhomogeneous: str
    model: Optional[str]
    shared_parameters: list[str] = field(default_factory=list)
    root_frequencies: Optional[str] = None
    general_models: list[tuple[str, list[int]]] = field(default_factory=list)
    rate_distribution: str = 'Constant()'
    number_of_sites: int = 100
    output_file: str = 'none'
    output_format: str = 'Fasta'
    seed: Optional[int] = None

    @classmethod
    def from_parameters(cls, params: Parameters) -> "SeqGenConfig":
        alphabet, code = read_alphabet(params)

        method = params.get_string('input.tree.method', 'single')
        if method not in TREE_METHODS:
            raise ValueError(f"Unknown input.tree.method option: {method}")
        tree_format = params.get_string('input.tree.format', 'Newick')
        if tree_format != 'Newick':
            raise ValueError(f"Unsupported tree format: {tree_format}. Only Newick is supported")

        mode = params.get_string('nonhomogeneous', 'no')
        if mode not in NONHOMOGENEOUS_MODES:
            raise ValueError(f"Unknown non-homogeneous option: {mode}")

        general_models = []
        if mode == 'general':
            n_models = params.get_int('nonhomogeneous.number_of_models', required=True)
            if n_models < 1:
                raise ValueError("nonhomogeneous.number_of_models must be at least 1")
            for i in range(1, n_models + 1):
                description = params.get_string(f'model{i}', required=True)
                try:
                    nodes = [int(n) for n in params.get_vector(f'model{i}.nodes_id')]
                except ValueError:
                    raise ValueError(f"model{i}.nodes_id must be a list of node ids")
                general_models.append((description, nodes))

        output_format = params.get_string('output.sequence.format', 'Fasta')
        if output_format not in SEQUENCE_FORMATS:
            raise ValueError(
                f"Unknown sequence format: {output_format}. Valid formats: {', '.join(SEQUENCE_FORMATS)}"
            )

        number_of_sites = params.get_int('number_of_sites', 100)
        if number_of_sites < 0:
            raise ValueError(f"number_of_sites must be non-negative, got {number_of_sites}")

        tree_output = 'none'
        if method == 'single':
            tree_output = params.get_file_path('output.tree.path', required=False, must_exist=False)

        return cls(
            alphabet=alphabet,
            genetic_code=code,
            tree_method=method,
            tree_file=params.get_file_path('input.tree.file'),
            tree_output=tree_output,
            infos_file=params.get_file_path('input.infos', required=False),
            infos_rates_column=params.get_string('input.infos.rates', 'pr'),
            nonhomogeneous=mode,
            model=params.get_string('model', required=(mode != 'general')),
            shared_parameters=params.get_vector('nonhomogeneous_one_per_branch.shared_parameters'),
            root_frequencies=params.get_string('nonhomogeneous.root_freq'),
            general_models=general_models,
            rate_distribution=params.get_string('rate_distribution', 'Constant()'),
            number_of_sites=number_of_sites,
            output_file=(
                params.get_file_path('output.sequence.file', must_exist=False)
                if tree_output == 'none' else 'none'
            ),
            output_format=output_format,
            seed=params.get_int('seed'),
        )


def branch_parameters(params: Parameters, model_name: str) -> dict[int, dict[str, float]]:
    """
    Per-branch parameter values given as ``<Model>.<param>_<nodeId>=value``.

    Examples
    --------
    >>> branch_parameters(Parameters({'K80.kappa_3': '4'}), 'K80')
    {3: {'kappa': 4.0}}
    """
    pattern = re.compile(rf'^{re.escape(model_name)}\.(\w+)_(\d+)$')
    overrides: dict[int, dict[str, float]] = {}
    for key, value in params.items():
        match = pattern.match(key)
        if match is None:
            continue
        name, node_id = match.group(1), int(match.group(2))
        try:
            overrides.setdefault(node_id, {})[name] = float(value)
        except ValueError:
            raise ValueError(f"Invalid value for {key}: '{value}'")
    return overrides


def _root_frequencies(config: SeqGenConfig, model) -> np.ndarray:
    """Root frequencies of a non-homogeneous model set."""
    if config.root_frequencies is not None:
        return get_root_frequencies(config.root_frequencies, model)
    if isinstance(model, TS98):
        # Rate classes are equally frequent at the root
        return np.kron(np.ones(2) / 2, model.base.frequencies)
    return model.frequencies


def build_model_set(
    config: SeqGenConfig, params: Parameters, trees: list[Tree]
) -> SubstitutionModelSet:
    """
    Substitution models for the simulation.

    Raises
    ------
    ValueError
        If a non-homogeneous mode is used with several trees
    """
    if config.nonhomogeneous != 'no' and len(trees) > 1:
        raise ValueError("Multiple input trees cannot be used with non-homogeneous simulations.")

    if config.nonhomogeneous == 'no':
        model = get_substitution_model(config.model, config.alphabet, config.genetic_code)
        display_result("Substitution model", model.describe())
        return SubstitutionModelSet.homogeneous(model)

    if config.nonhomogeneous == 'one_per_branch':
        model = get_substitution_model(config.model, config.alphabet, config.genetic_code)
        display_result("Substitution model", model.describe())
        display_result(
            "Shared parameters", ", ".join(config.shared_parameters) or "none"
        )
        return SubstitutionModelSet.one_per_branch(
            model,
            trees[0],
            root_frequencies=_root_frequencies(config, model),
            shared_parameters=config.shared_parameters,
            branch_parameters=branch_parameters(params, model.name),
        )

    models = []
    nodes = []
    for i, (description, node_ids) in enumerate(config.general_models, start=1):
        model = get_substitution_model(description, config.alphabet, config.genetic_code)
        display_result(f"Model {i}", model.describe())
        models.append(model)
        nodes.append(node_ids)
    return SubstitutionModelSet.general(
        models, nodes, trees[0], root_frequencies=_root_frequencies(config, models[0])
    )


def read_site_rates(path: str, column: str) -> np.ndarray:
    """Per-site rates from a tab-separated table with a header line."""
    table = pd.read_csv(path, sep="\t")
    if column not in table.columns:
        raise ValueError(f"Column '{column}' not found in site information file {path}")
    return table[column].to_numpy(dtype=float)


def run_seqgen(arguments: list[str]) -> None:
    """
    Run the seqgen command on ``key=value`` arguments.

    Errors are printed and the command exits with status -1.
    """
    typer.echo("seqsuite seqgen - sequence simulation along trees")
    typer.echo("=" * 50)

    try:
        params = Parameters.from_arguments(arguments)
        setup_logging(params.get_int('verbose', 1))
        config = SeqGenConfig.from_parameters(params)
        _simulate(config, params)
    except Exception as e:
        display_error(str(e))
        raise typer.Exit(code=-1)
    typer.echo("seqgen's done.")


def _simulate(config: SeqGenConfig, params: Parameters) -> None:
    if config.tree_method == 'single':
        trees = [Tree.from_file(config.tree_file)]
        positions = [0.0, 1.0]
        display_result("Number of leaves", trees[0].n_leaves)
        display_result("Number of sons at root", len(trees[0].root.children))
        if config.tree_output != 'none':
            display_result("Writing tagged tree to", config.tree_output)
            SimulationOutput.write_tagged_tree(trees[0], config.tree_output)
            return
    else:
        display_result("Trees file", config.tree_file)
        trees, positions = read_tree_segments(config.tree_file)
        display_result("Number of trees", len(trees))

    display_result("Site information", config.infos_file)
    display_result("Heterogeneous model", config.nonhomogeneous)
    model_set = build_model_set(config, params, trees)

    site_rates = None
    if config.infos_file != 'none':
        site_rates = read_site_rates(config.infos_file, config.infos_rates_column)
        rate_distribution = constant_distribution()
        display_result("Number of sites", len(site_rates))
    else:
        if model_set.n_states > config.alphabet.size:
            # Hidden rate classes already model rate variation
            rate_distribution = constant_distribution()
        else:
            rate_distribution = get_rate_distribution(config.rate_distribution)
        display_result("Rate distribution", rate_distribution.name)
        display_result("Number of sites", config.number_of_sites)

    alignment = simulate_segments(
        trees,
        positions,
        model_set,
        rate_distribution=rate_distribution,
        n_sites=config.number_of_sites,
        site_rates=site_rates,
        seed=config.seed,
    )

    display_result("Output file", config.output_file)
    SimulationOutput.write_sequences(alignment, config.output_file, config.output_format)
