"""Console reporting helpers for the command line tools."""

import logging
import math

import typer

LABEL_WIDTH = 50


def format_value(value) -> str:
    """
    Text form of a result, as written to the console and to log files.

    Floats use 6 significant digits; NaN and None are written 'NA'.
    """
    if value is None:
        return "NA"
    if isinstance(value, bool):
        return "1" if value else "0"
    if isinstance(value, float):
        if math.isnan(value):
            return "NA"
        return f"{value:.6g}"
    return str(value)


def display_result(label: str, value) -> None:
    """Print ``label.....: value``."""
    label = label.rstrip().rstrip(':')
    typer.echo(f"{label:.<{LABEL_WIDTH}}: {format_value(value)}")


def display_message(message: str) -> None:
    typer.echo(message)


def display_error(message: str) -> None:
    typer.echo(message, err=True)


def setup_logging(verbose: int) -> None:
    """Configure logging from the 'verbose' option (0, 1 or 2)."""
    level = {0: logging.WARNING, 1: logging.INFO}.get(verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(asctime)s %(message)s", force=True)
