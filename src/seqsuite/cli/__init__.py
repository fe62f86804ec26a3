"""Command-line interface for seqsuite."""

from .main import app

__all__ = ["app"]
