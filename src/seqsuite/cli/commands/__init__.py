"""CLI commands for seqsuite."""
