"""Command-line interface for SolverKit."""
