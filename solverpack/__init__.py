"""SolverKit implementation packages."""

__version__ = "0.1.0"
