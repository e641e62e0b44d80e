"""Compression subsystem exceptions."""


class CompressionError(Exception):
    """Base class for compression errors."""


class CompressionConfigError(CompressionError, ValueError):
    """Invalid compression configuration."""
