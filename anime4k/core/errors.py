"""
Anime4K - Error Types
=====================
Raised synchronously before (configuration) or instead of (contract
violations) any partial output.
"""


class Anime4KError(Exception):
    """Base class for all Anime4K errors."""


class InvalidConfiguration(Anime4KError, ValueError):
    """Rejected parameters: dimensions, pass count, strengths, version."""


class DimensionMismatch(Anime4KError, RuntimeError):
    """Two buffers that must share a shape do not."""
