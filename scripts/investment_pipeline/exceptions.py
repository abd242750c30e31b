"""
Exception hierarchy for pipeline runs.
"""


class PipelineError(Exception):
    """Base class for run-level pipeline failures."""


class CatalogError(PipelineError):
    """The item catalog is empty or could not be loaded."""


class InvalidInputError(PipelineError, ValueError):
    """Caller supplied an unusable budget or item count."""
