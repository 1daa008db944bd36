"""
Error taxonomy for a harvesting run.

A clustering run surfaces exactly one terminal failure. Callers can tell
an embedding failure from an index failure either by exception type or by
the ``kind`` attribute carried on every ClusteringError.
"""


class FlowHarvesterError(Exception):
    """Base class for all flow harvester errors."""


class ConfigError(FlowHarvesterError):
    """Invalid configuration value."""


class MessageFormatError(FlowHarvesterError):
    """Chat export could not be read or has an unexpected shape."""


class ClusteringError(FlowHarvesterError):
    """Terminal failure of a clustering run."""

    kind = "clustering"

    def __init__(self, message: str, kind: str = None):
        super().__init__(message)
        if kind is not None:
            self.kind = kind


class EmbeddingError(ClusteringError):
    """Text could not be embedded."""

    kind = "embedding"


class VectorIndexError(ClusteringError):
    """Vector index upsert, query or storage failure."""

    kind = "index"
