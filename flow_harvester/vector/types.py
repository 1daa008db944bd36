"""
Record and result types shared by every vector store backend.
"""

from typing import Dict
import numpy as np
from dataclasses import dataclass


@dataclass
class VectorRecord:
    """Represents a vector record with metadata."""

    id: str
    """Unique identifier for the vector record (message id)"""

    vector: np.ndarray
    """The embedding of the message text"""

    metadata: Dict[str, object]
    """Message role and normalized text"""


@dataclass
class QueryResult:
    """Represents a search result from vector store."""

    id: str
    """Identifier for the matching record"""

    score: float
    """Similarity score of the match under the store's policy"""

    metadata: Dict[str, object]
    """Metadata associated with the matched record"""
