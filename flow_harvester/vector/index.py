"""
In-process vector index with pluggable similarity.

Records keep the position at which their id was first inserted. Query
results are ordered by descending score and, for equal scores, by that
position, so two stores populated in the same order always answer the
same query identically.
"""

from abc import ABC, abstractmethod
from typing import Callable, Dict, Iterable, List, Optional, Union
import threading
import numpy as np

from .types import VectorRecord, QueryResult
from ..core.errors import VectorIndexError

# (query vector of shape (d,), matrix of shape (n, d)) -> scores of shape (n,)
SimilarityPolicy = Callable[[np.ndarray, np.ndarray], np.ndarray]


def cosine_similarity(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of ``query`` against every row of ``matrix``.

    Rows with zero norm score 0.
    """
    denom = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query)
    scores = np.zeros(matrix.shape[0], dtype=np.float64)
    nonzero = denom > 0
    scores[nonzero] = (matrix[nonzero] @ query) / denom[nonzero]
    return scores


def dot_similarity(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Raw inner product. Equals cosine for unit-length embeddings."""
    return matrix @ query


SIMILARITY_POLICIES: Dict[str, SimilarityPolicy] = {
    "cosine": cosine_similarity,
    "dot": dot_similarity,
}


def get_similarity_policy(policy: Union[str, SimilarityPolicy]) -> SimilarityPolicy:
    """Resolve a policy name or pass a callable through."""
    if callable(policy):
        return policy
    try:
        return SIMILARITY_POLICIES[policy]
    except KeyError:
        raise ValueError(f"Unknown similarity policy: {policy!r} (expected one of {sorted(SIMILARITY_POLICIES)})")


class IVectorStore(ABC):
    """Abstract interface for vector storage operations."""

    @abstractmethod
    def upsert(self, record_id: str, vector, metadata: Dict[str, object]) -> None:
        """Insert or overwrite the record for ``record_id``."""
        pass

    @abstractmethod
    def query(self, vector, k: int, restrict_to: Optional[Iterable[str]] = None) -> List[QueryResult]:
        """Return at most ``k`` records ranked by similarity to ``vector``."""
        pass

    @abstractmethod
    def get(self, record_id: str) -> Optional[VectorRecord]:
        """Get the stored record for ``record_id``, if any."""
        pass

    @abstractmethod
    def ids(self) -> List[str]:
        """Stored ids in insertion order."""
        pass

    @abstractmethod
    def flush(self) -> None:
        """Make every acknowledged upsert durable for this backend."""
        pass

    @abstractmethod
    def ensure_embedder(self, signature: str) -> bool:
        """Bind the store to an embedder signature.

        Records written under a different signature are dropped. Returns
        True when that happened.
        """
        pass

    @abstractmethod
    def clear(self) -> None:
        """Clear all records from the store."""
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass

    def add(self, record: VectorRecord) -> None:
        """Upsert a VectorRecord."""
        self.upsert(record.id, record.vector, record.metadata)

    def batch_add(self, records: List[VectorRecord]) -> None:
        """Upsert multiple records in order."""
        for record in records:
            self.add(record)


class SimpleInMemoryVectorStore(IVectorStore):
    """In-memory IVectorStore, discarded with the process."""

    def __init__(self, similarity: Union[str, SimilarityPolicy] = "cosine"):
        self.similarity = get_similarity_policy(similarity)
        self.dimension: Optional[int] = None
        self.embedder_signature: Optional[str] = None
        self._records: Dict[str, VectorRecord] = {}
        # Explicit insertion order: position of each id and the ordered ids
        self._position: Dict[str, int] = {}
        self._order: List[str] = []
        self._lock = threading.Lock()

    def _coerce(self, vector) -> np.ndarray:
        try:
            array = np.asarray(vector, dtype=np.float64)
        except (TypeError, ValueError) as e:
            raise VectorIndexError(f"Vector is not numeric: {e}") from e
        if array.ndim != 1 or array.size == 0:
            raise VectorIndexError(f"Vector must be a non-empty 1-D sequence, got shape {array.shape}")
        if self.dimension is not None and array.size != self.dimension:
            raise VectorIndexError(f"Vector dimension {array.size} does not match expected dimension {self.dimension}")
        return array

    def upsert(self, record_id: str, vector, metadata: Dict[str, object]) -> None:
        """Insert or overwrite; an overwritten id keeps its original position."""
        if record_id is None:
            raise VectorIndexError("Record id must not be None")
        record_id = str(record_id)

        with self._lock:
            array = self._coerce(vector)
            if self.dimension is None:
                self.dimension = array.size

            if record_id not in self._position:
                self._position[record_id] = len(self._order)
                self._order.append(record_id)

            self._records[record_id] = VectorRecord(
                id=record_id,
                vector=array,
                metadata=dict(metadata or {}),
            )

    def query(self, vector, k: int, restrict_to: Optional[Iterable[str]] = None) -> List[QueryResult]:
        """Rank stored records against ``vector``.

        Results are sorted by descending score, ties broken by ascending
        insertion position. ``restrict_to`` limits ranking to the given
        ids. An empty store, ``k <= 0`` or a zero query vector yields [].
        """
        if k <= 0:
            return []

        with self._lock:
            allowed = None if restrict_to is None else set(restrict_to)
            ids = [i for i in self._order if allowed is None or i in allowed]
            if not ids:
                return []

            query_vector = self._coerce(vector)
            if not np.any(query_vector):
                return []

            matrix = np.vstack([self._records[i].vector for i in ids])
            positions = np.array([self._position[i] for i in ids])
            records = [self._records[i] for i in ids]

        scores = np.asarray(self.similarity(query_vector, matrix), dtype=np.float64)
        # lexsort sorts by the last key first: score descending, then position
        ranking = np.lexsort((positions, -scores))[:k]

        return [
            QueryResult(
                id=records[j].id,
                score=float(scores[j]),
                metadata=dict(records[j].metadata),
            )
            for j in ranking
        ]

    def get(self, record_id: str) -> Optional[VectorRecord]:
        with self._lock:
            return self._records.get(str(record_id))

    def ids(self) -> List[str]:
        with self._lock:
            return list(self._order)

    def flush(self) -> None:
        """Nothing to persist for the memory backend."""
        pass

    def ensure_embedder(self, signature: str) -> bool:
        stale = len(self) > 0 and self.embedder_signature != signature
        if stale:
            self.clear()
        self.embedder_signature = signature
        return stale

    def clear(self) -> None:
        """Clear all records from the store."""
        with self._lock:
            self._records.clear()
            self._position.clear()
            self._order.clear()
            self.dimension = None

    def __len__(self) -> int:
        return len(self._order)
