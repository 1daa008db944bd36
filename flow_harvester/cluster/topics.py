"""
Greedy partitioning of seed neighborhoods into disjoint topics.

Each seed, in seed order, claims itself and its nearest neighbors from a
single ClaimLedger. Ids already claimed by an earlier seed are skipped,
so topics are pairwise disjoint by construction.
"""

import threading
import time
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Set, Union

from ..core import config
from ..core.errors import ClusteringError
from ..core.messages import Message, normalize_messages
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore
from .ingest import embed_text, index_call, ingest
from .seeds import Seed, extract_seeds


@dataclass
class Topic:
    """A titled, duplicate-free, ordered group of message ids."""

    title: str
    ids: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "ids": list(self.ids)}


class ClaimLedger:
    """Ordered record of every id claimed during one clustering run.

    Keeps the claim order as an explicit list next to a membership set.
    The lock makes each ``claim`` call atomic; callers are still
    responsible for issuing claims in seed order.
    """

    def __init__(self):
        self._order: List[str] = []
        self._claimed: Set[str] = set()
        self._lock = threading.Lock()

    def claim(self, candidates: Iterable[str]) -> List[str]:
        """Claim unclaimed candidates; return them in candidate order."""
        newly_claimed = []
        with self._lock:
            for candidate in candidates:
                if candidate in self._claimed:
                    continue
                self._claimed.add(candidate)
                self._order.append(candidate)
                newly_claimed.append(candidate)
        return newly_claimed

    def claimed(self) -> List[str]:
        with self._lock:
            return list(self._order)

    def __contains__(self, item: str) -> bool:
        with self._lock:
            return item in self._claimed

    def __len__(self) -> int:
        with self._lock:
            return len(self._order)


def partition(seeds: Sequence[Seed], store: IVectorStore, embedder: IEmbeddingProvider,
              neighbor_k: int = 50, restrict_to: Optional[Iterable[str]] = None,
              ledger: Optional[ClaimLedger] = None) -> List[Topic]:
    """
    Turn seed neighborhoods into disjoint topics.

    The store must already hold every relevant message. One topic is
    produced per seed, in seed order; a topic is empty when all of its
    candidates were claimed earlier.

    Args:
        seeds: Seeds in processing order
        store: Fully ingested vector store
        embedder: Provider used to embed seed titles
        neighbor_k: Neighbors queried per seed
        restrict_to: Optional id allow-list for queries
        ledger: Claim ledger to use; a fresh one by default

    Returns:
        Topics aligned with ``seeds``
    """
    ledger = ledger if ledger is not None else ClaimLedger()
    allowed = None if restrict_to is None else set(restrict_to)

    topics: List[Topic] = []
    for seed in seeds:
        vector = embed_text(embedder, seed.title)
        hits = index_call(store.query, vector, neighbor_k, restrict_to=allowed)

        # Seed id first, then neighbors by descending similarity
        candidates = [seed.id] + [hit.id for hit in hits]
        ids = ledger.claim(candidates)

        logger.log_seed(seed.id, seed.title, len(ids))
        topics.append(Topic(title=seed.title, ids=ids))

    return topics


def cluster(messages: Sequence[Union[Message, Mapping[str, Any]]],
            store: Optional[IVectorStore] = None,
            embedder: Optional[IEmbeddingProvider] = None,
            neighbor_k: Optional[int] = None,
            seed_cap: Optional[int] = None,
            title_max: Optional[int] = None,
            workers: Optional[int] = None) -> List[Topic]:
    """
    Group a conversation into disjoint topics.

    Ingests every non-tool message into ``store`` (a fresh store from
    configuration when omitted), waits for the ingestion barrier, then
    partitions the seeds extracted from user messages. Options left as
    None come from configuration.

    Raises:
        EmbeddingError: If any message or seed title cannot be embedded
        VectorIndexError: If any index operation fails
    """
    start_time = time.time()
    messages = normalize_messages(messages)

    store = store if store is not None else config.get_vector_store()
    embedder = embedder if embedder is not None else config.get_embedding_provider()
    neighbor_k = config.get_neighbor_k() if neighbor_k is None else neighbor_k
    seed_cap = config.get_seed_cap() if seed_cap is None else seed_cap
    title_max = config.get_title_max() if title_max is None else title_max
    workers = config.get_ingest_workers() if workers is None else workers

    try:
        report = ingest(messages, store, embedder, workers=workers)
        seeds = extract_seeds(messages, cap=seed_cap, title_max=title_max)
        topics = partition(seeds, store, embedder, neighbor_k=neighbor_k, restrict_to=report.ids)
    except ClusteringError as e:
        logger.log_cluster_failure(e.kind, e)
        raise

    assigned = sum(len(topic.ids) for topic in topics)
    logger.log_cluster_run(len(seeds), len(topics), assigned, (time.time() - start_time) * 1000)
    return topics
