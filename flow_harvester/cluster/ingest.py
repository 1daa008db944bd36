"""
Ingestion phase: embed every non-tool message and upsert it into the index.

``ingest`` returns only after the store has flushed, which is the barrier
the partitioner relies on: no query is issued against a partially built
index.
"""

import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from functools import partial
from typing import Callable, List, Sequence, TypeVar

from ..core.errors import EmbeddingError, VectorIndexError
from ..core.messages import Message, Role
from ..util.logging import logger
from ..vector.embeddings import IEmbeddingProvider
from ..vector.index import IVectorStore

T = TypeVar("T")


@dataclass
class IngestReport:
    """Outcome of one ingestion pass."""

    ids: List[str] = field(default_factory=list)
    embedded: int = 0
    reused: int = 0


def embed_text(embedder: IEmbeddingProvider, text: str) -> list[float]:
    """Embed ``text``, reporting any provider failure as EmbeddingError."""
    try:
        return embedder.embed_text(text)
    except EmbeddingError:
        raise
    except Exception as e:
        raise EmbeddingError(f"Embedding failed: {e}") from e


def index_call(fn: Callable[..., T], *args, **kwargs) -> T:
    """Call a store method, reporting any backend failure as VectorIndexError."""
    try:
        return fn(*args, **kwargs)
    except VectorIndexError:
        raise
    except Exception as e:
        raise VectorIndexError(f"Index operation {getattr(fn, '__name__', fn)} failed: {e}") from e


def relevant_messages(messages: Sequence[Message]) -> List[Message]:
    """Messages that take part in clustering (everything except tool output)."""
    return [m for m in messages if m.role is not Role.TOOL]


def ingest(messages: Sequence[Message], store: IVectorStore, embedder: IEmbeddingProvider,
           workers: int = 1) -> IngestReport:
    """
    Embed and upsert every relevant message, then flush the store.

    Embeddings may be computed on ``workers`` threads, but upserts are
    always issued in message order so insertion positions (and therefore
    query tie-breaks) do not depend on thread scheduling. A message whose
    id is already stored with the same role and text reuses the stored
    vector instead of being embedded again.

    Stored records written by a different embedder are discarded first,
    since their vectors are neither comparable nor reusable.

    Args:
        messages: Normalized messages in conversation order
        store: Target vector store
        embedder: Embedding provider
        workers: Number of embedding threads

    Returns:
        IngestReport with the ingested ids in order

    Raises:
        EmbeddingError: If any text cannot be embedded
        VectorIndexError: If any store operation fails
    """
    start_time = time.time()
    relevant = relevant_messages(messages)

    try:
        signature = str(embedder.signature())
    except Exception as e:
        raise EmbeddingError(f"Embedder signature unavailable: {e}") from e
    if index_call(store.ensure_embedder, signature):
        logger.log_vector_operation("rebuild", signature, {"reason": "embedder changed"})

    # Snapshot before any upsert so repeated ids inside this run are
    # compared against the previous run's state, not against each other.
    reusable = []
    for message in relevant:
        existing = index_call(store.get, message.id)
        same = (
            existing is not None
            and existing.metadata.get("role") == message.role.value
            and existing.metadata.get("text") == message.text
        )
        reusable.append(existing.vector if same else None)

    texts = [m.text for m, vector in zip(relevant, reusable) if vector is None]
    if workers > 1 and len(texts) > 1:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="flow-embed") as pool:
            fresh = list(pool.map(partial(embed_text, embedder), texts))
    else:
        fresh = [embed_text(embedder, text) for text in texts]

    report = IngestReport()
    fresh_iter = iter(fresh)
    for message, vector in zip(relevant, reusable):
        if vector is None:
            vector = next(fresh_iter)
            report.embedded += 1
        else:
            report.reused += 1
        index_call(store.upsert, message.id, vector, {"role": message.role.value, "text": message.text})
        report.ids.append(message.id)

    index_call(store.flush)

    logger.log_ingest(len(relevant), report.embedded, report.reused, (time.time() - start_time) * 1000)
    return report
