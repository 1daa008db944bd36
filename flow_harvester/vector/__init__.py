"""
Vector index layer: local embeddings plus memory and file backed stores.
"""

# Package initialization for vector module
from .index import (
    IVectorStore,
    SimpleInMemoryVectorStore,
    cosine_similarity,
    dot_similarity,
    get_similarity_policy,
)
from .file_store import FileVectorStore
from .types import VectorRecord, QueryResult
from .embeddings import IEmbeddingProvider, HashedTokenEmbedding

__all__ = [
    'IVectorStore',
    'SimpleInMemoryVectorStore',
    'FileVectorStore',
    'VectorRecord',
    'QueryResult',
    'IEmbeddingProvider',
    'HashedTokenEmbedding',
    'cosine_similarity',
    'dot_similarity',
    'get_similarity_policy',
]
