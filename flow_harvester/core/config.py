"""
Runtime configuration for the clustering core.

All values come from environment variables. Getters read the environment
at call time so a test or a long-lived server picks up changes without a
module reload.
"""

import os

from .. import VERSION
from .errors import ConfigError

VALID_BACKENDS = ["mem", "file"]
VALID_SIMILARITIES = ["cosine", "dot"]


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")


def get_index_backend() -> str:
    """Get index backend (mem|file)."""
    return os.getenv("FLOW_INDEX_BACKEND", "mem").lower()


def get_index_path() -> str:
    """Get file-backend index location."""
    return os.getenv("FLOW_INDEX_PATH", "./data/flow_index.json")


def get_embed_dim() -> int:
    return _int_env("FLOW_EMBED_DIM", 256)


def get_similarity() -> str:
    """Get similarity policy name (cosine|dot)."""
    return os.getenv("FLOW_SIMILARITY", "cosine").lower()


def get_neighbor_k() -> int:
    return _int_env("FLOW_NEIGHBOR_K", 50)


def get_seed_cap() -> int:
    return _int_env("FLOW_SEED_CAP", 12)


def get_title_max() -> int:
    return _int_env("FLOW_TITLE_MAX", 80)


def get_ingest_workers() -> int:
    return _int_env("FLOW_INGEST_WORKERS", 1)


def debug_enabled():
    """Check if debug mode is enabled."""
    return os.getenv("DEBUG", "false").lower() == "true"


def get_vector_store(backend: str = None, path: str = None):
    """Create a fresh vector store for the configured backend.

    Every call returns a new instance; the store is owned by whoever
    asked for it and is never shared implicitly between runs.
    """
    backend = (backend or get_index_backend()).lower()
    similarity = get_similarity()
    if similarity not in VALID_SIMILARITIES:
        raise ConfigError(f"Invalid FLOW_SIMILARITY: {similarity}")

    if backend == "mem":
        from ..vector.index import SimpleInMemoryVectorStore
        return SimpleInMemoryVectorStore(similarity=similarity)
    elif backend == "file":
        from ..vector.file_store import FileVectorStore
        return FileVectorStore(path or get_index_path(), similarity=similarity)
    else:
        raise ConfigError(f"Invalid FLOW_INDEX_BACKEND: {backend}")


def get_embedding_provider(dimension: int = None):
    """Get the local embedding provider."""
    from ..vector.embeddings import HashedTokenEmbedding
    return HashedTokenEmbedding(dimension=dimension or get_embed_dim())


def validate_config():
    """Validate configuration and return any issues."""
    issues = []

    if get_index_backend() not in VALID_BACKENDS:
        issues.append(f"Invalid FLOW_INDEX_BACKEND: {get_index_backend()}")

    if get_similarity() not in VALID_SIMILARITIES:
        issues.append(f"Invalid FLOW_SIMILARITY: {get_similarity()}")

    for name, getter in [
        ("FLOW_EMBED_DIM", get_embed_dim),
        ("FLOW_NEIGHBOR_K", get_neighbor_k),
        ("FLOW_SEED_CAP", get_seed_cap),
        ("FLOW_TITLE_MAX", get_title_max),
        ("FLOW_INGEST_WORKERS", get_ingest_workers),
    ]:
        try:
            value = getter()
        except ConfigError as e:
            issues.append(str(e))
            continue
        if value < 1:
            issues.append(f"{name} must be >= 1")

    return issues
