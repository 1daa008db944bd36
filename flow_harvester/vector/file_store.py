"""
File-backed vector store.

Same ranking behaviour as the memory store; contents are reloaded from a
JSON document on construction and written back on ``flush()``, so a later
run can reuse embeddings for messages it has already seen.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Union

from .index import SimpleInMemoryVectorStore, SimilarityPolicy
from ..core.errors import VectorIndexError
from ..util.logging import logger

FILE_FORMAT_VERSION = 1


class FileVectorStore(SimpleInMemoryVectorStore):
    """SimpleInMemoryVectorStore persisted to a JSON file."""

    def __init__(self, path: Union[str, Path], similarity: Union[str, SimilarityPolicy] = "cosine"):
        """
        Initialize the store and load any existing index at ``path``.

        Args:
            path: Location of the JSON index document
            similarity: Similarity policy name or callable

        Raises:
            VectorIndexError: If an existing file cannot be read or parsed
        """
        super().__init__(similarity=similarity)
        self.path = Path(path)
        self._load()

    def _load(self) -> None:
        """Load existing records from disk, preserving stored order."""
        if not self.path.exists():
            logger.debug(f"No existing index at {self.path}, starting empty")
            return

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                document = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise VectorIndexError(f"Failed to read index file {self.path}: {e}") from e

        if not isinstance(document, dict) or not isinstance(document.get("records"), list):
            raise VectorIndexError(f"Index file {self.path} has an unexpected layout")

        version = document.get("version")
        if version != FILE_FORMAT_VERSION:
            raise VectorIndexError(f"Unsupported index file version {version!r} in {self.path}")

        self.embedder_signature = document.get("embedder")

        for entry in document["records"]:
            try:
                self.upsert(entry["id"], entry["vector"], entry.get("metadata") or {})
            except (KeyError, TypeError) as e:
                raise VectorIndexError(f"Malformed record in {self.path}: {e}") from e

        logger.log_vector_operation("load", str(self.path), {"records": len(self)})

    def flush(self) -> None:
        """Write every record to disk atomically (temp file + replace)."""
        with self._lock:
            document = {
                "version": FILE_FORMAT_VERSION,
                "dimension": self.dimension,
                "embedder": self.embedder_signature,
                "records": [
                    {
                        "id": record_id,
                        "vector": self._records[record_id].vector.tolist(),
                        "metadata": self._records[record_id].metadata,
                    }
                    for record_id in self._order
                ],
            }

        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".flow_index-", suffix=".tmp")
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(document, f)
            os.replace(tmp_name, self.path)
        except (OSError, TypeError, ValueError) as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise VectorIndexError(f"Failed to write index file {self.path}: {e}") from e

        logger.log_vector_operation("flush", str(self.path), {"records": len(document["records"])})
