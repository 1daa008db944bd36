"""
Local text embeddings. No model download, no network, no subprocess.
"""

from abc import ABC, abstractmethod
import hashlib
import re
import numpy as np

from ..core.errors import EmbeddingError

TOKEN_PATTERN = re.compile(r"[^\W_]+", re.UNICODE)

# Function words carry no topical signal; they are only used when a text
# has nothing else.
STOPWORDS = frozenset("""
a an and are as at be but by can do for from has have here how i if in is it
its me my no not of on or our s so that the their them then there these this
to too us was we were what when where which who why will with you your
""".split())

BIGRAM_WEIGHT = 0.5


class IEmbeddingProvider(ABC):
    """Abstract interface for embedding providers."""

    @abstractmethod
    def embed_text(self, text: str) -> list[float]:
        """Generate embedding vector for given text."""
        pass

    @abstractmethod
    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        pass

    def signature(self) -> str:
        """Identify the embedding function; vectors from different signatures are not comparable."""
        return f"{type(self).__name__}:{self.get_dimension()}"


def tokenize(text: str) -> list[str]:
    """Lowercase word tokens with stopwords removed.

    Falls back to the full token list when every token is a stopword so
    short texts such as "how to" still get a non-zero vector.
    """
    tokens = TOKEN_PATTERN.findall(text.lower())
    salient = [t for t in tokens if t not in STOPWORDS]
    return salient or tokens


class HashedTokenEmbedding(IEmbeddingProvider):
    """Deterministic hashed bag-of-tokens embedding.

    Each token (and, at half weight, each adjacent token pair) is hashed
    into one of ``dimension`` buckets with a hash-derived sign, then the
    vector is L2-normalized. Texts sharing more tokens and phrasing land
    closer under cosine similarity. The empty string maps to the zero
    vector.
    """

    def __init__(self, dimension: int = 256):
        if dimension < 1:
            raise ValueError("dimension must be >= 1")
        self.dimension = dimension

    def _bucket(self, feature: str) -> tuple[int, float]:
        digest = hashlib.md5(feature.encode("utf-8")).digest()
        index = int.from_bytes(digest[:8], "big") % self.dimension
        sign = 1.0 if digest[8] & 1 else -1.0
        return index, sign

    def embed_text(self, text: str) -> list[float]:
        """Generate deterministic embedding vector for ``text``."""
        if not isinstance(text, str):
            raise EmbeddingError(f"Cannot embed {type(text).__name__}; expected str")

        vector = np.zeros(self.dimension, dtype=np.float64)
        tokens = tokenize(text)

        for token in tokens:
            index, sign = self._bucket(token)
            vector[index] += sign

        for first, second in zip(tokens, tokens[1:]):
            index, sign = self._bucket(f"{first} {second}")
            vector[index] += sign * BIGRAM_WEIGHT

        norm = np.linalg.norm(vector)
        if norm > 0:
            vector = vector / norm

        return vector.tolist()

    def get_dimension(self) -> int:
        """Get the dimension of the embedding vectors."""
        return self.dimension

    def signature(self) -> str:
        return f"hashed-token-v1:{self.dimension}"
