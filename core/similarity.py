# /core/similarity.py

from typing import Callable, List, Sequence, TypeVar

import numpy as np

from core.logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def l2_normalize(vector: Sequence[float], eps: float = 1e-12) -> List[float]:
    arr = np.asarray(vector, dtype=np.float32)
    if arr.size == 0:
        return []
    norm = float(np.linalg.norm(arr))
    return (arr / max(norm, eps)).tolist()


def cosine_similarity(vec_a: Sequence[float], vec_b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 when either is empty or their lengths differ."""
    a = np.asarray(vec_a, dtype=np.float32)
    b = np.asarray(vec_b, dtype=np.float32)
    if a.size == 0 or a.shape != b.shape:
        return 0.0
    denom = float(np.linalg.norm(a) * np.linalg.norm(b))
    if denom == 0.0:
        return 0.0
    return float(np.dot(a, b) / denom)


class SimilarityScorer:
    """Scores and reorders documents by semantic similarity to a query."""

    def __init__(self, embedder):
        self.embedder = embedder

    def scores(self, query: str, documents: Sequence[str]) -> List[float]:
        if not query or not documents:
            return []
        try:
            query_vector = self.embedder.embed(query)
            if not query_vector:
                return [0.0] * len(documents)
            doc_vectors = self.embedder.embed_many(list(documents))
            return [cosine_similarity(query_vector, vec) if vec else 0.0 for vec in doc_vectors]
        except Exception as e:
            # Zero scores keep the caller's original order.
            logger.error(f"Reranking error: {e}", exc_info=True)
            return [0.0] * len(documents)

    def rerank(self, query: str, items: Sequence[T], text_of: Callable[[T], str]) -> List[T]:
        """Returns items ordered by descending similarity; ties keep their input order."""
        items = list(items)
        if len(items) < 2:
            return items
        item_scores = self.scores(query, [text_of(item) for item in items])
        order = sorted(range(len(items)), key=lambda i: -item_scores[i])
        return [items[i] for i in order]
