# /core/embeddings.py

import threading
from typing import List, Optional, Sequence

from langchain_google_genai import GoogleGenerativeAIEmbeddings

from core.config import settings
from core.similarity import l2_normalize

_model = None
_model_lock = threading.Lock()


def get_embeddings_model():
    """
    Returns the process-wide embeddings model, creating it on first use.
    The instance is read-only afterwards and shared by every request.
    """
    global _model
    if _model is None:
        with _model_lock:
            if _model is None:
                _model = GoogleGenerativeAIEmbeddings(
                    model=settings.EMBEDDING_MODEL,
                    google_api_key=settings.GOOGLE_API_KEY or None,
                )
    return _model


class VectorEmbedder:
    """Maps text to an L2-normalized vector, so dot product equals cosine similarity."""

    def __init__(self, model=None):
        self._model = model

    @property
    def model(self):
        return self._model if self._model is not None else get_embeddings_model()

    def embed(self, text: Optional[str]) -> List[float]:
        normalized = (text or "").strip()
        if not normalized:
            return []
        vector = self.model.embed_query(normalized)
        return l2_normalize(vector) if vector else []

    def embed_many(self, texts: Sequence[str]) -> List[List[float]]:
        """Embeds a batch; empty texts map to empty vectors without a model call."""
        cleaned = [(text or "").strip() for text in texts]
        to_embed = [text for text in cleaned if text]
        vectors = iter(self.model.embed_documents(to_embed) if to_embed else [])
        return [l2_normalize(next(vectors)) if text else [] for text in cleaned]
