from typing import Set

from core.config import settings
from core.database import GraphDBInterface
from core.embeddings import VectorEmbedder
from core.logger import get_logger
from core.models import ArtworkEmbeddingRow, parse_rows

logger = get_logger(__name__)

PENDING_ARTWORKS_QUERY = """
MATCH (w:Artwork)
WHERE w.embedding IS NULL AND w.id IS NOT NULL AND NOT toString(w.id) IN $exclude
OPTIONAL MATCH (a:Artist)-[:CREATED]->(w)
WITH w, head(collect(a.name)) AS artist_name
RETURN toString(w.id) AS id, w.title AS title, w.meta_data AS meta, artist_name
ORDER BY id
LIMIT $limit
"""

SAVE_EMBEDDING_QUERY = """
MATCH (w:Artwork)
WHERE toString(w.id) = $id
SET w.embedding = $embedding
RETURN count(w) AS updated
"""


def build_embedding_text(row: ArtworkEmbeddingRow, max_chars: int) -> str:
    parts = [
        f"Title: {row.title or 'Unknown'}",
        f"Artist: {row.artist_name}" if row.artist_name else "",
        f"Details: {row.meta}" if row.meta else "",
    ]
    text = "\n".join(part for part in parts if part)
    return text[:max_chars]


class EmbeddingIndexer:
    """Fills in Artwork.embedding for every artwork that lacks one."""

    def __init__(self, db_client: GraphDBInterface, embedder: VectorEmbedder = None,
                 batch_size: int = None, max_chars: int = None):
        self.db_client = db_client
        self.embedder = embedder or VectorEmbedder()
        self.batch_size = batch_size or settings.EMBED_BATCH_SIZE
        self.max_chars = max_chars or settings.EMBED_MAX_CHARS

    def run(self) -> int:
        self.db_client.ensure_vector_index(
            index_name=settings.ARTWORK_INDEX_NAME,
            node_label="Artwork",
            property_name="embedding",
            dimensions=settings.EMBEDDING_DIMENSIONS,
        )
        processed = 0
        # Artworks that could not be embedded are skipped for the rest of the run.
        failed: Set[str] = set()
        while True:
            with self.db_client.session() as session:
                batch = parse_rows(ArtworkEmbeddingRow, session.run(
                    PENDING_ARTWORKS_QUERY, {"exclude": sorted(failed), "limit": self.batch_size}
                ))
                if not batch:
                    break
                for row in batch:
                    if not row.id:
                        continue
                    try:
                        embedding = self.embedder.embed(build_embedding_text(row, self.max_chars))
                    except Exception as e:
                        logger.error(f"Embedding failed for artwork {row.id}: {e}")
                        embedding = []
                    if not embedding:
                        failed.add(row.id)
                        continue
                    saved = session.run(SAVE_EMBEDDING_QUERY, {"id": row.id, "embedding": embedding})
                    if not saved or not saved[0].get("updated"):
                        failed.add(row.id)
                        continue
                    processed += 1
                    if processed % 10 == 0:
                        logger.info(f"Processed {processed} artworks...")
        logger.info(f"Embedding generation completed. Total nodes updated: {processed}.")
        return processed
