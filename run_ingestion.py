# /run_ingestion.py

import os
import sys
from dotenv import load_dotenv

from core.config import settings
from core.database import Neo4jDatabase
from core.logger import get_logger
from ingestion.embedding_indexer import EmbeddingIndexer
from ingestion.engine import IngestionEngine
from ingestion.sources import ArtistInfoCsvSource, ArtistsCsvSource, ArtworkCsvSource

logger = get_logger(__name__)

def main():
    """
    Seeds the art graph from the CSV datasets, then embeds every artwork.
    Pass --reset to wipe the graph first.
    """
    load_dotenv()

    if not os.getenv("GOOGLE_API_KEY") and not settings.GOOGLE_API_KEY:
        logger.error("GOOGLE_API_KEY not found in .env file.")
        return 1

    # --- Configure Your Data Sources Here ---
    data_dir = settings.DATA_DIR
    sources = [
        ArtistsCsvSource(path=os.path.join(data_dir, "artists.csv")),
        ArtistInfoCsvSource(path=os.path.join(data_dir, "info_dataset.csv")),
        ArtworkCsvSource(path=os.path.join(data_dir, "artwork_dataset.csv")),
    ]

    db_client = Neo4jDatabase()
    try:
        engine = IngestionEngine(db_client, data_sources=sources)
        engine.run(reset="--reset" in sys.argv[1:])
        EmbeddingIndexer(db_client).run()
    finally:
        db_client.close()
        logger.info("Database connection closed.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
