from typing import Dict, List

from core.database import GraphDBInterface
from core.logger import get_logger
from ingestion.sources import DataSource

logger = get_logger(__name__)

class IngestionEngine:
    def __init__(self, db_client: GraphDBInterface, data_sources: List[DataSource]):
        self.db_client = db_client
        self.data_sources = data_sources

    def run(self, reset: bool = False) -> Dict[str, int]:
        """
        Runs the seeding pipeline:
        1. Ensures uniqueness constraints (and optionally wipes the graph).
        2. Loads every source in order, one idempotent MERGE per record.
        Returns the number of records written per source.
        """
        self.db_client.ensure_constraints()
        if reset:
            self.db_client.execute_query("MATCH (n) DETACH DELETE n")
            logger.info("Existing graph cleared.")

        counts = {}
        for source in self.data_sources:
            counts[source.name] = self._load_source(source)
            logger.info(f"Source '{source.name}' loaded: {counts[source.name]} records.")

        logger.info("--- Ingestion process complete. ---")
        return counts

    def _load_source(self, source: DataSource) -> int:
        written = skipped = 0
        with self.db_client.session() as session:
            for record in source.load_records():
                params = source.to_params(record)
                if params is None:
                    skipped += 1
                    continue
                session.run(source.cypher, params)
                written += 1
                if written % 100 == 0:
                    logger.info(f"   ...processed {written} {source.name} records")
        if skipped:
            logger.warning(f"Skipped {skipped} {source.name} records without a usable key.")
        return written
