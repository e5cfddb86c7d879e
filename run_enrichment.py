# /run_enrichment.py

import sys
from dotenv import load_dotenv

from core.database import Neo4jDatabase
from core.entity_resolver import EntityResolver
from core.logger import get_logger
from core.wikidata import WikidataClient

logger = get_logger(__name__)

def main():
    """
    Links artists to Wikidata, pulls images and relations, then merges duplicates.
    Pass --force to revisit synced artists still missing an image or relations.
    """
    load_dotenv()

    db_client = Neo4jDatabase()
    wikidata_client = WikidataClient()
    try:
        report = EntityResolver(db_client, wikidata_client).run(force="--force" in sys.argv[1:])
        logger.info(f"Enrichment report: {report.model_dump()}")
    finally:
        wikidata_client.close()
        db_client.close()
        logger.info("Enrichment script finished.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
