# /core/console.py
# Administrative escape hatch: runs arbitrary Cypher. Never used by retrieval.

from core.database import GraphDBInterface
from core.logger import get_logger
from core.models import ConsoleResult

logger = get_logger(__name__)


def execute_raw_query(db_client: GraphDBInterface, cypher_query: str) -> ConsoleResult:
    """
    Runs a raw Cypher query and returns its rows with nodes and relationships
    flattened to their properties. Upstream errors are surfaced verbatim.
    """
    if not cypher_query or not cypher_query.strip():
        return ConsoleResult(error=True, message="Query cannot be empty.")

    try:
        with db_client.session() as session:
            records = session.run(cypher_query)
    except Exception as e:
        logger.warning(f"Console query failed: {e}")
        return ConsoleResult(
            error=True,
            message=str(e) or "An error occurred while executing the query.",
        )

    return ConsoleResult(
        success=True,
        records=records,
        summary=f"Query executed successfully. Found {len(records)} records.",
    )
