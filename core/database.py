# /core/database.py

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from neo4j import GraphDatabase
from neo4j.graph import Node, Path, Relationship

from core.config import settings
from core.logger import get_logger

logger = get_logger(__name__)


def to_plain(value: Any) -> Any:
    """
    Converts a value returned by the driver into plain Python data.

    Nodes and relationships become property dicts carrying their element id
    (and labels or type), temporal values become ISO strings, and containers
    are converted recursively. Nothing past the store boundary sees a driver type.
    """
    if isinstance(value, Node):
        props = {key: to_plain(val) for key, val in value.items()}
        props["_id"] = value.element_id
        props["_labels"] = sorted(value.labels)
        return props
    if isinstance(value, Relationship):
        props = {key: to_plain(val) for key, val in value.items()}
        props["_id"] = value.element_id
        props["_type"] = value.type
        return props
    if isinstance(value, Path):
        return [to_plain(node) for node in value.nodes]
    if isinstance(value, dict):
        return {key: to_plain(val) for key, val in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_plain(item) for item in value]
    if hasattr(value, "iso_format"):
        return value.iso_format()
    return value


def to_text(value: Any) -> str:
    """Renders an identifier-like value as text; missing values become ''."""
    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value).strip()


class GraphSession:
    """A scoped store session that hands back plain rows of named columns."""

    def __init__(self, session):
        self._session = session

    def run(self, query: str, params: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
        result = self._session.run(query, params or {})
        return [{key: to_plain(value) for key, value in record.items()} for record in result]


class GraphDBInterface(ABC):
    """
    An abstract base class defining the standard interface for interacting with a graph database.
    """
    @abstractmethod
    def session(self) -> Iterator[GraphSession]:
        """Context manager yielding a session that is released on every exit path."""
        pass

    @abstractmethod
    def execute_query(self, query: str, params: Dict = None) -> List[Dict[str, Any]]:
        pass

    @abstractmethod
    def ensure_vector_index(self, index_name: str, node_label: str, property_name: str, dimensions: int):
        pass

    @abstractmethod
    def ensure_constraints(self):
        pass

    @abstractmethod
    def close(self):
        pass


class Neo4jDatabase(GraphDBInterface):
    """Concrete implementation of the GraphDBInterface for Neo4j."""

    CONSTRAINTS = (
        ("artist_name", "Artist", "name"),
        ("artwork_id", "Artwork", "id"),
        ("movement_name", "Movement", "name"),
    )

    def __init__(self, uri: str = None, user: str = None, password: str = None, database: str = None):
        uri = uri or settings.NEO4J_URI
        user = user or settings.NEO4J_USERNAME
        password = password or settings.NEO4J_PASSWORD
        if not all([uri, user, password]):
            raise ValueError("Neo4j credentials are not configured.")
        self._database = database or settings.NEO4J_DATABASE
        self._driver = GraphDatabase.driver(uri, auth=(user, password))

    @contextmanager
    def session(self) -> Iterator[GraphSession]:
        session = self._driver.session(database=self._database)
        try:
            yield GraphSession(session)
        finally:
            session.close()

    def execute_query(self, query: str, params: Dict = None) -> List[Dict[str, Any]]:
        with self.session() as session:
            return session.run(query, params)

    def ensure_vector_index(self, index_name: str, node_label: str, property_name: str, dimensions: int):
        with self.session() as session:
            session.run(f"""
            CREATE VECTOR INDEX `{index_name}` IF NOT EXISTS
            FOR (n:{node_label}) ON (n.{property_name})
            OPTIONS {{ indexConfig: {{
                `vector.dimensions`: {int(dimensions)},
                `vector.similarity_function`: 'cosine'
            }}}}
            """)
        logger.info(f"Neo4j vector index '{index_name}' ensured.")

    def ensure_constraints(self):
        with self.session() as session:
            for name, label, prop in self.CONSTRAINTS:
                session.run(
                    f"CREATE CONSTRAINT `{name}` IF NOT EXISTS "
                    f"FOR (n:{label}) REQUIRE n.{prop} IS UNIQUE"
                )
        logger.info("Neo4j uniqueness constraints ensured.")

    def close(self):
        self._driver.close()
