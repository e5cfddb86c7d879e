# /core/graph_builder.py

from typing import Dict, List, Optional, Set, Tuple

from core.config import settings
from core.database import GraphDBInterface, to_text
from core.logger import get_logger
from core.models import ArtistGraph, ArtistGraphRow, GraphVizEdge, GraphVizNode, NodeKind

logger = get_logger(__name__)

# Presentation weights only; stable so equal input renders identically.
FOCAL_ARTIST_WEIGHT = 20
RELATED_ARTIST_WEIGHT = 12
MOVEMENT_WEIGHT = 10
ARTWORK_WEIGHT = 8

ARTIST_GRAPH_QUERY = """
MATCH (artist:Artist {name: $name})
OPTIONAL MATCH (artist)-[:CREATED]->(artwork:Artwork)
OPTIONAL MATCH (artist)-[:BELONGS_TO]->(movement:Movement)
OPTIONAL MATCH (movement)<-[:BELONGS_TO]-(related:Artist)
WHERE related IS NULL OR related <> artist
WITH artist,
     collect(DISTINCT artwork) AS artworks,
     collect(DISTINCT movement) AS movements,
     collect(DISTINCT CASE WHEN related IS NOT NULL THEN {movement: movement, artist: related} END) AS related_pairs
RETURN artist, artworks, movements, related_pairs
LIMIT 1
"""


def resolve_raw_id(props: Optional[Dict], *label_keys: str, fallback: str = "") -> str:
    """External id, then name/title, then the store's element id, then the fallback."""
    props = props or {}
    for key in ("id", *label_keys, "_id"):
        text = to_text(props.get(key))
        if text:
            return text
    return to_text(fallback)


class _GraphBuffer:
    """Insertion-ordered node and edge sets keyed by namespaced id."""

    def __init__(self):
        self.nodes: Dict[str, GraphVizNode] = {}
        self.edges: List[GraphVizEdge] = []
        self._edge_keys: Set[Tuple[str, str, str]] = set()

    def add_node(self, kind: NodeKind, raw_id: str, label: str, weight: int, slug: str = None) -> str:
        node_id = f"{kind.value}-{raw_id}"
        if node_id not in self.nodes:
            self.nodes[node_id] = GraphVizNode(id=node_id, label=label, kind=kind, weight=weight, slug=slug)
        return node_id

    def add_edge(self, source: str, target: str, edge_type: str):
        key = (source, target, edge_type)
        if not source or not target or key in self._edge_keys:
            return
        self._edge_keys.add(key)
        self.edges.append(GraphVizEdge(source=source, target=target, type=edge_type))

    def to_graph(self) -> ArtistGraph:
        return ArtistGraph(nodes=list(self.nodes.values()), edges=self.edges)


class GraphAssembler:
    """Builds the bounded visualization graph around one focal artist."""

    def __init__(self, db_client: GraphDBInterface, artwork_limit: int = None, related_limit: int = None):
        self.db_client = db_client
        self.artwork_limit = artwork_limit if artwork_limit is not None else settings.GRAPH_ARTWORK_LIMIT
        self.related_limit = related_limit if related_limit is not None else settings.GRAPH_RELATED_LIMIT

    def build_graph(self, artist_name: str) -> Optional[ArtistGraph]:
        """
        Returns the focal artist with up to `artwork_limit` artworks, its movements,
        and up to `related_limit` distinct co-members of those movements.
        None when the name is empty, unknown, or the store is unavailable.
        """
        if not artist_name or not artist_name.strip():
            return None
        try:
            with self.db_client.session() as session:
                rows = session.run(ARTIST_GRAPH_QUERY, {"name": artist_name})
            if not rows:
                return None
            row = ArtistGraphRow.model_validate(rows[0])
        except Exception as e:
            logger.error(f"Artist graph error for '{artist_name}': {e}", exc_info=True)
            return None
        if not row.artist:
            return None
        return self._assemble(row, artist_name)

    def _assemble(self, row: ArtistGraphRow, artist_name: str) -> ArtistGraph:
        graph = _GraphBuffer()

        center_raw_id = resolve_raw_id(row.artist, "name", fallback=artist_name)
        center_name = to_text(row.artist.get("name")) or artist_name
        center_id = graph.add_node(NodeKind.ARTIST, center_raw_id, center_name, FOCAL_ARTIST_WEIGHT, slug=center_name)

        for artwork in [a for a in row.artworks if a][: self.artwork_limit]:
            raw_id = resolve_raw_id(artwork, "title")
            if not raw_id:
                continue
            label = to_text(artwork.get("title")) or to_text(artwork.get("name")) or raw_id
            node_id = graph.add_node(NodeKind.ARTWORK, raw_id, label, ARTWORK_WEIGHT, slug=raw_id)
            graph.add_edge(center_id, node_id, "CREATED")

        for movement in row.movements:
            movement_id = self._add_movement(graph, movement)
            if movement_id:
                graph.add_edge(center_id, movement_id, "BELONGS_TO")

        seen_related: Set[str] = set()
        for pair in row.related_pairs:
            if len(seen_related) >= self.related_limit:
                break
            related = (pair or {}).get("artist")
            if not related:
                continue
            related_raw_id = resolve_raw_id(related, "name")
            if not related_raw_id or related_raw_id == center_raw_id or related_raw_id in seen_related:
                continue
            seen_related.add(related_raw_id)

            related_name = to_text(related.get("name")) or related_raw_id
            related_id = graph.add_node(NodeKind.ARTIST, related_raw_id, related_name,
                                        RELATED_ARTIST_WEIGHT, slug=related_name)
            graph.add_edge(related_id, center_id, "RELATED")

            movement_id = self._add_movement(graph, pair.get("movement"))
            if movement_id:
                graph.add_edge(related_id, movement_id, "BELONGS_TO")

        return graph.to_graph()

    @staticmethod
    def _add_movement(graph: _GraphBuffer, movement: Optional[Dict]) -> Optional[str]:
        if not movement:
            return None
        raw_id = resolve_raw_id(movement, "name")
        if not raw_id:
            return None
        label = to_text(movement.get("name")) or to_text(movement.get("title")) or raw_id
        return graph.add_node(NodeKind.MOVEMENT, raw_id, label, MOVEMENT_WEIGHT)
