# /core/models.py

from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

# Shared Pydantic data structures: transient result/view models returned to
# callers, and one strictly-typed row model per Cypher query.

NOT_FOUND_SENTINEL = "not found"


class ResultKind(str, Enum):
    ARTIST = "artist"
    ARTWORK = "artwork"


class SearchFilter(str, Enum):
    ALL = "all"
    ARTIST = "artist"
    ARTWORK = "artwork"


class SortOrder(str, Enum):
    RELEVANCE = "relevance"
    ASC = "asc"
    DESC = "desc"


class NodeKind(str, Enum):
    ARTIST = "artist"
    ARTWORK = "artwork"
    MOVEMENT = "movement"


class RelationType(str, Enum):
    INFLUENCED_BY = "INFLUENCED_BY"
    STUDENT_OF = "STUDENT_OF"


# --- Retrieval ---

class ResultItem(BaseModel):
    kind: ResultKind = Field(description="Whether the match is an artist or an artwork.")
    title: str
    subtitle: str = ""
    link_key: str = Field(description="Routing key: the artist name or the artwork id.")
    score: Optional[float] = None

    @property
    def key(self) -> Tuple[str, str]:
        return (self.kind.value, self.link_key)


class SearchOptions(BaseModel):
    semantic: bool = False
    filter: SearchFilter = SearchFilter.ALL
    sort: SortOrder = SortOrder.RELEVANCE


class ContextBlock(BaseModel):
    kind: ResultKind
    title: str
    content: str
    score: Optional[float] = None

    def render(self) -> str:
        return f"[{self.kind.value.upper()}] {self.content}"


# --- Visualization ---

class GraphVizNode(BaseModel):
    id: str = Field(description="Namespaced identifier '{kind}-{rawId}'.")
    label: str
    kind: NodeKind
    weight: int
    slug: Optional[str] = None


class GraphVizEdge(BaseModel):
    source: str
    target: str
    type: str


class ArtistGraph(BaseModel):
    nodes: List[GraphVizNode]
    edges: List[GraphVizEdge]


# --- Catalog ---

class RelatedArtist(BaseModel):
    name: Optional[str] = None
    wikidata_id: Optional[str] = None


class ArtworkSummary(BaseModel):
    id: str
    title: Optional[str] = None
    url: Optional[str] = None
    info: Optional[str] = None


class ArtistDetail(BaseModel):
    name: str
    bio: str
    nationality: str
    years: str
    wikipedia: str
    paintings_count: int
    school: Optional[str] = None
    image: Optional[str] = None
    wikidata_id: Optional[str] = None
    movements: List[str] = Field(default_factory=list)
    artworks: List[ArtworkSummary] = Field(default_factory=list)
    influenced_by: List[RelatedArtist] = Field(default_factory=list)
    influences: List[RelatedArtist] = Field(default_factory=list)
    mentors: List[RelatedArtist] = Field(default_factory=list)
    students: List[RelatedArtist] = Field(default_factory=list)


class ArtworkCreator(BaseModel):
    name: Optional[str] = None
    nationality: Optional[str] = None


class ArtworkDetail(BaseModel):
    id: str
    title: Optional[str] = None
    url: str = ""
    meta_data: str = ""
    artist: Optional[ArtworkCreator] = None


class ConsoleResult(BaseModel):
    success: bool = False
    error: bool = False
    records: List[Dict[str, Any]] = Field(default_factory=list)
    summary: Optional[str] = None
    message: Optional[str] = None


# --- External knowledge base ---

class WikidataMatch(BaseModel):
    id: str
    label: str


class WikidataRelation(BaseModel):
    id: str
    label: str
    type: RelationType


# --- Resolver ---

class SyncOutcome(str, Enum):
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    PARTIAL = "partial"


class ResolverReport(BaseModel):
    resolved: int = 0
    not_found: int = 0
    partial: int = 0
    failed: int = 0
    skipped: int = 0
    merged: int = 0

    def record(self, outcome: SyncOutcome):
        if outcome is SyncOutcome.RESOLVED:
            self.resolved += 1
        elif outcome is SyncOutcome.NOT_FOUND:
            self.not_found += 1
        else:
            self.partial += 1


# --- Typed query rows ---
# Rows are validated at the store boundary; an unexpected column raises.

class QueryRow(BaseModel):
    model_config = ConfigDict(extra="forbid")


class KeywordRow(QueryRow):
    kind: ResultKind
    title: Optional[str] = None
    subtitle: Optional[str] = None
    link_key: Optional[str] = None


class SemanticRow(QueryRow):
    artwork: Optional[Dict[str, Any]] = None
    score: Optional[float] = None
    artist_name: Optional[str] = None


class ContextArtworkRow(QueryRow):
    artwork: Dict[str, Any]
    score: Optional[float] = None
    creator: Dict[str, Any]


class ContextArtistRow(QueryRow):
    artist: Dict[str, Any]
    movements: List[Optional[str]] = Field(default_factory=list)


class ArtistGraphRow(QueryRow):
    artist: Optional[Dict[str, Any]] = None
    artworks: List[Optional[Dict[str, Any]]] = Field(default_factory=list)
    movements: List[Optional[Dict[str, Any]]] = Field(default_factory=list)
    related_pairs: List[Optional[Dict[str, Any]]] = Field(default_factory=list)


class ArtistDetailRow(QueryRow):
    artist: Dict[str, Any]
    movements: List[Optional[str]] = Field(default_factory=list)
    graph_painting_count: int = 0
    artworks: List[Dict[str, Any]] = Field(default_factory=list)
    influenced_by: List[Dict[str, Any]] = Field(default_factory=list)
    influences: List[Dict[str, Any]] = Field(default_factory=list)
    mentors: List[Dict[str, Any]] = Field(default_factory=list)
    students: List[Dict[str, Any]] = Field(default_factory=list)


class ArtworkDetailRow(QueryRow):
    artwork: Dict[str, Any]
    creator: Optional[Dict[str, Any]] = None


class ArtistSyncState(QueryRow):
    name: Optional[str] = None
    wikidata_id: Optional[str] = None
    wikidata_label: Optional[str] = None
    image: Optional[str] = None
    has_relations: bool = False
    synced_at: Optional[str] = None
    is_stub: bool = False


class DuplicateCandidate(QueryRow):
    element_id: str
    properties: Dict[str, Any] = Field(default_factory=dict)
    artwork_count: int = 0


class DuplicateGroup(QueryRow):
    wikidata_id: str
    candidates: List[DuplicateCandidate]


class ArtworkEmbeddingRow(QueryRow):
    id: Optional[str] = None
    title: Optional[str] = None
    meta: Optional[str] = None
    artist_name: Optional[str] = None


RowT = TypeVar("RowT", bound=QueryRow)


def parse_rows(model: Type[RowT], rows: List[Dict[str, Any]]) -> List[RowT]:
    """Validates raw store rows into the query's row model."""
    return [model.model_validate(row) for row in rows]
