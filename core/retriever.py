# /core/retriever.py

from typing import Iterable, List, Optional

from core.config import settings
from core.database import GraphDBInterface, GraphSession, to_text
from core.embeddings import VectorEmbedder
from core.logger import get_logger
from core.models import (
    ContextArtistRow,
    ContextArtworkRow,
    ContextBlock,
    KeywordRow,
    ResultItem,
    ResultKind,
    SearchFilter,
    SearchOptions,
    SemanticRow,
    SortOrder,
    parse_rows,
)
from core.similarity import SimilarityScorer

logger = get_logger(__name__)

CONTEXT_SEPARATOR = "\n\n---\n\n"

KEYWORD_SEARCH_QUERY = """
CALL {
  MATCH (a:Artist)
  WHERE toLower(a.name) CONTAINS toLower($keyword)
  RETURN 'artist' AS kind, a.name AS title, coalesce(a.nationality, 'Artist') AS subtitle, a.name AS link_key
  UNION
  MATCH (a:Artist)-[:CREATED]->(w:Artwork)
  WHERE toLower(w.title) CONTAINS toLower($keyword)
  RETURN 'artwork' AS kind, w.title AS title, 'Artwork by ' + a.name AS subtitle, toString(w.id) AS link_key
}
RETURN kind, title, subtitle, link_key
LIMIT $limit
"""

SEMANTIC_SEARCH_QUERY = """
CALL db.index.vector.queryNodes($index_name, $k, $embedding)
YIELD node, score
OPTIONAL MATCH (creator:Artist)-[:CREATED]->(node)
RETURN node AS artwork, score, creator.name AS artist_name
"""

CONTEXT_ARTWORK_QUERY = """
CALL db.index.vector.queryNodes($index_name, $k, $embedding)
YIELD node, score
MATCH (creator:Artist)-[:CREATED]->(node)
RETURN node AS artwork, score, creator
"""

CONTEXT_ARTIST_QUERY = """
MATCH (a:Artist)
WHERE toLower(a.name) CONTAINS toLower($query)
   OR toLower(coalesce(a.bio, '')) CONTAINS toLower($query)
OPTIONAL MATCH (a)-[:BELONGS_TO]->(m:Movement)
RETURN a AS artist, collect(m.name) AS movements
LIMIT $limit
"""


def fuse_results(*stages: Iterable[ResultItem]) -> List[ResultItem]:
    """
    Concatenates result stages, keeping the first occurrence of each (kind, link_key).
    Earlier stages win, and insertion order is the final ranking.
    """
    combined = []
    seen = set()
    for stage in stages:
        for item in stage:
            if item.key in seen:
                continue
            seen.add(item.key)
            combined.append(item)
    return combined


def apply_view(items: List[ResultItem], kind_filter: SearchFilter = SearchFilter.ALL,
               sort: SortOrder = SortOrder.RELEVANCE) -> List[ResultItem]:
    if kind_filter is not SearchFilter.ALL:
        items = [item for item in items if item.kind.value == kind_filter.value]
    if sort is SortOrder.ASC:
        items = sorted(items, key=lambda item: item.title.casefold())
    elif sort is SortOrder.DESC:
        items = sorted(items, key=lambda item: item.title.casefold(), reverse=True)
    return list(items)


def _or_na(value) -> str:
    text = to_text(value)
    return text or "N/A"


class HybridRetriever:
    """
    Fuses keyword graph matches with vector-index matches. Serves both the
    global search and the grounding context of the chat assistant.
    """

    def __init__(self, db_client: GraphDBInterface, embedder: VectorEmbedder = None,
                 scorer: Optional[SimilarityScorer] = None):
        self.db_client = db_client
        self.embedder = embedder or VectorEmbedder()
        self.scorer = scorer

    def search(self, keyword: str, options: SearchOptions = None) -> List[ResultItem]:
        """
        Best-effort global search. Never raises: a keyword-stage failure yields [],
        a semantic-stage failure only drops the semantic results.
        """
        options = options or SearchOptions()
        if not keyword or not keyword.strip():
            return []
        keyword = keyword.strip()

        try:
            with self.db_client.session() as session:
                keyword_results = self._keyword_stage(session, keyword)
                semantic_results = self._semantic_stage(session, keyword) if options.semantic else []
        except Exception as e:
            logger.error(f"Global search failed for '{keyword}': {e}", exc_info=True)
            return []

        combined = fuse_results(keyword_results, semantic_results)
        return apply_view(combined, options.filter, options.sort)

    def _keyword_stage(self, session: GraphSession, keyword: str) -> List[ResultItem]:
        rows = parse_rows(KeywordRow, session.run(
            KEYWORD_SEARCH_QUERY, {"keyword": keyword, "limit": settings.SEARCH_KEYWORD_LIMIT}
        ))
        results = []
        for row in rows:
            title = row.title or ""
            link_key = row.link_key or title
            if not link_key:
                continue
            results.append(ResultItem(
                kind=row.kind,
                title=title,
                subtitle=row.subtitle or "",
                link_key=link_key,
            ))
        return results

    def _semantic_stage(self, session: GraphSession, keyword: str) -> List[ResultItem]:
        try:
            embedding = self.embedder.embed(keyword)
            if not embedding:
                return []
            rows = parse_rows(SemanticRow, session.run(SEMANTIC_SEARCH_QUERY, {
                "index_name": settings.ARTWORK_INDEX_NAME,
                "k": settings.SEARCH_SEMANTIC_TOP_K,
                "embedding": embedding,
            }))
        except Exception as e:
            logger.error(f"Semantic search error for '{keyword}': {e}", exc_info=True)
            return []

        results = []
        for row in rows:
            if not row.artwork:
                continue
            props = row.artwork
            artwork_id = to_text(props.get("id")) or to_text(props.get("title")) or to_text(props.get("_id"))
            if not artwork_id:
                continue
            results.append(ResultItem(
                kind=ResultKind.ARTWORK,
                title=to_text(props.get("title")) or "Artwork",
                subtitle=f"Similar to {row.artist_name}" if row.artist_name else "Similar results",
                link_key=artwork_id,
                score=row.score,
            ))
        return results

    def get_context(self, query: str) -> str:
        """
        Builds the plain-text grounding block for the chat assistant.
        Returns '' when nothing matches or the store is unavailable; the caller
        must then tell the user that no gallery data backed the answer.
        """
        if not query or not query.strip():
            return ""
        query = query.strip()

        blocks: List[ContextBlock] = []
        try:
            with self.db_client.session() as session:
                blocks.extend(self._artwork_context(session, query))
                blocks.extend(self._artist_context(session, query))
        except Exception as e:
            logger.error(f"Error fetching chat context: {e}", exc_info=True)
            return ""

        unique = []
        seen = set()
        for block in blocks:
            key = (block.kind, block.title)
            if key in seen:
                continue
            seen.add(key)
            unique.append(block)

        if not unique:
            return ""
        if self.scorer is not None:
            unique = self.scorer.rerank(query, unique, lambda block: block.content)
        return CONTEXT_SEPARATOR.join(block.render() for block in unique)

    def _artwork_context(self, session: GraphSession, query: str) -> List[ContextBlock]:
        try:
            embedding = self.embedder.embed(query)
        except Exception as e:
            logger.warning(f"Embedding failed, chat context falls back to keyword matches: {e}")
            return []
        if not embedding:
            return []

        rows = parse_rows(ContextArtworkRow, session.run(CONTEXT_ARTWORK_QUERY, {
            "index_name": settings.ARTWORK_INDEX_NAME,
            "k": settings.CONTEXT_ARTWORK_TOP_K,
            "embedding": embedding,
        }))
        blocks = []
        for row in rows:
            title = to_text(row.artwork.get("title"))
            blocks.append(ContextBlock(
                kind=ResultKind.ARTWORK,
                title=title,
                content=(
                    f"Title: {title or 'Untitled'}\n"
                    f"Artist: {_or_na(row.creator.get('name'))}\n"
                    f"Medium/Info: {_or_na(row.artwork.get('meta_data'))}\n"
                    f"Description: {_or_na(row.artwork.get('info'))}"
                ),
                score=row.score,
            ))
        return blocks

    def _artist_context(self, session: GraphSession, query: str) -> List[ContextBlock]:
        rows = parse_rows(ContextArtistRow, session.run(
            CONTEXT_ARTIST_QUERY, {"query": query, "limit": settings.CONTEXT_ARTIST_LIMIT}
        ))
        blocks = []
        for row in rows:
            name = to_text(row.artist.get("name"))
            movements = ", ".join(m for m in row.movements if m)
            blocks.append(ContextBlock(
                kind=ResultKind.ARTIST,
                title=name,
                content=(
                    f"Artist Name: {name}\n"
                    f"Bio: {_or_na(row.artist.get('bio'))}\n"
                    f"Nationality: {_or_na(row.artist.get('nationality'))}\n"
                    f"Movements: {movements or 'N/A'}"
                ),
                score=1.0,
            ))
        return blocks
