# /core/catalog.py

from typing import Any, Dict, List, Optional

from core.database import GraphDBInterface, to_text
from core.logger import get_logger
from core.models import (
    ArtistDetail,
    ArtistDetailRow,
    ArtworkCreator,
    ArtworkDetail,
    ArtworkDetailRow,
    ArtworkSummary,
    RelatedArtist,
)

logger = get_logger(__name__)

ARTIST_ARTWORK_LIMIT = 20

ARTIST_DETAIL_QUERY = """
MATCH (a:Artist {name: $name})
OPTIONAL MATCH (a)-[:BELONGS_TO]->(m:Movement)
OPTIONAL MATCH (a)-[:CREATED]->(w:Artwork)
OPTIONAL MATCH (a)-[:INFLUENCED_BY]->(influencer:Artist)
OPTIONAL MATCH (influenced:Artist)-[:INFLUENCED_BY]->(a)
OPTIONAL MATCH (a)-[:STUDENT_OF]->(mentor:Artist)
OPTIONAL MATCH (student:Artist)-[:STUDENT_OF]->(a)
WITH a,
     collect(DISTINCT m.name) AS movements,
     collect(DISTINCT w) AS artworks_raw,
     collect(DISTINCT influencer) AS influencer_nodes,
     collect(DISTINCT influenced) AS influenced_nodes,
     collect(DISTINCT mentor) AS mentor_nodes,
     collect(DISTINCT student) AS student_nodes
RETURN a AS artist,
       movements,
       size(artworks_raw) AS graph_painting_count,
       [aw IN artworks_raw | {id: toString(aw.id), title: aw.title, url: aw.url, info: aw.meta_data}] AS artworks,
       [n IN influencer_nodes | {name: n.name, wikidata_id: n.wikidata_id}] AS influenced_by,
       [n IN influenced_nodes | {name: n.name, wikidata_id: n.wikidata_id}] AS influences,
       [n IN mentor_nodes | {name: n.name, wikidata_id: n.wikidata_id}] AS mentors,
       [n IN student_nodes | {name: n.name, wikidata_id: n.wikidata_id}] AS students
"""

ARTWORK_DETAIL_QUERY = """
MATCH (w:Artwork {id: $id})
OPTIONAL MATCH (creator:Artist)-[:CREATED]->(w)
RETURN w AS artwork, creator
LIMIT 1
"""


def _paintings_count(artist: Dict[str, Any], graph_count: int) -> int:
    # Curated dataset counts take priority over what the graph happens to hold.
    for key in ("paintings_count", "paintings"):
        value = artist.get(key)
        if value in (None, ""):
            continue
        try:
            return int(float(value))
        except (TypeError, ValueError):
            logger.warning(f"Ignoring non-numeric {key}={value!r} on artist {artist.get('name')!r}")
    return graph_count


def _related(entries: List[Dict[str, Any]]) -> List[RelatedArtist]:
    return [RelatedArtist(**entry) for entry in entries if entry.get("name")]


class ArtistCatalog:
    """Detail lookups backing the artist profile and artwork pages."""

    def __init__(self, db_client: GraphDBInterface):
        self.db_client = db_client

    def get_artist_detail(self, artist_name: str) -> Optional[ArtistDetail]:
        if not artist_name or not artist_name.strip():
            return None
        try:
            with self.db_client.session() as session:
                rows = session.run(ARTIST_DETAIL_QUERY, {"name": artist_name})
            if not rows:
                return None
            row = ArtistDetailRow.model_validate(rows[0])
        except Exception as e:
            logger.error(f"Detail Artist Error for '{artist_name}': {e}", exc_info=True)
            return None

        a = row.artist
        artworks = [ArtworkSummary(**artwork) for artwork in row.artworks if artwork.get("id")]
        return ArtistDetail(
            name=to_text(a.get("name")) or artist_name,
            bio=a.get("bio") or "Biography not available.",
            nationality=a.get("nationality") or "Unknown",
            years=a.get("years") or a.get("born_died_str") or "",
            wikipedia=a.get("wikipedia") or "#",
            paintings_count=_paintings_count(a, row.graph_painting_count),
            school=a.get("school"),
            image=a.get("image"),
            wikidata_id=a.get("wikidata_id"),
            movements=[m for m in row.movements if m],
            artworks=artworks[:ARTIST_ARTWORK_LIMIT],
            influenced_by=_related(row.influenced_by),
            influences=_related(row.influences),
            mentors=_related(row.mentors),
            students=_related(row.students),
        )

    def get_artwork_detail(self, artwork_id: str) -> Optional[ArtworkDetail]:
        if not artwork_id or not str(artwork_id).strip():
            return None
        try:
            with self.db_client.session() as session:
                rows = session.run(ARTWORK_DETAIL_QUERY, {"id": str(artwork_id)})
            if not rows:
                return None
            row = ArtworkDetailRow.model_validate(rows[0])
        except Exception as e:
            logger.error(f"Artwork Detail Error for '{artwork_id}': {e}", exc_info=True)
            return None

        w = row.artwork
        creator = None
        if row.creator:
            creator = ArtworkCreator(name=row.creator.get("name"), nationality=row.creator.get("nationality"))
        return ArtworkDetail(
            id=to_text(w.get("id")) or str(artwork_id),
            title=w.get("title"),
            url=w.get("url") or "",
            meta_data=w.get("meta_data") or w.get("picture data") or "",
            artist=creator,
        )
