# /core/entity_dedup.py

from typing import Any, Dict, List, Tuple

from core.database import GraphDBInterface, GraphSession
from core.logger import get_logger
from core.models import NOT_FOUND_SENTINEL, DuplicateCandidate, DuplicateGroup, parse_rows

logger = get_logger(__name__)

# Scalar attributes a duplicate may contribute when the primary lacks them.
MERGEABLE_FIELDS = ("bio", "nationality", "image", "wikidata_label", "wikipedia")

# (relationship type, direction relative to the duplicate)
REPOINTED_RELATIONSHIPS = (
    ("INFLUENCED_BY", "out"),
    ("INFLUENCED_BY", "in"),
    ("STUDENT_OF", "out"),
    ("STUDENT_OF", "in"),
    ("CREATED", "out"),
    ("BELONGS_TO", "out"),
)

DUPLICATE_GROUPS_QUERY = """
MATCH (a:Artist)
WHERE a.wikidata_id IS NOT NULL AND a.wikidata_id <> $not_found
WITH a.wikidata_id AS wikidata_id, collect(a) AS artists
WHERE size(artists) > 1
UNWIND artists AS a
OPTIONAL MATCH (a)-[:CREATED]->(w:Artwork)
WITH wikidata_id, a, count(DISTINCT w) AS artwork_count
ORDER BY wikidata_id, elementId(a)
RETURN wikidata_id,
       collect({element_id: elementId(a), properties: properties(a), artwork_count: artwork_count}) AS candidates
"""

COPY_ATTRIBUTES_QUERY = """
MATCH (p:Artist) WHERE elementId(p) = $primary_id
SET p += $attributes
"""

DELETE_DUPLICATE_QUERY = """
MATCH (d:Artist) WHERE elementId(d) = $duplicate_id AND elementId(d) <> $primary_id
DETACH DELETE d
"""


def _repoint_query(rel_type: str, direction: str) -> str:
    if direction == "out":
        pattern, merge = f"(d)-[:{rel_type}]->(other)", f"(p)-[:{rel_type}]->(other)"
    else:
        pattern, merge = f"(other)-[:{rel_type}]->(d)", f"(other)-[:{rel_type}]->(p)"
    return f"""
MATCH (d:Artist) WHERE elementId(d) = $duplicate_id
MATCH (p:Artist) WHERE elementId(p) = $primary_id
MATCH {pattern}
WHERE other <> p AND other <> d
MERGE {merge}
RETURN count(*) AS moved
"""


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def field_count(candidate: DuplicateCandidate) -> int:
    return sum(1 for value in candidate.properties.values() if not is_blank(value))


def has_wikipedia(candidate: DuplicateCandidate) -> bool:
    link = candidate.properties.get("wikipedia")
    return not is_blank(link) and link != "#"


def rank_candidates(candidates: List[DuplicateCandidate]) -> List[DuplicateCandidate]:
    """
    Orders a duplicate group best-first: most CREATED edges, then a Wikipedia
    link, then the most populated attributes. Element id breaks remaining ties.
    """
    return sorted(candidates, key=lambda c: (
        -c.artwork_count,
        0 if has_wikipedia(c) else 1,
        -field_count(c),
        c.element_id,
    ))


def missing_attributes(primary: Dict[str, Any], duplicate: Dict[str, Any]) -> Dict[str, Any]:
    """Attributes the duplicate can fill in; never overrides a populated primary value."""
    return {
        field: duplicate[field]
        for field in MERGEABLE_FIELDS
        if is_blank(primary.get(field)) and not is_blank(duplicate.get(field))
    }


class DuplicateMerger:
    """
    Collapses Artist nodes that share a Wikidata id into one primary node.
    Safe to re-run: with no shared ids it finds no groups and writes nothing.
    """

    def __init__(self, db_client: GraphDBInterface):
        self.db_client = db_client

    def find_duplicate_groups(self, session: GraphSession) -> List[DuplicateGroup]:
        rows = session.run(DUPLICATE_GROUPS_QUERY, {"not_found": NOT_FOUND_SENTINEL})
        return [group for group in parse_rows(DuplicateGroup, rows) if len(group.candidates) > 1]

    def merge_duplicates(self) -> int:
        """Runs one deduplication pass; returns the number of duplicate nodes removed."""
        removed = 0
        with self.db_client.session() as session:
            groups = self.find_duplicate_groups(session)
            if not groups:
                logger.info("No duplicate artists found.")
                return 0
            for group in groups:
                primary, duplicates = self.split_group(group)
                logger.info(
                    f"Merging {len(duplicates)} duplicate(s) of {group.wikidata_id} "
                    f"into '{primary.properties.get('name')}'"
                )
                primary_props = dict(primary.properties)
                for duplicate in duplicates:
                    self._merge_one(session, primary, primary_props, duplicate)
                    removed += 1
        logger.info(f"Deduplication removed {removed} duplicate artist node(s).")
        return removed

    @staticmethod
    def split_group(group: DuplicateGroup) -> Tuple[DuplicateCandidate, List[DuplicateCandidate]]:
        ranked = rank_candidates(group.candidates)
        return ranked[0], ranked[1:]

    def _merge_one(self, session: GraphSession, primary: DuplicateCandidate,
                   primary_props: Dict[str, Any], duplicate: DuplicateCandidate):
        ids = {"primary_id": primary.element_id, "duplicate_id": duplicate.element_id}

        attributes = missing_attributes(primary_props, duplicate.properties)
        if attributes:
            session.run(COPY_ATTRIBUTES_QUERY, {"primary_id": primary.element_id, "attributes": attributes})
            primary_props.update(attributes)

        for rel_type, direction in REPOINTED_RELATIONSHIPS:
            session.run(_repoint_query(rel_type, direction), ids)

        session.run(DELETE_DUPLICATE_QUERY, ids)
        logger.info(f"  - Merged '{duplicate.properties.get('name')}' ({duplicate.element_id})")
