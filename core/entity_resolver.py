# /core/entity_resolver.py

from typing import List, Optional, Set

from core.config import settings
from core.database import GraphDBInterface, GraphSession
from core.entity_dedup import DuplicateMerger
from core.logger import get_logger
from core.models import (
    NOT_FOUND_SENTINEL,
    ArtistSyncState,
    ResolverReport,
    SyncOutcome,
    WikidataMatch,
    WikidataRelation,
    parse_rows,
)
from core.normalizer import name_variants, normalize_name
from core.wikidata import WikidataClient, WikidataError

logger = get_logger(__name__)

SYNC_CANDIDATES_QUERY = """
MATCH (a:Artist)
WHERE a.name IS NOT NULL AND a.name <> '' AND NOT a.name IN $exclude
  AND coalesce(a.is_stub, false) = false
  AND (a.wikidata_id IS NULL
       OR (a.wikidata_id <> $not_found
           AND (a.wikidata_synced_at IS NULL
                OR ($force AND (a.image IS NULL OR NOT EXISTS { (a)-[:INFLUENCED_BY|STUDENT_OF]->() })))))
RETURN a.name AS name,
       a.wikidata_id AS wikidata_id,
       a.wikidata_label AS wikidata_label,
       a.image AS image,
       EXISTS { (a)-[:INFLUENCED_BY|STUDENT_OF]->() } AS has_relations,
       toString(a.wikidata_synced_at) AS synced_at,
       coalesce(a.is_stub, false) AS is_stub
ORDER BY a.name
LIMIT $limit
"""

LINK_ARTIST_QUERY = """
MATCH (a:Artist {name: $name})
SET a.wikidata_id = $id,
    a.wikidata_label = coalesce(a.wikidata_label, $label)
"""

MARK_NOT_FOUND_QUERY = """
MATCH (a:Artist {name: $name})
WHERE a.wikidata_id IS NULL
SET a.wikidata_id = $not_found,
    a.wikidata_synced_at = datetime()
"""

SET_IMAGE_QUERY = """
MATCH (a:Artist {name: $name})
SET a.image = coalesce(a.image, $image)
"""

MARK_SYNCED_QUERY = """
MATCH (a:Artist {name: $name})
SET a.wikidata_synced_at = datetime()
"""

FIND_BY_WIKIDATA_ID_QUERY = """
MATCH (a:Artist {wikidata_id: $id})
RETURN a.name AS name
ORDER BY a.name
LIMIT 1
"""

ENSURE_STUB_QUERY = """
MERGE (a:Artist {name: $name})
ON CREATE SET a.wikidata_id = $id, a.is_stub = true
SET a.wikidata_label = coalesce(a.wikidata_label, $label)
"""


def _connect_query(rel_type: str) -> str:
    return f"""
MATCH (source:Artist {{name: $source}})
MATCH (target:Artist {{name: $target}})
WHERE source <> target
MERGE (source)-[:{rel_type}]->(target)
"""


def needs_sync(state: ArtistSyncState, force: bool = False) -> bool:
    """
    Whether a batch pass should touch this artist. Not-found artists are
    terminal and relation stubs wait until ingestion adopts them; resolved
    artists re-sync only until a full sync has been recorded, or, when forced,
    while they still lack an image or relations.
    """
    if not state.name or state.is_stub:
        return False
    if state.wikidata_id == NOT_FOUND_SENTINEL:
        return False
    if state.wikidata_id is None or state.synced_at is None:
        return True
    return force and (state.image is None or not state.has_relations)


class EntityResolver:
    """
    Batch pipeline linking Artist nodes to Wikidata: id lookup over name
    variants, image and relation enrichment, then one deduplication pass.
    Runs as a single worker; it must not run concurrently against one store.
    """

    def __init__(self, db_client: GraphDBInterface, wikidata_client: WikidataClient = None,
                 merger: DuplicateMerger = None, batch_size: int = None):
        self.db_client = db_client
        self.wikidata = wikidata_client or WikidataClient()
        self.merger = merger or DuplicateMerger(db_client)
        self.batch_size = batch_size or settings.WIKIDATA_BATCH_SIZE

    def run(self, force: bool = False) -> ResolverReport:
        logger.info("Starting Wikidata enrichment")
        report = ResolverReport()
        attempted: Set[str] = set()

        while True:
            batch = self.fetch_batch(attempted, force)
            if not batch:
                break
            for state in batch:
                attempted.add(state.name)
                if not needs_sync(state, force):
                    report.skipped += 1
                    continue
                try:
                    outcome = self.sync_artist(state)
                except Exception as e:
                    # One bad artist never aborts the batch; it stays unresolved for the next run.
                    logger.error(f"Failed to enrich '{state.name}': {e}", exc_info=True)
                    report.failed += 1
                    continue
                report.record(outcome)

        # All resolution writes above have committed before merging starts.
        report.merged = self.merger.merge_duplicates()
        logger.info(f"Enrichment finished: {report.model_dump()}")
        return report

    def fetch_batch(self, exclude: Set[str], force: bool = False) -> List[ArtistSyncState]:
        with self.db_client.session() as session:
            rows = session.run(SYNC_CANDIDATES_QUERY, {
                "exclude": sorted(exclude),
                "not_found": NOT_FOUND_SENTINEL,
                "force": force,
                "limit": self.batch_size,
            })
        return parse_rows(ArtistSyncState, rows)

    def lookup(self, name: str) -> Optional[WikidataMatch]:
        """Tries each name variant in order; the first hit wins."""
        for variant in name_variants(normalize_name(name) or name):
            match = self.wikidata.search_entity(variant)
            if match:
                return match
        return None

    def sync_artist(self, state: ArtistSyncState) -> SyncOutcome:
        name = state.name
        with self.db_client.session() as session:
            if state.wikidata_id:
                match = WikidataMatch(id=state.wikidata_id, label=state.wikidata_label or name)
            else:
                match = self.lookup(name)
                if match is None:
                    session.run(MARK_NOT_FOUND_QUERY, {"name": name, "not_found": NOT_FOUND_SENTINEL})
                    logger.warning(f"No Wikidata match for '{name}'")
                    return SyncOutcome.NOT_FOUND
                session.run(LINK_ARTIST_QUERY, {"name": name, "id": match.id, "label": match.label})
                logger.info(f"Linked '{name}' -> {match.id}")

            complete = True
            if state.image is None:
                complete &= self._sync_image(session, name, match.id)
            complete &= self._sync_relations(session, name, match.id)

            if not complete:
                return SyncOutcome.PARTIAL
            session.run(MARK_SYNCED_QUERY, {"name": name})
            return SyncOutcome.RESOLVED

    def _sync_image(self, session: GraphSession, name: str, qid: str) -> bool:
        try:
            image = self.wikidata.fetch_image(qid)
        except WikidataError as e:
            logger.warning(f"Image lookup failed for '{name}' ({qid}): {e}")
            return False
        if image:
            session.run(SET_IMAGE_QUERY, {"name": name, "image": image})
        return True

    def _sync_relations(self, session: GraphSession, name: str, qid: str) -> bool:
        try:
            relations = self.wikidata.fetch_relations(qid)
        except WikidataError as e:
            logger.warning(f"Relation lookup failed for '{name}' ({qid}): {e}")
            return False
        for relation in relations:
            target = self.ensure_related_artist(session, relation)
            if not target or target == name:
                continue
            session.run(_connect_query(relation.type.value), {"source": name, "target": target})
            logger.info(f"   - {relation.type.value} -> {target}")
        return True

    def ensure_related_artist(self, session: GraphSession, relation: WikidataRelation) -> str:
        """
        Returns the merge key of the relation's target, reusing a node with the
        same Wikidata id, else one with the same name, else creating a stub.
        """
        rows = session.run(FIND_BY_WIKIDATA_ID_QUERY, {"id": relation.id})
        if rows and rows[0].get("name"):
            return rows[0]["name"]
        name = normalize_name(relation.label)
        if not name:
            return ""
        session.run(ENSURE_STUB_QUERY, {"name": name, "id": relation.id, "label": relation.label})
        return name
