# /core/wikidata.py

import re
import time
from typing import Any, Dict, List, Optional

import requests

from core.config import settings
from core.logger import get_logger
from core.models import RelationType, WikidataMatch, WikidataRelation
from core.rate_limiter import FixedIntervalRateLimiter

logger = get_logger(__name__)

_QID = re.compile(r"^Q\d+$")
_UNSAFE_SEARCH_CHARS = re.compile(r'["\\]')

# Wikidata property per relationship type
RELATION_PROPERTIES = (
    ("P737", RelationType.INFLUENCED_BY),
    ("P1066", RelationType.STUDENT_OF),
)

ENTITY_SEARCH_QUERY = """
SELECT ?artist ?artistLabel ?statements WHERE {{
  SERVICE wikibase:mwapi {{
    bd:serviceParam wikibase:api "Search" ;
                    wikibase:endpoint "www.wikidata.org" ;
                    mwapi:srsearch "{name}" ;
                    mwapi:language "en" ;
                    mwapi:srlimit 5 .
    ?artist wikibase:mwapiItem ?title .
  }}
  OPTIONAL {{ ?artist wikibase:statements ?statements. }}
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
}}
ORDER BY DESC(?statements)
LIMIT 1
"""

RELATION_QUERY = """
SELECT ?related ?relatedLabel WHERE {{
  VALUES ?subject {{ wd:{qid} }}
  ?subject wdt:{prop} ?related .
  SERVICE wikibase:label {{ bd:serviceParam wikibase:language "en". }}
}}
LIMIT {limit}
"""

IMAGE_QUERY = """
SELECT ?image WHERE {{
  wd:{qid} wdt:P18 ?image .
}}
LIMIT 1
"""


class WikidataError(Exception):
    """A Wikidata call failed: transport, HTTP status, or malformed payload."""


def entity_id_from_uri(uri: Optional[str]) -> Optional[str]:
    if not uri:
        return None
    qid = uri.rstrip("/").rsplit("/", 1)[-1]
    return qid if _QID.match(qid) else None


def _require_qid(qid: str) -> str:
    if not qid or not _QID.match(qid):
        raise WikidataError(f"Invalid Wikidata id: {qid!r}")
    return qid


class WikidataClient:
    """
    SPARQL client for the Wikidata query service. Every request is spaced by
    the shared rate limiter and carries a descriptive User-Agent.
    """

    def __init__(self, endpoint: str = None, user_agent: str = None,
                 limiter: FixedIntervalRateLimiter = None, timeout: float = None,
                 max_retries: int = None, relation_limit: int = None,
                 session: requests.Session = None):
        self.endpoint = endpoint or settings.WIKIDATA_ENDPOINT
        self.limiter = limiter or FixedIntervalRateLimiter(settings.WIKIDATA_DELAY_SECONDS)
        self.timeout = timeout if timeout is not None else settings.WIKIDATA_TIMEOUT_SECONDS
        self.max_retries = max_retries if max_retries is not None else settings.WIKIDATA_MAX_RETRIES
        self.relation_limit = relation_limit or settings.WIKIDATA_RELATION_LIMIT
        self.session = session or requests.Session()
        self.session.headers.update({
            "User-Agent": user_agent or settings.WIKIDATA_USER_AGENT,
            "Accept": "application/sparql-results+json",
        })

    def run_sparql(self, query: str) -> List[Dict[str, Any]]:
        """Runs a SPARQL query and returns its result bindings."""
        last_exc = None
        for attempt in range(1, self.max_retries + 2):
            self.limiter.wait()
            try:
                response = self.session.get(
                    self.endpoint,
                    params={"format": "json", "query": query},
                    timeout=self.timeout,
                )
                response.raise_for_status()
                payload = response.json()
                return payload["results"]["bindings"]
            except requests.exceptions.RequestException as e:
                last_exc = e
                logger.warning(f"Wikidata request failed (attempt {attempt}): {e}")
            except (ValueError, KeyError, TypeError) as e:
                raise WikidataError(f"Malformed Wikidata response: {e}") from e
            if attempt <= self.max_retries:
                time.sleep(0.5 * attempt)
        raise WikidataError(f"Wikidata request failed: {last_exc}") from last_exc

    def search_entity(self, name: str) -> Optional[WikidataMatch]:
        """Best-ranked entity for a name search, or None when there is no hit."""
        sanitized = _UNSAFE_SEARCH_CHARS.sub("", name or "").strip()
        if not sanitized:
            return None
        bindings = self.run_sparql(ENTITY_SEARCH_QUERY.format(name=sanitized))
        if not bindings:
            return None
        binding = bindings[0]
        qid = entity_id_from_uri((binding.get("artist") or {}).get("value"))
        if not qid:
            return None
        label = (binding.get("artistLabel") or {}).get("value") or sanitized
        return WikidataMatch(id=qid, label=label)

    def fetch_relations(self, qid: str) -> List[WikidataRelation]:
        qid = _require_qid(qid)
        relations = []
        for prop, relation_type in RELATION_PROPERTIES:
            bindings = self.run_sparql(RELATION_QUERY.format(qid=qid, prop=prop, limit=int(self.relation_limit)))
            for row in bindings[: self.relation_limit]:
                related_id = entity_id_from_uri((row.get("related") or {}).get("value"))
                if not related_id:
                    continue
                label = (row.get("relatedLabel") or {}).get("value") or related_id
                relations.append(WikidataRelation(id=related_id, label=label, type=relation_type))
        return relations

    def fetch_image(self, qid: str) -> Optional[str]:
        qid = _require_qid(qid)
        bindings = self.run_sparql(IMAGE_QUERY.format(qid=qid))
        if not bindings:
            return None
        return (bindings[0].get("image") or {}).get("value") or None

    def close(self):
        self.session.close()
