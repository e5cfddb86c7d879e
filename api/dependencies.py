from fastapi import Depends

from core.agent_logic import build_chat_agent
from core.catalog import ArtistCatalog
from core.config import settings
from core.database import GraphDBInterface, Neo4jDatabase
from core.embeddings import VectorEmbedder
from core.graph_builder import GraphAssembler
from core.retriever import HybridRetriever
from core.similarity import SimilarityScorer

_db_client = None


def get_db_client() -> GraphDBInterface:
    """The process-wide driver handle; sessions are scoped per operation."""
    global _db_client
    if _db_client is None:
        _db_client = Neo4jDatabase()
    return _db_client


def close_db_client():
    global _db_client
    if _db_client is not None:
        _db_client.close()
        _db_client = None


def get_retriever(db_client: GraphDBInterface = Depends(get_db_client)) -> HybridRetriever:
    embedder = VectorEmbedder()
    scorer = SimilarityScorer(embedder) if settings.CONTEXT_RERANK else None
    return HybridRetriever(db_client, embedder, scorer)


def get_assembler(db_client: GraphDBInterface = Depends(get_db_client)) -> GraphAssembler:
    return GraphAssembler(db_client)


def get_catalog(db_client: GraphDBInterface = Depends(get_db_client)) -> ArtistCatalog:
    return ArtistCatalog(db_client)


def get_chat_agent(retriever: HybridRetriever = Depends(get_retriever)):
    return build_chat_agent(retriever)
