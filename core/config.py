from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field

class Settings(BaseSettings):
    """
    Centralized application settings. Pydantic's BaseSettings will automatically
    load these from environment variables or a .env file.
    """
    # --- LLM and Embedding Models ---
    GENERATION_MODEL: str = Field("gemini-2.5-pro", description="The model that writes chat answers.")
    FAST_MODEL: str = Field("gemini-2.5-flash", description="The model for fast tasks like intent classification.")
    EMBEDDING_MODEL: str = Field("models/text-embedding-004", description="The model used for creating text embeddings.")
    EMBEDDING_DIMENSIONS: int = Field(768, description="Dimensions of the text embeddings.")
    GOOGLE_API_KEY: str = Field("", description="API key for the Google generative models.")

    # --- Neo4j Database ---
    NEO4J_URI: str = Field("bolt://localhost:7687")
    NEO4J_USERNAME: str = Field("neo4j")
    NEO4J_PASSWORD: str = Field("password")
    NEO4J_DATABASE: Optional[str] = Field(None, description="Target database; the server default when unset.")
    ARTWORK_INDEX_NAME: str = Field("artwork_embeddings", description="Vector index over Artwork.embedding.")

    # --- Retrieval Limits ---
    SEARCH_KEYWORD_LIMIT: int = Field(20, description="Max rows returned by the keyword stage of search.")
    SEARCH_SEMANTIC_TOP_K: int = Field(10, description="Nearest artworks fetched by the semantic stage.")
    CONTEXT_ARTWORK_TOP_K: int = Field(5, description="Nearest artworks included in chat context.")
    CONTEXT_ARTIST_LIMIT: int = Field(3, description="Keyword-matched artists included in chat context.")
    CONTEXT_RERANK: bool = Field(True, description="Order chat context blocks by similarity to the question.")
    GRAPH_ARTWORK_LIMIT: int = Field(20, description="Max artwork nodes in an artist graph.")
    GRAPH_RELATED_LIMIT: int = Field(5, description="Max related artists in an artist graph.")

    # --- Wikidata Enrichment ---
    WIKIDATA_ENDPOINT: str = Field("https://query.wikidata.org/sparql")
    WIKIDATA_USER_AGENT: str = Field(
        "AurumArtGraph/1.0 (art-graph enrichment; contact@example.org)",
        description="Descriptive client identifier required by the Wikidata usage policy.",
    )
    WIKIDATA_DELAY_SECONDS: float = Field(1.2, description="Minimum spacing between Wikidata requests.")
    WIKIDATA_TIMEOUT_SECONDS: float = Field(30.0, description="Per-request timeout for Wikidata calls.")
    WIKIDATA_MAX_RETRIES: int = Field(2, description="Extra attempts for a failed Wikidata request.")
    WIKIDATA_BATCH_SIZE: int = Field(10, description="Artists pulled per resolver page.")
    WIKIDATA_RELATION_LIMIT: int = Field(5, description="Max related artists fetched per relation type.")

    # --- Ingestion ---
    DATA_DIR: str = Field("data", description="Directory holding the source CSV files.")
    EMBED_BATCH_SIZE: int = Field(25, description="Artworks embedded per page.")
    EMBED_MAX_CHARS: int = Field(1000, description="Embedding text is truncated to this length.")

    # --- Service ---
    LOG_LEVEL: str = Field("INFO")
    CORS_ORIGINS: List[str] = Field(default_factory=lambda: ["http://localhost", "http://localhost:3000"])

    model_config = SettingsConfigDict(env_file='.env', env_file_encoding='utf-8', extra='ignore')

settings = Settings()
