"""Application configuration using Pydantic Settings."""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    env: str = "dev"

    # Crawling
    crawl_base: str = "https://www.madewithnestle.ca"
    max_pages: int = 950
    crawl_delay_seconds: float = 1.0
    navigation_timeout_ms: int = 30000
    selector_timeout_ms: int = 8000
    detail_page_pattern: str = "/recipe/"
    priority_pattern: str = "/recipe/"
    detail_selectors: str = "h1, h2, p"
    blocked_url_patterns: list[str] = ["recipes?f%5B", "recipe_tags_filter"]
    social_domains: list[str] = ["facebook.com", "twitter.com"]
    user_agent: str = (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
    )
    headless: bool = True

    # Neo4j
    neo4j_uri: str = "bolt://localhost:7687"
    neo4j_user: str = "neo4j"
    neo4j_password: str = ""
    neo4j_database: str = "neo4j"
    node_batch_size: int = 100
    edge_batch_size: int = 50
    min_heading_chars: int = 5
    relation_context: str = "section"

    # Qdrant full-text index
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str = ""
    index_name: str = "site_content"
    bm25_model: str = "Qdrant/bm25"
    index_batch_size: int = 30000
    index_text_limit: int = 1000
    index_batch_pause_seconds: float = 1.0
    index_include_media: bool = False

    # Retrieval
    top_k: int = 3
    similarity_threshold: float = 0.6
    max_relations: int = 10
    search_timeout_seconds: float = 10.0
    graph_timeout_seconds: float = 10.0

    # Lifecycle
    init_retries: int = 3
    init_backoff_seconds: float = 5.0
    snapshot_dir: str = "data"

    # Logging
    log_level: str = "INFO"

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.env.lower() == "prod"


# Global settings instance
settings = Settings()
