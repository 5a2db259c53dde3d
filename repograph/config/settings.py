"""Application settings loaded from environment variables via pydantic-settings.

# ─── HOW SETTINGS WORK ─────────────────────────────────────────────────
#
# Values are read from TWO sources (in priority order):
#
#   1. **Environment variables** - e.g. PINECONE_API_KEY=pc-abc123
#   2. **.env file** - key=value lines in the project root .env file
#
# Field ``pinecone_api_key`` maps to env var ``PINECONE_API_KEY``.
# Defaults below apply when neither source provides a value.  An empty
# API key or index name is not rejected here; the vector-store adapter
# raises ConfigurationError when it is constructed without them.
# ──────────────────────────────────────────────────────────────────────
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """repograph application settings.

    Environment variables override defaults. Loaded from .env file when present.
    """

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # === Vector store (Pinecone) ===
    pinecone_api_key: str = ""
    pinecone_index_name: str = ""
    pinecone_project: str = ""
    pinecone_cloud: str = "aws"
    pinecone_region: str = "us-east-1"
    # Explicit index host; overrides the host derived from index/project/region/cloud.
    pinecone_host: str = ""
    pinecone_use_namespaces: bool = False
    pinecone_namespace: str = "default"
    vector_dimension: int = 1536

    # === LLM / embeddings ===
    openai_api_key: str = ""
    openai_base_url: str = ""
    openai_text_model: str = ""
    openai_vision_model: str = ""
    openai_embedding_model: str = ""

    # === Pipeline ===
    chunk_size: int = 1000  # characters
    chunk_overlap: int = 200
    summarize_enabled: bool = True
    vision_enabled: bool = True
    query_top_k: int = 5

    # === App Config ===
    http_timeout: float = 30.0
    app_host: str = "0.0.0.0"
    app_port: int = 8000
    app_env: str = "development"
    log_level: str = "INFO"

    def get_pinecone_host(self) -> str:
        """Return the per-index host URL (no trailing slash)."""
        if self.pinecone_host:
            return self.pinecone_host.rstrip("/")
        return (
            f"https://{self.pinecone_index_name}-{self.pinecone_project}"
            f".svc.{self.pinecone_region}.{self.pinecone_cloud}.pinecone.io"
        )
