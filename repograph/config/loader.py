"""YAML configuration loader with environment variable overrides.

# ─── CONFIGURATION HIERARCHY ───────────────────────────────────────────
#
# Configuration is loaded in layers (later layers override earlier):
#
#   1. config/config.yaml - Static defaults checked into the repo
#   2. .env file - Local developer overrides (not committed)
#   3. Environment vars - Set at deploy time
#
# load_config() reads the YAML file first, then deep-merges the values
# derived from Settings on top:
#   base = {"ingestion": {"max_file_size_mb": 50}}
#   overrides = {"ingestion": {"chunk_size": 800}}
#   result = {"ingestion": {"max_file_size_mb": 50, "chunk_size": 800}}
# ──────────────────────────────────────────────────────────────────────
"""

from pathlib import Path

import yaml

from repograph.config.settings import Settings

# Used when config.yaml is missing or omits the ingestion section.
DEFAULT_INGESTION_CONFIG: dict = {
    "exclude_dirs": [".git", ".hg", ".svn", "node_modules", "__pycache__", ".venv", "venv"],
    "max_file_size_mb": 50,
    "follow_symlinks": False,
}


def load_config(path: str = "config/config.yaml", settings: Settings | None = None) -> dict:
    """Load YAML config and merge with environment-based Settings.

    Environment variables (via Settings) override YAML values where keys overlap.

    Args:
        path: Path to the YAML configuration file.
        settings: Settings instance to merge; a fresh one is built when omitted.

    Returns:
        Fully resolved configuration dictionary.
    """
    config_path = Path(path)
    if config_path.exists():
        with open(config_path, encoding="utf-8") as f:
            yaml_config = yaml.safe_load(f) or {}
    else:
        yaml_config = {}

    base: dict = {"ingestion": dict(DEFAULT_INGESTION_CONFIG)}
    _deep_merge(base, yaml_config)

    settings = settings or Settings()
    env_overrides = {
        "app": {
            "host": settings.app_host,
            "port": settings.app_port,
            "env": settings.app_env,
        },
        "vector_store": {
            "index_name": settings.pinecone_index_name,
            "host": settings.get_pinecone_host(),
            "dimension": settings.vector_dimension,
            "use_namespaces": settings.pinecone_use_namespaces,
        },
        "ingestion": {
            "chunk_size": settings.chunk_size,
            "chunk_overlap": settings.chunk_overlap,
        },
        "logging": {
            "level": settings.log_level,
        },
    }

    _deep_merge(base, env_overrides)
    return base


def _deep_merge(base: dict, overrides: dict) -> None:
    """Recursively merge overrides into base dict, mutating base in place."""
    for key, value in overrides.items():
        if key in base and isinstance(base[key], dict) and isinstance(value, dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
