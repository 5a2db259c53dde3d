"""Configuration module: exports Settings and load_config."""

from repograph.config.loader import load_config
from repograph.config.settings import Settings

__all__ = ["Settings", "load_config"]
