"""Configuration for gitrieve."""

from gitrieve.config.loader import load_config
from gitrieve.config.settings import Settings, get_settings

__all__ = ["Settings", "get_settings", "load_config"]
