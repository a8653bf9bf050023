"""Application settings using Pydantic Settings."""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Process-level settings loaded from environment variables.

    Repository and storage definitions live in the YAML config file;
    these settings only locate that file and tune the runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="GITRIEVE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # General
    config_path: str = "config.yaml"
    log_level: str = "INFO"
    json_logs: bool = False

    # Root of all working directories, relative to the process cwd
    work_dir: str = ".gitrieve"

    # GitHub
    github_token: str | None = None  # overrides githubToken from the config file
    github_api_url: str = "https://api.github.com"
    github_graphql_url: str = "https://api.github.com/graphql"
    http_timeout: float = 60.0
    page_size: int = 100
    graphql_page_size: int = 50


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
