"""YAML configuration loading."""

from pathlib import Path

import structlog
import yaml
from pydantic import ValidationError

from gitrieve.core.exceptions import ConfigurationError
from gitrieve.core.models.repository import AppConfig

logger = structlog.get_logger(__name__)


def load_config(path: str | Path, github_token: str | None = None) -> AppConfig:
    """Read and validate the configuration file.

    ``github_token`` (typically from the environment) wins over the
    token stored in the file.
    """
    config_path = Path(path)
    try:
        raw = yaml.safe_load(config_path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ConfigurationError(
            f"Cannot read config file: {config_path}", details={"path": str(config_path)}
        ) from e
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in config file: {e}", details={"path": str(config_path)}
        ) from e

    try:
        config = AppConfig.model_validate(raw or {})
    except ValidationError as e:
        raise ConfigurationError(
            f"Invalid configuration: {e}", details={"path": str(config_path)}
        ) from e

    if github_token:
        config = config.model_copy(update={"github_token": github_token})

    logger.debug(
        "Configuration loaded",
        path=str(config_path),
        repositories=len(config.repository),
        storages=len(config.storage),
    )
    return config
