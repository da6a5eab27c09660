import os
from pathlib import Path
from typing import Any, Dict, Optional

import structlog
import yaml
from dotenv import dotenv_values
from pydantic import BaseModel, Field, ValidationError

from .data.schemas import CompletionType
from .utils import INLINE_SUGGEST_HOME

logger = structlog.get_logger(__name__)

CONFIG_FILE_NAME = "config.yaml"
ENV_FILE_NAME = ".env"

# Environment variables that override the values from config.yaml.
ENV_OVERRIDES = {
    "INLINE_SUGGEST_SESSION_HEADER": "session_id_header",
    "INLINE_SUGGEST_DEFAULT_COMPLETION_TYPE": "default_completion_type",
}


class SuggestConfig(BaseModel):
    """The root model for config.yaml."""

    session_id_header: str = Field(
        "session-id",
        min_length=1,
        description="Response header carrying the provider's session identifier.",
    )
    default_completion_type: CompletionType = Field(
        CompletionType.LINE,
        description="Completion type used when the provider omits classification.",
    )


def _read_config_file(config_file: Path) -> Dict[str, Any]:
    if not config_file.is_file():
        return {}
    with open(config_file, "r") as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a mapping at the top of {config_file}.")
    return data


def _collect_overrides(home: Path) -> Dict[str, Any]:
    # The process environment wins over the .env file.
    env_values: Dict[str, Optional[str]] = dict(dotenv_values(home / ENV_FILE_NAME))
    env_values.update(os.environ)

    overrides = {}
    for env_key, field_name in ENV_OVERRIDES.items():
        value = env_values.get(env_key)
        if value:
            overrides[field_name] = value
    return overrides


def load_config(home: Optional[Path] = None) -> SuggestConfig:
    """
    Loads config.yaml from the inline-suggest home, applies .env and
    environment overrides, and validates the result. A missing or invalid
    file falls back to the defaults.
    """
    home = home or INLINE_SUGGEST_HOME
    config_file = home / CONFIG_FILE_NAME
    log = logger.bind(path=str(config_file))

    try:
        data = _read_config_file(config_file)
    except (yaml.YAMLError, ValueError) as e:
        log.error("config.file.invalid", error=str(e))
        data = {}

    data.update(_collect_overrides(home))

    try:
        config = SuggestConfig.model_validate(data)
    except ValidationError as e:
        log.error("config.invalid", error=str(e))
        return SuggestConfig()

    log.debug("config.loaded", session_id_header=config.session_id_header)
    return config
