from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.utils.logger import get_logger

from .errors import InvalidInputError
from .models import FilterDefaults

logger = get_logger("config")


class APIEmbeddingConfig(BaseModel):
    """Remote embedding API. Unset fields use the provider's defaults."""

    provider: Literal["openai", "voyage", "cohere"]
    api_key: str
    model: Optional[str] = None
    dimensions: Optional[int] = Field(default=None, gt=0)
    base_url: Optional[str] = None
    timeout: float = 30.0


class LocalEmbeddingConfig(BaseModel):
    """Local sentence-transformers model."""

    provider: Literal["local"] = "local"
    model: Optional[str] = None
    device: Optional[str] = None


EmbeddingConfig = Annotated[
    Union[APIEmbeddingConfig, LocalEmbeddingConfig],
    Field(discriminator="provider"),
]


class ToolFilterSettings(BaseSettings):
    """Configuration for a ToolFilter instance."""

    embedding: Optional[EmbeddingConfig] = None
    default_options: FilterDefaults = Field(default_factory=FilterDefaults)
    include_server_description: bool = False
    cache_size: int = Field(default=100, ge=1)
    debug: bool = False  # Log per-stage timings (env: TOOL_FILTER_DEBUG)

    model_config = SettingsConfigDict(env_prefix="TOOL_FILTER_", env_nested_delimiter="__")


def load_settings(path: Optional[Path] = None, **overrides) -> ToolFilterSettings:
    """Load settings from a YAML file, layered under explicit overrides.

    A missing file yields settings from the environment and defaults. An
    unreadable or invalid file raises InvalidInputError.
    """
    raw: dict = {}
    if path is not None and path.exists():
        try:
            with open(path) as f:
                raw = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise InvalidInputError(f"Invalid settings file {path}: {e}") from e
        if not isinstance(raw, dict):
            raise InvalidInputError(f"Settings file {path} must contain a mapping")
    elif path is not None:
        logger.debug(f"Settings file {path} not found, using defaults")

    raw.update({k: v for k, v in overrides.items() if v is not None})
    try:
        return ToolFilterSettings(**raw)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid settings: {e}") from e
