"""Configuration management for promptwire."""

import logging
from typing import Dict, FrozenSet, Optional

from pydantic import Field
from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)

OPENAI_API_URL = "https://api.openai.com"


class Settings(BaseSettings):
    """Client settings with environment variable support."""

    # Credentials
    api_key: Optional[str] = Field(default=None, description="API key", alias="OPENAI_API_KEY")
    organization_id: Optional[str] = Field(
        default=None, description="Organization id", alias="OPENAI_ORGANIZATION_ID"
    )

    # Connection settings
    base_url: str = Field(default=OPENAI_API_URL, description="API base URL", alias="OPENAI_BASE_URL")
    request_timeout: float = Field(
        default=60.0, description="Read timeout in seconds", alias="PROMPTWIRE_REQUEST_TIMEOUT"
    )
    connect_timeout: float = Field(
        default=10.0, description="Connect timeout in seconds", alias="PROMPTWIRE_CONNECT_TIMEOUT"
    )
    max_retries: int = Field(
        default=3, ge=0, description="Retries on rate limiting", alias="PROMPTWIRE_MAX_RETRIES"
    )

    log_level: str = Field(default="INFO", description="Log level", alias="PROMPTWIRE_LOG_LEVEL")

    model_config = {"env_file": ".env", "case_sensitive": False, "extra": "ignore"}


class ModelCatalog:
    """Static model metadata: capabilities and context sizes."""

    MAX_TOKENS_DEFAULT = 2049

    CHAT_MODELS: FrozenSet[str] = frozenset({
        "gpt-4", "gpt-4-0314", "gpt-4-0613", "gpt-4-32k", "gpt-4-32k-0314",
        "gpt-3.5-turbo", "gpt-3.5-turbo-0301", "gpt-3.5-turbo-0613", "gpt-3.5-turbo-16k",
    })
    COMPLETION_MODELS: FrozenSet[str] = frozenset({
        "text-davinci-003", "text-davinci-002", "text-curie-001", "text-babbage-001",
        "text-ada-001", "davinci", "curie", "babbage", "ada",
    })
    EDIT_MODELS: FrozenSet[str] = frozenset({"text-davinci-edit-001", "code-davinci-edit-001"})
    EMBEDDING_MODELS: FrozenSet[str] = frozenset({"text-embedding-ada-002", "text-search-ada-doc-001"})

    MAX_TOKENS: Dict[str, int] = {
        "gpt-4": 8192,
        "gpt-4-0314": 8192,
        "gpt-4-0613": 8192,
        "gpt-4-32k": 32768,
        "gpt-4-32k-0314": 32768,
        "gpt-3.5-turbo": 4096,
        "gpt-3.5-turbo-0301": 4096,
        "gpt-3.5-turbo-0613": 4096,
        "gpt-3.5-turbo-16k": 16384,
        "text-davinci-003": 4097,
        "text-davinci-002": 4097,
        "code-davinci-002": 8001,
    }

    def __init__(self, max_tokens: Optional[Dict[str, int]] = None):
        self._max_tokens = dict(self.MAX_TOKENS)
        if max_tokens:
            self._max_tokens.update(max_tokens)

    def max_tokens(self, model_name: str) -> int:
        return self._max_tokens.get(model_name, self.MAX_TOKENS_DEFAULT)

    def chattable(self, model_name: str) -> bool:
        return model_name in self.CHAT_MODELS

    def completionable(self, model_name: str) -> bool:
        return model_name in self.COMPLETION_MODELS

    def editable(self, model_name: str) -> bool:
        return model_name in self.EDIT_MODELS

    def embeddable(self, model_name: str) -> bool:
        return model_name in self.EMBEDDING_MODELS


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get client settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = Settings()

        if not _settings.api_key:
            logger.warning("OPENAI_API_KEY is not configured. Requests will be sent without credentials.")

    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the environment is read again."""
    global _settings
    _settings = None
