"""
Configuration management for the travel plan service.
Supports OpenAI-compatible LLM providers and optional plan persistence.
"""
from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings
from typing import Literal
import logging


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # LLM Configuration
    llm_provider: Literal["openai", "mistral", "openrouter", "ollama"] = "openai"
    llm_api_key: str = Field(
        default="",
        validation_alias=AliasChoices("llm_api_key", "openai_api_key"),
    )
    llm_base_url: str = ""
    llm_model: str = "gpt-4-turbo"

    # LLM Parameters
    llm_temperature: float = 0.7
    llm_max_tokens: int = 3000
    llm_timeout_seconds: float = 60.0

    # Persistence (Supabase REST or local SQLite file)
    supabase_url: str = ""
    supabase_service_key: str = ""
    supabase_table: str = "plans"
    plan_db_path: str = ""
    persistence_timeout_seconds: float = 5.0

    # Affiliate tagging
    affiliate_partner_id: str = ""
    affiliate_param: str = "aid"

    # Server Configuration
    host: str = "127.0.0.1"
    port: int = 3000
    debug: bool = False
    log_level: str = "INFO"
    cors_allow_origins: str = "*"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"


# Global settings instance
settings = Settings()


PROVIDER_BASE_URLS = {
    "openai": "https://api.openai.com/v1",
    "mistral": "https://api.mistral.ai/v1",
    "openrouter": "https://openrouter.ai/api/v1",
    "ollama": "http://localhost:11434/v1",
}


def get_llm_config(config: Settings = settings) -> dict:
    """Get LLM configuration based on provider."""
    return {
        "api_key": config.llm_api_key or "ollama",
        "base_url": config.llm_base_url or PROVIDER_BASE_URLS[config.llm_provider],
        "model": config.llm_model,
        "temperature": config.llm_temperature,
        "max_tokens": config.llm_max_tokens,
        "timeout": config.llm_timeout_seconds,
    }


def backend_configured(config: Settings = settings) -> bool:
    """True when a generative backend can be reached with the given settings."""
    # Ollama runs locally and needs no key
    return bool(config.llm_api_key) or config.llm_provider == "ollama"


def init_logging(config: Settings = settings) -> None:
    lvl = getattr(logging, config.log_level.upper(), logging.INFO)
    logging.basicConfig(level=lvl, format="%(asctime)s | %(levelname)s | %(name)s | %(message)s")
    # Reduce verbosity of noisy loggers
    for noisy in ("httpx", "httpcore", "openai"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
