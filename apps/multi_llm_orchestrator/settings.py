from functools import lru_cache
from typing import List, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MULTI_LLM_", env_file=".env", extra="ignore")

    app_name: str = "multi-llm-orchestrator"
    version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 8090

    # Provider configurations
    openai_api_key: Optional[str] = None
    anthropic_api_key: Optional[str] = None
    openai_base_url: str = "https://api.openai.com/v1"
    anthropic_base_url: str = "https://api.anthropic.com/v1"
    anthropic_version: str = "2023-06-01"

    # Timeout settings (seconds)
    request_timeout: float = 30.0
    health_check_timeout: float = 5.0

    # Performance history
    history_limit: int = 100

    # Storage bindings
    database_url: str = "sqlite+aiosqlite:///./multi_llm_performance.db"
    redis_url: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_json: bool = True

    cors_origins: List[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    return Settings()
