"""Pydantic Settings — loads configuration from environment variables."""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "extra": "ignore"}

    api_key: str

    openai_api_key: str = ""
    anthropic_api_key: str = ""
    gemini_api_key: str = ""
    pagespeed_api_key: str = ""
    pagespeed_strategy: str = "mobile"
    pagespeed_timeout_seconds: float = 30.0

    redis_url: str = "redis://localhost:6379"
    audit_ttl_seconds: int = 7 * 24 * 3600

    llm_provider: str = "openai"
    report_llm: str = "gpt-4o-mini"

    crawl_preset: Literal["quick", "standard", "deep"] = "standard"
    crawl_timeout_seconds: float = 10.0
    crawl_user_agent: str = "SiteAuditBot/1.0"
    link_probe_limit: int = 5
    link_probe_timeout_seconds: float = 5.0
    link_probe_max_redirects: int = 2

    log_level: str = "INFO"


@lru_cache
def get_settings() -> Settings:
    return Settings()  # type: ignore[call-arg]
