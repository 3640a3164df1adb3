"""Configuration management using pydantic-settings."""
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Upstream statistics provider
    riot_api_key: Optional[str] = None
    stats_api_base_url: str = "https://stats.example-provider.gg"
    versions_url: str = "https://ddragon.leagueoflegends.com/api/versions.json"
    upstream_timeout_seconds: float = 10.0

    # Persistent cache store (any SQLAlchemy URL). Unset = local cache only.
    stats_store_url: Optional[str] = None

    # Cache TTLs
    stats_ttl_seconds: int = 21600   # 6 hours, rank/region stats
    meta_ttl_seconds: int = 86400    # 24 hours, versions and other meta data

    # Bulk collection
    bulk_dispatch_delay_seconds: float = 1.0
    bulk_max_workers: int = 8
    default_patch_count: int = 5
    fallback_patch: str = "14.4.1"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
