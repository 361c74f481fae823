"""Application configuration via environment variables."""

from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment."""

    # App
    environment: str = "development"
    log_level: str = "INFO"

    # CORS
    cors_origins: list[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Hacker News upstream
    hacker_news_base_url: str = "https://hacker-news.firebaseio.com/v0/"
    best_stories_endpoint: str = "beststories.json"
    story_details_endpoint: str = "item/{id}.json"
    http_timeout: float = 15.0

    # Cache lifetimes — the id list is short-lived, story details long-lived
    best_stories_cache_minutes: float = 1
    cache_expiration_hours: float = 4
    cache_max_size: int | None = None

    # Upper bound on the detail fan-out join (None = wait for every fetch)
    detail_fetch_timeout: float | None = None

    model_config = {"env_file": ".env", "extra": "ignore"}

    @field_validator("hacker_news_base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("hacker_news_base_url must be an http(s) URL")
        return value if value.endswith("/") else value + "/"

    @field_validator("story_details_endpoint")
    @classmethod
    def _check_details_template(cls, value: str) -> str:
        if "{id}" not in value:
            raise ValueError("story_details_endpoint must contain an {id} placeholder")
        return value

    @field_validator(
        "http_timeout",
        "best_stories_cache_minutes",
        "cache_expiration_hours",
        "detail_fetch_timeout",
    )
    @classmethod
    def _check_positive(cls, value: float | None) -> float | None:
        if value is not None and value <= 0:
            raise ValueError("durations must be positive")
        return value

    @field_validator("cache_max_size")
    @classmethod
    def _check_max_size(cls, value: int | None) -> int | None:
        if value is not None and value < 3:
            # Room for both id lists plus at least one story
            raise ValueError("cache_max_size must be at least 3")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
