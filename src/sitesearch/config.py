from __future__ import annotations

from typing import Dict, Literal, Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppConfig(BaseModel):
    """Application-specific configuration values."""

    name: str = "sitesearch"
    env: str = "development"
    log_level: str = "INFO"
    # Render log lines as JSON instead of the console renderer
    json_logs: bool = False
    # Transport settings for FastMCP: "stdio" (default), "http", or "sse"
    transport: Literal["stdio", "http", "sse"] = "stdio"
    host: str = "127.0.0.1"
    port: int = 8000


class IndexConfig(BaseModel):
    """Where and how the serialized index artifact is retrieved."""

    url: Optional[str] = None  # e.g. "/search_index.en.js" or a full URL
    base_url: Optional[str] = None  # used to resolve a relative `url`
    timeout: float = 20.0
    user_agent: str = "sitesearch-index-loader/0.1"


class SearchConfig(BaseModel):
    """Query, snippet and formatting knobs."""

    min_query_length: int = 2
    debounce_ms: int = 300

    # Snippet window
    window_size: int = 200
    window_step: int = 20
    context_chars: int = 50
    ellipsis: str = "…"
    highlight_class: str = "bg-yellow-200 dark:bg-yellow-800"
    no_preview_text: str = "No preview available"

    # Title derivation: ids whose title is known up front, and how many
    # hyphen-separated tokens (e.g. a date or ordinal) prefix every slug
    special_titles: Dict[str, str] = Field(
        default_factory=lambda: {"/about/": "About Me - Developer Profile"}
    )
    slug_prefix_tokens: int = 1

    # Ranking options passed to the index (field name -> boost); empty means
    # every indexed field with boost 1
    field_boosts: Dict[str, float] = Field(default_factory=dict)
    boolean: Literal["OR", "AND"] = "OR"
    expand: bool = False


class Settings(BaseSettings):
    """Top-level settings loaded from environment variables and .env only."""

    model_config = SettingsConfigDict(
        env_prefix="SITESEARCH_",
        env_nested_delimiter="__",
        env_file=".env",
        extra="ignore",
    )

    app: AppConfig = AppConfig()
    index: IndexConfig = IndexConfig()
    search: SearchConfig = SearchConfig()


def load_settings() -> Settings:
    """Load settings from environment variables and .env only."""
    return Settings()  # type: ignore[call-arg]
