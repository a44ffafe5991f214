# ABOUTME: Configuration module for application settings.
# ABOUTME: Uses pydantic-settings for environment variable overrides and provides cached access.

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Annotated

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AnalysisFailurePolicy(str, Enum):
    """What the intent store does when intent analysis fails."""

    ABORT = "abort"  # propagate AnalysisFailedError, write nothing
    STORE_UNANALYZED = "store_unanalyzed"  # keep the text, mark the intent unmatchable


class Settings(BaseSettings):
    """Application settings with environment variable support.

    All settings can be overridden via environment variables with the
    INTENT_MATCHER_ prefix (e.g., INTENT_MATCHER_DB_PATH).
    """

    model_config = SettingsConfigDict(
        env_prefix="INTENT_MATCHER_",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    db_path: Annotated[Path, Field(description="Path to SQLite database file")] = (
        Path.home() / ".intent-matcher" / "data.db"
    )

    openai_api_key: Annotated[
        str | None, Field(description="OpenAI API key; falls back to the OS keyring")
    ] = None

    openai_model: Annotated[str, Field(description="Chat model used for analysis")] = (
        "gpt-4o-mini"
    )

    llm_timeout_seconds: Annotated[
        float, Field(description="Timeout for a single language model call", gt=0)
    ] = 30.0

    analysis_failure_policy: Annotated[
        AnalysisFailurePolicy,
        Field(description="Abort the write or store the intent unanalyzed"),
    ] = AnalysisFailurePolicy.ABORT

    match_expiry_days: Annotated[int, Field(description="Days until a match expires", ge=1)] = 30

    introduction_expiry_days: Annotated[
        int, Field(description="Days until an introduction request expires", ge=1)
    ] = 30

    min_match_score: Annotated[
        int, Field(description="Minimum score for a match to be proposed", ge=0, le=100)
    ] = 30

    candidate_overfetch: Annotated[
        int, Field(description="Candidates fetched per requested match", ge=1)
    ] = 2

    default_match_limit: Annotated[
        int, Field(description="Matches generated per request by default", ge=1, le=100)
    ] = 10

    log_level: Annotated[str, Field(description="Logging level for the CLI")] = "WARNING"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the application settings.

    Returns a cached Settings instance. Use get_settings.cache_clear()
    to clear the cache if needed.

    Returns:
        Cached Settings instance.
    """
    return Settings()


def ensure_data_dir() -> Path:
    """Ensure the data directory exists.

    Creates the directory containing the database file if it doesn't exist.

    Returns:
        Path to the data directory.
    """
    settings = get_settings()
    data_dir = settings.db_path.parent
    data_dir.mkdir(parents=True, exist_ok=True)
    return data_dir
