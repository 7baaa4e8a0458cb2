"""Centralized configuration for mdindex using Pydantic Settings."""

from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Strictly typed configuration loaded from environment variables.

    All values are validated at startup. Only the data directory is required
    in practice; everything else has a working default.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        extra="ignore",  # Ignore extra env vars not defined in model
    )

    # Corpus
    data_dir: Path = Field(default=Path("data"), description="Root directory holding the documents to index")
    file_extensions: str = Field(
        default=".md",
        description="Comma-separated file suffixes included in the scan (e.g. '.md,.txt')",
    )

    # Cache
    cache_dir: Path = Field(
        default=Path("~/.cache/mdindex"),
        description="Directory holding document snapshots and modification-time tables",
    )
    auto_rebuild_interval_hours: float = Field(
        default=24.0,
        description="Hours between scheduled cache refreshes; zero or negative disables scheduling",
    )

    # Search
    page_size: int = Field(default=15, ge=1, description="Results per page")
    max_hits_per_result: int = Field(default=3, ge=1, description="Matching lines returned per document")

    # Logging
    log_level: str = Field(default="info", description="Logging level")
    log_json: bool = Field(default=True, description="Emit structured JSON logs")
    observability_setup: bool = Field(
        default=True,
        description="Install log handlers and the tracer provider when the index is initialized",
    )

    @field_validator("file_extensions")
    @classmethod
    def _check_extensions(cls, value: str) -> str:
        if not any(part.strip() for part in value.split(",")):
            raise ValueError("FILE_EXTENSIONS must name at least one suffix, e.g. '.md'")
        return value

    def get_file_extensions(self) -> tuple[str, ...]:
        """Get normalized file suffixes (lowercase, leading dot)."""
        extensions: list[str] = []
        for raw in self.file_extensions.split(","):
            suffix = raw.strip().lower()
            if not suffix:
                continue
            if not suffix.startswith("."):
                suffix = f".{suffix}"
            if suffix not in extensions:
                extensions.append(suffix)
        return tuple(extensions)

    def resolved_cache_dir(self) -> Path:
        """Return the cache directory with ``~`` expanded."""
        return self.cache_dir.expanduser()
