"""Pydantic configuration models with validation."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


def _normalize_path(value: Any) -> Path:
    """
    Normalize a path-like value without causing filesystem side-effects.

    This function MUST NOT create directories or files.
    """
    if isinstance(value, Path):
        return value.expanduser()
    if isinstance(value, str):
        return Path(value).expanduser()
    raise TypeError(f"Expected path-like value, got: {type(value)!r}")


class StremioConfig(BaseModel):
    """Stremio add-on identity and the series it serves."""

    series_id: str = Field(
        default="pp_onepace",
        description="Series id; also the prefix of compound episode ids.",
    )
    catalog_id: str = Field(
        default="seriesCatalog",
        description="Id of the single series catalog.",
    )
    addon_id: str = Field(default="community.pacearr")
    addon_name: str = Field(default="One Pace + Torbox")
    addon_version: str = Field(default="0.1.0")

    @field_validator("series_id")
    @classmethod
    def _validate_series_id(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("series_id must not be empty")
        return v


class TorboxConfig(BaseModel):
    """Debrid service settings.

    ``api_key`` is only the fallback credential; a key carried in the
    install URL always wins.
    """

    api_key: Optional[str] = Field(
        default=None,
        description="Default Torbox API key (TORBOX_API_KEY).",
    )
    base_url: str = Field(
        default="https://api.torbox.app/v1/api",
        description="Torbox API base URL.",
    )


class SubtitleConfig(BaseModel):
    """Subtitle aggregation settings."""

    languages: list[str] = Field(
        default_factory=lambda: ["en"],
        description='Requested ISO 639-1 codes, or ["all"].',
    )
    max_results: int = Field(
        default=20,
        description="Max subtitles attached to a stream (payload bound).",
    )
    community_max_results: int = Field(
        default=10,
        description="Max community subtitles kept after deduplication.",
    )
    community_rating_discount: float = Field(
        default=0.5,
        description="Factor applied to community ratings (official = 10).",
    )
    timeout_seconds: float = Field(
        default=15.0,
        description="Per-source timeout for subtitle lookups.",
    )
    opensubtitles_api_key: Optional[str] = Field(
        default=None,
        description="OpenSubtitles v3 API key; legacy REST API is used without it.",
    )
    opensubtitles_user_agent: str = Field(default="pacearr v0.1")

    @field_validator("languages")
    @classmethod
    def _validate_languages(cls, v: list[str]) -> list[str]:
        cleaned = [lang.strip().lower() for lang in v if lang.strip()]
        if not cleaned:
            raise ValueError("subtitles.languages must not be empty")
        return cleaned

    @field_validator("community_rating_discount")
    @classmethod
    def _validate_discount(cls, v: float) -> float:
        if not 0 < v <= 1:
            raise ValueError("community_rating_discount must be in (0, 1]")
        return v

    @field_validator("timeout_seconds")
    @classmethod
    def _validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("subtitles.timeout_seconds must be > 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/data/stremio/torbox/subtitles).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="pacearr", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # Metadata store (YAML section: data.dir)
    data_dir: Path = Field(
        default=Path("./data"),
        validation_alias=AliasChoices(
            "data_dir",
            AliasPath("data", "dir"),
        ),
        description="Root directory of the meta/catalog/stream JSON files.",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds for provider calls.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default="pacearr/0.1.0",
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    stremio: StremioConfig = Field(default_factory=StremioConfig)
    torbox: TorboxConfig = Field(default_factory=TorboxConfig)
    subtitles: SubtitleConfig = Field(default_factory=SubtitleConfig)

    @field_validator("data_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Path:
        return _normalize_path(v)

    @field_validator("http_timeout_seconds")
    @classmethod
    def _validate_http_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("http_timeout_seconds must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "data": {"dir": str(self.data_dir)},
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "stremio": self.stremio.model_dump(),
            "torbox": self.torbox.model_dump(exclude={"api_key"}),
            "subtitles": self.subtitles.model_dump(exclude={"opensubtitles_api_key"}),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    Intended usage:
    - load.py creates EnvOverrides() to read PACEARR_* variables,
      converts to dict of set values, merges into YAML/defaults,
      then validates AppConfig.

    Supported env var examples (flat, explicit):
    - PACEARR_DATA_DIR
    - PACEARR_HTTP_TIMEOUT_SECONDS
    - PACEARR_LOG_LEVEL
    - PACEARR_SUBTITLE_LANGUAGES ("en,es" or "all")
    - TORBOX_API_KEY / PACEARR_TORBOX_API_KEY
    - OPENSUBTITLES_API_KEY / PACEARR_OPENSUBTITLES_API_KEY
    """

    model_config = SettingsConfigDict(
        env_prefix="PACEARR_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    data_dir: Optional[Path] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    series_id: Optional[str] = None
    subtitle_languages: Optional[str] = None  # comma-separated, e.g. "en,es"

    torbox_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("PACEARR_TORBOX_API_KEY", "TORBOX_API_KEY"),
    )
    opensubtitles_api_key: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(
            "PACEARR_OPENSUBTITLES_API_KEY", "OPENSUBTITLES_API_KEY"
        ),
    )

    @field_validator("data_dir", mode="before")
    @classmethod
    def _validate_paths(cls, v: Any) -> Any:
        if v is None:
            return None
        return _normalize_path(v)

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
