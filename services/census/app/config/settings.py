"""Settings definitions for the census service."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..models.profile import ReportProfile, get_profile
from ..pipelines.census_pipeline import MarkingMode


class AppSettings(BaseSettings):
    """Runtime configuration for the FastAPI application instance."""

    service_name: str = Field(
        default="census",
        description="Human friendly identifier used in metadata and logging.",
    )
    host: str = Field(
        default="0.0.0.0",
        description="Hostname or interface the HTTP server binds to.",
    )
    port: int = Field(
        default=8005,
        description="Port the HTTP server listens on.",
    )

    model_config = SettingsConfigDict(env_prefix="CENSUS_", env_file=".env", extra="ignore")


class LoggingSettings(BaseSettings):
    """Logging configuration for the service."""

    level: str = Field(
        default="info",
        description="Logging verbosity level (e.g. debug, info, warning).",
    )
    json_format: bool = Field(
        default=True,
        description="Emit structured JSON logs when set to true.",
    )

    model_config = SettingsConfigDict(env_prefix="CENSUS_LOG_", env_file=".env", extra="ignore")


class ParserSettings(BaseSettings):
    """Which report layout the parser expects."""

    profile: str = Field(
        default="rounding",
        description="Name of the built-in report profile (rounding, nursing_census).",
    )
    room_shapes: list[str] | None = Field(
        default=None,
        description="Ordered room shape names overriding the profile's shape set.",
    )
    comment_marker: str | None = Field(
        default=None,
        description="Prefix marking a pasted line as a comment.",
    )

    model_config = SettingsConfigDict(env_prefix="CENSUS_PARSER_", env_file=".env", extra="ignore")


class ViewSettings(BaseSettings):
    """Defaults applied when a request leaves display options unset."""

    prioritize_low_los: bool = Field(
        default=True,
        description="Place stays shorter than one day ahead of the rest.",
    )
    marking_mode: MarkingMode = Field(
        default=MarkingMode.STARS,
        description="Decoration applied to marked records (stars, highlight, none).",
    )

    model_config = SettingsConfigDict(env_prefix="CENSUS_VIEW_", env_file=".env", extra="ignore")


class Settings(BaseSettings):
    """Aggregated settings namespace for the census service."""

    app: AppSettings = Field(default_factory=AppSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    parser: ParserSettings = Field(default_factory=ParserSettings)
    view: ViewSettings = Field(default_factory=ViewSettings)

    model_config = SettingsConfigDict(
        env_prefix="CENSUS_",
        env_file=".env",
        env_nested_delimiter="__",
        extra="ignore",
    )

    def resolve_profile(self) -> ReportProfile:
        """Return the configured profile with parser overrides applied."""

        profile = get_profile(self.parser.profile)
        if self.parser.room_shapes:
            profile = profile.with_room_shapes(self.parser.room_shapes)
        if self.parser.comment_marker is not None:
            profile = profile.with_comment_marker(self.parser.comment_marker)
        return profile


@lru_cache
def get_settings() -> Settings:
    """Return a cached settings instance."""

    return Settings()


__all__ = [
    "AppSettings",
    "LoggingSettings",
    "ParserSettings",
    "Settings",
    "ViewSettings",
    "get_settings",
]
