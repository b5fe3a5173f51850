"""Configuration package for the census service."""

from .settings import (
    AppSettings,
    LoggingSettings,
    ParserSettings,
    Settings,
    ViewSettings,
    get_settings,
)

__all__ = [
    "AppSettings",
    "LoggingSettings",
    "ParserSettings",
    "Settings",
    "ViewSettings",
    "get_settings",
]
