"""Shared pydantic building blocks."""

from .base import CamelModel, to_camel

__all__ = ["CamelModel", "to_camel"]
