"""Service modules for the census application."""

__all__ = ["census"]
