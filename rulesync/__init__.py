"""Synchronize one canonical rules directory into many AI agent configurations."""

__version__ = "0.1.0"

__all__ = ["__version__"]
