"""
Configuration package for doublekit.

Modules:
    settings: Centralized configuration using Pydantic Settings
"""

from doublekit.config.settings import Settings, settings

__all__ = ["Settings", "settings"]
