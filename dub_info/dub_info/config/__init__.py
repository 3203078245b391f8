"""
Configuration package for dub-info.

This package provides centralized, type-safe configuration management.
"""

from .manager import (
    AniSearchConfig,
    LoggingConfig,
    DubInfoConfig,
    setup_config,
    get_config,
    get_anisearch_config,
)

__all__ = [
    "AniSearchConfig",
    "LoggingConfig",
    "DubInfoConfig",
    "setup_config",
    "get_config",
    "get_anisearch_config",
]
