"""Configuration management for pgschemadoc."""
from .settings import (
    ENV_PREFIX,
    ExtractConfig,
    LoggingConfig,
)

__all__ = [
    "ENV_PREFIX",
    "ExtractConfig",
    "LoggingConfig",
]
