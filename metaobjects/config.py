"""
Central configuration for the metaobjects runtime.

Defaults live here as module constants. Each one may be overridden through
the environment:

- METAOBJECTS_IMMUTABILITY_MODE: "strict" raises on writes to encapsulated
  metaobjects, "lenient" ignores them with a warning
- METAOBJECTS_PRIVATE_PREFIX: name prefix that marks a method private
- METAOBJECTS_LOG_LEVEL: level used by observability.setup_logging()
"""

import os
from typing import Literal, Optional

from pydantic import BaseModel, field_validator

# ---- Defaults ----
DEFAULT_IMMUTABILITY_MODE = "strict"
DEFAULT_PRIVATE_PREFIX = "_"
DEFAULT_LOG_LEVEL = "INFO"

# ---- Wildcard used by mixin_with_policy assignments ----
WILDCARD = "*"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class MetaobjectSettings(BaseModel):
    """Validated runtime settings."""

    immutability_mode: Literal["strict", "lenient"] = DEFAULT_IMMUTABILITY_MODE
    private_prefix: str = DEFAULT_PRIVATE_PREFIX
    log_level: str = DEFAULT_LOG_LEVEL

    @field_validator("private_prefix")
    @classmethod
    def _prefix_not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("private_prefix must not be empty")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        value = value.upper()
        if value not in _LOG_LEVELS:
            raise ValueError(f"log_level must be one of {_LOG_LEVELS}, got: {value}")
        return value


def _from_environment() -> MetaobjectSettings:
    return MetaobjectSettings(
        immutability_mode=os.getenv("METAOBJECTS_IMMUTABILITY_MODE", DEFAULT_IMMUTABILITY_MODE).lower(),
        private_prefix=os.getenv("METAOBJECTS_PRIVATE_PREFIX", DEFAULT_PRIVATE_PREFIX),
        log_level=os.getenv("METAOBJECTS_LOG_LEVEL", DEFAULT_LOG_LEVEL),
    )


# Global settings instance, built on first use
_settings: Optional[MetaobjectSettings] = None


def get_settings() -> MetaobjectSettings:
    """Return the process-wide settings, reading the environment once."""
    global _settings
    if _settings is None:
        _settings = _from_environment()
    return _settings


def reload_settings() -> MetaobjectSettings:
    """Re-read the environment and replace the cached settings."""
    global _settings
    _settings = _from_environment()
    return _settings
