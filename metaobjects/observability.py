"""
Observability for the metaobjects runtime.

Provides a consistent logging schema with a component field on every
record. The library never configures logging by itself; applications call
setup_logging() once, and engine modules obtain loggers via get_logger().
"""

import logging
import logging.config
import sys
from pathlib import Path
from typing import Optional

from metaobjects.config import get_settings

LOGGER_NAMESPACE = "metaobjects"


class ComponentFilter(logging.Filter):
    """Guarantee a component field on records that did not come through an adapter."""

    def filter(self, record):
        if not hasattr(record, "component"):
            record.component = record.name
        return True


class ComponentAdapter(logging.LoggerAdapter):
    """Logger adapter that adds component context."""

    def __init__(self, logger, component: str):
        super().__init__(logger, {"component": component})

    def process(self, msg, kwargs):
        if "extra" not in kwargs:
            kwargs["extra"] = {}
        if self.extra and "component" in self.extra:
            kwargs["extra"]["component"] = self.extra["component"]
        return msg, kwargs


def setup_logging(level: Optional[str] = None, log_file: Optional[Path] = None) -> None:
    """
    Configure logging for the metaobjects namespace.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the configured log_level.
        log_file: Optional file path for logging output
    """
    level = (level or get_settings().log_level).upper()

    config = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "component": {
                "()": ComponentFilter,
            },
        },
        "formatters": {
            "detailed": {
                "format": "%(asctime)s [%(levelname)s] %(component)s %(name)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "simple": {
                "format": "[%(levelname)s] %(component)s - %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "simple",
                "stream": sys.stdout,
                "filters": ["component"],
            }
        },
        "loggers": {
            LOGGER_NAMESPACE: {
                "level": level,
                "handlers": ["console"],
                "propagate": False,
            },
        },
    }

    if log_file:
        log_file = Path(log_file)
        log_file.parent.mkdir(parents=True, exist_ok=True)
        config["handlers"]["file"] = {
            "class": "logging.FileHandler",
            "level": level,
            "formatter": "detailed",
            "filename": str(log_file),
            "filters": ["component"],
        }
        config["loggers"][LOGGER_NAMESPACE]["handlers"].append("file")

    logging.config.dictConfig(config)


def get_logger(component: str) -> ComponentAdapter:
    """
    Get a logger for a specific component.

    Args:
        component: Component name (e.g., 'encapsulation', 'composition')

    Returns:
        Logger adapter with component context
    """
    logger = logging.getLogger(f"{LOGGER_NAMESPACE}.{component}")
    return ComponentAdapter(logger, component)
