"""
Transformation functions.

Each derives a new metaobject from an existing one, delegating to the same
prototype. The input is never mutated.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from metaobjects.metaobject import Metaobject
from metaobjects.observability import get_logger

logger = get_logger("transforms")


def _prototype_of(metaobject: Mapping) -> Any:
    if isinstance(metaobject, Metaobject):
        return metaobject.prototype
    return None


def _name_of(metaobject: Mapping) -> Any:
    return getattr(metaobject, "name", None)


def fluent_by_default(metaobject: Mapping[str, Any]) -> Metaobject:
    """Return a copy whose methods return the receiver instead of None."""

    def fluent(method: Callable) -> Callable:
        def fluent_method(self, *args, **kwargs):
            result = method(self, *args, **kwargs)
            if result is None:
                return self
            return result

        fluent_method.__name__ = getattr(method, "__name__", "fluent_method")
        return fluent_method

    derived = Metaobject(
        {
            name: fluent(value) if callable(value) else value
            for name, value in metaobject.items()
        },
        prototype=_prototype_of(metaobject),
        name=_name_of(metaobject),
    )
    logger.debug(f"Derived fluent {derived!r}")
    return derived


def sealed(metaobject: Mapping[str, Any], mode: Optional[str] = None) -> Metaobject:
    """Return a frozen copy of metaobject."""
    return Metaobject(
        dict(metaobject.items()),
        prototype=_prototype_of(metaobject),
        name=_name_of(metaobject),
    ).freeze(mode)
