"""
Forwarding and delegation.

All three primitives install wrapper methods on a receiver and return it.
They create no private state; they only route calls.

    forward          target fixed at attach time, runs with the target as self
    delegate         target fixed at attach time, runs with the receiver as self
    delegate_to_own  target read from receiver.<property> on every call,
                     runs with the receiver as self
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Iterable, List, Optional, Union

from metaobjects.errors import ConfigurationError, UnresolvedDependencyError
from metaobjects.metaobject import (
    Metaobject,
    Receiver,
    function_names,
    implementation_of,
    install,
    normalize_names,
)
from metaobjects.observability import get_logger

logger = get_logger("forwarding")

Methods = Optional[Union[str, Iterable[str]]]


def _method_names(target: Any, methods: Methods, description: str) -> List[str]:
    names = normalize_names(methods)
    if names is None:
        if target is None:
            raise ConfigurationError(f"Cannot infer methods: {description} is missing")
        names = function_names(target)
        if not names:
            raise ConfigurationError(f"Cannot infer methods: {description} has no methods")
    elif not names:
        raise ConfigurationError("Method list is empty")
    return names


def _call_on_target(target: Any, method_name: str, args, kwargs) -> Any:
    if isinstance(target, Mapping):
        return implementation_of(target, method_name)(target, *args, **kwargs)
    return getattr(target, method_name)(*args, **kwargs)


def forward(receiver: Any, metaobject: Any, methods: Methods = None) -> Any:
    """
    Forward calls from receiver to metaobject.

    The target runs with itself as self. A target that returns itself
    returns the receiver instead.
    """
    names = _method_names(metaobject, methods, "forwarding target")

    def make_forwarder(method_name: str) -> Callable:
        def forwarder(self, *args, **kwargs):
            result = _call_on_target(metaobject, method_name, args, kwargs)
            if result is metaobject:
                return self
            return result

        forwarder.__name__ = method_name
        return forwarder

    for method_name in names:
        install(receiver, method_name, make_forwarder(method_name))

    logger.debug(f"Forwarding {names} to {metaobject!r}")
    return receiver


def delegate(receiver: Any, metaobject: Any, methods: Methods = None) -> Any:
    """Delegate calls to metaobject's implementations, run against the receiver."""
    names = _method_names(metaobject, methods, "delegation target")

    def make_delegator(method_name: str) -> Callable:
        def delegator(self, *args, **kwargs):
            return implementation_of(metaobject, method_name)(self, *args, **kwargs)

        delegator.__name__ = method_name
        return delegator

    for method_name in names:
        install(receiver, method_name, make_delegator(method_name))

    logger.debug(f"Delegating {names} to {metaobject!r}")
    return receiver


def _own_property(receiver: Any, property_name: str) -> Any:
    if isinstance(receiver, Mapping):
        return receiver.get(property_name)
    return getattr(receiver, property_name, None)


def delegate_to_own(receiver: Any, property_name: str, methods: Methods = None) -> Any:
    """
    Delegate calls to whatever receiver.<property_name> holds at call time.

    Assigning a different object to the property changes behaviour on the
    next call without re-wiring anything.
    """
    state = _own_property(receiver, property_name)
    if state is None:
        raise ConfigurationError(f"Cannot delegate: property '{property_name}' is missing on {receiver!r}")
    names = _method_names(state, methods, f"property '{property_name}'")

    def make_delegator(method_name: str) -> Callable:
        def delegator(self, *args, **kwargs):
            metaobject = _own_property(self, property_name)
            if metaobject is None:
                raise UnresolvedDependencyError(f"Property '{property_name}' is not set on {self!r}")
            return implementation_of(metaobject, method_name)(self, *args, **kwargs)

        delegator.__name__ = method_name
        return delegator

    for method_name in names:
        install(receiver, method_name, make_delegator(method_name))

    logger.debug(f"Delegating {names} to own property '{property_name}'")
    return receiver


def proxy(base: Any, methods: Methods = None, prototype: Optional[Metaobject] = None) -> Receiver:
    """Return a new receiver that forwards to base."""
    return forward(Receiver(prototype), base, methods)
