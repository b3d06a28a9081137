"""
Policy combinators and mixin-with-policy.

A policy takes the implementation already on a receiver (fn1) and the one
arriving from a provider (fn2) and returns a single implementation. It
only decides how to sequence or select the two functions.
"""

from __future__ import annotations

from collections.abc import Mapping
from functools import partial
from typing import Any, Callable, Dict, Iterable, Optional, Union

from metaobjects.config import WILDCARD
from metaobjects.errors import ConfigurationError
from metaobjects.metaobject import (
    existing_implementation,
    function_names,
    implementation_of,
    install,
    normalize_names,
)
from metaobjects.observability import get_logger
from metaobjects.results import opinion_of, prefer, to_raw

logger = get_logger("policies")

Policy = Callable[[Callable, Callable], Callable]


def overwrite(fn1: Callable, fn2: Callable) -> Callable:
    return fn2


def discard(fn1: Callable, fn2: Callable) -> Callable:
    return fn1


def before(fn1: Callable, fn2: Callable) -> Callable:
    """Run fn1 then fn2; fn2's result wins unless it has no opinion."""

    def before_policy(self, *args, **kwargs):
        first = opinion_of(fn1(self, *args, **kwargs))
        second = opinion_of(fn2(self, *args, **kwargs))
        return to_raw(prefer(first, second))

    return before_policy


def after(fn1: Callable, fn2: Callable) -> Callable:
    """Run fn2 then fn1; fn2's result wins unless it has no opinion."""

    def after_policy(self, *args, **kwargs):
        second = opinion_of(fn2(self, *args, **kwargs))
        first = opinion_of(fn1(self, *args, **kwargs))
        return to_raw(prefer(first, second))

    return after_policy


def around(fn1: Callable, fn2: Callable) -> Callable:
    """Call fn1 with fn2, bound to the receiver, as its first argument."""

    def around_policy(self, *args, **kwargs):
        return fn1(self, partial(fn2, self), *args, **kwargs)

    return around_policy


POLICIES: Dict[str, Policy] = {
    "overwrite": overwrite,
    "discard": discard,
    "before": before,
    "after": after,
    "around": around,
}


def _entries(provider: Any) -> Dict[str, Any]:
    if isinstance(provider, Mapping):
        return dict(provider)
    return {name: implementation_of(provider, name) for name in function_names(provider)}


def extend(receiver: Any, *providers: Any) -> Any:
    """Copy every entry of each provider onto receiver verbatim."""
    for provider in providers:
        for name, value in _entries(provider).items():
            install(receiver, name, value)
    return receiver


def _resolve_assignment(
    policy_assignment: Optional[Mapping[str, Union[str, Iterable[str]]]]
) -> tuple[Dict[str, Policy], Policy]:
    by_method: Dict[str, Policy] = {}
    default: Policy = overwrite

    for policy_name, methods in (policy_assignment or {}).items():
        if policy_name not in POLICIES:
            raise ConfigurationError(
                f"Unknown policy '{policy_name}'. Known policies: {sorted(POLICIES)}"
            )
        names = normalize_names(methods)
        if not names:
            raise ConfigurationError(f"Policy '{policy_name}' is assigned to no methods")
        for method_name in names:
            if method_name == WILDCARD:
                default = POLICIES[policy_name]
                continue
            if method_name in by_method:
                raise ConfigurationError(f"Method '{method_name}' is assigned to more than one policy")
            by_method[method_name] = POLICIES[policy_name]

    return by_method, default


def mixin_with_policy(
    provider: Any,
    policy_assignment: Optional[Mapping[str, Union[str, Iterable[str]]]] = None,
) -> Callable[[Any], Any]:
    """
    Build a mixin that layers provider onto a receiver in place.

    policy_assignment maps a policy name to a method name or names; the
    name "*" sets the default for unlisted names. Without any assignment
    clashing names are overwritten.

    Returns:
        Function taking a receiver, mutating it and returning it
    """
    by_method, default = _resolve_assignment(policy_assignment)
    entries = _entries(provider)

    def mixin(receiver: Any) -> Any:
        for name, incoming in entries.items():
            existing = existing_implementation(receiver, name)
            if existing is None:
                install(receiver, name, incoming)
                continue
            if incoming is None:
                # A dependency the receiver already satisfies.
                continue
            if not (callable(existing) and callable(incoming)):
                install(receiver, name, incoming)
                continue
            policy = by_method.get(name, default)
            logger.debug(f"Applying policy '{policy.__name__}' to '{name}'")
            install(receiver, name, policy(existing, incoming))
        return receiver

    return mixin
