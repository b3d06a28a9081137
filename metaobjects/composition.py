"""
Composition Algebra.

compose_metaobjects() merges N metaobjects into a new one without touching
its inputs. Same-named implementations are merged by a protocol; the
default, order_protocol, runs every implementation first to last and
returns the last meaningful result.

Composition is all-or-nothing: prototype and merge conflicts are reported
before the result is constructed.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from metaobjects.errors import (
    AmbiguousMergeError,
    ConfigurationError,
    IncompatiblePrototypeError,
    MalformedDefinitionError,
)
from metaobjects.metaobject import Metaobject
from metaobjects.observability import get_logger
from metaobjects.results import negotiate, opinion_of, to_raw

logger = get_logger("composition")

Protocol = Callable[[Sequence[Callable]], Callable]


def order_protocol(implementations: Sequence[Callable]) -> Callable:
    """
    Merge implementations of one name into a single implementation.

    Every call runs all implementations in order with the same receiver
    and arguments, then returns the last result that is not None (or None
    when none of them returned anything).
    """
    if not implementations:
        raise ConfigurationError("order_protocol needs at least one implementation")
    if len(implementations) == 1:
        return implementations[0]

    ordered = tuple(implementations)

    def composed_method(self, *args, **kwargs):
        opinions = [opinion_of(implementation(self, *args, **kwargs)) for implementation in ordered]
        return to_raw(negotiate(opinions))

    composed_method.__name__ = getattr(ordered[0], "__name__", "composed_method")
    return composed_method


def _prototype_of(metaobject: Mapping) -> Optional[Metaobject]:
    if isinstance(metaobject, Metaobject):
        return metaobject.prototype
    return None


def prototype_seed(metaobjects: Iterable[Mapping]) -> Optional[Metaobject]:
    """
    Compute the prototype a composition of metaobjects should delegate to.

    The reference is the prototype of the first metaobject that has one.
    Every other non-None prototype must be the reference or a descendant
    of it. The seed is the most specific of them when they all lie on one
    chain, and the reference otherwise.
    """
    reference: Optional[Metaobject] = None
    descendants: List[Metaobject] = []
    for metaobject in metaobjects:
        ancestor = _prototype_of(metaobject)
        if ancestor is None:
            continue
        if reference is None:
            reference = ancestor
        elif ancestor is reference:
            continue
        elif ancestor.is_descendant_of(reference):
            descendants.append(ancestor)
        else:
            raise IncompatiblePrototypeError(
                f"Cannot compose {metaobject!r}: its prototype {ancestor!r} "
                f"is not {reference!r} or a descendant of it"
            )

    seed = reference
    for candidate in descendants:
        if candidate is seed or candidate.is_descendant_of(seed):
            seed = candidate
        elif not seed.is_descendant_of(candidate):
            return reference
    return seed


def _group(metaobjects: Iterable[Mapping]) -> Dict[str, List[Any]]:
    grouped: Dict[str, List[Any]] = {}
    for metaobject in metaobjects:
        for name, value in metaobject.items():
            grouped.setdefault(name, []).append(value)
    return grouped


def _resolve(name: str, values: List[Any], protocol: Protocol) -> Any:
    provided = [value for value in values if value is not None]
    if not provided:
        return None

    functions = [value for value in provided if callable(value)]
    data = [value for value in provided if not callable(value)]
    if functions and data:
        raise AmbiguousMergeError(
            f"'{name}' is a function in some metaobjects and data in others"
        )
    if data:
        first = data[0]
        if any(value is not first and value != first for value in data[1:]):
            raise AmbiguousMergeError(f"'{name}' holds conflicting data values: {data}")
        return first
    return protocol(functions)


def compose_metaobjects(
    *metaobjects: Optional[Mapping],
    protocol: Protocol = order_protocol,
    name: Optional[str] = None,
) -> Metaobject:
    """
    Compose metaobjects into a new metaobject.

    Args:
        metaobjects: Metaobjects or plain mappings, in composition order.
            None entries are skipped.
        protocol: n-ary merge applied to the implementations of each name
        name: Optional label for diagnostics

    Returns:
        New, unfrozen Metaobject delegating to the computed prototype seed

    Raises:
        ConfigurationError: nothing to compose
        IncompatiblePrototypeError: a prototype is neither the first prototype
            nor a descendant of it
        AmbiguousMergeError: a name mixes functions and data
    """
    inputs = [metaobject for metaobject in metaobjects if metaobject is not None]
    if not inputs:
        raise ConfigurationError("compose_metaobjects needs at least one metaobject")
    for metaobject in inputs:
        if not isinstance(metaobject, Mapping):
            raise MalformedDefinitionError(
                f"Can only compose mappings of methods, got: {type(metaobject).__name__}"
            )

    seed = prototype_seed(inputs)
    grouped = _group(inputs)
    resolved = {method_name: _resolve(method_name, values, protocol) for method_name, values in grouped.items()}

    composed = Metaobject(resolved, prototype=seed, name=name)
    logger.debug(f"Composed {len(inputs)} metaobjects into {composed!r}")
    return composed
