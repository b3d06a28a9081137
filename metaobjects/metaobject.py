"""
Metaobjects and receivers.

A Metaobject is an ordered mapping from method name to implementation,
with an optional prototype it delegates to. Implementations are plain
functions whose first parameter is the receiver; None marks a declared
dependency that something else must provide.

A Receiver is the default object-creation mechanism: attribute lookups
that miss the receiver's own state go to its metaobject chain, and
functions found there are bound to the receiver.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from types import MethodType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional

from metaobjects.config import get_settings
from metaobjects.errors import (
    ConfigurationError,
    ImmutabilityViolationError,
    MalformedDefinitionError,
    UnresolvedDependencyError,
)
from metaobjects.observability import get_logger

logger = get_logger("metaobject")


class Metaobject(MutableMapping):
    """
    Named bundle of method implementations.

    The mapping protocol sees own keys only, in insertion order.
    lookup() also walks the prototype chain. The prototype is fixed at
    construction, so chains are finite and acyclic.
    """

    def __init__(
        self,
        methods: Optional[Mapping[str, Any]] = None,
        prototype: Optional[Metaobject] = None,
        name: Optional[str] = None,
    ):
        if prototype is not None and not isinstance(prototype, Metaobject):
            raise MalformedDefinitionError(
                f"prototype must be a Metaobject or None, got: {type(prototype).__name__}"
            )
        self._methods: Dict[str, Any] = dict(methods or {})
        self._prototype = prototype
        self._frozen = False
        self._immutability_mode = get_settings().immutability_mode
        self.name = name

    # ---- Prototype chain ----

    @property
    def prototype(self) -> Optional[Metaobject]:
        return self._prototype

    def ancestors(self) -> Iterator[Metaobject]:
        """Yield the prototype chain, nearest first."""
        current = self._prototype
        while current is not None:
            yield current
            current = current._prototype

    def is_descendant_of(self, other: Metaobject) -> bool:
        return any(ancestor is other for ancestor in self.ancestors())

    def lookup(self, name: str) -> Any:
        """Resolve name through own keys, then the prototype chain."""
        if name in self._methods:
            return self._methods[name]
        for ancestor in self.ancestors():
            if name in ancestor._methods:
                return ancestor._methods[name]
        raise KeyError(name)

    def responds_to(self, name: str) -> bool:
        try:
            return self.lookup(name) is not None
        except KeyError:
            return False

    # ---- Closing ----

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def immutability_mode(self) -> str:
        return self._immutability_mode

    def freeze(self, mode: Optional[str] = None) -> Metaobject:
        """
        Close this metaobject for modification and extension.

        In strict mode later writes raise ImmutabilityViolationError; in
        lenient mode they are ignored with a warning.
        """
        if mode is not None:
            if mode not in ("strict", "lenient"):
                raise ConfigurationError(f"immutability mode must be 'strict' or 'lenient', got: {mode}")
            self._immutability_mode = mode
        self._frozen = True
        return self

    def _writable(self, name: str, action: str) -> bool:
        if not self._frozen:
            return True
        message = f"Cannot {action} '{name}' on closed {self!r}"
        if self._immutability_mode == "strict":
            raise ImmutabilityViolationError(message)
        logger.warning(f"{message} (ignored)")
        return False

    # ---- Mapping protocol ----

    def __getitem__(self, name: str) -> Any:
        return self._methods[name]

    def __setitem__(self, name: str, value: Any) -> None:
        action = "replace" if name in self._methods else "add"
        if self._writable(name, action):
            self._methods[name] = value

    def __delitem__(self, name: str) -> None:
        if name not in self._methods:
            raise KeyError(name)
        if self._writable(name, "delete"):
            del self._methods[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._methods)

    def __len__(self) -> int:
        return len(self._methods)

    def __repr__(self) -> str:
        label = self.name or type(self).__name__
        return f"<{label} {list(self._methods)}>"

    # ---- Diagnostics ----

    def describe(self) -> Dict[str, str]:
        """Map each own name, in insertion order, to its kind."""
        return {name: kind_of(name, value) for name, value in self._methods.items()}


def kind_of(name: str, value: Any) -> str:
    """Classify one entry as dependency, private, public or data."""
    if value is None:
        return "dependency"
    if callable(value):
        if name.startswith(get_settings().private_prefix):
            return "private"
        return "public"
    return "data"


class Receiver:
    """An object whose behaviour comes from a metaobject."""

    def __init__(self, metaobject: Optional[Metaobject] = None):
        self._metaobject = metaobject

    def __getattr__(self, name: str) -> Any:
        metaobject = self.__dict__.get("_metaobject")
        if metaobject is None or name.startswith("__"):
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}")
        try:
            value = metaobject.lookup(name)
        except KeyError:
            raise AttributeError(f"{type(self).__name__!r} object has no attribute {name!r}") from None
        if value is None:
            raise UnresolvedDependencyError(f"'{name}' is a declared dependency that nothing provides")
        if callable(value):
            return MethodType(value, self)
        return value

    def __dir__(self) -> List[str]:
        names = set(super().__dir__())
        metaobject = self.__dict__.get("_metaobject")
        if metaobject is not None:
            for holder in (metaobject, *metaobject.ancestors()):
                names.update(holder)
        return sorted(names)

    def __repr__(self) -> str:
        return f"<Receiver of {self.__dict__.get('_metaobject')!r}>"


def instantiate(metaobject: Metaobject, *args, **kwargs) -> Receiver:
    """
    Create a receiver delegating to metaobject.

    When the chain defines initialize, it is called with the arguments.
    """
    receiver = Receiver(metaobject)
    if metaobject.responds_to("initialize"):
        receiver.initialize(*args, **kwargs)
    elif args or kwargs:
        raise ConfigurationError(f"{metaobject!r} has no initialize method to receive arguments")
    return receiver


# ---- Shared helpers for routing and mixing ----

def function_names(target: Any) -> List[str]:
    """Names of the function-valued keys of a mapping or public methods of an object."""
    if isinstance(target, Mapping):
        return [name for name, value in target.items() if callable(value)]
    return [
        name for name in dir(target)
        if not name.startswith("_") and callable(getattr(target, name, None))
    ]


def implementation_of(target: Any, name: str) -> Callable:
    """Return the receiver-first function behind name on target."""
    if isinstance(target, Metaobject):
        value = target.lookup(name)
    elif isinstance(target, Mapping):
        value = target[name]
    else:
        value = getattr(target, name)
        if isinstance(value, MethodType):
            value = value.__func__
    if not callable(value):
        raise MalformedDefinitionError(f"'{name}' on {target!r} is not a function")
    return value


def existing_implementation(receiver: Any, name: str) -> Any:
    """Whatever receiver currently holds under name, or None."""
    if isinstance(receiver, Metaobject):
        try:
            return receiver.lookup(name)
        except KeyError:
            return None
    if isinstance(receiver, Mapping):
        return receiver.get(name)
    value = getattr(receiver, name, None)
    if isinstance(value, MethodType):
        return value.__func__
    return value


def install(receiver: Any, name: str, implementation: Any) -> None:
    """Store implementation on receiver, binding it when receiver is a plain object."""
    if isinstance(receiver, MutableMapping):
        receiver[name] = implementation
    elif callable(implementation):
        setattr(receiver, name, MethodType(implementation, receiver))
    else:
        setattr(receiver, name, implementation)


def normalize_names(methods: Optional[Iterable[str]]) -> Optional[List[str]]:
    """Accept a single name or an iterable of names."""
    if methods is None:
        return None
    if isinstance(methods, str):
        return [methods]
    return list(methods)
