"""
Encapsulation Engine.

encapsulate() turns a behaviour definition into a closed metaobject whose
public methods run against a private, per-receiver Context instead of the
receiver itself.

Rules:
    - Names with the private prefix are private: they live only on Contexts
    - Every other function is public and gets a wrapper on the metaobject
    - None values are declared dependencies, carried through as None
    - A method returning its Context returns the receiver to the caller
    - The result is frozen: strict mode raises on writes, lenient ignores them
"""

from __future__ import annotations

import itertools
import threading
import weakref
from collections.abc import Mapping
from types import MappingProxyType, MethodType
from typing import Any, Callable, Dict, Optional

from metaobjects.config import get_settings
from metaobjects.errors import ConfigurationError, MalformedDefinitionError
from metaobjects.metaobject import Metaobject
from metaobjects.observability import get_logger

logger = get_logger("encapsulation")

_encapsulation_numbers = itertools.count(1)


class Context:
    """
    Private storage for one receiver of one encapsulated metaobject.

    Private methods are bound to the context. Public methods of the
    receiver, including provided dependencies, are reachable through it;
    the receiver's own state is not. `self` is the read-only
    back-reference to the receiver.
    """

    def __init__(self, receiver: Any, private_methods: Mapping[str, Callable], private_prefix: str):
        self.__receiver = weakref.ref(receiver)
        self.__private_methods = private_methods
        self.__private_prefix = private_prefix

    @property
    def self(self) -> Any:
        return self.__receiver()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        private_methods = self.__private_methods
        if name in private_methods:
            return MethodType(private_methods[name], self)
        if name.startswith(self.__private_prefix):
            raise AttributeError(f"Context has no private member {name!r}")
        value = getattr(self.self, name)
        if not callable(value):
            raise AttributeError(f"{name!r} is receiver state and is not reachable from a context")
        return value

    def __repr__(self) -> str:
        return f"<Context of {self.self!r}>"


class EncapsulatedMetaobject(Metaobject):
    """Closed metaobject whose public methods share per-receiver Contexts."""

    def __init__(self, definition: Mapping[str, Any], mode: Optional[str] = None, name: Optional[str] = None):
        super().__init__(name=name)
        settings = get_settings()
        self.safekeeping_key = f"encapsulation-{next(_encapsulation_numbers)}"
        self._private_prefix = settings.private_prefix
        self._contexts: Dict[int, Context] = {}
        self._lock = threading.Lock()

        private: Dict[str, Callable] = {}
        for method_name, body in definition.items():
            if body is None:
                self._methods[method_name] = None
            elif not callable(body):
                raise MalformedDefinitionError(
                    f"'{method_name}' must be a function or None, got: {type(body).__name__}"
                )
            elif method_name.startswith(self._private_prefix):
                private[method_name] = body
            else:
                self._methods[method_name] = self._wrap(method_name, body)

        self._private_methods = MappingProxyType(private)
        self.freeze(mode or settings.immutability_mode)

        logger.debug(
            f"Encapsulated {self.safekeeping_key}: public/dependencies={list(self._methods)} "
            f"private={list(private)}"
        )

    @property
    def private_names(self):
        return tuple(self._private_methods)

    @property
    def contexts_created(self) -> int:
        return len(self._contexts)

    def _context_for(self, receiver: Any) -> Context:
        """Return receiver's Context, creating and attaching it on first use."""
        key = id(receiver)
        context = self._contexts.get(key)
        if context is not None:
            return context

        with self._lock:
            context = self._contexts.get(key)
            if context is None:
                try:
                    finalizer = weakref.finalize(receiver, self._contexts.pop, key, None)
                except TypeError:
                    raise ConfigurationError(
                        f"{type(receiver).__name__} objects cannot hold encapsulated state: "
                        "receivers must support weak references"
                    ) from None
                finalizer.atexit = False
                context = Context(receiver, self._private_methods, self._private_prefix)
                self._contexts[key] = context
                logger.debug(f"Created context for {type(receiver).__name__} in {self.safekeeping_key}")
        return context

    def _wrap(self, method_name: str, body: Callable) -> Callable:
        def encapsulated_method(receiver, *args, **kwargs):
            context = self._context_for(receiver)
            result = body(context, *args, **kwargs)
            if result is context:
                return receiver
            return result

        encapsulated_method.__name__ = method_name
        encapsulated_method.__qualname__ = f"{self.safekeeping_key}.{method_name}"
        encapsulated_method.__doc__ = body.__doc__
        return encapsulated_method


def _definition_entries(definition: Any) -> Dict[str, Any]:
    if isinstance(definition, Mapping):
        return dict(definition)
    if isinstance(definition, type):
        return {
            name: value for name, value in vars(definition).items()
            if not (name.startswith("__") and name.endswith("__"))
        }
    raise MalformedDefinitionError(
        f"Behaviour definition must be a mapping or a class, got: {type(definition).__name__}"
    )


def encapsulate(definition: Any, *, mode: Optional[str] = None, name: Optional[str] = None) -> EncapsulatedMetaobject:
    """
    Encapsulate a behaviour definition.

    Args:
        definition: Mapping of names to functions or None, or a class whose
            namespace is used as that mapping
        mode: "strict" or "lenient"; defaults to the configured mode
        name: Optional label used in diagnostics

    Returns:
        Frozen EncapsulatedMetaobject
    """
    if name is None and isinstance(definition, type):
        name = definition.__name__
    return EncapsulatedMetaobject(_definition_entries(definition), mode=mode, name=name)
