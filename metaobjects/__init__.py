"""
metaobjects: composable, encapsulated behaviour units.

Objects are built from metaobjects (bundles of methods) rather than class
hierarchies. Behaviour is encapsulated per receiver, routed by forwarding
and delegation, layered by policies and merged by composition.
"""

from metaobjects.composition import compose_metaobjects, order_protocol, prototype_seed
from metaobjects.config import MetaobjectSettings, get_settings, reload_settings
from metaobjects.encapsulation import Context, EncapsulatedMetaobject, encapsulate
from metaobjects.errors import (
    AmbiguousMergeError,
    ConfigurationError,
    FailureType,
    ImmutabilityViolationError,
    IncompatiblePrototypeError,
    MalformedDefinitionError,
    MetaobjectError,
    UnresolvedDependencyError,
)
from metaobjects.forwarding import delegate, delegate_to_own, forward, proxy
from metaobjects.metaobject import Metaobject, Receiver, instantiate
from metaobjects.observability import get_logger, setup_logging
from metaobjects.policies import (
    POLICIES,
    after,
    around,
    before,
    discard,
    extend,
    mixin_with_policy,
    overwrite,
)
from metaobjects.results import NO_OPINION, Value, negotiate
from metaobjects.transforms import fluent_by_default, sealed

__version__ = "0.1.0"

__all__ = [
    # Metaobjects and receivers
    "Metaobject",
    "Receiver",
    "instantiate",
    # Encapsulation
    "encapsulate",
    "EncapsulatedMetaobject",
    "Context",
    # Forwarding and delegation
    "forward",
    "delegate",
    "delegate_to_own",
    "proxy",
    # Policies
    "POLICIES",
    "overwrite",
    "discard",
    "before",
    "after",
    "around",
    "extend",
    "mixin_with_policy",
    # Composition
    "compose_metaobjects",
    "order_protocol",
    "prototype_seed",
    # Transforms
    "fluent_by_default",
    "sealed",
    # Return values
    "Value",
    "NO_OPINION",
    "negotiate",
    # Errors
    "MetaobjectError",
    "ConfigurationError",
    "IncompatiblePrototypeError",
    "AmbiguousMergeError",
    "ImmutabilityViolationError",
    "MalformedDefinitionError",
    "UnresolvedDependencyError",
    "FailureType",
    # Ambient
    "MetaobjectSettings",
    "get_settings",
    "reload_settings",
    "setup_logging",
    "get_logger",
]
