"""
Failure taxonomy and exception hierarchy.

Every failure surfaces synchronously to the caller that attached,
encapsulated or composed. Nothing here retries or recovers.
"""

from enum import Enum


class FailureType(Enum):
    """Categories of failure the runtime reports."""

    CONFIGURATION = (
        "Missing or empty method lists, or a missing target property, "
        "detected at attach time"
    )

    INCOMPATIBILITY = (
        "Composed metaobjects delegate to unrelated prototype ancestors"
    )

    AMBIGUOUS_MERGE = (
        "One method name resolves to a mix of functions and data "
        "across composed metaobjects"
    )

    IMMUTABILITY_VIOLATION = (
        "A method of a closed metaobject was replaced, added or deleted"
    )

    MALFORMED_DEFINITION = (
        "A behaviour definition holds a value that is neither a function "
        "nor a declared dependency"
    )

    UNRESOLVED_DEPENDENCY = (
        "A declared dependency was called before anything provided it"
    )


class MetaobjectError(RuntimeError):
    """Base class for all runtime errors raised by this package."""

    failure_type: FailureType = None


class ConfigurationError(MetaobjectError, ValueError):
    """Raised at attach time when routing cannot be set up as requested."""

    failure_type = FailureType.CONFIGURATION


class IncompatiblePrototypeError(MetaobjectError):
    """Raised by composition before anything is built."""

    failure_type = FailureType.INCOMPATIBILITY


class AmbiguousMergeError(MetaobjectError):
    """Raised when composition cannot decide how to merge one name."""

    failure_type = FailureType.AMBIGUOUS_MERGE


class ImmutabilityViolationError(MetaobjectError):
    """Raised on writes to a frozen metaobject in strict mode."""

    failure_type = FailureType.IMMUTABILITY_VIOLATION


class MalformedDefinitionError(MetaobjectError, TypeError):
    """Raised at construction time for unusable behaviour definitions."""

    failure_type = FailureType.MALFORMED_DEFINITION


class UnresolvedDependencyError(MetaobjectError, AttributeError):
    """Raised when a receiver looks up a dependency nobody provided."""

    failure_type = FailureType.UNRESOLVED_DEPENDENCY
