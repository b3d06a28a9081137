"""
Return-value opinions.

A method either returns something meaningful or declines responsibility
for the return value by returning None. Merging is done over an explicit
sum type, Value(x) | NO_OPINION; None is converted at the boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Union


class NoOpinion(Enum):
    NO_OPINION = "no_opinion"

    def __bool__(self) -> bool:
        return False


NO_OPINION = NoOpinion.NO_OPINION


@dataclass(frozen=True)
class Value:
    """A method's claim on the return value."""

    value: Any


Opinion = Union[Value, NoOpinion]


def opinion_of(raw: Any) -> Opinion:
    """Lift a raw return value into an opinion."""
    if raw is None:
        return NO_OPINION
    return Value(raw)


def to_raw(opinion: Opinion) -> Any:
    """Lower an opinion back to what a Python caller receives."""
    if isinstance(opinion, Value):
        return opinion.value
    return None


def prefer(fallback: Opinion, preferred: Opinion) -> Opinion:
    """Return preferred unless it has no opinion."""
    if isinstance(preferred, Value):
        return preferred
    return fallback


def negotiate(opinions: Iterable[Opinion]) -> Opinion:
    """
    Apply the return-value negotiation law.

    Opinions are given in execution order. The last Value wins; if every
    entry is NO_OPINION the result is NO_OPINION.
    """
    outcome: Opinion = NO_OPINION
    for opinion in opinions:
        outcome = prefer(outcome, opinion)
    return outcome
