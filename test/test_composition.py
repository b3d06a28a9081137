"""
Composition Algebra tests.

Covers the return-value negotiation law, execution order, non-mutation,
prototype compatibility and merge ambiguity.
"""

import pytest

from metaobjects import (
    AmbiguousMergeError,
    ConfigurationError,
    IncompatiblePrototypeError,
    MalformedDefinitionError,
    Metaobject,
    Receiver,
    UnresolvedDependencyError,
    compose_metaobjects,
    encapsulate,
    instantiate,
    order_protocol,
    prototype_seed,
)


def _returns(value):
    def method(self):
        return value

    return method


def _silent(self):
    return None


class TestReturnValueLaw:
    """The last meaningful result wins."""

    def test_no_value_then_value(self):
        """A later result wins over an earlier None."""
        composed = compose_metaobjects({"m": _silent}, {"m": _returns("V")})

        assert composed["m"](Receiver()) == "V"

    def test_value_then_no_value(self):
        """A later None does not erase an earlier result."""
        composed = compose_metaobjects({"m": _returns("V")}, {"m": _silent})

        assert composed["m"](Receiver()) == "V"

    def test_two_values_last_wins(self):
        """When both return values, the last one wins."""
        composed = compose_metaobjects({"m": _returns("V1")}, {"m": _returns("V2")})

        assert composed["m"](Receiver()) == "V2"

    def test_all_no_value(self):
        """None from every implementation composes to None."""
        composed = compose_metaobjects({"m": _silent}, {"m": _silent}, {"m": _silent})

        assert composed["m"](Receiver()) is None

    def test_falsy_value_is_an_opinion(self):
        """Zero is a result, not an absence of one."""
        composed = compose_metaobjects({"m": _returns(0)}, {"m": _silent})

        assert composed["m"](Receiver()) == 0


class TestExecutionOrder:
    """Side effects happen first to last regardless of which result wins."""

    def test_first_runs_before_second(self):
        """Implementations run in composition order."""
        log = []

        def first(self, item):
            log.append(("first", item))
            return "first"

        def second(self, item):
            assert log == [("first", item)]
            log.append(("second", item))

        composed = compose_metaobjects({"m": first}, {"m": second})

        assert composed["m"](Receiver(), "x") == "first"
        assert log == [("first", "x"), ("second", "x")]

    def test_same_receiver_and_arguments(self):
        """Every implementation gets the same receiver and arguments."""
        seen = []

        def record(self, *args, **kwargs):
            seen.append((self, args, kwargs))

        composed = compose_metaobjects({"m": record}, {"m": record})
        receiver = instantiate(composed)
        receiver.m(1, key="v")

        assert seen == [(receiver, (1,), {"key": "v"})] * 2


class TestNonMutation:
    """Inputs stay independently usable."""

    def test_inputs_unchanged(self):
        """Composing leaves every input metaobject as it was."""
        a_m = _returns("A")
        b_m = _returns("B")
        a = Metaobject({"m": a_m, "only_a": _silent})
        b = Metaobject({"m": b_m})

        composed = compose_metaobjects(a, b)

        assert composed is not a and composed is not b
        assert dict(a) == {"m": a_m, "only_a": _silent}
        assert dict(b) == {"m": b_m}
        assert instantiate(a).m() == "A"
        assert instantiate(b).m() == "B"
        assert instantiate(composed).m() == "B"

    def test_single_implementation_is_kept_unchanged(self):
        """A name defined once keeps its original function."""
        a = {"only": _returns("A"), "m": _silent}
        b = {"m": _silent}

        composed = compose_metaobjects(a, b)

        assert composed["only"] is a["only"]
        assert composed["m"] is not _silent

    def test_result_is_a_fresh_writable_metaobject(self):
        """The composition is a new, unfrozen metaobject."""
        composed = compose_metaobjects({"m": _silent})
        composed["extra"] = _silent

        assert isinstance(composed, Metaobject)
        assert not composed.frozen


class TestDependencies:
    """None marks a declared, unfulfilled dependency."""

    def test_all_none_stays_none(self):
        """A dependency nobody provides stays a dependency."""
        composed = compose_metaobjects({"notify": None}, {"notify": None})

        assert "notify" in composed
        assert composed["notify"] is None

    def test_provided_dependency_is_resolved(self):
        """A dependency is filled by another input's implementation."""
        notify = _returns("sent")

        composed = compose_metaobjects({"notify": None}, {"notify": notify}, {"notify": None})

        assert composed["notify"] is notify


class TestData:
    """Non-function values are carried or rejected, never guessed."""

    def test_single_data_value_is_carried(self):
        """Non-function values are carried into the result."""
        composed = compose_metaobjects({"limit": 10}, {"limit": None}, {"limit": 10})

        assert composed["limit"] == 10

    def test_conflicting_data_values(self):
        """Different data under one name is ambiguous."""
        with pytest.raises(AmbiguousMergeError, match="limit"):
            compose_metaobjects({"limit": 10}, {"limit": 20})

    def test_function_mixed_with_data(self):
        """A name cannot be a function in one input and data in another."""
        with pytest.raises(AmbiguousMergeError, match="function in some"):
            compose_metaobjects({"m": _silent}, {"m": "not a function"})


class TestPrototypes:
    """Prototypes must be the first prototype or descend from it."""

    def test_unrelated_prototypes_fail(self):
        """Unrelated prototypes cannot be composed."""
        a = Metaobject({"m": _silent}, prototype=Metaobject(name="Animal"))
        b = Metaobject({"m": _silent}, prototype=Metaobject(name="Vehicle"))

        with pytest.raises(IncompatiblePrototypeError, match="descendant"):
            compose_metaobjects(a, b)

    def test_ancestor_of_first_prototype_fails(self):
        """A later prototype that is an ancestor of the first one is rejected."""
        base = Metaobject(name="Base")
        child = Metaobject(prototype=base, name="Child")

        with pytest.raises(IncompatiblePrototypeError):
            compose_metaobjects(Metaobject(prototype=child), Metaobject(prototype=base))

    def test_failure_happens_before_merge_checks(self):
        """Prototype incompatibility is reported before merging names."""
        a = Metaobject({"m": _silent}, prototype=Metaobject())
        b = Metaobject({"m": 42}, prototype=Metaobject())

        with pytest.raises(IncompatiblePrototypeError):
            compose_metaobjects(a, b)

    def test_shared_prototype_is_the_seed(self):
        """Inputs sharing one prototype compose onto it."""
        base = Metaobject({"inherited": _returns("base")})
        a = Metaobject({"m": _silent}, prototype=base)
        b = Metaobject({"m": _silent}, prototype=base)

        composed = compose_metaobjects(a, b)

        assert composed.prototype is base
        assert instantiate(composed).inherited() == "base"

    def test_descendant_prototype_becomes_the_seed(self):
        """A descendant of the first prototype is the more specific seed."""
        base = Metaobject()
        child = Metaobject(prototype=base)
        a = Metaobject(prototype=base)
        b = Metaobject(prototype=child)

        assert prototype_seed([a, b]) is child

    def test_sibling_descendants_are_compatible(self):
        """Two siblings descending from the first prototype compose onto it."""
        base = Metaobject(name="Base")
        left = Metaobject(prototype=base, name="Left")
        right = Metaobject(prototype=base, name="Right")

        composed = compose_metaobjects(
            Metaobject(prototype=base),
            Metaobject(prototype=left),
            Metaobject(prototype=right),
        )

        assert composed.prototype is base

    def test_none_prototypes_are_compatible(self):
        """Inputs without a prototype do not constrain the seed."""
        base = Metaobject()
        composed = compose_metaobjects({"m": _silent}, Metaobject(prototype=base))

        assert composed.prototype is base

    def test_plain_mappings_have_no_prototype(self):
        """Plain mappings compose onto no prototype."""
        assert compose_metaobjects({"m": _silent}).prototype is None


class TestInputValidation:
    """Malformed calls are reported."""

    def test_nothing_to_compose(self):
        """Composition needs at least one metaobject."""
        with pytest.raises(ConfigurationError):
            compose_metaobjects()

    def test_none_inputs_are_skipped(self):
        """None inputs are ignored."""
        composed = compose_metaobjects(None, {"m": _returns("A")}, None)

        assert composed["m"](Receiver()) == "A"

    def test_only_none_inputs(self):
        """Only None inputs is the same as no inputs."""
        with pytest.raises(ConfigurationError):
            compose_metaobjects(None, None)

    def test_non_mapping_input(self):
        """Inputs must be mappings."""
        with pytest.raises(MalformedDefinitionError):
            compose_metaobjects({"m": _silent}, object())

    def test_custom_protocol(self):
        """A custom protocol replaces the order protocol."""
        first_wins = lambda implementations: implementations[0]

        composed = compose_metaobjects(
            {"m": _returns("A")},
            {"m": _returns("B")},
            protocol=first_wins,
        )

        assert composed["m"](Receiver()) == "A"

    def test_order_protocol_needs_implementations(self):
        """The order protocol rejects an empty list."""
        with pytest.raises(ConfigurationError):
            order_protocol([])


class TestEncapsulatedComposition:
    """Composing encapsulated metaobjects keeps each one's privacy."""

    def test_privacy_survives_composition(self, songwriter, subscribable):
        """Receivers of a composition keep separate private state."""
        composed = compose_metaobjects(songwriter, subscribable)
        first = instantiate(composed)
        second = instantiate(composed)

        first.add_song("a")
        second.add_song("b")

        assert first.songs() == ["a"]
        assert second.songs() == ["b"]

    def test_inputs_remain_usable(self, songwriter, subscribable):
        """Encapsulated inputs still work after being composed."""
        compose_metaobjects(songwriter, subscribable)

        assert instantiate(songwriter).add_song("solo").songs() == ["solo"]

    def test_composed_initialize_returns_receiver(self, songwriter, subscribable):
        """A composed initialize returns the receiver."""
        receiver = Receiver(compose_metaobjects(songwriter, subscribable))

        assert receiver.initialize() is receiver

    def test_add_song_with_notify_returns_receiver(self, songwriter, notifying, subscribable):
        """A composed fluent method still returns the receiver."""
        composed = compose_metaobjects(songwriter, notifying, subscribable)
        receiver = instantiate(composed)
        heard = []
        receiver.subscribe(heard.append)

        result = receiver.add_song("x")

        assert result is receiver
        assert receiver.songs() == ["x"]
        assert heard == [receiver]

    def test_dependency_provided_by_receiver(self, songwriter, notifying):
        """The receiver itself can satisfy a dependency."""
        composed = compose_metaobjects(songwriter, notifying)
        receiver = instantiate(composed)
        notified = []
        receiver.notify = lambda: notified.append(True)

        assert composed["notify"] is None
        assert receiver.add_song("x") is receiver
        assert notified == [True]

    def test_unprovided_dependency_fails_loudly(self, songwriter, notifying):
        """Calling an unsatisfied dependency raises."""
        receiver = instantiate(compose_metaobjects(songwriter, notifying))

        with pytest.raises(UnresolvedDependencyError, match="notify"):
            receiver.add_song("x")
