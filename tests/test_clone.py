"""Tests for the structural clone and canonical serializer."""

import pytest

from synctomic._clone import clone, serialize
from synctomic import CyclicValueError, UnserializableValueError


class TestClone:
    def test_scalars(self):
        for value in ("s", 1, 1.5, True, None):
            assert clone(value) == value

    def test_nested_copy_is_independent(self):
        original = {"a": [1, {"b": 2}], "c": (3, 4)}
        copy = clone(original)
        assert copy == original
        assert copy is not original
        copy["a"][1]["b"] = 99
        assert original["a"][1]["b"] == 2

    def test_tuples_stay_tuples(self):
        assert clone((1, [2])) == (1, [2])
        assert isinstance(clone((1, 2)), tuple)

    def test_shared_substructure_is_not_a_cycle(self):
        shared = [1, 2]
        copy = clone({"x": shared, "y": shared})
        assert copy == {"x": [1, 2], "y": [1, 2]}
        assert copy["x"] is not copy["y"]

    def test_rejects_cycles(self):
        loop = []
        loop.append(loop)
        with pytest.raises(CyclicValueError):
            clone(loop)

    def test_rejects_functions(self):
        with pytest.raises(UnserializableValueError):
            clone({"fn": lambda: None})

    def test_rejects_sets(self):
        with pytest.raises(UnserializableValueError):
            clone({1, 2})

    def test_rejects_non_scalar_keys(self):
        with pytest.raises(UnserializableValueError):
            clone({(1, 2): "pair"})

    def test_unserializable_is_a_type_error(self):
        with pytest.raises(TypeError):
            clone(object())


class TestSerialize:
    def test_key_order_does_not_matter(self):
        assert serialize({"a": 1, "b": 2}) == serialize({"b": 2, "a": 1})

    def test_distinguishes_values(self):
        assert serialize(["baz"]) != serialize(["baz", "quux"])
        assert serialize(None) != serialize("null")

    def test_mixed_key_types(self):
        assert serialize({1: "a", "b": 2}) == serialize({"b": 2, 1: "a"})

    def test_arbitrary_objects_from_projections(self):
        """Projection functions may return anything; serialize never raises."""
        assert isinstance(serialize({"s": {1, 2}}), str)

    def test_integer_and_string_keys_differ(self):
        assert serialize({1: "a"}) != serialize({"1": "a"})
        assert serialize({True: "a"}) != serialize({1: "a"})
        assert serialize({None: "a"}) != serialize({"null": "a"})
