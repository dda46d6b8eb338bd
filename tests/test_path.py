"""Tests for DeepPath parsing and resolution."""

from synctomic import DeepPath


class TestParse:
    def test_segments(self):
        assert DeepPath.parse("foo.bar").segments == ("foo", "bar")

    def test_strips_segments(self):
        assert DeepPath.parse(" foo . bar ").segments == ("foo", "bar")

    def test_blank_is_whole_value(self):
        assert DeepPath.parse("").segments == ()
        assert DeepPath.parse("   ").segments == ()

    def test_equality_and_str(self):
        assert DeepPath.parse("a.b") == DeepPath(("a", "b"))
        assert str(DeepPath.parse("a.b")) == "a.b"
        assert "a.b" in repr(DeepPath.parse("a.b"))


class TestResolve:
    def test_whole_value(self):
        value = {"foo": 1}
        assert DeepPath.parse("")(value) == {"foo": 1}

    def test_nested_dict(self):
        assert DeepPath.parse("foo.bar")({"foo": {"bar": ["baz"]}}) == ["baz"]

    def test_missing_intermediate(self):
        assert DeepPath.parse("foo.nope.bar")({"foo": {}}) is None

    def test_none_intermediate(self):
        assert DeepPath.parse("foo.bar")({"foo": None}) is None

    def test_list_index(self):
        assert DeepPath.parse("items.1.name")({"items": [{"name": "a"}, {"name": "b"}]}) == "b"

    def test_list_index_out_of_range(self):
        assert DeepPath.parse("items.5")({"items": [1]}) is None

    def test_non_numeric_list_segment(self):
        assert DeepPath.parse("items.first")({"items": [1]}) is None

    def test_negative_index_not_supported(self):
        assert DeepPath.parse("items.-1")({"items": [1]}) is None

    def test_integer_dict_keys(self):
        assert DeepPath.parse("rows.3")({"rows": {3: "three"}}) == "three"

    def test_scalar_has_no_children(self):
        assert DeepPath.parse("foo.length")({"foo": "abc"}) is None
