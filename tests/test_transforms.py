"""Tests for the value transforms used with map()."""

import re

import pytest

from semtreelib.core.node import add_attribute, add_child, create_field, create_record
from semtreelib.errors import ValidationError
from semtreelib.pipeline.stages import map_stage
from semtreelib.transforms import apply_to_primitives, compose, regex, to_boolean, to_number


def field_with_attr(value, attr_value):
    node = create_field("f", value)
    add_attribute(node, "a", attr_value)
    return node


class TestApplyToPrimitives:

    def test_input_not_mutated(self):
        node = field_with_attr("1", "2")
        result = apply_to_primitives(node, lambda v: v + "!")
        assert (result.value, result.attributes[0].value) == ("1!", "2!")
        assert (node.value, node.attributes[0].value) == ("1", "2")
        assert result.attributes is not node.attributes

    def test_none_means_unchanged(self):
        node = field_with_attr("keep", "keep")
        result = apply_to_primitives(node, lambda v: None)
        assert result == node
        assert result is not node

    def test_children_list_is_shared(self):
        record = create_record("r")
        add_child(record, create_field("c", "1"))
        assert apply_to_primitives(record, lambda v: v).children is record.children

    def test_flags(self):
        node = field_with_attr("x", "y")
        only_value = apply_to_primitives(node, str.upper, transform_attributes=False)
        only_attrs = apply_to_primitives(node, str.upper, transform_value=False)
        assert (only_value.value, only_value.attributes[0].value) == ("X", "y")
        assert (only_attrs.value, only_attrs.attributes[0].value) == ("x", "Y")


class TestToNumber:

    @pytest.mark.parametrize("text,expected", [
        ("42", 42),
        ("-7", -7),
        ("3.14", 3.14),
        (".5", 0.5),
        ("1,234", 1234),
        ("1,234.5", 1234.5),
        ("1e3", 1000.0),
        ("-2.5E-2", -0.025),
        ("  12  ", 12),
    ])
    def test_converts(self, text, expected):
        result = to_number()(create_field("n", text))
        assert result.value == expected
        assert type(result.value) is type(expected)

    @pytest.mark.parametrize("text", ["abc", "", "12abc", "1,23", "1.2.3", "0x10", "nan"])
    def test_leaves_non_numbers(self, text):
        assert to_number()(create_field("n", text)).value == text

    def test_booleans_untouched(self):
        assert to_number()(create_field("b", True)).value is True

    def test_precision(self):
        transform = to_number(precision=2)
        assert transform(create_field("n", "3.14159")).value == 3.14
        assert transform(create_field("n", 2.71828)).value == 2.72
        assert transform(create_field("n", 5)).value == 5

    def test_custom_separators(self):
        transform = to_number(decimal_separator=",", thousands_separator=".")
        assert transform(create_field("n", "1.234,5")).value == 1234.5
        assert transform(create_field("n", "3,25")).value == 3.25

    def test_disabled_kinds(self):
        assert to_number(integers=False)(create_field("n", "42")).value == "42"
        assert to_number(decimals=False)(create_field("n", "4.2")).value == "4.2"
        assert to_number(scientific=False)(create_field("n", "1e3")).value == "1e3"
        no_groups = to_number(thousands_separator="")
        assert no_groups(create_field("n", "1,234")).value == "1,234"

    def test_attributes(self):
        result = to_number(transform_value=False)(field_with_attr("1", "2"))
        assert result.value == "1"
        assert result.attributes[0].value == 2


class TestToBoolean:

    @pytest.mark.parametrize("text,expected", [
        ("true", True), ("YES", True), (" on ", True), ("1", True),
        ("False", False), ("no", False), ("off", False), ("0", False),
    ])
    def test_converts(self, text, expected):
        assert to_boolean()(create_field("b", text)).value is expected

    @pytest.mark.parametrize("value", ["maybe", "", 1, 0.0])
    def test_leaves_other_values(self, value):
        assert to_boolean()(create_field("b", value)).value == value

    def test_booleans_pass_through(self):
        assert to_boolean()(create_field("b", False)).value is False

    def test_custom_values(self):
        transform = to_boolean(true_values=["Y"], false_values=["N"])
        assert transform(create_field("b", "y")).value is True
        assert transform(create_field("b", "n")).value is False
        assert transform(create_field("b", "yes")).value == "yes"

    def test_attributes_only(self):
        result = to_boolean(transform_value=False)(field_with_attr("yes", "no"))
        assert result.value == "yes"
        assert result.attributes[0].value is False


class TestRegex:

    def test_literal_string_replaces_all(self):
        transform = regex("a.b", "-")
        assert transform(create_field("s", "a.b a.b axb")).value == "- - axb"

    def test_pattern_literal_without_g_replaces_first(self):
        assert regex(r"/\d+/", "#")(create_field("s", "1 and 22")).value == "# and 22"

    def test_pattern_literal_with_g_replaces_all(self):
        assert regex(r"/\d+/g", "#")(create_field("s", "1 and 22")).value == "# and #"

    def test_flags(self):
        assert regex("/hello/gi", "bye")(create_field("s", "Hello HELLO")).value == "bye bye"

    def test_groups_in_replacement(self):
        transform = regex(r"/(\w+)@(\w+)/g", r"\2 at \1")
        assert transform(create_field("s", "ann@home")).value == "home at ann"

    def test_compiled_pattern(self):
        transform = regex(re.compile(r"\s+"), " ")
        assert transform(create_field("s", "a   b\t\tc")).value == "a b c"

    def test_non_strings_untouched(self):
        assert regex("1", "2")(create_field("n", 1)).value == 1

    def test_attributes(self):
        result = regex("/-/g", "", transform_value=False)(field_with_attr("a-b", "c-d"))
        assert result.value == "a-b"
        assert result.attributes[0].value == "cd"

    def test_invalid_pattern(self):
        with pytest.raises(ValidationError, match="Invalid regex pattern"):
            regex("/(unclosed/", "")

    @pytest.mark.parametrize("pattern, text, expected", [
        ("/usr/bin", "/usr/bin/python", "/opt/bin/python"),
        ("/a/q", "x/a/q/a/q", "x/opt/bin/opt/bin"),
    ])
    def test_unknown_suffix_is_literal_text(self, pattern, text, expected):
        assert regex(pattern, "/opt/bin")(create_field("path", text)).value == expected

    def test_invalid_pattern_type(self):
        with pytest.raises(ValidationError, match="compiled pattern or string"):
            regex(42, "")


class TestCompose:

    def test_identity(self):
        node = create_field("f", "1")
        assert compose()(node) is node

    def test_single(self):
        transform = to_number()
        assert compose(transform) is transform

    def test_left_to_right(self):
        transform = compose(regex("/,/g", ""), to_number(precision=1))
        assert transform(create_field("n", "1,234.56")).value == 1234.6
        reversed_order = compose(to_number(), regex("/4/g", "x"))
        assert reversed_order(create_field("n", "1,234")).value == 1234

    def test_errors_propagate(self):
        def _broken(node):
            raise RuntimeError("no")

        with pytest.raises(RuntimeError):
            compose(to_number(), _broken)(create_field("n", "1"))


class TestWithMap:

    def test_map_converts_whole_tree(self):
        record = create_record("order")
        add_attribute(record, "total", "12.50")
        add_child(record, create_field("qty", "3"))
        add_child(record, create_field("paid", "yes"))

        result = map_stage(record, compose(to_number(), to_boolean()))

        assert result.attributes[0].value == 12.5
        assert [c.value for c in result.children] == [3, True]
        assert [c.value for c in record.children] == ["3", "yes"]
        assert result.children[0].parent is result
