"""Tests for configuration and the pipeline context."""

import logging
import unittest

import pytest

from semtreelib._common import config as config_module
from semtreelib._common.config import (
    Configuration,
    FormattingConfig,
    create_config,
    deep_merge,
    get_global_defaults,
    merge_global_defaults,
    normalize_overrides,
    reset_global_defaults,
    validate_config,
)
from semtreelib.context import PipelineContext
from semtreelib.core.node import create_field
from semtreelib.errors import ValidationError


class TestConfiguration(unittest.TestCase):

    def test_defaults(self):
        config = Configuration()
        self.assertTrue(config.preserve_comments)
        self.assertTrue(config.preserve_instructions)
        self.assertFalse(config.preserve_whitespace)
        self.assertEqual(config.formatting, FormattingConfig(indent=2, pretty=True))
        self.assertEqual(config.fragment_root, "results")
        self.assertEqual(config.extensions, {})
        self.assertEqual(config.validate(), [])

    def test_validate_collects_every_problem(self):
        config = Configuration(preserve_comments="yes",
                               formatting=FormattingConfig(indent=-1, pretty=1),
                               fragment_root=" ")
        errors = config.validate()
        self.assertEqual(len(errors), 4)
        self.assertIn("preserve_comments must be a boolean", errors)
        self.assertIn("formatting.indent cannot be negative", errors)

    def test_indent_must_be_int(self):
        errors = Configuration(formatting=FormattingConfig(indent=True)).validate()
        self.assertEqual(errors, ["formatting.indent must be an integer"])

    def test_extension_sections_must_be_dicts(self):
        errors = Configuration(extensions={"json": ["bad"]}).validate()
        self.assertEqual(errors, ["extensions['json'] must be a dict"])

    def test_validate_config_raises_with_all_messages(self):
        with self.assertRaises(ValidationError) as ctx:
            validate_config(Configuration(fragment_root="", preserve_whitespace=None))
        self.assertIn("Invalid configuration: ", str(ctx.exception))
        self.assertIn("; ", str(ctx.exception))
        self.assertEqual(len(ctx.exception.details), 2)

    def test_validate_config_returns_config(self):
        config = Configuration()
        self.assertIs(validate_config(config), config)

    def test_section(self):
        config = Configuration(extensions={"json": {"attribute_prefix": "$"}})
        self.assertEqual(config.section("json"), {"attribute_prefix": "$"})
        self.assertEqual(config.section("yaml"), {})

    def test_from_dict_round_trip(self):
        config = Configuration(fragment_root="hits", extensions={"x": {"a": 1}})
        self.assertEqual(Configuration.from_dict(config.to_dict()), config)

    def test_from_dict_unknown_keys_become_extensions(self):
        config = Configuration.from_dict({"yaml": {"flow": True}, "pretty": False})
        self.assertEqual(config.extensions, {"yaml": {"flow": True}, "pretty": False})

    def test_from_dict_rejects_unknown_formatting_setting(self):
        with self.assertRaises(ValidationError) as ctx:
            Configuration.from_dict({"formatting": {"indnt": 4}})
        self.assertIn("indnt", str(ctx.exception))
        self.assertIn("Choose from: indent, pretty", str(ctx.exception))

    def test_from_dict_rejects_malformed_sections(self):
        for data in ({"formatting": [2]},
                     {"extensions": "json"},
                     {"extensions": {"json": ["@"]}}):
            with self.subTest(data=data):
                with self.assertRaises(ValidationError):
                    Configuration.from_dict(data)


class TestMerging:

    def test_deep_merge(self):
        base = {"a": {"b": 1, "c": 2}, "d": [1]}
        merged = deep_merge(base, {"a": {"c": 3}, "d": [2], "e": 4})
        assert merged == {"a": {"b": 1, "c": 3}, "d": [2], "e": 4}
        assert base == {"a": {"b": 1, "c": 2}, "d": [1]}

    def test_deep_merge_replaces_non_dicts(self):
        assert deep_merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_normalize_overrides(self):
        normalized = normalize_overrides({
            "fragment_root": "hits",
            "json": {"attribute_prefix": "$"},
            "extensions": {"xnode": {"max_depth": 5}},
            "formatting": FormattingConfig(indent=0),
        })
        assert normalized == {
            "fragment_root": "hits",
            "formatting": {"indent": 0, "pretty": True},
            "extensions": {"json": {"attribute_prefix": "$"}, "xnode": {"max_depth": 5}},
        }

    def test_normalize_does_not_touch_input(self):
        extensions = {"xnode": {}}
        normalize_overrides({"extensions": extensions, "json": {}})
        assert extensions == {"xnode": {}}


class TestGlobalDefaults:

    def test_adapter_sections_are_registered_on_import(self):
        defaults = get_global_defaults()
        assert defaults["extensions"]["json"]["attribute_prefix"] == "@"
        assert defaults["extensions"]["xnode"]["max_depth"] == 1000

    def test_merge_global_defaults_is_shallow_per_section(self):
        merge_global_defaults({"custom": {"a": 1, "b": 2}})
        merge_global_defaults({"custom": {"b": 3}})
        assert get_global_defaults()["extensions"]["custom"] == {"a": 1, "b": 3}

    def test_get_global_defaults_returns_copy(self):
        get_global_defaults()["extensions"]["json"]["attribute_prefix"] = "!"
        assert get_global_defaults()["extensions"]["json"]["attribute_prefix"] == "@"

    def test_reset_global_defaults(self):
        merge_global_defaults({"custom": {"a": 1}})
        reset_global_defaults()
        assert get_global_defaults() == Configuration().to_dict()

    def test_merge_logs_registration(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="semtreelib"):
            merge_global_defaults({"custom": {}})
        assert "Registered default settings for section 'custom'" in caplog.text

    def test_create_config(self):
        config = create_config({"fragment_root": "matches",
                                "formatting": {"indent": 4},
                                "json": {"array_strategy": "always"}})
        assert config.fragment_root == "matches"
        assert config.formatting == FormattingConfig(indent=4, pretty=True)
        assert config.section("json")["array_strategy"] == "always"
        assert config.section("json")["attribute_prefix"] == "@"

    def test_create_config_returns_independent_instances(self):
        first = create_config()
        first.section("json")["attribute_prefix"] = "!"
        assert create_config().section("json")["attribute_prefix"] == "@"
        assert "attribute_prefix" in config_module._global_defaults["extensions"]["json"]


class TestPipelineContext:

    def test_default_config_and_logger(self):
        context = PipelineContext()
        assert isinstance(context.config, Configuration)
        assert context.logger.name == "semtreelib.pipeline"
        assert context.metadata == {}

    def test_explicit_config_and_logger(self):
        config = Configuration(fragment_root="x")
        logger = logging.getLogger("semtreelib.test")
        context = PipelineContext(config, logger)
        assert context.config is config
        assert context.logger is logger

    def test_clone_node(self):
        node = create_field("f", 1)
        clone = PipelineContext().clone_node(node)
        assert clone == node
        assert clone is not node

    def test_validate_input(self, caplog):
        context = PipelineContext()
        context.validate_input(True, "fine")
        with caplog.at_level(logging.ERROR, logger="semtreelib"):
            with pytest.raises(ValidationError, match="must be positive"):
                context.validate_input(False, "must be positive")
        assert "Validation failed: must be positive" in caplog.text

    def test_merge_config(self, caplog):
        context = PipelineContext()
        with caplog.at_level(logging.DEBUG, logger="semtreelib"):
            context.merge_config({"formatting": {"pretty": False}, "json": {"force_arrays": ["tag"]}})
        assert context.config.formatting == FormattingConfig(indent=2, pretty=False)
        assert context.config.section("json")["force_arrays"] == ["tag"]
        assert context.config.section("json")["value_property"] == "#text"
        assert "Configuration updated" in caplog.text

    def test_metadata(self):
        context = PipelineContext()
        context.set_metadata("json", "is_array", True)
        context.set_metadata("json", "original_type", "list")

        assert context.get_metadata("json", "is_array") is True
        assert context.get_metadata("json") == {"is_array": True, "original_type": "list"}
        assert context.get_metadata("json", "missing") is None
        assert context.get_metadata("yaml") == {}

        assert context.has_metadata("json")
        assert context.has_metadata("json", "is_array")
        assert not context.has_metadata("json", "missing")
        assert not context.has_metadata("yaml")

    def test_clear_metadata(self):
        context = PipelineContext()
        context.set_metadata("json", "a", 1)
        context.set_metadata("json", "b", 2)

        context.clear_metadata("json", "a")
        assert context.get_metadata("json") == {"b": 2}
        context.clear_metadata("json")
        assert not context.has_metadata("json")
        context.clear_metadata("never-set", "a")

    def test_log_helpers(self, caplog):
        context = PipelineContext()
        with caplog.at_level(logging.DEBUG, logger="semtreelib"):
            context.log_operation("filter", nodes=3)
            context.log_operation("map")
            context.log_error("merge", ValueError("broken"))
        messages = [r.getMessage() for r in caplog.records]
        assert "Operation: filter {'nodes': 3}" in messages
        assert "Operation: map" in messages
        assert "Error in merge: broken" in messages
