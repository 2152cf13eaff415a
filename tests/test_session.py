"""Tests for the TreePipeline chaining session."""

from dataclasses import replace

import pytest

from conftest import build_sample_tree
from semtreelib import TreePipeline
from semtreelib._common.config import Configuration, FormattingConfig
from semtreelib.core.node import XNodeType
from semtreelib.errors import BranchConflictError, ProcessingError, ValidationError
from semtreelib.pipeline.stages import BranchContext
from semtreelib.transforms import to_boolean, to_number


class TestSources:

    def test_from_xnode(self, sample_tree):
        pipeline = TreePipeline().from_xnode(sample_tree)
        assert pipeline.to_xnode() is sample_tree

    def test_from_xnode_rejects_other_values(self):
        with pytest.raises(ValidationError):
            TreePipeline().from_xnode({"type": "record"})

    def test_from_json(self):
        tree = TreePipeline().from_json({"a": 1}).to_xnode()
        assert tree.type is XNodeType.RECORD
        assert tree.children[0].value == 1

    def test_from_json_string(self):
        pipeline = TreePipeline().from_json_string('{"a": [1, 2]}')
        assert pipeline.to_json() == {"a": [1, 2]}

    def test_from_json_string_invalid(self):
        with pytest.raises(ProcessingError, match="Invalid JSON"):
            TreePipeline().from_json_string("{not json")

    def test_from_serialized(self, sample_tree):
        data = TreePipeline().from_xnode(sample_tree).to_serialized()
        assert TreePipeline().from_serialized(data).to_xnode() == sample_tree

    def test_new_source_clears_branch(self, sample_tree):
        pipeline = TreePipeline().from_xnode(sample_tree).branch(lambda n: n.name == "C")
        pipeline.from_xnode(build_sample_tree())
        assert pipeline.branch_context is None


class TestValidation:

    @pytest.mark.parametrize("method", ["filter", "map", "select", "branch"])
    def test_requires_callable(self, sample_tree, method):
        pipeline = TreePipeline().from_xnode(sample_tree)
        with pytest.raises(ValidationError, match="must be callable"):
            getattr(pipeline, method)("not callable")

    def test_reduce_requires_callable(self, sample_tree):
        with pytest.raises(ValidationError):
            TreePipeline().from_xnode(sample_tree).reduce(None, 0)

    @pytest.mark.parametrize("call", [
        lambda p: p.filter(lambda n: True),
        lambda p: p.map(lambda n: n),
        lambda p: p.select(lambda n: True),
        lambda p: p.branch(lambda n: True),
        lambda p: p.reduce(lambda acc, n: acc, 0),
        lambda p: p.to_xnode(),
        lambda p: p.to_json(),
        lambda p: p.to_json_string(),
        lambda p: p.to_serialized(),
        lambda p: p.count(),
    ])
    def test_requires_source(self, call):
        with pytest.raises(ValidationError, match="No source set"):
            call(TreePipeline())

    def test_invalid_initial_config(self):
        with pytest.raises(ValidationError):
            TreePipeline(Configuration(fragment_root=""))


class TestChaining:

    def test_filter_scenario(self, sample_tree):
        result = TreePipeline().from_xnode(sample_tree).filter(lambda n: n.name == "C").to_xnode()
        assert result.name == "results"
        assert [c.name for c in result.children] == ["B"]
        assert [c.name for c in result.children[0].children] == ["C"]

    def test_reduce_scenario(self, sample_tree):
        assert TreePipeline().from_xnode(sample_tree).reduce(lambda acc, n: acc + 1, 0) == 4

    def test_count(self, sample_tree):
        assert TreePipeline().from_xnode(sample_tree).count() == 4

    def test_methods_return_self(self, sample_tree):
        pipeline = TreePipeline().from_xnode(sample_tree)
        assert pipeline.map(lambda n: n) is pipeline
        assert pipeline.filter(lambda n: True) is pipeline
        assert pipeline.with_config({}) is pipeline
        assert pipeline.merge() is pipeline

    def test_select_then_json(self):
        result = (TreePipeline()
                  .from_json({"users": [{"name": "ann"}, {"name": "bob"}]})
                  .select(lambda n: n.name == "name")
                  .to_json())
        assert result == ["ann", "bob"]

    def test_stage_error_leaves_tree_unchanged(self, sample_tree):
        pipeline = TreePipeline().from_xnode(sample_tree)

        def _transform(node):
            raise RuntimeError("broken")

        with pytest.raises(RuntimeError):
            pipeline.map(_transform)
        assert pipeline.xnode is sample_tree

    def test_repr(self, sample_tree):
        assert "collection:root" in repr(TreePipeline().from_xnode(sample_tree))


class TestBranching:

    def test_scenario_branch_map_merge(self, sample_tree):
        def _set_c(node):
            return replace(node, value="Y") if node.name == "C" else node

        result = (TreePipeline()
                  .from_xnode(sample_tree)
                  .branch(lambda n: n.name == "C")
                  .map(_set_c)
                  .merge()
                  .to_xnode())

        expected = build_sample_tree()
        expected.children[1].children[0].value = "Y"
        assert result == expected

    def test_branch_context_state(self, sample_tree):
        pipeline = TreePipeline().from_xnode(sample_tree).branch(lambda n: n.name == "C")
        context = pipeline.branch_context
        assert isinstance(context, BranchContext)
        assert context.parent_node is sample_tree
        assert context.original_paths == [[1, 0]]
        assert [n.name for n in context.selected_nodes] == ["C"]
        assert pipeline.xnode.name == "results"

    def test_nested_branch_conflict(self, sample_tree):
        pipeline = TreePipeline().from_xnode(sample_tree).branch(lambda n: n.name == "C")
        with pytest.raises(BranchConflictError, match="merge"):
            pipeline.branch(lambda n: True)

    def test_merge_clears_branch(self, sample_tree):
        pipeline = TreePipeline().from_xnode(sample_tree).branch(lambda n: n.name == "C").merge()
        assert pipeline.branch_context is None
        assert pipeline.to_xnode() == build_sample_tree()
        pipeline.branch(lambda n: n.name == "A")

    def test_merge_without_branch_is_noop(self, sample_tree):
        pipeline = TreePipeline().from_xnode(sample_tree).merge()
        assert pipeline.xnode is sample_tree

    def test_branch_filter_merge_removes_matches(self, sample_tree):
        result = (TreePipeline()
                  .from_xnode(sample_tree)
                  .branch(lambda n: n.type is XNodeType.FIELD)
                  .filter(lambda n: False)
                  .merge()
                  .to_xnode())
        assert [c.name for c in result.children] == ["B"]
        assert result.children[0].children == []

    def test_branch_without_matches(self, sample_tree):
        result = (TreePipeline()
                  .from_xnode(sample_tree)
                  .branch(lambda n: False)
                  .merge()
                  .to_xnode())
        assert result is sample_tree

    def test_json_branch_conversion(self):
        result = (TreePipeline()
                  .from_json({"user": {"name": "ann", "age": "42", "active": "yes"}})
                  .branch(lambda n: n.name == "age")
                  .map(to_number())
                  .merge()
                  .branch(lambda n: n.name == "active")
                  .map(to_boolean())
                  .merge()
                  .to_json())
        assert result == {"user": {"name": "ann", "age": 42, "active": True}}


class TestSessionConfig:

    def test_fragment_root_override(self, sample_tree):
        result = (TreePipeline()
                  .with_config({"fragment_root": "hits"})
                  .from_xnode(sample_tree)
                  .select(lambda n: n.name == "A")
                  .to_xnode())
        assert result.name == "hits"

    def test_with_config_extension_section(self):
        pipeline = TreePipeline().with_config({"json": {"attribute_prefix": "_"}})
        assert pipeline.context.config.section("json")["attribute_prefix"] == "_"
        assert pipeline.context.config.section("json")["value_property"] == "#text"

    def test_invalid_update_is_rolled_back(self):
        pipeline = TreePipeline()
        with pytest.raises(ValidationError, match="fragment_root"):
            pipeline.with_config({"fragment_root": "  "})
        assert pipeline.context.config.fragment_root == "results"

    @pytest.mark.parametrize("updates", [
        {"formatting": {"indnt": 4}},
        {"formatting": 4},
        {"extensions": {"json": "compact"}},
    ])
    def test_malformed_update_leaves_config_unchanged(self, updates):
        pipeline = TreePipeline().with_config({"formatting": {"indent": 3}})
        with pytest.raises(ValidationError, match="Invalid configuration"):
            pipeline.with_config(updates)
        assert pipeline.context.config.formatting == FormattingConfig(indent=3)
        assert pipeline.context.config.section("json")["attribute_prefix"] == "@"

    def test_with_config_requires_mapping(self):
        with pytest.raises(ValidationError):
            TreePipeline().with_config(["indent", 4])

    def test_compact_json_string(self):
        pipeline = TreePipeline(Configuration(formatting=FormattingConfig(pretty=False)))
        text = pipeline.from_json({"a": [1, 2], "b": "é"}).to_json_string()
        assert text == '{"a":[1,2],"b":"é"}'

    def test_pretty_json_string(self):
        text = (TreePipeline()
                .with_config({"formatting": {"indent": 4}})
                .from_json({"a": 1})
                .to_json_string())
        assert text == '{\n    "a": 1\n}'
