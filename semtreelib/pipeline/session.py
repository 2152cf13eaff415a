"""Chaining session for SemTreeLib pipelines.

TreePipeline holds the working tree, the active branch (if any) and a
PipelineContext. Source methods load a tree, transformation methods
replace the working tree and return the session for chaining, and
terminal methods return a value.

Example:
    >>> result = (TreePipeline()
    ...           .from_json({"users": [{"name": "a", "active": "yes"}]})
    ...           .branch(lambda n: n.name == "active")
    ...           .map(to_boolean())
    ...           .merge()
    ...           .to_json())
"""

from typing import Any, Dict, Mapping, Optional

from .._common.config import Configuration, validate_config
from ..adapters.base import AdapterExecutor
from ..adapters.json import JsonToXNodeAdapter, XNodeToJsonAdapter, from_json_string, to_json_string
from ..adapters.xml import from_xml_string, to_xml_string
from ..adapters.xnode import SerializedToXNodeAdapter, XNodeToSerializedAdapter
from ..context import PipelineContext
from ..core.node import XNode
from ..errors import BranchConflictError, ValidationError
from .stages import (
    BRANCH,
    FILTER,
    MAP,
    MERGE,
    REDUCE,
    SELECT,
    BranchContext,
    Predicate,
    Reducer,
    Transform,
    execute_stage,
)


class TreePipeline:
    """Fluent session over one working tree.

    Attributes:
        xnode: Current working tree (None until a source is loaded)
        branch_context: Active BranchContext, or None outside a branch
        context: PipelineContext with configuration, logger and metadata
    """

    def __init__(self, config: Optional[Configuration] = None):
        if config is not None:
            validate_config(config)
        self.context = PipelineContext(config)
        self.xnode: Optional[XNode] = None
        self.branch_context: Optional[BranchContext] = None

    def __repr__(self) -> str:
        root = f"{self.xnode.type.value}:{self.xnode.name}" if self.xnode else None
        return f"TreePipeline(root={root!r}, branched={self.branch_context is not None})"

    # --- Configuration ---

    def with_config(self, updates: Mapping[str, Any]) -> 'TreePipeline':
        """Merge settings into the session configuration.

        Raises:
            ValidationError: If the merged configuration is invalid
        """
        self.context.validate_input(isinstance(updates, Mapping), "Configuration must be a mapping")
        previous = self.context.config
        self.context.merge_config(updates)
        try:
            validate_config(self.context.config)
        except ValidationError:
            self.context.config = previous
            raise
        return self

    # --- Sources ---

    def from_xnode(self, node: XNode) -> 'TreePipeline':
        self.context.validate_input(isinstance(node, XNode), "from_xnode() requires an XNode")
        self._set_source(node)
        return self

    def from_json(self, value: Any) -> 'TreePipeline':
        """Load a parsed JSON value (dict, list or scalar)."""
        self._set_source(self._run_adapter(JsonToXNodeAdapter(), value))
        return self

    def from_json_string(self, text: str) -> 'TreePipeline':
        self._set_source(from_json_string(text, self.context))
        return self

    def from_xml_string(self, text: str) -> 'TreePipeline':
        """Load a tree from XML text, rooted at the document element."""
        self._set_source(from_xml_string(text, self.context))
        return self

    def from_serialized(self, data: Dict[str, Any]) -> 'TreePipeline':
        """Load a tree from the lossless nested-dict form."""
        self._set_source(self._run_adapter(SerializedToXNodeAdapter(), data))
        return self

    def _set_source(self, node: XNode) -> None:
        self.xnode = node
        self.branch_context = None

    def validate_source(self) -> None:
        """Raise ValidationError if no tree has been loaded."""
        if self.xnode is None:
            raise ValidationError(
                "No source set: call from_json(), from_json_string(), from_xml_string(), "
                "from_serialized() or from_xnode() before transformation"
            )

    def _run_adapter(self, adapter, input: Any) -> Any:
        return AdapterExecutor.execute(adapter, input, self.context)

    def _require_callable(self, func: Any, message: str) -> None:
        if not callable(func):
            raise ValidationError(message)

    # --- Transformations ---

    def filter(self, predicate: Predicate) -> 'TreePipeline':
        """Keep nodes matching predicate, plus their ancestors."""
        self._require_callable(predicate, "Filter predicate must be callable")
        self.validate_source()
        self.xnode = execute_stage(FILTER, self.xnode, predicate, context=self.context)
        return self

    def map(self, transform: Transform) -> 'TreePipeline':
        """Replace every node with transform(node)."""
        self._require_callable(transform, "Map transform must be callable")
        self.validate_source()
        self.xnode = execute_stage(MAP, self.xnode, transform, context=self.context)
        return self

    def select(self, predicate: Predicate) -> 'TreePipeline':
        """Flatten copies of every matching node into a results container."""
        self._require_callable(predicate, "Select predicate must be callable")
        self.validate_source()
        self.xnode = execute_stage(SELECT, self.xnode, predicate, context=self.context)
        return self

    def branch(self, predicate: Predicate) -> 'TreePipeline':
        """Work on copies of the matching nodes until merge() is called.

        Raises:
            BranchConflictError: If a branch is already open
        """
        self._require_callable(predicate, "Branch predicate must be callable")
        self.validate_source()
        if self.branch_context is not None:
            raise BranchConflictError()

        container, paths = execute_stage(BRANCH, self.xnode, predicate, context=self.context)
        self.branch_context = BranchContext(
            parent_node=self.xnode,
            selected_nodes=list(container.children or []),
            original_paths=paths,
        )
        self.xnode = container
        return self

    def merge(self) -> 'TreePipeline':
        """Write the branch back into the tree it came from.

        Does nothing when no branch is open.
        """
        if self.branch_context is None:
            return self

        modified = list(self.xnode.children or []) if self.xnode is not None else []
        self.xnode = execute_stage(
            MERGE,
            self.branch_context.parent_node,
            modified,
            self.branch_context.original_paths,
            context=self.context,
        )
        self.branch_context = None
        return self

    # --- Terminal operations ---

    def reduce(self, reducer: Reducer, initial: Any) -> Any:
        """Fold reducer over every node in pre-order and return the result."""
        self._require_callable(reducer, "Reduce reducer must be callable")
        self.validate_source()
        return execute_stage(REDUCE, self.xnode, reducer, initial, context=self.context)

    def count(self) -> int:
        """Number of nodes in the working tree."""
        return self.reduce(lambda total, _node: total + 1, 0)

    def to_xnode(self) -> XNode:
        self.validate_source()
        return self.xnode

    def to_json(self) -> Any:
        """Convert the working tree to plain JSON-compatible values."""
        self.validate_source()
        return self._run_adapter(XNodeToJsonAdapter(), self.xnode)

    def to_json_string(self) -> str:
        self.validate_source()
        return to_json_string(self.xnode, self.context)

    def to_serialized(self) -> Dict[str, Any]:
        """Convert the working tree to the lossless nested-dict form."""
        self.validate_source()
        return self._run_adapter(XNodeToSerializedAdapter(), self.xnode)

    def to_xml_string(self) -> str:
        """Convert the working tree to XML text."""
        self.validate_source()
        return to_xml_string(self.xnode, self.context)

    def xml_metadata(self, key: Optional[str] = None) -> Any:
        """Metadata recorded by from_xml_string(), or one value of it."""
        self.validate_source()
        return self.context.get_metadata("xml", key)

    def has_xml_namespaces(self) -> bool:
        self.validate_source()
        return self.context.get_metadata("xml", "has_namespaces") is True

    def has_xml_declaration(self) -> bool:
        self.validate_source()
        return self.context.get_metadata("xml", "has_declaration") is True
