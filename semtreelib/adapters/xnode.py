"""Lossless XNode serialization adapters.

The serialized form is a nested dict mirroring XNode exactly:
``type`` (the XNodeType value) and ``name`` always, plus ``value``,
``namespace``, ``label``, ``id``, ``attributes`` and ``children`` when
set. Parent references are never serialized; deserialization rebuilds
them through add_child().
"""

import logging
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict

from .._common.config import Configuration, merge_global_defaults
from ..context import PipelineContext
from ..core.node import XNode, XNodeAttribute, XNodeType, add_child
from ..errors import ProcessingError, ValidationError
from .base import Adapter

logger = logging.getLogger(__name__)

SECTION = "xnode"

FORMAT_VERSION = "1.0"

_NODE_TYPES = {member.value: member for member in XNodeType}
_OPTIONAL_FIELDS = ("value", "namespace", "label", "id")


@dataclass
class XNodeConfig:
    """Settings for the lossless adapters, stored in the "xnode" config section."""

    preserve_empty_arrays: bool = True       # Keep empty children lists
    preserve_empty_attributes: bool = True   # Keep empty attribute lists
    include_metadata: bool = False           # Add an "_xnode" block per node
    validate_on_deserialize: bool = True
    max_depth: int = 1000

    @classmethod
    def from_config(cls, config: Configuration) -> 'XNodeConfig':
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in config.section(SECTION).items() if k in known})


merge_global_defaults({SECTION: asdict(XNodeConfig())})


class XNodeToSerializedAdapter(Adapter):
    """Serializes an XNode tree into nested plain dicts."""

    name = "xnode-to-serialized"

    def validate(self, input: Any, context: PipelineContext) -> None:
        if not isinstance(input, XNode):
            raise ValidationError("XNode input must be a valid XNode object")
        if not isinstance(input.type, XNodeType) or not input.name:
            raise ValidationError("XNode must have valid type and name properties")

    def execute(self, input: XNode, context: PipelineContext) -> Dict[str, Any]:
        config = XNodeConfig.from_config(context.config)
        context.set_metadata(SECTION, "root_type", input.type.value)

        result = self._serialize(input, config, 0, set())
        context.set_metadata(SECTION, "serialized_nodes", _count(result))
        return result

    def _serialize(self, node: XNode, config: XNodeConfig, depth: int, ancestors: set) -> Dict[str, Any]:
        if depth > config.max_depth:
            raise ProcessingError(f"Maximum serialization depth exceeded: {config.max_depth}", node.name)
        if id(node) in ancestors:
            raise ValidationError("Circular reference detected in XNode tree")

        serialized: Dict[str, Any] = {"type": node.type.value, "name": node.name}
        for name in _OPTIONAL_FIELDS:
            value = getattr(node, name)
            if value is not None:
                serialized[name] = value

        if node.attributes is not None and (node.attributes or config.preserve_empty_attributes):
            serialized["attributes"] = [
                {k: v for k, v in asdict(attr).items() if v is not None or k == "value"}
                for attr in node.attributes
            ]

        if node.children is not None and (node.children or config.preserve_empty_arrays):
            ancestors.add(id(node))
            serialized["children"] = [
                self._serialize(child, config, depth + 1, ancestors)
                for child in node.children
            ]
            ancestors.discard(id(node))

        if config.include_metadata:
            serialized["_xnode"] = {"version": FORMAT_VERSION, "depth": depth}

        return serialized


class SerializedToXNodeAdapter(Adapter):
    """Rebuilds an XNode tree from the nested-dict form."""

    name = "serialized-to-xnode"

    def validate(self, input: Any, context: PipelineContext) -> None:
        if not isinstance(input, dict):
            raise ValidationError("Serialized XNode must be a dict")
        _check_entry(input, "root")

    def execute(self, input: Dict[str, Any], context: PipelineContext) -> XNode:
        config = XNodeConfig.from_config(context.config)
        context.set_metadata(SECTION, "deserialized_root_type", input["type"])
        return self._deserialize(input, config, "root")

    def _deserialize(self, data: Dict[str, Any], config: XNodeConfig, where: str) -> XNode:
        if config.validate_on_deserialize:
            _check_entry(data, where)

        node = XNode(_NODE_TYPES[data["type"]], data["name"])
        for name in _OPTIONAL_FIELDS:
            if name in data:
                setattr(node, name, data[name])

        if "attributes" in data:
            node.attributes = []
            for i, attr in enumerate(data["attributes"]):
                if not isinstance(attr, dict) or not attr.get("name"):
                    raise ValidationError(f"Invalid attribute {i} at {where}: must have a name")
                node.attributes.append(XNodeAttribute(
                    attr["name"], attr.get("value"), attr.get("namespace"), attr.get("label")
                ))

        if "children" in data:
            children = data["children"]
            if not isinstance(children, list):
                raise ValidationError(f"Invalid children at {where}: must be a list")
            node.children = []
            for i, child in enumerate(children):
                add_child(node, self._deserialize(child, config, f"{where}/{i}"))

        return node


def _check_entry(data: Any, where: str) -> None:
    if not isinstance(data, dict):
        raise ValidationError(f"Invalid node at {where}: must be a dict")
    if not data.get("type") or not data.get("name"):
        raise ValidationError(f"Invalid node at {where}: must have type and name properties")
    if data["type"] not in _NODE_TYPES:
        raise ValidationError(f"Invalid XNode type at {where}: {data['type']}")


def _count(serialized: Dict[str, Any]) -> int:
    return 1 + sum(_count(child) for child in serialized.get("children", []))
