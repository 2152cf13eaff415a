"""Object-notation (JSON) adapters for SemTreeLib.

Mapping between parsed JSON values and XNode:

- dict   -> RECORD; keys starting with the attribute prefix ("@") become
            attributes, the value property ("#text") becomes the record's
            value, every other key becomes a child named after the key
- list   -> COLLECTION whose elements are children named "item"
- scalar -> FIELD holding the value

Going back, records become dicts (same-name children are grouped into a
list), collections become lists and fields/values become scalars.
Comments and instructions are dropped unless configured otherwise.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, List

from .._common.config import Configuration, merge_global_defaults
from ..context import PipelineContext
from ..core.node import (
    XNode,
    XNodeType,
    add_attribute,
    add_child,
    create_collection,
    create_field,
    create_record,
)
from ..errors import ProcessingError, ValidationError
from .base import Adapter, AdapterExecutor

logger = logging.getLogger(__name__)

SECTION = "json"

ARRAY_STRATEGIES = ("multiple", "always", "never", "smart")

# Marks converted nodes that produce no output (ignored comments, instructions)
_SKIP = object()


@dataclass
class JsonConfig:
    """Settings for the JSON adapters, stored in the "json" config section."""

    # Attribute and text handling
    attribute_prefix: str = "@"
    value_property: str = "#text"
    default_item_name: str = "item"

    # When record children are emitted as lists
    array_strategy: str = "smart"
    force_arrays: List[str] = field(default_factory=list)

    # Type handling for attribute and text values
    preserve_numbers: bool = True
    preserve_booleans: bool = True
    preserve_null: bool = True

    # Simplification
    ignore_comments: bool = True
    ignore_instructions: bool = True
    ignore_cdata: bool = True
    ignore_namespaces: bool = False
    compact_empty_elements: bool = False

    @classmethod
    def from_config(cls, config: Configuration) -> 'JsonConfig':
        """Build from the "json" section, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        section = {k: v for k, v in config.section(SECTION).items() if k in known}
        json_config = cls(**section)
        if json_config.array_strategy not in ARRAY_STRATEGIES:
            raise ValidationError(
                f"Invalid json.array_strategy: {json_config.array_strategy}. "
                f"Choose from: {', '.join(ARRAY_STRATEGIES)}"
            )
        return json_config


merge_global_defaults({SECTION: asdict(JsonConfig())})


def _parse_numeric(text: str) -> Any:
    stripped = text.strip()
    if not stripped or "_" in stripped:
        return None
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        number = float(stripped)
    except ValueError:
        return None
    # Reject nan/inf spellings, which JSON cannot represent
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


class JsonToXNodeAdapter(Adapter):
    """Converts a parsed JSON value into an XNode tree rooted at "root"."""

    name = "json-to-xnode"

    def validate(self, input: Any, context: PipelineContext) -> None:
        if input is None:
            context.logger.warning("JSON input is null - will create a null field")

    def execute(self, input: Any, context: PipelineContext) -> XNode:
        config = JsonConfig.from_config(context.config)

        context.set_metadata(SECTION, "original_type", type(input).__name__)
        context.set_metadata(SECTION, "is_array", isinstance(input, list))
        context.set_metadata(SECTION, "is_null", input is None)
        context.set_metadata(SECTION, "has_attributes", isinstance(input, dict) and any(
            isinstance(key, str) and key.startswith(config.attribute_prefix) for key in input
        ))

        try:
            return self._convert_value(input, "root", config)
        except (ValueError, TypeError, RecursionError) as e:
            raise ProcessingError(f"JSON conversion failed: {e}", input) from e

    def _convert_value(self, value: Any, name: str, config: JsonConfig) -> XNode:
        if value is None:
            return create_field(name, None if config.preserve_null else "")
        if isinstance(value, (str, bool, int, float)):
            return create_field(name, value)
        if isinstance(value, (list, tuple)):
            return self._convert_array(value, name, config)
        if isinstance(value, dict):
            return self._convert_object(value, name, config)

        logger.warning(f"Unknown JSON value type for key '{name}': {type(value).__name__}")
        return create_field(name, str(value))

    def _convert_array(self, items, name: str, config: JsonConfig) -> XNode:
        collection = create_collection(name)
        for item in items:
            add_child(collection, self._convert_value(item, config.default_item_name, config))
        return collection

    def _convert_object(self, obj: Dict[str, Any], name: str, config: JsonConfig) -> XNode:
        node = create_record(name)
        prefix = config.attribute_prefix

        for key, value in obj.items():
            key = str(key)
            if prefix and key.startswith(prefix):
                add_attribute(node, key[len(prefix):], self._process_primitive(value, config))
            elif key == config.value_property:
                node.value = self._process_primitive(value, config)
            else:
                add_child(node, self._convert_value(value, key, config))

        return node

    def _process_primitive(self, value: Any, config: JsonConfig) -> Any:
        if value is None:
            return None if config.preserve_null else ""
        if isinstance(value, str):
            if config.preserve_numbers:
                number = _parse_numeric(value)
                if number is not None:
                    return number
            if config.preserve_booleans and value.strip().lower() in ("true", "false"):
                return value.strip().lower() == "true"
        return value


class XNodeToJsonAdapter(Adapter):
    """Converts an XNode tree into plain JSON-compatible Python values."""

    name = "xnode-to-json"

    def validate(self, input: Any, context: PipelineContext) -> None:
        context.validate_input(isinstance(input, XNode), f"{self.name}: Input must be an XNode")

    def execute(self, input: XNode, context: PipelineContext) -> Any:
        config = JsonConfig.from_config(context.config)
        context.set_metadata("json_output", "root_type", input.type.value)

        result = self._convert_node(input, config)
        if result is _SKIP:
            result = None

        context.set_metadata("json_output", "result_type", type(result).__name__)
        return result

    def _convert_node(self, node: XNode, config: JsonConfig) -> Any:
        if node.type in (XNodeType.FIELD, XNodeType.VALUE, XNodeType.ATTRIBUTES):
            return self._process_primitive(node.value, config)
        if node.type is XNodeType.COLLECTION:
            return self._convert_collection(node, config)
        if node.type is XNodeType.RECORD:
            return self._convert_record(node, config)
        if node.type is XNodeType.COMMENT:
            return _SKIP if config.ignore_comments else {"_comment": node.value}
        if node.type is XNodeType.INSTRUCTION:
            if config.ignore_instructions:
                return _SKIP
            return {"_instruction": {"target": node.name, "data": node.value}}
        # DATA
        return node.value if config.ignore_cdata else {"_cdata": node.value}

    def _convert_collection(self, node: XNode, config: JsonConfig) -> List[Any]:
        items = (self._convert_node(child, config) for child in node.children or [])
        return [item for item in items if item is not _SKIP]

    def _convert_record(self, node: XNode, config: JsonConfig) -> Any:
        result: Dict[str, Any] = {}

        if not config.ignore_namespaces and node.namespace:
            result["_namespace"] = node.namespace
            if node.label:
                result["_namespacePrefix"] = node.label

        for attr in node.attributes or []:
            result[f"{config.attribute_prefix}{attr.name}"] = self._process_primitive(attr.value, config)

        groups: Dict[str, List[XNode]] = {}
        for child in node.children or []:
            if config.ignore_comments and child.type is XNodeType.COMMENT:
                continue
            if config.ignore_instructions and child.type is XNodeType.INSTRUCTION:
                continue
            groups.setdefault(child.name, []).append(child)

        for name, children in groups.items():
            converted = [self._convert_node(child, config) for child in children]
            converted = [value for value in converted if value is not _SKIP]
            if not converted:
                continue
            if len(converted) == 1 and not self._force_array(name, config):
                result[name] = converted[0]
            else:
                result[name] = converted

        if node.value is not None:
            if not result:
                return self._process_primitive(node.value, config)
            result[config.value_property] = self._process_primitive(node.value, config)

        if config.compact_empty_elements and not result:
            return None

        return result

    def _force_array(self, name: str, config: JsonConfig) -> bool:
        return config.array_strategy == "always" or name in config.force_arrays

    def _process_primitive(self, value: Any, config: JsonConfig) -> Any:
        if value is None:
            return None if config.preserve_null else ""
        return value


def from_json_string(text: str, context: PipelineContext) -> XNode:
    """Parse JSON text and convert it to an XNode tree.

    Raises:
        ValidationError: If text is not a string
        ProcessingError: If text is not valid JSON
    """
    context.validate_input(isinstance(text, str), "JSON input must be a string")
    try:
        value = json.loads(text)
    except json.JSONDecodeError as e:
        context.log_error("json-parse", e)
        raise ProcessingError(f"Invalid JSON: {e}", text) from e

    return AdapterExecutor.execute(JsonToXNodeAdapter(), value, context)


def to_json_string(node: XNode, context: PipelineContext) -> str:
    """Convert an XNode tree to JSON text using the formatting settings."""
    value = AdapterExecutor.execute(XNodeToJsonAdapter(), node, context)

    formatting = context.config.formatting
    indent = formatting.indent if formatting.pretty else None
    separators = None if formatting.pretty else (",", ":")
    return json.dumps(value, indent=indent, separators=separators, ensure_ascii=False)
