"""Markup (XML) adapters for SemTreeLib.

Mapping between XML documents and XNode:

- element                -> RECORD named after its local name, carrying
                            the namespace URI and prefix as namespace/label
- attribute              -> XNodeAttribute (namespace declarations included)
- text                   -> FIELD named "#text"
- CDATA section          -> DATA named "#cdata"
- comment                -> COMMENT
- processing instruction -> INSTRUCTION named after its target

The document is handled through ``xml.dom.minidom`` because ElementTree
merges CDATA sections into text and drops namespace prefixes. Comments,
instructions and whitespace-only text follow the core
``preserve_comments``, ``preserve_instructions`` and
``preserve_whitespace`` settings; everything else lives in the "xml"
config section.
"""

import logging
import re
from dataclasses import asdict, dataclass, fields
from typing import Any, Dict, Optional
from xml.dom import Node, XML_NAMESPACE, XMLNS_NAMESPACE, minidom
from xml.parsers.expat import ExpatError

from .._common.config import Configuration, merge_global_defaults
from ..context import PipelineContext
from ..core.node import (
    XNode,
    XNodeType,
    add_attribute,
    add_child,
    create_comment,
    create_data,
    create_field,
    create_instruction,
    create_record,
)
from ..errors import ProcessingError, ValidationError
from .base import Adapter, AdapterExecutor, input_preview

logger = logging.getLogger(__name__)

SECTION = "xml"

NAME_CASES = ("preserve", "lower", "upper")

TEXT_NAME = "#text"
CDATA_NAME = "#cdata"

_DECLARATION = re.compile(r"^<\?xml\s[^>]*\?>")
_ENCODING = re.compile(r"""encoding\s*=\s*["']([^"']+)["']""")
_STANDALONE = re.compile(r"""standalone\s*=\s*["']([^"']+)["']""")


@dataclass
class XmlConfig:
    """Settings for the XML adapters, stored in the "xml" config section."""

    # Content
    preserve_namespaces: bool = True
    preserve_cdata: bool = True              # CDATA as DATA nodes rather than text
    ignore_namespace_declarations: bool = False
    normalize_whitespace: bool = False

    # Output declaration
    declaration: bool = True
    encoding: str = "UTF-8"
    standalone: Optional[bool] = None

    # Name case handling on input
    attribute_case: str = "preserve"
    element_case: str = "preserve"

    @classmethod
    def from_config(cls, config: Configuration) -> 'XmlConfig':
        """Build from the "xml" section, ignoring unknown keys."""
        known = {f.name for f in fields(cls)}
        xml_config = cls(**{k: v for k, v in config.section(SECTION).items() if k in known})
        for setting in ("attribute_case", "element_case"):
            value = getattr(xml_config, setting)
            if value not in NAME_CASES:
                raise ValidationError(
                    f"Invalid xml.{setting}: {value}. Choose from: {', '.join(NAME_CASES)}"
                )
        return xml_config


merge_global_defaults({SECTION: asdict(XmlConfig())})


def _apply_case(name: str, mode: str) -> str:
    if mode == "lower":
        return name.lower()
    if mode == "upper":
        return name.upper()
    return name


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class XmlToXNodeAdapter(Adapter):
    """Parses XML text into an XNode tree rooted at the document element."""

    name = "xml-to-xnode"

    def validate(self, input: Any, context: PipelineContext) -> None:
        context.validate_input(isinstance(input, str) and bool(input),
                               "XML input must be a non-empty string")
        trimmed = input.strip()
        context.validate_input(bool(trimmed), "XML input cannot be empty or whitespace-only")
        context.validate_input(
            trimmed.startswith("<") and ">" in trimmed,
            "Input does not appear to be valid XML - must start with < and contain >",
        )

    def execute(self, input: str, context: PipelineContext) -> XNode:
        config = XmlConfig.from_config(context.config)
        trimmed = input.strip()

        try:
            document = minidom.parseString(trimmed)
        except ExpatError as e:
            raise ProcessingError(f"XML parsing failed: {e}", input_preview(trimmed)) from e

        root = document.documentElement
        declaration = _DECLARATION.match(trimmed)
        encoding = _ENCODING.search(declaration.group(0)) if declaration else None
        standalone = _STANDALONE.search(declaration.group(0)) if declaration else None

        context.set_metadata(SECTION, "has_declaration", declaration is not None)
        context.set_metadata(SECTION, "original_length", len(input))
        context.set_metadata(SECTION, "has_namespaces", any(
            element.namespaceURI for element in document.getElementsByTagName("*")
        ))
        context.set_metadata(SECTION, "root_element_name", root.localName or root.nodeName)
        context.set_metadata(SECTION, "encoding", encoding.group(1) if encoding else None)
        context.set_metadata(SECTION, "standalone",
                             standalone.group(1).lower() == "yes" if standalone else None)

        try:
            return self._convert_element(root, config, context)
        finally:
            document.unlink()

    def _convert_element(self, element, config: XmlConfig, context: PipelineContext) -> XNode:
        node = create_record(_apply_case(element.localName or element.nodeName, config.element_case))

        if config.preserve_namespaces:
            node.namespace = element.namespaceURI or None
            node.label = element.prefix or None

        for attr in element.attributes.values():
            if config.ignore_namespace_declarations and attr.namespaceURI == XMLNS_NAMESPACE:
                continue
            namespace = label = None
            if config.preserve_namespaces:
                namespace = attr.namespaceURI or None
                label = attr.prefix or None
            add_attribute(node, _apply_case(attr.localName or attr.name, config.attribute_case),
                          attr.value, namespace=namespace, label=label)

        for child in element.childNodes:
            converted = self._convert_child(child, config, context)
            if converted is not None:
                add_child(node, converted)

        return node

    def _convert_child(self, dom_node, config: XmlConfig, context: PipelineContext) -> Optional[XNode]:
        node_type = dom_node.nodeType

        if node_type == Node.ELEMENT_NODE:
            return self._convert_element(dom_node, config, context)

        if node_type == Node.TEXT_NODE or (node_type == Node.CDATA_SECTION_NODE and not config.preserve_cdata):
            text = dom_node.data
            if not context.config.preserve_whitespace and not text.strip():
                return None
            if config.normalize_whitespace:
                text = " ".join(text.split())
            return create_field(TEXT_NAME, text)

        if node_type == Node.CDATA_SECTION_NODE:
            return create_data(CDATA_NAME, dom_node.data)

        if node_type == Node.COMMENT_NODE:
            return create_comment(dom_node.data) if context.config.preserve_comments else None

        if node_type == Node.PROCESSING_INSTRUCTION_NODE:
            if not context.config.preserve_instructions:
                return None
            return create_instruction(dom_node.target, dom_node.data)

        logger.debug(f"Skipping unsupported XML node type: {node_type}")
        return None


class XNodeToXmlAdapter(Adapter):
    """Serializes an XNode tree as XML text.

    Records and collections become elements. Fields and values named
    "#text" become text; other fields and values become elements holding
    their value. Missing namespace declarations are added where a
    namespace or prefix is first used.
    """

    name = "xnode-to-xml"

    def validate(self, input: Any, context: PipelineContext) -> None:
        context.validate_input(isinstance(input, XNode), f"{self.name}: Input must be an XNode")
        context.validate_input(
            self._is_element(input),
            f"{self.name}: Root node must be a record, collection, field or value",
        )

    def execute(self, input: XNode, context: PipelineContext) -> str:
        config = XmlConfig.from_config(context.config)
        formatting = context.config.formatting

        context.set_metadata("xml_output", "has_declaration", config.declaration)
        context.set_metadata("xml_output", "encoding", config.encoding)
        context.set_metadata("xml_output", "preserves_namespaces", config.preserve_namespaces)

        document = minidom.Document()
        try:
            root = self._create_element(input, document, config, context, {"xml": XML_NAMESPACE})
            document.appendChild(root)

            if formatting.pretty:
                text = root.toprettyxml(indent=" " * formatting.indent)
                text = "\n".join(line for line in text.split("\n") if line.strip())
            else:
                text = root.toxml()
        finally:
            document.unlink()

        if config.declaration:
            text = self._declaration(config) + ("\n" if formatting.pretty else "") + text

        context.set_metadata("xml_output", "output_length", len(text))
        return text

    @staticmethod
    def _is_element(node: XNode) -> bool:
        if node.type in (XNodeType.RECORD, XNodeType.COLLECTION):
            return True
        return node.type in (XNodeType.FIELD, XNodeType.VALUE) and node.name != TEXT_NAME

    @staticmethod
    def _declaration(config: XmlConfig) -> str:
        declaration = f'<?xml version="1.0" encoding="{config.encoding}"'
        if config.standalone is not None:
            declaration += f' standalone="{"yes" if config.standalone else "no"}"'
        return declaration + "?>"

    def _create_element(self, node: XNode, document, config: XmlConfig,
                        context: PipelineContext, scope: Dict[str, str]):
        scope = dict(scope)
        use_namespaces = config.preserve_namespaces

        if use_namespaces and node.namespace:
            element = document.createElementNS(
                node.namespace, f"{node.label}:{node.name}" if node.label else node.name)
        else:
            element = document.createElement(node.name)

        if use_namespaces:
            # Declarations already present on the node
            for attr in node.attributes or []:
                if attr.namespace == XMLNS_NAMESPACE:
                    prefix = attr.name if attr.label == "xmlns" else ""
                    scope[prefix] = _to_text(attr.value)

        for attr in node.attributes or []:
            if attr.namespace == XMLNS_NAMESPACE and not use_namespaces:
                continue
            if use_namespaces and attr.namespace:
                qualified = f"{attr.label}:{attr.name}" if attr.label else attr.name
                element.setAttributeNS(attr.namespace, qualified, _to_text(attr.value))
                if attr.label and attr.namespace != XMLNS_NAMESPACE:
                    self._declare(element, scope, attr.label, attr.namespace)
            else:
                element.setAttribute(attr.name, _to_text(attr.value))

        if use_namespaces:
            if node.namespace:
                self._declare(element, scope, node.label or "", node.namespace)
            elif scope.get(""):
                self._declare(element, scope, "", "")

        for child in node.children or []:
            dom_child = self._convert_child(child, document, config, context, scope)
            if dom_child is not None:
                element.appendChild(dom_child)

        if node.value is not None:
            element.appendChild(document.createTextNode(_to_text(node.value)))

        return element

    @staticmethod
    def _declare(element, scope: Dict[str, str], prefix: str, namespace: str) -> None:
        if scope.get(prefix, "") == namespace:
            return
        qualified = f"xmlns:{prefix}" if prefix else "xmlns"
        element.setAttributeNS(XMLNS_NAMESPACE, qualified, namespace)
        scope[prefix] = namespace

    def _convert_child(self, node: XNode, document, config: XmlConfig,
                       context: PipelineContext, scope: Dict[str, str]):
        if self._is_element(node):
            return self._create_element(node, document, config, context, scope)
        if node.type in (XNodeType.FIELD, XNodeType.VALUE):
            return document.createTextNode(_to_text(node.value))
        if node.type is XNodeType.DATA:
            if config.preserve_cdata:
                return document.createCDATASection(_to_text(node.value))
            return document.createTextNode(_to_text(node.value))
        if node.type is XNodeType.COMMENT:
            if not context.config.preserve_comments:
                return None
            return document.createComment(_to_text(node.value))
        if node.type is XNodeType.INSTRUCTION:
            if not context.config.preserve_instructions:
                return None
            return document.createProcessingInstruction(node.name, _to_text(node.value))

        logger.debug(f"Skipping XNode type in XML output: {node.type.value}")
        return None


def from_xml_string(text: str, context: PipelineContext) -> XNode:
    """Parse XML text into an XNode tree.

    Raises:
        ValidationError: If text is not a non-empty string that looks like XML
        ProcessingError: If text is not well-formed XML
    """
    return AdapterExecutor.execute(XmlToXNodeAdapter(), text, context)


def to_xml_string(node: XNode, context: PipelineContext) -> str:
    """Convert an XNode tree to XML text using the xml and formatting settings."""
    return AdapterExecutor.execute(XNodeToXmlAdapter(), node, context)
