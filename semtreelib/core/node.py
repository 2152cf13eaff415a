"""XNode model for SemTreeLib.

XNode is the format-neutral tree entity every adapter produces and every
pipeline stage consumes. Node kinds are semantic rather than syntactic: a
RECORD stands for both a JSON object and an XML element, a FIELD for a
named scalar slot.

The ``parent`` attribute is a back-reference only. It is excluded from
equality and repr, never serialized, and recomputed by add_child() and
clone_node() rather than copied. Because equality is structural, code
that needs to find a specific node object inside a children list must
compare by identity (``is``) or use indices, never ``list.index``.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, List, Optional, Union

Primitive = Union[str, int, float, bool, None]


class XNodeType(Enum):
    """Semantic node kinds.

    Kinds describe what the data means, not how a format spells it.
    """
    COLLECTION = "collection"     # Arrays, lists, containers
    RECORD = "record"             # Objects, elements, structured data
    FIELD = "field"               # Properties, simple elements with values
    VALUE = "value"               # Standalone primitive values
    ATTRIBUTES = "attributes"     # Metadata container
    COMMENT = "comment"           # Documentation and comments
    INSTRUCTION = "instruction"   # Processing instructions, directives
    DATA = "data"                 # Raw data, CDATA, binary content


@dataclass
class XNodeAttribute:
    """A single attribute with optional namespace and label.

    Attributes:
        name: Attribute name
        value: Primitive value
        namespace: Full namespace URI
        label: Display label or namespace prefix (e.g. "xml" for xml:lang)
    """
    name: str
    value: Primitive = None
    namespace: Optional[str] = None
    label: Optional[str] = None


@dataclass
class XNode:
    """Universal tree node.

    ``children`` and ``attributes`` are None until first used; container
    kinds created through the factory functions start with an empty
    children list.
    """
    type: XNodeType
    name: str
    value: Primitive = None
    children: Optional[List['XNode']] = None
    attributes: Optional[List[XNodeAttribute]] = None
    parent: Optional['XNode'] = field(default=None, compare=False, repr=False)

    # Semantic tags carried opaquely through all operations
    namespace: Optional[str] = None
    label: Optional[str] = None
    id: Optional[str] = None


# --- Creation Functions ---

def create_collection(name: str) -> XNode:
    """Create a collection node (arrays, lists, containers)."""
    return XNode(XNodeType.COLLECTION, name, children=[])


def create_record(name: str) -> XNode:
    """Create a record node (objects, elements, structured data)."""
    return XNode(XNodeType.RECORD, name, children=[])


def create_field(name: str, value: Primitive = None) -> XNode:
    """Create a field node (properties, simple elements with values)."""
    return XNode(XNodeType.FIELD, name, value)


def create_value(name: str, value: Primitive = None) -> XNode:
    """Create a standalone value node."""
    return XNode(XNodeType.VALUE, name, value)


def create_attributes_container(name: str, value: Primitive = None) -> XNode:
    """Create an attributes (metadata) container node."""
    return XNode(XNodeType.ATTRIBUTES, name, value)


def create_comment(content: str) -> XNode:
    """Create a comment node named ``#comment``."""
    return XNode(XNodeType.COMMENT, "#comment", content)


def create_instruction(target: str, data: Optional[str] = None) -> XNode:
    """Create a processing instruction node named after its target."""
    return XNode(XNodeType.INSTRUCTION, target, data)


def create_data(name: str, content: Optional[str] = None) -> XNode:
    """Create a raw data node (CDATA, embedded content)."""
    return XNode(XNodeType.DATA, name, content)


# --- Node Manipulation ---

def add_child(parent: XNode, child: XNode) -> XNode:
    """Append a child and set its parent reference.

    This is the only sanctioned way to establish a parent link. The
    children list is created on first use.

    Args:
        parent: Node receiving the child
        child: Node to attach

    Returns:
        The parent node, for chaining
    """
    if parent.children is None:
        parent.children = []
    child.parent = parent
    parent.children.append(child)
    return parent


def add_attribute(node: XNode,
                  name: str,
                  value: Primitive,
                  namespace: Optional[str] = None,
                  label: Optional[str] = None) -> XNode:
    """Append an attribute to a node.

    Duplicate names are allowed; no uniqueness check is made.

    Returns:
        The node, for chaining
    """
    if node.attributes is None:
        node.attributes = []
    attr = XNodeAttribute(name, value)
    if namespace:
        attr.namespace = namespace
    if label:
        attr.label = label
    node.attributes.append(attr)
    return node


def clone_node(node: XNode, deep: bool = False) -> XNode:
    """Clone a node.

    A shallow clone copies the scalar fields only (type, name, value,
    namespace, label, id) and has no parent, children or attributes. A
    deep clone also copies the attributes and recursively clones the
    children, re-parenting each child clone to the new node. The clone
    never shares a list with the source.

    Args:
        node: Node to clone
        deep: Whether to include attributes and the whole subtree

    Returns:
        The new, parentless node
    """
    clone = XNode(
        type=node.type,
        name=node.name,
        value=node.value,
        namespace=node.namespace,
        label=node.label,
        id=node.id,
    )
    if not deep:
        return clone

    if node.attributes is not None:
        clone.attributes = [
            XNodeAttribute(attr.name, attr.value, attr.namespace, attr.label)
            for attr in node.attributes
        ]

    if node.children is not None:
        clone.children = []
        for child in node.children:
            child_clone = clone_node(child, True)
            child_clone.parent = clone
            clone.children.append(child_clone)

    return clone


# --- Attribute Operations ---

def get_attribute(node: XNode,
                  name: str,
                  namespace: Optional[str] = None) -> Optional[XNodeAttribute]:
    """Return the first attribute matching name (and namespace, if given)."""
    for attr in node.attributes or []:
        if attr.name == name and (namespace is None or attr.namespace == namespace):
            return attr
    return None


def get_attribute_value(node: XNode,
                        name: str,
                        namespace: Optional[str] = None) -> Primitive:
    """Return the value of the first matching attribute, or None."""
    attr = get_attribute(node, name, namespace)
    return attr.value if attr is not None else None


def filter_attributes(node: XNode,
                      predicate: Callable[[XNodeAttribute], bool]) -> List[XNodeAttribute]:
    """Return every attribute for which predicate is true."""
    return [attr for attr in node.attributes or [] if predicate(attr)]


def update_attribute(node: XNode,
                     name: str,
                     new_value: Primitive,
                     namespace: Optional[str] = None) -> XNode:
    """Set the value of the first matching attribute, if there is one."""
    attr = get_attribute(node, name, namespace)
    if attr is not None:
        attr.value = new_value
    return node


def has_attributes(node: XNode) -> bool:
    return bool(node.attributes)


def has_children(node: XNode) -> bool:
    return bool(node.children)


# --- Text Content ---

_TEXT_CHILD_TYPES = (
    XNodeType.VALUE,
    XNodeType.DATA,
    XNodeType.FIELD,
    XNodeType.RECORD,
    XNodeType.COLLECTION,
)


def _to_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def get_text_content(node: XNode) -> str:
    """Return the text of a node.

    Leaf-like nodes return their value as text. Containers concatenate
    the text of their value, data, field, record and collection
    children, skipping comments and instructions.
    """
    if node.type in (XNodeType.VALUE, XNodeType.FIELD, XNodeType.DATA):
        return _to_text(node.value)

    if node.value is not None and node.children is None:
        return _to_text(node.value)

    if node.children is not None:
        return "".join(
            get_text_content(child)
            for child in node.children
            if child.type in _TEXT_CHILD_TYPES
        )

    return ""


def set_text_content(node: XNode, text: str) -> XNode:
    """Set the text of a node.

    Leaf-like nodes get the text as their value. Records and collections
    have all their children replaced with a single ``#text`` value child
    and their own value cleared. Other kinds are left untouched.
    """
    if node.type in (XNodeType.VALUE, XNodeType.FIELD, XNodeType.DATA):
        node.value = text
    elif node.type in (XNodeType.RECORD, XNodeType.COLLECTION):
        for child in node.children or []:
            child.parent = None
        node.children = []
        add_child(node, create_value("#text", text))
        node.value = None
    return node


# --- Type Guards ---

def is_collection(node: XNode) -> bool:
    return node.type is XNodeType.COLLECTION


def is_record(node: XNode) -> bool:
    return node.type is XNodeType.RECORD


def is_field(node: XNode) -> bool:
    return node.type is XNodeType.FIELD


def is_value(node: XNode) -> bool:
    return node.type is XNodeType.VALUE


def is_attributes_container(node: XNode) -> bool:
    return node.type is XNodeType.ATTRIBUTES


def is_comment(node: XNode) -> bool:
    return node.type is XNodeType.COMMENT


def is_instruction(node: XNode) -> bool:
    return node.type is XNodeType.INSTRUCTION


def is_data(node: XNode) -> bool:
    return node.type is XNodeType.DATA


def is_primitive(node: XNode) -> bool:
    """True for kinds that hold a primitive value (value, field, attributes)."""
    return node.type in (XNodeType.VALUE, XNodeType.FIELD, XNodeType.ATTRIBUTES)


def is_container(node: XNode) -> bool:
    """True for kinds that hold children (collection, record)."""
    return node.type in (XNodeType.COLLECTION, XNodeType.RECORD)


# --- Child Lookups ---

def get_children_by_type(node: XNode, node_type: XNodeType) -> List[XNode]:
    return [child for child in node.children or [] if child.type is node_type]


def get_children_by_name(node: XNode, name: str) -> List[XNode]:
    return [child for child in node.children or [] if child.name == name]


def get_child(node: XNode,
              name: str,
              node_type: Optional[XNodeType] = None) -> Optional[XNode]:
    """Return the first child with the given name (and type, if given)."""
    for child in node.children or []:
        if child.name == name and (node_type is None or child.type is node_type):
            return child
    return None
