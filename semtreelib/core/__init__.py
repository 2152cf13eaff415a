"""Core tree model and traversal for SemTreeLib.

This package contains the XNode model, the traversal engine, path
addressing helpers and stock visitors. Nothing here knows about any
external data format.
"""

from .node import (
    Primitive,
    XNode,
    XNodeAttribute,
    XNodeType,
    add_attribute,
    add_child,
    clone_node,
    create_attributes_container,
    create_collection,
    create_comment,
    create_data,
    create_field,
    create_instruction,
    create_record,
    create_value,
    filter_attributes,
    get_attribute,
    get_attribute_value,
    get_child,
    get_children_by_name,
    get_children_by_type,
    get_text_content,
    has_attributes,
    has_children,
    is_attributes_container,
    is_collection,
    is_comment,
    is_container,
    is_data,
    is_field,
    is_instruction,
    is_primitive,
    is_record,
    is_value,
    set_text_content,
    update_attribute,
)
from .traverser import (
    FunctionVisitor,
    TraversalContext,
    TraversalOrder,
    TreeVisitor,
    iter_tree,
    traverse_tree,
)
from .paths import (
    PathMatches,
    collect_nodes_with_paths,
    create_results_container,
    get_node_at_path,
    remove_node_at_path,
    replace_node_at_path,
)
from .visitors import (
    CollectingVisitor,
    CustomVisitor,
    MaxDepthVisitor,
    NodeCountVisitor,
    TypeCountVisitor,
)

__all__ = [
    # Node model
    'Primitive',
    'XNode',
    'XNodeAttribute',
    'XNodeType',
    'add_attribute',
    'add_child',
    'clone_node',
    'create_attributes_container',
    'create_collection',
    'create_comment',
    'create_data',
    'create_field',
    'create_instruction',
    'create_record',
    'create_value',
    'filter_attributes',
    'get_attribute',
    'get_attribute_value',
    'get_child',
    'get_children_by_name',
    'get_children_by_type',
    'get_text_content',
    'has_attributes',
    'has_children',
    'is_attributes_container',
    'is_collection',
    'is_comment',
    'is_container',
    'is_data',
    'is_field',
    'is_instruction',
    'is_primitive',
    'is_record',
    'is_value',
    'set_text_content',
    'update_attribute',
    # Traversal
    'FunctionVisitor',
    'TraversalContext',
    'TraversalOrder',
    'TreeVisitor',
    'iter_tree',
    'traverse_tree',
    # Paths
    'PathMatches',
    'collect_nodes_with_paths',
    'create_results_container',
    'get_node_at_path',
    'remove_node_at_path',
    'replace_node_at_path',
    # Visitors
    'CollectingVisitor',
    'CustomVisitor',
    'MaxDepthVisitor',
    'NodeCountVisitor',
    'TypeCountVisitor',
]
