"""Path addressing for XNode trees.

A path is a list of child indices leading from a root to a node; the
empty path addresses the root itself. These helpers back the branch and
merge operations, which record where nodes lived and later write
results back to those positions.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from .node import XNode, XNodeType
from .traverser import FunctionVisitor, TraversalOrder, traverse_tree

logger = logging.getLogger(__name__)

Path = List[int]


@dataclass
class PathMatches:
    """Nodes found by collect_nodes_with_paths(), as parallel lists.

    Attributes:
        nodes: Matching nodes (the originals, not copies)
        indices: Position of each match in discovery order
        paths: Root-relative path of each match
    """
    nodes: List[XNode] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    paths: List[Path] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.nodes)


def get_node_at_path(root: XNode, path: Sequence[int]) -> Optional[XNode]:
    """Follow child indices from root.

    Args:
        root: Node the path is relative to
        path: Child indices (empty for root itself)

    Returns:
        The addressed node, or None if any index is out of range
    """
    current = root
    for index in path:
        if not current.children or index < 0 or index >= len(current.children):
            return None
        current = current.children[index]
    return current


def replace_node_at_path(root: XNode, replacement: XNode, path: Sequence[int]) -> None:
    """Overwrite the node at path with replacement, re-parenting it.

    The root cannot be replaced this way: an empty path is a no-op, as is
    a path that does not resolve.
    """
    if not path:
        return

    parent = get_node_at_path(root, path[:-1])
    index = path[-1]
    if parent is not None and parent.children and 0 <= index < len(parent.children):
        replacement.parent = parent
        parent.children[index] = replacement


def remove_node_at_path(root: XNode, path: Sequence[int]) -> None:
    """Remove the node at path from its parent's children.

    An empty path or one that does not resolve is a no-op.
    """
    if not path:
        return

    parent = get_node_at_path(root, path[:-1])
    index = path[-1]
    if parent is not None and parent.children and 0 <= index < len(parent.children):
        removed = parent.children.pop(index)
        removed.parent = None


def collect_nodes_with_paths(root: XNode,
                             predicate: Callable[[XNode], bool],
                             context=None) -> PathMatches:
    """Pre-order scan collecting matching nodes and their paths.

    A predicate that raises on one node is logged and that node is
    skipped; the scan carries on with the rest of the tree.

    Args:
        root: Node to scan from (paths are relative to it)
        predicate: Function returning True for nodes to collect
        context: Optional PipelineContext passed through to the traversal

    Returns:
        PathMatches with parallel nodes, indices and paths
    """
    matches = PathMatches()

    def _visit(node, traversal_context):
        try:
            if predicate(node):
                matches.nodes.append(node)
                matches.indices.append(len(matches.nodes) - 1)
                matches.paths.append(list(traversal_context.path))
        except Exception as e:
            logger.warning(f"Error evaluating predicate on node '{node.name}': {e}")

    traverse_tree(root, FunctionVisitor(_visit), TraversalOrder.PRE, context)
    return matches


def create_results_container(name: str) -> XNode:
    """Create the synthetic collection that wraps flattened results."""
    return XNode(XNodeType.COLLECTION, name, children=[])
