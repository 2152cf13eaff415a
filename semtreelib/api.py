"""High-level API for SemTreeLib.

This module provides simple, functional interfaces for common tree
operations. These functions wrap the traversal engine and the pipeline
stages for ease of use in simple cases, without building a
TreePipeline session.
"""

from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from .context import PipelineContext
from .core.node import XNode, has_children
from .core.traverser import TraversalContext, TraversalOrder, iter_tree
from .pipeline.stages import (
    FILTER,
    MAP,
    REDUCE,
    SELECT,
    Predicate,
    Reducer,
    Transform,
    execute_stage,
)


def traverse(root: XNode,
             order: Union[TraversalOrder, str] = TraversalOrder.PRE
             ) -> Iterator[Tuple[XNode, TraversalContext]]:
    """Simple interface for tree traversal.

    Args:
        root: Starting node for traversal
        order: TraversalOrder or one of "pre", "post", "both"

    Yields:
        (node, TraversalContext) pairs

    Example:
        >>> for node, ctx in traverse(tree):
        ...     print("  " * ctx.depth + node.name)
    """
    yield from iter_tree(root, order)


def count_nodes(root: XNode, predicate: Optional[Predicate] = None) -> int:
    """Count nodes in a tree, optionally only those matching predicate.

    Example:
        >>> count_nodes(tree, lambda n: n.type is XNodeType.FIELD)
    """
    count = 0
    for node, _ in iter_tree(root):
        if predicate is None or predicate(node):
            count += 1
    return count


def find_nodes(root: XNode, predicate: Predicate) -> Iterator[XNode]:
    """Find nodes that match a predicate, in pre-order.

    Yields:
        Nodes that match the predicate
    """
    for node, _ in iter_tree(root):
        if predicate(node):
            yield node


def get_tree_paths(root: XNode) -> Iterator[List[str]]:
    """Get name paths from root to each node.

    Yields:
        Lists of node names forming paths from root

    Example:
        >>> for path in get_tree_paths(tree):
        ...     print("/".join(path))
    """
    names: List[str] = []
    for node, ctx in iter_tree(root):
        del names[ctx.depth:]
        names.append(node.name)
        yield list(names)


def get_leaf_nodes(root: XNode) -> Iterator[XNode]:
    """Get all leaf nodes (nodes with no children) in a tree."""
    for node, _ in iter_tree(root):
        if not has_children(node):
            yield node


def get_tree_stats(root: XNode) -> Dict[str, Any]:
    """Get statistics about a tree.

    Returns:
        Dictionary with total_nodes, leaf_nodes, internal_nodes,
        max_depth, depths (depth -> count) and types (type value -> count)

    Example:
        >>> stats = get_tree_stats(tree)
        >>> print(f"Total nodes: {stats['total_nodes']}")
    """
    stats: Dict[str, Any] = {
        'total_nodes': 0,
        'leaf_nodes': 0,
        'max_depth': 0,
        'depths': {},
        'types': {},
    }

    for node, ctx in iter_tree(root):
        stats['total_nodes'] += 1

        if not has_children(node):
            stats['leaf_nodes'] += 1

        stats['max_depth'] = max(stats['max_depth'], ctx.depth)
        stats['depths'][ctx.depth] = stats['depths'].get(ctx.depth, 0) + 1

        type_name = node.type.value
        stats['types'][type_name] = stats['types'].get(type_name, 0) + 1

    stats['internal_nodes'] = stats['total_nodes'] - stats['leaf_nodes']
    return stats


# Stateless stage wrappers

def filter_tree(tree: XNode, predicate: Predicate,
                context: Optional[PipelineContext] = None) -> XNode:
    """Keep nodes matching predicate plus their ancestors (see filter_stage)."""
    return execute_stage(FILTER, tree, predicate, context=_context(context))


def map_tree(tree: XNode, transform: Transform,
             context: Optional[PipelineContext] = None) -> XNode:
    return execute_stage(MAP, tree, transform, context=_context(context))


def select_nodes(tree: XNode, predicate: Predicate,
                 context: Optional[PipelineContext] = None) -> XNode:
    """Flatten copies of matching nodes into a results container."""
    return execute_stage(SELECT, tree, predicate, context=_context(context))


def reduce_tree(tree: XNode, reducer: Reducer, initial: Any,
                context: Optional[PipelineContext] = None) -> Any:
    return execute_stage(REDUCE, tree, reducer, initial, context=_context(context))


def _context(context: Optional[PipelineContext]) -> PipelineContext:
    return context if context is not None else PipelineContext()


__all__ = [
    'count_nodes',
    'filter_tree',
    'find_nodes',
    'get_leaf_nodes',
    'get_tree_paths',
    'get_tree_stats',
    'map_tree',
    'reduce_tree',
    'select_nodes',
    'traverse',
]
